""" Conversion of Rasters to and from external formats

The canonical format is plain PPM text: the marker P3, then width, height, maximum channel value and
width * height * 3 channel values in row-major, channel-interleaved order, all whitespace delimited.
Lines whose first non-blank character is # are comments.

Binary formats are delegated: FITS to astropy, everything else to Pillow. Only the resulting
[height, width, 3] channel values cross into the Raster.

"""

__all__ = ['decode_raster',
           'encode_raster',
           'encode_raster_bytes',
           'export_raster_to_file',
           'export_raster_to_fits',
           'export_raster_to_ppm',
           'import_raster_from_file',
           'import_raster_from_fits',
           'import_raster_from_ppm',
           'PPM_MARKER']

import logging
import os
import re

import numpy
from PIL import Image, UnidentifiedImageError
from astropy.io import fits

from rasterlib.data_models.errors import FormatError, InvalidArgument
from rasterlib.data_models.memory_data_models import Raster
from rasterlib.data_models.parameters import get_parameter
from rasterlib.processing_components.raster.operations import create_raster_from_array

log = logging.getLogger('logger')

PPM_MARKER = 'P3'
COMMENT_MARKER = '#'
INTEGER_TOKEN = re.compile(r'-?[0-9]+')


def _tokenize(content):
    if isinstance(content, (bytes, bytearray)):
        try:
            content = content.decode('ascii')
        except UnicodeDecodeError as err:
            raise FormatError("Plain PPM content must be ASCII text: %s" % err)
    tokens = list()
    for line in content.splitlines():
        if line.lstrip().startswith(COMMENT_MARKER):
            continue
        tokens.extend(line.split())
    return tokens


def _parse_int(token, what):
    # int() also accepts forms such as 1_0, +5 and non-ASCII digits
    if INTEGER_TOKEN.fullmatch(token) is None:
        raise FormatError("Invalid PPM %s: expected an integer, got %r" % (what, token))
    return int(token)


def decode_raster(content) -> Raster:
    """ Decode plain PPM text into a Raster

    :param content: bytes or str
    :return: Raster
    """
    tokens = _tokenize(content)
    if len(tokens) == 0 or tokens[0] != PPM_MARKER:
        raise FormatError("Invalid PPM file: plain PPM content should begin with %s" % PPM_MARKER)

    header = list()
    for position, what in enumerate(['width', 'height', 'maximum channel value'], start=1):
        if position >= len(tokens):
            raise FormatError("Invalid PPM file: %s is missing" % what)
        value = _parse_int(tokens[position], what)
        if value <= 0:
            raise FormatError("Invalid PPM file: %s must be positive, got %d" % (what, value))
        header.append(value)
    width, height, max_channel = header

    values = tokens[4:]
    expected = width * height * 3
    if len(values) != expected:
        raise FormatError("Invalid PPM file: expected %d channel values for %d x %d pixels, got %d" %
                          (expected, width, height, len(values)))

    channels = [_parse_int(token, 'channel value') for token in values]
    if min(channels) < 0 or max(channels) > max_channel:
        raise FormatError("Invalid PPM file: channel values must lie in [0, %d]" % max_channel)
    data = numpy.array(channels, dtype='int64')

    return create_raster_from_array(data.reshape([height, width, 3]), max_channel)


def encode_raster(raster: Raster) -> str:
    """ Encode a Raster as plain PPM text

    The marker, width, height, maximum channel value and each channel value are written one per line.

    :param raster: Raster
    :return: str
    """
    assert isinstance(raster, Raster), raster
    lines = [PPM_MARKER, str(raster.width), str(raster.height), str(raster.max_channel)]
    lines.extend(str(value) for value in raster.data.ravel().tolist())
    return "\n".join(lines) + "\n"


def encode_raster_bytes(raster: Raster) -> bytes:
    """ Encode a Raster as plain PPM ASCII bytes

    :param raster: Raster
    :return: bytes
    """
    return encode_raster(raster).encode('ascii')


def import_raster_from_ppm(filename: str) -> Raster:
    """ Read a Raster from a plain PPM file

    :param filename: Name of PPM file
    :return: Raster
    """
    with open(filename, 'rb') as f:
        raster = decode_raster(f.read())
    log.info("import_raster_from_ppm: read %s from %s" % (repr(raster), filename))
    return raster


def export_raster_to_ppm(raster: Raster, filename: str):
    """ Write a Raster to a plain PPM file

    :param raster: Raster
    :param filename: Name of output PPM file
    """
    assert isinstance(raster, Raster), raster
    with open(filename, 'wb') as f:
        f.write(encode_raster_bytes(raster))
    log.info("export_raster_to_ppm: wrote %s to %s" % (repr(raster), filename))


def import_raster_from_fits(fitsfile: str) -> Raster:
    """ Read a Raster from FITS

    The primary HDU holds either [3, height, width] channel data or [height, width] greyscale data.
    The maximum channel value is taken from the DATAMAX keyword, defaulting to 255.

    :param fitsfile: FITS file in storage
    :return: Raster
    """
    with fits.open(fitsfile) as hdulist:
        data = hdulist[0].data
        header = hdulist[0].header
        if data is None:
            raise FormatError("FITS file %s has no data in the primary HDU" % fitsfile)
        data = numpy.array(data)
        max_channel = header.get('DATAMAX', None)

    if max_channel is None:
        log.warning("import_raster_from_fits: %s has no DATAMAX keyword, assuming 255" % fitsfile)
        max_channel = 255

    if data.ndim == 2:
        data = numpy.repeat(data[..., numpy.newaxis], 3, axis=2)
    elif data.ndim == 3 and data.shape[0] == 3:
        data = numpy.moveaxis(data, 0, 2)
    else:
        raise FormatError("Cannot read raster with shape %s from %s" % (str(data.shape), fitsfile))

    try:
        raster = create_raster_from_array(data, int(max_channel))
    except InvalidArgument as err:
        raise FormatError("Invalid raster in %s: %s" % (fitsfile, err))
    log.info("import_raster_from_fits: read %s from %s" % (repr(raster), fitsfile))
    return raster


def export_raster_to_fits(raster: Raster, fitsfile: str = 'raster.fits'):
    """ Write a Raster to FITS

    The data are written as [3, height, width] with the maximum channel value in DATAMAX.

    :param raster: Raster
    :param fitsfile: Name of output fits file in storage
    :returns: None
    """
    assert isinstance(raster, Raster), raster
    header = fits.Header()
    header['DATAMAX'] = raster.max_channel
    header['DATAMIN'] = 0
    data = numpy.ascontiguousarray(numpy.moveaxis(raster.data, 2, 0)).astype('int32')
    fits.writeto(filename=fitsfile, data=data, header=header, overwrite=True)
    log.info("export_raster_to_fits: wrote %s to %s" % (repr(raster), fitsfile))


def _extension(filename):
    return os.path.splitext(filename)[1].lower()


def import_raster_from_file(filename: str, **kwargs) -> Raster:
    """ Read a Raster from a file, choosing the reader by extension

    .ppm files use the plain PPM codec, .fits and .fit files astropy, and everything else Pillow.

    :param filename: Name of file
    :param max_channel: Ceiling assigned to Pillow images (255)
    :return: Raster
    """
    extension = _extension(filename)
    if extension == '.ppm':
        return import_raster_from_ppm(filename)
    elif extension in ['.fits', '.fit']:
        return import_raster_from_fits(filename)

    max_channel = get_parameter(kwargs, 'max_channel', 255)
    try:
        with Image.open(filename) as im:
            data = numpy.asarray(im.convert('RGB'), dtype='int64')
    except UnidentifiedImageError as err:
        raise FormatError("Cannot read image %s: %s" % (filename, err))

    if max_channel != 255:
        data = data * max_channel // 255
    raster = create_raster_from_array(data, max_channel)
    log.info("import_raster_from_file: read %s from %s" % (repr(raster), filename))
    return raster


def export_raster_to_file(raster: Raster, filename: str, **kwargs):
    """ Write a Raster to a file, choosing the writer by extension

    .ppm files use the plain PPM codec, .fits and .fit files astropy, and everything else Pillow.
    Pillow writes 8-bit channels so other ceilings are rescaled to 255.

    :param raster: Raster
    :param filename: Name of file
    :param format: Pillow format name, overriding the extension
    """
    assert isinstance(raster, Raster), raster
    extension = _extension(filename)
    if extension == '.ppm':
        return export_raster_to_ppm(raster, filename)
    elif extension in ['.fits', '.fit']:
        return export_raster_to_fits(raster, filename)

    data = raster.data
    if raster.max_channel != 255:
        data = data * 255 // raster.max_channel
    im = Image.fromarray(data.astype('uint8'))
    try:
        im.save(filename, format=get_parameter(kwargs, 'format', None))
    except (KeyError, ValueError) as err:
        raise InvalidArgument("Cannot write %s: %s" % (filename, err))
    log.info("export_raster_to_file: wrote %s to %s" % (repr(raster), filename))
