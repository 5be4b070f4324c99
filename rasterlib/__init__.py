
from . import data_models
from . import processing_components
from . import workflows
