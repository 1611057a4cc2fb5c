"""Worker pool planning and the operator modules around it"""
from . import config
from . import distribution
from . import errors
from . import hashing
from . import images
from . import infrastructure
from . import labels
from . import machineclass
from . import metrics
from . import models
from . import planner
from . import state
from . import version

__all__ = [
    'config', 'distribution', 'errors', 'hashing', 'images', 'infrastructure',
    'labels', 'machineclass', 'metrics', 'models', 'planner', 'state', 'version',
]
