# Core package initialization
from .enums import ModuleId, MODULE_ORDER
from .exceptions import AssetflowError, ConfigurationError, TransformError, BuildError
from .models import BuildMode

__all__ = [
    'ModuleId',
    'MODULE_ORDER',
    'AssetflowError',
    'ConfigurationError',
    'TransformError',
    'BuildError',
    'BuildMode',
]
