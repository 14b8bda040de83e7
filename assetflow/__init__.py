"""
assetflow - declarative front-end asset build pipeline

Main modules:
- core: Build mode, module identifiers and exceptions
- config: YAML configuration and the module registry
- pipeline: File streams, transformation stages and step assembly
- tasks: Per-module runnable tasks
- watch: Filesystem watchers that re-run tasks
- server: Static dev server with live reload
"""

from .core.models import BuildMode
from .core.exceptions import AssetflowError, BuildError, ConfigurationError, TransformError
from .config.build_config_loader import BuildConfig, load_build_config
from .config.module_registry import ModuleConfig, ModuleRegistry
from .pipeline.pipeline_builder import PipelineBuilder
from .tasks.task_builder import ModuleTask, TaskBuilder
from .manager import BuildManager

__version__ = "1.0.0"
__all__ = [
    'BuildMode',
    'AssetflowError',
    'BuildError',
    'ConfigurationError',
    'TransformError',
    'BuildConfig',
    'load_build_config',
    'ModuleConfig',
    'ModuleRegistry',
    'PipelineBuilder',
    'ModuleTask',
    'TaskBuilder',
    'BuildManager',
]
