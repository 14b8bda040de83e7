# Configuration package initialization
from .build_config_loader import BuildConfig, ModulePaths, ServerConfig, load_build_config
from .module_registry import ModuleConfig, ModuleRegistry, MODULE_TRAITS

__all__ = [
    'BuildConfig',
    'ModulePaths',
    'ServerConfig',
    'load_build_config',
    'ModuleConfig',
    'ModuleRegistry',
    'MODULE_TRAITS',
]
