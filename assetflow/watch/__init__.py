from .module_watcher import ModuleWatcher

__all__ = ['ModuleWatcher']
