from .dev_server import DevServer, RELOAD_PATH

__all__ = ['DevServer', 'RELOAD_PATH']
