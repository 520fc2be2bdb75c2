from ._dispatcher import Dispatcher, close_default_dispatcher, get_default_dispatcher

__all__ = ["Dispatcher", "close_default_dispatcher", "get_default_dispatcher"]
