"""TermTask: a shell-like console for notes, todos, links, contacts, calendar and timers."""
from .dispatcher import Dispatcher
from .scheduler import Scheduler
from .store import JsonFileStore, KeyValueStore, RecordStore
from .tokenizer import parse

__version__ = "0.1.0"

__all__ = ["Dispatcher", "Scheduler", "JsonFileStore", "KeyValueStore", "RecordStore", "parse"]
