from .codec import character_from_dict, character_to_dict
from .store import FileStateStore, StateStore

__all__ = [
    "FileStateStore",
    "StateStore",
    "character_from_dict",
    "character_to_dict",
]
