from .generator import SequenceGenerator
from .store import InMemorySequenceStore, SequenceStore, SqlSequenceStore

__all__ = ["SequenceGenerator", "SequenceStore", "InMemorySequenceStore", "SqlSequenceStore"]
