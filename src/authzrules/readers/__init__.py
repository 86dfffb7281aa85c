from .memory import MemoryDataReader

__all__ = ["MemoryDataReader"]
