"""Storage module."""

from .storage import IStorage, Storage, StorageKeys

__all__ = ["IStorage", "Storage", "StorageKeys"]
