from .manager import StorageManager

__all__ = ["StorageManager"]
