"""Dataset sources: demo rows and uploaded files"""
from .loader import DatasetError, DatasetLoader
from .sample import default_rows

__all__ = ["DatasetError", "DatasetLoader", "default_rows"]
