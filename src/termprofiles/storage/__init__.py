from .json_backend import JsonFileBackend

__all__ = ["JsonFileBackend"]
