from .error_kind import ErrorKind

__all__ = ["ErrorKind"]
