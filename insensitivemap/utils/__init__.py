from .comparators import deep_equal
from .exceptions import InvalidModeValueError, KeyClashError, KeyNotFoundError

__all__ = [
    "InvalidModeValueError",
    "KeyClashError",
    "KeyNotFoundError",
    "deep_equal",
]
