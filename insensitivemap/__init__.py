from insensitivemap.core.factory import insensitive
from insensitivemap.core.insensitive_map import InsensitiveMap
from insensitivemap.core.keys import normalize_key
from insensitivemap.logger import set_logging_level
from insensitivemap.utils.comparators import deep_equal
from insensitivemap.utils.exceptions import InvalidModeValueError, KeyClashError, KeyNotFoundError

__all__ = [
    "InsensitiveMap",
    "InvalidModeValueError",
    "KeyClashError",
    "KeyNotFoundError",
    "deep_equal",
    "insensitive",
    "normalize_key",
    "set_logging_level",
]
