from insensitivemap.core.factory import insensitive
from insensitivemap.core.insensitive_map import InsensitiveMap
from insensitivemap.core.keys import find_clashes, normalize_key

__all__ = [
    "InsensitiveMap",
    "find_clashes",
    "insensitive",
    "normalize_key",
]
