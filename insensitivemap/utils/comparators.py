from collections.abc import Mapping

import numpy as np

from insensitivemap.core.keys import normalize_key


def _keyed(m: Mapping, *, insensitive: bool) -> dict:
    if not insensitive:
        return dict(m.items())
    return {normalize_key(k): v for k, v in m.items()}


def deep_equal(a, b, *, insensitive: bool = False):
    """
    Recursively check deep equality of arbitrarily nested mappings/lists/tuples.

    Args:
        a (Any): First value.
        b (Any): Second value.
        insensitive (bool, optional): If True, mapping keys are compared by their \
            normalized form at every level, so `{"Foo Bar": 1}` equals \
            `{"foo_bar": 1}`. Defaults to False.

    """
    if a is b:
        return True

    # NumPy array
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return isinstance(a, np.ndarray) and isinstance(b, np.ndarray) and np.array_equal(a, b)

    # Primitive types
    if isinstance(a, (int, float, str, bool)) or a is None:
        return a == b

    # Mapping (covers InsensitiveMap and plain dicts)
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        ka = _keyed(a, insensitive=insensitive)
        kb = _keyed(b, insensitive=insensitive)
        if len(ka) != len(a) or len(kb) != len(b):
            # keys collapsed under normalization
            return False
        if set(ka.keys()) != set(kb.keys()):
            return False
        return all(deep_equal(ka[k], kb[k], insensitive=insensitive) for k in ka)

    # List or tuple
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y, insensitive=insensitive) for x, y in zip(a, b, strict=True))

    # Fallback
    return a == b
