from __future__ import annotations

from collections.abc import Hashable, Iterable
from enum import Enum

from insensitivemap.core.constants import KEY_SEPARATOR, KEY_SPACE


def normalize_key(key: Hashable) -> Hashable:
    """
    Return the lookup form of a mapping key.

    Description:
        Textual keys (strings and string-valued Enum members) are lowercased and
        have literal spaces replaced by underscores. The result is always a plain
        `str`. Every other key is returned unchanged.

    Args:
        key (Hashable): Key as supplied by the caller.

    Returns:
        Hashable: The normalized key.

    Examples:
        >>> normalize_key("Foo Bar")
        'foo_bar'
        >>> normalize_key("FOO_BAR")
        'foo_bar'
        >>> normalize_key(42)
        42

    """
    if isinstance(key, Enum):
        if not isinstance(key.value, str):
            return key
        key = key.value
    if isinstance(key, str):
        return str.lower(key).replace(KEY_SPACE, KEY_SEPARATOR)
    return key


def find_clashes(keys: Iterable[Hashable]) -> dict[Hashable, list[Hashable]]:
    """
    Group keys whose normalized forms collide.

    Returns:
        dict[Hashable, list[Hashable]]: normalized key -> original keys, only for \
            normalized keys shared by more than one original key.

    """
    groups: dict[Hashable, list[Hashable]] = {}
    for k in keys:
        groups.setdefault(normalize_key(k), []).append(k)
    return {nk: originals for nk, originals in groups.items() if len(originals) > 1}
