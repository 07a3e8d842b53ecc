from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping

from insensitivemap.core.insensitive_map import InsensitiveMap


def insensitive(mapping: Mapping, *, safe: bool | None = None) -> InsensitiveMap:
    """
    Build an InsensitiveMap from an existing mapping.

    Nested mappings are copied into nested containers. A `defaultdict` source \
    passes its `default_factory` on; an InsensitiveMap source passes on its \
    default, default factory and safe mode.

    Args:
        mapping (Mapping): Source mapping. It is not modified.
        safe (bool | None, optional): Key-clash detection flag. If None, the \
            source's mode is kept (False for plain mappings).

    Returns:
        InsensitiveMap: The new container.

    Raises:
        KeyClashError: If safe mode is on and `mapping` holds clashing keys.

    Examples:
        >>> im = insensitive({"Content Type": "json"})
        >>> im["content_type"]
        'json'

    """
    ih = InsensitiveMap()
    if isinstance(mapping, InsensitiveMap):
        ih.safe = mapping.safe
        if mapping.default_factory is not None:
            ih.default_factory = mapping.default_factory
        elif mapping._has_fallback():
            ih.default = mapping.default
    elif isinstance(mapping, defaultdict) and mapping.default_factory is not None:
        ih.default_factory = mapping.default_factory

    if safe is not None:
        ih.safe = safe

    return ih.merge_recursive(mapping)
