from __future__ import annotations

import copy
from collections.abc import Callable, Hashable, Iterable, Mapping
from typing import Any

from typing_extensions import Self

from insensitivemap.core.constants import IMAP_FILE_VERSION, IMAP_NESTED_STATE
from insensitivemap.core.keys import find_clashes, normalize_key
from insensitivemap.logger import logger
from insensitivemap.utils.exceptions import InvalidModeValueError, KeyClashError, KeyNotFoundError
from insensitivemap.utils.serialization import SerializableMixin


class _NoDefault:
    def __repr__(self):
        return "<no default>"

    def __reduce__(self):
        return "NO_DEFAULT"


NO_DEFAULT = _NoDefault()


class InsensitiveMap(SerializableMixin, dict):
    """
    Dictionary with case- and format-insensitive key lookup.

    Features:
    - Keys are stored exactly as provided (the most recently supplied spelling wins).
    - Lookups ([], get(), in, del, pop(), fetch()) normalize the key first:
      textual keys are lowercased and spaces become underscores, so
      `"Foo Bar"`, `"foo_bar"` and `"FOO_BAR"` address the same entry.
    - A secondary map `_key_map` maps normalized key -> original key.
    - Nested mappings (also inside lists/tuples) are converted to InsensitiveMap
      on assignment, so lookups are insensitive at every depth.
    - In safe mode, merging a mapping that holds two keys with the same
      normalized form raises KeyClashError and leaves the container unchanged.

    Example:
        im = InsensitiveMap({"Content Type": "json", "nested": {"Inner Key": 1}})

        assert im["content_type"] == "json"
        assert im["NESTED"]["inner key"] == 1
        assert list(im) == ["Content Type", "nested"]

    """

    def __init__(
        self,
        data: Mapping | Iterable[tuple[Hashable, Any]] | None = None,
        /,
        *,
        safe: bool = False,
        default: Any = NO_DEFAULT,
        default_factory: Callable[[], Any] | None = None,
    ):
        """
        Initialize an InsensitiveMap.

        Args:
            data (Mapping | Iterable[tuple] | None): Initial content, merged in \
                recursively. Accepts anything `dict()` accepts.
            safe (bool): Enable key-clash detection on merges. Defaults to False.
            default (Any): Value returned by `[]` for missing keys.
            default_factory (Callable[[], Any] | None): Zero-argument callable whose \
                result is stored and returned by `[]` for missing keys. Mutually \
                exclusive with `default`.

        Raises:
            InvalidModeValueError: If `safe` is not a bool.
            ValueError: If both `default` and `default_factory` are given.
            KeyClashError: If `safe` is True and `data` holds clashing keys.

        """
        super().__init__()
        self._key_map: dict[Hashable, Hashable] = {}
        self._safe = False
        self._default = NO_DEFAULT
        self._default_factory = None

        if default is not NO_DEFAULT and default_factory is not None:
            raise ValueError("Only one of `default` and `default_factory` can be provided.")
        self.safe = safe
        if default_factory is not None:
            self.default_factory = default_factory
        else:
            self._default = default

        if data is not None:
            self.merge_recursive(data)

    @classmethod
    def from_pairs(cls, *init, **kwargs) -> Self:
        """
        Build a container from anything `dict(*init, **kwargs)` accepts.

        Nested mappings are wrapped recursively.

        Examples:
            >>> InsensitiveMap.from_pairs([("Key One", 1)])["key_one"]
            1

        """
        return cls(dict(*init, **kwargs))

    def __repr__(self):
        return f"{self.__class__.__name__}({dict.__repr__(self)})"

    # ==========================================
    # Mode and defaults
    # ==========================================
    @property
    def safe(self) -> bool:
        """Whether merges reject incoming mappings with clashing keys."""
        return self._safe

    @safe.setter
    def safe(self, value: bool):
        if not isinstance(value, bool):
            msg = f"Safe mode must be True or False, got {value!r}"
            raise InvalidModeValueError(msg)
        self._safe = value

    def set_safe_mode(self, value: bool) -> bool:
        self.safe = value
        return self._safe

    def is_safe_mode(self) -> bool:
        return self._safe

    @property
    def default(self) -> Any:
        """Value returned by `[]` for missing keys (None if unset)."""
        return None if self._default is NO_DEFAULT else self._default

    @default.setter
    def default(self, value: Any):
        self._default = value
        self._default_factory = None

    @property
    def default_factory(self) -> Callable[[], Any] | None:
        """Zero-argument producer used by `[]` for missing keys."""
        return self._default_factory

    @default_factory.setter
    def default_factory(self, factory: Callable[[], Any] | None):
        if factory is not None and not callable(factory):
            msg = f"default_factory must be callable or None, got {type(factory)}"
            raise TypeError(msg)
        self._default_factory = factory
        self._default = NO_DEFAULT

    def _has_fallback(self) -> bool:
        return self._default_factory is not None or self._default is not NO_DEFAULT

    # ==========================================
    # Key bookkeeping
    # ==========================================
    def lookup_key(self, key: Hashable, *, remove: bool = False) -> Hashable:
        """
        Return the stored original key matching `key`, or `key` itself if none does.

        Args:
            key (Hashable): Any spelling of the key.
            remove (bool): If True, also evict the match from the key registry.

        """
        nk = normalize_key(key)
        if nk not in self._key_map:
            return key
        return self._key_map.pop(nk) if remove else self._key_map[nk]

    def _rebuild_key_map(self):
        self._key_map = {normalize_key(k): k for k in dict.keys(self)}

    def _stamp_safe(self, safe: bool):
        self._safe = safe
        for v in dict.values(self):
            _stamp_nested(v, safe)

    # ==========================================
    # Core dict overrides
    # ==========================================
    def __setitem__(self, key: Hashable, value: Any):
        nk = normalize_key(key)
        wrapped = self.wrap(value)

        prior = self._key_map.get(nk, NO_DEFAULT)
        if prior is not NO_DEFAULT and not (prior == key and type(prior) is type(key)):
            # Spelling changed: drop the old slot so the new original key is kept
            logger.debug("Re-registering key %r as %r", prior, key)
            del self._key_map[nk]
            super().__delitem__(prior)

        self._key_map[nk] = key
        super().__setitem__(key, wrapped)

    store = __setitem__

    def __getitem__(self, key: Hashable):
        return super().__getitem__(self.lookup_key(key))

    def __missing__(self, key: Hashable):
        if self._default_factory is not None:
            self[key] = self._default_factory()
            return super().__getitem__(self.lookup_key(key))
        if self._default is not NO_DEFAULT:
            return self._default
        raise KeyError(key)

    def __delitem__(self, key: Hashable):
        resolved = self.lookup_key(key)
        super().__delitem__(resolved)
        del self._key_map[normalize_key(resolved)]

    def __contains__(self, key: object) -> bool:
        return normalize_key(key) in self._key_map

    def has_key(self, key: Hashable) -> bool:
        return key in self

    def get(self, key: Hashable, default: Any = None) -> Any:
        return super().get(self.lookup_key(key), default)

    def pop(self, key: Hashable, *default):
        resolved = self.lookup_key(key)
        value = super().pop(resolved, *default)
        self._key_map.pop(normalize_key(resolved), None)
        return value

    def popitem(self) -> tuple[Hashable, Any]:
        key, value = super().popitem()
        del self._key_map[normalize_key(key)]
        return key, value

    def shift(self) -> tuple[Hashable, Any]:
        """Remove and return the first inserted (original_key, value) pair."""
        if not self:
            msg = f"shift(): {self.__class__.__name__} is empty"
            raise KeyError(msg)
        key = next(iter(self))
        return key, self.pop(key)

    def setdefault(self, key: Hashable, default: Any = None) -> Any:
        if key not in self:
            self[key] = default
        return super().__getitem__(self.lookup_key(key))

    def clear(self):
        self._key_map.clear()
        super().clear()

    def update(self, other=(), /, **kwargs):
        """Same as `merge_in()`; follows the `dict.update` signature."""
        self.merge_in(other, **kwargs)

    # ==========================================
    # Lookup helpers
    # ==========================================
    def delete(self, key: Hashable, handler: Callable[[Hashable], Any] | None = None) -> Any:
        """
        Remove `key` and return its value.

        Deleting a missing key is a no-op that returns None, or `handler(key)` \
        when a handler is given.
        """
        resolved = self.lookup_key(key, remove=True)
        if dict.__contains__(self, resolved):
            return super().pop(resolved)
        return handler(key) if handler is not None else None

    def fetch(self, key: Hashable, default: Any = NO_DEFAULT, *, handler: Callable[[Hashable], Any] | None = None):
        """
        Required lookup that ignores `default`/`default_factory`.

        Args:
            key (Hashable): Any spelling of the key.
            default (Any, optional): Returned if the key is missing.
            handler (Callable, optional): Called with `key` if the key is missing; \
                takes precedence over `default`.

        Raises:
            KeyNotFoundError: If the key is missing and no fallback was given.

        """
        resolved = self.lookup_key(key)
        if dict.__contains__(self, resolved):
            return super().__getitem__(resolved)
        if handler is not None:
            return handler(key)
        if default is not NO_DEFAULT:
            return default
        msg = f"key not found: {key!r}"
        raise KeyNotFoundError(msg)

    def values_at(self, *keys: Hashable) -> list[Any]:
        """Values for `keys` with `[]` semantics; None for missing keys without a default."""
        fallback = self._has_fallback()
        return [self[k] if fallback or k in self else None for k in keys]

    def assoc(self, key: Hashable) -> tuple[Hashable, Any] | None:
        """Return `(original_key, value)` for `key`, or None."""
        resolved = self.lookup_key(key)
        if not dict.__contains__(self, resolved):
            return None
        return resolved, super().__getitem__(resolved)

    # ==========================================
    # Wrapping and merging
    # ==========================================
    def wrap(self, value: Any) -> Any:
        """
        Convert `value` for storage in this container.

        - InsensitiveMap: returned as-is, with this container's safe mode \
            stamped onto it and its nested containers.
        - Other mappings: converted into a new container of this class.
        - list/tuple: element-wise wrapped into a new list/tuple.
        - Anything else: returned unchanged.
        """
        if isinstance(value, InsensitiveMap):
            value._stamp_safe(self._safe)
            return value
        if isinstance(value, Mapping):
            return self.__class__(value, safe=self._safe)
        if isinstance(value, list):
            return [self.wrap(v) for v in value]
        if type(value) is tuple:
            return tuple(self.wrap(v) for v in value)
        return value

    def detect_clash(self, other: Mapping | Iterable[Hashable]) -> None:
        """
        Raise KeyClashError if safe mode is on and `other` has clashing keys.

        Only the keys of `other` are inspected; keys already held by this \
        container are never considered a clash.
        """
        if not self._safe:
            return
        keys = other.keys() if isinstance(other, Mapping) else other
        clashes = find_clashes(keys)
        if clashes:
            detail = "; ".join(f"{originals!r} -> {nk!r}" for nk, originals in clashes.items())
            msg = f"Key clash detected: {detail}"
            logger.debug(msg)
            raise KeyClashError(msg, clashes=clashes)

    def _incoming(self, other, kwargs) -> Mapping:
        if isinstance(other, Mapping) and not kwargs:
            return other
        return dict(other, **kwargs)

    def merge_in(self, other=(), /, **kwargs) -> Self:
        """
        Store every pair of `other` (and `kwargs`) in this container.

        Existing entries under the same normalized key are replaced outright; \
        nested mappings are wrapped, not combined with the previous value.

        Raises:
            KeyClashError: In safe mode, if the incoming keys clash. Nothing is stored.

        """
        incoming = self._incoming(other, kwargs)
        self.detect_clash(incoming)
        # wrap everything first so a clash in a nested mapping leaves self untouched
        staged = [(k, self.wrap(v)) for k, v in incoming.items()]
        for k, v in staged:
            self[k] = v
        return self

    update_in = merge_in

    def merge_recursive(self, other=(), /, **kwargs) -> Self:
        """
        Merge `other` into this container, building nested containers recursively.

        Unlike `merge_in()`, every nested mapping (including an InsensitiveMap) is \
        copied into a fresh container, so the result shares no mapping with `other`. \
        Used for deep construction from nested mappings.

        Raises:
            KeyClashError: In safe mode, if the incoming keys clash at this level.

        """
        incoming = self._incoming(other, kwargs)
        self.detect_clash(incoming)
        staged = [(k, self._deep_wrap(v)) for k, v in incoming.items()]
        for k, v in staged:
            self[k] = v
        return self

    update_recursive = merge_recursive

    def _deep_wrap(self, value: Any) -> Any:
        if isinstance(value, InsensitiveMap):
            # fresh container, but the child keeps its own defaults
            new = value.copy()
            new._safe = self._safe
            for k, v in dict.items(value):
                dict.__setitem__(new, k, new._deep_wrap(v))
            return new
        if isinstance(value, Mapping):
            return self.__class__(value, safe=self._safe)
        if isinstance(value, list):
            return [self._deep_wrap(v) for v in value]
        if type(value) is tuple:
            return tuple(self._deep_wrap(v) for v in value)
        return value

    def merge(self, other=(), /, **kwargs) -> Self:
        """Return a new container with `other` merged on top; this one is unchanged."""
        return self.copy().merge_in(other, **kwargs)

    def __or__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.merge(other)

    def __ior__(self, other):
        return self.merge_in(other)

    # ==========================================
    # Duplication and replacement
    # ==========================================
    def copy(self) -> Self:
        """Shallow copy with an independent key registry."""
        new = self.__class__.__new__(self.__class__)
        dict.__init__(new, self)
        new._key_map = dict(self._key_map)
        new._safe = self._safe
        new._default = self._default
        new._default_factory = self._default_factory
        return new

    __copy__ = copy

    def __deepcopy__(self, memo):
        new = self.__class__.__new__(self.__class__)
        memo[id(self)] = new
        dict.__init__(new)
        for k, v in dict.items(self):
            dict.__setitem__(new, copy.deepcopy(k, memo), copy.deepcopy(v, memo))
        new._rebuild_key_map()
        new._safe = self._safe
        new._default = copy.deepcopy(self._default, memo)
        new._default_factory = self._default_factory
        return new

    def replace(self, other: Mapping) -> Self:
        """
        Replace all entries with those of `other`.

        When `other` is an InsensitiveMap, its safe mode, `default` and \
        `default_factory` are adopted too; a plain mapping leaves them as they are.
        The key registry is rebuilt; if `other` holds several spellings of one \
        key, the last one wins.
        """
        items = list(other.items())
        super().clear()
        self._key_map.clear()
        if isinstance(other, InsensitiveMap):
            self.safe = other.safe
            self._default = other._default
            self._default_factory = other._default_factory
        for k, v in items:
            self[k] = v
        return self

    # ==========================================
    # Conversion
    # ==========================================
    def to_dict(self, *, deep: bool = False) -> dict:
        """
        Return a plain, case-sensitive dict of original key -> value.

        Args:
            deep (bool): If True, nested containers (also inside lists/tuples) are \
                converted to plain dicts too. Defaults to False.

        """
        if not deep:
            return dict(dict.items(self))
        return {k: _to_plain(v) for k, v in dict.items(self)}

    def sensitive(self) -> dict:
        return self.to_dict()

    # ==========================================
    # Serialization
    # ==========================================
    def get_state(self) -> dict[str, Any]:
        return {
            "version": IMAP_FILE_VERSION,
            "safe": self._safe,
            "has_default": self._default is not NO_DEFAULT,
            "default": None if self._default is NO_DEFAULT else self._default,
            "default_factory": self._default_factory,
            "items": [(k, _to_state(v)) for k, v in dict.items(self)],
        }

    def set_state(self, state: dict[str, Any]) -> None:
        dict.clear(self)
        self._key_map = {}
        self._safe = False
        self._default = state["default"] if state.get("has_default") else NO_DEFAULT
        self._default_factory = state.get("default_factory")
        self.safe = state.get("safe", False)
        # nested containers come back with their own mode and defaults, not re-stamped
        for k, v in state["items"]:
            dict.__setitem__(self, k, self._from_state_value(v))
        self._rebuild_key_map()

    def _from_state_value(self, value: Any) -> Any:
        if isinstance(value, dict) and IMAP_NESTED_STATE in value:
            return self.__class__.from_state(value[IMAP_NESTED_STATE])
        if isinstance(value, Mapping):
            return self.wrap(value)
        if isinstance(value, list):
            return [self._from_state_value(v) for v in value]
        if type(value) is tuple:
            return tuple(self._from_state_value(v) for v in value)
        return value

    def __reduce__(self):
        return (self.__class__.from_state, (self.get_state(),))


def _stamp_nested(value: Any, safe: bool):
    if isinstance(value, InsensitiveMap):
        value._stamp_safe(safe)
    elif isinstance(value, (list, tuple)):
        for v in value:
            _stamp_nested(v, safe)


def _to_plain(value: Any) -> Any:
    if isinstance(value, InsensitiveMap):
        return value.to_dict(deep=True)
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    if type(value) is tuple:
        return tuple(_to_plain(v) for v in value)
    return value


def _to_state(value: Any) -> Any:
    if isinstance(value, InsensitiveMap):
        return {IMAP_NESTED_STATE: value.get_state()}
    if isinstance(value, list):
        return [_to_state(v) for v in value]
    if type(value) is tuple:
        return tuple(_to_state(v) for v in value)
    return value
