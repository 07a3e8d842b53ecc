class InvalidModeValueError(TypeError):
    """Raised when a container mode flag is set to a non-bool value."""


class KeyClashError(RuntimeError):
    """Raised when a mapping with colliding keys cannot be merged safely."""

    def __init__(self, message: str, clashes: dict | None = None):
        super().__init__(message)
        self.clashes = clashes or {}


class KeyNotFoundError(KeyError):
    """Raised by a required fetch when the key is absent and no fallback is given."""
