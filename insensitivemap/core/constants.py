from typing import Final

# ======================================================
# Key normalization rules
# ======================================================
KEY_SPACE: Final[str] = " "
KEY_SEPARATOR: Final[str] = "_"

# ======================================================
# Serialization
# ======================================================
IMAP_KIND: Final[str] = "im"
IMAP_FILE_VERSION = "1.0"
IMAP_EXTENSION = ".imap"
IMAP_STATE_TARGET = "__imap__"
IMAP_NESTED_STATE = "__imap_state__"
