import pytest

from insensitivemap import InsensitiveMap


# ==========================================================
# Source mappings
# ==========================================================
@pytest.fixture
def nested_source() -> dict:
    """A plain nested mapping with mixed key spellings."""
    return {
        "Content Type": "json",
        "Server": {"Host Name": "localhost", "PORT": 8080},
        "Routes": [{"Path": "/"}, {"Path": "/health", "Methods": ["GET"]}],
        3: "three",
    }


@pytest.fixture
def nested_map(nested_source) -> InsensitiveMap:
    """An InsensitiveMap built from `nested_source`."""
    return InsensitiveMap(nested_source)


@pytest.fixture
def safe_map() -> InsensitiveMap:
    """A safe-mode container holding one entry."""
    return InsensitiveMap({"Existing": 0}, safe=True)
