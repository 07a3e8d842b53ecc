import logging

import pytest

from insensitivemap import InsensitiveMap, KeyClashError, set_logging_level
from insensitivemap.logger import logger


@pytest.fixture
def debug_logging():
    set_logging_level("DEBUG")
    yield
    set_logging_level("WARNING")


@pytest.mark.unit
def test_set_logging_level():
    set_logging_level("ERROR")
    assert logger.level == logging.ERROR
    set_logging_level("WARNING")
    assert logger.level == logging.WARNING


@pytest.mark.unit
def test_rekey_and_clash_are_logged(caplog, debug_logging):
    im = InsensitiveMap(safe=True)
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        im["Foo"] = 1
        im["FOO"] = 2
        with pytest.raises(KeyClashError):
            im.merge_in({"a": 1, "A": 2})

    messages = [r.getMessage() for r in caplog.records]
    assert "Re-registering key 'Foo' as 'FOO'" in messages
    assert any(m.startswith("Key clash detected") for m in messages)
