import logging

import pytest
import structlog
from structlog.stdlib import ProcessorFormatter

from recordic.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_json_output(capsys):
    configure_logging(json_output=True, level="DEBUG")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0].formatter, ProcessorFormatter)
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    structlog.get_logger("recordic.test").info("hello", answer=42)
    err = capsys.readouterr().err
    assert '"event": "hello"' in err
    assert '"answer": 42' in err


def test_console_output_level():
    configure_logging(level="warning")
    assert logging.getLogger().level == logging.WARNING
