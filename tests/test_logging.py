import logging
from pathlib import Path

import pytest

from atlas_command_client.logging import configure_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    for name in ("aiohttp.client", "aiohttp.access", "atlas_command_client.client"):
        logging.getLogger(name).setLevel(logging.NOTSET)
    logging.captureWarnings(False)


def test_configure_logging_writes_file(tmp_path: Path, restore_root_logging) -> None:
    log_path = tmp_path / "logs" / "atlas.log"

    configure_logging("debug", log_path=log_path)
    logging.getLogger("atlas_command_client.example").warning("hello %s", "world")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_path.read_text(encoding="utf-8")
    assert "| WARNING | atlas_command_client.example | hello world" in content
    assert logging.getLogger().level == logging.DEBUG


def test_network_loggers_quiet_by_default(restore_root_logging) -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("aiohttp.client").level == logging.WARNING
    assert logging.getLogger("atlas_command_client.client").level == logging.INFO


def test_log_network_leaves_request_logging_enabled(restore_root_logging) -> None:
    configure_logging("DEBUG", log_network=True)

    assert logging.getLogger("aiohttp.client").level == logging.NOTSET
    assert logging.getLogger("atlas_command_client.client").level == logging.NOTSET


def test_unknown_level_falls_back_to_info(restore_root_logging) -> None:
    configure_logging("chatty")

    assert logging.getLogger().level == logging.INFO
