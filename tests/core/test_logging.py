from __future__ import annotations

import json
import logging
import sys

from ambassador.core.logging import _ContainerFormatter, _JsonFormatter, setup_logging


def _record(level: int, msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ambassador.test",
        level=level,
        pathname="registry.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_uvicorn_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING


def test_setup_logging_selects_json_formatter() -> None:
    setup_logging("info", json_format=True)
    [handler] = logging.getLogger().handlers
    assert isinstance(handler.formatter, _JsonFormatter)
    setup_logging("info")


def test_container_formatter_location_only_for_warnings() -> None:
    fmt = _ContainerFormatter()
    assert "[registry.py:42]" not in fmt.format(_record(logging.INFO))
    assert "[registry.py:42]" in fmt.format(_record(logging.WARNING))


def test_json_formatter_lifts_domain_fields() -> None:
    output = _JsonFormatter().format(
        _record(logging.INFO, "Badge minted", token_id=7, applicant="bob")
    )
    entry = json.loads(output)
    assert entry["message"] == "Badge minted"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "ambassador.test"
    assert entry["token_id"] == 7
    assert entry["applicant"] == "bob"
    assert "ambassador" not in entry


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(logging.ERROR, "failed")
        record.exc_info = sys.exc_info()
    entry = json.loads(_JsonFormatter().format(record))
    assert "RuntimeError: boom" in entry["exception"]
