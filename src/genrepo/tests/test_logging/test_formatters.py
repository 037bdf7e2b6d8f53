import json
import sys
import logging
import uuid

from genrepo.core.logging.formatters import ColorFormatter, JsonFormatter


def make_record(msg="repo.insert.success", level=logging.INFO, **extra):
    rec = logging.LogRecord("genrepo.repositories", level, __file__, 10, msg, (), None)
    rec.__dict__.update(extra)
    return rec


def test_json_formatter_core_fields():
    fmt = JsonFormatter(env="testing", service="genrepo")
    rec = make_record(correlation_id="c0ffee")

    payload = json.loads(fmt.format(rec))

    assert payload["message"] == "repo.insert.success"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "genrepo.repositories"
    assert payload["correlation_id"] == "c0ffee"
    assert payload["service"] == "genrepo"
    assert payload["env"] == "testing"
    assert "version" in payload


def test_json_formatter_includes_extras():
    """
    Behavior:
            - Structured `extra` keys from the repositories appear as top-level JSON keys.
            - Values JSON cannot encode (UUID) are stringified instead of breaking the line.
    """
    entity_id = uuid.uuid4()
    rec = make_record(entity="Author", table="authors", duration_ms=3, raw_id=entity_id)

    payload = json.loads(JsonFormatter().format(rec))

    assert payload["entity"] == "Author"
    assert payload["table"] == "authors"
    assert payload["duration_ms"] == 3
    assert payload["raw_id"] == str(entity_id)
    # standard LogRecord attributes are not duplicated as extras
    assert "args" not in payload
    assert "msecs" not in payload


def test_json_formatter_exception():
    try:
        raise ValueError("bad row")
    except ValueError:
        rec = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(JsonFormatter().format(rec))

    assert "ValueError: bad row" in payload["exc_info"]


def test_color_formatter_line():
    rec = make_record(level=logging.WARNING, correlation_id="abc")

    line = ColorFormatter().format(rec)

    assert ColorFormatter.COLOR_CODES["WARNING"] in line
    assert "abc" in line
    assert line.endswith("repo.insert.success")
