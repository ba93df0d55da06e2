import json

from reviewbridge.logging import StructuredLogger, configure_logging, get_logger


def _lines(out: str) -> list[str]:
    return [line for line in out.strip().split("\n") if line]


def test_json_issue_action(capsys):
    logger = StructuredLogger(name="test.json", json_logging=True, level="INFO")
    logger.log_issue_action("transition", "WEB-130", True, transition="2")

    lines = _lines(capsys.readouterr().out)
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["operation"] == "issue_transition"
    assert entry["issue_key"] == "WEB-130"
    assert entry["ok"] is True
    assert entry["transition"] == "2"
    assert entry["level"] == "INFO"


def test_failed_action_is_a_warning(capsys):
    logger = StructuredLogger(name="test.warn", json_logging=True)
    logger.log_issue_action("update", "WEB-131", False)
    entry = json.loads(_lines(capsys.readouterr().out)[0])
    assert entry["level"] == "WARNING"
    assert entry["message"] == "issue update WEB-131 [FAILED]"


def test_identical_json_records_are_deduplicated(capsys):
    logger = StructuredLogger(name="test.dedupe", json_logging=True)
    logger.log_operation("find_issues", keys=["WEB-1"])
    logger.log_operation("find_issues", keys=["WEB-1"])
    logger.log_operation("find_issues", keys=["WEB-2"])
    assert len(_lines(capsys.readouterr().out)) == 2


def test_text_format(capsys):
    logger = StructuredLogger(name="test.text", json_logging=False)
    logger.log_operation("find_issues")
    out = capsys.readouterr().out
    assert "INFO Operation: find_issues" in out


def test_level_filtering(capsys):
    logger = StructuredLogger(name="test.level", level="WARNING")
    logger.debug("hidden")
    logger.warning("shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out


def test_timed_operation(capsys):
    logger = StructuredLogger(name="test.timed", json_logging=True)
    with logger.timed_operation("link"):
        pass
    entries = [json.loads(line) for line in _lines(capsys.readouterr().out)]
    assert entries[0]["operation"] == "link_start"
    assert entries[1]["operation"] == "link"
    assert "duration_ms" in entries[1]


def test_configure_logging_replaces_global():
    first = configure_logging(json_logging=False, level="INFO")
    assert get_logger() is first
    second = configure_logging(json_logging=True, level="DEBUG")
    assert get_logger() is second
