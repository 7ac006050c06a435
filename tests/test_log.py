import json
import datetime
import io
from unittest.mock import patch
import traceback

import pytest

from seedusers.log import Log, get_host_id, trim_time
from seedusers import log


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("HOSTNAME", "node0.cluster")
    monkeypatch.setenv("ENVIRONMENT", "unknown-environment")
    monkeypatch.setenv("DEPLOYMENT_NAME", "seedusers")


@pytest.fixture
def mock_now():
    with patch("seedusers.log.now") as mock_now:
        mock_now.return_value = "2024-05-04 12:00:00"
        yield


def test_get_host_id(mock_env):
    assert get_host_id() == "node0"


def test_now():
    now_time = log.now().split(".")[0]
    assert now_time == datetime.datetime.now().isoformat("T").split(".")[0]


def test_trim_time():
    assert trim_time(None) == "0001-01-01T01:01"
    assert trim_time("2023-05-01T12:34:56.789012") == "2023-05-01T12:34:56.789"
    assert trim_time("2023-05-01T12:34:56") == "2023-05-01T12:34:56"


def test_log_json_mode(capsys, mock_now, mock_env):
    logger = Log("seedusers")
    logger.set_json_mode(True)
    logger.log("INFO", "test message")
    expected_output = {
        "status": "INFO",
        "subsystem": "seedusers",
        "host": "node0",
        "timestamp": log.now(),
        "message": "test message",
        "service": "seedusers",
        "env": "unknown-environment",
    }
    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err) == expected_output


def test_log_text_mode(capsys, mock_now, mock_env):
    logger = Log("seedusers")
    logger.set_json_mode(False)
    logger.log("INFO", "test message")
    expected_output = f"{log.now()} INFO : seedusers : unknown-environment : seedusers : test message\n"
    captured = capsys.readouterr()
    assert captured.err == expected_output
    assert captured.out == ""


def test_log_explicit_stream(mock_now, mock_env):
    stream = io.StringIO()
    logger = Log("seedusers", json_mode=True, stream=stream)
    logger.warning("uid", 100200, "in use", uid=100200)
    event = json.loads(stream.getvalue())
    assert event["status"] == "WARN"
    assert event["message"] == "uid 100200 in use"
    assert event["uid"] == 100200


def test_debug_muted_by_default(capsys, mock_now, mock_env):
    logger = Log("test")
    assert logger.debug("hidden") is None
    assert capsys.readouterr().err == ""


def test_set_level(capsys, mock_now, mock_env):
    logger = Log("test", json_mode=True)
    assert logger.set_level("DEBUG") is False
    logger.debug("test message")
    assert json.loads(capsys.readouterr().err)["status"] == "DEBUG"
    assert logger.set_level("INFO") is True
    logger.debug("test message")
    assert capsys.readouterr().err == ""


def test_exception(capsys, mock_now, mock_env):
    logger = Log("test")
    try:
        raise ValueError("test exception")
    except ValueError as e:
        logger.exception(e, "test message")
        captured = capsys.readouterr()
        expected_output = {
            "status": "ERROR",
            "subsystem": "test",
            "host": "node0",
            "timestamp": log.now(),
            "message": "test message",
            "service": "seedusers",
            "env": "unknown-environment",
            "error.stack": traceback.format_exc(),
            "error.message": "test message",
            "error.kind": "ValueError",
        }
    actual = json.loads(captured.err)
    assert actual == expected_output
    assert logger.json_mode is False
