"""Tests for logging configuration."""

import pytest
import structlog

from ew_signer.config import Settings
from ew_signer.utils.logging import configure_logging, get_logger, redact_credentials


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_redact_credentials_masks_secret_keys():
    event = {"event": "login", "username": "a@b.com", "password": "hunter2", "label": "e-mail input"}

    result = redact_credentials(None, "info", event)

    assert result["username"] == "***"
    assert result["password"] == "***"
    assert result["label"] == "e-mail input"


def test_configure_logging_renders_json(reset_structlog, capsys):
    configure_logging(Settings(_env_file=None, log_level="INFO", debug=False))

    get_logger("tests").info("State transition", to_state="authenticating", password="hunter2")

    err = capsys.readouterr().err
    assert '"event": "State transition"' in err
    assert '"to_state": "authenticating"' in err
    assert "hunter2" not in err


def test_configure_logging_filters_level(reset_structlog, capsys):
    configure_logging(Settings(_env_file=None, log_level="WARNING"))

    get_logger("tests").info("hidden")
    get_logger("tests").warning("shown")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err
