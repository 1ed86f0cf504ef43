import logging
from unittest.mock import patch

from utils.logging_setup import configure_logging


def test_sets_requested_level():
    with patch("utils.logging_setup.logging.basicConfig") as basic_config:
        configure_logging("debug")
    assert basic_config.call_args.kwargs["level"] == logging.DEBUG
    assert "%(name)s" in basic_config.call_args.kwargs["format"]


def test_unknown_level_falls_back_to_info():
    with patch("utils.logging_setup.logging.basicConfig") as basic_config:
        configure_logging("chatty")
    assert basic_config.call_args.kwargs["level"] == logging.INFO


def test_level_defaults_to_settings(monkeypatch):
    monkeypatch.setenv("SCENECARD_LOG_LEVEL", "WARNING")
    with patch("utils.logging_setup.logging.basicConfig") as basic_config:
        configure_logging()
    assert basic_config.call_args.kwargs["level"] == logging.WARNING
