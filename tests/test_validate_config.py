"""
Tests for the offline configuration check script.
"""
from scripts.validate_config import main

ENV = {
    "FESTIVE_BOT_LEADERBOARD": "4242",
    "FESTIVE_BOT_SESSION": "s3cret",
}


def test_valid_configuration_passes(capsys):
    assert main(["--period", "30"], ENV) == 0
    out = capsys.readouterr().out
    assert "period:      30" in out
    assert "FESTIVE_BOT_NOTIFY unset" in out
    assert "Configuration validation passed." in out


def test_missing_session_fails(capsys):
    assert main([], {"FESTIVE_BOT_LEADERBOARD": "4242"}) == 1
    assert "FESTIVE_BOT_SESSION" in capsys.readouterr().err
