"""Unit tests for the command-line runner."""

from __future__ import annotations

import run


def test_parse_cli_args_coerces_known_keys() -> None:
    params, residual = run._parse_cli_args(
        ["--purpose", "Kickoff", "--participants", "ana@example.com, bo@example.com", "--duration", "30", "extra", "--dry"]
    )

    assert params == {
        "purpose": "Kickoff",
        "participants": ["ana@example.com", "bo@example.com"],
        "duration": 30,
        "dry": True,
    }
    assert residual == ["extra"]


def test_main_lists_catalog(capsys) -> None:
    assert run.main(["--list"]) == 0

    output = capsys.readouterr().out
    assert "sentiment-analysis-real" in output
    assert "13 automations, 12 active, average success rate 89%" in output


def test_main_rejects_unknown_automation(capsys) -> None:
    assert run.main(["does-not-exist"]) == 1
    assert "Unknown automation 'does-not-exist'" in capsys.readouterr().err


def test_main_without_arguments_prints_usage(capsys) -> None:
    assert run.main([]) == 1
    assert "Usage:" in capsys.readouterr().out
