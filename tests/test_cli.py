"""
CLI Tests
"""

import json

import pytest

from prophecy_cli.commands.resolve import parse_stake
from prophecy_cli.main import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, create_parser, main


def write_config(tmp_path):
    path = tmp_path / "prophecy.json"
    path.write_text(json.dumps({
        "llm": {"provider": "mock", "api_key": "test-key"},
        "generation": {"pacing_delay_s": 0, "quota_wait_s": 0, "retry_backoff_s": 0},
        "resolution": {"fetch_source": False},
        "settlement": {"disburse_delay_s": 0, "audit_log_path": str(tmp_path / "audit.jsonl")},
    }))
    return path


class TestParseStake:
    def test_valid(self):
        assert parse_stake("alice:100:yes") == ("alice", 100, True)
        assert parse_stake("bob:5:NO") == ("bob", 5, False)

    @pytest.mark.parametrize("stake", ["alice:100", "alice:100:maybe", "alice:lots:yes"])
    def test_invalid(self, stake):
        with pytest.raises(ValueError):
            parse_stake(stake)


class TestParser:
    def test_reconsider_outcome_is_uppercased(self):
        args = create_parser().parse_args(
            ["reconsider", "--market-id", "m1", "--outcome", "yes", "--evidence-cid", "bafkreix"]
        )
        assert args.outcome == "YES"
        assert args.submitter == "cli"

    def test_resolve_repeatable_options(self):
        args = create_parser().parse_args(
            ["resolve", "Q?", "-e", "cid1", "-e", "cid2", "--stake", "a:1:yes"]
        )
        assert args.evidence == ["cid1", "cid2"]
        assert args.stake == ["a:1:yes"]


class TestMain:
    def test_no_command(self, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR

    def test_missing_config_file(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "nope.json"), "config", "--show"]) == EXIT_RUNTIME_ERROR
        assert "Error loading configuration" in capsys.readouterr().err

    def test_config_init(self, tmp_path, capsys):
        path = tmp_path / "prophecy.json"

        assert main(["config", "--init", "--path", str(path)]) == EXIT_SUCCESS
        assert json.loads(path.read_text())["log_level"] == "INFO"
        assert main(["config", "--init", "--path", str(path)]) == EXIT_RUNTIME_ERROR

    def test_config_show_hides_keys(self, tmp_path, capsys):
        path = write_config(tmp_path)

        assert main(["config", "--show", "--path", str(path)]) == EXIT_SUCCESS
        shown = json.loads(capsys.readouterr().out)
        assert shown["llm"]["provider"] == "mock"
        assert "api_key" not in shown["llm"]
        assert shown["source"] == str(path)

    def test_resolve_without_usable_model_output_stays_unresolved(self, tmp_path, capsys):
        path = write_config(tmp_path)

        code = main([
            "--config", str(path),
            "resolve", "Will it rain in Paris on 2026-11-01?",
            "--market-id", "rain-paris",
            "--stake", "alice:100:yes",
            "--json",
        ])

        assert code == EXIT_SUCCESS
        summary = json.loads(capsys.readouterr().out)
        assert summary["market_id"] == "rain-paris"
        assert summary["decision"] == "UNCERTAIN"
        assert summary["iterations"] == 3
        assert summary["settlement"] == "unresolved"
        assert summary["transcript_cid"] is None

    def test_resolve_bad_stake(self, tmp_path, capsys):
        path = write_config(tmp_path)

        code = main(["--config", str(path), "resolve", "Q?", "--stake", "alice"])

        assert code == EXIT_RUNTIME_ERROR
        assert "Invalid stake" in capsys.readouterr().err
