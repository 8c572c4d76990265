"""
Runtime / CLI configuration tests
"""
import json

import pytest

from core.config import RuntimeConfig
from prophecy_cli.config import get_default_config_template, load_config


class TestRuntimeConfig:
    def test_defaults(self):
        config = RuntimeConfig()

        assert config.llm.provider == "google"
        assert config.resolution.max_iterations == 3
        assert config.generation.pacing_delay_s == 4.0
        assert config.generation.quota_wait_s == 10.0
        assert config.settlement.payout_multiplier == 2
        assert config.settlement.disburse_delay_s == 0.5
        assert config.reconsideration.pacing_delay_s == 2.0
        assert config.ledger.backend == "memory"

    def test_from_dict_is_partial(self):
        config = RuntimeConfig.from_dict({
            "llm": {"provider": "openai", "api_key": "sk-test"},
            "resolution": {"max_iterations": 5},
        })

        assert config.llm.provider == "openai"
        assert config.resolution.max_iterations == 5
        assert config.resolution.transcript_log_window == 50
        assert config.settlement.payout_multiplier == 2

    def test_provider_key_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        assert RuntimeConfig.from_dict({"llm": {"provider": "openai"}}).llm.api_key == "sk-from-env"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PROPHECY_LLM_PROVIDER", "anthropic")
        monkeypatch.setenv("PROPHECY_LEDGER_AUTHORITY", "resolver-2")
        monkeypatch.setenv("PROPHECY_DEBUG", "true")

        base = RuntimeConfig.from_dict({"llm": {"provider": "openai", "api_key": "k"}})
        config = base.with_env_overrides()

        assert config.llm.provider == "anthropic"
        assert config.ledger.authority == "resolver-2"
        assert config.debug is True
        assert base.llm.provider == "openai"

    def test_no_overrides_returns_same_object(self):
        config = RuntimeConfig()
        assert config.with_env_overrides() is config

    def test_to_dict_omits_secrets(self):
        config = RuntimeConfig.from_dict({
            "llm": {"provider": "openai", "api_key": "sk-secret"},
            "storage": {"api_key": "pinata"},
        })

        public = config.to_dict()
        assert "api_key" not in public["llm"]
        assert "api_key" not in public["storage"]
        assert config.to_dict(include_secrets=True)["llm"]["api_key"] == "sk-secret"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "oracle.yaml"
        path.write_text("llm:\n  provider: mock\n  api_key: x\nsettlement:\n  payout_multiplier: 3\n")

        config = RuntimeConfig.from_yaml(path)

        assert config.llm.provider == "mock"
        assert config.settlement.payout_multiplier == 3

    def test_from_yaml_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "missing.yaml")


class TestCliConfig:
    def test_json_file(self, tmp_path):
        path = tmp_path / "prophecy.json"
        path.write_text(json.dumps({
            "log_level": "DEBUG",
            "llm": {"provider": "mock", "api_key": "x"},
            "resolution": {"max_iterations": 2},
        }))

        config = load_config(path)

        assert config.log_level == "DEBUG"
        assert config.runtime.resolution.max_iterations == 2
        assert config.source == str(path)

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "prophecy.yml"
        path.write_text("log_file: oracle.log\nledger:\n  authority: ops\n")

        config = load_config(path)

        assert config.log_file == "oracle.log"
        assert config.runtime.ledger.authority == "ops"

    def test_env_wins_over_file(self, tmp_path, monkeypatch):
        path = tmp_path / "prophecy.json"
        path.write_text(json.dumps({"log_level": "DEBUG", "llm": {"provider": "openai", "api_key": "x"}}))
        monkeypatch.setenv("PROPHECY_LOG_LEVEL", "ERROR")
        monkeypatch.setenv("PROPHECY_LLM_PROVIDER", "mock")

        config = load_config(path)

        assert config.log_level == "ERROR"
        assert config.runtime.llm.provider == "mock"

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.json")

    def test_template_loads_back(self, tmp_path):
        template = get_default_config_template()
        data = json.loads(template)
        assert data["llm"]["api_key"] is None
        assert data["log_level"] == "INFO"

        path = tmp_path / "prophecy.json"
        path.write_text(template)
        config = load_config(path)
        assert config.runtime.resolution.max_iterations == 3
