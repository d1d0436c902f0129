"""Tests for DocflowConfig loading and saving."""

from __future__ import annotations

import yaml

from docflow.core.config import DocflowConfig


class TestDocflowConfigDefaults:
    def test_defaults(self):
        config = DocflowConfig()
        assert config.retry.max_attempts == 3
        assert config.retry.initial_delay == 1.0
        assert config.retry.jitter_ratio == 0.2
        assert config.tasks.pipeline_prefix == "get-llms-full"
        assert "crawl" in config.tasks.cancel_all_prefixes
        assert config.tasks.log_level == "INFO"

    def test_default_lists_are_independent(self):
        first, second = DocflowConfig(), DocflowConfig()
        first.tasks.cancel_all_prefixes.append("extra")
        assert "extra" not in second.tasks.cancel_all_prefixes


class TestDocflowConfigLoad:
    def test_load_from_nonexistent_file_uses_defaults(self, tmp_path):
        config = DocflowConfig.load(config_path=tmp_path / "nonexistent.yaml")
        assert config.retry.max_attempts == 3
        assert config.tasks.pipeline_prefix == "get-llms-full"

    def test_load_from_yaml_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.safe_dump(
                {
                    "retry": {"max_attempts": 5, "initial_delay": 0.5, "jitter_ratio": 0.1},
                    "tasks": {
                        "pipeline_prefix": "process-query",
                        "cancel_all_prefixes": ["crawl"],
                        "log_level": "DEBUG",
                    },
                }
            )
        )

        config = DocflowConfig.load(config_path=config_file)
        assert config.retry.max_attempts == 5
        assert config.retry.initial_delay == 0.5
        assert config.retry.jitter_ratio == 0.1
        assert config.tasks.pipeline_prefix == "process-query"
        assert config.tasks.cancel_all_prefixes == ["crawl"]
        assert config.tasks.log_level == "DEBUG"

    def test_env_vars_override_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.safe_dump({"retry": {"max_attempts": 5}}))

        monkeypatch.setenv("DOCFLOW_MAX_ATTEMPTS", "7")
        monkeypatch.setenv("DOCFLOW_INITIAL_DELAY", "2.5")
        monkeypatch.setenv("DOCFLOW_JITTER_RATIO", "0.3")
        monkeypatch.setenv("DOCFLOW_PIPELINE_PREFIX", "embed")
        monkeypatch.setenv("DOCFLOW_LOG_LEVEL", "WARNING")

        config = DocflowConfig.load(config_path=config_file)
        assert config.retry.max_attempts == 7
        assert config.retry.initial_delay == 2.5
        assert config.retry.jitter_ratio == 0.3
        assert config.tasks.pipeline_prefix == "embed"
        assert config.tasks.log_level == "WARNING"

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("retry: [unclosed")
        config = DocflowConfig.load(config_path=config_file)
        assert config.retry.max_attempts == 3

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        config = DocflowConfig.load(config_path=config_file)
        assert config.retry.initial_delay == 1.0


class TestDocflowConfigSave:
    def test_save_and_reload(self, tmp_path):
        config_file = tmp_path / "nested" / "config.yaml"
        config = DocflowConfig()
        config.retry.max_attempts = 4
        config.tasks.cancel_all_prefixes = ["embed"]
        config.save(config_path=config_file)

        data = yaml.safe_load(config_file.read_text())
        assert data["retry"]["max_attempts"] == 4

        reloaded = DocflowConfig.load(config_path=config_file)
        assert reloaded.retry.max_attempts == 4
        assert reloaded.tasks.cancel_all_prefixes == ["embed"]
