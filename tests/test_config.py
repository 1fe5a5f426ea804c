"""Tests for agentwire config models, parser and factories."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml
from pydantic import ValidationError

from agentwire.config import ConfigError, load_config
from agentwire.config.models import AgentwireConfig, LogWatchConfig, StreamConfig
from agentwire.constants import (
    DEFAULT_INTERACTION_TIMEOUT,
    DEFAULT_LOG_DIR,
    MAX_BUFFER_SIZE,
)
from agentwire.factories import (
    create_log_watcher,
    create_permission_handler,
    create_stream_parser,
    create_thought_stream_handler,
)
from agentwire.thought.handler import ThoughtStreamHandler

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_yaml(path: Path, data: dict[str, Any]) -> Path:
    """Write *data* as YAML and return the file path."""
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


# ===================================================================
# Model validation tests
# ===================================================================


class TestModels:
    def test_defaults(self) -> None:
        cfg = AgentwireConfig()
        assert cfg.stream.max_buffer_size == MAX_BUFFER_SIZE
        assert cfg.interaction.default_timeout == DEFAULT_INTERACTION_TIMEOUT
        assert cfg.logwatch.log_dir == str(DEFAULT_LOG_DIR)
        assert cfg.logwatch.file_notifications is True

    def test_partial_sections(self) -> None:
        cfg = AgentwireConfig.model_validate({"logwatch": {"poll_interval": 2}})
        assert cfg.logwatch.poll_interval == 2
        assert cfg.stream.max_buffer_size == MAX_BUFFER_SIZE

    @pytest.mark.parametrize("size", [0, -1])
    def test_buffer_size_must_be_positive(self, size: int) -> None:
        with pytest.raises(ValidationError):
            StreamConfig(max_buffer_size=size)

    def test_poll_interval_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            LogWatchConfig(poll_interval=0)

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AgentwireConfig.model_validate({"stream": {"max_size": 5}})


# ===================================================================
# Parser tests
# ===================================================================


class TestLoadConfig:
    def test_explicit_file(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path / "agentwire.yaml",
            {
                "stream": {"max_buffer_size": 1024},
                "interaction": {"default_timeout": 30},
                "logwatch": {"log_dir": "/var/log/agent", "file_notifications": False},
            },
        )

        cfg = load_config(path)

        assert cfg.stream.max_buffer_size == 1024
        assert cfg.interaction.default_timeout == 30.0
        assert cfg.logwatch.log_dir == "/var/log/agent"
        assert cfg.logwatch.file_notifications is False

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "nope.yaml")

    def test_no_default_file_gives_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == AgentwireConfig()

    def test_default_file_in_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_yaml(tmp_path / "agentwire.yaml", {"stream": {"max_buffer_size": 64}})
        monkeypatch.chdir(tmp_path)

        assert load_config().stream.max_buffer_size == 64

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "agentwire.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == AgentwireConfig()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "agentwire.yaml"
        path.write_text("stream: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "agentwire.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_unknown_setting_reported(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "agentwire.yaml", {"logwatch": {"dir": "/x"}})
        with pytest.raises(ConfigError, match="Unknown setting") as exc_info:
            load_config(path)
        assert "logwatch" in str(exc_info.value)

    def test_invalid_value_reported(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path / "agentwire.yaml", {"interaction": {"default_timeout": "soon"}}
        )
        with pytest.raises(ConfigError, match="Config validation failed"):
            load_config(path)

    def test_home_is_expanded(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path / "agentwire.yaml", {"logwatch": {"log_dir": "~/logs"}}
        )
        cfg = load_config(path)
        assert cfg.logwatch.log_dir == str(Path.home() / "logs")

    def test_dotenv_variables_are_expanded(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # Recorded so teardown removes the value .env loading sets.
        monkeypatch.setenv("AGENTWIRE_TEST_ROOT", "placeholder")
        monkeypatch.delenv("AGENTWIRE_TEST_ROOT")
        (tmp_path / ".env").write_text(
            "AGENTWIRE_TEST_ROOT=/srv/agent\n", encoding="utf-8"
        )
        path = _write_yaml(
            tmp_path / "agentwire.yaml",
            {"logwatch": {"log_dir": "$AGENTWIRE_TEST_ROOT/log"}},
        )

        cfg = load_config(path)

        assert cfg.logwatch.log_dir == "/srv/agent/log"


# ===================================================================
# Factories
# ===================================================================


class TestFactories:
    def test_stream_parser_uses_config(self) -> None:
        cfg = AgentwireConfig.model_validate({"stream": {"max_buffer_size": 128}})
        parser = create_stream_parser(cfg)

        errors: list[Exception] = []
        parser.on("error", errors.append)
        parser.feed("{" + "x" * 200)

        assert len(errors) == 1

    def test_permission_handler_defaults(self) -> None:
        handler = create_permission_handler()
        assert handler.default_timeout == DEFAULT_INTERACTION_TIMEOUT

    def test_permission_handler_explicit_timeout_wins(self) -> None:
        cfg = AgentwireConfig.model_validate({"interaction": {"default_timeout": 10}})
        assert create_permission_handler(config=cfg).default_timeout == 10
        assert create_permission_handler(2.5, cfg).default_timeout == 2.5

    def test_thought_stream_handler(self) -> None:
        assert isinstance(create_thought_stream_handler(), ThoughtStreamHandler)

    def test_log_watcher_from_config(self, tmp_path: Path) -> None:
        cfg = AgentwireConfig.model_validate(
            {"logwatch": {"log_dir": str(tmp_path), "poll_interval": 0.2}}
        )
        watcher = create_log_watcher(config=cfg)
        assert watcher.log_dir == tmp_path

    def test_log_watcher_explicit_dir_wins(self, tmp_path: Path) -> None:
        cfg = AgentwireConfig.model_validate({"logwatch": {"log_dir": "/elsewhere"}})
        watcher = create_log_watcher(tmp_path, cfg)
        assert watcher.log_dir == tmp_path
