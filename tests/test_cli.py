"""Smoke tests for the agentwire CLI."""

import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from agentwire import __version__
from agentwire.cli import cli


def test_help() -> None:
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "frame" in result.output
    assert "watch-logs" in result.output


def test_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert f"agentwire, version {__version__}" in result.output


def test_frame_from_stdin() -> None:
    stream = 'booting...\n{"type": "a", "n": 1}\n{"type": "b", "s": "}{"}\n'
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["frame", "--chunk-size", "3"], input=stream)

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert [json.loads(line) for line in lines] == [
        {"type": "a", "n": 1},
        {"type": "b", "s": "}{"},
    ]


def test_frame_from_file(tmp_path: Path) -> None:
    source = tmp_path / "capture.txt"
    source.write_text('{"type": "text", "text": "héllo"}', encoding="utf-8")

    result = CliRunner().invoke(cli, ["frame", str(source)])

    assert result.exit_code == 0
    assert "héllo" in result.output


def test_frame_overflow_exits_with_error() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("agentwire.yaml").write_text(
            "stream:\n  max_buffer_size: 10\n", encoding="utf-8"
        )
        result = runner.invoke(cli, ["frame"], input='{"type": "' + "a" * 40)

    assert result.exit_code == 1
    assert "Stream buffer size exceeded maximum limit" in result.output


def test_frame_bad_config_exits() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("bad.yaml").write_text("stream:\n  bogus: 1\n", encoding="utf-8")
        result = runner.invoke(cli, ["frame", "--config", "bad.yaml"], input="{}")

    assert result.exit_code == 1
    assert "Unknown setting" in result.output


def test_watch_logs_flags() -> None:
    result = CliRunner().invoke(cli, ["watch-logs", "--help"])
    assert result.exit_code == 0
    assert "--log-dir" in result.output
    assert "--raw" in result.output
    assert "--verbose" in result.output


def test_watch_logs_stops_on_interrupt(tmp_path: Path) -> None:
    def _interrupt(coro: object) -> None:
        coro.close()  # type: ignore[attr-defined]
        raise KeyboardInterrupt

    runner = CliRunner()
    with (
        runner.isolated_filesystem(),
        patch("agentwire.commands.watch_logs.asyncio.run", side_effect=_interrupt),
    ):
        result = runner.invoke(cli, ["watch-logs", "--log-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert f"Watching {tmp_path}" in result.output
