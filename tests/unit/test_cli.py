"""Tests for the earnsight command-line entry point."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from earnsight import cli
from earnsight.config import Settings
from earnsight.core.exceptions import ApiError


def _mock_settings() -> Settings:
    return Settings(_env_file=None, EARNSIGHT_MOCK_MODE=True, mock_seed=1)  # type: ignore[call-arg]


class TestServe:
    def test_runs_uvicorn(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["earnsight", "serve", "--port", "9000"])
        with patch.object(cli.uvicorn, "run") as run:
            cli.main()

        run.assert_called_once_with("earnsight.main:app", host="0.0.0.0", port=9000, reload=False)

    def test_command_required(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["earnsight"])
        with pytest.raises(SystemExit):
            cli.main()


class TestEarnings:
    @pytest.fixture(autouse=True)
    def setup_logging(self) -> Iterator[MagicMock]:
        with patch.object(cli, "setup_logging") as setup:
            yield setup

    def test_configures_logging_from_settings(
        self, monkeypatch: pytest.MonkeyPatch, setup_logging: MagicMock
    ) -> None:
        settings = _mock_settings()
        monkeypatch.setattr("sys.argv", ["earnsight", "earnings", "--date", "2024-01-24"])
        with patch.object(cli, "get_settings", return_value=settings):
            cli.main()

        setup_logging.assert_called_once_with(settings)

    def test_prints_mock_day_as_json(
        self, monkeypatch: pytest.MonkeyPatch, capfd: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.argv", ["earnsight", "earnings", "--date", "2024-01-24"])
        with patch.object(cli, "get_settings", return_value=_mock_settings()):
            cli.main()

        out = capfd.readouterr().out
        assert '"date": "2024-01-24"' in out
        assert '"partitioned": true' in out

    def test_upstream_failure_exits_nonzero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["earnsight", "earnings"])
        with (
            patch.object(cli, "get_settings", return_value=_mock_settings()),
            patch.object(
                cli.EarningsService,
                "get_earnings_for_date",
                AsyncMock(side_effect=ApiError("gateway down", status=503)),
            ),
            pytest.raises(SystemExit) as exc_info,
        ):
            cli.main()

        assert exc_info.value.code == 1

    def test_rejects_bad_date(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["earnsight", "earnings", "--date", "tomorrow"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 2
