"""Tests for the development server runner."""

from unittest import mock

import pytest

from app import main as runner


class TestMain:
    def test_help_works_with_broken_settings(self, monkeypatch, capsys):
        monkeypatch.setenv("FINTRACK_BUDGET_DEFAULT_TOTAL_BUDGET", "-10")
        with pytest.raises(SystemExit) as exc_info:
            runner.main(["--help"])
        assert exc_info.value.code == 0
        assert "--database" in capsys.readouterr().out

    def test_broken_settings_exit_1(self, monkeypatch):
        monkeypatch.setenv("FINTRACK_BUDGET_DEFAULT_TOTAL_BUDGET", "-10")
        with mock.patch.object(runner, "create_app") as create_app:
            with pytest.raises(SystemExit) as exc_info:
                runner.main([])
        assert exc_info.value.code == 1
        create_app.assert_not_called()

    def test_arguments_override_settings(self, monkeypatch):
        monkeypatch.setenv("FINTRACK_AUTH_SECRET_KEY", "test-secret")
        with mock.patch.object(runner, "create_app") as create_app:
            runner.main(["--database", "sqlite://", "--host", "0.0.0.0", "--port", "8080", "--debug"])
        create_app.assert_called_once_with(database_url="sqlite://")
        create_app.return_value.run.assert_called_once_with(
            host="0.0.0.0", port=8080, debug=True, use_reloader=False,
        )
