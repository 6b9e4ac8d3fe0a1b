"""Unit tests for main.py module."""

import pytest
from pytest_mock import MockerFixture, MockType

import main
from formgate.core.config import Settings


@pytest.mark.unit
class TestMainFunction:
    """Test class for main() function."""

    def test_main_loads_settings_and_sets_up_logging(
        self,
        mocker: MockerFixture,
        mock_uvicorn: MockType,
        mock_settings: Settings,
    ) -> None:
        """Verify that main() loads settings and initializes logging."""
        mocker.patch("main.get_settings", return_value=mock_settings)
        setup_logging = mocker.patch("main.setup_logging")

        main.main()

        setup_logging.assert_called_once_with(mock_settings)
        mock_uvicorn.assert_called_once()

    @pytest.mark.parametrize(
        ("env_port", "expected_port"),
        [
            ("8080", 8080),
            (None, 3000),
        ],
    )
    def test_port_precedence(
        self,
        mocker: MockerFixture,
        mock_uvicorn: MockType,
        mock_settings: Settings,
        monkeypatch: pytest.MonkeyPatch,
        env_port: str | None,
        expected_port: int,
    ) -> None:
        """Verify PORT environment variable precedence over settings."""
        if env_port is not None:
            monkeypatch.setenv("PORT", env_port)
        mocker.patch("main.get_settings", return_value=mock_settings)
        mocker.patch("main.setup_logging")

        main.main()

        assert mock_uvicorn.call_args.kwargs["port"] == expected_port

    def test_debug_uses_import_string_with_reload(
        self,
        mocker: MockerFixture,
        mock_uvicorn: MockType,
        mock_settings: Settings,
    ) -> None:
        """Verify that debug mode runs the app by import string for reload."""
        mock_settings.debug = True
        mocker.patch("main.get_settings", return_value=mock_settings)
        mocker.patch("main.setup_logging")

        main.main()

        args, kwargs = mock_uvicorn.call_args
        assert args[0] == "formgate.api.main:app"
        assert kwargs["reload"] is True

    def test_uvicorn_logs_through_loguru(
        self,
        mocker: MockerFixture,
        mock_uvicorn: MockType,
        mock_settings: Settings,
    ) -> None:
        """Verify uvicorn logging is routed to the intercept handler."""
        mocker.patch("main.get_settings", return_value=mock_settings)
        mocker.patch("main.setup_logging")

        main.main()

        log_config = mock_uvicorn.call_args.kwargs["log_config"]
        assert log_config["handlers"]["default"]["class"] == (
            "formgate.core.logging.InterceptHandler"
        )
        assert set(log_config["loggers"]) == {"uvicorn", "uvicorn.error", "uvicorn.access"}
