"""Tests for the error taxonomy and entry point error handling."""

import pytest

from bosh_exporter.core.errors import (
    AuthError,
    BoshExporterError,
    CollectError,
    ConfigError,
    ExitCode,
    FetchError,
    WriteError,
    format_error_message,
    main_with_error_handling,
)


class TestExitCodes:
    @pytest.mark.parametrize(
        "error, code",
        [
            (ConfigError("bad"), ExitCode.CONFIG_ERROR),
            (AuthError("denied"), ExitCode.AUTH_ERROR),
            (FetchError("down"), ExitCode.UNKNOWN_ERROR),
            (WriteError("disk", path="/tmp/x"), ExitCode.UNKNOWN_ERROR),
        ],
    )
    def test_error_exit_codes(self, error, code):
        assert error.exit_code == code

    def test_scrape_errors_carry_context(self):
        assert FetchError("boom", deployment="cf").deployment == "cf"
        assert CollectError("boom", collector="Jobs").collector == "Jobs"
        assert WriteError("boom", path="/sd.json").path == "/sd.json"


class TestFormatErrorMessage:
    def test_plain_message(self):
        assert format_error_message(BoshExporterError("failed")) == "failed"

    def test_details_are_appended(self):
        error = ConfigError("Invalid CA", {"path": "/ca.pem"})

        assert format_error_message(error) == "Invalid CA (path=/ca.pem)"


class TestMainWithErrorHandling:
    def test_success_passes_through(self):
        @main_with_error_handling()
        def main():
            return ExitCode.SUCCESS

        assert main() == 0

    def test_exporter_error_maps_to_exit_code(self, capsys):
        @main_with_error_handling()
        def main():
            raise AuthError("UAA token grant failed", {"uaa_url": "https://uaa"})

        assert main() == ExitCode.AUTH_ERROR
        assert capsys.readouterr().err.startswith(
            "error: UAA token grant failed (uaa_url=https://uaa)"
        )

    def test_keyboard_interrupt(self):
        @main_with_error_handling()
        def main():
            raise KeyboardInterrupt

        assert main() == 130

    def test_unexpected_error_with_traceback(self, capsys):
        @main_with_error_handling(show_traceback=True, log_errors=False)
        def main():
            raise RuntimeError("boom")

        assert main() == ExitCode.UNKNOWN_ERROR
        err = capsys.readouterr().err
        assert "error: boom" in err
        assert "Traceback" in err
