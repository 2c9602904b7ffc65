"""Unit tests for azure_client.errors module."""

import pytest

from src.azure_client.errors import (
    ErrorKind,
    ProviderCommandError,
    ProviderError,
    ProviderTimeoutError,
    ResponseValidationError,
    SyncError,
    classify_message,
)


class TestClassifyMessage:
    """Test cases for classify_message function."""

    @pytest.mark.parametrize("message,expected", [
        ("(TooManyRequests) 429 Too Many Requests", ErrorKind.THROTTLED),
        ("The request was throttled", ErrorKind.THROTTLED),
        ("Read timed out", ErrorKind.TIMEOUT),
        ("(ServiceUnavailable) 503", ErrorKind.SERVER_ERROR),
        ("Bad Gateway", ErrorKind.SERVER_ERROR),
        ("Connection reset by peer", ErrorKind.SERVER_ERROR),
        ("(ResourceGroupNotFound) Resource group 'rg' could not be found.", ErrorKind.NOT_FOUND),
        ("Please run 'az login' to setup account.", ErrorKind.UNKNOWN),
        ("", ErrorKind.UNKNOWN),
    ])
    def test_classification(self, message, expected):
        """classify_message maps stderr text onto an error kind."""
        assert classify_message(message) is expected


class TestProviderErrors:
    """Test cases for provider exception types."""

    def test_all_errors_derive_from_sync_error(self):
        """Every provider error is catchable as SyncError."""
        assert issubclass(ProviderError, SyncError)
        assert issubclass(ProviderTimeoutError, ProviderError)
        assert issubclass(ProviderCommandError, ProviderError)
        assert issubclass(ResponseValidationError, SyncError)

    def test_timeout_error(self):
        """ProviderTimeoutError carries command, timeout and kind."""
        error = ProviderTimeoutError("az resource list", 120)

        assert error.kind is ErrorKind.TIMEOUT
        assert error.command == "az resource list"
        assert "timed out after 120s" in str(error)

    def test_command_error_classifies_stderr(self):
        """ProviderCommandError derives its kind from stderr."""
        error = ProviderCommandError("az account show", 1, "ERROR: 503 Service Unavailable\n")

        assert error.kind is ErrorKind.SERVER_ERROR
        assert error.returncode == 1
        assert str(error) == "Command 'az account show' failed: ERROR: 503 Service Unavailable"

    def test_command_error_without_stderr(self):
        """An empty stderr falls back to the exit status."""
        error = ProviderCommandError("az account show", 2)

        assert error.kind is ErrorKind.UNKNOWN
        assert "exit status 2" in str(error)

    def test_explicit_kind_wins(self):
        """An explicit kind overrides classification."""
        error = ProviderCommandError("az x", 1, "timeout", kind=ErrorKind.NOT_FOUND)

        assert error.kind is ErrorKind.NOT_FOUND

    def test_validation_error_message(self):
        """ResponseValidationError names the payload source."""
        error = ResponseValidationError('account', 'expected a JSON object')

        assert error.source == 'account'
        assert str(error) == "Invalid account response: expected a JSON object"
