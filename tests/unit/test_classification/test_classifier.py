"""
Unit tests for build output classification.

Tests the keyword precedence and case handling of classify_log_line.
"""

import pytest

from uebuilder.classification import classify_log_line
from uebuilder.models.build import LogLevel


@pytest.mark.unit
class TestLogLineClassification:
    """Test cases for log line classification."""

    @pytest.mark.parametrize(
        "line",
        [
            "Foo.cpp(12): error C2065: 'x': undeclared identifier",
            "LogInit: Fatal error: assertion failed",
            "ERROR: Unable to find target",
            "Build error: UnrealBuildTool not found",
        ],
    )
    def test_errors(self, line):
        assert classify_log_line(line) is LogLevel.ERROR

    @pytest.mark.parametrize(
        "line",
        [
            "Foo.cpp(40): warning C4996: deprecated",
            "WARN: slow disk",
        ],
    )
    def test_warnings(self, line):
        assert classify_log_line(line) is LogLevel.WARNING

    @pytest.mark.parametrize(
        "line",
        [
            "Build completed successfully.",
            "Result: Succeeded. Success!",
        ],
    )
    def test_success(self, line):
        assert classify_log_line(line) is LogLevel.SUCCESS

    @pytest.mark.parametrize(
        "line",
        ["Compiling Module.Foo.cpp", "", "Total execution time: 12.5 seconds"],
    )
    def test_info(self, line):
        assert classify_log_line(line) is LogLevel.INFO

    def test_error_takes_precedence_over_warning(self):
        assert classify_log_line("warning treated as error") is LogLevel.ERROR

    def test_warning_takes_precedence_over_success(self):
        assert classify_log_line("completed with 3 warnings") is LogLevel.WARNING

    def test_build_failure_summary_is_info(self):
        # No keyword in the summary line; the exit status decides success.
        assert classify_log_line("Build failed with exit code 6.") is LogLevel.INFO
