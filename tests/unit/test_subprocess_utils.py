"""Tests for subprocess helpers."""

import logging
import subprocess
from unittest.mock import Mock, patch

from local_lambda.subprocess_utils import launch_logged_subprocess, run_logged_subprocess


class TestRunLoggedSubprocess:
    @patch("subprocess.Popen")
    def test_success(self, mock_popen):
        process = Mock()
        process.returncode = 0
        process.communicate.return_value = ("done\n", "")
        mock_popen.return_value = process

        result = run_logged_subprocess(["sam", "--version"])

        assert result.success is True
        assert result.returncode == 0
        assert result.stdout == "done\n"
        assert mock_popen.call_args.kwargs["stdout"] == subprocess.PIPE
        assert mock_popen.call_args.kwargs["text"] is True

    @patch("subprocess.Popen")
    def test_failure_carries_stderr(self, mock_popen):
        process = Mock()
        process.returncode = 2
        process.communicate.return_value = ("", "boom")
        mock_popen.return_value = process

        result = run_logged_subprocess(["sam", "build"])

        assert result.success is False
        assert result.returncode == 2
        assert result.error == "boom"

    @patch("subprocess.Popen")
    def test_failure_without_stderr_reports_exit_code(self, mock_popen):
        process = Mock()
        process.returncode = 3
        process.communicate.return_value = ("", "")
        mock_popen.return_value = process

        result = run_logged_subprocess(["sam", "build"])

        assert result.error == "Command exited with code 3"

    @patch("subprocess.Popen")
    def test_timeout_kills_process(self, mock_popen):
        process = Mock()
        process.communicate.side_effect = [subprocess.TimeoutExpired(["sam"], 1), ("", "")]
        mock_popen.return_value = process

        result = run_logged_subprocess(["sam", "build"], timeout=1)

        assert result.success is False
        assert "timed out" in result.error
        process.kill.assert_called_once()

    @patch("subprocess.Popen")
    def test_missing_executable(self, mock_popen):
        mock_popen.side_effect = FileNotFoundError("No such file or directory: 'sam'")

        result = run_logged_subprocess(["sam", "build"])

        assert result.success is False
        assert "No such file" in result.error

    @patch("subprocess.Popen")
    def test_logs_command_and_output(self, mock_popen, caplog):
        process = Mock()
        process.returncode = 0
        process.communicate.return_value = ("hello", "")
        mock_popen.return_value = process
        logger = logging.getLogger("test.subprocess")

        with caplog.at_level(logging.DEBUG, logger="test.subprocess"):
            run_logged_subprocess(["sam", "build"], logger=logger, operation_name="sam build")

        assert "sam build: Executing: sam build" in caplog.text
        assert "sam build: Output: hello" in caplog.text


class TestLaunchLoggedSubprocess:
    @patch("subprocess.Popen")
    def test_returns_popen_without_waiting(self, mock_popen):
        process = Mock()
        mock_popen.return_value = process

        result = launch_logged_subprocess(["sam", "local", "invoke"])

        assert result is process
        process.communicate.assert_not_called()
