"""Tests for the start / info / result / cancel commands."""

from __future__ import annotations

import base64
import json
from typing import Any

import pytest
from click.testing import CliRunner, Result

from opdispatch.cli import cli
from tests.sample_services import orders

TARGET = "tests.sample_services:registry"


def _invoke_json(runner: CliRunner, *args: str) -> tuple[Result, dict[str, Any]]:
    result = runner.invoke(cli, ["--json", *args])
    # Failures go to stderr; CliRunner folds both streams into ``output``.
    payload = json.loads(result.output[result.output.index("{") :])
    return result, payload


@pytest.mark.usefixtures("_isolated_cwd", "_restore_logging")
class TestStartCommand:
    def test_sync_echo(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(
            cli_runner, "start", TARGET, "echo", "echo", "--input", '"hello"'
        )
        assert result.exit_code == 0
        assert payload["ok"] is True
        assert payload["op"] == "start"
        assert payload["data"] == {
            "service": "echo",
            "operation": "echo",
            "kind": "sync",
            "content_type": "application/json",
            "value": "hello",
        }

    def test_human_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["start", TARGET, "echo", "echo", "--input", "[1, 2]"])
        assert result.exit_code == 0
        assert "OK" in result.output
        assert "kind: sync" in result.output
        assert "value: [1,2]" in result.output

    def test_async_token(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(cli_runner, "start", TARGET, "orders", "fulfil")
        assert result.exit_code == 0
        assert payload["data"]["kind"] == "async"
        assert payload["data"]["token"] == "tok-1"

    def test_object_input(self, cli_runner: CliRunner) -> None:
        _, payload = _invoke_json(
            cli_runner, "start", TARGET, "orders", "place", "--input", '{"sku": "A1"}'
        )
        assert payload["data"]["value"] == {"id": "ord-1", "sku": "A1", "quantity": 1}

    def test_binary_output_base64(self, cli_runner: CliRunner) -> None:
        _, payload = _invoke_json(cli_runner, "start", TARGET, "echo", "blob")
        assert payload["data"]["content_type"] == "application/octet-stream"
        assert payload["data"]["encoding"] == "base64"
        assert base64.b64decode(payload["data"]["value"]) == b"\x00\x01binary"

    def test_none_output(self, cli_runner: CliRunner) -> None:
        _, payload = _invoke_json(cli_runner, "start", TARGET, "echo", "nothing")
        assert payload["data"]["value"] is None
        assert payload["data"]["content_type"] is None

    def test_headers_passed_lower_cased(self, cli_runner: CliRunner) -> None:
        _, payload = _invoke_json(
            cli_runner, "start", TARGET, "echo", "headers", "-H", "X-Trace=abc", "-H", "a=b=c"
        )
        assert payload["data"]["value"] == {"x-trace": "abc", "a": "b=c"}

    def test_unknown_service_exits_1(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(cli_runner, "start", TARGET, "nope", "echo")
        assert result.exit_code == 1
        assert payload["ok"] is False
        assert payload["error"]["code"] == "NOT_FOUND"
        assert payload["error"]["message"] == "No service handler registered for service 'nope'"

    def test_handler_error_exits_1(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(cli_runner, "start", TARGET, "echo", "reject")
        assert result.exit_code == 1
        assert payload["error"]["code"] == "RESOURCE_EXHAUSTED"
        assert payload["error"]["detail"] == {"kind": "handler", "retryable": True}

    def test_malformed_header_is_usage_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["start", TARGET, "echo", "echo", "-H", "novalue"])
        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output

    def test_invalid_json_input_is_usage_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["start", TARGET, "echo", "echo", "--input", "{nope"])
        assert result.exit_code == 2
        assert "Not valid JSON" in result.output

    def test_examples_flag(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["start", "--examples"])
        assert result.exit_code == 0
        assert "opdispatch start" in result.output


@pytest.mark.usefixtures("_isolated_cwd", "_restore_logging")
class TestAsyncCommands:
    def test_info_running(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(cli_runner, "info", TARGET, "orders", "fulfil", "tok-1")
        assert result.exit_code == 0
        assert payload["data"] == {"token": "tok-1", "state": "running"}

    def test_info_unknown_token(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(cli_runner, "info", TARGET, "orders", "fulfil", "tok-x")
        assert result.exit_code == 1
        assert payload["error"]["code"] == "NOT_FOUND"

    def test_result_value(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(
            cli_runner, "result", TARGET, "orders", "fulfil", "tok-done", "--wait", "2"
        )
        assert result.exit_code == 0
        assert payload["data"]["token"] == "tok-done"
        assert payload["data"]["value"] == {"shipped": True}

    def test_result_still_running(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(cli_runner, "result", TARGET, "orders", "fulfil", "tok-1")
        assert result.exit_code == 1
        assert payload["error"]["code"] == "STILL_RUNNING"

    def test_result_failed(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(
            cli_runner, "result", TARGET, "orders", "fulfil", "tok-failed"
        )
        assert result.exit_code == 1
        assert payload["error"]["code"] == "FAILED"
        assert payload["error"]["message"] == "card declined"
        assert payload["error"]["detail"] == {"kind": "operation", "state": "failed"}

    def test_negative_wait_rejected(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["result", TARGET, "orders", "fulfil", "tok-done", "--wait=-1"]
        )
        assert result.exit_code == 2

    def test_cancel(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(
            cli_runner, "cancel", TARGET, "orders", "fulfil", "tok-cli"
        )
        assert result.exit_code == 0
        assert payload["data"] == {"token": "tok-cli", "cancel_requested": True}
        assert "tok-cli" in orders.fulfil.canceled

    def test_start_only_cancel_not_implemented(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(cli_runner, "cancel", TARGET, "echo", "echo", "t")
        assert result.exit_code == 1
        assert payload["error"]["code"] == "NOT_IMPLEMENTED"
        assert payload["error"]["detail"]["retryable"] is False


@pytest.mark.usefixtures("_isolated_cwd", "_restore_logging")
class TestTargets:
    def test_handler_list_target_uses_settings(self, cli_runner: CliRunner) -> None:
        result, payload = _invoke_json(
            cli_runner,
            "start",
            "tests.sample_services:handlers",
            "echo",
            "echo",
            "--input",
            "3",
        )
        assert result.exit_code == 0
        assert payload["data"]["value"] == 3

    def test_config_selects_pydantic_serializer(
        self, cli_runner: CliRunner, tmp_path: Any
    ) -> None:
        (tmp_path / "opdispatch.toml").write_text('[serializer]\nkind = "pydantic"\n')
        _, payload = _invoke_json(
            cli_runner,
            "start",
            "tests.sample_services:handlers",
            "orders",
            "place",
            "--input",
            '{"sku": "B2", "quantity": 4}',
        )
        assert payload["data"]["value"] == {"id": "ord-1", "sku": "B2", "quantity": 4}

    @pytest.mark.parametrize(
        "target",
        [
            "no-colon",
            "tests.sample_services:not_services",
            "tests.sample_services:missing",
            "no_such_module_for_opdispatch:registry",
            "tests.sample_services:duplicated",
        ],
    )
    def test_invalid_target(self, cli_runner: CliRunner, target: str) -> None:
        result, payload = _invoke_json(cli_runner, "start", target, "echo", "echo")
        assert result.exit_code == 1
        assert payload["error"]["code"] == "INVALID_TARGET"
