"""Tests for the format_result dispatcher and OutputSettings."""

import json

from opdispatch.domain.errors import HandlerError, OperationError, OperationStillRunningError
from opdispatch.output.formatters import OutputSettings, format_result
from opdispatch.output.result import InvocationError, InvocationResult


def _ok(op: str = "test", **data: object) -> InvocationResult:
    return InvocationResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> InvocationResult:
    return InvocationResult(
        ok=False,
        op=op,
        error=InvocationError(code="NOT_FOUND", message=msg, detail={"kind": "handler"}),
    )


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        output = format_result(
            _ok("start", kind="sync", value="hello"),
            settings=OutputSettings(json_output=True),
        )
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "start"
        assert data["data"]["value"] == "hello"
        assert data["error"] is None

    def test_json_mode_error(self) -> None:
        output = format_result(_err("start", "Bad"), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is False
        assert data["error"]["code"] == "NOT_FOUND"
        assert data["error"]["message"] == "Bad"


class TestFormatResultHuman:
    def test_success_lists_fields(self) -> None:
        output = format_result(_ok("info", token="tok-1", state="running"))
        assert output.startswith("OK")
        assert "info" in output
        assert "token: tok-1" in output
        assert "state: running" in output

    def test_nested_values_rendered_as_json(self) -> None:
        output = format_result(_ok("result", value={"shipped": True}))
        assert 'value: {"shipped":true}' in output

    def test_error_line(self) -> None:
        output = format_result(_err("start", "No service"))
        assert output.startswith("ERROR")
        assert "[NOT_FOUND]" in output
        assert "No service" in output
        assert "detail" not in output

    def test_verbose_error_shows_detail(self) -> None:
        output = format_result(_err("start", "No service"), settings=OutputSettings(verbose=True))
        assert "detail:" in output
        assert "kind: handler" in output

    def test_services_table(self) -> None:
        result = _ok(
            "services",
            services=[
                {
                    "name": "orders",
                    "operations": [
                        {
                            "key": "cancel_order",
                            "name": "cancel-order",
                            "input_type": None,
                            "output_type": "dict",
                        }
                    ],
                }
            ],
        )
        output = format_result(result)
        assert "orders" in output
        assert "cancel-order" in output
        assert "dict" in output
        assert "cancel_order" not in output
        assert "cancel_order" in format_result(result, settings=OutputSettings(verbose=True))


class TestInvocationResult:
    def test_from_handler_error(self) -> None:
        result = InvocationResult.from_exception(
            "start", HandlerError("Nope", type="UNAVAILABLE")
        )
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "UNAVAILABLE"
        assert result.error.message == "Nope"
        assert result.error.detail == {"kind": "handler", "retryable": True}

    def test_from_operation_error(self) -> None:
        result = InvocationResult.from_exception(
            "result", OperationError.canceled(RuntimeError("user abort"))
        )
        assert result.error is not None
        assert result.error.code == "CANCELED"
        assert result.error.detail["state"] == "canceled"

    def test_from_still_running(self) -> None:
        result = InvocationResult.from_exception("result", OperationStillRunningError())
        assert result.error is not None
        assert result.error.code == "STILL_RUNNING"
        assert result.error.message == "Operation still running"

    def test_success_factory(self) -> None:
        result = InvocationResult.success("cancel", {"token": "t"})
        assert result.ok is True
        assert result.data == {"token": "t"}
