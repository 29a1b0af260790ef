"""Shared pytest fixtures and test helpers for opdispatch tests."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Generator, Iterable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from opdispatch.domain.models import Content
from opdispatch.handler.context import (
    CancelOperationContext,
    GetOperationInfoContext,
    GetOperationResultContext,
    StartOperationContext,
)
from opdispatch.handler.registry import ServiceRegistry
from opdispatch.serialization.lazy_value import LazyValue
from opdispatch.serialization.serializers import JSON_CONTENT_TYPE, default_serializer
from tests.sample_services import echo_handler, orders_handler


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run in an empty directory with no config override in the environment.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")`` on CLI test classes
    so a stray ``opdispatch.toml`` never leaks into the run.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPDISPATCH_CONFIG", raising=False)


@pytest.fixture
def _restore_logging() -> Generator[None]:
    """Restore root logger state after a test that configures logging."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger("opdispatch")
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)


@pytest.fixture
def registry() -> ServiceRegistry:
    """Registry over the sample echo and orders services, no middleware."""
    return ServiceRegistry([echo_handler, orders_handler])


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def json_input(value: Any) -> LazyValue:
    """Inbound JSON payload, as a transport would hand it over."""
    import json

    return LazyValue(
        default_serializer(),
        {"Content-Type": JSON_CONTENT_TYPE},
        json.dumps(value).encode("utf-8"),
    )


def start_ctx(service: str, operation: str, **kwargs: Any) -> StartOperationContext:
    return StartOperationContext(service=service, operation=operation, **kwargs)


def info_ctx(service: str, operation: str) -> GetOperationInfoContext:
    return GetOperationInfoContext(service=service, operation=operation)


def result_ctx(service: str, operation: str, **kwargs: Any) -> GetOperationResultContext:
    return GetOperationResultContext(service=service, operation=operation, **kwargs)


def cancel_ctx(service: str, operation: str) -> CancelOperationContext:
    return CancelOperationContext(service=service, operation=operation)


async def read_json(value: LazyValue) -> Any:
    """Decode an outbound LazyValue with the default chain."""
    return await value.consume()


async def achunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


def json_content(raw: bytes) -> Content:
    return Content(headers={"content-type": JSON_CONTENT_TYPE}, data=raw)
