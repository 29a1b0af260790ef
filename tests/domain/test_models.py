"""Tests for Content, Link, and OperationInfo."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from opdispatch.domain.models import Content, Link, OperationInfo
from opdispatch.domain.types import OperationState


class TestContent:
    def test_header_keys_lower_cased(self) -> None:
        content = Content(headers={"Content-Type": "application/json"}, data=b"{}")
        assert content.headers == {"content-type": "application/json"}
        assert content.content_type == "application/json"

    def test_no_data_differs_from_empty(self) -> None:
        assert Content().data is None
        assert Content(data=b"").data == b""

    def test_content_type_absent(self) -> None:
        assert Content().content_type is None


class TestLink:
    def test_valid_link(self) -> None:
        link = Link(url="https://example.com/ops/1", type="orders.Order")
        assert str(link.url) == "https://example.com/ops/1"

    def test_type_pattern_enforced(self) -> None:
        with pytest.raises(ValidationError):
            Link(url="https://example.com", type="bad type!")


class TestOperationInfo:
    def test_state_from_string(self) -> None:
        info = OperationInfo(token="tok-1", state="running")
        assert info.state is OperationState.RUNNING

    def test_empty_token_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OperationInfo(token="", state=OperationState.SUCCEEDED)
