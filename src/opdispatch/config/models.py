"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``opdispatch.toml`` only holds
overrides. An empty file is a valid configuration.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class SerializerConfig(BaseModel):
    """[serializer] section."""

    model_config = {"frozen": True}

    kind: Literal["default", "pydantic"] = "default"


class MiddlewareConfig(BaseModel):
    """[middleware] section."""

    model_config = {"frozen": True}

    logging: bool = True


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str | None = None
