"""Pluggy hook specifications for opdispatch extensions.

One setup-time hook lets installed packages contribute middleware to every
registry built with :meth:`ServiceRegistry.from_settings`.
"""

from __future__ import annotations

import pluggy

PROJECT_NAME = "opdispatch"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class OpdispatchHookSpec:
    """Hook specifications for the opdispatch plugin system."""

    @hookspec
    def register_middlewares(self) -> list[object] | None:
        """Return middleware objects to append to the dispatch chain, outermost first."""
