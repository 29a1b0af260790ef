"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Resolves ``module:attribute`` targets into a
:class:`ServiceRegistry` and centralizes result emission (stdout/stderr
routing + exit codes).
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from opdispatch.domain.errors import DefinitionError
from opdispatch.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from opdispatch.config.settings import DispatchSettings
    from opdispatch.handler.registry import ServiceRegistry
    from opdispatch.output.result import InvocationResult
    from opdispatch.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class TargetError(ValueError):
    """A ``module:attribute`` target could not be resolved into services."""


def load_target(target: str) -> Any:
    """Import ``module:attribute`` and return the attribute.

    The attribute part may be dotted (``pkg.mod:holder.registry``).

    Raises:
        TargetError: Malformed target, missing module, or missing attribute.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        msg = f"Target must look like 'module:attribute', got '{target}'"
        raise TargetError(msg)
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import module '{module_name}': {exc}"
        raise TargetError(msg) from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            msg = f"Module '{module_name}' has no attribute '{attr_path}'"
            raise TargetError(msg) from exc
    return obj


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``. Targets are resolved on
    demand so ``--help`` and ``--version`` never import user code.
    """

    def __init__(self, settings: DispatchSettings) -> None:
        self.settings = settings
        self._registries: dict[str, ServiceRegistry] = {}

        from opdispatch.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    def registry(self, target: str) -> ServiceRegistry:
        """Resolve *target* into a registry (cached per target string).

        A :class:`ServiceRegistry` is used as-is. A :class:`ServiceHandler`
        or a list of them is wrapped with
        :meth:`ServiceRegistry.from_settings`, picking up the configured
        serializer, plugin middlewares, and logging middleware.

        Raises:
            TargetError: The target does not resolve to services, or its
                handlers cannot share one registry.
        """
        cached = self._registries.get(target)
        if cached is not None:
            return cached

        from opdispatch.handler.registry import ServiceRegistry
        from opdispatch.handler.service_handler import ServiceHandler

        obj = load_target(target)
        if isinstance(obj, ServiceRegistry):
            registry = obj
        else:
            if isinstance(obj, ServiceHandler):
                handlers = [obj]
            elif isinstance(obj, list | tuple) and all(isinstance(h, ServiceHandler) for h in obj):
                handlers = list(obj)
            else:
                msg = (
                    f"Target '{target}' is a {type(obj).__name__}, expected a "
                    "ServiceRegistry, a ServiceHandler, or a list of ServiceHandlers"
                )
                raise TargetError(msg)
            try:
                registry = ServiceRegistry.from_settings(
                    handlers,
                    self.settings,
                    plugin_manager=self._plugin_manager(),
                )
            except DefinitionError as exc:
                msg = f"Target '{target}' cannot be served: {exc}"
                raise TargetError(msg) from exc

        self._registries[target] = registry
        return registry

    def _plugin_manager(self) -> PluginManager | None:
        if not self.settings.plugins.enabled:
            return None
        from opdispatch.plugins.manager import PluginManager

        pm = PluginManager()
        local_dir = self.settings.plugins.local_dir
        loaded = pm.discover_and_load(local_dir=Path(local_dir) if local_dir else None)
        logger.debug("Loaded plugins: %s", loaded)
        return pm

    def emit(self, result: InvocationResult) -> None:
        """Format and output an InvocationResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
