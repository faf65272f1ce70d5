"""Plugin capability interface and loader.

A plugin is any object with ``name``, ``draw``, ``handle_input`` and
``update``. Its state is a versioned mapping the host stores and hands back
without looking inside.
"""

from __future__ import annotations

import importlib.util
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)

PLUGIN_STATE_VERSION = 1


@dataclass(frozen=True)
class PluginState:
    version: int = PLUGIN_STATE_VERSION
    values: Mapping[str, str] = field(default_factory=dict)

    def with_value(self, key: str, value: str) -> PluginState:
        values = dict(self.values)
        values[key] = value
        return replace(self, values=values)


@runtime_checkable
class Plugin(Protocol):
    name: str

    def draw(self, state: PluginState, width: int, height: int) -> list[str]: ...

    def handle_input(self, state: PluginState, key: str) -> PluginState: ...

    def update(self, state: PluginState) -> PluginState: ...


class ClockPlugin:
    """Shows the local time; ``f`` toggles 12/24 hour format."""

    name = "clock"

    def draw(self, state: PluginState, width: int, height: int) -> list[str]:
        now = state.values.get("now", "")
        fmt = state.values.get("format", "24h")
        return [f"clock ({fmt})"[:width], now[:width]][:height]

    def handle_input(self, state: PluginState, key: str) -> PluginState:
        if key == "f":
            current = state.values.get("format", "24h")
            return state.with_value("format", "12h" if current == "24h" else "24h")
        return state

    def update(self, state: PluginState) -> PluginState:
        pattern = "%I:%M:%S %p" if state.values.get("format") == "12h" else "%H:%M:%S"
        return state.with_value("now", time.strftime(pattern))


def load_plugin_file(name: str, path: Path) -> Plugin | None:
    """Import ``path`` (a ``.py`` file or a package directory) and build its plugin.

    The module must define ``create_plugin()`` or a ``Plugin`` class. Broken
    plugins are logged and skipped.
    """
    init_path = path / "__init__.py" if path.is_dir() else path
    if not init_path.is_file():
        LOGGER.warning("plugin %s: %s not found", name, init_path)
        return None
    try:
        spec = importlib.util.spec_from_file_location(f"twinpane_plugin_{name}", init_path)
        if spec is None or spec.loader is None:
            LOGGER.warning("plugin %s: cannot import %s", name, init_path)
            return None
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        factory = getattr(module, "create_plugin", None) or getattr(module, "Plugin", None)
        plugin = factory() if callable(factory) else None
    except Exception:
        LOGGER.exception("plugin %s failed to load", name)
        return None
    if not isinstance(plugin, Plugin):
        LOGGER.warning("plugin %s does not provide draw/handle_input/update", name)
        return None
    return plugin


class PluginHost:
    """Loaded plugins, their states, and which one (if any) is shown."""

    def __init__(self, plugins: list[Plugin] | None = None) -> None:
        self.plugins: list[Plugin] = list(plugins or [])
        self.states: dict[str, PluginState] = {plugin.name: PluginState() for plugin in self.plugins}
        self.active: int | None = None

    @classmethod
    def from_config(cls, configured: Mapping[str, str]) -> PluginHost:
        plugins: list[Plugin] = [ClockPlugin()]
        for name, raw_path in configured.items():
            plugin = load_plugin_file(name, Path(raw_path).expanduser())
            if plugin is not None:
                plugins.append(plugin)
        return cls(plugins)

    def active_plugin(self) -> Plugin | None:
        if self.active is None:
            return None
        return self.plugins[self.active]

    def cycle(self) -> Plugin | None:
        """Show the next plugin; after the last one, hide plugins again."""
        if not self.plugins:
            return None
        if self.active is None:
            self.active = 0
        elif self.active + 1 < len(self.plugins):
            self.active += 1
        else:
            self.active = None
        return self.active_plugin()

    def _call(self, plugin: Plugin, method: str, *args) -> None:
        state = self.states.get(plugin.name, PluginState())
        try:
            new_state = getattr(plugin, method)(state, *args)
        except Exception:
            LOGGER.exception("plugin %s.%s failed", plugin.name, method)
            return
        if isinstance(new_state, PluginState):
            self.states[plugin.name] = new_state

    def update(self) -> None:
        plugin = self.active_plugin()
        if plugin is not None:
            self._call(plugin, "update")

    def handle_input(self, key: str) -> None:
        plugin = self.active_plugin()
        if plugin is not None:
            self._call(plugin, "handle_input", key)

    def draw(self, width: int, height: int) -> list[str]:
        plugin = self.active_plugin()
        if plugin is None:
            return []
        try:
            return list(plugin.draw(self.states.get(plugin.name, PluginState()), width, height))
        except Exception:
            LOGGER.exception("plugin %s.draw failed", plugin.name)
            return [f"{plugin.name}: draw failed"]
