"""
Leaf validator registry.
Plugins are registered per (domain, version, action); lookups fall back to the
domain's 'default' version.
"""

import threading
from typing import Callable, Dict, List, Tuple

from ..core.errors import ResolutionError
from ..core.schema import DEFAULT_VERSION


class PluginRegistry:
    """Registry of leaf validators keyed by domain, protocol version and action."""

    def __init__(self):
        self._plugins: Dict[Tuple[str, str, str], Callable] = {}
        self._lock = threading.Lock()

    def add(self, domain: str, version: str, action: str, func: Callable) -> Callable:
        """Register a plugin, replacing any previous one for the same key."""
        if not callable(func):
            raise ResolutionError(f"Plugin for {domain} {version} {action} is not callable")
        with self._lock:
            self._plugins[(domain, version, action)] = func
        return func

    def register(self, domain: str, version: str, *actions: str):
        """Decorator form of add() for one or more actions."""
        def decorator(func: Callable) -> Callable:
            for action in actions:
                self.add(domain, version, action, func)
            return func
        return decorator

    def resolve(self, domain: str, version: str, action: str) -> Callable:
        """
        Find the plugin for an action, trying the version before 'default'.

        Raises:
            ResolutionError: If neither the version nor 'default' has the action
        """
        with self._lock:
            plugin = self._plugins.get((domain, version, action))
            if plugin is None:
                plugin = self._plugins.get((domain, DEFAULT_VERSION, action))

        if plugin is None:
            raise ResolutionError(f"No {action} validator for {domain} version {version}")
        return plugin

    def actions(self, domain: str, version: str = DEFAULT_VERSION) -> List[str]:
        """Actions with a plugin registered for exactly this domain and version."""
        with self._lock:
            return sorted(a for (d, v, a) in self._plugins if d == domain and v == version)


PLUGINS = PluginRegistry()
