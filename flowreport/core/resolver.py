"""
Validator resolution.
Maps (domain, protocol version) to a validator entry point through the configured
locators, falling back to the domain's 'default' locator.
"""

import importlib
import threading
from typing import Callable, Dict, Optional

from .config import ValidationConfig, load_validation_config
from .errors import ConfigurationError, ResolutionError
from .schema import DEFAULT_VERSION
from ..util.logging import logger

# Entry points registered at startup, keyed by locator ("module.path#function")
_ENTRY_POINTS: Dict[str, Callable] = {}


def register_entry_point(locator: str, func: Callable) -> Callable:
    """Register a callable under a locator so resolution never has to import it."""
    if not callable(func):
        raise ResolutionError(f"Validator for '{locator}' is not callable")
    _ENTRY_POINTS[locator] = func
    return func


def registered_entry_points() -> Dict[str, Callable]:
    return dict(_ENTRY_POINTS)


def split_locator(locator: str):
    """Split 'module.path#function' into its parts."""
    module_path, _, function_name = (locator or "").partition("#")
    if not module_path or not function_name:
        raise ResolutionError(f"Invalid validator locator: '{locator}'")
    return module_path, function_name


class ValidatorResolver:
    """
    Resolves validator entry points for a domain and protocol version.

    Resolved locators are cached for the lifetime of the resolver.
    """

    def __init__(self, config: Optional[ValidationConfig] = None,
                 entry_points: Optional[Dict[str, Callable]] = None):
        self.config = config if config is not None else load_validation_config()
        self._entry_points = entry_points
        self._cache: Dict[str, Callable] = {}
        self._lock = threading.Lock()

    def locator_for(self, domain: str, version: str = DEFAULT_VERSION) -> str:
        """
        Pick the locator configured for a domain and version.

        Raises:
            ConfigurationError: If the domain has no configuration entry
            ResolutionError: If neither the version nor 'default' is configured
        """
        domain_config = self.config.validation_modules.get(domain) if domain else None
        if not domain_config:
            raise ConfigurationError(f"No validation modules configured for domain: {domain}")

        locator = domain_config.get(version or DEFAULT_VERSION) or domain_config.get(DEFAULT_VERSION)
        if not locator:
            raise ResolutionError(f"No validator configured for domain '{domain}' version '{version}'")
        return locator

    def resolve(self, domain: str, version: str = DEFAULT_VERSION) -> Callable:
        """Resolve the validator entry point for a domain and version."""
        return self.load(self.locator_for(domain, version))

    def load(self, locator: str) -> Callable:
        """Turn a locator into a callable, using the registry before importing."""
        with self._lock:
            if locator in self._cache:
                return self._cache[locator]

        entry_points = self._entry_points if self._entry_points is not None else _ENTRY_POINTS
        func = entry_points.get(locator)
        if func is None:
            func = self._import(locator)

        with self._lock:
            self._cache[locator] = func
        return func

    def _import(self, locator: str) -> Callable:
        module_path, function_name = split_locator(locator)
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.error(f"Error loading validator module '{module_path}': {e}")
            raise ResolutionError(f"Validator module '{module_path}' not found") from e

        func = getattr(module, function_name, None)
        if func is None:
            raise ResolutionError(f"Validator function '{function_name}' not found in '{module_path}'")
        if not callable(func):
            raise ResolutionError(f"Validator '{function_name}' in '{module_path}' is not callable")

        logger.log_operation("resolver.import", "success", {"locator": locator})
        return func

    def clear_cache(self):
        with self._lock:
            self._cache.clear()
