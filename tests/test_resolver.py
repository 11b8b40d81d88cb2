"""
Validator resolution from configured locators.
"""

import importlib
from unittest.mock import patch

import pytest

from flowreport.core.config import ValidationConfig
from flowreport.core.errors import ConfigurationError, ResolutionError
from flowreport.core.resolver import ValidatorResolver, register_entry_point, registered_entry_points, split_locator
from flowreport.validations import TRV11_ENTRY_POINT, register_builtin_validators
from flowreport.validations.trv11 import validate


def _config(modules):
    return ValidationConfig.model_validate({"validationModules": modules})


class TestLocatorSelection:

    def test_exact_version_wins(self):
        resolver = ValidatorResolver(config=_config({"D": {"1.0": "a#one", "default": "a#default"}}), entry_points={})
        assert resolver.locator_for("D", "1.0") == "a#one"

    def test_falls_back_to_default(self):
        resolver = ValidatorResolver(config=_config({"D": {"1.0": "a#one", "default": "a#default"}}), entry_points={})
        assert resolver.locator_for("D", "2.0") == "a#default"

    def test_unknown_domain(self):
        resolver = ValidatorResolver(config=_config({"D": {"default": "a#default"}}), entry_points={})
        with pytest.raises(ConfigurationError, match="No validation modules configured for domain: X"):
            resolver.locator_for("X", "1.0")

    def test_no_version_and_no_default(self):
        resolver = ValidatorResolver(config=_config({"D": {"1.0": "a#one"}}), entry_points={})
        with pytest.raises(ResolutionError):
            resolver.locator_for("D", "2.0")

    def test_bundled_configuration(self):
        register_builtin_validators()
        resolver = ValidatorResolver()
        for version in ("2.0.0", "2.0.1", "3.0.0"):
            assert resolver.resolve("ONDC:TRV11", version) is validate


class TestLoading:

    def test_registered_entry_point_is_used_without_import(self):
        def stub(*args):
            return None

        resolver = ValidatorResolver(config=_config({"D": {"default": "nowhere.module#stub"}}),
                                     entry_points={"nowhere.module#stub": stub})

        with patch('flowreport.core.resolver.importlib.import_module') as mock_import:
            assert resolver.resolve("D") is stub
            mock_import.assert_not_called()

    def test_unregistered_locator_is_imported_once(self):
        resolver = ValidatorResolver(config=_config({"D": {"default": TRV11_ENTRY_POINT}}), entry_points={})

        with patch('flowreport.core.resolver.importlib.import_module',
                   wraps=importlib.import_module) as mock_import:
            first = resolver.resolve("D", "1.0")
            second = resolver.resolve("D", "2.0")

        assert first is second is validate
        assert mock_import.call_count == 1

    def test_missing_module(self):
        resolver = ValidatorResolver(config=_config({}), entry_points={})
        with pytest.raises(ResolutionError, match="not found"):
            resolver.load("flowreport.validations.no_such_domain#validate")

    def test_missing_function(self):
        resolver = ValidatorResolver(config=_config({}), entry_points={})
        with pytest.raises(ResolutionError, match="not found"):
            resolver.load("flowreport.validations.trv11#no_such_function")

    def test_member_not_callable(self):
        resolver = ValidatorResolver(config=_config({}), entry_points={})
        with pytest.raises(ResolutionError, match="not callable"):
            resolver.load("flowreport.core.flows#ACTIONS")

    def test_clear_cache_forces_reload(self):
        resolver = ValidatorResolver(config=_config({}), entry_points={})
        resolver.load(TRV11_ENTRY_POINT)
        resolver.clear_cache()

        with patch.object(resolver, '_import', return_value=validate) as mock_import:
            resolver.load(TRV11_ENTRY_POINT)
            mock_import.assert_called_once_with(TRV11_ENTRY_POINT)


class TestRegistry:

    def test_register_entry_point(self):
        def stub(*args):
            return None

        register_entry_point("tests.registry#stub", stub)
        assert registered_entry_points()["tests.registry#stub"] is stub

    def test_register_rejects_non_callable(self):
        with pytest.raises(ResolutionError):
            register_entry_point("tests.registry#value", 42)

    @pytest.mark.parametrize("locator", ["", "module.only", "#function", "module#"])
    def test_split_locator_rejects_malformed(self, locator):
        with pytest.raises(ResolutionError):
            split_locator(locator)

    def test_split_locator(self):
        assert split_locator("a.b.c#run") == ("a.b.c", "run")
