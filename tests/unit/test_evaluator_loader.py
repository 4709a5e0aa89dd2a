"""Tests for evaluator discovery."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gitgate_access.config import AccessConfig
from gitgate_access.engine.base import Decision, Evaluator
from gitgate_access.engine.loader import EVALUATOR_GROUP, find_factory, import_object, load_evaluator
from gitgate_access.engine.rulebase import RuleBaseEvaluator
from gitgate_access.errors import EvaluatorLoadError


class AlwaysAllow:
    def evaluate(self, repo: str, user: str, perm: str, ref: str, *, trace: bool = False) -> Decision:
        return Decision("refs/.*", " F" if trace else None)


def always_allow_factory(config: AccessConfig) -> AlwaysAllow:
    return AlwaysAllow()


def not_an_evaluator(config: AccessConfig) -> object:
    return object()


class TestImportObject:
    def test_dotted_attribute(self) -> None:
        target = import_object("gitgate_access.engine.rulebase:RuleBaseEvaluator.from_config")
        assert target == RuleBaseEvaluator.from_config

    def test_missing_colon_raises(self) -> None:
        with pytest.raises(EvaluatorLoadError, match="module:attribute"):
            import_object("gitgate_access.engine.rulebase")

    def test_missing_module_raises(self) -> None:
        with pytest.raises(EvaluatorLoadError, match="Cannot import"):
            import_object("no_such_module_xyz:thing")

    def test_missing_attribute_raises(self) -> None:
        with pytest.raises(EvaluatorLoadError, match="no attribute 'nope'"):
            import_object("gitgate_access.engine.rulebase:nope")


class TestFindFactory:
    def test_builtin_rulebase(self) -> None:
        assert find_factory("rulebase") == RuleBaseEvaluator.from_config

    def test_import_path(self) -> None:
        assert find_factory(f"{__name__}:always_allow_factory") is always_allow_factory

    def test_non_callable_raises(self) -> None:
        with pytest.raises(EvaluatorLoadError, match="callable"):
            find_factory(f"{__name__}:EVALUATOR_GROUP")

    def test_entry_point_lookup(self) -> None:
        entry_point = MagicMock()
        entry_point.load.return_value = always_allow_factory
        with patch("gitgate_access.engine.loader.entry_points", return_value=[entry_point]) as eps:
            assert find_factory("ldap") is always_allow_factory
        eps.assert_called_once_with(group=EVALUATOR_GROUP, name="ldap")

    def test_unknown_entry_point_raises(self) -> None:
        with patch("gitgate_access.engine.loader.entry_points", return_value=[]):
            with pytest.raises(EvaluatorLoadError, match="No evaluator named 'ghost'"):
                find_factory("ghost")

    def test_entry_point_import_failure(self) -> None:
        entry_point = MagicMock()
        entry_point.load.side_effect = ImportError("boom")
        with patch("gitgate_access.engine.loader.entry_points", return_value=[entry_point]):
            with pytest.raises(EvaluatorLoadError, match="boom"):
                find_factory("broken")


class TestLoadEvaluator:
    def test_default_is_rulebase(self, admin_base: Path) -> None:
        evaluator = load_evaluator(AccessConfig(admin_base=admin_base))
        assert isinstance(evaluator, RuleBaseEvaluator)
        assert isinstance(evaluator, Evaluator)

    def test_custom_factory(self, tmp_path: Path) -> None:
        config = AccessConfig(admin_base=tmp_path, evaluator=f"{__name__}:always_allow_factory")
        evaluator = load_evaluator(config)
        assert evaluator.evaluate("r", "u", "R", "any").verdict == "refs/.*"

    def test_factory_result_without_evaluate_rejected(self, tmp_path: Path) -> None:
        config = AccessConfig(admin_base=tmp_path, evaluator=f"{__name__}:not_an_evaluator")
        with pytest.raises(EvaluatorLoadError, match="no evaluate"):
            load_evaluator(config)

    def test_rulebase_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_evaluator(AccessConfig(admin_base=tmp_path))
