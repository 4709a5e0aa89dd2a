"""Locates and builds the configured evaluator.

``AccessConfig.evaluator`` names a factory that takes the
:class:`~gitgate_access.config.AccessConfig` and returns an
:class:`~gitgate_access.engine.base.Evaluator`.  It may be:

- a built-in name (``rulebase``);
- an entry point registered under the ``gitgate_access.evaluators`` group;
- an import path ``package.module:attribute``.

Declare an external engine in pyproject.toml:

.. code-block:: toml

    [project.entry-points."gitgate_access.evaluators"]
    ldap = "my_package.engine:LdapEvaluator.from_config"
"""
from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from importlib.metadata import entry_points

from gitgate_access.config import AccessConfig
from gitgate_access.engine.base import Evaluator
from gitgate_access.errors import EvaluatorLoadError

logger = logging.getLogger(__name__)

EVALUATOR_GROUP = "gitgate_access.evaluators"

_BUILTINS: dict[str, str] = {
    "rulebase": "gitgate_access.engine.rulebase:RuleBaseEvaluator.from_config",
}


def import_object(path: str) -> object:
    """Import ``module:attr.subattr`` and return the attribute."""
    module_name, _, attr_path = path.partition(":")
    if not module_name or not attr_path:
        raise EvaluatorLoadError(f"Evaluator path '{path}' must look like 'module:attribute'")
    try:
        target: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise EvaluatorLoadError(f"Cannot import evaluator module '{module_name}': {exc}") from exc
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as exc:
            raise EvaluatorLoadError(f"'{path}' has no attribute '{attr}'") from exc
    return target


def find_factory(name: str) -> Callable[[AccessConfig], object]:
    """Resolve an evaluator name to its factory callable."""
    if name in _BUILTINS:
        factory = import_object(_BUILTINS[name])
    elif ":" in name:
        factory = import_object(name)
    else:
        matches = entry_points(group=EVALUATOR_GROUP, name=name)
        if not matches:
            raise EvaluatorLoadError(f"No evaluator named '{name}' in entry point group {EVALUATOR_GROUP}")
        entry_point = next(iter(matches))
        try:
            factory = entry_point.load()
        except ImportError as exc:
            raise EvaluatorLoadError(f"Cannot load evaluator entry point '{name}': {exc}") from exc
    if not callable(factory):
        raise EvaluatorLoadError(f"Evaluator '{name}' does not resolve to a callable")
    return factory  # type: ignore[return-value]


def load_evaluator(config: AccessConfig) -> Evaluator:
    """Build the evaluator named by ``config.evaluator``.

    Raises
    ------
    EvaluatorLoadError
        When the factory cannot be found, or returns something without
        an ``evaluate`` method.
    """
    factory = find_factory(config.evaluator)
    evaluator = factory(config)
    if not isinstance(evaluator, Evaluator):
        raise EvaluatorLoadError(
            f"Evaluator '{config.evaluator}' returned {type(evaluator).__name__}, "
            "which has no evaluate() method"
        )
    logger.debug("Using evaluator %s (%s)", config.evaluator, type(evaluator).__name__)
    return evaluator
