"""Access evaluators.

The query layer only depends on :class:`Evaluator`; the built-in
:class:`RuleBaseEvaluator` reads a compiled YAML rule base.
"""
from __future__ import annotations

from gitgate_access.engine.base import DENIAL_MARKER, Decision, Evaluator
from gitgate_access.engine.loader import EVALUATOR_GROUP, load_evaluator
from gitgate_access.engine.rulebase import (
    CompiledRule,
    RuleBase,
    RuleBaseEvaluator,
    RuleBaseLoader,
)

__all__ = [
    "DENIAL_MARKER",
    "Decision",
    "Evaluator",
    "EVALUATOR_GROUP",
    "load_evaluator",
    "CompiledRule",
    "RuleBase",
    "RuleBaseEvaluator",
    "RuleBaseLoader",
]
