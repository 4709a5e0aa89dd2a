"""Convenience API for gitgate-access: ask, explain, batch.

Example
-------
::

    from gitgate_access import AccessChecker, normalize_query
    checker = AccessChecker.from_admin_base("/srv/gitgate")
    decision = checker.check(normalize_query("testing", "alice", "W", "master"), trace=True)
    print(decision.verdict)
    for line in checker.explain(decision):
        print(line)

"""
from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from gitgate_access.batch import BatchResult, BatchStreamEvaluator
from gitgate_access.config import AccessConfig
from gitgate_access.engine.base import Decision, Evaluator
from gitgate_access.engine.loader import load_evaluator
from gitgate_access.provenance.conf_lines import ConfLineCache
from gitgate_access.provenance.decoder import TraceDecoder
from gitgate_access.provenance.registry import RuleRegistryScanner
from gitgate_access.provenance.resolver import RuleInfoResolver
from gitgate_access.query import Query


class AccessChecker:
    """Wires the configured evaluator to the provenance subsystem.

    The evaluator is built on first use so that usage errors surface
    before any rule base is read.

    Parameters
    ----------
    config:
        Access configuration.  Defaults to :class:`AccessConfig` defaults.
    evaluator:
        Pre-built evaluator; when omitted, ``config.evaluator`` is loaded.
    """

    def __init__(self, config: AccessConfig | None = None, evaluator: Evaluator | None = None) -> None:
        self._config = config if config is not None else AccessConfig()
        self._evaluator = evaluator
        self._cache = ConfLineCache(self._config.conf_path)
        self._resolver = RuleInfoResolver(RuleRegistryScanner(self._config.registry_path), self._cache)

    @classmethod
    def from_admin_base(cls, admin_base: str | Path) -> "AccessChecker":
        return cls(AccessConfig(admin_base=Path(admin_base)))

    def check(self, query: Query, trace: bool = False) -> Decision:
        """Evaluate a single, non-batch query."""
        return self.evaluator.evaluate(query.repo, query.user, query.perm, query.ref, trace=trace)

    def explain(self, decision: Decision) -> Iterator[str]:
        """Render the decision's trail, one diagnostic line per rule."""
        return TraceDecoder(self._resolver).render(decision.trace)

    def batch(self, query: Query, stream: TextIO) -> Iterator[BatchResult]:
        """Evaluate every repo/user pair read from ``stream``."""
        return BatchStreamEvaluator(self.evaluator).run(query, stream)

    @property
    def evaluator(self) -> Evaluator:
        if self._evaluator is None:
            self._evaluator = load_evaluator(self._config)
        return self._evaluator

    @property
    def config(self) -> AccessConfig:
        return self._config

    @property
    def line_cache(self) -> ConfLineCache:
        return self._cache

    def __repr__(self) -> str:
        return f"AccessChecker(admin_base={str(self._config.admin_base)!r}, evaluator={self._config.evaluator!r})"
