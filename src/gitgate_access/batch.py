"""Streaming evaluation of many repo/user pairs in one process.

When ``repo`` or ``user`` is ``%`` the pairs are read from an input
stream, one per line.  Each wildcard consumes the next whitespace-separated
field of the line (repo first, then user); a literal argument is used as-is.

Example
-------
>>> batch = BatchStreamEvaluator(evaluator)
>>> query = normalize_query("testing", "%", "R")
>>> for result in batch.run(query, io.StringIO("alice\\nbob\\n")):
...     print(result.line)
testing	alice	refs/.*
testing	bob	R any testing bob DENIED by fallthru
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TextIO

from gitgate_access.engine.base import Evaluator
from gitgate_access.errors import BatchInputError, IncompatibleModeError, UsageError
from gitgate_access.presenter import format_batch_line
from gitgate_access.query import WILDCARD, Query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    """Verdict for one input line."""

    repo: str
    user: str
    verdict: str

    @property
    def line(self) -> str:
        return format_batch_line(self.repo, self.user, self.verdict)


def ensure_batch_compatible(quiet: bool, show: bool) -> None:
    """Reject output modes that make no sense for many verdicts."""
    if quiet or show:
        raise IncompatibleModeError("-q and -s cannot be used with '%' (batch mode)")


def read_lines(stream: TextIO) -> Iterator[str]:
    """Yield lines as they arrive, without read-ahead."""
    while True:
        line = stream.readline()
        if not line:
            return
        yield line


class BatchStreamEvaluator:
    """Runs one evaluation per input line with a shared perm and ref.

    Parameters
    ----------
    evaluator:
        The engine to consult.  Its failures propagate unchanged.
    """

    def __init__(self, evaluator: Evaluator) -> None:
        self._evaluator = evaluator

    def run(self, query: Query, stream: TextIO) -> Iterator[BatchResult]:
        """Evaluate every pair read from ``stream`` in input order.

        Whitespace-only lines are skipped; extra fields are ignored.

        Raises
        ------
        UsageError
            When ``query`` has no wildcard.
        BatchInputError
            When a line has fewer fields than there are wildcards.
        """
        if not query.is_batch:
            raise UsageError("batch mode needs '%' as repo or user")
        wanted = (query.repo == WILDCARD) + (query.user == WILDCARD)

        count = 0
        for line_number, raw in enumerate(read_lines(stream), start=1):
            fields = raw.split()
            if not fields:
                continue
            if len(fields) < wanted:
                raise BatchInputError(f"expected {wanted} fields, got {len(fields)}", line_number)
            repo = fields.pop(0) if query.repo == WILDCARD else query.repo
            user = fields.pop(0) if query.user == WILDCARD else query.user
            decision = self._evaluator.evaluate(repo, user, query.perm, query.ref)
            count += 1
            yield BatchResult(repo, user, decision.verdict)
        logger.debug("Batch evaluated %d pairs", count)
