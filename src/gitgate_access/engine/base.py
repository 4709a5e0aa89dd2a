"""Evaluator contract shared by the built-in and third-party engines."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

DENIAL_MARKER = "DENIED"


@dataclass(frozen=True)
class Decision:
    """Outcome of a single evaluation.

    Attributes
    ----------
    verdict:
        Opaque result string; contains ``DENIED`` if and only if access is
        refused.
    trace:
        Encoded decision trail, present only when tracing was requested
        and the engine reached rule evaluation.
    """

    verdict: str
    trace: str | None = None

    @property
    def denied(self) -> bool:
        return DENIAL_MARKER in self.verdict


@runtime_checkable
class Evaluator(Protocol):
    """Decides one ``(repo, user, perm, ref)`` question."""

    def evaluate(
        self,
        repo: str,
        user: str,
        perm: str,
        ref: str,
        *,
        trace: bool = False,
    ) -> Decision: ...
