"""Decision-trail decoding and rendering.

The evaluator records every rule it considered as a rule id followed by
the outcome letters it accumulated, and a bare ``F`` when evaluation fell
through, e.g.::

     12 d  13 dr  17 drpA

Only the last letter of each outcome token matters.  The id and its
outcome token normally arrive as separate whitespace-delimited tokens but
may also be fused (``12d``); both forms decode to the same events.

Example
-------
>>> decoder = TraceDecoder(resolver)
>>> for line in decoder.render(" 12 d  F"):
...     print(line)
  d       gitolite.conf:4 repo testing
  F            (fallthru)
"""
from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from gitgate_access.errors import MalformedTraceError, TraceUnavailableError
from gitgate_access.provenance.resolver import RuleInfo

logger = logging.getLogger(__name__)

_ID_TOKEN = re.compile(r"[0-9]+")
_OUTCOME_TOKEN = re.compile(r"[A-Za-z]+")
_FUSED_TOKEN = re.compile(r"([0-9]+)([A-Za-z]+)")

LOCATION_WIDTH = 20


class OutcomeCode(str, enum.Enum):
    """How the evaluator disposed of a rule."""

    DENY_SKIPPED = "d"
    REFEX_MISMATCH = "r"
    PERM_MISMATCH = "p"
    DENIED = "D"
    ALLOWED = "A"
    FALLTHROUGH = "F"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[OutcomeCode, str] = {
    OutcomeCode.DENY_SKIPPED: "skipped deny rule due to ref unknown or 'any',",
    OutcomeCode.REFEX_MISMATCH: "skipped due to refex not matching,",
    OutcomeCode.PERM_MISMATCH: "skipped due to perm (W, +, etc) not matching,",
    OutcomeCode.DENIED: "explicitly denied,",
    OutcomeCode.ALLOWED: "explicitly allowed,",
    OutcomeCode.FALLTHROUGH: "fell through; no more rules to check",
}

_RULE_OUTCOMES: dict[str, OutcomeCode] = {
    code.value: code for code in OutcomeCode if code is not OutcomeCode.FALLTHROUGH
}


@dataclass(frozen=True)
class TraceEvent:
    """One decoded trail entry; ``rule_id`` is ``None`` for fallthrough."""

    code: OutcomeCode
    rule_id: int | None = None


class RuleResolver(Protocol):
    def resolve(self, rule_ids: Iterable[int]) -> dict[int, RuleInfo]: ...


class _State(enum.Enum):
    EXPECT_ID_OR_F = enum.auto()
    EXPECT_OUTCOME = enum.auto()


def _outcome(letters: str, token: str, position: int) -> OutcomeCode:
    code = _RULE_OUTCOMES.get(letters[-1])
    if code is None:
        raise MalformedTraceError(f"unknown outcome code in {token!r}", token, position)
    return code


def parse_trail(trail: str) -> list[TraceEvent]:
    """Decode a decision trail into ordered events.

    Raises
    ------
    MalformedTraceError
        On any token that is neither a rule id, an outcome token in the
        right position, a fused id+outcome token, nor ``F``; or when the
        trail ends right after a rule id.  Outcome tokens must be letters
        only (``d``, ``dr``, ``drpA``); the last letter is the outcome and
        the rest are discarded, so ``12 d1`` is rejected.
    """
    events: list[TraceEvent] = []
    state = _State.EXPECT_ID_OR_F
    pending_id: int | None = None

    for position, token in enumerate(trail.split()):
        if state is _State.EXPECT_OUTCOME:
            if not _OUTCOME_TOKEN.fullmatch(token):
                raise MalformedTraceError(
                    f"expected outcome after rule {pending_id}, got {token!r}", token, position
                )
            events.append(TraceEvent(_outcome(token, token, position), pending_id))
            pending_id = None
            state = _State.EXPECT_ID_OR_F
            continue

        if token == OutcomeCode.FALLTHROUGH.value:
            events.append(TraceEvent(OutcomeCode.FALLTHROUGH))
        elif _ID_TOKEN.fullmatch(token):
            pending_id = int(token)
            state = _State.EXPECT_OUTCOME
        elif match := _FUSED_TOKEN.fullmatch(token):
            events.append(TraceEvent(_outcome(match.group(2), token, position), int(match.group(1))))
        else:
            raise MalformedTraceError(f"unexpected token {token!r}", token, position)

    if state is _State.EXPECT_OUTCOME:
        raise MalformedTraceError(f"trail ends before the outcome of rule {pending_id}")
    return events


def legend() -> list[str]:
    """The six fixed lines explaining each outcome code."""
    return [f"  {code.value} => {code.description}" for code in OutcomeCode]


def render_event(event: TraceEvent, info: RuleInfo | None) -> str:
    """Format one event as a diagnostic line."""
    if event.code is OutcomeCode.FALLTHROUGH:
        return f"  {event.code.value}  {'(fallthru)':>{LOCATION_WIDTH}}"
    if info is None:
        return f"  {event.code.value}  {f'#{event.rule_id} (unknown)':>{LOCATION_WIDTH}}"
    return f"  {event.code.value}  {info.label:>{LOCATION_WIDTH}} {info.content}"


class TraceDecoder:
    """Renders decision trails against the rule registry.

    Parameters
    ----------
    resolver:
        Anything with ``resolve(ids) -> {id: RuleInfo}``; normally a
        :class:`~gitgate_access.provenance.resolver.RuleInfoResolver`.
    """

    def __init__(self, resolver: RuleResolver) -> None:
        self._resolver = resolver

    def decode(self, trail: str | None) -> list[tuple[TraceEvent, RuleInfo | None]]:
        """Parse ``trail`` and resolve its rule ids in a single batch."""
        if trail is None:
            raise TraceUnavailableError()
        events = parse_trail(trail)
        rule_ids = {event.rule_id for event in events if event.rule_id is not None}
        infos = self._resolver.resolve(rule_ids) if rule_ids else {}
        missing = rule_ids - infos.keys()
        if missing:
            logger.debug("Rendering %d rules without registry info: %s", len(missing), sorted(missing))
        return [
            (event, infos.get(event.rule_id) if event.rule_id is not None else None)
            for event in events
        ]

    def render(self, trail: str | None) -> Iterator[str]:
        """Yield one diagnostic line per trail event, in trail order.

        The trail is parsed and resolved before the first line is yielded,
        so a malformed trail produces no output at all.
        """
        decoded = self.decode(trail)
        for event, info in decoded:
            yield render_event(event, info)
