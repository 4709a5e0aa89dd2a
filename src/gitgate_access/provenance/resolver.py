"""Joins registry locations with configuration source text."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from gitgate_access.provenance.conf_lines import ConfLineCache
from gitgate_access.provenance.registry import RuleRegistryScanner


@dataclass(frozen=True)
class RuleInfo:
    """A rule identifier resolved to its defining source line."""

    rule_id: int
    file: str
    line: int
    content: str

    @property
    def label(self) -> str:
        return f"{self.file}:{self.line}"


class RuleInfoResolver:
    """Resolves batches of rule ids to :class:`RuleInfo` records.

    Parameters
    ----------
    scanner:
        Registry scanner used for the id -> location step.
    cache:
        Line cache used for the location -> text step.  Share one cache
        between resolvers to avoid re-reading configuration files.
    """

    def __init__(self, scanner: RuleRegistryScanner, cache: ConfLineCache) -> None:
        self._scanner = scanner
        self._cache = cache

    def resolve(self, rule_ids: Iterable[int]) -> dict[int, RuleInfo]:
        """Resolve every id in one registry pass.

        Ids missing from the registry are left out of the result.
        """
        locations = self._scanner.scan(rule_ids)
        return {
            rule_id: RuleInfo(
                rule_id=rule_id,
                file=loc.file,
                line=loc.line,
                content=self._cache.line(loc.file, loc.line),
            )
            for rule_id, loc in locations.items()
        }

    @property
    def cache(self) -> ConfLineCache:
        return self._cache
