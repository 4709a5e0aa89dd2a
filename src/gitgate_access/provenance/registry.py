"""Streaming reader for the append-only rule registry.

Each registry line is ``<rule_id> <conf_file> <line_number>``.  The file
grows with every configuration compile and can be large, while a single
trace references a handful of ids, so the scanner reads from the start
and stops as soon as every requested id has been seen.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from gitgate_access.errors import RegistryFormatError, RegistryUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleLocation:
    """Where a rule was defined."""

    rule_id: int
    file: str
    line: int

    @property
    def label(self) -> str:
        return f"{self.file}:{self.line}"


def parse_record(raw: str, line_number: int) -> RuleLocation | None:
    """Parse one registry line; blank lines yield ``None``."""
    fields = raw.split()
    if not fields:
        return None
    if len(fields) != 3:
        raise RegistryFormatError(f"expected 3 fields, got {len(fields)}", line_number)
    rule_id, conf_file, lineno = fields
    try:
        return RuleLocation(rule_id=int(rule_id), file=conf_file, line=int(lineno))
    except ValueError as exc:
        raise RegistryFormatError(f"non-numeric id or line in {raw.strip()!r}", line_number) from exc


def scan_lines(rule_ids: Iterable[int], lines: Iterable[str]) -> dict[int, RuleLocation]:
    """Find ``rule_ids`` in a stream of registry lines.

    Lines are consumed lazily and consumption stops right after the last
    pending id is found.  Ids never found are absent from the result.
    The first record for an id wins.
    """
    pending = set(rule_ids)
    found: dict[int, RuleLocation] = {}
    if not pending:
        return found

    for line_number, raw in enumerate(lines, start=1):
        record = parse_record(raw, line_number)
        if record is None or record.rule_id not in pending:
            continue
        found[record.rule_id] = record
        pending.discard(record.rule_id)
        if not pending:
            logger.debug("All requested rules found after %d registry lines", line_number)
            break
    else:
        if pending:
            logger.debug("Rules not in registry: %s", sorted(pending))
    return found


class RuleRegistryScanner:
    """Looks up rule locations in a registry file.

    Parameters
    ----------
    registry_path:
        Path to the registry file (usually ``<admin_base>/conf/rule_info``).
    """

    def __init__(self, registry_path: Path) -> None:
        self._registry_path = registry_path

    def scan(self, rule_ids: Iterable[int]) -> dict[int, RuleLocation]:
        """Return the locations of every requested id present in the registry.

        Raises
        ------
        RegistryUnavailableError
            When the registry cannot be opened or read.
        RegistryFormatError
            When a record read before the scan stops is malformed.
        """
        pending = set(rule_ids)
        if not pending:
            return {}
        try:
            with self._registry_path.open("r", encoding="utf-8") as fh:
                return scan_lines(pending, fh)
        except (OSError, UnicodeDecodeError) as exc:
            raise RegistryUnavailableError(
                f"cannot read rule registry {self._registry_path}: {exc}"
            ) from exc

    @property
    def registry_path(self) -> Path:
        return self._registry_path
