"""Decision provenance: which configuration line produced a verdict, and why.

Example
-------
::

    from gitgate_access.provenance import (
        ConfLineCache,
        RuleInfoResolver,
        RuleRegistryScanner,
        TraceDecoder,
    )

    resolver = RuleInfoResolver(
        RuleRegistryScanner(admin_base / "conf" / "rule_info"),
        ConfLineCache(admin_base / "conf"),
    )
    for line in TraceDecoder(resolver).render(decision.trace):
        print(line)
"""
from __future__ import annotations

from gitgate_access.provenance.conf_lines import ConfLineCache
from gitgate_access.provenance.decoder import (
    OutcomeCode,
    TraceDecoder,
    TraceEvent,
    legend,
    parse_trail,
    render_event,
)
from gitgate_access.provenance.registry import (
    RuleLocation,
    RuleRegistryScanner,
    scan_lines,
)
from gitgate_access.provenance.resolver import RuleInfo, RuleInfoResolver

__all__ = [
    # Line cache
    "ConfLineCache",
    # Registry
    "RuleLocation",
    "RuleRegistryScanner",
    "scan_lines",
    # Resolution
    "RuleInfo",
    "RuleInfoResolver",
    # Decoding
    "OutcomeCode",
    "TraceDecoder",
    "TraceEvent",
    "legend",
    "parse_trail",
    "render_event",
]
