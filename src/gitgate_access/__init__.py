"""gitgate-access: explainable access queries for git hosting rule bases.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import gitgate_access as access
>>> access.__version__
'0.1.0'
>>> query = access.normalize_query("testing", "alice", "W", "master")
>>> query.ref
'refs/heads/master'
"""
from __future__ import annotations

__version__: str = "0.1.0"

from gitgate_access.convenience import AccessChecker

# ---------------------------------------------------------------------------
# Queries and configuration
# ---------------------------------------------------------------------------
from gitgate_access.config import AccessConfig, ConfigLoader
from gitgate_access.query import Query, normalize_query, qualify_ref

# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------
from gitgate_access.engine import (
    Decision,
    Evaluator,
    RuleBase,
    RuleBaseEvaluator,
    RuleBaseLoader,
    load_evaluator,
)
from gitgate_access.batch import BatchResult, BatchStreamEvaluator
from gitgate_access.presenter import ResultPresenter, exit_status

# ---------------------------------------------------------------------------
# Provenance
# ---------------------------------------------------------------------------
from gitgate_access.provenance import (
    ConfLineCache,
    OutcomeCode,
    RuleInfo,
    RuleInfoResolver,
    RuleRegistryScanner,
    TraceDecoder,
)

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from gitgate_access.errors import (
    AccessQueryError,
    ConfigurationError,
    ProtocolError,
    UsageError,
)

__all__ = [
    "__version__",
    "AccessChecker",
    # Queries and configuration
    "AccessConfig",
    "ConfigLoader",
    "Query",
    "normalize_query",
    "qualify_ref",
    # Evaluation
    "Decision",
    "Evaluator",
    "RuleBase",
    "RuleBaseEvaluator",
    "RuleBaseLoader",
    "load_evaluator",
    "BatchResult",
    "BatchStreamEvaluator",
    "ResultPresenter",
    "exit_status",
    # Provenance
    "ConfLineCache",
    "OutcomeCode",
    "RuleInfo",
    "RuleInfoResolver",
    "RuleRegistryScanner",
    "TraceDecoder",
    # Errors
    "AccessQueryError",
    "ConfigurationError",
    "ProtocolError",
    "UsageError",
]
