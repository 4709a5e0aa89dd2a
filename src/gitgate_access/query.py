"""Decision query normalisation.

Turns raw positional arguments ``(repo, user, perm?, ref?)`` into a
validated, immutable :class:`Query`.

Example
-------
>>> q = normalize_query("testing", "alice", "W", "master")
>>> q.ref
'refs/heads/master'
>>> normalize_query("testing", "alice").perm
'+'
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from gitgate_access.errors import InvalidPermissionError, InvalidRefError, UsageError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ANY_REF = "any"
WILDCARD = "%"
CREATE_PERM = "^C"
DEFAULT_PERM = "+"
BRANCH_PREFIX = "refs/heads/"
DEFAULT_VIRTUAL_PREFIXES: tuple[str, ...] = ("VREF/",)

PERMISSIONS: frozenset[str] = frozenset(["R", "W", "+", "C", "D", "M", CREATE_PERM])

_REF_PATTERN = re.compile(r"^[0-9a-zA-Z][-0-9a-zA-Z._@/+ :,]*$")


@dataclass(frozen=True)
class Query:
    """A normalised access question.

    Attributes
    ----------
    repo:
        Repository name, or ``%`` to read repositories from batch input.
    user:
        User name, or ``%`` to read users from batch input.
    perm:
        One of ``R W + C D M ^C``.
    ref:
        ``any`` or a fully qualified ref such as ``refs/heads/master``.
    """

    repo: str
    user: str
    perm: str = DEFAULT_PERM
    ref: str = ANY_REF

    @property
    def is_batch(self) -> bool:
        """True when either repo or user is the batch wildcard."""
        return self.repo == WILDCARD or self.user == WILDCARD

    def with_pair(self, repo: str, user: str) -> "Query":
        """Return a copy of this query for a concrete repo/user pair."""
        return Query(repo=repo, user=user, perm=self.perm, ref=self.ref)


def qualify_ref(ref: str, virtual_ref_prefixes: Sequence[str] = DEFAULT_VIRTUAL_PREFIXES) -> str:
    """Prefix a bare branch name with ``refs/heads/``.

    ``any`` and refs already under ``refs/`` or a virtual-ref prefix are
    returned unchanged, so the function is idempotent.
    """
    if ref == ANY_REF or ref.startswith("refs/"):
        return ref
    if any(ref.startswith(prefix) for prefix in virtual_ref_prefixes):
        return ref
    return BRANCH_PREFIX + ref


def is_valid_ref(ref: str) -> bool:
    """True when ``ref`` matches the ref-name grammar.

    ``any`` passes because it is a plain word; virtual refs get no exemption.
    """
    return bool(_REF_PATTERN.match(ref))


def normalize_query(
    repo: str | None,
    user: str | None,
    perm: str | None = None,
    ref: str | None = None,
    *,
    virtual_ref_prefixes: Sequence[str] = DEFAULT_VIRTUAL_PREFIXES,
) -> Query:
    """Fill defaults, qualify the ref and validate the result.

    Parameters
    ----------
    repo, user:
        Mandatory.  Either may be ``%`` to request batch mode.
    perm:
        Defaults to ``+`` when ``None`` or empty.
    ref:
        Defaults to ``any`` when ``None`` or empty.
    virtual_ref_prefixes:
        Namespaces that are left unqualified besides ``refs/``.

    Raises
    ------
    UsageError
        When ``repo`` or ``user`` is missing.
    InvalidPermissionError
        When ``perm`` is not a supported permission.
    InvalidRefError
        When the qualified ref fails the ref-name grammar.
    """
    if not repo:
        raise UsageError("repo name is required")
    if not user:
        raise UsageError("user name is required")

    perm = perm or DEFAULT_PERM
    if perm not in PERMISSIONS:
        raise InvalidPermissionError(perm)

    ref = qualify_ref(ref or ANY_REF, virtual_ref_prefixes)
    if not is_valid_ref(ref):
        raise InvalidRefError(ref)

    return Query(repo=repo, user=user, perm=perm, ref=ref)
