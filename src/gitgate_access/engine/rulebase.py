"""Reference evaluator over a compiled, ordered rule base.

The rule base is the output of a configuration compile, stored as YAML
next to the rule registry.  Rules keep the ids the registry knows them by.

Schema
------
::

    version: "1"
    deny_rules: false          # apply deny rules even when ref is 'any'
    groups:
      devs: [alice, bob]
    rules:
      - id: 12
        repo: testing          # regex, full match; '@all' matches any repo
        users: ["@devs"]       # user names, '@group' or '@all'
        perm: RW+              # -, C, R, RW, RW+, optionally followed by C, D, M
        refex: refs/heads/     # prefix regex; '/USER/' becomes '/<user>/'

Evaluation walks the applicable rules in order.  For each rule it records
the id, then writes a check's letter before running it: ``d`` (deny rule
skipped for ref ``any``), ``r`` (refex) and ``p`` (permission), followed
by ``D`` or ``A`` for an explicit result.  The last letter of a rule's
token is therefore the check that skipped it, or the result it produced.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from gitgate_access.config import AccessConfig
from gitgate_access.engine.base import Decision
from gitgate_access.errors import RuleBaseError
from gitgate_access.query import ANY_REF, CREATE_PERM

logger = logging.getLogger(__name__)

ALL = "@all"
DEFAULT_REFEX = "refs/.*"
DENY_PERM = "-"
CREATE_RULE_PERM = "C"

_PERM_PATTERN = re.compile(r"^(-|C|R|RW\+?C?D?M?)$")
_SUPPORTED_VERSIONS: frozenset[str] = frozenset(["1", "1.0"])


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class CompiledRule(BaseModel):
    """One access rule as emitted by the configuration compiler."""

    model_config = {"extra": "allow", "frozen": True}

    id: int = Field(ge=0)
    repo: str = Field(min_length=1)
    users: list[str] = Field(min_length=1)
    perm: str
    refex: str = Field(default=DEFAULT_REFEX)

    @field_validator("perm")
    @classmethod
    def validate_perm(cls, value: str) -> str:
        if not _PERM_PATTERN.match(value):
            raise ValueError(f"Invalid rule permission '{value}'")
        return value

    @field_validator("repo", "refex")
    @classmethod
    def validate_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"Invalid regex '{value}': {exc}") from exc
        return value

    @property
    def is_deny(self) -> bool:
        return self.perm == DENY_PERM

    def matches_repo(self, repo: str) -> bool:
        return self.repo == ALL or re.fullmatch(self.repo, repo) is not None

    def matches_ref(self, ref: str, user: str) -> bool:
        refex = self.refex.replace("/USER/", f"/{user}/")
        return ref == ANY_REF or re.match(refex, ref) is not None

    def grants(self, perm: str) -> bool:
        """True when this (non-deny) rule's permission covers ``perm``."""
        if perm == CREATE_PERM or self.perm == CREATE_RULE_PERM:
            return perm == CREATE_PERM and self.perm == CREATE_RULE_PERM
        return perm in self.perm


class RuleBase(BaseModel):
    """The full ordered rule list plus user groups."""

    model_config = {"extra": "allow"}

    version: str = Field(default="1")
    deny_rules: bool = Field(default=False)
    groups: dict[str, list[str]] = Field(default_factory=dict)
    rules: list[CompiledRule] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def validate_version(cls, value: object) -> str:
        version = str(value)
        if version not in _SUPPORTED_VERSIONS:
            raise ValueError(
                f"Unsupported rule base version {version!r}. Supported: {sorted(_SUPPORTED_VERSIONS)}."
            )
        return version

    def identities(self, user: str) -> set[str]:
        """Every name a rule may use to refer to ``user``."""
        names = {user, ALL}
        names.update(f"@{group}" for group, members in self.groups.items() if user in members)
        return names

    def rules_for(self, repo: str, user: str) -> list[CompiledRule]:
        """Rules that apply to ``repo`` and ``user``, in evaluation order."""
        names = self.identities(user)
        return [
            rule
            for rule in self.rules
            if rule.matches_repo(repo) and names.intersection(rule.users)
        ]


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class RuleBaseLoader:
    """Loads :class:`RuleBase` objects from YAML files or strings.

    Parameters
    ----------
    strict:
        When ``True``, unknown top-level keys are treated as an error.
    """

    _KNOWN_TOP_KEYS: frozenset[str] = frozenset(["version", "deny_rules", "groups", "rules"])

    def __init__(self, strict: bool = False) -> None:
        self._strict = strict

    def load(self, rules_path: Path) -> RuleBase:
        """Load a rule base from disk.

        Raises
        ------
        FileNotFoundError
            If the rule base does not exist.
        RuleBaseError
            If the file cannot be parsed or is structurally invalid.
        """
        if not rules_path.exists():
            raise FileNotFoundError(f"Rule base not found: {rules_path}")
        with rules_path.open("r", encoding="utf-8") as fh:
            return self.load_string(fh.read(), rules_path=str(rules_path))

    def load_string(self, yaml_string: str, rules_path: str | None = None) -> RuleBase:
        try:
            raw = yaml.safe_load(yaml_string) or {}
        except yaml.YAMLError as exc:
            raise RuleBaseError(f"Failed to parse YAML: {exc}", rules_path) from exc
        return self.load_from_dict(raw, rules_path=rules_path)

    def load_from_dict(self, raw: object, rules_path: str | None = None) -> RuleBase:
        if not isinstance(raw, dict):
            raise RuleBaseError("Rule base must be a YAML mapping (dict).", rules_path)
        if self._strict:
            unknown_keys = set(raw.keys()) - self._KNOWN_TOP_KEYS
            if unknown_keys:
                raise RuleBaseError(f"Unknown top-level keys: {sorted(unknown_keys)}.", rules_path)
        try:
            rule_base = RuleBase.model_validate(raw)
        except ValidationError as exc:
            raise RuleBaseError(str(exc), rules_path) from exc

        logger.info(
            "Loaded %d rules from %s (deny_rules=%s)",
            len(rule_base.rules),
            rules_path or "<dict>",
            rule_base.deny_rules,
        )
        return rule_base


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class RuleBaseEvaluator:
    """Evaluates access questions against a :class:`RuleBase`.

    Parameters
    ----------
    rule_base:
        The compiled rules.
    repo_base:
        Directory of bare repositories, used to short-circuit ``^C`` checks
        for repositories that already exist.  ``None`` disables the check.
    """

    def __init__(self, rule_base: RuleBase, repo_base: Path | None = None) -> None:
        self._rule_base = rule_base
        self._repo_base = repo_base

    @classmethod
    def from_config(cls, config: AccessConfig) -> "RuleBaseEvaluator":
        """Build an evaluator from the configured rule base and repo directory."""
        rule_base = RuleBaseLoader().load(config.rules_path)
        return cls(rule_base, repo_base=config.repo_path)

    def repo_exists(self, repo: str) -> bool:
        if self._repo_base is None:
            return False
        return (self._repo_base / f"{repo}.git").is_dir()

    def evaluate(
        self,
        repo: str,
        user: str,
        perm: str,
        ref: str,
        *,
        trace: bool = False,
    ) -> Decision:
        """Decide whether ``user`` may perform ``perm`` on ``ref`` of ``repo``.

        Returns the matching refex as the verdict on success, or a
        ``... DENIED by ...`` string otherwise.
        """
        if perm == CREATE_PERM and self.repo_exists(repo):
            return Decision(f"{perm} {ref} {repo} {user} DENIED by existence")

        rules = self._rule_base.rules_for(repo, user)
        logger.debug("%d rules apply to %s/%s", len(rules), repo, user)

        trail: list[str] = []
        for rule in rules:
            trail.append(f" {rule.id} ")
            trail.append("d")
            if rule.is_deny and ref == ANY_REF and not self._rule_base.deny_rules:
                continue
            trail.append("r")
            if not rule.matches_ref(ref, user):
                continue
            trail.append("p")
            if rule.is_deny:
                trail.append("D")
                return self._decision(f"{perm} {ref} {repo} {user} DENIED by {rule.refex}", trail, trace)
            if not rule.grants(perm):
                continue
            trail.append("A")
            return self._decision(rule.refex, trail, trace)

        trail.append(" F")
        return self._decision(f"{perm} {ref} {repo} {user} DENIED by fallthru", trail, trace)

    @staticmethod
    def _decision(verdict: str, trail: list[str], trace: bool) -> Decision:
        return Decision(verdict, "".join(trail) if trace else None)

    @property
    def rule_count(self) -> int:
        return len(self._rule_base.rules)

    @property
    def rule_base(self) -> RuleBase:
        return self._rule_base
