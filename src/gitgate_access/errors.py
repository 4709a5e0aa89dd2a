"""Exception hierarchy for gitgate-access.

Every failure the query layer can report derives from
:class:`AccessQueryError`.  The CLI maps the three families onto exit codes:

- :class:`UsageError`        : bad arguments or flag combinations (exit 2)
- :class:`ProtocolError`     : evaluator/registry desynchronisation (exit 1)
- :class:`ConfigurationError`: unusable configuration or rule base (exit 1)

A denied verdict is never an exception; it is a normal result.
"""
from __future__ import annotations


class AccessQueryError(Exception):
    """Base class for all gitgate-access errors."""


# ---------------------------------------------------------------------------
# Usage errors
# ---------------------------------------------------------------------------


class UsageError(AccessQueryError, ValueError):
    """Raised when the caller supplied arguments the query layer cannot use."""


class InvalidPermissionError(UsageError):
    """Raised when ``perm`` is not one of the supported permission letters.

    Attributes
    ----------
    perm:
        The rejected permission string.
    """

    def __init__(self, perm: str) -> None:
        self.perm = perm
        super().__init__(f"invalid perm '{perm}'")


class InvalidRefError(UsageError):
    """Raised when a (possibly rewritten) ref fails the ref-name grammar."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"invalid ref '{ref}'")


class IncompatibleModeError(UsageError):
    """Raised when quiet or show mode is combined with batch mode."""


class BatchInputError(UsageError):
    """Raised when a batch input line does not carry enough fields.

    Attributes
    ----------
    line_number:
        1-based number of the offending input line.
    """

    def __init__(self, message: str, line_number: int) -> None:
        self.line_number = line_number
        super().__init__(f"input line {line_number}: {message}")


# ---------------------------------------------------------------------------
# Protocol / corruption errors
# ---------------------------------------------------------------------------


class ProtocolError(AccessQueryError):
    """Raised when evaluator output and on-disk state cannot be reconciled."""


class TraceUnavailableError(ProtocolError):
    """Raised when a trace was requested but the evaluator produced none."""

    def __init__(self, message: str = "no trace available") -> None:
        super().__init__(message)


class MalformedTraceError(ProtocolError):
    """Raised when a decision trail violates the trace grammar.

    Attributes
    ----------
    token:
        The offending token, or ``None`` when the trail ended early.
    position:
        0-based index of the token within the trail.
    """

    def __init__(self, message: str, token: str | None = None, position: int | None = None) -> None:
        self.token = token
        self.position = position
        super().__init__(f"malformed trace: {message}")


class RegistryUnavailableError(ProtocolError):
    """Raised when the rule registry cannot be opened or read."""


class RegistryFormatError(ProtocolError):
    """Raised when a rule registry record is not ``<id> <file> <line>``."""

    def __init__(self, message: str, line_number: int) -> None:
        self.line_number = line_number
        super().__init__(f"rule registry line {line_number}: {message}")


class ConfFileError(ProtocolError):
    """Raised when a configuration file referenced by the registry is unreadable.

    Attributes
    ----------
    conf_file:
        File identifier as recorded in the registry.
    """

    def __init__(self, conf_file: str, reason: str) -> None:
        self.conf_file = conf_file
        super().__init__(f"cannot read conf file '{conf_file}': {reason}")


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class ConfigurationError(AccessQueryError):
    """Raised when the access configuration is unusable."""


class RuleBaseError(ConfigurationError, ValueError):
    """Raised when a compiled rule base file is malformed.

    Attributes
    ----------
    rules_path:
        Path to the rule base that caused the error, if known.
    """

    def __init__(self, message: str, rules_path: str | None = None) -> None:
        self.rules_path = rules_path
        prefix = f"[{rules_path}] " if rules_path else ""
        super().__init__(f"{prefix}{message}")


class EvaluatorLoadError(ConfigurationError):
    """Raised when the configured evaluator cannot be located or built."""
