"""Verdict output and exit-status mapping.

Exit status follows shell conditionals rather than error semantics::

    if access -q testing alice W master; then echo allowed; fi

A denied verdict is a successful computation, yet exits 1.
"""
from __future__ import annotations

from collections.abc import Iterable

import click

from gitgate_access.engine.base import DENIAL_MARKER
from gitgate_access.provenance.decoder import legend

EXIT_ALLOWED = 0
EXIT_DENIED = 1


def is_denied(verdict: str) -> bool:
    return DENIAL_MARKER in verdict


def exit_status(verdict: str) -> int:
    """1 when the verdict carries the denial marker anywhere, else 0."""
    return EXIT_DENIED if is_denied(verdict) else EXIT_ALLOWED


def format_batch_line(repo: str, user: str, verdict: str) -> str:
    return f"{repo}\t{user}\t{verdict}"


class ResultPresenter:
    """Writes a single-pair result to stdout and, in show mode, stderr.

    Parameters
    ----------
    quiet:
        Suppress the verdict on stdout; the exit status still applies.
    show:
        Write the outcome legend and the rendered trace to stderr.
    """

    def __init__(self, quiet: bool = False, show: bool = False) -> None:
        self._quiet = quiet
        self._show = show

    def present(self, verdict: str, trace_lines: Iterable[str] = ()) -> int:
        """Emit the result and return the process exit status."""
        if self._show:
            # Render fully first: a bad trace must not leave a dangling legend.
            self.show_trace(list(trace_lines))
        if not self._quiet:
            click.echo(verdict)
        return exit_status(verdict)

    @staticmethod
    def show_trace(trace_lines: Iterable[str]) -> None:
        for line in legend():
            click.echo(line, err=True)
        for line in trace_lines:
            click.echo(line, err=True)
        click.echo("", err=True)

    @property
    def quiet(self) -> bool:
        return self._quiet

    @property
    def show(self) -> bool:
        return self._show
