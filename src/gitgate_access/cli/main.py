"""CLI entry point for gitgate-access.

Invoked as::

    access [-q|-s] <repo> <user> [<perm> [<ref>]]

or during development::

    python -m gitgate_access.cli.main

Arguments
---------
- repo, user   mandatory; ``%`` in either reads pairs from stdin (batch mode)
- perm         one of R W + C D M ^C, default ``+``
- ref          ``any`` (default) or a ref; bare names become ``refs/heads/<name>``

Exit status is 0 when access is allowed and 1 when it is denied, so the
command reads naturally in shell conditionals.  Usage errors exit 2.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from gitgate_access.batch import ensure_batch_compatible
from gitgate_access.config import AccessConfig, ConfigLoader
from gitgate_access.convenience import AccessChecker
from gitgate_access.errors import AccessQueryError, UsageError
from gitgate_access.presenter import ResultPresenter
from gitgate_access.query import WILDCARD, normalize_query

err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("gitgate.yaml")
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _configure_logging(debug: bool) -> None:
    package_logger = logging.getLogger("gitgate_access")
    package_logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=err_console, show_time=False, show_path=False))


def _load_config(config_path: Path | None, admin_base: Path | None) -> AccessConfig:
    loader = ConfigLoader()
    if config_path is not None:
        config = loader.load(config_path)
    elif _DEFAULT_CONFIG.exists():
        config = loader.load(_DEFAULT_CONFIG)
    else:
        config = loader.defaults()
    if admin_base is not None:
        config = config.model_copy(update={"admin_base": admin_base.expanduser()})
    return config


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    sys.exit(1)


@click.command(name="access", context_settings=_CONTEXT_SETTINGS)
@click.option("--quiet", "-q", is_flag=True, help="Print nothing; rely on the exit status.")
@click.option("--show", "-s", is_flag=True, help="Explain the decision rule by rule on stderr.")
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    envvar="GITGATE_CONFIG",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to gitgate.yaml (default: ./gitgate.yaml when present).",
)
@click.option(
    "--admin-base",
    default=None,
    envvar="GITGATE_ADMIN_BASE",
    type=click.Path(file_okay=False, path_type=Path),
    help="Administrative base directory; overrides the config file.",
)
@click.option("--debug", is_flag=True, help="Log registry, cache and evaluator activity.")
@click.version_option(package_name="gitgate-access")
@click.argument("repo")
@click.argument("user")
@click.argument("perm", required=False, default=None)
@click.argument("ref", required=False, default=None)
def cli(
    quiet: bool,
    show: bool,
    config_path: Path | None,
    admin_base: Path | None,
    debug: bool,
    repo: str,
    user: str,
    perm: str | None,
    ref: str | None,
) -> None:
    """Is PERM on REF of REPO allowed for USER?

    Use '%' for REPO or USER to read pairs from stdin, one per line, and
    print REPO<TAB>USER<TAB>VERDICT for each.
    """
    _configure_logging(debug)
    try:
        if quiet and show:
            raise UsageError("-q and -s are mutually exclusive")
        if WILDCARD in (repo, user):
            ensure_batch_compatible(quiet, show)

        config = _load_config(config_path, admin_base)
        query = normalize_query(
            repo, user, perm, ref, virtual_ref_prefixes=config.virtual_ref_prefixes
        )
        checker = AccessChecker(config)

        if query.is_batch:
            for result in checker.batch(query, click.get_text_stream("stdin")):
                click.echo(result.line)
            return

        decision = checker.check(query, trace=show)
        presenter = ResultPresenter(quiet=quiet, show=show)
        trace_lines = checker.explain(decision) if show else ()
        status = presenter.present(decision.verdict, trace_lines)
    except UsageError as exc:
        raise click.UsageError(str(exc)) from exc
    except (AccessQueryError, FileNotFoundError) as exc:
        _fail(str(exc))
    sys.exit(status)


if __name__ == "__main__":
    cli()
