"""Memoised access to individual lines of configuration source files.

The rule registry records rules as ``(file, line)`` pairs.  Rendering a
trace usually touches several rules from the same file, so each file is
read in full once and kept for the rest of the process.

Example
-------
>>> cache = ConfLineCache(Path("/srv/gitgate/conf"))
>>> cache.line("gitolite.conf", 3)
'    RW+     =   alice'
"""
from __future__ import annotations

import logging
from pathlib import Path

from gitgate_access.errors import ConfFileError

logger = logging.getLogger(__name__)


class ConfLineCache:
    """Per-file line cache keyed by registry file identifier.

    Parameters
    ----------
    conf_dir:
        Directory that relative file identifiers are resolved against.
    encoding:
        Text encoding of the configuration sources.
    """

    def __init__(self, conf_dir: Path, encoding: str = "utf-8") -> None:
        self._conf_dir = conf_dir
        self._encoding = encoding
        self._files: dict[str, list[str]] = {}
        self._load_count = 0

    def line(self, conf_file: str, lineno: int) -> str:
        """Return line ``lineno`` (1-based) of ``conf_file`` without its terminator.

        Lines are split on LF only, matching the registry numbering; a
        trailing CR is dropped and any other control character is kept.

        Raises
        ------
        ConfFileError
            When the file cannot be read.  A registry that names a missing
            file is treated as corrupt.
        """
        lines = self.lines(conf_file)
        if lineno < 1 or lineno > len(lines):
            logger.warning("Line %d is outside %s (%d lines)", lineno, conf_file, len(lines))
            return ""
        return lines[lineno - 1]

    def lines(self, conf_file: str) -> list[str]:
        """Return every line of ``conf_file``, loading it on first use."""
        cached = self._files.get(conf_file)
        if cached is None:
            cached = self._load(conf_file)
            self._files[conf_file] = cached
        return cached

    def _load(self, conf_file: str) -> list[str]:
        path = self._conf_dir / conf_file
        try:
            with path.open("r", encoding=self._encoding, newline="") as fh:
                text = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfFileError(conf_file, str(exc)) from exc
        self._load_count += 1
        lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
        if lines and lines[-1] == "":
            lines.pop()
        logger.debug("Cached %d lines from %s", len(lines), path)
        return lines

    def __contains__(self, conf_file: object) -> bool:
        return conf_file in self._files

    @property
    def load_count(self) -> int:
        """Number of full file reads performed so far."""
        return self._load_count

    @property
    def conf_dir(self) -> Path:
        return self._conf_dir
