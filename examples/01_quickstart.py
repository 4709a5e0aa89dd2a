#!/usr/bin/env python3
"""Example: Quickstart for gitgate-access

Builds a throwaway admin base, asks a few access questions, and explains
one denial the way ``access -s`` does.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install gitgate-access
"""
from __future__ import annotations

import io
import tempfile
from pathlib import Path

import gitgate_access as gg

CONF = """\
repo testing
    -       master  =   bob
    RW+             =   alice bob
    R               =   @all
"""

RULE_INFO = """\
1 gitolite.conf 2
2 gitolite.conf 3
3 gitolite.conf 4
"""

RULES = """\
version: "1"
rules:
  - {id: 1, repo: testing, users: [bob], perm: "-", refex: refs/heads/master}
  - {id: 2, repo: testing, users: [alice, bob], perm: RW+}
  - {id: 3, repo: testing, users: ["@all"], perm: R}
"""


def _make_admin_base(root: Path) -> None:
    conf = root / "conf"
    conf.mkdir()
    (conf / "gitolite.conf").write_text(CONF, encoding="utf-8")
    (conf / "rule_info").write_text(RULE_INFO, encoding="utf-8")
    (conf / "rules.yaml").write_text(RULES, encoding="utf-8")


def main() -> None:
    print(f"gitgate-access version: {gg.__version__}")

    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        _make_admin_base(root)
        checker = gg.AccessChecker.from_admin_base(root)

        # Step 1: single questions
        print("\nSingle queries:")
        for user, perm, ref in [("alice", "W", "master"), ("bob", "W", "master"), ("carol", "R", None)]:
            decision = checker.check(gg.normalize_query("testing", user, perm, ref))
            print(f"  [exit {gg.exit_status(decision.verdict)}] {decision.verdict}")

        # Step 2: explain a denial
        decision = checker.check(gg.normalize_query("testing", "bob", "W", "master"), trace=True)
        print("\nWhy was bob denied?")
        for line in checker.explain(decision):
            print(line)

        # Step 3: batch mode over several users
        print("\nBatch:")
        users = io.StringIO("alice\nbob\ncarol\n")
        for result in checker.batch(gg.normalize_query("testing", "%", "R"), users):
            print(f"  {result.line}")


if __name__ == "__main__":
    main()
