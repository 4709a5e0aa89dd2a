"""Shared fixtures: a small admin base with a registry, conf file and rule base."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

GITOLITE_CONF = textwrap.dedent(
    """\
    @devs = alice bob

    repo testing
        -       master  =   bob
        RW+             =   @devs
        R               =   @all

    repo gitolite-admin
        RW+             =   admin
    """
)

RULE_INFO = textwrap.dedent(
    """\
    1 gitolite.conf 9
    2 gitolite.conf 4
    3 gitolite.conf 5
    4 gitolite.conf 6
    """
)

RULES_YAML = textwrap.dedent(
    """\
    version: "1"
    groups:
      devs: [alice, bob]
    rules:
      - {id: 1, repo: gitolite-admin, users: [admin], perm: RW+}
      - {id: 2, repo: testing, users: [bob], perm: "-", refex: refs/heads/master}
      - {id: 3, repo: testing, users: ["@devs"], perm: RW+}
      - {id: 4, repo: testing, users: ["@all"], perm: R}
    """
)


@pytest.fixture()
def admin_base(tmp_path: Path) -> Path:
    conf = tmp_path / "conf"
    conf.mkdir()
    (conf / "gitolite.conf").write_text(GITOLITE_CONF, encoding="utf-8")
    (conf / "rule_info").write_text(RULE_INFO, encoding="utf-8")
    (conf / "rules.yaml").write_text(RULES_YAML, encoding="utf-8")
    (tmp_path / "repositories" / "testing.git").mkdir(parents=True)
    return tmp_path
