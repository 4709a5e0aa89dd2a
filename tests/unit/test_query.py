"""Tests for decision query normalisation."""
from __future__ import annotations

import pytest

from gitgate_access.errors import InvalidPermissionError, InvalidRefError, UsageError
from gitgate_access.query import (
    PERMISSIONS,
    Query,
    is_valid_ref,
    normalize_query,
    qualify_ref,
)


class TestDefaults:
    def test_perm_defaults_to_push(self) -> None:
        assert normalize_query("testing", "alice").perm == "+"

    def test_empty_perm_defaults_to_push(self) -> None:
        assert normalize_query("testing", "alice", "").perm == "+"

    def test_ref_defaults_to_any(self) -> None:
        assert normalize_query("testing", "alice", "W").ref == "any"

    def test_empty_ref_defaults_to_any(self) -> None:
        assert normalize_query("testing", "alice", "W", "").ref == "any"

    def test_missing_repo_raises(self) -> None:
        with pytest.raises(UsageError, match="repo"):
            normalize_query("", "alice")

    def test_missing_user_raises(self) -> None:
        with pytest.raises(UsageError, match="user"):
            normalize_query("testing", None)


class TestPermissions:
    @pytest.mark.parametrize("perm", sorted(PERMISSIONS))
    def test_valid_permissions_accepted(self, perm: str) -> None:
        assert normalize_query("testing", "alice", perm).perm == perm

    @pytest.mark.parametrize("perm", ["RW", "w", "X", "C^", "^D", "-"])
    def test_invalid_permissions_rejected(self, perm: str) -> None:
        with pytest.raises(InvalidPermissionError, match="invalid perm"):
            normalize_query("testing", "alice", perm)


class TestRefQualification:
    def test_bare_name_becomes_branch(self) -> None:
        assert qualify_ref("master") == "refs/heads/master"

    def test_any_never_rewritten(self) -> None:
        assert qualify_ref("any") == "any"

    def test_full_ref_untouched(self) -> None:
        assert qualify_ref("refs/tags/v1.0") == "refs/tags/v1.0"

    def test_virtual_ref_untouched(self) -> None:
        assert qualify_ref("VREF/NAME/docs/index.md") == "VREF/NAME/docs/index.md"

    def test_custom_virtual_prefix(self) -> None:
        assert qualify_ref("META/x", ["META/"]) == "META/x"
        assert qualify_ref("VREF/x", ["META/"]) == "refs/heads/VREF/x"

    @pytest.mark.parametrize("ref", ["master", "feature/x", "any", "refs/heads/dev", "VREF/COUNT/3"])
    def test_qualification_idempotent(self, ref: str) -> None:
        once = qualify_ref(ref)
        assert qualify_ref(once) == once

    def test_rewrite_applied_once(self) -> None:
        query = normalize_query("testing", "alice", "W", "dev")
        again = normalize_query(query.repo, query.user, query.perm, query.ref)
        assert again.ref == "refs/heads/dev"


class TestRefValidation:
    @pytest.mark.parametrize("ref", ["any", "refs/heads/master", "refs/tags/v1.0+build", "VREF/NAME/a b"])
    def test_valid_refs(self, ref: str) -> None:
        assert is_valid_ref(ref)

    @pytest.mark.parametrize("ref", ["refs/heads/bad;name", "refs/heads/$x", "-refs", "refs/heads/a*"])
    def test_invalid_refs(self, ref: str) -> None:
        assert not is_valid_ref(ref)

    def test_invalid_ref_raises(self) -> None:
        with pytest.raises(InvalidRefError, match="invalid ref 'refs/heads/a;b'"):
            normalize_query("testing", "alice", "W", "a;b")

    def test_pipe_in_full_ref_rejected(self) -> None:
        with pytest.raises(InvalidRefError):
            normalize_query("testing", "alice", "W", "refs/heads/x|y")

    @pytest.mark.parametrize("ref", ["VREF/NAME/a;rm -rf $x|y", "VREF/NAME/$HOME", "VREF/COUNT/3|4"])
    def test_virtual_refs_follow_grammar(self, ref: str) -> None:
        assert not is_valid_ref(ref)
        with pytest.raises(InvalidRefError):
            normalize_query("testing", "alice", "W", ref)

    def test_well_formed_virtual_ref_accepted(self) -> None:
        assert normalize_query("testing", "alice", "W", "VREF/NAME/docs/index.md").ref == "VREF/NAME/docs/index.md"


class TestQuery:
    def test_frozen(self) -> None:
        query = Query("testing", "alice")
        with pytest.raises(AttributeError):
            query.repo = "other"  # type: ignore[misc]

    def test_is_batch(self) -> None:
        assert Query("%", "alice").is_batch
        assert Query("testing", "%").is_batch
        assert not Query("testing", "alice").is_batch

    def test_with_pair_keeps_perm_and_ref(self) -> None:
        query = Query("%", "alice", "W", "refs/heads/master").with_pair("testing", "bob")
        assert query == Query("testing", "bob", "W", "refs/heads/master")
