"""Tests for modbump.classify."""

from __future__ import annotations

import itertools

from conftest import make_commit

from modbump.classify import bump_for_commit, bump_from_commits
from modbump.config import VersionRules, build_rules
from modbump.models import BumpSeverity


class TestBumpForCommit:
    def test_breaking_is_always_major(self, rules: VersionRules) -> None:
        assert bump_for_commit(make_commit("docs", breaking=True), rules) == (
            BumpSeverity.MAJOR
        )

    def test_mapped_types(self, rules: VersionRules) -> None:
        assert bump_for_commit(make_commit("feat"), rules) == BumpSeverity.MINOR
        assert bump_for_commit(make_commit("fix"), rules) == BumpSeverity.PATCH

    def test_ignored_type(self, rules: VersionRules) -> None:
        assert bump_for_commit(make_commit("chore"), rules) == BumpSeverity.NONE

    def test_unmapped_type_uses_default(self, rules: VersionRules) -> None:
        assert bump_for_commit(make_commit("wip"), rules) == BumpSeverity.PATCH

    def test_unmapped_type_with_none_default(self) -> None:
        rules = build_rules({"default-bump": "none"})
        assert bump_for_commit(make_commit("wip"), rules) == BumpSeverity.NONE

    def test_empty_type_is_unknown(self) -> None:
        rules = build_rules({"commit-types": {"unknown": "major"}})
        assert bump_for_commit(make_commit(""), rules) == BumpSeverity.MAJOR


class TestBumpFromCommits:
    def test_empty_is_none(self, rules: VersionRules) -> None:
        assert bump_from_commits([], rules) == BumpSeverity.NONE

    def test_all_ignored_is_none(self, rules: VersionRules) -> None:
        commits = [make_commit("docs"), make_commit("chore"), make_commit("ci")]
        assert bump_from_commits(commits, rules) == BumpSeverity.NONE

    def test_takes_highest(self, rules: VersionRules) -> None:
        commits = [make_commit("fix"), make_commit("feat"), make_commit("docs")]
        assert bump_from_commits(commits, rules) == BumpSeverity.MINOR

    def test_order_independent(self, rules: VersionRules) -> None:
        commits = [
            make_commit("fix", hash="a"),
            make_commit("feat", hash="b"),
            make_commit("chore", hash="c"),
            make_commit("refactor", breaking=True, hash="d"),
        ]
        results = {
            bump_from_commits(list(p), rules) for p in itertools.permutations(commits)
        }
        assert results == {BumpSeverity.MAJOR}
