"""Tests for the first-parent commit walker."""

from pathlib import Path

import pytest
from git import Repo

from ghet.utils.commit_walker import (
    CommitRange,
    iter_first_parent,
    oldest_first_parent_ancestor,
    walk_commit_range,
)
from ghet.utils.errors import CorruptCommit, EndNotReached


def _init_repo(tmp_path: Path) -> Repo:
    repo = Repo.init(tmp_path)
    repo.config_writer().set_value("user", "name", "Tester").release()
    repo.config_writer().set_value("user", "email", "tester@example.com").release()
    return repo


def _commit(repo: Repo, message: str, **kwargs):
    return repo.index.commit(message, **kwargs)


def _linear_history(repo: Repo, count: int) -> list:
    """Create ``count`` commits on the current branch, oldest first."""
    return [_commit(repo, f"C{i}") for i in range(1, count + 1)]


def test_walk_full_range_is_most_recent_first(tmp_path):
    repo = _init_repo(tmp_path)
    c1, c2, c3 = _linear_history(repo, 3)

    ids = walk_commit_range(repo, CommitRange(start=c3.hexsha, end=c1.hexsha))

    assert ids == [c3.hexsha, c2.hexsha, c1.hexsha]


def test_walk_partial_range_is_inclusive(tmp_path):
    repo = _init_repo(tmp_path)
    commits = _linear_history(repo, 5)

    ids = walk_commit_range(repo, CommitRange(start=commits[3].hexsha, end=commits[1].hexsha))

    # C4 -> C3 -> C2: two hops, three commits
    assert ids == [commits[3].hexsha, commits[2].hexsha, commits[1].hexsha]


def test_walk_start_equals_end_yields_single_commit(tmp_path):
    repo = _init_repo(tmp_path)
    _, c2, _ = _linear_history(repo, 3)

    ids = walk_commit_range(repo, CommitRange(start=c2.hexsha, end=c2.hexsha))

    assert ids == [c2.hexsha]


def test_walk_single_commit_history(tmp_path):
    repo = _init_repo(tmp_path)
    only = _commit(repo, "initial")

    assert oldest_first_parent_ancestor(repo, only.hexsha) == only.hexsha
    assert walk_commit_range(repo, CommitRange(only.hexsha, only.hexsha)) == [only.hexsha]


def test_walk_follows_first_parent_only(tmp_path):
    repo = _init_repo(tmp_path)
    c1 = _commit(repo, "C1")
    side = _commit(repo, "side work", parent_commits=[c1], head=False)
    c2 = _commit(repo, "C2")
    merge = _commit(repo, "Merge side", parent_commits=[c2, side])

    ids = walk_commit_range(repo, CommitRange(start=merge.hexsha, end=c1.hexsha))

    assert ids == [merge.hexsha, c2.hexsha, c1.hexsha]
    assert side.hexsha not in ids


def test_walk_end_on_divergent_branch_fails(tmp_path):
    repo = _init_repo(tmp_path)
    c1 = _commit(repo, "C1")
    side = _commit(repo, "side work", parent_commits=[c1], head=False)
    c2 = _commit(repo, "C2")

    with pytest.raises(EndNotReached) as excinfo:
        walk_commit_range(repo, CommitRange(start=c2.hexsha, end=side.hexsha))

    assert excinfo.value.start == c2.hexsha
    assert excinfo.value.end == side.hexsha


def test_walk_end_reachable_only_through_merge_side_fails(tmp_path):
    repo = _init_repo(tmp_path)
    c1 = _commit(repo, "C1")
    side = _commit(repo, "side work", parent_commits=[c1], head=False)
    c2 = _commit(repo, "C2")
    merge = _commit(repo, "Merge side", parent_commits=[c2, side])

    with pytest.raises(EndNotReached):
        walk_commit_range(repo, CommitRange(start=merge.hexsha, end=side.hexsha))


def test_walk_end_newer_than_start_fails(tmp_path):
    repo = _init_repo(tmp_path)
    c1, _, c3 = _linear_history(repo, 3)

    with pytest.raises(EndNotReached):
        walk_commit_range(repo, CommitRange(start=c1.hexsha, end=c3.hexsha))


def test_oldest_first_parent_ancestor_ignores_merged_roots(tmp_path):
    repo = _init_repo(tmp_path)
    c1 = _commit(repo, "C1")
    other_root = _commit(repo, "unrelated root", parent_commits=[], head=False)
    merge = _commit(repo, "Merge unrelated history", parent_commits=[c1, other_root])

    assert oldest_first_parent_ancestor(repo, merge.hexsha) == c1.hexsha


def test_iter_first_parent_length_matches_hop_count(tmp_path):
    repo = _init_repo(tmp_path)
    commits = _linear_history(repo, 7)

    walked = list(iter_first_parent(repo, commits[-1].hexsha))

    assert [c.hexsha for c in walked] == [c.hexsha for c in reversed(commits)]


def test_walk_unknown_start_raises_corrupt_commit(tmp_path):
    repo = _init_repo(tmp_path)
    _commit(repo, "C1")
    missing = "deadbeef" * 5

    with pytest.raises(CorruptCommit) as excinfo:
        walk_commit_range(repo, CommitRange(start=missing, end=missing))

    assert excinfo.value.commit_id == missing
