"""First-parent commit walker.

Walks from a start commit toward an end commit along first-parent links only.
Merge side branches are never expanded. Parents are read from the object
database one commit at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from git import Commit, Repo
from git.exc import BadName, BadObject, GitCommandError

from ghet.utils.errors import CorruptCommit, EndNotReached

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitRange:
    start: str
    end: str


def _load_commit(repo: Repo, commit_id: str) -> Commit:
    try:
        return repo.commit(commit_id)
    except (BadName, BadObject, GitCommandError, ValueError) as e:
        raise CorruptCommit(commit_id) from e


def _first_parent(commit: Commit) -> Commit | None:
    try:
        parents = commit.parents
    except (BadObject, GitCommandError, ValueError) as e:
        raise CorruptCommit(commit.hexsha) from e
    return parents[0] if parents else None


def iter_first_parent(repo: Repo, start: str) -> Iterator[Commit]:
    """Yield ``start`` and then each first parent, most recent first."""
    commit: Commit | None = _load_commit(repo, start)
    while commit is not None:
        yield commit
        commit = _first_parent(commit)


def oldest_first_parent_ancestor(repo: Repo, start: str) -> str:
    """Return the root commit at the end of ``start``'s first-parent history."""
    oldest = start
    for commit in iter_first_parent(repo, start):
        oldest = commit.hexsha
    return oldest


def walk_commit_range(repo: Repo, commit_range: CommitRange) -> list[str]:
    """Collect commit ids from ``start`` back to ``end``, both inclusive.

    Returns:
        Commit ids in traversal order (most recent first). Never empty.

    Raises:
        EndNotReached: If the first-parent history of ``start`` runs out
            without meeting ``end``.
        CorruptCommit: If a commit on the path cannot be read.
    """
    visited: list[str] = []
    for commit in iter_first_parent(repo, commit_range.start):
        visited.append(commit.hexsha)
        if commit.hexsha == commit_range.end:
            logger.debug(
                "Walked %d commits from %s to %s",
                len(visited),
                commit_range.start,
                commit_range.end,
            )
            return visited

    raise EndNotReached(commit_range.start, commit_range.end)
