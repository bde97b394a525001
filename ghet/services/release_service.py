"""Release service for turning a commit range into a release document.

This module wires the pipeline together: locate the repository, open it
(through the clone cache for remotes), resolve the range boundaries, walk
first-parent history and assemble the release. Nothing is returned until the
whole range has been read, so a failure never produces a partial document.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from git import Repo

from ghet.models.release import CommitRecord, Release
from ghet.utils.commit_walker import CommitRange, walk_commit_range
from ghet.utils.git_parser import (
    RemoteTarget,
    RepositoryTarget,
    extract_commit_record,
    locate,
    normalize_repo_url,
    open_repo,
    origin_url,
)
from ghet.utils.ref_resolver import resolve_reference
from ghet.utils.repo_cache import RepoCache, default_cache_root

logger = logging.getLogger(__name__)

# Every commit lands in one bucket; release-maker users reclassify by hand.
DEFAULT_CATEGORY = "any"


@contextmanager
def open_target(target: RepositoryTarget, cache: RepoCache | None = None) -> Iterator[Repo]:
    """Open a located target and close it again when the block exits."""
    if isinstance(target, RemoteTarget):
        if cache is None:
            cache = RepoCache(default_cache_root())
        repo = cache.resolve(target.url)
    else:
        repo = open_repo(target.path)

    try:
        yield repo
    finally:
        repo.close()


def release_repo_url(target: RepositoryTarget, repo: Repo) -> str:
    """Pick the URL that release-maker will build commit links from."""
    if isinstance(target, RemoteTarget):
        return normalize_repo_url(target.url)

    url = origin_url(repo)
    if url:
        return normalize_repo_url(url)
    return str(target.path)


def assemble_release(repo_url: str, records: Iterable[CommitRecord]) -> Release:
    """Fold commit records into a release, keeping the order they arrive in."""
    return Release(
        header="",
        repo_url=repo_url,
        added=[record.to_change(DEFAULT_CATEGORY) for record in records],
        changed=[],
        fixed=[],
        removed=[],
    )


def build_release(
    location: str | None,
    start: str | None = None,
    end: str | None = None,
    *,
    branch: str | None = None,
    cache: RepoCache | None = None,
) -> Release:
    """
    Build the release document for a range of a repository's history.

    Args:
        location: Local path or scheme-qualified URL. Empty means the
            current directory.
        start: Most recent commit of the range. Defaults to the tip of
            ``branch``, or of the default branch.
        end: Oldest commit of the range, inclusive. Defaults to the end of
            first-parent history.
        branch: Branch whose tip is used when ``start`` is empty.
        cache: Clone cache for remote locations. Defaults to the user cache.

    Returns:
        Release: Commits from start to end, most recent first, in ``added``.

    Raises:
        GhetError: Any of the taxonomy in ``ghet.utils.errors``.
    """
    target = locate(location)
    logger.debug("Located %s", target)

    with open_target(target, cache) as repo:
        start_id = resolve_reference(repo, start, boundary="start", branch=branch)
        end_id = resolve_reference(repo, end, boundary="end", start=start_id)
        commit_ids = walk_commit_range(repo, CommitRange(start=start_id, end=end_id))
        records = [extract_commit_record(repo, commit_id) for commit_id in commit_ids]
        repo_url = release_repo_url(target, repo)

    logger.info("Collected %d commits from %s", len(records), repo_url)
    return assemble_release(repo_url, records)
