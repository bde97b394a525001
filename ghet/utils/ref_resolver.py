"""Resolve user-supplied references to full commit ids.

A reference is a branch name, a tag name or a full/abbreviated commit id.
Names are tried before ids, so a branch called ``cafe`` wins over a commit
whose id starts with ``cafe``.
"""

from __future__ import annotations

import logging
import re
from typing import Literal

from git import Repo
from git.exc import GitCommandError

from ghet.utils.commit_walker import oldest_first_parent_ancestor
from ghet.utils.errors import AmbiguousReference, UnresolvableReference

logger = logging.getLogger(__name__)

HEX_REF_RE = re.compile(r"^[0-9a-fA-F]{4,64}$")

Boundary = Literal["start", "end"]


def default_branch(repo: Repo) -> str:
    """Return the ref name of the repository's default branch.

    This is the branch ``HEAD`` points at. With a detached ``HEAD`` the branch
    that ``origin/HEAD`` points at is used, and failing that ``HEAD`` itself.
    """
    if not repo.head.is_detached:
        return repo.head.reference.path

    try:
        return repo.git.symbolic_ref("--quiet", "refs/remotes/origin/HEAD").strip()
    except GitCommandError:
        logger.debug("HEAD is detached and origin/HEAD is not set; using HEAD")
        return "HEAD"


def _lookup_name(repo: Repo, ref: str) -> str | None:
    """Look ``ref`` up as a branch, tag or remote-tracking branch name."""
    candidates = [
        f"refs/heads/{ref}",
        f"refs/tags/{ref}",
        f"refs/remotes/origin/{ref}",
    ]
    if ref == "HEAD" or "/" in ref:
        candidates.append(ref)

    for candidate in candidates:
        try:
            # ^{commit} peels annotated tags to the commit they point at
            return repo.git.rev_parse("--verify", "--quiet", f"{candidate}^{{commit}}").strip()
        except GitCommandError:
            continue
    return None


def _lookup_commit_id(repo: Repo, ref: str) -> str | None:
    """Look ``ref`` up as a full or abbreviated commit id."""
    if not HEX_REF_RE.match(ref):
        return None

    try:
        output = repo.git.rev_parse(f"--disambiguate={ref.lower()}")
    except GitCommandError:
        return None

    matches = []
    for sha in (line.strip() for line in output.splitlines()):
        if not sha:
            continue
        try:
            if repo.git.cat_file("-t", sha).strip() == "commit":
                matches.append(sha)
        except GitCommandError:
            continue

    if len(matches) > 1:
        raise AmbiguousReference(ref, sorted(matches))
    return matches[0] if matches else None


def resolve_reference(
    repo: Repo,
    ref: str | None,
    *,
    boundary: Boundary = "start",
    start: str | None = None,
    branch: str | None = None,
) -> str:
    """Resolve a reference to a full commit id.

    Args:
        repo: Opened repository.
        ref: Branch, tag or commit id. May be empty.
        boundary: Which end of the range ``ref`` denotes. Decides what an
            empty ``ref`` means.
        start: The resolved start commit; required for an empty end boundary.
        branch: Branch whose tip an empty start resolves to, instead of the
            default branch.

    Returns:
        Full hex commit id.

    Raises:
        UnresolvableReference: If nothing matches ``ref``.
        AmbiguousReference: If an abbreviated id matches several commits.
    """
    ref = (ref or "").strip()

    if not ref:
        if boundary == "end":
            if start is None:
                raise ValueError("An empty end reference needs a resolved start commit")
            end = oldest_first_parent_ancestor(repo, start)
            logger.debug("No end given; using oldest first-parent ancestor %s", end)
            return end
        ref = (branch or "").strip() or default_branch(repo)
        logger.debug("No start given; using tip of %s", ref)

    if ref.startswith("-"):
        raise UnresolvableReference(ref)

    commit_id = _lookup_name(repo, ref)
    if commit_id is None:
        commit_id = _lookup_commit_id(repo, ref)
    if commit_id is None:
        raise UnresolvableReference(ref)

    logger.debug("Resolved %s reference '%s' to %s", boundary, ref, commit_id)
    return commit_id
