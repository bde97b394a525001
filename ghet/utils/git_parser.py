"""Git repository parsing utilities for ghet.

This module locates the repository a user points at, opens it, and extracts
the commit metadata that ends up in the release document.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union
from urllib.parse import urlparse

from git import Repo
from git.exc import (
    BadName,
    BadObject,
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from ghet.models.release import CommitRecord
from ghet.utils.errors import CorruptCommit, NotARepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalTarget:
    """A repository already on disk."""

    path: Path


@dataclass(frozen=True)
class RemoteTarget:
    """A repository that has to be served from the clone cache."""

    url: str


RepositoryTarget = Union[LocalTarget, RemoteTarget]


def is_remote_url(location: str) -> bool:
    """Return True if ``location`` is a scheme-qualified URL.

    Single-letter schemes are rejected so that Windows paths such as
    ``C:\\src\\repo`` stay local.
    """
    parsed = urlparse(location)
    if len(parsed.scheme) < 2:
        return False
    return bool(parsed.netloc) or parsed.scheme == "file"


def normalize_repo_url(repo_url: str) -> str:
    """Normalize a remote URL so trailing slash and ``.git`` variants compare equal."""
    if not repo_url or not repo_url.strip():
        raise ValueError("repo_url cannot be empty")

    normalized = repo_url.strip().rstrip("/")
    if normalized.endswith(".git"):
        normalized = normalized[:-4].rstrip("/")

    if not normalized:
        raise ValueError(f"Could not normalize repository URL: {repo_url}")
    return normalized


def _derive_repo_name(repo_url: str) -> str:
    """Derive a filesystem-safe repository folder name from a Git URL."""
    parsed = urlparse(normalize_repo_url(repo_url))
    repo_name = os.path.basename(parsed.path) or parsed.netloc
    repo_name = re.sub(r"[^A-Za-z0-9._-]", "_", repo_name.strip()).strip(".")
    # URLs such as file:/// or https://host/org/.. have no usable name
    return repo_name or "repo"


def open_repo(repo_path: str | Path) -> Repo:
    """Open the repository rooted exactly at ``repo_path``.

    Parent directories are not searched: a subdirectory of a working tree is
    not a repository root.

    Raises:
        NotARepository: If the path is missing or holds no valid repository.
    """
    repo_path = Path(repo_path)
    try:
        return Repo(str(repo_path))
    except NoSuchPathError as e:
        raise NotARepository(repo_path, "path does not exist") from e
    except InvalidGitRepositoryError as e:
        raise NotARepository(repo_path) from e


def locate(location: str | None) -> RepositoryTarget:
    """Resolve a user-given location into a local or remote target.

    An empty location means the current working directory. Local paths must
    already be repository roots; they are never cloned.
    """
    location = (location or "").strip()
    if location and is_remote_url(location):
        return RemoteTarget(url=location)

    path = Path(location).expanduser() if location else Path.cwd()
    path = path.resolve()

    if not path.exists():
        raise NotARepository(path, "path does not exist")
    if not path.is_dir():
        raise NotARepository(path, "path is not a directory")

    repo = open_repo(path)
    repo.close()
    return LocalTarget(path=path)


def origin_url(repo: Repo) -> str | None:
    """Return the URL of the ``origin`` remote, if one is configured."""
    reader = repo.config_reader()
    url = reader.get_value('remote "origin"', "url", default="")
    if not url:
        logger.debug("Repository %s has no origin remote", repo.working_dir or repo.git_dir)
        return None
    return str(url)


def extract_commit_record(repo: Repo, commit_id: str) -> CommitRecord:
    """Extract the summary, author name and hash of a single commit.

    The summary is the first line of the message with surrounding whitespace
    removed; an empty message yields an empty summary. The author is the
    recorded author identity, never the committer.

    Raises:
        CorruptCommit: If the object store cannot produce the commit.
    """
    try:
        commit = repo.commit(commit_id)
        message = commit.message
        author_name = commit.author.name
        hexsha = commit.hexsha
    except (BadName, BadObject, GitCommandError, ValueError) as e:
        raise CorruptCommit(commit_id) from e

    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")

    # git ends lines at \n only
    summary = message.strip().split("\n", 1)[0].strip()

    return CommitRecord(id=hexsha, summary=summary, author_name=author_name or "")
