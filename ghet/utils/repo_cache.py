"""On-disk cache of remote repository clones.

Each normalized remote URL maps to one directory under the cache root. An
existing clone is reused as-is: ghet never fetches into a cached clone, so a
cached repository may be stale until the cache is cleared.
"""

import hashlib
import logging
import os
import shutil
import sys
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, GitCommandNotFound

from ghet.utils.errors import CloneFailed, NotARepository
from ghet.utils.git_parser import _derive_repo_name, normalize_repo_url, open_repo

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = "ghet"


def default_cache_root() -> Path:
    """Get the default cache root for cloned repositories.

    ``GHET_CACHE_DIR`` overrides the location entirely. Otherwise the
    platform's per-user cache directory is used.
    """
    override = os.getenv("GHET_CACHE_DIR", "").strip()
    if override:
        return Path(override).expanduser()

    if sys.platform == "win32":
        base = os.getenv("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    elif sys.platform == "darwin":
        base = str(Path.home() / "Library" / "Caches")
    else:
        base = os.getenv("XDG_CACHE_HOME", "")
        # XDG requires an absolute path; relative values are ignored
        if not base or not Path(base).is_absolute():
            base = str(Path.home() / ".cache")

    return Path(base) / CACHE_DIR_NAME


def cache_key(repo_url: str) -> str:
    """Compute the cache directory name for a remote URL.

    Returns:
        ``<repo-name>-<16 hex chars>``, where the hex part is taken from the
        SHA-256 of the normalized URL.
    """
    normalized = normalize_repo_url(repo_url)
    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()
    return f"{_derive_repo_name(normalized)}-{digest[:16]}"


class RepoCache:
    """Clones of remote repositories kept under a single root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, repo_url: str) -> Path:
        return self.root / cache_key(repo_url)

    def contains(self, repo_url: str) -> bool:
        return self.path_for(repo_url).exists()

    def repositories(self) -> list[Path]:
        """List the clone directories currently in the cache."""
        if not self.root.is_dir():
            return []
        return sorted(p for p in self.root.iterdir() if p.is_dir())

    def resolve(self, repo_url: str) -> Repo:
        """Return an opened clone of ``repo_url``, cloning it on first use.

        Raises:
            NotARepository: If the cache entry exists but is not a valid repository.
            CloneFailed: If the clone fails for any transport or auth reason.
        """
        repo_url = repo_url.strip()
        repo_path = self.path_for(repo_url)

        if repo_path.exists():
            logger.info("Using cached clone of %s at %s", repo_url, repo_path)
            return open_repo(repo_path)

        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("Cloning %s into %s", repo_url, repo_path)
        try:
            repo = Repo.clone_from(repo_url, str(repo_path))
        except (GitCommandError, GitCommandNotFound) as e:
            # Another process may have cloned the same URL in the meantime
            if repo_path.exists():
                try:
                    repo = open_repo(repo_path)
                except NotARepository:
                    raise CloneFailed(repo_url, str(e).strip()) from e
                logger.warning(
                    "Clone of %s failed but %s already holds a valid clone; using it",
                    repo_url,
                    repo_path,
                )
                return repo
            raise CloneFailed(repo_url, str(e).strip()) from e

        logger.info("Cloned %s", repo_url)
        return repo

    def clear(self) -> None:
        """Remove the whole cache root. Succeeds if there is nothing to remove."""
        if not self.root.exists():
            logger.debug("Cache root %s does not exist; nothing to clear", self.root)
            return
        logger.info("Removing cache root %s", self.root)
        try:
            shutil.rmtree(self.root)
        except FileNotFoundError:
            # removed concurrently
            pass
