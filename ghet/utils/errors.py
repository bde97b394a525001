"""Failure taxonomy for ghet.

Every error here ends the current invocation. The command line prints the
message and exits non-zero; nothing is written to stdout.
"""

from pathlib import Path


class GhetError(RuntimeError):
    """Base class for all terminal ghet failures."""


class NotARepository(GhetError):
    """A path (local or cache entry) is not a readable Git repository."""

    def __init__(self, path: str | Path, reason: str | None = None):
        self.path = str(path)
        self.reason = reason
        message = f"Not a git repository: {self.path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class CloneFailed(GhetError):
    """Cloning a remote into the cache failed (network, auth, cancellation)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to clone {url}: {reason}")


class UnresolvableReference(GhetError):
    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Could not resolve reference '{ref}' to a commit")


class AmbiguousReference(GhetError):
    def __init__(self, ref: str, candidates: list[str]):
        self.ref = ref
        self.candidates = list(candidates)
        listed = ", ".join(self.candidates)
        super().__init__(f"Reference '{ref}' is ambiguous; it matches commits {listed}")


class EndNotReached(GhetError):
    """The end commit is not a first-parent ancestor of the start commit."""

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(
            f"End commit {end} is not reachable from {start} along first-parent history"
        )


class CorruptCommit(GhetError):
    """The object store could not produce the data for a commit."""

    def __init__(self, commit_id: str):
        self.commit_id = commit_id
        super().__init__(f"Could not read commit {commit_id} from the object store")
