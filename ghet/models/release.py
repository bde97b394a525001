"""Data models for the release document handed to the changelog formatter.

The JSON shape is fixed: header, repo_url, added, changed, fixed, removed,
in that order. Each change is a 4-tuple of category, summary, author and
commit hash.
"""

from pydantic import BaseModel, ConfigDict, Field

# (category, summary, author name, commit hash)
Change = tuple[str, str, str, str]


class CommitRecord(BaseModel):
    """The fields of a commit that survive into the release document."""

    model_config = ConfigDict(frozen=True)

    id: str  # full hex commit hash
    summary: str
    author_name: str

    def to_change(self, category: str) -> Change:
        return (category, self.summary, self.author_name, self.id)


class Release(BaseModel):
    """A release of the repository, as consumed by release-maker."""

    header: str = ""
    repo_url: str
    added: list[Change] = Field(default_factory=list)
    changed: list[Change] = Field(default_factory=list)
    fixed: list[Change] = Field(default_factory=list)
    removed: list[Change] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)
