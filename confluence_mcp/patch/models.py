"""Models for conflict-aware patch updates.

An UpdateRequest goes in, exactly one UpdateOutcome variant comes out:
UpdateSuccess, NoChangesNeeded or ConflictDetected. Remote failures are
raised as RemoteError and never produce an outcome.
"""

from typing import Annotated
from typing import Literal

from pydantic import BaseModel
from pydantic import Field


class UpdateRequest(BaseModel):
    """A caller's intent to replace a page's title and body."""

    document_id: str = Field(..., description="Remote page identifier")
    new_title: str = Field(..., description="Title to write")
    new_body: str = Field(..., description="Body markup to write")
    baseline_version: int | None = Field(
        default=None, description="Version the caller last read; None skips conflict detection"
    )
    force_update: bool = Field(default=False, description="Write even if the baseline is stale")


class DiffSegment(BaseModel):
    """A contiguous run of lines with the same classification."""

    kind: Literal["added", "removed", "unchanged"]
    line_count: int = Field(..., ge=0)


class ChangeSet(BaseModel):
    """Line-level summary of the difference between two bodies."""

    has_changes: bool
    added_lines: int = Field(default=0, ge=0)
    removed_lines: int = Field(default=0, ge=0)
    segments: list[DiffSegment] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        return f"+{self.added_lines} -{self.removed_lines} lines"


class UpdateSuccess(BaseModel):
    """The new body was written; Confluence advanced the version by one."""

    status: Literal["success"] = "success"
    new_version: int
    change_set: ChangeSet


class NoChangesNeeded(BaseModel):
    """The remote body already equals the requested body; nothing was written."""

    status: Literal["no-changes"] = "no-changes"
    current_version: int


class ConflictDetected(BaseModel):
    """The page moved past the caller's baseline and the edit would change it."""

    status: Literal["conflict-detected"] = "conflict-detected"
    baseline_version: int
    current_version: int
    our_change_set: ChangeSet


UpdateOutcome = Annotated[
    UpdateSuccess | NoChangesNeeded | ConflictDetected,
    Field(discriminator="status"),
]
