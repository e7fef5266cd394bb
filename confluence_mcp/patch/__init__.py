"""Conflict-aware patch updates for Confluence pages.

- summarizer: line diff between two bodies reduced to a ChangeSet
- coordinator: fetch, compare versions, then write, skip or report a conflict
- models: UpdateRequest and the UpdateOutcome variants
"""

from .coordinator import PatchUpdateCoordinator
from .models import ChangeSet
from .models import ConflictDetected
from .models import DiffSegment
from .models import NoChangesNeeded
from .models import UpdateOutcome
from .models import UpdateRequest
from .models import UpdateSuccess
from .summarizer import summarize

__all__ = [
    "ChangeSet",
    "ConflictDetected",
    "DiffSegment",
    "NoChangesNeeded",
    "PatchUpdateCoordinator",
    "UpdateOutcome",
    "UpdateRequest",
    "UpdateSuccess",
    "summarize",
]
