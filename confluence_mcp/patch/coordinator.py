"""Conflict-aware page updates.

``PatchUpdateCoordinator.apply`` runs one fetch-compare-decide-write sequence:

    Start -> Fetched -> NoChangesNeeded
                     -> ConflictDetected
                     -> Writing -> UpdateSuccess

RemoteError can be raised from Start (fetch), Fetched or Writing (write).

The version check is optimistic and advisory. No remote lock is taken, so a
second writer can still land between this coordinator's read and its write,
and two concurrent ``apply`` calls can both pass the check against the same
version. The write declares the version it was based on; Confluence answers a
stale declaration with HTTP 409, which surfaces as VersionConflictError. That
remote check is the only guard against a lost update in that window.
"""

import logging

from ..confluence_api.base import RemoteDocumentClient
from ..utils.validation import validate_input
from ..utils.validation import validate_version
from .models import ConflictDetected
from .models import NoChangesNeeded
from .models import UpdateOutcome
from .models import UpdateRequest
from .models import UpdateSuccess
from .summarizer import summarize

logger = logging.getLogger(__name__)


class PatchUpdateCoordinator:
    """Decide whether an UpdateRequest is written, skipped or reported as a conflict.

    The coordinator keeps no state between calls and can be shared by
    concurrent tool invocations.
    """

    def __init__(self, client: RemoteDocumentClient):
        self._client = client

    def apply(self, request: UpdateRequest) -> UpdateOutcome:
        """Apply one update request against the live page.

        Returns:
            UpdateSuccess, NoChangesNeeded or ConflictDetected

        Raises:
            ValidationError: If the page ID, title or body is blank or unsafe, or
                the baseline version is not a positive integer. Nothing is
                fetched.
            RemoteError: If the fetch or the write fails. Nothing is retried.
        """
        document_id = validate_input(request.document_id, "Page ID")
        title = validate_input(request.new_title, "Title")
        body = validate_input(request.new_body, "Content")
        validate_version(request.baseline_version)

        current = self._client.fetch_document(document_id)
        current_version = current.version

        stale_baseline = (
            request.baseline_version is not None
            and request.baseline_version != current_version
            and not request.force_update
        )
        if stale_baseline:
            our_change_set = summarize(current.body, body)
            if not our_change_set.has_changes:
                # The page already holds what the caller wants; a conflict
                # with no diff is not reported.
                logger.info(
                    "Page %s moved from version %d to %d but already matches the requested body",
                    document_id,
                    request.baseline_version,
                    current_version,
                )
                return NoChangesNeeded(current_version=current_version)

            logger.warning(
                "Conflict on page %s: baseline version %d, current version %d (%s)",
                document_id,
                request.baseline_version,
                current_version,
                our_change_set.summary,
            )
            return ConflictDetected(
                baseline_version=request.baseline_version,
                current_version=current_version,
                our_change_set=our_change_set,
            )

        change_set = summarize(current.body, body)
        if not change_set.has_changes:
            logger.info("Page %s unchanged at version %d, skipping write", document_id, current_version)
            return NoChangesNeeded(current_version=current_version)

        self._client.write_document(
            document_id,
            title,
            body,
            expected_prior_version=current_version,
        )
        logger.info(
            "Page %s updated to version %d (%s)",
            document_id,
            current_version + 1,
            change_set.summary,
        )
        return UpdateSuccess(new_version=current_version + 1, change_set=change_set)
