"""Identity verification domain errors.

Stage failures inside the e-KYC pipeline are reported as tagged results,
not exceptions. The errors here cover conditions outside a single stage:

- DuplicateVerificationError: another attempt for the subject is in flight
"""

from __future__ import annotations

from datetime import datetime

from src.domain.errors.duplicate import DuplicateError


class DuplicateVerificationError(DuplicateError):
    """Raised when a verification attempt is already running for a subject.

    Only one attempt per subject may hold the PENDING record. A second
    caller must wait for the first attempt to finish (or for the pending
    record to go stale) before resubmitting.

    Example:
        >>> raise DuplicateVerificationError(
        ...     subject_id="S1",
        ...     pending_attempt_id="a1",
        ... )
    """

    ERROR_CODE = "VERIFICATION_IN_PROGRESS"
    TITLE = "Verification Already In Progress"
    URN = "urn:trust-pipeline:identity:verification-in-progress"

    def __init__(
        self,
        subject_id: str,
        pending_attempt_id: str | None = None,
        pending_since: datetime | None = None,
    ) -> None:
        """Initialize duplicate verification error.

        Args:
            subject_id: The subject being verified.
            pending_attempt_id: Attempt currently holding the subject.
            pending_since: When that attempt started.
        """
        self.subject_id = subject_id
        self.pending_attempt_id = pending_attempt_id
        self.pending_since = pending_since
        super().__init__(
            f"An identity verification for subject {subject_id} is already in progress"
        )

    def extensions(self) -> dict:
        result: dict = {"subject_id": self.subject_id}
        if self.pending_since is not None:
            result["pending_since"] = self.pending_since.isoformat()
        return result
