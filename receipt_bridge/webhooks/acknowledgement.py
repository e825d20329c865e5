import logging
import threading
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class RequestState(str, Enum):
    """Lifecycle of one webhook request."""
    RECEIVED = "received"
    SIGNATURE_CHECKED = "signature_checked"
    PARSED = "parsed"
    ACKNOWLEDGED = "acknowledged"
    SKIPPED = "skipped"
    RECONCILED = "reconciled"
    RECONCILE_FAILED = "reconcile_failed"
    REJECTED = "rejected"


TERMINAL_STATES = frozenset({
    RequestState.SKIPPED,
    RequestState.RECONCILED,
    RequestState.RECONCILE_FAILED,
    RequestState.REJECTED,
})

_ORDER = [
    RequestState.RECEIVED,
    RequestState.SIGNATURE_CHECKED,
    RequestState.PARSED,
    RequestState.ACKNOWLEDGED,
]


class InvalidStateTransition(Exception):
    pass


class Acknowledgement:
    """
    Per-request state tracker and single-write guard for the response status.

    The first call to `respond` wins; its status is what the caller receives.
    Later calls are kept in `late_statuses` and logged, never written.
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id
        self.state = RequestState.RECEIVED
        self.status_code: Optional[int] = None
        self.late_statuses: List[int] = []
        self._lock = threading.Lock()

    @property
    def log_extra(self) -> dict:
        return {"request_id": self.request_id}

    @property
    def responded(self) -> bool:
        return self.status_code is not None

    def advance(self, state: RequestState) -> None:
        if self.state in TERMINAL_STATES:
            raise InvalidStateTransition(f"{self.state.value} is terminal")

        # The linear prefix is walked one step at a time
        if state in _ORDER and _ORDER.index(state) != _ORDER.index(self.state) + 1:
            raise InvalidStateTransition(f"{self.state.value} -> {state.value}")

        if state in (RequestState.SKIPPED, RequestState.RECONCILED, RequestState.RECONCILE_FAILED) \
                and self.state != RequestState.ACKNOWLEDGED:
            raise InvalidStateTransition(f"{self.state.value} -> {state.value}")

        self.state = state

    def respond(self, status_code: int) -> bool:
        """Record a response status. Returns True only for the first write."""
        with self._lock:
            if self.status_code is None:
                self.status_code = status_code
                return True
            self.late_statuses.append(status_code)

        logger.info(
            f"Response already sent with {self.status_code}; dropping late status {status_code}",
            extra=self.log_extra,
        )
        return False
