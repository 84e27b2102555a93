"""Ambassador inspection requests and the ambassador's dashboard.

The server owns every status change; ``TRANSITIONS`` only tells a view which
actions to offer a given role for a request in a given status.
"""

import logging
from enum import Enum
from typing import Any, Optional

from .api import BurrowApi
from .schemas import AmbassadorRequest, AmbassadorRequestCreate, AmbassadorReview
from .state import Slice

logger = logging.getLogger(__name__)


class AmbassadorRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Role(str, Enum):
    REQUESTER = "requester"
    LISTER = "lister"
    AMBASSADOR = "ambassador"


S = AmbassadorRequestStatus

# status -> role -> {action: resulting status}
TRANSITIONS: dict[S, dict[Role, dict[str, S]]] = {
    S.PENDING: {
        Role.REQUESTER: {"cancel": S.CANCELLED},
        Role.LISTER: {"approve": S.APPROVED, "decline": S.DECLINED},
    },
    S.APPROVED: {
        Role.AMBASSADOR: {"claim": S.ASSIGNED},
    },
    S.ASSIGNED: {
        Role.AMBASSADOR: {"review": S.COMPLETED},
    },
    S.DECLINED: {},
    S.COMPLETED: {},
    S.CANCELLED: {},
}


def allowed_actions(role: Role, status: str) -> list[str]:
    try:
        current = AmbassadorRequestStatus(status)
    except ValueError:
        logger.warning("Unknown ambassador request status %r", status)
        return []
    return sorted(TRANSITIONS[current].get(role, {}))


class AmbassadorRequestsSlice(Slice):
    name = "ambassadorRequests"

    def __init__(self, api: BurrowApi):
        super().__init__()
        self.api = api
        self.sent: list[AmbassadorRequest] = []
        self.received: list[AmbassadorRequest] = []
        self.status_by_property: dict[str, Optional[str]] = {}

    def submit(self, request: AmbassadorRequestCreate) -> bool:
        def apply(data):
            created = AmbassadorRequest.model_validate(data["request"])
            self.sent.insert(0, created)
            self.status_by_property[request.property_id] = created.status
        body = request.model_dump(by_alias=True, exclude_none=True)
        return self.run("submit", lambda: self.api.submit_ambassador_request(body), apply)

    def fetch_sent(self) -> bool:
        def apply(data):
            self.sent = [AmbassadorRequest.model_validate(r) for r in data or []]
        return self.run("fetchSent", self.api.sent_ambassador_requests, apply)

    def fetch_received(self) -> bool:
        def apply(data):
            self.received = [AmbassadorRequest.model_validate(r) for r in data or []]
        return self.run("fetchReceived", self.api.received_ambassador_requests, apply)

    def status_for(self, property_id: str) -> Optional[str]:
        def apply(data):
            self.status_by_property[property_id] = (data or {}).get("status")
        self.run("status", lambda: self.api.ambassador_request_status(property_id), apply)
        return self.status_by_property.get(property_id)

    def update_status(self, request_id: str, status: AmbassadorRequestStatus) -> bool:
        def apply(_):
            self.received = [
                r.model_copy(update={"status": status.value}) if r.id == request_id else r
                for r in self.received
            ]
        return self.run("updateStatus",
                        lambda: self.api.update_ambassador_request_status(request_id, status.value), apply)

    def cancel(self, request_id: str) -> bool:
        def apply(_):
            self.sent = [r for r in self.sent if r.id != request_id]
        return self.run("cancel", lambda: self.api.cancel_ambassador_request(request_id), apply)

    def submit_review(self, request_id: str, review: AmbassadorReview) -> bool:
        body = review.model_dump(by_alias=True, exclude_none=True)

        def apply(data):
            updated = (data or {}).get("request")
            if updated:
                updated = AmbassadorRequest.model_validate(updated)
                self.received = [updated if r.id == request_id else r for r in self.received]
        return self.run("submitReview", lambda: self.api.review_ambassador_request(request_id, body), apply)

    def reset(self) -> None:
        super().reset()
        self.sent = []
        self.received = []
        self.status_by_property = {}


class AmbassadorDashboard(Slice):
    name = "ambassadorDashboard"

    def __init__(self, api: BurrowApi):
        super().__init__()
        self.api = api
        self.stats: dict[str, Any] = {}
        self.schedule: list[dict] = []
        self.activity: list[dict] = []
        self.pending_requests: list[dict] = []
        self.current_request: Optional[dict] = None

    def load(self) -> bool:
        def call():
            return (self.api.dashboard("stats"), self.api.dashboard("schedule"), self.api.dashboard("activity"))

        def apply(parts):
            stats, schedule, activity = parts
            self.stats = stats or {}
            self.schedule = _unwrap(schedule, "schedule")
            self.activity = _unwrap(activity, "activity")
        return self.run("load", call, apply)

    def fetch_pending_requests(self) -> bool:
        def apply(data):
            self.pending_requests = _unwrap(data, "requests")
        return self.run("pendingRequests", lambda: self.api.dashboard("pending-requests"), apply)

    def fetch_request(self, request_id: str) -> bool:
        def apply(data):
            self.current_request = (data or {}).get("request", data)
        return self.run("requestDetails", lambda: self.api.dashboard_request(request_id), apply)

    def claim(self, request_id: str, scheduled_date: Optional[str] = None) -> bool:
        def apply(_):
            self.pending_requests = [r for r in self.pending_requests if r.get("_id") != request_id]
        ok = self.run("claim", lambda: self.api.claim_request(request_id, scheduled_date), apply)
        if ok:
            logger.info("Claimed ambassador request %s", request_id)
        return ok

    def reset(self) -> None:
        super().reset()
        self.stats = {}
        self.schedule = []
        self.activity = []
        self.pending_requests = []
        self.current_request = None


def _unwrap(data: Any, key: str) -> list:
    # dashboard endpoints answer either a bare list or {key: [...]}
    if isinstance(data, dict):
        return list(data.get(key, []))
    return list(data or [])
