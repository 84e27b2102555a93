import logging
from typing import Optional

from .api import BurrowApi
from .errors import ValidationError
from .schemas import Interest, InterestStatus
from .state import Slice

logger = logging.getLogger(__name__)


class InterestsSlice(Slice):
    """Renter interest requests, as sent by the renter and received by the lister."""

    name = "interests"

    def __init__(self, api: BurrowApi):
        super().__init__()
        self.api = api
        self.sent: list[Interest] = []
        self.received: list[Interest] = []
        self.status_by_property: dict[str, Optional[InterestStatus]] = {}

    def submit(self, property_id: str, message: str, move_in_date: str) -> bool:
        if not message.strip():
            logger.info("Refusing empty interest message for property %s", property_id)
            self._rejected(ValidationError("Please include a message for the lister."))
            return False

        def apply(data):
            interest = Interest.model_validate(data["interest"]) if data and "interest" in data else None
            if interest:
                self.sent.append(interest)
            self.status_by_property[property_id] = interest.status if interest else "pending"
        return self.run("submit", lambda: self.api.submit_interest(property_id, message, move_in_date), apply)

    def status_for(self, property_id: str, refresh: bool = False) -> Optional[InterestStatus]:
        if not refresh and property_id in self.status_by_property:
            return self.status_by_property[property_id]

        def apply(data):
            self.status_by_property[property_id] = (data or {}).get("status")
        self.run("status", lambda: self.api.interest_status(property_id), apply)
        return self.status_by_property.get(property_id)

    def fetch_sent(self) -> bool:
        def apply(data):
            self.sent = [Interest.model_validate(i) for i in data or []]
        return self.run("fetchSent", self.api.sent_interests, apply)

    def fetch_received(self) -> bool:
        def apply(data):
            self.received = [Interest.model_validate(i) for i in data or []]
        return self.run("fetchReceived", self.api.received_interests, apply)

    @staticmethod
    def _replace(items: list[Interest], updated: Interest) -> list[Interest]:
        return [updated if i.id == updated.id else i for i in items]

    def withdraw(self, interest_id: str) -> bool:
        def apply(data):
            self.sent = self._replace(self.sent, Interest.model_validate(data["interest"]))
        return self.run("withdraw", lambda: self.api.withdraw_interest(interest_id), apply)

    def approve(self, interest_id: str) -> bool:
        def apply(data):
            self.received = self._replace(self.received, Interest.model_validate(data["interest"]))
        return self.run("approve", lambda: self.api.approve_interest(interest_id), apply)

    def decline(self, interest_id: str) -> bool:
        def apply(data):
            self.received = self._replace(self.received, Interest.model_validate(data["interest"]))
        return self.run("decline", lambda: self.api.decline_interest(interest_id), apply)

    def reset(self) -> None:
        super().reset()
        self.sent = []
        self.received = []
        self.status_by_property = {}
