"""Lease agreements: status labels, the chat-header lookup and the agreements list.

Agreement status is owned by the server; nothing here moves an agreement
between statuses.
"""

import logging
from enum import Enum
from typing import Optional

from .api import BurrowApi
from .errors import AppError
from .schemas import Contract
from .state import Slice

logger = logging.getLogger(__name__)


class ContractStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_TENANT_SIGNATURE = "PENDING_TENANT_SIGNATURE"
    PENDING_LISTER_SIGNATURE = "PENDING_LISTER_SIGNATURE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


STATUS_LABELS = {
    ContractStatus.DRAFT: "Draft",
    ContractStatus.PENDING_TENANT_SIGNATURE: "Awaiting tenant signature",
    ContractStatus.PENDING_LISTER_SIGNATURE: "Awaiting lister signature",
    ContractStatus.COMPLETED: "Signed",
    ContractStatus.CANCELLED: "Cancelled",
}


def status_label(status: str) -> str:
    try:
        return STATUS_LABELS[ContractStatus(status)]
    except ValueError:
        return status


def contract_for_chat(api: BurrowApi, property_id: Optional[str], counterparty_id: Optional[str]) -> Optional[Contract]:
    """Lease agreement between the caller and ``counterparty_id`` for a property.

    Returns None when either id is missing, no agreement exists, or the lookup
    fails; the chat header simply shows no agreement badge in those cases.
    """
    if not property_id or not counterparty_id or not api.is_authenticated:
        return None
    try:
        data = api.contract_by_chat(property_id, counterparty_id)
    except AppError as e:
        logger.info("No agreement for property=%s counterparty=%s: %s", property_id, counterparty_id, e.message)
        return None
    return Contract.model_validate(data) if data else None


class AgreementsSlice(Slice):
    """The signed-in user's agreements, as tenant or as lister."""

    name = "contract"

    def __init__(self, api: BurrowApi):
        super().__init__()
        self.api = api
        self.contracts: list[Contract] = []
        self.current_contract: Optional[Contract] = None

    def fetch_my_agreements(self) -> bool:
        if not self._require_login(self.api):
            return False

        def apply(data):
            self.contracts = [Contract.model_validate(c) for c in data or []]
        return self.run("fetchMyAgreements", self.api.my_agreements, apply)

    def fetch_contract(self, contract_id: str) -> bool:
        if not self._require_login(self.api):
            return False

        def apply(data):
            self.current_contract = Contract.model_validate(data)
            self.contracts = [self.current_contract if c.id == contract_id else c for c in self.contracts]
        return self.run("fetchContractById", lambda: self.api.get_contract(contract_id), apply)

    def by_status(self, status: ContractStatus) -> list[Contract]:
        return [c for c in self.contracts if c.status == status.value]

    def reset(self) -> None:
        super().reset()
        self.contracts = []
        self.current_contract = None
