"""Listing result pools: the public search page and the caller's own listings."""

import logging
import math
import threading
from typing import Any, Dict, Iterable, Optional

from pydantic import ValidationError as SchemaError

from .api import BurrowApi
from .errors import AppError, ExternalServiceError, ValidationError
from .filters import FilterStore
from .filters_catalog import AFFORDABLE_MAX_RENT, MID_RANGE_MAX_RENT
from .mapping import sort_properties, to_api_filters
from .schemas import NewPropertyData, PaginationInfo, PriceStats, Property, PropertyPage, UploadFile, UploadTarget
from .state import MALFORMED_RESPONSE, Slice

logger = logging.getLogger(__name__)


def price_stats(properties: Iterable[Property]) -> PriceStats:
    """Counts per map-legend price bucket plus the rounded average rent."""
    stats = PriceStats()
    total = 0.0
    for p in properties:
        rent = p.overview.rent
        total += rent
        stats.total += 1
        if rent <= AFFORDABLE_MAX_RENT:
            stats.affordable += 1
        elif rent <= MID_RANGE_MAX_RENT:
            stats.mid_range += 1
        else:
            stats.expensive += 1
    if stats.total:
        stats.average_price = round(total / stats.total)
    return stats


class ListingResults(Slice):
    """One page of public search results and the lifecycle of fetching it.

    Every fetch takes a sequence number. A response, success or failure, is
    only applied if no newer fetch has been issued since; otherwise it is
    dropped. A failed fetch keeps the previously shown results and pagination.
    """

    name = "properties/public"

    def __init__(self, api: BurrowApi, limit: Optional[int] = None):
        super().__init__()
        self.api = api
        self.limit = limit
        self.properties: list[Property] = []
        self.pagination: Optional[PaginationInfo] = None
        self.last_request: Optional[tuple[Dict[str, Any], int, Optional[int]]] = None
        self._seq = 0
        self._lock = threading.Lock()

    @property
    def current_page(self) -> int:
        return self.pagination.current_page if self.pagination else 1

    def fetch_page(self, filters: Dict[str, Any], page: int = 1, limit: Optional[int] = None) -> bool:
        limit = limit or self.limit
        with self._lock:
            self._seq += 1
            seq = self._seq
            self.last_request = (dict(filters), page, limit)
            self._pending()
        logger.info("Fetching properties page=%s filters=%s (seq=%s)", page, filters, seq)

        try:
            data = self.api.list_properties(filters, page=page, limit=limit)
            result = PropertyPage.model_validate(data or {})
        except SchemaError as e:
            logger.error("Malformed listing response: %s", e)
            return self._settle_failure(seq, ExternalServiceError(MALFORMED_RESPONSE))
        except AppError as e:
            return self._settle_failure(seq, e)

        with self._lock:
            if seq != self._seq:
                logger.info("Discarding stale listing response (seq=%s, latest=%s)", seq, self._seq)
                return False
            self.properties = result.properties
            self.pagination = result.pagination
            self._fulfilled()
        return True

    def _settle_failure(self, seq: int, err: AppError) -> bool:
        with self._lock:
            if seq != self._seq:
                logger.info("Discarding stale listing failure (seq=%s, latest=%s)", seq, self._seq)
                return False
            logger.warning("Listing fetch failed: %s", err.message)
            self._rejected(err)
        return False

    def retry(self) -> bool:
        if self.last_request is None:
            raise ValidationError("Nothing to retry yet.")
        filters, page, limit = self.last_request
        return self.fetch_page(filters, page, limit)

    def reset_and_refetch(self, filter_store: FilterStore) -> bool:
        state = filter_store.reset_filters()
        return self.fetch_page(to_api_filters(state), page=1)

    def adjust_slider_ceiling(self, filter_store: FilterStore) -> None:
        if not self.properties:
            return
        highest = math.ceil(max(p.overview.rent for p in self.properties))
        if highest > filter_store.state.max_price_for_slider:
            logger.info("Raising price slider ceiling to %s", highest)
            filter_store.set_max_price_for_slider(highest)

    def sorted(self, sort_by: str) -> list[Property]:
        return sort_properties(self.properties, sort_by)

    def reset(self) -> None:
        super().reset()
        self.properties = []
        self.pagination = None
        self.last_request = None


class UserListings(Slice):
    """The signed-in user's own listings and the property detail view."""

    name = "properties/user"

    def __init__(self, api: BurrowApi):
        super().__init__()
        self.api = api
        self.properties: list[Property] = []
        self.current_property: Optional[Property] = None
        self.is_adding = False

    def fetch_user_properties(self) -> bool:
        def apply(data):
            self.properties = [Property.model_validate(p) for p in (data or {}).get("properties", [])]
        return self.run("fetchUserProperties", self.api.my_properties, apply)

    def fetch_property_by_id(self, property_id: str) -> bool:
        if self.current_property and self.current_property.id != property_id:
            # a failed lookup must not leave the previous property on screen
            self.clear_current_property()

        def apply(data):
            self.current_property = Property.model_validate(data)
        return self.run("fetchPropertyById", lambda: self.api.get_property(property_id), apply)

    def select_from_list(self, prop: Optional[Property]) -> None:
        self.current_property = prop
        self.is_loading = False
        self.status = "succeeded" if prop else "idle"
        self.error = None

    def clear_current_property(self) -> None:
        self.current_property = None
        self.status = "idle"
        self.error = None

    def upload_images(self, files: list[UploadFile]) -> list[str]:
        """Direct-to-storage upload; returns the public URLs in ``files`` order."""
        if not files:
            return []
        targets = [UploadTarget.model_validate(t) for t in self.api.generate_upload_urls(files)]
        if len(targets) != len(files):
            raise ExternalServiceError("Upload link count does not match the number of files.")
        for target, file in zip(targets, files):
            self.api.upload_to_storage(target.signed_url, file)
            logger.info("Uploaded %s", file.filename)
        return [t.public_url for t in targets]

    def add_property(self, data: NewPropertyData, files: list[UploadFile]) -> Optional[Property]:
        self.is_adding = True
        created: list[Property] = []

        def call():
            image_urls = self.upload_images(files)
            payload = data.model_dump(by_alias=True, exclude_none=True)
            payload["imageUrls"] = image_urls
            return self.api.add_property(payload)

        def apply(resp):
            created.append(Property.model_validate(resp["property"]))

        try:
            ok = self.run("addNewProperty", call, apply)
        finally:
            self.is_adding = False
        if not ok:
            return None
        self.fetch_user_properties()
        return created[0]

    def delete_property(self, property_id: str) -> bool:
        def apply(_):
            self.properties = [p for p in self.properties if p.id != property_id]
            if self.current_property and self.current_property.id == property_id:
                self.current_property = None
        return self.run("deleteUserProperty", lambda: self.api.delete_property(property_id), apply)

    def update_property(self, property_id: str, data: dict) -> bool:
        def apply(resp):
            updated = Property.model_validate(resp["property"])
            self.properties = [updated if p.id == property_id else p for p in self.properties]
            if self.current_property and self.current_property.id == property_id:
                self.current_property = updated
        return self.run("updateUserProperty", lambda: self.api.update_property(property_id, data), apply)

    def reset(self) -> None:
        super().reset()
        self.properties = []
        self.current_property = None
        self.is_adding = False
