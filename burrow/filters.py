"""Search filter state and its transitions.

Every transition is a pure function ``(FilterState, payload) -> FilterState``;
the input state is never modified. ``FilterStore`` is the mutable holder the
rest of the client shares: it applies a transition, counts it as a dispatch and
notifies subscribers.
"""

import logging
import threading
from typing import Callable, Optional

from .filters_catalog import (
    ANY_PRICE_LABEL,
    CATEGORY_SENTINELS,
    RENT_RANGE_SENTINELS,
    ROOM_TYPE_SENTINELS,
    UNBOUNDED_PRICE,
    normalize_sentinel,
)
from .schemas import FilterState
from .settings import settings
from .utils import parse_leading_int

logger = logging.getLogger(__name__)


def parse_rent_range(label: Optional[str], ceiling: int) -> tuple[int, int]:
    """Numeric bounds for a rent dropdown label.

    "$1000 - $1500" -> (1000, 1500); "$3000+" -> (3000, UNBOUNDED_PRICE).
    Anything unparseable falls back to the full slider range ``(0, ceiling)``.
    """
    fallback = (0, ceiling)
    if not label or label.lower() == ANY_PRICE_LABEL:
        return fallback

    cleaned = label.replace("$", "").replace(",", "")
    if "+" in cleaned:
        minimum = parse_leading_int(cleaned.replace("+", ""))
        return (minimum, UNBOUNDED_PRICE) if minimum is not None else fallback
    if "-" in cleaned:
        parts = [parse_leading_int(p.strip()) for p in cleaned.split("-")]
        if len(parts) == 2 and None not in parts:
            return (parts[0], parts[1])

    logger.warning("Could not parse rent range %r", label)
    return fallback


# ---------- transitions ----------

def set_search_term(state: FilterState, text: str) -> FilterState:
    return state.model_copy(update={"search_term": text})


def set_category(state: FilterState, value: Optional[str]) -> FilterState:
    return state.model_copy(update={"category": normalize_sentinel(value, CATEGORY_SENTINELS)})


def set_room_type(state: FilterState, value: Optional[str]) -> FilterState:
    return state.model_copy(update={"room_type": normalize_sentinel(value, ROOM_TYPE_SENTINELS)})


def set_neighborhood(state: FilterState, value: Optional[str]) -> FilterState:
    # "Any" stays as is; the API projection drops it.
    return state.model_copy(update={"neighborhood": value})


def set_rent_range(state: FilterState, label: Optional[str]) -> FilterState:
    rent_range = normalize_sentinel(label, RENT_RANGE_SENTINELS)
    return state.model_copy(update={
        "rent_range": rent_range,
        "price_range_values": parse_rent_range(rent_range, state.max_price_for_slider),
    })


def set_price_range_values(state: FilterState, values: tuple[int, int]) -> FilterState:
    low, high = values
    return state.model_copy(update={"price_range_values": (low, high), "rent_range": None})


def set_bedrooms(state: FilterState, value: str) -> FilterState:
    return state.model_copy(update={"bedrooms": value})


def set_bathrooms(state: FilterState, value: str) -> FilterState:
    return state.model_copy(update={"bathrooms": value})


def toggle_amenity(state: FilterState, name: str) -> FilterState:
    if name in state.amenities:
        amenities = tuple(a for a in state.amenities if a != name)
    else:
        amenities = state.amenities + (name,)
    return state.model_copy(update={"amenities": amenities})


def set_sqft_min(state: FilterState, value: Optional[int]) -> FilterState:
    return state.model_copy(update={"sqft_range": (value, state.sqft_range[1])})


def set_sqft_max(state: FilterState, value: Optional[int]) -> FilterState:
    return state.model_copy(update={"sqft_range": (state.sqft_range[0], value)})


def set_max_price_for_slider(state: FilterState, value: int) -> FilterState:
    ceiling = value if value > 0 else settings.DEFAULT_MAX_PRICE
    low, high = state.price_range_values
    if high > ceiling or high == UNBOUNDED_PRICE:
        high = ceiling

    rent_range = state.rent_range
    _, label_high = parse_rent_range(rent_range, ceiling)
    if label_high > ceiling and label_high != UNBOUNDED_PRICE:
        rent_range = None

    return state.model_copy(update={
        "max_price_for_slider": ceiling,
        "price_range_values": (low, high),
        "rent_range": rent_range,
    })


def set_sort_by(state: FilterState, value: str) -> FilterState:
    return state.model_copy(update={"sort_by": value})


def reset_filters(state: FilterState) -> FilterState:
    ceiling = state.max_price_for_slider
    return FilterState(max_price_for_slider=ceiling, price_range_values=(0, ceiling))


# ---------- store ----------

Listener = Callable[[FilterState], None]


class FilterStore:
    """Holds the current ``FilterState``; all changes go through its actions."""

    def __init__(self, state: Optional[FilterState] = None):
        self.state = state or FilterState()
        self.dispatch_count = 0
        self._listeners: list[Listener] = []
        # reentrant: listeners may dispatch from inside a notification
        self._lock = threading.RLock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, action: str, transition, *args) -> FilterState:
        with self._lock:
            self.state = transition(self.state, *args)
            self.dispatch_count += 1
            logger.debug("filters/%s %s", action, args)
            for listener in list(self._listeners):
                listener(self.state)
            return self.state

    def replace(self, state: FilterState) -> FilterState:
        return self._dispatch("replace", lambda _s, new: new, state)

    def set_search_term(self, text: str) -> FilterState:
        return self._dispatch("setSearchTerm", set_search_term, text)

    def set_category(self, value: Optional[str]) -> FilterState:
        return self._dispatch("setCategory", set_category, value)

    def set_room_type(self, value: Optional[str]) -> FilterState:
        return self._dispatch("setRoomType", set_room_type, value)

    def set_neighborhood(self, value: Optional[str]) -> FilterState:
        return self._dispatch("setNeighborhood", set_neighborhood, value)

    def set_rent_range(self, label: Optional[str]) -> FilterState:
        return self._dispatch("setRentRange", set_rent_range, label)

    def set_price_range_values(self, values: tuple[int, int]) -> FilterState:
        return self._dispatch("setPriceRangeValues", set_price_range_values, values)

    def set_bedrooms(self, value: str) -> FilterState:
        return self._dispatch("setBedrooms", set_bedrooms, value)

    def set_bathrooms(self, value: str) -> FilterState:
        return self._dispatch("setBathrooms", set_bathrooms, value)

    def toggle_amenity(self, name: str) -> FilterState:
        return self._dispatch("toggleAmenity", toggle_amenity, name)

    def set_sqft_min(self, value: Optional[int]) -> FilterState:
        return self._dispatch("setSqftMin", set_sqft_min, value)

    def set_sqft_max(self, value: Optional[int]) -> FilterState:
        return self._dispatch("setSqftMax", set_sqft_max, value)

    def set_max_price_for_slider(self, value: int) -> FilterState:
        return self._dispatch("setMaxPriceForSlider", set_max_price_for_slider, value)

    def set_sort_by(self, value: str) -> FilterState:
        return self._dispatch("setSortBy", set_sort_by, value)

    def reset_filters(self) -> FilterState:
        logger.info("Resetting filters (ceiling=%s)", self.state.max_price_for_slider)
        return self._dispatch("resetFilters", reset_filters)
