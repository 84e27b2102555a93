"""Reconcile listing-route query parameters (or navigation state) into filters.

The next ``FilterState`` is computed purely from the incoming intent, then the
individual actions are dispatched to the store so anything subscribed sees
each change, and the fetch is issued with the payload of the computed state.
Nothing waits for the store to settle.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from . import filters as transitions
from .filters import FilterStore
from .listings import ListingResults
from .mapping import params_from_query, to_api_filters
from .schemas import FilterIntent, FilterState, FilterUpdate

logger = logging.getLogger(__name__)

Action = tuple[str, Any]

# (intent field, store action, state field it sets) in the order they are applied
_FIELD_ACTIONS = (
    ("category", "set_category", lambda s: s.category),
    ("room_type", "set_room_type", lambda s: s.room_type),
    ("neighborhood", "set_neighborhood", lambda s: s.neighborhood),
    ("rent_range", "set_rent_range", lambda s: s.rent_range),
    ("bedrooms", "set_bedrooms", lambda s: s.bedrooms),
    ("bathrooms", "set_bathrooms", lambda s: s.bathrooms),
    ("search", "set_search_term", lambda s: s.search_term),
    ("sqft_min", "set_sqft_min", lambda s: s.sqft_range[0]),
    ("sqft_max", "set_sqft_max", lambda s: s.sqft_range[1]),
)


@dataclass
class ReconcileResult:
    dispatched: int = 0
    fetched: bool = False
    filters: Dict[str, str] = field(default_factory=dict)


def _apply(state: FilterState, action: Action) -> FilterState:
    name, arg = action
    return getattr(transitions, name)(state, arg)


def plan_actions(state: FilterState, intent: FilterIntent) -> tuple[list[Action], FilterState]:
    """Store actions that bring ``state`` in line with ``intent``, and the result.

    A field is only touched when the normalized value differs from that field
    in ``state``. Side effects of a transition on other fields (a rent label
    recomputing the price bounds) do not count, so reconciling the same intent
    twice is a no-op even after the slider ceiling moved in between.
    """
    actions: list[Action] = []
    current = state

    for attr, action_name, field_of in _FIELD_ACTIONS:
        value = getattr(intent, attr)
        if value is None:
            continue
        candidate = _apply(current, (action_name, value))
        if field_of(candidate) != field_of(current):
            actions.append((action_name, value))
            current = candidate

    if intent.amenities is not None:
        # amenities are a toggle set: drop what the intent lacks, add what it adds
        wanted = intent.amenities
        toggles = [a for a in current.amenities if a not in wanted]
        toggles += [a for a in wanted if a not in current.amenities]
        for name in toggles:
            actions.append(("toggle_amenity", name))
            current = _apply(current, ("toggle_amenity", name))

    return actions, current


def plan_update(state: FilterState, update: FilterUpdate) -> tuple[list[Action], FilterState]:
    """Like ``plan_actions`` but for direct filter-panel edits."""
    actions, current = plan_actions(state, update)
    for attr, action_name in (
        ("max_price_for_slider", "set_max_price_for_slider"),
        ("price_range_values", "set_price_range_values"),
        ("sort_by", "set_sort_by"),
    ):
        value = getattr(update, attr)
        if value is None:
            continue
        candidate = _apply(current, (action_name, value))
        if candidate != current:
            actions.append((action_name, value))
            current = candidate
    return actions, current


class ListingSynchronizer:
    def __init__(self, filter_store: FilterStore, results: ListingResults):
        self.filter_store = filter_store
        self.results = results
        self._reconciled = False

    def _dispatch_all(self, actions: list[Action], expected: FilterState) -> None:
        for name, arg in actions:
            getattr(self.filter_store, name)(arg)
        if self.filter_store.state != expected:
            # someone else changed the store between planning and dispatch
            logger.warning("Filter store diverged from the reconciled state; using reconciled state")
            self.filter_store.replace(expected)

    def reconcile(
        self,
        query: Mapping[str, Any],
        navigation_state: Optional[Mapping[str, Any]] = None,
        page: int = 1,
    ) -> ReconcileResult:
        state = self.filter_store.state
        actions, next_state = plan_actions(state, params_from_query(query))
        source = "url"

        if not actions and navigation_state and navigation_state.get("filters"):
            actions, next_state = plan_actions(state, params_from_query(navigation_state["filters"]))
            source = "navigation"

        self._dispatch_all(actions, next_state)
        first = not self._reconciled
        self._reconciled = True

        result = ReconcileResult(dispatched=len(actions), filters=to_api_filters(next_state))
        if actions or first:
            logger.info("Reconciled %d filter change(s) from %s; fetching page %s",
                        len(actions), source if actions else "defaults", page)
            self.results.fetch_page(result.filters, page=page)
            result.fetched = True
        else:
            logger.debug("Reconcile: nothing changed")
        return result

    def apply_update(self, update: FilterUpdate) -> ReconcileResult:
        actions, next_state = plan_update(self.filter_store.state, update)
        self._dispatch_all(actions, next_state)
        result = ReconcileResult(dispatched=len(actions), filters=to_api_filters(next_state))
        # sort order is applied client-side, so a sort-only change needs no fetch
        if any(name != "set_sort_by" for name, _ in actions):
            self.results.fetch_page(result.filters, page=1)
            result.fetched = True
        return result

    def go_to_page(self, page: int) -> bool:
        return self.results.fetch_page(to_api_filters(self.filter_store.state), page=page)

    def reset(self) -> bool:
        return self.results.reset_and_refetch(self.filter_store)
