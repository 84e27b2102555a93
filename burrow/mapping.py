import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from .filters_catalog import ANY_COUNT, ANY_NEIGHBORHOOD
from .schemas import FilterIntent, FilterState, Property
from .utils import clean_params, parse_leading_int, qs

logger = logging.getLogger(__name__)


def to_api_filters(state: FilterState) -> Dict[str, str]:
    """Project filter state into the query payload ``GET /properties/all`` expects.

    Fields holding their "no constraint" sentinel are left out. ``rentRange``
    goes through as the dropdown label; the backend parses it. Search term and
    sort order are client-side only.
    """
    params: Dict[str, str] = {}
    if state.category:
        params["category"] = state.category
    if state.room_type:
        params["roomType"] = state.room_type
    if state.neighborhood and state.neighborhood != ANY_NEIGHBORHOOD:
        params["neighborhood"] = state.neighborhood
    if state.rent_range:
        params["rentRange"] = state.rent_range
    if state.bedrooms != ANY_COUNT:
        params["bedrooms"] = state.bedrooms
    if state.bathrooms != ANY_COUNT:
        params["bathrooms"] = state.bathrooms
    if state.amenities:
        params["amenities"] = ",".join(state.amenities)

    sqft_min, sqft_max = state.sqft_range
    if sqft_min is not None:
        params["sqftMin"] = str(sqft_min)
    if sqft_max is not None:
        params["sqftMax"] = str(sqft_max)
    return params


def build_listing_params(filters: Mapping[str, Any], page: int, limit: int) -> Dict[str, Any]:
    return clean_params({"page": page, "limit": limit, **filters})


def _first(query: Mapping[str, Any], key: str) -> Optional[str]:
    value = query.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    # navigation state may carry numbers (bedrooms=2)
    return None if value is None else str(value)


def _split_list(raw: Optional[str]) -> Optional[tuple[str, ...]]:
    if raw is None:
        return None
    return tuple(dict.fromkeys(a.strip() for a in raw.split(",") if a.strip()))


def params_from_query(query: Mapping[str, Any]) -> FilterIntent:
    """Read the recognised listing-route query parameters.

    Unknown keys are ignored; non-numeric sqft bounds count as absent.
    """
    amenities = query.get("amenities")
    if isinstance(amenities, (list, tuple)):
        amenities = ",".join(str(a) for a in amenities)

    intent = FilterIntent(
        category=_first(query, "category"),
        room_type=_first(query, "roomType"),
        neighborhood=_first(query, "neighborhood"),
        rent_range=_first(query, "rentRange"),
        bedrooms=_first(query, "bedrooms"),
        bathrooms=_first(query, "bathrooms"),
        search=_first(query, "search"),
        amenities=_split_list(amenities),
        sqft_min=_non_negative(_first(query, "sqftMin")),
        sqft_max=_non_negative(_first(query, "sqftMax")),
    )
    logger.debug("params_from_query -> %s", intent.model_dump(exclude_none=True))
    return intent


def _non_negative(raw: Optional[str]) -> Optional[int]:
    if raw is None or not str(raw).strip().isdigit():
        return None
    return parse_leading_int(raw)


def filters_to_query(state: FilterState) -> str:
    """Shareable listing-route query string for ``state``."""
    params: Dict[str, Any] = dict(to_api_filters(state))
    if state.search_term:
        params["search"] = state.search_term
    return qs(params)


def sort_properties(properties: Iterable[Property], sort_by: str) -> list[Property]:
    items = list(properties)
    if sort_by == "price_low":
        items.sort(key=lambda p: p.overview.rent)
    elif sort_by == "price_high":
        items.sort(key=lambda p: p.overview.rent, reverse=True)
    else:
        items.sort(key=lambda p: p.created_at, reverse=True)
    return items
