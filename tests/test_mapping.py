from urllib.parse import parse_qs

from burrow.mapping import (
    build_listing_params,
    filters_to_query,
    params_from_query,
    sort_properties,
    to_api_filters,
)
from burrow.schemas import FilterState, Property
from conftest import make_property


def test_to_api_filters_basic():
    state = FilterState(
        category="Apartment",
        room_type="Single Room",
        neighborhood="Back Bay",
        rent_range="$1000 - $1500",
        bedrooms="2",
        bathrooms="1",
        amenities=("Gym", "Wi-Fi"),
        sqft_range=(300, None),
        search_term="near campus",
        sort_by="price_low",
    )
    assert to_api_filters(state) == {
        "category": "Apartment",
        "roomType": "Single Room",
        "neighborhood": "Back Bay",
        "rentRange": "$1000 - $1500",
        "bedrooms": "2",
        "bathrooms": "1",
        "amenities": "Gym,Wi-Fi",
        "sqftMin": "300",
    }


def test_to_api_filters_omits_sentinels():
    state = FilterState(neighborhood="Any", bedrooms="0", bathrooms="0", amenities=(), sqft_range=(None, None))
    assert to_api_filters(state) == {}


def test_to_api_filters_omits_none_neighborhood():
    assert "neighborhood" not in to_api_filters(FilterState(neighborhood=None))


def test_build_listing_params_merges_page_and_limit():
    params = build_listing_params({"category": "Apartment"}, page=2, limit=9)
    assert params == {"page": 2, "limit": 9, "category": "Apartment"}


def test_params_from_query_reads_known_keys():
    intent = params_from_query({
        "category": "Apartment",
        "roomType": "Shared Room",
        "bedrooms": "2",
        "search": "fenway",
        "amenities": "Gym, Wi-Fi,,Gym",
        "utm_source": "newsletter",
    })
    assert intent.category == "Apartment"
    assert intent.room_type == "Shared Room"
    assert intent.bedrooms == "2"
    assert intent.search == "fenway"
    assert intent.amenities == ("Gym", "Wi-Fi")
    assert intent.neighborhood is None
    assert intent.rent_range is None


def test_params_from_query_ignores_malformed_sqft():
    intent = params_from_query({"sqftMin": "abc", "sqftMax": "-5"})
    assert intent.sqft_min is None
    assert intent.sqft_max is None
    assert params_from_query({"sqftMin": "450"}).sqft_min == 450


def test_params_from_query_accepts_navigation_values():
    intent = params_from_query({"bedrooms": 2, "amenities": ["Gym", "Laundry"]})
    assert intent.bedrooms == "2"
    assert intent.amenities == ("Gym", "Laundry")


def test_filters_to_query_round_trips_through_parser():
    state = FilterState(category="Apartment", neighborhood="Fenway", search_term="quiet", amenities=("Gym",))
    query = {k: v[0] for k, v in parse_qs(filters_to_query(state)).items()}
    assert query == {"category": "Apartment", "neighborhood": "Fenway", "search": "quiet", "amenities": "Gym"}
    intent = params_from_query(query)
    assert (intent.category, intent.neighborhood, intent.search) == ("Apartment", "Fenway", "quiet")


def test_sort_properties():
    props = [
        Property.model_validate(make_property("a", rent=1500, created="2024-01-01T00:00:00Z")),
        Property.model_validate(make_property("b", rent=900, created="2024-03-01T00:00:00Z")),
        Property.model_validate(make_property("c", rent=2100, created="2024-02-01T00:00:00Z")),
    ]
    assert [p.id for p in sort_properties(props, "price_low")] == ["b", "a", "c"]
    assert [p.id for p in sort_properties(props, "price_high")] == ["c", "a", "b"]
    assert [p.id for p in sort_properties(props, "newest")] == ["b", "c", "a"]
