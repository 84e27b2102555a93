import pytest
import requests

from burrow.errors import ValidationError
from burrow.filters import FilterStore
from burrow.listings import ListingResults, UserListings, price_stats
from burrow.schemas import NewPropertyData, Property, UploadFile
from conftest import make_page, make_property


def test_fetch_page_success_replaces_results(api, session):
    session.add("GET", "/properties/all", make_page([make_property("a"), make_property("b")], total_pages=2))
    results = ListingResults(api, limit=9)

    assert results.fetch_page({"category": "Apartment"}, page=1)
    assert [p.id for p in results.properties] == ["a", "b"]
    assert results.pagination.total_pages == 2
    assert results.status == "succeeded"
    assert results.error is None

    _, _, kwargs = session.calls[0]
    assert kwargs["params"] == {"page": 1, "limit": 9, "category": "Apartment"}
    assert kwargs["timeout"] == 1


def test_fetch_page_failure_keeps_previous_results(api, session):
    session.add("GET", "/properties/all", make_page([make_property("a")], total_pages=3))
    session.add("GET", "/properties/all", status=500, body={"message": "Database unavailable"})
    results = ListingResults(api)
    results.fetch_page({}, page=1)
    before = results.pagination

    assert not results.fetch_page({"category": "Apartment"}, page=1)
    assert results.status == "failed"
    assert results.error == "Database unavailable"
    assert results.pagination == before
    assert [p.id for p in results.properties] == ["a"]


def test_network_error_is_stored_not_raised(api, session):
    session.add_handler("GET", "/properties/all", requests.exceptions.ConnectionError("refused"))
    results = ListingResults(api)

    assert not results.fetch_page({"category": "Apartment"})
    assert results.status == "failed"
    assert "Failed to fetch public properties." in results.error
    assert results.pagination is None


def test_malformed_response_is_a_failure(api, session):
    session.add("GET", "/properties/all", {"properties": [{"_id": "broken"}]})
    results = ListingResults(api)
    assert not results.fetch_page({})
    assert results.error == "Unexpected response from server."


def test_stale_response_is_discarded(api, session):
    results = ListingResults(api)
    # while the page-2 request is in flight, a filter change issues a new fetch
    def slow_page_two(params, **_):
        if params["page"] == 2:
            results.fetch_page({"category": "Apartment"}, page=1)
            return 200, make_page([make_property("stale")], page=2, total_pages=2)
        return 200, make_page([make_property("fresh")])

    session.add_handler("GET", "/properties/all", slow_page_two)
    assert not results.fetch_page({}, page=2)
    assert [p.id for p in results.properties] == ["fresh"]
    assert results.pagination.current_page == 1
    assert results.status == "succeeded"


def test_retry_repeats_last_request(api, session):
    session.add("GET", "/properties/all", status=503, body={"message": "down"})
    session.add("GET", "/properties/all", make_page([make_property("a")]))
    results = ListingResults(api)
    results.fetch_page({"bedrooms": "2"}, page=3, limit=4)

    assert results.retry()
    first, second = session.calls
    assert first[2]["params"] == second[2]["params"] == {"page": 3, "limit": 4, "bedrooms": "2"}


def test_retry_without_request_raises(api):
    with pytest.raises(ValidationError):
        ListingResults(api).retry()


def test_reset_and_refetch(api, session):
    session.add("GET", "/properties/all", make_page([]))
    store = FilterStore()
    store.set_category("Apartment")
    store.set_max_price_for_slider(8000)
    results = ListingResults(api, limit=9)

    results.reset_and_refetch(store)
    assert store.state.category is None
    assert store.state.max_price_for_slider == 8000
    assert session.calls[0][2]["params"] == {"page": 1, "limit": 9}


def test_adjust_slider_ceiling_only_raises(api, session):
    session.add("GET", "/properties/all", make_page([make_property("a", rent=6400.5), make_property("b", rent=900)]))
    results = ListingResults(api)
    results.fetch_page({})
    store = FilterStore()

    results.adjust_slider_ceiling(store)
    assert store.state.max_price_for_slider == 6401
    store.set_max_price_for_slider(9000)
    results.adjust_slider_ceiling(store)
    assert store.state.max_price_for_slider == 9000


def test_price_stats_buckets():
    props = [Property.model_validate(make_property(str(i), rent=r)) for i, r in enumerate([1500, 2000, 2500, 3500])]
    stats = price_stats(props)
    assert (stats.affordable, stats.mid_range, stats.expensive) == (2, 1, 1)
    assert stats.average_price == 2375


def test_user_listings_fetch_and_delete(api, session):
    session.headers["Authorization"] = "Bearer t"
    session.add("GET", "/properties", {"properties": [make_property("mine-1"), make_property("mine-2")]})
    session.add("DELETE", "/properties/mine-1", {"message": "deleted"})
    listings = UserListings(api)

    assert listings.fetch_user_properties()
    assert listings.delete_property("mine-1")
    assert [p.id for p in listings.properties] == ["mine-2"]


def test_fetch_property_not_found(api, session):
    session.add("GET", "/properties/id/nope", status=404, body={"message": "Property not found"})
    listings = UserListings(api)
    assert not listings.fetch_property_by_id("nope")
    assert listings.error == "Property not found"
    assert listings.last_error.status_code == 404


def _new_property():
    return NewPropertyData.model_validate({
        "overview": {"category": "Apartment", "roomType": "Single Room", "neighborhood": "Fenway", "rent": 1400},
        "listingDetails": {"bedrooms": 2, "bathrooms": 1, "floorNo": 2},
        "addressAndLocation": {"address": "5 Park Dr", "lat": 42.34, "lng": -71.09},
        "leaseLength": "Summer",
        "description": "Near the Fens",
    })


def test_add_property_uploads_then_saves(api, session, monkeypatch):
    session.add("POST", "/properties/generate-upload-urls", [
        {"signedUrl": "https://spaces.test/put/1", "publicUrl": "https://cdn.test/1.jpg"},
    ])
    session.add("POST", "/properties/add", {"property": make_property("new")})
    session.add("GET", "/properties", {"properties": [make_property("new")]})
    puts = []

    class Ok:
        ok = True
        status_code = 200

    def fake_put(url, data, headers, timeout):
        puts.append((url, headers))
        return Ok()

    monkeypatch.setattr("burrow.api.requests.put", fake_put)
    listings = UserListings(api)
    created = listings.add_property(_new_property(), [UploadFile(filename="1.jpg", content_type="image/jpeg", content=b"x")])

    assert created.id == "new"
    assert puts == [("https://spaces.test/put/1", {"Content-Type": "image/jpeg", "x-amz-acl": "public-read"})]
    body = session.calls_to("POST", "/properties/add")[0][2]["json"]
    assert body["imageUrls"] == ["https://cdn.test/1.jpg"]
    assert body["overview"]["roomType"] == "Single Room"
    assert [p.id for p in listings.properties] == ["new"]


def test_add_property_upload_failure_does_not_save(api, session, monkeypatch):
    session.add("POST", "/properties/generate-upload-urls", [
        {"signedUrl": "https://spaces.test/put/1", "publicUrl": "https://cdn.test/1.jpg"},
    ])

    class Denied:
        ok = False
        status_code = 403

    monkeypatch.setattr("burrow.api.requests.put", lambda *a, **k: Denied())
    listings = UserListings(api)
    created = listings.add_property(_new_property(), [UploadFile(filename="1.jpg", content_type="image/jpeg", content=b"x")])

    assert created is None
    assert listings.error == "File upload failed for 1.jpg with status 403"
    assert not session.calls_to("POST", "/properties/add")
    assert listings.is_adding is False


def test_update_property_replaces_in_place(api, session):
    session.add("GET", "/properties", {"properties": [make_property("mine-1", rent=1000)]})
    session.add("PUT", "/properties/mine-1", {"property": make_property("mine-1", rent=1100)})
    listings = UserListings(api)
    listings.fetch_user_properties()
    listings.select_from_list(listings.properties[0])

    assert listings.update_property("mine-1", {"overview": {"rent": 1100}})
    assert listings.properties[0].overview.rent == 1100
    assert listings.current_property.overview.rent == 1100


def test_failed_lookup_of_another_property_clears_the_shown_one(api, session):
    session.add("GET", "/properties/id/p1", make_property("p1"))
    session.add("GET", "/properties/id/p2", status=404, body={"message": "Property not found"})
    listings = UserListings(api)
    assert listings.fetch_property_by_id("p1")

    assert not listings.fetch_property_by_id("p2")
    assert listings.current_property is None
    assert listings.status == "failed"


def test_select_and_clear_current_property(api):
    listings = UserListings(api)
    listings.select_from_list(Property.model_validate(make_property("p1")))
    assert listings.status == "succeeded"
    listings.clear_current_property()
    assert listings.current_property is None
    assert listings.status == "idle"
