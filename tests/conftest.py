import json

import pytest

from burrow.api import BurrowApi

BASE_URL = "http://burrow.test/api"


class FakeResponse:
    def __init__(self, status_code=200, body=None, url=""):
        self.status_code = status_code
        self._body = body
        self.url = url
        self.request = None
        self.ok = status_code < 400
        self.content = b"" if body is None else json.dumps(body).encode()

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    """Stands in for ``requests.Session``: canned responses per (method, path)."""

    def __init__(self):
        self.headers = {}
        self.calls = []
        self._routes = {}

    def add(self, method, path, body=None, status=200):
        """Queue a response. The last one queued for a route keeps answering."""
        self._routes.setdefault((method, path), []).append((status, body))

    def add_handler(self, method, path, handler):
        self._routes.setdefault((method, path), []).append(handler)

    def request(self, method, url, **kwargs):
        path = url[len(BASE_URL):]
        self.calls.append((method, path, kwargs))
        queue = self._routes.get((method, path))
        if not queue:
            raise AssertionError(f"unexpected request {method} {path}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            item = item(**kwargs)
        status, body = item
        return FakeResponse(status, body, url)

    def calls_to(self, method, path):
        return [c for c in self.calls if c[0] == method and c[1] == path]


def make_property(pid="p1", rent=1200, created="2024-01-01T00:00:00Z", **overview):
    return {
        "_id": pid,
        "userId": "lister-1",
        "overview": {
            "title": f"Listing {pid}",
            "category": "Apartment",
            "roomType": "Single Room",
            "neighborhood": "Allston",
            "rent": rent,
            **overview,
        },
        "listingDetails": {"bedrooms": 2, "bathrooms": 1, "floorNo": 3},
        "amenities": ["Wi-Fi"],
        "addressAndLocation": {"address": "1 Harvard Ave", "location": {"lat": 42.35, "lng": -71.13}},
        "leaseLength": "6 months",
        "description": "Sunny room",
        "images": [],
        "createdAt": created,
    }


def make_page(properties, page=1, total_pages=1, per_page=9):
    return {
        "properties": properties,
        "pagination": {
            "currentPage": page,
            "totalPages": total_pages,
            "totalItems": len(properties) if total_pages == 1 else total_pages * per_page,
            "itemsPerPage": per_page,
        },
    }


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def api(session):
    return BurrowApi(base_url=BASE_URL, session=session, timeout=1)
