import pytest
import requests

from burrow.api import BurrowApi
from burrow.errors import (
    AuthError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
    VerificationRequiredError,
)
from conftest import BASE_URL


def test_set_token_sets_default_header(api, session):
    api.set_token("abc")
    assert session.headers["Authorization"] == "Bearer abc"
    assert api.is_authenticated
    api.set_token(None)
    assert "Authorization" not in session.headers


def test_base_url_trailing_slash(session):
    api = BurrowApi(base_url=BASE_URL + "/", session=session)
    session.add("GET", "/favorites", {"favorites": []})
    api.list_favorites()
    assert session.calls[0][1] == "/favorites"


@pytest.mark.parametrize("status,error_cls", [
    (400, ValidationError),
    (409, ValidationError),
    (401, AuthError),
    (403, AuthError),
    (404, NotFoundError),
    (500, ExternalServiceError),
    (503, ExternalServiceError),
])
def test_status_codes_map_to_errors(api, session, status, error_cls):
    session.add("POST", "/interests", status=status, body={"message": "nope"})
    with pytest.raises(error_cls) as exc:
        api.submit_interest("p1", "hi", "2025-09-01")
    assert exc.value.message == "nope"


def test_missing_message_uses_default(api, session):
    session.add("DELETE", "/favorites/p1", status=500)
    with pytest.raises(ExternalServiceError) as exc:
        api.remove_favorite("p1")
    assert exc.value.message == "Failed to remove from favorites"


def test_login_requiring_verification(api, session):
    session.add("POST", "/login", status=403,
                body={"message": "Please verify your email", "requiresVerification": True, "email": "a@northeastern.edu"})
    with pytest.raises(VerificationRequiredError) as exc:
        api.login("a@northeastern.edu", "pw")
    assert exc.value.email == "a@northeastern.edu"


def test_auth_error_hook_called(api, session):
    seen = []
    api.on_auth_error = seen.append
    session.add("GET", "/favorites", status=401, body={"message": "Token expired"})
    with pytest.raises(AuthError):
        api.list_favorites()
    assert [e.message for e in seen] == ["Token expired"]


def test_timeout_becomes_external_error(api, session):
    session.add_handler("GET", "/interests/status", requests.exceptions.Timeout("slow"))
    with pytest.raises(ExternalServiceError):
        api.interest_status("p1")


def test_empty_property_is_not_found(api, session):
    session.add("GET", "/properties/id/p1", status=200, body=None)
    with pytest.raises(NotFoundError):
        api.get_property("p1")


def test_query_params_for_status_lookups(api, session):
    session.add("GET", "/contracts/by-chat", {"_id": "c1", "status": "DRAFT"})
    api.contract_by_chat("p1", "u2")
    assert session.calls[0][2]["params"] == {"propertyId": "p1", "counterpartyId": "u2"}


def test_claim_request_sends_scheduled_date(api, session):
    session.add("POST", "/ambassador/dashboard/claim-request/r1", {"message": "claimed"})
    api.claim_request("r1", "2025-09-03T15:00:00Z")
    assert session.calls[0][2]["json"] == {"scheduledDate": "2025-09-03T15:00:00Z"}
