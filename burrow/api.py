"""HTTP client for the Burrow REST backend.

One method per endpoint. Transport and HTTP failures come back as ``AppError``
subclasses carrying the backend's ``message`` when it sent one; callers never
see a ``requests`` exception.
"""

import logging
from typing import Any, Callable, Dict, Optional

import requests

from .errors import (
    AppError,
    AuthError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
    VerificationRequiredError,
)
from .mapping import build_listing_params
from .schemas import UploadFile
from .settings import settings

logger = logging.getLogger(__name__)


def _error_message(response: requests.Response, default: str) -> tuple[str, dict]:
    try:
        body = response.json()
    except ValueError:
        return default, {}
    if isinstance(body, dict):
        return body.get("message") or default, body
    return default, {}


class BurrowApi:
    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        on_auth_error: Optional[Callable[[AuthError], None]] = None,
    ):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.on_auth_error = on_auth_error

    # ---------- plumbing ----------

    def set_token(self, token: Optional[str]) -> None:
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        else:
            self.session.headers.pop("Authorization", None)

    @property
    def is_authenticated(self) -> bool:
        return "Authorization" in self.session.headers

    def request(self, method: str, path: str, *, default_error: str = "Request failed.", **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ExternalServiceError(f"{default_error} ({e.__class__.__name__})") from e

        if response.status_code >= 400:
            raise self._to_error(response, default_error)

        logger.info("%s %s -> %s", method, path, response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(f"{default_error} (invalid JSON)") from e

    def _to_error(self, response: requests.Response, default: str) -> AppError:
        status = response.status_code
        message, body = _error_message(response, default)
        logger.warning("%s %s -> %s: %s", response.request.method if response.request else "-",
                       response.url, status, message)
        if status == 403 and body.get("requiresVerification"):
            return VerificationRequiredError(message, email=body.get("email"))
        if status in (401, 403):
            err = AuthError(message, status_code=status)
            if self.on_auth_error:
                self.on_auth_error(err)
            return err
        if status == 404:
            return NotFoundError(message)
        if status in (400, 409, 422):
            return ValidationError(message, status_code=status)
        return ExternalServiceError(message)

    # ---------- properties ----------

    def list_properties(self, filters: Dict[str, Any], page: int = 1, limit: Optional[int] = None) -> dict:
        params = build_listing_params(filters, page, limit or settings.PAGE_SIZE)
        return self.request("GET", "/properties/all", params=params,
                            default_error="Failed to fetch public properties.")

    def get_property(self, property_id: str) -> dict:
        data = self.request("GET", f"/properties/id/{property_id}",
                            default_error="Failed to fetch property details.")
        if not data:
            raise NotFoundError("Property not found.")
        return data

    def my_properties(self) -> dict:
        return self.request("GET", "/properties", default_error="Failed to fetch your properties.")

    def properties_by_user(self, user_id: str) -> list:
        return self.request("GET", f"/properties/user/{user_id}",
                            default_error="Failed to fetch user listings.")

    def generate_upload_urls(self, files: list[UploadFile]) -> list:
        body = {"files": [{"filename": f.filename, "contentType": f.content_type} for f in files]}
        return self.request("POST", "/properties/generate-upload-urls", json=body,
                            default_error="Could not get upload links.")

    def upload_to_storage(self, signed_url: str, file: UploadFile) -> None:
        # Presigned URLs are absolute and must not carry our bearer token.
        try:
            response = requests.put(
                signed_url,
                data=file.content,
                headers={"Content-Type": file.content_type, "x-amz-acl": "public-read"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ExternalServiceError(f"File upload failed for {file.filename}") from e
        if not response.ok:
            raise ExternalServiceError(
                f"File upload failed for {file.filename} with status {response.status_code}"
            )

    def add_property(self, data: dict) -> dict:
        return self.request("POST", "/properties/add", json=data,
                            default_error="Failed to add property. Please check all fields and try again.")

    def update_property(self, property_id: str, data: dict) -> dict:
        return self.request("PUT", f"/properties/{property_id}", json=data,
                            default_error="Failed to update property.")

    def delete_property(self, property_id: str) -> None:
        self.request("DELETE", f"/properties/{property_id}", default_error="Failed to delete property.")

    # ---------- favorites ----------

    def list_favorites(self) -> dict:
        return self.request("GET", "/favorites", default_error="Failed to fetch favorites")

    def add_favorite(self, property_id: str) -> dict:
        return self.request("POST", "/favorites", json={"propertyId": property_id},
                            default_error="Failed to add to favorites")

    def remove_favorite(self, property_id: str) -> None:
        self.request("DELETE", f"/favorites/{property_id}", default_error="Failed to remove from favorites")

    # ---------- interests ----------

    def submit_interest(self, property_id: str, message: str, move_in_date: str) -> dict:
        body = {"propertyId": property_id, "message": message, "moveInDate": move_in_date}
        return self.request("POST", "/interests", json=body, default_error="Failed to send request")

    def interest_status(self, property_id: str) -> dict:
        return self.request("GET", "/interests/status", params={"propertyId": property_id},
                            default_error="Failed to fetch request status")

    def sent_interests(self) -> list:
        return self.request("GET", "/interests/sent", default_error="Failed to fetch sent requests")

    def received_interests(self) -> list:
        return self.request("GET", "/interests/received", default_error="Failed to fetch received requests")

    def withdraw_interest(self, interest_id: str) -> dict:
        return self.request("DELETE", f"/interests/{interest_id}", default_error="Failed to withdraw request")

    def approve_interest(self, interest_id: str) -> dict:
        return self.request("PUT", f"/interests/{interest_id}/approve", default_error="Failed to approve request")

    def decline_interest(self, interest_id: str) -> dict:
        return self.request("PUT", f"/interests/{interest_id}/decline", default_error="Failed to decline request")

    # ---------- ambassador requests ----------

    def submit_ambassador_request(self, body: dict) -> dict:
        return self.request("POST", "/ambassador-requests", json=body,
                            default_error="Failed to submit ambassador request")

    def sent_ambassador_requests(self) -> list:
        return self.request("GET", "/ambassador-requests/sent", default_error="Failed to fetch your requests")

    def received_ambassador_requests(self) -> list:
        return self.request("GET", "/ambassador-requests/received", default_error="Failed to fetch requests")

    def ambassador_request_status(self, property_id: str) -> dict:
        return self.request("GET", "/ambassador-requests/status", params={"propertyId": property_id},
                            default_error="Failed to fetch ambassador request status")

    def update_ambassador_request_status(self, request_id: str, status: str) -> dict:
        return self.request("PUT", f"/ambassador-requests/{request_id}/status", json={"status": status},
                            default_error="Failed to update request")

    def cancel_ambassador_request(self, request_id: str) -> None:
        self.request("DELETE", f"/ambassador-requests/{request_id}", default_error="Failed to cancel request")

    def review_ambassador_request(self, request_id: str, review: dict) -> dict:
        return self.request("PUT", f"/ambassador-requests/{request_id}/review", json=review,
                            default_error="Failed to submit review")

    # ---------- ambassador dashboard ----------

    def dashboard(self, section: str) -> Any:
        return self.request("GET", f"/ambassador/dashboard/{section}",
                            default_error=f"Failed to load dashboard {section}")

    def dashboard_request(self, request_id: str) -> dict:
        return self.request("GET", f"/ambassador/dashboard/request/{request_id}",
                            default_error="Failed to load request details")

    def claim_request(self, request_id: str, scheduled_date: Optional[str] = None) -> dict:
        body = {"scheduledDate": scheduled_date} if scheduled_date else {}
        return self.request("POST", f"/ambassador/dashboard/claim-request/{request_id}", json=body,
                            default_error="Failed to claim request")

    # ---------- contracts ----------

    def contract_by_chat(self, property_id: str, counterparty_id: str) -> Optional[dict]:
        return self.request("GET", "/contracts/by-chat",
                            params={"propertyId": property_id, "counterpartyId": counterparty_id},
                            default_error="Failed to fetch agreement")

    def my_agreements(self) -> list:
        return self.request("GET", "/contracts/my-agreements", default_error="Failed to fetch agreements")

    def get_contract(self, contract_id: str) -> dict:
        return self.request("GET", f"/contracts/{contract_id}", default_error="Failed to fetch contract details")

    # ---------- profile ----------

    def my_profile(self) -> dict:
        return self.request("GET", "/profile", default_error="Failed to fetch detailed profile.")

    def public_profile(self, user_id: str) -> dict:
        return self.request("GET", f"/profile/public/{user_id}", default_error="Failed to fetch profile.")

    def profile_upload_url(self, file: UploadFile) -> dict:
        return self.request("POST", "/upload-url",
                            json={"filename": file.filename, "contentType": file.content_type},
                            default_error="Could not get an upload link.")

    def update_profile(self, body: dict) -> dict:
        return self.request("PUT", "/profile", json=body,
                            default_error="Failed to update profile. Please try again.")

    # ---------- notifications ----------

    def list_notifications(self, page: int = 1, limit: Optional[int] = None) -> dict:
        params = {"page": page, "limit": limit or settings.NOTIFICATIONS_PAGE_SIZE}
        return self.request("GET", "/notifications", params=params,
                            default_error="Failed to fetch notifications")

    def mark_notifications_read(self) -> None:
        self.request("POST", "/notifications/read", default_error="Failed to mark notifications as read")

    def delete_notification(self, notification_id: str) -> None:
        self.request("DELETE", f"/notifications/{notification_id}", default_error="Failed to delete notification")

    def clear_read_notifications(self) -> None:
        self.request("POST", "/notifications/clear-read", default_error="Failed to clear notifications")

    # ---------- auth ----------

    def register(self, body: dict) -> dict:
        return self.request("POST", "/register", json=body, default_error="Registration failed.")

    def login(self, email: str, password: str) -> dict:
        return self.request("POST", "/login", json={"email": email, "password": password},
                            default_error="Login failed.")

    def verify_otp(self, email: str, otp: str) -> dict:
        return self.request("POST", "/verify-otp", json={"email": email, "otp": otp},
                            default_error="OTP verification failed.")

    def resend_otp(self, email: str) -> dict:
        return self.request("POST", "/resend-otp", json={"email": email}, default_error="Failed to resend OTP.")

    def current_user(self) -> dict:
        return self.request("GET", "/user", default_error="Failed to fetch user profile.")

    def update_user(self, body: dict) -> dict:
        return self.request("PUT", "/updateUser", json=body, default_error="Failed to update profile.")

    def change_password(self, old_password: str, new_password: str) -> dict:
        return self.request("PUT", "/user/change-password",
                            json={"oldPassword": old_password, "newPassword": new_password},
                            default_error="Failed to change password.")

    def logout(self) -> None:
        self.request("POST", "/logout", json={}, default_error="Logout failed.")
