"""Bearer-token session against the Burrow auth endpoints.

The token is kept in a small JSON file (the client's local storage) and set as
a default header on the API session. Any 401/403 seen by the API client clears
it, so the next view asks the user to log in again.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from .api import BurrowApi
from .errors import AppError, AuthError, ValidationError, VerificationRequiredError
from .schemas import User
from .settings import settings
from .state import Slice

logger = logging.getLogger(__name__)


class TokenStorage:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or settings.TOKEN_FILE)

    def load(self) -> Optional[str]:
        try:
            return json.loads(self.path.read_text(encoding="utf-8")).get("token")
        except FileNotFoundError:
            return None
        except (ValueError, AttributeError):
            logger.warning("Ignoring unreadable token file %s", self.path)
            return None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": token}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class AuthSession(Slice):
    name = "auth"

    def __init__(self, api: BurrowApi, storage: Optional[TokenStorage] = None):
        super().__init__()
        self.api = api
        self.storage = storage or TokenStorage()
        self.token: Optional[str] = None
        self.user: Optional[User] = None
        self.pending_verification_email: Optional[str] = None
        api.on_auth_error = self.handle_auth_failure

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def _set_token(self, token: Optional[str]) -> None:
        self.token = token
        self.api.set_token(token)
        if token:
            self.storage.save(token)
        else:
            self.storage.clear()

    def restore(self) -> bool:
        token = self.storage.load()
        if not token:
            return False
        self.token = token
        self.api.set_token(token)
        return self.fetch_user()

    def handle_auth_failure(self, err: AuthError) -> None:
        if self.token is None:
            return
        logger.warning("Auth failure (%s); clearing stored token", err.status_code)
        self.token = None
        self.user = None
        self.api.set_token(None)
        self.storage.clear()

    def register(self, name: str, email: str, password: str, whatsapp_number: Optional[str] = None) -> bool:
        body = {"name": name, "email": email, "password": password}
        if whatsapp_number:
            body["whatsappNumber"] = whatsapp_number

        def apply(_):
            # the account is created unverified; an OTP goes to the e-mail
            self.pending_verification_email = email
        return self.run("register", lambda: self.api.register(body), apply)

    def login(self, email: str, password: str) -> bool:
        if not email or not password:
            self._rejected(ValidationError("Email and password are required."))
            return False
        ok = self.run("login", lambda: self.api.login(email, password),
                      lambda data: self._set_token(data["token"]))
        if not ok:
            if isinstance(self.last_error, VerificationRequiredError):
                # login refused until the e-mail OTP is confirmed
                self.pending_verification_email = self.last_error.email or email
            return False
        return self.fetch_user()

    def verify_otp(self, email: str, otp: str) -> bool:
        def apply(data):
            self.pending_verification_email = None
            if data and data.get("token"):
                self._set_token(data["token"])
        ok = self.run("verifyOtp", lambda: self.api.verify_otp(email, otp), apply)
        return ok and (not self.token or self.fetch_user())

    def resend_otp(self, email: str) -> bool:
        return self.run("resendOtp", lambda: self.api.resend_otp(email), lambda _: None)

    def fetch_user(self) -> bool:
        def apply(data):
            self.user = User.model_validate((data or {}).get("user", data))
        return self.run("fetchUser", self.api.current_user, apply)

    def update_user(self, **fields) -> bool:
        def apply(data):
            self.user = User.model_validate((data or {}).get("user", data))
        return self.run("updateUser", lambda: self.api.update_user(fields), apply)

    def change_password(self, old_password: str, new_password: str) -> bool:
        if old_password == new_password:
            self._rejected(ValidationError("New password must differ from the current one."))
            return False
        return self.run("changePassword", lambda: self.api.change_password(old_password, new_password),
                        lambda _: None)

    def logout(self) -> None:
        try:
            if self.token:
                self.api.logout()
        except AppError as e:
            logger.warning("Server logout failed, clearing local session anyway: %s", e.message)
        finally:
            self._set_token(None)
            self.user = None
            self.reset()
