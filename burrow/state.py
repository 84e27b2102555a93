import logging
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError as SchemaError

from .errors import AppError, AuthError, ExternalServiceError
from .schemas import FetchStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

MALFORMED_RESPONSE = "Unexpected response from server."


class Slice:
    """Request lifecycle shared by every server-backed piece of client state.

    ``run`` turns an API call into a stored outcome: ``AppError`` never escapes,
    its message lands in ``error`` and ``status`` becomes ``"failed"``.
    """

    name = "slice"

    def __init__(self):
        self.status: FetchStatus = "idle"
        self.error: Optional[str] = None
        self.last_error: Optional[AppError] = None
        self.is_loading = False

    def _pending(self) -> None:
        self.is_loading = True
        self.status = "loading"
        self.error = None
        self.last_error = None

    def _fulfilled(self) -> None:
        self.is_loading = False
        self.status = "succeeded"
        self.error = None

    def _rejected(self, err: AppError) -> None:
        self.is_loading = False
        self.status = "failed"
        self.error = err.message
        self.last_error = err

    def _require_login(self, api, message: str = "Not authenticated") -> bool:
        """Reject without a request when ``api`` carries no token."""
        if api.is_authenticated:
            return True
        self._rejected(AuthError(message))
        return False

    def run(self, action: str, call: Callable[[], T], on_success: Callable[[T], None]) -> bool:
        self._pending()
        try:
            on_success(call())
        except AppError as e:
            logger.warning("%s/%s rejected: %s", self.name, action, e.message)
            self._rejected(e)
            return False
        except (SchemaError, KeyError, TypeError, AttributeError) as e:
            logger.error("%s/%s got a malformed response: %s", self.name, action, e)
            self._rejected(ExternalServiceError(MALFORMED_RESPONSE))
            return False
        self._fulfilled()
        logger.debug("%s/%s fulfilled", self.name, action)
        return True

    def clear_error(self) -> None:
        self.error = None
        self.last_error = None

    def reset(self) -> None:
        Slice.__init__(self)
