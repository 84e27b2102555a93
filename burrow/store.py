import logging
import threading
from typing import Optional

import requests

from .ambassador import AmbassadorDashboard, AmbassadorRequestsSlice
from .api import BurrowApi
from .auth import AuthSession, TokenStorage
from .contracts import AgreementsSlice
from .favorites import FavoritesSlice
from .filters import FilterStore
from .interests import InterestsSlice
from .listings import ListingResults, UserListings
from .notifications import NotificationsSlice
from .profile import ProfileSlice
from .settings import settings
from .sync import ListingSynchronizer

logger = logging.getLogger(__name__)


class AppStore:
    """Every piece of client state, wired to one API client.

    Build one per user session and pass it to whatever needs it. Callers that
    share a store across threads hold ``lock`` for the length of an operation.
    """

    def __init__(
        self,
        api: Optional[BurrowApi] = None,
        *,
        session: Optional[requests.Session] = None,
        token_storage: Optional[TokenStorage] = None,
        page_size: Optional[int] = None,
    ):
        self.lock = threading.RLock()
        self.api = api or BurrowApi(session=session)
        self.auth = AuthSession(self.api, token_storage)

        self.filters = FilterStore()
        self.listings = ListingResults(self.api, limit=page_size or settings.PAGE_SIZE)
        self.sync = ListingSynchronizer(self.filters, self.listings)
        self.user_listings = UserListings(self.api)

        self.favorites = FavoritesSlice(self.api)
        self.interests = InterestsSlice(self.api)
        self.ambassador_requests = AmbassadorRequestsSlice(self.api)
        self.ambassador_dashboard = AmbassadorDashboard(self.api)
        self.profile = ProfileSlice(self.api)
        self.agreements = AgreementsSlice(self.api)
        self.notifications = NotificationsSlice(self.api)

    def clear_user_data(self) -> None:
        """Drop everything tied to the signed-in user (on logout)."""
        for piece in (self.user_listings, self.favorites, self.interests,
                      self.ambassador_requests, self.ambassador_dashboard,
                      self.profile, self.agreements, self.notifications):
            piece.reset()
        logger.info("Cleared user-scoped state")

    def logout(self) -> None:
        self.auth.logout()
        self.clear_user_data()
