"""Student profiles: the caller's own profile and other users' public pages."""

import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from .api import BurrowApi
from .errors import AppError
from .schemas import Profile, ProfileUpdate, Property, UploadFile
from .state import MALFORMED_RESPONSE, Slice

logger = logging.getLogger(__name__)


class ProfileSlice(Slice):
    """``status``/``error`` follow the caller's own profile.

    The public profile page and its listings keep their own error fields so a
    failed lookup of someone else never marks the caller's profile as failed.
    """

    name = "profile"

    def __init__(self, api: BurrowApi):
        super().__init__()
        self.api = api
        self.profile: Optional[Profile] = None
        self.is_updating = False
        self.public_profile: Optional[Profile] = None
        self.public_profile_error: Optional[str] = None
        self.public_listings: list[Property] = []
        self.public_listings_error: Optional[str] = None

    def fetch_profile(self) -> bool:
        if not self._require_login(self.api, "User is not authenticated."):
            return False

        def apply(data):
            self.profile = Profile.model_validate(data)
        return self.run("fetchProfile", self.api.my_profile, apply)

    def fetch_public_profile(self, user_id: str) -> bool:
        self.public_profile = None
        self.public_profile_error = None
        try:
            self.public_profile = Profile.model_validate(self.api.public_profile(user_id))
        except AppError as e:
            logger.warning("profile/fetchPublicProfile rejected: %s", e.message)
            self.public_profile_error = e.message
            return False
        except SchemaError as e:
            logger.error("profile/fetchPublicProfile got a malformed response: %s", e)
            self.public_profile_error = MALFORMED_RESPONSE
            return False
        return True

    def fetch_public_listings(self, user_id: str) -> bool:
        self.public_listings_error = None
        try:
            data = self.api.properties_by_user(user_id)
            self.public_listings = [Property.model_validate(p) for p in data or []]
        except AppError as e:
            logger.warning("properties/fetchByUserId rejected: %s", e.message)
            self.public_listings_error = e.message
            return False
        except SchemaError as e:
            logger.error("properties/fetchByUserId got a malformed response: %s", e)
            self.public_listings_error = MALFORMED_RESPONSE
            return False
        return True

    def update_profile(self, data: ProfileUpdate, image: Optional[UploadFile] = None) -> bool:
        """Upload ``image`` straight to storage first, then save the profile."""
        if not self._require_login(self.api, "Not authenticated. Please log in."):
            return False

        def call():
            body = data.model_dump(exclude_none=True)
            if image is not None:
                target = self.api.profile_upload_url(image)
                self.api.upload_to_storage(target["signedUrl"], image)
                body["imageUrl"] = target["publicUrl"]
                logger.info("Uploaded profile image %s", image.filename)
            return self.api.update_profile(body)

        def apply(resp):
            self.profile = Profile.model_validate(resp["profile"])

        self.is_updating = True
        try:
            return self.run("updateProfileWithImage", call, apply)
        finally:
            self.is_updating = False

    def clear_error(self) -> None:
        super().clear_error()
        self.public_profile_error = None
        self.public_listings_error = None

    def reset(self) -> None:
        super().reset()
        self.profile = None
        self.is_updating = False
        self.public_profile = None
        self.public_profile_error = None
        self.public_listings = []
        self.public_listings_error = None
