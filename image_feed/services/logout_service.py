"""Logout: forget the token and reset every service."""

import logging

from image_feed.auth.oauth2_service import OAuth2Service
from image_feed.auth.token_storage import TokenStorage
from image_feed.services.images_list_service import ImagesListService
from image_feed.services.profile_service import ProfileImageService, ProfileService

logger = logging.getLogger(__name__)


class LogoutService:
    """Clears all user state held by the data-access core."""

    def __init__(self, storage: TokenStorage, oauth2: OAuth2Service,
                 images: ImagesListService, profile: ProfileService,
                 profile_image: ProfileImageService):
        self.storage = storage
        self.oauth2 = oauth2
        self.images = images
        self.profile = profile
        self.profile_image = profile_image

    def logout(self) -> None:
        self.storage.token = None
        self.oauth2.cancel_and_reset()
        self.images.reset()
        self.profile.reset()
        self.profile_image.reset()
        logger.info("Logged out")
