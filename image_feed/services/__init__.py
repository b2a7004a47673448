"""Services for Image Feed."""

from .images_list_service import ImagesListService
from .logout_service import LogoutService
from .profile_service import ProfileImageService, ProfileService

__all__ = ["ImagesListService", "LogoutService", "ProfileImageService", "ProfileService"]
