"""Main module for Image Feed."""

import argparse
import logging
from typing import List, Optional

from tabulate import tabulate

from image_feed.auth.oauth2_service import OAuth2Service, code_from_redirect
from image_feed.auth.token_storage import FileTokenStorage, TokenStorage
from image_feed.config import UnsplashConfig
from image_feed.models import ImageFeedError, Photo
from image_feed.network.transport import RequestsTransport, Transport
from image_feed.services.images_list_service import ImagesListService
from image_feed.services.logout_service import LogoutService
from image_feed.services.profile_service import ProfileImageService, ProfileService
from image_feed.utils.dispatch import CallbackContext, SerialContext

logger = logging.getLogger(__name__)


class ImageFeedApp:
    """Builds and owns every service of the data-access core."""

    def __init__(
        self,
        config: Optional[UnsplashConfig] = None,
        storage: Optional[TokenStorage] = None,
        transport: Optional[Transport] = None,
        context: Optional[CallbackContext] = None,
    ):
        """Initialize the app.

        Args:
            config: API configuration, read from the environment by default
            storage: Token storage, token.json in the working directory by default
            transport: HTTP transport, a RequestsTransport by default
            context: Context completions are delivered on, a SerialContext by default
        """
        self.config = config or UnsplashConfig.from_env()
        self.storage = storage or FileTokenStorage()
        self.transport = transport or RequestsTransport(timeout=self.config.timeout)
        self.context = context or SerialContext()

        self.oauth2 = OAuth2Service(self.config, self.storage, self.transport, self.context)
        self.images = ImagesListService(self.config, self.storage, self.transport, self.context)
        self.profile = ProfileService(self.config, self.storage, self.transport, self.context)
        self.profile_image = ProfileImageService(
            self.config, self.storage, self.transport, self.context
        )
        self.logout_service = LogoutService(
            self.storage, self.oauth2, self.images, self.profile, self.profile_image
        )

    @property
    def is_authorized(self) -> bool:
        return self.storage.token is not None

    def login(self, code_or_redirect: str) -> str:
        """Exchange a code, or the redirect URL carrying it, for a token."""
        code = code_from_redirect(code_or_redirect, self.config.redirect_uri) or code_or_redirect
        return self.oauth2.exchange(code).result()

    def load_pages(self, pages: int) -> List[Photo]:
        """Load the given number of feed pages one after another."""
        for _ in range(pages):
            request = self.images.fetch_next_page()
            if request is None:
                raise ImageFeedError("Not logged in. Run the login command first.")
            request.result()
        return list(self.images.photos)

    def close(self) -> None:
        self.oauth2.cancel_and_reset()
        self.images.reset()
        self.transport.close()
        if isinstance(self.context, SerialContext):
            self.context.shutdown()


def format_photos(photos: List[Photo]) -> str:
    """Render photos as a table."""
    rows = [
        [
            index,
            photo.id,
            f"{photo.size[0]}x{photo.size[1]}",
            photo.created_at.isoformat() if photo.created_at else "",
            "yes" if photo.is_liked else "",
            (photo.description or "")[:40],
        ]
        for index, photo in enumerate(photos)
    ]
    return tabulate(
        rows,
        headers=["#", "ID", "Size", "Created", "Liked", "Description"],
        tablefmt="psql",
    )


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Image Feed")

    parser.add_argument(
        "--token-file", type=str, default="token.json", help="Where the OAuth token is stored"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands", required=True)

    subparsers.add_parser("auth-url", help="Print the authorization URL")

    login_parser = subparsers.add_parser("login", help="Exchange an authorization code")
    login_parser.add_argument(
        "code", type=str, help="Authorization code or the redirect URL containing it"
    )

    feed_parser = subparsers.add_parser("feed", help="Show the photo feed")
    feed_parser.add_argument("--pages", type=int, default=1, help="Number of pages to load")

    like_parser = subparsers.add_parser("like", help="Like a photo")
    like_parser.add_argument("photo_id", type=str, help="Photo ID")

    unlike_parser = subparsers.add_parser("unlike", help="Remove a like from a photo")
    unlike_parser.add_argument("photo_id", type=str, help="Photo ID")

    subparsers.add_parser("profile", help="Show the authorized user's profile")
    subparsers.add_parser("logout", help="Forget the stored token")

    return parser.parse_args(argv)


def run_command(app: ImageFeedApp, args) -> None:
    """Run the parsed command against the app."""
    if args.command == "auth-url":
        print(app.oauth2.authorization_url())

    elif args.command == "login":
        app.login(args.code)
        print("Logged in")

    elif args.command == "feed":
        photos = app.load_pages(args.pages)
        if photos:
            print(format_photos(photos))
            print(f"\nLoaded {len(photos)} photos from {app.images.last_loaded_page} page(s)")
        else:
            print("No photos found")

    elif args.command in ("like", "unlike"):
        app.images.change_like(args.photo_id, args.command == "like").result()
        print(f"{args.command.capitalize()}d {args.photo_id}")

    elif args.command == "profile":
        profile = app.profile.fetch_profile().result()
        avatar_url = app.profile_image.fetch_profile_image_url(profile.username).result()
        print(
            tabulate(
                [
                    ["Name", profile.name],
                    ["Login", profile.login_name],
                    ["Bio", profile.bio or ""],
                    ["Avatar", avatar_url],
                ],
                tablefmt="psql",
            )
        )

    elif args.command == "logout":
        app.logout_service.logout()
        print("Logged out")


def main() -> None:
    """Main entry point for the Image Feed CLI."""
    args = parse_arguments()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = ImageFeedApp(storage=FileTokenStorage(args.token_file))
    try:
        run_command(app, args)
    except ImageFeedError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}")
        raise SystemExit(1) from e
    finally:
        app.close()


if __name__ == "__main__":
    main()
