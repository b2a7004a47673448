"""OAuth2 authorization-code exchange for the Unsplash API."""

import logging
import threading
from concurrent.futures import Future
from functools import partial
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

from oauthlib.oauth2 import WebApplicationClient

from image_feed.auth.token_storage import TokenStorage
from image_feed.config import UnsplashConfig
from image_feed.models import (
    ConfigurationError,
    DecodingError,
    ExchangeSupersededError,
    HTTPStatusError,
    ImageFeedError,
    InvalidResponseError,
)
from image_feed.network.decoding import access_token_from_json, decode_json, response_from
from image_feed.network.transport import HttpRequest, Transport, start_call
from image_feed.utils.dispatch import CallbackContext

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


class _Exchange:
    """One in-flight exchange and everyone waiting on it."""

    def __init__(self, code: str):
        self.code = code
        self.waiters: List[Future] = []
        self.call: Optional[Future] = None


class OAuth2Service:
    """Exchanges authorization codes for access tokens.

    Concurrent calls with the same code share one network request. A call
    with a different code cancels the request in flight and fails its
    waiters with ExchangeSupersededError, so only the most recent code is
    ever exchanged.
    """

    def __init__(self, config: UnsplashConfig, storage: TokenStorage,
                 transport: Transport, context: CallbackContext):
        self.config = config
        self.storage = storage
        self.transport = transport
        self.context = context
        self._lock = threading.RLock()
        self._current: Optional[_Exchange] = None

    @property
    def auth_token(self) -> Optional[str]:
        return self.storage.token

    @property
    def pending_code(self) -> Optional[str]:
        """Code of the exchange currently in flight, if any."""
        with self._lock:
            return self._current.code if self._current else None

    def authorization_url(self) -> str:
        """Build the URL the user must visit to grant access.

        Raises:
            ConfigurationError: If no access key is configured
        """
        if not self.config.access_key:
            raise ConfigurationError("UNSPLASH_ACCESS_KEY is not configured")

        client = WebApplicationClient(self.config.access_key)
        return client.prepare_request_uri(
            self.config.authorize_url,
            redirect_uri=self.config.redirect_uri,
            scope=self.config.access_scope,
        )

    def make_token_request(self, code: str) -> HttpRequest:
        """Build the token exchange request for an authorization code.

        Args:
            code: Authorization code from the redirect

        Returns:
            Form-encoded POST request

        Raises:
            ConfigurationError: If client credentials or endpoints are missing
        """
        missing = [
            name
            for name, value in (
                ("access_key", self.config.access_key),
                ("secret_key", self.config.secret_key),
                ("redirect_uri", self.config.redirect_uri),
                ("token_url", self.config.token_url),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")

        client = WebApplicationClient(self.config.access_key)
        body = client.prepare_request_body(
            code=code,
            redirect_uri=self.config.redirect_uri,
            client_secret=self.config.secret_key,
            include_client_id=True,
        )
        return HttpRequest(
            method="POST",
            url=self.config.token_url,
            headers={"Content-Type": FORM_CONTENT_TYPE},
            data=body,
        )

    def exchange(self, code: str) -> "Future[str]":
        """Exchange an authorization code for an access token.

        Args:
            code: Authorization code

        Returns:
            Future resolved on the callback context with the token, or failed
            with ExchangeSupersededError, a NetworkError or ConfigurationError
        """
        waiter: Future = Future()

        try:
            request = self.make_token_request(code)
        except ConfigurationError as e:
            logger.error("Cannot build token request: %s", e)
            self.context.dispatch(partial(_fail, [waiter], e))
            return waiter

        with self._lock:
            current = self._current
            if current is not None and current.code == code:
                current.waiters.append(waiter)
                logger.debug("Joined in-flight exchange (%d waiters)", len(current.waiters))
                return waiter

            superseded = self._detach()
            exchange = _Exchange(code)
            exchange.waiters.append(waiter)
            self._current = exchange
            exchange.call = start_call(self.transport, request)

        if superseded is not None:
            self._supersede(superseded)

        exchange.call.add_done_callback(
            lambda call: self.context.dispatch(partial(self._complete, exchange, call))
        )
        return waiter

    def cancel_and_reset(self) -> None:
        """Cancel the exchange in flight and fail everyone waiting on it."""
        with self._lock:
            superseded = self._detach()
        if superseded is not None:
            self._supersede(superseded)

    def _detach(self) -> Optional[_Exchange]:
        exchange, self._current = self._current, None
        return exchange

    def _supersede(self, exchange: _Exchange) -> None:
        logger.info("Superseding token exchange with %d waiter(s)", len(exchange.waiters))
        if exchange.call is not None:
            exchange.call.cancel()
        error = ExchangeSupersededError("A newer authorization code replaced this exchange")
        self.context.dispatch(partial(_fail, exchange.waiters, error))

    def _complete(self, exchange: _Exchange, call: Future) -> None:
        with self._lock:
            if self._current is not exchange:
                logger.debug("Discarding result of superseded exchange")
                return

            try:
                token = access_token_from_json(decode_json(response_from(call).body))
            except ImageFeedError as e:
                self._current = None
                self._log_failure(e)
                failure = e
            else:
                self.storage.token = token
                self._current = None
                failure = None

        if failure is not None:
            _fail(exchange.waiters, failure)
            return

        logger.info("Token exchange succeeded, notifying %d waiter(s)", len(exchange.waiters))
        for waiter in exchange.waiters:
            if not waiter.done():
                waiter.set_result(token)

    @staticmethod
    def _log_failure(error: ImageFeedError) -> None:
        if isinstance(error, HTTPStatusError):
            logger.warning("Token exchange failed with HTTP status %d", error.status_code)
        elif isinstance(error, InvalidResponseError):
            logger.warning("Token exchange returned an invalid response: %s", error)
        elif isinstance(error, DecodingError):
            logger.warning("Could not decode token response: %s", error)
        else:
            logger.warning("Token exchange request failed: %s", error)


def _fail(waiters: List[Future], error: Exception) -> None:
    for waiter in waiters:
        if not waiter.done():
            waiter.set_exception(error)


def code_from_redirect(url: str, redirect_uri: str) -> Optional[str]:
    """Extract the authorization code from a redirect URL.

    Args:
        url: URL the authorization page redirected to
        redirect_uri: Configured redirect URI the URL must start with

    Returns:
        The code query parameter, or None if the URL is not a redirect
    """
    if not url.startswith(redirect_uri):
        return None
    codes = parse_qs(urlparse(url).query).get("code")
    return codes[0] if codes else None
