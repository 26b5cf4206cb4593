"""
Spotify Authorization (PKCE)

Implements the browser-delegated authorization code flow with a proof-key
challenge, so no client secret is ever sent:

1. Generate a verifier, its S256 challenge and an anti-forgery state
2. Start a single-use local receiver on the redirect URI's host and port
3. Send the user to the authorization page
4. Accept exactly one redirect, check the echoed state, shut the receiver down
5. Exchange the code plus verifier for an access token

Any failure is fatal to the run and raised as an AuthorizationError.
"""

import base64
import enum
import hashlib
import logging
import secrets
import threading
import webbrowser
from dataclasses import dataclass
from typing import Callable, Iterable, Optional
from urllib.parse import urlencode, urlparse

import requests
from flask import Flask, request
from werkzeug.serving import make_server

from albumlist.exceptions import (
    AuthorizationError,
    AuthorizationTimeoutError,
    StateMismatchError,
    TokenExchangeError,
)
from albumlist.models import Token

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"


def _base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def generate_code_verifier(num_bytes: int = 64) -> str:
    """Random high-entropy PKCE verifier (86 URL-safe characters for 64 bytes)."""
    return _base64url(secrets.token_bytes(num_bytes))


def generate_code_challenge(code_verifier: str) -> str:
    """S256 challenge: unpadded URL-safe base64 of SHA-256(verifier)."""
    return _base64url(hashlib.sha256(code_verifier.encode("ascii")).digest())


def generate_state(num_bytes: int = 16) -> str:
    return _base64url(secrets.token_bytes(num_bytes))


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: Iterable[str],
    state: str,
    code_challenge: str,
    authorize_url: str = AUTHORIZE_URL
) -> str:
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": " ".join(scopes),
        "state": state,
        "code_challenge_method": "S256",
        "code_challenge": code_challenge,
    }
    return f"{authorize_url}?{urlencode(params)}"


def exchange_code(
    client_id: str,
    code: str,
    redirect_uri: str,
    code_verifier: str,
    token_url: str = TOKEN_URL,
    timeout: float = 30
) -> Token:
    """
    Exchange an authorization code for an access token.

    One form-encoded POST, never retried.

    Raises:
        TokenExchangeError: transport failure, non-success status, or a body
            without an access token
    """
    data = {
        "client_id": client_id,
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "code_verifier": code_verifier,
    }
    try:
        r = requests.post(token_url, data=data, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise TokenExchangeError(f"Token request failed: {e}") from e

    if not r.ok:
        raise TokenExchangeError(
            f"Token exchange failed with {r.status_code}: {r.text}", status_code=r.status_code
        )
    try:
        return Token.from_api(r.json())
    except (ValueError, KeyError) as e:
        raise TokenExchangeError(f"Token response missing access_token: {e}", status_code=r.status_code) from e


@dataclass(frozen=True)
class CallbackResult:
    code: Optional[str]
    state: Optional[str]
    error: Optional[str] = None


class CallbackReceiver:
    """
    Single-use local HTTP receiver for the authorization redirect.

    Serves `GET <path>` on a background thread until close(). Only the first
    callback is recorded; later ones get 410. Use as a context manager so the
    port is always released.
    """

    def __init__(self, host: str, port: int, path: str = "/callback"):
        self.host = host
        self.path = path or "/callback"
        self._requested_port = port
        self._result: Optional[CallbackResult] = None
        self._received = threading.Event()
        self._server = None
        self._thread: Optional[threading.Thread] = None

        self.app = Flask(__name__)
        self.app.add_url_rule(self.path, "callback", self._handle_callback)

    @property
    def port(self) -> int:
        if self._server is not None:
            return self._server.server_port
        return self._requested_port

    @property
    def running(self) -> bool:
        return self._server is not None

    def _handle_callback(self):
        if self._received.is_set():
            return "This authorization link has already been used.", 410
        self._result = CallbackResult(
            code=request.args.get("code"),
            state=request.args.get("state"),
            error=request.args.get("error"),
        )
        self._received.set()
        if self._result.error:
            return "Authorization was not granted. You may close this tab.", 400
        return "Callback received. Return to the terminal to finish."

    def start(self) -> "CallbackReceiver":
        try:
            self._server = make_server(self.host, self._requested_port, self.app, threaded=False)
        except (OSError, SystemExit) as e:
            # werkzeug calls sys.exit() instead of raising when the bind fails
            raise AuthorizationError(
                f"Could not listen on {self.host}:{self._requested_port}: {e}"
            ) from e
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info(f"Auth server running on http://{self.host}:{self.port}")
        return self

    def wait(self, timeout: Optional[float] = None) -> CallbackResult:
        """Block until the redirect arrives, or raise after `timeout` seconds."""
        if not self._received.wait(timeout):
            raise AuthorizationTimeoutError(
                f"No authorization callback received within {timeout}s"
            )
        return self._result

    def close(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._server = None
        self._thread = None
        logger.debug("Auth server stopped")

    def __enter__(self) -> "CallbackReceiver":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FlowState(enum.Enum):
    INIT = "init"
    LISTENING = "listening"
    CALLBACK_RECEIVED = "callback_received"
    EXCHANGING = "exchanging"
    AUTHORIZED = "authorized"
    FAILED = "failed"


class AuthorizationFlow:
    """
    One-shot PKCE authorization for a single run.

    Args:
        client_id: Spotify application client id
        redirect_uri: Registered redirect URI; the receiver binds its host/port
        scopes: Requested scopes
        timeout: Seconds to wait for the redirect (None waits indefinitely)
        open_browser: Open the authorization URL in a browser (default: True)
        opener: Called with the authorization URL instead of webbrowser.open
    """

    def __init__(
        self,
        client_id: str,
        redirect_uri: str,
        scopes: Iterable[str],
        timeout: Optional[float] = None,
        open_browser: bool = True,
        opener: Optional[Callable[[str], object]] = None,
        request_timeout: float = 30,
        authorize_url: str = AUTHORIZE_URL,
        token_url: str = TOKEN_URL
    ):
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self.timeout = timeout
        self.open_browser = open_browser
        self.opener = opener
        self.request_timeout = request_timeout
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.status = FlowState.INIT
        self.receiver: Optional[CallbackReceiver] = None

    def _present(self, url: str) -> None:
        print(f"Open this URL to authorize:\n{url}\n")
        if self.open_browser:
            (self.opener or webbrowser.open)(url)

    @staticmethod
    def _check_callback(result: CallbackResult, expected_state: str) -> str:
        if result.error:
            raise AuthorizationError(f"Authorization denied: {result.error}")
        if result.state is None or not secrets.compare_digest(
            result.state.encode("utf-8"), expected_state.encode("utf-8")
        ):
            raise StateMismatchError("Authorization callback state does not match")
        if not result.code:
            raise AuthorizationError("Authorization callback did not include a code")
        return result.code

    def authorize(self) -> Token:
        """
        Run the whole handshake and return an access token.

        Raises:
            AuthorizationError: on denial, state mismatch, timeout or failed exchange
        """
        try:
            verifier = generate_code_verifier()
            state = generate_state()
            url = build_authorization_url(
                self.client_id,
                self.redirect_uri,
                self.scopes,
                state,
                generate_code_challenge(verifier),
                authorize_url=self.authorize_url,
            )

            parsed = urlparse(self.redirect_uri)
            self.receiver = CallbackReceiver(parsed.hostname or "127.0.0.1", parsed.port or 0, parsed.path)
            with self.receiver:
                self.status = FlowState.LISTENING
                self._present(url)
                result = self.receiver.wait(self.timeout)
            self.status = FlowState.CALLBACK_RECEIVED

            code = self._check_callback(result, state)

            self.status = FlowState.EXCHANGING
            token = exchange_code(
                self.client_id,
                code,
                self.redirect_uri,
                verifier,
                token_url=self.token_url,
                timeout=self.request_timeout,
            )
        except Exception:
            self.status = FlowState.FAILED
            raise

        self.status = FlowState.AUTHORIZED
        logger.info("Authorization complete")
        return token
