"""
Authenticated Session.

A Session is produced by a single password-grant token exchange against
`<cell>/__token`. It is never refreshed: an expired token surfaces as a
failed call from the server, and the operator logs in again.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict

from pcui.client.transport import TransportAdapter
from pcui.core.exceptions import ApplicationError, AuthError
from pcui.core.logging import get_logger, log_with_source
from pcui.core.utils import utc_now

logger = get_logger(__name__)


class Session(BaseModel):
    """Credentials-derived access to one Cell."""

    url: str
    username: str
    token: str
    expires_at: datetime

    model_config = ConfigDict(frozen=True)

    def pwd(self) -> str:
        return self.url

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the token lifetime reported at login has elapsed."""
        return (now or utc_now()) >= self.expires_at


def normalize_cell_url(endpoint: str) -> str:
    return endpoint.strip().rstrip("/")


def login(
    endpoint: str,
    username: str,
    password: str,
    proxy: str | None = None,
    transport: TransportAdapter | None = None,
) -> Session:
    """
    Exchange username/password for an access token.

    Args:
        endpoint: Cell URL
        username: Account name
        password: Account password
        proxy: Proxy URL, used only when no transport is supplied
        transport: Adapter to send the exchange through

    Returns:
        A new Session

    Raises:
        AuthError: On any failure; no partial Session is produced
    """
    cell_url = normalize_cell_url(endpoint)
    token_url = f"{cell_url}/__token"
    owned = transport is None
    adapter = transport or TransportAdapter(proxy=proxy)

    log_with_source(logger, "session", "info", "Token exchange", url=token_url, username=username)

    try:
        body = adapter.exchange_token(
            token_url,
            {"grant_type": "password", "username": username, "password": password},
        )
        access_token = body["access_token"]
        expires_in = body["expires_in"]
        if not isinstance(access_token, str) or not access_token:
            raise AuthError("Token response has no access_token")
        if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
            raise AuthError("Token response has no numeric expires_in")
        expires_at = utc_now() + timedelta(seconds=expires_in)
    except (ApplicationError, KeyError, OverflowError, ValueError) as e:
        log_with_source(
            logger,
            "session",
            "warning",
            "Login failed",
            url=token_url,
            username=username,
            error=str(e),
        )
        raise AuthError("Login failed.") from e
    finally:
        if owned:
            adapter.close()

    session = Session(
        url=cell_url,
        username=username,
        token=access_token,
        expires_at=expires_at,
    )
    log_with_source(
        logger,
        "session",
        "info",
        "Login succeeded",
        url=cell_url,
        username=username,
        expires_at=session.expires_at.isoformat(),
    )
    return session
