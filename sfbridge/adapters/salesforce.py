"""Salesforce Streaming API event source.

The session is opened with simple-salesforce (username/password/security
token login); the resulting session id and instance host are handed to an
aiosfstream client, which owns the CometD transport.
"""
import asyncio
import inspect
from http import HTTPStatus
from typing import Any, AsyncIterator, Dict, Mapping, Tuple
import structlog
from requests.exceptions import RequestException
from simple_salesforce import SalesforceLogin
from simple_salesforce.exceptions import SalesforceAuthenticationFailed
from aiosfstream import Client, ReplayOption
from aiosfstream.auth import AuthenticatorBase
from aiosfstream.exceptions import AiosfstreamException
from .base import EventSource
from ..errors import AuthenticationError, ConfigurationError, SubscriptionError

log = structlog.get_logger()

REQUIRED_PARAMS = ("username", "password")


def _unsupported_params(params: Mapping[str, Any]) -> list[str]:
    """Names in params that SalesforceLogin does not accept."""
    accepted = inspect.signature(SalesforceLogin).parameters
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in accepted.values()):
        return []
    return sorted(name for name in params if name not in accepted)


class SessionAuthenticator(AuthenticatorBase):
    """Authenticator that reuses an already established session."""

    def __init__(self, session_id: str, endpoint: str):
        super().__init__()
        self._session_id = session_id
        self._endpoint = endpoint if "://" in endpoint else f"https://{endpoint}"

    async def _authenticate(self) -> Tuple[int, Dict[str, Any]]:
        return HTTPStatus.OK, {
            "access_token": self._session_id,
            "instance_url": self._endpoint,
            "token_type": "Bearer",
        }


class SalesforceEventSource(EventSource):
    """Salesforce implementation of the event source."""

    def __init__(self, connection_params: Mapping[str, Any], replay: int = ReplayOption.NEW_EVENTS):
        """
        Args:
            connection_params: Keyword arguments for ``SalesforceLogin``
            replay: Replay option for the streaming client (-1 new, -2 all)

        Raises:
            ConfigurationError: If username or password is missing, a parameter
                is not accepted by SalesforceLogin, or replay is not -1/-2
        """
        missing = [p for p in REQUIRED_PARAMS if not connection_params.get(p)]
        if missing:
            raise ConfigurationError(
                f"source.connection_params missing required field(s): {', '.join(missing)}"
            )
        unsupported = _unsupported_params(connection_params)
        if unsupported:
            raise ConfigurationError(
                f"source.connection_params has unsupported field(s): {', '.join(unsupported)}"
            )
        try:
            self._replay = ReplayOption(replay)
        except ValueError as e:
            raise ConfigurationError(f"source.replay must be -1 or -2, got {replay!r}") from e
        self._params = dict(connection_params)
        self._session: Tuple[str, str] | None = None
        self._client: Client | None = None

    async def open_session(self) -> Tuple[str, str]:
        try:
            session_id, instance = await asyncio.to_thread(SalesforceLogin, **self._params)
        except SalesforceAuthenticationFailed as e:
            raise AuthenticationError(f"salesforce login failed: {e.message}") from e
        except RequestException as e:
            raise AuthenticationError(f"salesforce login request failed: {e}") from e
        self._session = (session_id, instance)
        log.info("session.opened", endpoint=instance, username=self._params["username"])
        return self._session

    async def subscribe(self, channel: str) -> AsyncIterator[Dict[str, Any]]:
        if self._session is None:
            await self.open_session()
        self._client = Client(SessionAuthenticator(*self._session), replay=self._replay)
        try:
            await self._client.open()
            await self._client.subscribe(channel)
            log.info("subscription.opened", channel=channel, adapter="salesforce", replay=int(self._replay))
            async for message in self._client:
                yield message["data"]
        except AiosfstreamException as e:
            raise SubscriptionError(f"subscription to {channel} failed: {e}") from e

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None and not client.closed:
            await client.close()
