"""Push Notification Service — explicit push gateway client with a start/close lifecycle.

Invariants:
    - Constructed once at process start, injected into NotificationDispatcher
    - start() opens the HTTP client, close() releases it; deliver() before
      start() or after close() raises NotificationDeliveryError
    - No gateway URL configured -> push disabled: deliver() logs and returns False
    - Transport errors, timeouts and non-2xx responses map to NotificationDeliveryError
    - No retries here: retry belongs to the gateway

Design Decisions:
    - Gateway owns device tokens and provider credentials; this service only
      hands over {recipient, notification}
    - httpx.AsyncClient injectable via `transport` so tests use MockTransport
"""

import logging

import httpx

from app.core.domain_types import UserId
from app.core.errors import ErrorContext, NotificationDeliveryError

logger = logging.getLogger(__name__)


class NotificationService:
    """Delivers push notifications through the configured gateway."""

    def __init__(
        self,
        gateway_url: str | None,
        token: str | None = None,
        timeout_seconds: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.gateway_url = gateway_url.rstrip("/") if gateway_url else None
        self._token = token
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return self.gateway_url is not None

    async def start(self) -> None:
        if not self.enabled:
            logger.warning("Push gateway not configured. Push notifications disabled.")
            return
        if self._client is not None:
            return
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
        self._client = httpx.AsyncClient(
            base_url=self.gateway_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.info(f"Push gateway client started ({self.gateway_url})")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def deliver(self, recipient: UserId, notification: dict) -> bool:
        """Send one notification; True when the gateway accepted it."""
        if not self.enabled:
            logger.debug(
                "Push disabled, skipping delivery",
                extra={"target_id": str(recipient)},
            )
            return False
        context = ErrorContext(target_id=str(recipient))
        if self._client is None:
            raise NotificationDeliveryError("client not started", context=context)

        try:
            response = await self._client.post(
                "/deliver",
                json={"recipient": str(recipient), "notification": notification},
            )
        except httpx.TimeoutException:
            raise NotificationDeliveryError("gateway timeout", context=context)
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"transport error: {e}", context=context)

        if response.status_code >= 400:
            raise NotificationDeliveryError(
                f"gateway returned {response.status_code}",
                status_code=response.status_code,
                context=context,
            )
        logger.info(
            "Push notification delivered",
            extra={"target_id": str(recipient)},
        )
        return True
