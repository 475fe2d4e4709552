"""
Webhook dispatcher for delivering notifications to Discord.

One call delivers one message to one URL. There is no retry, no queue and
no batching: the caller awaits each delivery and only learns whether it
worked.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class WebhookDispatcher:
    """
    Posts formatted messages to webhook URLs.

    Failures never propagate out of ``send``; they are logged and reported
    as ``False`` so one bad delivery cannot stop the line-processing loop.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        username: str = "",
        timeout: Optional[float] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            client: HTTP client to use; one is created (and owned) if omitted
            username: Display name sent with each message, empty for the
                webhook's default
            timeout: Request timeout in seconds, None for the client default
        """
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=timeout) if timeout is not None else httpx.AsyncClient()
        self._client = client
        self.username = username

        self.stats = {
            "sent": 0,
            "failed": 0,
        }

    def build_payload(self, content: str) -> Dict[str, Any]:
        """Build the JSON body for a message."""
        payload: Dict[str, Any] = {"content": content}
        if self.username:
            payload["username"] = self.username
        return payload

    async def send(self, url: str, content: str, context: str = "") -> bool:
        """
        Deliver one message to one webhook URL.

        Args:
            url: Destination webhook URL
            content: Message text
            context: Short description for log messages, e.g. "level up: Fishing -> 42"

        Returns:
            True if the webhook accepted the message
        """
        label = context or "notification"

        try:
            response = await self._client.post(url, json=self.build_payload(content))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.stats["failed"] += 1
            logger.error(f"Webhook failed for {label}: {e}")
            return False
        except Exception as e:
            # e.g. a closed client; still reported as a failed delivery
            self.stats["failed"] += 1
            logger.error(f"Webhook failed for {label}: {type(e).__name__}: {e}")
            return False

        if not response.is_success:
            self.stats["failed"] += 1
            logger.warning(
                f"Webhook failed for {label}: HTTP {response.status_code} {response.text[:200]}"
            )
            return False

        self.stats["sent"] += 1
        logger.info(f"Webhook sent for {label}")
        return True

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)

    async def close(self):
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "WebhookDispatcher":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
