"""
Discord webhook dispatcher.

Two outbound channels exist:
- NOTIFY: puzzle unlocks, standings and completion announcements
- STATUS: lifecycle, heartbeat and error reports

A channel without a configured url is logged and skipped. Sends are
awaited one at a time so delivery order matches call order; a 429 response
is retried with the identical payload after the requested delay.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Sequence

import httpx

from core.errors import HttpError, ParseError
from shared.logging.logger import get_logger

log = get_logger("discord.webhook")


class WebhookChannel(enum.Enum):
    NOTIFY = "notify"
    STATUS = "status"


# environment variable backing each channel, read by shared.config.settings
CHANNEL_ENV: Dict[WebhookChannel, str] = {
    WebhookChannel.NOTIFY: "FESTIVE_BOT_NOTIFY",
    WebhookChannel.STATUS: "FESTIVE_BOT_STATUS",
}


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes

    @classmethod
    def text(cls, filename: str, text: str) -> "Attachment":
        return cls(filename=filename, content=text.encode("utf-8"))


class WebhookDispatcher:
    def __init__(
        self,
        *,
        urls: Dict[WebhookChannel, Optional[str]],
        client: httpx.AsyncClient,
        sleep: Callable[[float], Awaitable[None]],
    ):
        self._urls = urls
        self._client = client
        self._sleep = sleep

    def url(self, channel: WebhookChannel) -> Optional[str]:
        return self._urls.get(channel)

    async def _post(
        self,
        url: str,
        content: str,
        attachments: Sequence[Attachment],
    ) -> httpx.Response:
        if not attachments:
            return await self._client.post(url, json={"content": content})

        files = {
            f"files[{i}]": (a.filename, a.content, "text/plain")
            for i, a in enumerate(attachments)
        }
        return await self._client.post(
            url,
            data={"payload_json": json.dumps({"content": content})},
            files=files,
        )

    async def send(
        self,
        content: str,
        attachments: Sequence[Attachment] = (),
        channel: WebhookChannel = WebhookChannel.NOTIFY,
    ) -> bool:
        """
        Deliver `content` to `channel`. Returns False when the channel is
        not configured; raises HttpError for any non-success response.
        """
        log.info(f"Webhook payload ({channel.value}): {content!r}")

        url = self.url(channel)
        if not url:
            log.debug(f"Webhook variable {CHANNEL_ENV[channel]} not set, not sending request")
            return False

        while True:
            try:
                response = await self._post(url, content, attachments)
            except httpx.HTTPError as e:
                raise HttpError(f"Webhook request failed: {e}") from e

            if response.status_code in (httpx.codes.OK, httpx.codes.NO_CONTENT):
                return True

            if response.status_code != httpx.codes.TOO_MANY_REQUESTS:
                raise HttpError(
                    f"Webhook returned {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                retry_after = float(response.json().get("retry_after") or 0.0)
            except (ValueError, TypeError, AttributeError) as e:
                raise ParseError(f"Unreadable rate-limit response: {e}") from e

            log.warning(f"Rate-limited for {retry_after}s, retrying")
            await self._sleep(max(retry_after, 0.0))
