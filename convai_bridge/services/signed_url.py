"""
Client for the ElevenLabs signed-URL endpoint.

Every call gets a fresh, single-use conversation URL; nothing is cached and a
failed request is not retried.
"""

import logging
from typing import Optional

import httpx

from convai_bridge.config.constants import LOGGER_NAME, SIGNED_URL_API_KEY_HEADER
from convai_bridge.config.settings import Settings
from convai_bridge.exceptions import UpstreamError

logger = logging.getLogger(LOGGER_NAME)


class SignedUrlRequester:
    """
    Obtains an authenticated websocket URL for one agent conversation.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = settings.signed_url_endpoint
        self.agent_id = settings.elevenlabs_agent_id
        self.timeout = settings.signed_url_timeout
        self._api_key = settings.elevenlabs_api_key
        self._transport = transport

    async def acquire_session_url(self) -> str:
        """
        Request a signed conversation URL for the configured agent.

        Returns:
            str: The signed websocket URL

        Raises:
            UpstreamError: If the request fails, times out, or the response is unusable
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    self.endpoint,
                    params={"agent_id": self.agent_id},
                    headers={SIGNED_URL_API_KEY_HEADER: self._api_key},
                )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Signed URL request failed: {e!r}") from e

        if not response.is_success:
            raise UpstreamError(
                f"Failed to get signed URL: {response.status_code} {response.reason_phrase}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Signed URL response is not valid JSON") from e

        signed_url = data.get("signed_url") if isinstance(data, dict) else None
        if not isinstance(signed_url, str) or not signed_url:
            raise UpstreamError("Signed URL response has no signed_url field")

        logger.debug(f"Obtained signed URL for agent {self.agent_id}")
        return signed_url
