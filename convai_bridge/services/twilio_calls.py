"""
Outbound call placement through the Twilio REST API.

The Twilio helper library is synchronous, so requests run in a worker thread to
keep the event loop free for media streams.
"""

import asyncio
import logging
from typing import Optional

from twilio.rest import Client

from convai_bridge.config.constants import LOGGER_NAME
from convai_bridge.config.settings import Settings

logger = logging.getLogger(LOGGER_NAME)


class OutboundCallService:
    """Places calls from the configured Twilio number."""

    def __init__(self, settings: Settings, client: Optional[Client] = None):
        self.from_number = settings.twilio_phone_number
        self._account_sid = settings.twilio_account_sid
        self._auth_token = settings.twilio_auth_token
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            logger.info("Creating Twilio client")
            self._client = Client(self._account_sid, self._auth_token)
        return self._client

    async def place_call(self, to_number: str, callback_url: str) -> str:
        """
        Start a call whose TwiML is served from ``callback_url``.

        Args:
            to_number: Destination phone number
            callback_url: URL Twilio fetches once the call connects

        Returns:
            str: The Twilio call SID

        Raises:
            twilio.base.exceptions.TwilioRestException: If Twilio rejects the call
        """
        call = await asyncio.to_thread(
            self.client.calls.create,
            from_=self.from_number,
            to=to_number,
            url=callback_url,
        )
        logger.info(f"Twilio call created | sid={call.sid} | to={to_number}")
        return call.sid
