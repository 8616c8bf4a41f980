import logging

import pytest

from convai_bridge.config.settings import Settings


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


@pytest.fixture
def settings():
    """Settings with fake credentials."""
    return Settings(
        elevenlabs_api_key="test-xi-key",
        elevenlabs_agent_id="agent-123",
        twilio_account_sid="ACtest",
        twilio_auth_token="twilio-token",
        twilio_phone_number="+15550001111",
        signed_url_endpoint="https://api.example.test/get_signed_url",
    )
