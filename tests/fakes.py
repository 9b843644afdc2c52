"""Test doubles shared across the transaction client tests."""

from typing import List

import httpx

GATEWAY_URL = "https://api.test.maksekeskus.ee/v1"
RELAY_URL = "https://hook.example.test/relay"


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class RecordingHandler:
    """httpx.MockTransport handler that replays queued responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        reply = self.responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply
