"""Backend client — JSON over HTTP to the narrative service.

The session controller talks to the backend through a callable object
matching the protocol:

    class BackendClient(Protocol):
        async def start(self, protagonist, setting, weights) -> StartResponse: ...
        async def choose(self, story_id, choice_id) -> ChooseResponse: ...
        async def get_by_id(self, story_id) -> StoryDetail: ...
        async def list(self) -> StoryList: ...

Each call is exactly one request/response exchange. Nothing is retried: a
failure is raised once as TransportError and the caller decides what to do.

Endpoints:
    POST /api/story/start    {protagonist, setting, weights}
    POST /api/story/choose   {story_id, choice_id}
    GET  /api/story/list
    GET  /api/story/{id}

Production code constructs an HttpBackend from config and hands it to the
SessionController. Tests use a fake defined in the test helpers, or an
HttpBackend wired to the stub FastAPI app through httpx.ASGITransport.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from storyforge.models import (
    ChooseRequest,
    ChooseResponse,
    MoodWeights,
    StartRequest,
    StartResponse,
    StoryDetail,
    StoryList,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# ---------------------------------------------------------------------------
# Protocol — every backend implementation must match these signatures
# ---------------------------------------------------------------------------

class BackendClient(Protocol):
    async def start(
        self, protagonist: str, setting: str, weights: MoodWeights
    ) -> StartResponse: ...

    async def choose(self, story_id: str, choice_id: str) -> ChooseResponse: ...

    async def get_by_id(self, story_id: str) -> StoryDetail: ...

    async def list(self) -> StoryList: ...


# ---------------------------------------------------------------------------
# HttpBackend — connects to a real backend
# ---------------------------------------------------------------------------

class HttpBackend:
    """Async HTTP client for the story endpoints.

    Args:
        base_url:  Base URL of the backend, e.g. "http://localhost:8000".
        timeout:   HTTP timeout in seconds. Defaults to 30.
        transport: Optional httpx transport; tests pass an ASGITransport
                   to talk to an in-process app.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}/api/story/{path.lstrip('/')}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _request(
        self,
        method: str,
        path: str,
        response_model: type[ModelT],
        body: dict[str, Any] | None = None,
    ) -> ModelT:
        url = self._url(path)
        logger.debug("backend %s %s body=%s", method, url, body)

        try:
            async with self._client() as client:
                if method == "POST":
                    resp = await client.post(
                        url, json=body, headers={"Content-Type": "application/json"}
                    )
                else:
                    resp = await client.get(url)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise TransportError(f"Cannot connect to story backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Story backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(f"Story backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to story backend failed: {e}") from e

        try:
            parsed = response_model.model_validate(resp.json())
        except (json.JSONDecodeError, ValidationError) as e:
            raise TransportError(
                f"Unexpected response format from {method} {url}"
            ) from e

        logger.debug("backend %s %s -> %s", method, url, resp.status_code)
        return parsed

    async def start(
        self, protagonist: str, setting: str, weights: MoodWeights
    ) -> StartResponse:
        body = StartRequest(protagonist=protagonist, setting=setting, weights=weights)
        return await self._request("POST", "start", StartResponse, body.model_dump())

    async def choose(self, story_id: str, choice_id: str) -> ChooseResponse:
        body = ChooseRequest(story_id=story_id, choice_id=choice_id)
        return await self._request("POST", "choose", ChooseResponse, body.model_dump())

    async def get_by_id(self, story_id: str) -> StoryDetail:
        return await self._request("GET", quote(story_id, safe=""), StoryDetail)

    async def list(self) -> StoryList:
        return await self._request("GET", "list", StoryList)


# ---------------------------------------------------------------------------
# TransportError — raised by HttpBackend for all connection and protocol failures
# ---------------------------------------------------------------------------

class TransportError(RuntimeError):
    """Raised when the story backend cannot be reached or returns an error."""
