import os
import logging
from typing import Any, Dict, Optional

import httpx

from core.errors import ServiceError, ServiceUnavailable
from core.llm import GenerationService, REQUEST_TIMEOUT

PROXY_URL = os.environ.get("BRIEVIFY_PROXY_URL")
GENERATE_PATH = "/api/generate"

logger = logging.getLogger(__name__)


class ProxyGenerationService(GenerationService):
    """GenerationService that goes through the brievify proxy endpoint."""

    def __init__(self, base_url: Optional[str] = None, timeout: float = REQUEST_TIMEOUT, transport: httpx.AsyncBaseTransport = None):
        base_url = base_url or PROXY_URL
        if not base_url:
            raise ValueError("A proxy base URL is required (set BRIEVIFY_PROXY_URL)")
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str, response_schema: dict = None) -> str:
        payload: Dict[str, Any] = {"prompt": prompt}
        if response_schema is not None:
            payload["schema"] = response_schema

        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(GENERATE_PATH, json=payload)
        except httpx.TimeoutException as exc:
            raise ServiceUnavailable(f"Timed out calling the generation proxy: {exc}") from exc
        except httpx.RequestError as exc:
            raise ServiceUnavailable(f"Network error while calling the generation proxy: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            detail = response.text
            if isinstance(body, dict):
                detail = body.get("error") or detail
                if body.get("details") is not None:
                    detail = f"{detail} ({body['details']})"
            logger.error(f"Generation proxy returned {response.status_code}: {detail}")
            raise ServiceError(response.status_code, detail)

        if not isinstance(body, dict) or not isinstance(body.get("text"), str):
            raise ServiceError(response.status_code, "Generation proxy response is missing text")
        return body["text"]
