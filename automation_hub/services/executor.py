"""HTTP executor that posts execution requests to the automation API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import requests

from automation_hub.config import CONFIG
from automation_hub.core.api_urls import build_api_url
from automation_hub.core.errors import (
    NO_MESSAGES_CODE,
    NO_MESSAGES_ERROR,
    TRANSPORT_ERROR_CODE,
    ExecutionError,
)
from automation_hub.core.request_builder import ExecutionRequest
from automation_hub.logger import log

logger = logging.getLogger(__name__)


class Executor(Protocol):
    async def invoke(self, request: ExecutionRequest, identity: Any) -> Dict[str, Any]:  # pragma: no cover - protocol
        ...


def _error_code(body: Dict[str, Any], message: str) -> Optional[str]:
    code = body.get("code")
    if code:
        return str(code)
    if NO_MESSAGES_ERROR in message:
        return NO_MESSAGES_CODE
    return None


def _json_body(response: Any) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    if isinstance(body, dict):
        return body
    return {"data": body}


class HttpExecutor:
    """Posts JSON payloads with ``requests`` from a worker thread."""

    def __init__(self, *, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url
        self.timeout = timeout if timeout is not None else CONFIG.automations_request_timeout

    async def invoke(self, request: ExecutionRequest, identity: Any) -> Dict[str, Any]:
        return await asyncio.to_thread(self._post, request)

    def _post(self, request: ExecutionRequest) -> Dict[str, Any]:
        url = build_api_url(request.endpoint, base_url=self.base_url)
        log("[executor] POST", url=url, variant=request.variant.value, route=request.route.value)

        try:
            response = requests.post(
                url,
                json=request.payload,
                headers=request.headers or None,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Automation request to %s failed: %s", url, exc)
            raise ExecutionError(
                f"Could not reach the automation service: {exc}",
                code=TRANSPORT_ERROR_CODE,
            ) from exc

        body = _json_body(response)
        if response.status_code >= 400 or body.get("success") is False:
            message = str(body.get("error") or body.get("message") or f"HTTP {response.status_code}")
            logger.warning(
                "Automation endpoint %s returned %s: %s",
                request.endpoint,
                response.status_code,
                message,
            )
            raise ExecutionError(
                message,
                code=_error_code(body, message),
                status_code=response.status_code,
                details=body,
            )

        return body


__all__ = ["Executor", "HttpExecutor"]
