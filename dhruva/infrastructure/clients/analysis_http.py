"""HTTP client adapter for the grievance analysis backend (async httpx)."""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from dhruva.domain.pipeline.errors import MalformedResponseError, RemoteAnalysisError
from dhruva.domain.pipeline.remote import AnalyzeResponse, HealthReport
from dhruva.domain.ports.analysis_port import AnalysisPort

HEALTH_PATH = "/api/v1/ml/health"
ANALYZE_PATH = "/api/v1/ml/analyze"
CLASSIFY_PATH = "/api/v1/ml/classify"
SENTIMENT_PATH = "/api/v1/ml/sentiment"
PREDICT_LAPSE_PATH = "/api/v1/ml/predict-lapse"

TIMEOUT_MESSAGE = "Request timeout - backend may be starting up"

_M = TypeVar("_M", bound=BaseModel)


class AnalysisHttpClient(AnalysisPort):
    """Analysis backend client implementing AnalysisPort using httpx (async).

    Assumes endpoints:
    - GET  /api/v1/ml/health         -> {"status": "healthy|degraded|...", "models_loaded": bool, ...}
    - POST /api/v1/ml/analyze        -> full analysis (classification, sentiment, lapse, sla, ...)
    - POST /api/v1/ml/classify       -> classification only
    - POST /api/v1/ml/sentiment      -> sentiment only
    - POST /api/v1/ml/predict-lapse  -> lapse prediction only
    Error bodies carry a ``detail`` string.
    """

    def __init__(
        self,
        *,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._verify_ssl = verify_ssl
        self._transport = transport

    def _client(self, base_url: str, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            verify=self._verify_ssl,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        base_url: str,
        path: str,
        *,
        timeout: float,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        try:
            async with self._client(base_url, timeout) as client:
                resp = await client.request(method, path, json=payload)
        except httpx.TimeoutException as e:
            raise RemoteAnalysisError(TIMEOUT_MESSAGE) from e
        except httpx.HTTPError as e:
            raise RemoteAnalysisError(f"Connection failed: {e.__class__.__name__}") from e

        if resp.is_error:
            raise RemoteAnalysisError(_error_detail(resp), status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponseError("Response body is not JSON", status_code=resp.status_code) from e

    @staticmethod
    def _parse(model: type[_M], data: Any) -> _M:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected {model.__name__} shape: {e.error_count()} invalid field(s)"
            ) from e

    async def health(self, base_url: str, timeout: float) -> HealthReport:
        data = await self._request("GET", base_url, HEALTH_PATH, timeout=timeout)
        return self._parse(HealthReport, data)

    async def analyze(
        self,
        base_url: str,
        text: str,
        *,
        citizen_id: str | None = None,
        location: str | None = None,
        timeout: float = 15.0,
    ) -> AnalyzeResponse:
        payload: dict[str, Any] = {"text": text}
        if citizen_id:
            payload["citizen_id"] = citizen_id
        if location:
            payload["location"] = location
        data = await self._request("POST", base_url, ANALYZE_PATH, timeout=timeout, payload=payload)
        return self._parse(AnalyzeResponse, data)

    # Single-purpose endpoints return the raw JSON body; only /analyze feeds the pipeline.
    async def classify(self, base_url: str, text: str, timeout: float = 15.0) -> dict[str, Any]:
        return await self._request("POST", base_url, CLASSIFY_PATH, timeout=timeout, payload={"text": text})

    async def sentiment(self, base_url: str, text: str, timeout: float = 15.0) -> dict[str, Any]:
        return await self._request("POST", base_url, SENTIMENT_PATH, timeout=timeout, payload={"text": text})

    async def predict_lapse(
        self,
        base_url: str,
        text: str,
        department: str | None = None,
        timeout: float = 15.0,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"text": text}
        if department:
            payload["department"] = department
        return await self._request("POST", base_url, PREDICT_LAPSE_PATH, timeout=timeout, payload=payload)


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("detail"), str) and body["detail"]:
        return body["detail"]
    return f"API error: {resp.status_code}"
