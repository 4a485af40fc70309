"""Async HTTP client for the agency admin API.

Unwraps the `{success, data|message}` envelopes returned by the API routes and
maps failures onto ApiTransportError / ApiBusinessError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.config import settings
from app.models.payments import PaymentStatusRead
from app.models.season_draft import SeasonSubmission
from app.models.seasons import EventRead, SeasonDetailRead, SeasonRead
from app.services.api_errors import (
    ApiBusinessError,
    ApiTransportError,
    translate_error_body,
)

logger = logging.getLogger(__name__)


class AgencyApiClient:
    """Client for the season, event and payment endpoints.

    Use as an async context manager, or call aclose() when done. Pass a
    transport (e.g. httpx.MockTransport or httpx.ASGITransport) to talk to
    something other than the network.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.api_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "AgencyApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send a request and return the decoded success envelope."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {path} failed: {exc}")
            raise ApiTransportError(fallback) from exc

        try:
            body = response.json()
        except ValueError as exc:
            logger.warning(f"{method} {path} returned non-JSON body ({response.status_code})")
            raise ApiTransportError(fallback) from exc

        if response.is_error or not isinstance(body, dict) or body.get("success") is False:
            message = translate_error_body(body, fallback)
            code = body.get("code") if isinstance(body, dict) else None
            logger.info(f"{method} {path} rejected ({response.status_code}): {message}")
            raise ApiBusinessError(
                message,
                status_code=response.status_code,
                code=code,
                body=body if isinstance(body, dict) else None,
            )

        return body

    async def list_events(self) -> list[EventRead]:
        body = await self._request("GET", "/api/events", fallback="Failed to load events")
        return [EventRead.model_validate(item) for item in body.get("data") or []]

    async def get_event(self, event_id: int) -> EventRead:
        body = await self._request(
            "GET", f"/api/events/{event_id}", fallback="Failed to load event"
        )
        return EventRead.model_validate(body["data"])

    async def list_event_seasons(
        self,
        event_id: int,
        *,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> list[SeasonRead]:
        """Fetch one page of an event's seasons."""
        params: dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        body = await self._request(
            "GET",
            f"/api/events/{event_id}/seasons",
            fallback="Failed to load seasons",
            params=params,
        )
        return [SeasonRead.model_validate(item) for item in body.get("data") or []]

    async def get_season(self, season_id: int) -> SeasonDetailRead:
        body = await self._request(
            "GET", f"/api/season/{season_id}", fallback="Failed to load season"
        )
        return SeasonDetailRead.model_validate(body["data"])

    async def create_season(self, submission: SeasonSubmission) -> SeasonRead:
        body = await self._request(
            "POST",
            "/api/season",
            fallback="Failed to create season",
            data=submission.data,
            files=submission.files or None,
        )
        return SeasonRead.model_validate(body["data"])

    async def update_season(self, season_id: int, submission: SeasonSubmission) -> SeasonRead:
        body = await self._request(
            "PATCH",
            f"/api/season/{season_id}",
            fallback="Failed to update season",
            data=submission.data,
            files=submission.files or None,
        )
        return SeasonRead.model_validate(body["data"])

    async def delete_season(self, season_id: int) -> None:
        await self._request(
            "DELETE", f"/api/season/{season_id}", fallback="Failed to delete season"
        )

    async def get_payment_status(self, prn: str) -> PaymentStatusRead:
        body = await self._request(
            "GET",
            f"/api/payment/status/{prn}",
            fallback="Failed to get payment status",
        )
        return PaymentStatusRead.model_validate(body)
