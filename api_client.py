from __future__ import annotations

import asyncio
import http.client
import json
import logging
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pydantic import ValidationError

from config import get_settings
from schemas import ExpenseCreate, ExpenseListOut, ExpenseRecord, SummaryView

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    def __init__(
        self, message: str, *, status: Optional[int] = None, detail: str = ""
    ) -> None:
        super().__init__(message)
        self.status = status
        self.detail = detail


class ExpensesApiClient:
    """
    Client for the expenses backend.

    Calls are blocking ``urlopen`` requests pushed onto a worker thread, so
    each public method is an awaitable that leaves the event loop free.
    """

    def __init__(
        self, base_url: Optional[str] = None, *, timeout: Optional[float] = None
    ) -> None:
        settings = get_settings()
        self.base_url = (
            settings.api_base_url if base_url is None else base_url
        ).rstrip("/")
        self.timeout = settings.api_timeout_secs if timeout is None else timeout

    def expenses_url(self, category: Optional[str] = None) -> str:
        params: dict[str, str] = {}
        if category:
            params["category"] = category
        query = urlencode(params)
        return f"{self.base_url}/api/expenses?{query}"

    def summary_url(self, month: int, year: int) -> str:
        query = urlencode({"month": month, "year": year})
        return f"{self.base_url}/api/summary?{query}"

    async def list_expenses(self, category: Optional[str] = None) -> list[ExpenseRecord]:
        payload = await asyncio.to_thread(
            self._request_json, "GET", self.expenses_url(category)
        )
        if not isinstance(payload, dict):
            return []
        try:
            return ExpenseListOut.model_validate(payload).items
        except ValidationError as exc:
            raise ApiError("Unexpected expenses response") from exc

    async def get_summary(self, month: int, year: int) -> SummaryView:
        payload = await asyncio.to_thread(
            self._request_json, "GET", self.summary_url(month, year)
        )
        try:
            return SummaryView.model_validate(payload)
        except ValidationError as exc:
            raise ApiError("Unexpected summary response") from exc

    async def create_expense(self, data: ExpenseCreate) -> None:
        body = json.dumps(data.to_payload()).encode("utf-8")
        await asyncio.to_thread(
            self._send, "POST", f"{self.base_url}/api/expenses", body
        )

    def _request_json(self, method: str, url: str) -> Any:
        raw = self._send(method, url, None)
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ApiError(f"Invalid JSON from {url}") from exc

    def _send(self, method: str, url: str, body: Optional[bytes]) -> bytes:
        headers = {"Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json"
        req = Request(url, data=body, headers=headers, method=method)
        logger.debug(f"api_request: method={method} url={url}")
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                return resp.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise ApiError(
                f"{method} {url} failed with status {exc.code}",
                status=exc.code,
                detail=detail,
            ) from exc
        except (
            URLError, TimeoutError, ValueError, OSError, http.client.HTTPException
        ) as exc:
            raise ApiError(f"{method} {url} failed: {exc}") from exc
