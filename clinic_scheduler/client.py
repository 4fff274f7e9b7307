"""Async client for the scheduler's HTTP API.
This is what the dashboard talks to; it knows nothing about the registry.
"""
from __future__ import annotations
import os
from typing import Optional

import httpx
from dotenv import load_dotenv

from .models import BookRequest, BookResponse, CatalogView, normalize_category

load_dotenv()

_BASE_URL = os.getenv("CLINIC_API_BASE_URL", "http://localhost:8000")
_TIMEOUT = float(os.getenv("CLINIC_API_TIMEOUT", "15"))


class ClinicApiError(Exception):
    """Non-2xx answer from the scheduler API."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(resp: httpx.Response, fallback: str) -> str:
    """Use the server's ``message`` when the body carries one."""
    try:
        payload = resp.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return fallback


async def fetch_services(clinic_id: str, category: Optional[str] = None) -> CatalogView:
    """Return the clinic's catalog; ``category`` is only sent when it is a real one."""
    params = {"clinicId": clinic_id}
    if normalize_category(category):
        params["category"] = category
    async with httpx.AsyncClient(http2=True, timeout=_TIMEOUT) as client:
        resp = await client.get(f"{_BASE_URL}/services", params=params, headers={"Accept": "application/json"})

    if resp.is_error:
        raise ClinicApiError(_error_message(resp, "Unable to load services"), resp.status_code)
    return CatalogView.model_validate(resp.json())


async def book_appointment(req: BookRequest) -> BookResponse:
    """Book a slot; a rejected booking raises ClinicApiError with the reason."""
    async with httpx.AsyncClient(http2=True, timeout=_TIMEOUT) as client:
        resp = await client.post(f"{_BASE_URL}/appointments", json=req.model_dump(by_alias=True))

    if resp.is_error:
        raise ClinicApiError(_error_message(resp, "Booking request failed"), resp.status_code)
    return BookResponse.model_validate(resp.json())
