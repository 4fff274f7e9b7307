"""Receptionist dashboard state.

Holds what the booking screen shows: the clinic's services for the chosen
category, the name search, the open booking form and the last notice or
error. After a successful booking the taken slot is dropped from the local
list straight away; that list is only a cache of the server's view and
``load()`` replaces it wholesale.
"""
from __future__ import annotations
from typing import Optional

import httpx
from pydantic import ValidationError

from . import client
from .client import ClinicApiError
from .logging_config import get_logger
from .models import BookRequest, BookResponse, ClinicService, normalize_category

logger = get_logger(__name__)


class SchedulingDashboard:
    def __init__(self, clinic_id: str = "clinic_abc"):
        self.clinic_id = clinic_id
        self.category = "all"
        self.clinic_name = ""
        self.currency = "USD"
        self.services: list[ClinicService] = []
        self.services_error: Optional[str] = None

        self.booking_service_id: Optional[str] = None
        self.booking_slot = ""
        self.booking_error: Optional[str] = None
        self.booking_notice: Optional[str] = None

    async def load(self, category: Optional[str] = None) -> None:
        """Fetch the catalog, switching category first if one is given."""
        if category is not None:
            self.category = category if normalize_category(category) else "all"
        self.services_error = None
        try:
            view = await client.fetch_services(
                self.clinic_id, None if self.category == "all" else self.category
            )
        except ClinicApiError as exc:
            self.services_error = exc.message
            return
        except httpx.HTTPError as exc:
            logger.warning("catalog_fetch_failed", clinic_id=self.clinic_id, error=str(exc))
            self.services_error = "Unable to load services"
            return
        except ValueError as exc:
            # 2xx whose body is not JSON or not a catalog
            logger.warning("catalog_body_invalid", clinic_id=self.clinic_id, error=str(exc))
            self.services_error = "Unable to load services"
            return

        self.clinic_name = view.clinic_name
        self.currency = view.currency
        self.services = view.services

    def displayed_services(self, search: str = "") -> list[ClinicService]:
        query = search.strip().lower()
        if not query:
            return list(self.services)
        return [svc for svc in self.services if query in svc.name.lower()]

    def open_booking(self, service_id: str) -> None:
        service = self._service(service_id)
        if service is None:
            raise KeyError(service_id)
        self.booking_service_id = service_id
        self.booking_error = None
        self.booking_notice = None
        self.booking_slot = service.slots[0] if service.slots else ""

    def close_booking(self) -> None:
        self.booking_service_id = None
        self.booking_slot = ""

    async def submit_booking(
        self,
        pet_name: str,
        owner_name: str,
        owner_phone: str,
        slot: Optional[str] = None,
    ) -> Optional[BookResponse]:
        """Book the open form's service; returns the confirmation or None on failure."""
        if self.booking_service_id is None:
            return None
        slot = slot if slot is not None else self.booking_slot
        self.booking_error = None
        self.booking_notice = None

        try:
            req = BookRequest(
                clinic_id=self.clinic_id,
                service_id=self.booking_service_id,
                pet_name=pet_name,
                owner_name=owner_name,
                owner_phone=owner_phone,
                slot=slot,
            )
        except ValidationError:
            self.booking_error = "Missing required appointment fields"
            return None

        try:
            confirmation = await client.book_appointment(req)
        except ClinicApiError as exc:
            self.booking_error = exc.message
            return None
        except httpx.HTTPError as exc:
            logger.warning("booking_request_failed", clinic_id=self.clinic_id, error=str(exc))
            self.booking_error = "Booking request failed"
            return None
        except ValueError as exc:
            logger.warning("booking_response_invalid", clinic_id=self.clinic_id, error=str(exc))
            self.booking_error = "Booking request failed"
            return None

        self.booking_notice = f"Booked successfully. Appointment ID: {confirmation.appointment_id}"
        self._drop_slot(req.service_id, req.slot)
        self.close_booking()
        return confirmation

    def format_price(self, amount: float) -> str:
        return f"{self.currency} {amount:,.0f}"

    def _service(self, service_id: str) -> Optional[ClinicService]:
        return next((svc for svc in self.services if svc.id == service_id), None)

    def _drop_slot(self, service_id: str, slot: str) -> None:
        updated = []
        for svc in self.services:
            if svc.id == service_id:
                svc = svc.model_copy(deep=True)
                svc.take_slot(slot)
            updated.append(svc)
        self.services = updated
