"""In-memory clinic registry with catalog lookup and slot booking."""
from __future__ import annotations
import threading
import uuid
from typing import Callable, Iterable, Optional, Union

from .logging_config import get_logger
from .models import (
    BookingRejection,
    BookRequest,
    BookResponse,
    CatalogView,
    Clinic,
    normalize_category,
)
from .seed import load_clinics

logger = get_logger(__name__)

IdFactory = Callable[[], str]


def new_appointment_id() -> str:
    return f"apt_{uuid.uuid4().hex[:12]}"


class ClinicRegistry:
    """
    Owns every clinic and serializes access per clinic.

    Lookups and bookings for the same clinic run under that clinic's lock,
    so a booking's check-then-take is atomic and readers never see a slot
    removed without its availability recomputed.
    """

    def __init__(self, clinics: Optional[Iterable[Clinic]] = None, id_factory: Optional[IdFactory] = None):
        if clinics is None:
            clinics = load_clinics()
        self._clinics: dict[str, Clinic] = {c.id: c for c in clinics}
        self._locks: dict[str, threading.Lock] = {cid: threading.Lock() for cid in self._clinics}
        self._new_id = id_factory or new_appointment_id

    def clinic_ids(self) -> list[str]:
        return list(self._clinics)

    def lookup_services(self, clinic_id: str, category: Optional[str] = None) -> Optional[CatalogView]:
        """Return the clinic's services, optionally filtered by category.

        Unknown categories are ignored rather than rejected. Returns None if
        the clinic does not exist.
        """
        clinic = self._clinics.get(clinic_id)
        if clinic is None:
            return None

        category = normalize_category(category)
        with self._locks[clinic_id]:
            services = [
                svc.model_copy(deep=True)
                for svc in clinic.services.values()
                if category is None or svc.category == category
            ]
        return CatalogView(
            clinic_id=clinic.id,
            clinic_name=clinic.display_name,
            currency=clinic.currency_code,
            services=services,
        )

    def book_slot(self, req: BookRequest) -> Union[BookResponse, BookingRejection]:
        """Consume ``req.slot`` and confirm, or say why the booking is refused."""
        clinic = self._clinics.get(req.clinic_id)
        if clinic is None:
            return self._reject(req, BookingRejection.CLINIC_NOT_FOUND)

        with self._locks[req.clinic_id]:
            service = clinic.services.get(req.service_id)
            if service is None:
                return self._reject(req, BookingRejection.SERVICE_NOT_FOUND)
            if not service.available:
                return self._reject(req, BookingRejection.SERVICE_UNAVAILABLE)
            if req.slot not in service.slots:
                return self._reject(req, BookingRejection.SLOT_UNAVAILABLE)

            service.take_slot(req.slot)
            remaining = len(service.slots)

        confirmation = BookResponse(appointment_id=self._new_id())
        logger.info(
            "booking_confirmed",
            clinic_id=req.clinic_id,
            service_id=req.service_id,
            slot=req.slot,
            appointment_id=confirmation.appointment_id,
            slots_left=remaining,
        )
        return confirmation

    @staticmethod
    def _reject(req: BookRequest, reason: BookingRejection) -> BookingRejection:
        logger.info(
            "booking_rejected",
            clinic_id=req.clinic_id,
            service_id=req.service_id,
            slot=req.slot,
            reason=reason.name,
        )
        return reason
