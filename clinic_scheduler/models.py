from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

ServiceCategory = Literal["checkup", "vaccination", "surgery"]
SERVICE_CATEGORIES: tuple[str, ...] = ("checkup", "vaccination", "surgery")


def normalize_category(value: Optional[str]) -> Optional[str]:
    """Return the category if it is a known one, otherwise None (no filter)."""
    return value if value in SERVICE_CATEGORIES else None


class ClinicService(BaseModel):
    id: str
    name: str
    base_price: float = Field(alias="basePrice")
    duration_minutes: int = Field(alias="duration")
    category: ServiceCategory
    available: bool = True
    slots: list[str] = Field(default_factory=list)  # "HH:MM" labels

    model_config = {
        "populate_by_name": True
    }

    @field_validator("slots")
    @classmethod
    def _unique_slots(cls, slots: list[str]) -> list[str]:
        if len(set(slots)) != len(slots):
            raise ValueError("slot labels must be unique within a service")
        return slots

    @model_validator(mode="after")
    def _derive_available(self) -> "ClinicService":
        # the flag always follows the slots
        self.available = bool(self.slots)
        return self

    def take_slot(self, slot: str) -> None:
        """Remove a slot and recompute availability in the same step."""
        remaining = [s for s in self.slots if s != slot]
        self.slots = remaining
        self.available = bool(remaining)


class Clinic(BaseModel):
    id: str = Field(alias="clinicId")
    display_name: str = Field(alias="clinicName")
    currency_code: str = Field(alias="currency")
    services: dict[str, ClinicService] = Field(default_factory=dict)

    model_config = {
        "populate_by_name": True
    }

    @field_validator("services", mode="before")
    @classmethod
    def _key_services(cls, value):
        # seed files list services; key them by id keeping their order
        if isinstance(value, list):
            keyed = {}
            for item in value:
                svc = item if isinstance(item, ClinicService) else ClinicService.model_validate(item)
                if svc.id in keyed:
                    raise ValueError(f"duplicate service id {svc.id!r}")
                keyed[svc.id] = svc
            return keyed
        return value


class CatalogView(BaseModel):
    """What GET /services returns for one clinic."""
    clinic_id: str = Field(alias="clinicId")
    clinic_name: str = Field(alias="clinicName")
    currency: str
    services: list[ClinicService]

    model_config = {
        "populate_by_name": True
    }


class BookRequest(BaseModel):
    clinic_id: str = Field(alias="clinicId", min_length=1)
    service_id: str = Field(alias="serviceId", min_length=1)
    pet_name: str = Field(alias="petName", min_length=1)
    owner_name: str = Field(alias="ownerName", min_length=1)
    owner_phone: str = Field(alias="ownerPhone", min_length=1)
    slot: str = Field(min_length=1)

    model_config = {
        "populate_by_name": True
    }

    @field_validator("*", mode="before")
    @classmethod
    def _trimmed_text(cls, value):
        # anything that is not a string counts as missing
        return value.strip() if isinstance(value, str) else ""

    @classmethod
    def from_wire(cls, payload: dict) -> "BookRequest":
        """Validate a JSON body; only the camelCase wire keys are read."""
        wire_keys = [field.alias or name for name, field in cls.model_fields.items()]
        return cls.model_validate({key: payload[key] for key in wire_keys if key in payload})


class BookResponse(BaseModel):
    appointment_id: str = Field(alias="appointmentId")
    status: Literal["confirmed"] = "confirmed"

    model_config = {
        "populate_by_name": True
    }


class ErrorResponse(BaseModel):
    message: str


class BookingRejection(str, Enum):
    """Reasons a booking is turned down, valued by their user-facing message."""
    CLINIC_NOT_FOUND = "Clinic not found"
    SERVICE_NOT_FOUND = "Service not found"
    SERVICE_UNAVAILABLE = "Service is not currently available"
    SLOT_UNAVAILABLE = "Selected slot is no longer available"

    @property
    def message(self) -> str:
        return self.value
