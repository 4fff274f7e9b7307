"""Seed clinics the registry starts from."""
from __future__ import annotations
import json
import os
import pathlib

from .models import Clinic

SEED_CLINICS = [
    {
        "clinicId": "clinic_abc",
        "clinicName": "PawCare Clinic",
        "currency": "USD",
        "services": [
            {"id": "svc_1", "name": "General Checkup", "basePrice": 500, "duration": 30,
             "category": "checkup", "slots": ["09:00", "10:30", "14:00", "16:00"]},
            {"id": "svc_2", "name": "Puppy Vaccination", "basePrice": 900, "duration": 20,
             "category": "vaccination", "slots": ["11:00", "12:30", "15:30"]},
            {"id": "svc_3", "name": "Neutering Surgery", "basePrice": 3500, "duration": 90,
             "category": "surgery", "slots": []},
        ],
    },
    {
        "clinicId": "clinic_xyz",
        "clinicName": "Happy Tails Vet",
        "currency": "GBP",
        "services": [
            {"id": "svc_10", "name": "Annual Wellness Exam", "basePrice": 650, "duration": 40,
             "category": "checkup", "slots": ["09:30", "13:00", "17:00"]},
            {"id": "svc_11", "name": "Rabies Vaccination", "basePrice": 750, "duration": 20,
             "category": "vaccination", "slots": ["10:00", "11:30", "16:00"]},
        ],
    },
]


def load_clinics(path: str | os.PathLike | None = None) -> list[Clinic]:
    """Build fresh Clinic objects from a JSON seed file, or the built-in seed.

    Falls back to ``CLINIC_SEED_FILE`` when no path is given. Every call
    returns new objects, so registries never share state.
    """
    path = path or os.getenv("CLINIC_SEED_FILE")
    if path:
        raw = json.loads(pathlib.Path(path).read_text())
    else:
        raw = SEED_CLINICS
    return [Clinic.model_validate(item) for item in raw]
