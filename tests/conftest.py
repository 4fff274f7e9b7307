import itertools

import pytest

from clinic_scheduler.models import BookRequest
from clinic_scheduler.registry import ClinicRegistry


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"apt_test_{next(counter)}"


@pytest.fixture
def registry(sequential_ids):
    """Fresh registry on the built-in seed with predictable appointment ids."""
    return ClinicRegistry(id_factory=sequential_ids)


@pytest.fixture
def make_request():
    def _make(clinic_id="clinic_abc", service_id="svc_1", slot="09:00"):
        return BookRequest(
            clinic_id=clinic_id,
            service_id=service_id,
            pet_name="Biscuit",
            owner_name="Dana Reyes",
            owner_phone="555-0142",
            slot=slot,
        )
    return _make
