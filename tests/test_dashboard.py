import json
import pathlib

import httpx
import pytest
import pytest_asyncio
import respx

from clinic_scheduler import client as cl
from clinic_scheduler.dashboard import SchedulingDashboard

FIX = pathlib.Path(__file__).parent / "fixtures"
BASE = "http://scheduler.test"

cl._BASE_URL = BASE


@pytest.fixture
def catalog():
    return json.loads((FIX / "services_get.json").read_text())


@pytest_asyncio.fixture
async def dashboard(catalog):
    board = SchedulingDashboard("clinic_abc")
    with respx.mock(base_url=BASE) as m:
        m.get("/services").respond(200, json=catalog)
        await board.load()
    return board


@pytest.mark.asyncio
async def test_load_populates_catalog(dashboard):
    assert dashboard.clinic_name == "PawCare Clinic"
    assert dashboard.currency == "USD"
    assert [s.id for s in dashboard.services] == ["svc_1", "svc_2", "svc_3"]
    assert dashboard.services_error is None


@pytest.mark.asyncio
async def test_load_with_category_sends_filter(catalog):
    board = SchedulingDashboard("clinic_abc")
    with respx.mock(base_url=BASE) as m:
        route = m.get("/services").respond(200, json=catalog)
        await board.load("surgery")
        assert route.calls.last.request.url.params["category"] == "surgery"

        await board.load("everything")
        assert board.category == "all"
        assert "category" not in route.calls.last.request.url.params


@pytest.mark.asyncio
async def test_load_failure_keeps_previous_list(dashboard):
    with respx.mock(base_url=BASE) as m:
        m.get("/services").respond(404, json={"message": "Clinic not found"})
        await dashboard.load()
    assert dashboard.services_error == "Clinic not found"
    assert len(dashboard.services) == 3


@pytest.mark.asyncio
async def test_search_is_case_insensitive(dashboard):
    assert [s.id for s in dashboard.displayed_services("  VACC ")] == ["svc_2"]
    assert len(dashboard.displayed_services("")) == 3
    assert dashboard.displayed_services("grooming") == []


@pytest.mark.asyncio
async def test_open_booking_preselects_first_slot(dashboard):
    dashboard.open_booking("svc_1")
    assert dashboard.booking_service_id == "svc_1"
    assert dashboard.booking_slot == "09:00"

    dashboard.open_booking("svc_3")
    assert dashboard.booking_slot == ""

    with pytest.raises(KeyError):
        dashboard.open_booking("svc_404")


@pytest.mark.asyncio
async def test_successful_booking_mirrors_slot_removal(dashboard):
    dashboard.open_booking("svc_2")
    with respx.mock(base_url=BASE) as m:
        m.post("/appointments").respond(201, json={"appointmentId": "apt_9", "status": "confirmed"})
        confirmation = await dashboard.submit_booking("Biscuit", "Dana Reyes", "555-0142")

    assert confirmation.appointment_id == "apt_9"
    assert dashboard.booking_notice == "Booked successfully. Appointment ID: apt_9"
    assert dashboard.booking_service_id is None
    svc = dashboard.displayed_services("puppy")[0]
    assert svc.slots == [] and svc.available is False


@pytest.mark.asyncio
async def test_rejected_booking_leaves_list_alone(dashboard):
    dashboard.open_booking("svc_1")
    with respx.mock(base_url=BASE) as m:
        m.post("/appointments").respond(400, json={"message": "Selected slot is no longer available"})
        confirmation = await dashboard.submit_booking("Biscuit", "Dana Reyes", "555-0142", slot="14:00")

    assert confirmation is None
    assert dashboard.booking_error == "Selected slot is no longer available"
    assert dashboard.booking_service_id == "svc_1"
    assert dashboard.services[0].slots == ["09:00", "10:30", "14:00", "16:00"]


@pytest.mark.asyncio
async def test_blank_fields_never_reach_the_server(dashboard):
    dashboard.open_booking("svc_1")
    with respx.mock(base_url=BASE, assert_all_called=False) as m:
        route = m.post("/appointments")
        assert await dashboard.submit_booking("  ", "Dana Reyes", "555-0142") is None
        assert not route.called
    assert dashboard.booking_error == "Missing required appointment fields"


@pytest.mark.asyncio
async def test_network_failure_sets_error(dashboard):
    dashboard.open_booking("svc_1")
    with respx.mock(base_url=BASE) as m:
        m.post("/appointments").mock(side_effect=httpx.ConnectError("refused"))
        assert await dashboard.submit_booking("Biscuit", "Dana Reyes", "555-0142") is None
    assert dashboard.booking_error == "Booking request failed"


@pytest.mark.asyncio
async def test_submit_without_open_form_is_noop(dashboard):
    assert await dashboard.submit_booking("Biscuit", "Dana Reyes", "555-0142") is None


def test_format_price():
    board = SchedulingDashboard()
    board.currency = "GBP"
    assert board.format_price(3500) == "GBP 3,500"


@pytest.mark.asyncio
async def test_non_json_catalog_body_sets_error(dashboard):
    with respx.mock(base_url=BASE) as m:
        m.get("/services").respond(200, text="<html>proxy</html>")
        await dashboard.load()
    assert dashboard.services_error == "Unable to load services"
    assert len(dashboard.services) == 3


@pytest.mark.asyncio
async def test_catalog_body_of_wrong_shape_sets_error(dashboard):
    with respx.mock(base_url=BASE) as m:
        m.get("/services").respond(200, json={"clinicId": "clinic_abc"})
        await dashboard.load()
    assert dashboard.services_error == "Unable to load services"
    assert dashboard.clinic_name == "PawCare Clinic"


@pytest.mark.asyncio
async def test_malformed_confirmation_is_a_failed_booking(dashboard):
    dashboard.open_booking("svc_1")
    with respx.mock(base_url=BASE) as m:
        m.post("/appointments").respond(201, json={"status": "confirmed"})
        assert await dashboard.submit_booking("Biscuit", "Dana Reyes", "555-0142") is None
    assert dashboard.booking_error == "Booking request failed"
    assert dashboard.services[0].slots == ["09:00", "10:30", "14:00", "16:00"]
