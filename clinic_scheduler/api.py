import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import RequestIDMiddleware, get_logger, setup_structured_logging
from .models import BookingRejection, BookRequest, BookResponse, CatalogView, ErrorResponse
from .registry import ClinicRegistry, IdFactory

load_dotenv()

logger = get_logger(__name__)

router = APIRouter()


def get_registry(request: Request) -> ClinicRegistry:
    """Registry owned by the running app."""
    return request.app.state.registry


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("request_validation_failed", errors=str(exc.errors()))
    return JSONResponse(status_code=400, content=ErrorResponse(message="Invalid request").model_dump())


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get(
    "/services",
    response_model=CatalogView,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def list_services(
    clinic_id: Optional[str] = Query(None, alias="clinicId"),
    category: Optional[str] = Query(None, description="checkup, vaccination or surgery; anything else means all"),
    registry: ClinicRegistry = Depends(get_registry),
):
    """Services a clinic offers, optionally narrowed to one category."""
    if not clinic_id:
        raise HTTPException(status_code=400, detail="Missing required query param: clinicId")
    view = registry.lookup_services(clinic_id, category)
    if view is None:
        raise HTTPException(status_code=404, detail="Clinic not found")
    return view


@router.post(
    "/appointments",
    response_model=BookResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
async def book_appointment(request: Request, registry: ClinicRegistry = Depends(get_registry)):
    """Book one slot of a service."""
    # Body is parsed by hand so every malformed shape maps to a 400 message
    # instead of FastAPI's 422.
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid appointment payload")
    try:
        req = BookRequest.from_wire(payload)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Missing required appointment fields")

    outcome = registry.book_slot(req)
    if isinstance(outcome, BookingRejection):
        raise HTTPException(status_code=400, detail=outcome.message)
    return outcome


def create_app(registry: Optional[ClinicRegistry] = None, id_factory: Optional[IdFactory] = None) -> FastAPI:
    """Build the HTTP app around a registry (a fresh seeded one by default).

    ``id_factory`` only applies to that default registry; a registry passed
    in already owns its id factory, so giving both is an error.
    """
    if registry is not None and id_factory is not None:
        raise ValueError("pass id_factory to the ClinicRegistry, not alongside it")
    setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))

    app = FastAPI(title="Clinic Scheduler")
    app.state.registry = registry if registry is not None else ClinicRegistry(id_factory=id_factory)
    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


app = create_app()
