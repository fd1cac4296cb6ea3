from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.orm import Session
from app.api.businesses import find_business, save_business
from app.core.config import settings
from app.db.database import get_db
from app.schemas.business import BusinessCreate
from pathlib import Path
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.globals["project_name"] = settings.PROJECT_NAME

FORM_FIELDS = ("name", "address", "latitude", "longitude", "description")


def form_errors(error: ValidationError) -> dict:
    """Flatten a pydantic error into one message per form field.

    Errors raised by model-level validators carry no field location; they are
    reported against ``coordinates`` so the form can show them beside the
    latitude/longitude inputs.
    """
    errors = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item["loc"] else "coordinates"
        message = item["msg"].removeprefix("Value error, ")
        errors.setdefault(field, message)
    return errors


def render_not_found(request: Request, message: str):
    return templates.TemplateResponse(
        request,
        "not_found.html",
        {"message": message},
        status_code=status.HTTP_404_NOT_FOUND
    )


@router.get("/")
async def home(request: Request):
    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "businesses_url": f"{settings.API_V1_STR}/businesses",
            "markers_url": f"{settings.API_V1_STR}/businesses/markers",
            "map_lat": settings.MAP_DEFAULT_LAT,
            "map_lng": settings.MAP_DEFAULT_LNG,
            "map_zoom": settings.MAP_DEFAULT_ZOOM,
        }
    )


@router.get("/businesses/create")
async def create_business_form(request: Request):
    return templates.TemplateResponse(
        request,
        "businesses/create.html",
        {"values": {}, "errors": {}}
    )


@router.post("/businesses")
async def store_business(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    values = {field: str(form.get(field, "")).strip() for field in FORM_FIELDS}

    # Empty inputs mean "not provided"
    data = {field: value for field, value in values.items() if value != ""}
    try:
        business = BusinessCreate(**data)
    except ValidationError as e:
        errors = form_errors(e)
        logger.info(f"Rejected business form: {', '.join(errors)}")
        return templates.TemplateResponse(
            request,
            "businesses/create.html",
            {"values": values, "errors": errors},
            status_code=422
        )

    created = save_business(db, business)
    return RedirectResponse(
        url=f"/businesses/{created.id}",
        status_code=status.HTTP_303_SEE_OTHER
    )


@router.get("/businesses/{business_id}")
async def show_business(business_id: str, request: Request, db: Session = Depends(get_db)):
    business = None
    # Non-numeric ids are unknown businesses, not malformed requests
    if business_id.isascii() and business_id.isdigit() and len(business_id) <= 18:
        business = find_business(db, int(business_id))
    if not business:
        return render_not_found(request, "Business not found")

    return templates.TemplateResponse(
        request,
        "businesses/show.html",
        {"business": business}
    )
