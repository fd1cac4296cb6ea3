from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.db.database import get_db
from app.models.business import Business
from app.schemas.business import BusinessCreate, BusinessOut, BusinessUpdate, check_coordinate_pair
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def find_business(db: Session, business_id: int) -> Business | None:
    return db.query(Business).filter(Business.id == business_id).first()


def get_business_or_404(business_id: int, db: Session) -> Business:
    business = find_business(db, business_id)
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")
    return business


def list_businesses(db: Session, q: str | None = None, skip: int = 0, limit: int = settings.DEFAULT_PAGE_SIZE):
    query = db.query(Business)
    if q:
        query = query.filter(Business.name.icontains(q.strip(), autoescape=True))
    return query.order_by(func.lower(Business.name), Business.id).offset(skip).limit(limit).all()


def save_business(db: Session, data: BusinessCreate) -> Business:
    business = Business(**data.model_dump())
    try:
        db.add(business)
        db.commit()
        db.refresh(business)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating business: {str(e)}")
        raise HTTPException(status_code=500, detail="Error saving business")

    logger.info(f"Created business {business.id} ({business.name})")
    return business


@router.get("", response_model=list[BusinessOut])
async def get_businesses(
    q: str | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db)
):
    return list_businesses(db, q=q, skip=skip, limit=limit)


@router.get("/markers")
async def get_business_markers(db: Session = Depends(get_db)):
    businesses = db.query(Business).filter(
        Business.latitude.isnot(None),
        Business.longitude.isnot(None)
    ).order_by(Business.id).all()

    features = []
    for business in businesses:
        features.append({
            "type": "Feature",
            "geometry": {
                "type": "Point",
                # GeoJSON positions are [lng, lat]
                "coordinates": [business.longitude, business.latitude]
            },
            "properties": {
                "id": business.id,
                "name": business.name,
                "address": business.address,
                "url": f"/businesses/{business.id}"
            }
        })

    return {
        "type": "FeatureCollection",
        "features": features
    }


@router.post("", response_model=BusinessOut, status_code=status.HTTP_201_CREATED)
async def create_business(business: BusinessCreate, db: Session = Depends(get_db)):
    return save_business(db, business)


@router.get("/{business_id}", response_model=BusinessOut)
async def get_business(business_id: int, db: Session = Depends(get_db)):
    return get_business_or_404(business_id, db)


@router.put("/{business_id}", response_model=BusinessOut)
async def update_business(
    business_id: int,
    changes: BusinessUpdate,
    db: Session = Depends(get_db)
):
    business = get_business_or_404(business_id, db)
    updates = changes.model_dump(exclude_unset=True)

    latitude = updates.get("latitude", business.latitude)
    longitude = updates.get("longitude", business.longitude)
    try:
        check_coordinate_pair(latitude, longitude)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    for field, value in updates.items():
        setattr(business, field, value)

    try:
        db.commit()
        db.refresh(business)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating business {business_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error saving business")

    logger.info(f"Updated business {business_id}: {', '.join(updates) or 'no changes'}")
    return business


@router.delete("/{business_id}")
async def delete_business(business_id: int, db: Session = Depends(get_db)):
    business = get_business_or_404(business_id, db)

    try:
        db.delete(business)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting business {business_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error deleting business")

    logger.info(f"Deleted business {business_id}")
    return {"message": "Business deleted successfully"}
