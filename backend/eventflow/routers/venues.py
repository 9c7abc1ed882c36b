"""Venue API routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventflow.database import get_db
from eventflow.models.user import User
from eventflow.models.venue import Venue
from eventflow.schemas.user import VenueCreate, VenueOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=VenueOut, status_code=status.HTTP_201_CREATED)
def create_venue(payload: VenueCreate, db: Session = Depends(get_db)):
    if payload.default_reviewer_id:
        reviewer = db.query(User).filter(User.id == payload.default_reviewer_id).first()
        if not reviewer or not reviewer.can_review:
            raise HTTPException(status_code=422, detail="Default reviewer must be a reviewer or planner")
    venue = Venue(**payload.model_dump())
    db.add(venue)
    db.commit()
    db.refresh(venue)
    logger.info("Created venue %s (%s)", venue.id, venue.name)
    return venue


@router.get("/", response_model=list[VenueOut])
def list_venues(db: Session = Depends(get_db)):
    return db.query(Venue).order_by(Venue.name).all()
