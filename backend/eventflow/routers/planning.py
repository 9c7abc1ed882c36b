"""Planner dashboard routes: space conflicts and status counts."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventflow.database import get_db
from eventflow.schemas.workflow import ConflictOut
from eventflow.services import conflict_service, review_service

router = APIRouter()


@router.get("/conflicts", response_model=list[ConflictOut])
def list_conflicts(db: Session = Depends(get_db)):
    """Upcoming events that share a venue space with overlapping times."""
    return [ConflictOut.model_validate(pair) for pair in conflict_service.find_upcoming_conflicts(db)]


@router.get("/status-counts", response_model=dict[str, int])
def get_status_counts(db: Session = Depends(get_db)):
    return review_service.status_counts(db)
