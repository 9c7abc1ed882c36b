"""Reviewer queue route."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventflow.database import get_db
from eventflow.dependencies import get_actor
from eventflow.schemas.workflow import QueueItemOut
from eventflow.services import review_service
from eventflow.services.policy import Actor

router = APIRouter()


@router.get("/queue", response_model=list[QueueItemOut])
def get_review_queue(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Events awaiting a decision, soonest first, each with its SLA bucket."""
    return [QueueItemOut.model_validate(item) for item in review_service.review_queue(db, actor)]
