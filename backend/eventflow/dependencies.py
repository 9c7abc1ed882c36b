"""Request dependencies: resolved caller identity."""
from fastapi import Depends, Query
from sqlalchemy.orm import Session

from eventflow.database import get_db
from eventflow.errors import PermissionDeniedError
from eventflow.models.user import User
from eventflow.services.policy import Actor


def get_actor(
    actor_user_id: str = Query(..., description="ID of the user performing the action"),
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the already-authenticated caller to an (id, role) pair."""
    user = db.query(User).filter(User.id == actor_user_id).first()
    if not user:
        raise PermissionDeniedError("Unknown user.")
    return Actor.from_user(user)
