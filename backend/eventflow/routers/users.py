"""User API routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventflow.database import get_db
from eventflow.models.user import User, UserRole
from eventflow.schemas.user import UserCreate, UserOut

logger = logging.getLogger(__name__)
router = APIRouter()


def _parse_role(value: str) -> UserRole:
    try:
        return UserRole(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown role: {value}")


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create a user account with a workflow role."""
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=409, detail="Email already registered")
    user = User(**payload.model_dump(exclude={"role"}), role=_parse_role(payload.role))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.id, user.role.value)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(role: str | None = None, db: Session = Depends(get_db)):
    """List users, optionally filtered by role (e.g. ``?role=reviewer``)."""
    query = db.query(User)
    if role:
        query = query.filter(User.role == _parse_role(role))
    return query.order_by(User.created_at, User.id).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
