"""Pydantic schemas for Users and Venues."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UserCreate(BaseModel):
    email: str
    full_name: Optional[str] = None
    role: str = "venue_manager"
    venue_id: Optional[str] = None


class UserOut(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: str
    venue_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class VenueCreate(BaseModel):
    name: str
    address: Optional[str] = None
    default_reviewer_id: Optional[str] = None


class VenueOut(BaseModel):
    id: str
    name: str
    address: Optional[str] = None
    default_reviewer_id: Optional[str] = None

    model_config = {"from_attributes": True}
