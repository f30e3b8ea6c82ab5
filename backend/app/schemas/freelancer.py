"""Freelancer profile schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FreelancerBase(BaseModel):
    name: str
    email: str
    address: str
    phone: Optional[str] = None
    website: Optional[str] = None


class FreelancerCreate(FreelancerBase):
    pass


class FreelancerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


class FreelancerRead(FreelancerBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    created_at: datetime
