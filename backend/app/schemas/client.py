"""Client schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from backend.app.schemas.freelancer import FreelancerRead


class ClientCreate(BaseModel):
    freelancer_id: Optional[str] = None
    company_name: str
    email: str
    contact_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class ClientUpdate(BaseModel):
    company_name: Optional[str] = None
    email: Optional[str] = None
    contact_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class ClientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    freelancer_id: str
    user_id: Optional[str] = None
    company_name: str
    contact_name: Optional[str] = None
    email: str
    address: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime


class ClientWithFreelancerRead(ClientRead):
    freelancer: FreelancerRead
