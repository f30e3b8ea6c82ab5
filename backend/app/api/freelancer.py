"""Freelancer profile endpoints for the signed-in user."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.results import unwrap
from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.freelancer import FreelancerCreate, FreelancerRead, FreelancerUpdate
from backend.app.services.freelancers import create_freelancer, get_freelancer_for_user, update_freelancer

router = APIRouter(prefix="/freelancer", tags=["freelancer"])


@router.get("/me", response_model=FreelancerRead)
async def get_my_profile(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return unwrap(get_freelancer_for_user(db, current_user))


@router.put("/me", response_model=FreelancerRead)
async def save_my_profile(
    profile: FreelancerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    existing = get_freelancer_for_user(db, current_user)
    if existing.error_type == "not_found":
        return unwrap(create_freelancer(db, current_user, profile))
    freelancer = unwrap(existing)
    return unwrap(update_freelancer(db, current_user, freelancer.id, FreelancerUpdate(**profile.model_dump())))
