"""Dependency resolving the signed-in user's freelancer profile."""

from fastapi import Depends
from sqlalchemy.orm import Session

from backend.app.api.results import unwrap
from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.models.freelancer import Freelancer
from backend.app.models.user import User
from backend.app.services.freelancers import get_freelancer_for_user


def get_current_freelancer(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Freelancer:
    # 404 "Freelancer not found" until the profile has been saved once.
    return unwrap(get_freelancer_for_user(db, current_user))
