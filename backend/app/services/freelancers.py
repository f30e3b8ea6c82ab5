"""Freelancer profile service."""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, ValidationError, service_boundary, translate_integrity_error
from backend.app.models.freelancer import Freelancer
from backend.app.models.user import User
from backend.app.schemas.freelancer import FreelancerCreate, FreelancerUpdate
from backend.app.services.access import require_user, require_uuid
from backend.app.services.validation import clean_optional, is_valid_email, normalize_email

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "A freelancer with this email already exists"


def _scoped(db: Session, user: User):
    return db.query(Freelancer).filter(Freelancer.user_id == user.id)


def _get_owned_freelancer(db: Session, user: User, freelancer_id: str) -> Freelancer:
    freelancer = _scoped(db, user).filter(Freelancer.id == freelancer_id).first()
    if not freelancer:
        raise NotFoundError("Freelancer not found")
    return freelancer


def _check_required(name: Optional[str], email: Optional[str], address: Optional[str]) -> None:
    if name is not None and not name.strip():
        raise ValidationError("Name is required")
    if email is not None:
        if not email.strip():
            raise ValidationError("Email is required")
        if not is_valid_email(email.strip()):
            raise ValidationError("Invalid email format")
    if address is not None and not address.strip():
        raise ValidationError("Address is required")


@service_boundary("creating the freelancer")
def create_freelancer(db: Session, user: Optional[User], data: FreelancerCreate) -> Freelancer:
    user = require_user(user)
    _check_required(data.name, data.email, data.address)

    freelancer = Freelancer(
        user_id=user.id,
        name=data.name.strip(),
        email=normalize_email(data.email),
        address=data.address.strip(),
        phone=clean_optional(data.phone),
        website=clean_optional(data.website),
    )
    db.add(freelancer)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Error creating freelancer: %s", exc.orig)
        raise translate_integrity_error(exc, unique_message=DUPLICATE_EMAIL_MESSAGE) from exc
    db.refresh(freelancer)
    logger.info("Created freelancer %s for user %s", freelancer.id, user.id)
    return freelancer


@service_boundary("fetching the freelancer")
def get_freelancer_by_id(db: Session, user: Optional[User], freelancer_id: str) -> Freelancer:
    user = require_user(user)
    require_uuid(freelancer_id)
    return _get_owned_freelancer(db, user, freelancer_id)


@service_boundary("fetching the freelancer profile")
def get_freelancer_for_user(db: Session, user: Optional[User]) -> Freelancer:
    """Return the profile attached to the signed-in identity."""
    user = require_user(user)
    freelancer = _scoped(db, user).order_by(Freelancer.created_at.asc()).first()
    if not freelancer:
        raise NotFoundError("Freelancer not found")
    return freelancer


@service_boundary("fetching freelancers")
def list_freelancers(db: Session, user: Optional[User]) -> List[Freelancer]:
    user = require_user(user)
    return _scoped(db, user).order_by(Freelancer.created_at.desc(), Freelancer.id.desc()).all()


@service_boundary("updating the freelancer")
def update_freelancer(db: Session, user: Optional[User], freelancer_id: str, updates: FreelancerUpdate) -> Freelancer:
    user = require_user(user)
    require_uuid(freelancer_id)
    fields = updates.model_dump(exclude_unset=True)
    _check_required(fields.get("name"), fields.get("email"), fields.get("address"))

    freelancer = _get_owned_freelancer(db, user, freelancer_id)
    for field, value in fields.items():
        if field == "email" and value is not None:
            value = normalize_email(value)
        elif field in ("name", "address") and value is not None:
            value = value.strip()
        elif field in ("phone", "website"):
            value = clean_optional(value)
        elif value is None:
            continue
        setattr(freelancer, field, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Error updating freelancer %s: %s", freelancer_id, exc.orig)
        raise translate_integrity_error(exc, unique_message=DUPLICATE_EMAIL_MESSAGE) from exc
    db.refresh(freelancer)
    return freelancer


@service_boundary("deleting the freelancer")
def delete_freelancer(db: Session, user: Optional[User], freelancer_id: str) -> bool:
    user = require_user(user)
    require_uuid(freelancer_id)
    freelancer = _get_owned_freelancer(db, user, freelancer_id)
    db.delete(freelancer)
    db.commit()
    logger.info("Deleted freelancer %s", freelancer_id)
    return True
