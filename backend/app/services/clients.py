"""Client management service."""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backend.app.core.errors import NotFoundError, ValidationError, service_boundary, translate_integrity_error
from backend.app.models.client import Client
from backend.app.models.user import User
from backend.app.schemas.client import ClientCreate, ClientUpdate
from backend.app.services.access import require_user, require_uuid
from backend.app.services.validation import clean_optional, is_valid_email, normalize_email

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "A client with this email already exists"
MISSING_FREELANCER_MESSAGE = "Invalid freelancer ID - freelancer does not exist"


def _scoped(db: Session, user: User):
    return db.query(Client).filter(Client.user_id == user.id)


def _get_owned_client(db: Session, user: User, client_id: str) -> Client:
    client = _scoped(db, user).filter(Client.id == client_id).first()
    if not client:
        raise NotFoundError("Client not found")
    return client


@service_boundary("creating the client")
def create_client(db: Session, user: Optional[User], data: ClientCreate) -> Client:
    user = require_user(user)
    require_uuid(data.freelancer_id, "Invalid freelancer ID format")
    if not data.company_name or not data.company_name.strip():
        raise ValidationError("Company name is required")
    if not data.email or not data.email.strip():
        raise ValidationError("Email is required")
    if not is_valid_email(data.email.strip()):
        raise ValidationError("Invalid email format")

    client = Client(
        freelancer_id=data.freelancer_id,
        user_id=user.id,
        company_name=data.company_name.strip(),
        email=normalize_email(data.email),
        contact_name=clean_optional(data.contact_name),
        address=clean_optional(data.address),
        phone=clean_optional(data.phone),
    )
    db.add(client)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Error creating client: %s", exc.orig)
        raise translate_integrity_error(
            exc,
            unique_message=DUPLICATE_EMAIL_MESSAGE,
            foreign_key_message=MISSING_FREELANCER_MESSAGE,
        ) from exc
    db.refresh(client)
    logger.info("Created client %s for freelancer %s", client.id, client.freelancer_id)
    return client


@service_boundary("fetching clients")
def get_clients_for_freelancer(db: Session, user: Optional[User], freelancer_id: str) -> List[Client]:
    user = require_user(user)
    require_uuid(freelancer_id, "Invalid freelancer ID format")
    return (
        _scoped(db, user)
        .filter(Client.freelancer_id == freelancer_id)
        .order_by(Client.created_at.desc(), Client.id.desc())
        .all()
    )


@service_boundary("fetching clients with freelancer information")
def get_clients_with_freelancer(db: Session, user: Optional[User], freelancer_id: str) -> List[Client]:
    user = require_user(user)
    require_uuid(freelancer_id, "Invalid freelancer ID format")
    return (
        _scoped(db, user)
        .options(joinedload(Client.freelancer))
        .filter(Client.freelancer_id == freelancer_id)
        .order_by(Client.created_at.desc(), Client.id.desc())
        .all()
    )


@service_boundary("fetching the client")
def get_client_by_id(db: Session, user: Optional[User], client_id: str) -> Client:
    user = require_user(user)
    require_uuid(client_id)
    return _get_owned_client(db, user, client_id)


@service_boundary("updating the client")
def update_client(db: Session, user: Optional[User], client_id: str, updates: ClientUpdate) -> Client:
    user = require_user(user)
    require_uuid(client_id)
    fields = updates.model_dump(exclude_unset=True)

    if "email" in fields:
        email = (fields["email"] or "").strip()
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        fields["email"] = normalize_email(email)
    if "company_name" in fields:
        company_name = (fields["company_name"] or "").strip()
        if not company_name:
            raise ValidationError("Company name is required")
        fields["company_name"] = company_name
    for name in ("contact_name", "address", "phone"):
        if name in fields:
            fields[name] = clean_optional(fields[name])

    client = _get_owned_client(db, user, client_id)
    for field, value in fields.items():
        setattr(client, field, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Error updating client %s: %s", client_id, exc.orig)
        raise translate_integrity_error(exc, unique_message=DUPLICATE_EMAIL_MESSAGE) from exc
    db.refresh(client)
    return client


@service_boundary("deleting the client")
def delete_client(db: Session, user: Optional[User], client_id: str) -> bool:
    user = require_user(user)
    require_uuid(client_id)
    client = _get_owned_client(db, user, client_id)
    db.delete(client)
    db.commit()
    logger.info("Deleted client %s", client_id)
    return True
