"""Client routes for the signed-in freelancer."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.api.results import unwrap
from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.dependencies.freelancer import get_current_freelancer
from backend.app.models.freelancer import Freelancer
from backend.app.models.user import User
from backend.app.schemas.client import ClientCreate, ClientRead, ClientUpdate, ClientWithFreelancerRead
from backend.app.services import clients as client_service

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("/", response_model=List[ClientRead])
async def list_clients(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    freelancer: Freelancer = Depends(get_current_freelancer),
):
    return unwrap(client_service.get_clients_for_freelancer(db, current_user, freelancer.id))


@router.get("/with-freelancer", response_model=List[ClientWithFreelancerRead])
async def list_clients_with_freelancer(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    freelancer: Freelancer = Depends(get_current_freelancer),
):
    return unwrap(client_service.get_clients_with_freelancer(db, current_user, freelancer.id))


@router.post("/", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    freelancer: Freelancer = Depends(get_current_freelancer),
):
    if payload.freelancer_id is None:
        payload = payload.model_copy(update={"freelancer_id": freelancer.id})
    return unwrap(client_service.create_client(db, current_user, payload))


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(client_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return unwrap(client_service.get_client_by_id(db, current_user, client_id))


@router.patch("/{client_id}", response_model=ClientRead)
async def update_client(
    client_id: str,
    payload: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(client_service.update_client(db, current_user, client_id, payload))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    unwrap(client_service.delete_client(db, current_user, client_id))
