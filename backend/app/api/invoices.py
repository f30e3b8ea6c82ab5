"""Invoice routes for the signed-in freelancer."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from backend.app.api.results import unwrap
from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.dependencies.freelancer import get_current_freelancer
from backend.app.models.freelancer import Freelancer
from backend.app.models.user import User
from backend.app.schemas.invoice import (
    InvoiceCreate,
    InvoiceCreateRequest,
    InvoiceNumberRead,
    InvoiceStats,
    InvoiceStatusUpdate,
    InvoiceUpdate,
    InvoiceWithItemsRead,
    InvoiceWithRelationsRead,
)
from backend.app.services import invoices as invoice_service
from backend.app.services.pdf import render_invoice_pdf

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("/next-number", response_model=InvoiceNumberRead)
async def next_invoice_number(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    freelancer: Freelancer = Depends(get_current_freelancer),
):
    number = unwrap(invoice_service.get_next_invoice_number(db, current_user, freelancer.id))
    return {"invoice_number": number}


@router.get("/stats", response_model=InvoiceStats)
async def invoice_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    freelancer: Freelancer = Depends(get_current_freelancer),
):
    return unwrap(invoice_service.get_invoice_stats(db, current_user, freelancer.id))


@router.get("/", response_model=List[InvoiceWithItemsRead])
async def list_invoices(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    freelancer: Freelancer = Depends(get_current_freelancer),
):
    return unwrap(invoice_service.get_invoices_for_freelancer(db, current_user, freelancer.id, include_relations=True))


@router.post("/", response_model=InvoiceWithRelationsRead, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    payload: InvoiceCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    freelancer: Freelancer = Depends(get_current_freelancer),
):
    invoice = payload.model_dump(exclude={"items"})
    if invoice["freelancer_id"] is None:
        invoice["freelancer_id"] = freelancer.id
    return unwrap(
        invoice_service.create_invoice(
            db,
            current_user,
            InvoiceCreate(**invoice),
            payload.items,
        )
    )


@router.get("/{invoice_id}", response_model=InvoiceWithRelationsRead)
async def get_invoice(invoice_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return unwrap(invoice_service.get_invoice_with_items(db, current_user, invoice_id))


@router.patch("/{invoice_id}", response_model=InvoiceWithRelationsRead)
async def update_invoice(
    invoice_id: str,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(invoice_service.update_invoice(db, current_user, invoice_id, payload))


@router.patch("/{invoice_id}/status", response_model=InvoiceWithRelationsRead)
async def update_invoice_status(
    invoice_id: str,
    payload: InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(invoice_service.update_invoice_status(db, current_user, invoice_id, payload.status))


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    unwrap(invoice_service.delete_invoice(db, current_user, invoice_id))


@router.get("/{invoice_id}/pdf")
async def download_invoice_pdf(
    invoice_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = unwrap(invoice_service.get_invoice_with_items(db, current_user, invoice_id))
    return Response(
        content=render_invoice_pdf(invoice),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="Invoice-{invoice.invoice_number}.pdf"'},
    )
