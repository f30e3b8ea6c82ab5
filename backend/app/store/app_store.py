"""In-process snapshot of the signed-in freelancer's data.

Every operation opens its own database session, calls one service, and on
success patches the snapshot. A failure records the message for that entity
group only and leaves the snapshot as it was.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from sqlalchemy.orm import Session

from backend.app.core.errors import ServiceResult
from backend.app.models.user import User
from backend.app.schemas.client import ClientCreate, ClientRead, ClientUpdate
from backend.app.schemas.freelancer import FreelancerCreate, FreelancerRead, FreelancerUpdate
from backend.app.schemas.invoice import InvoiceCreate, InvoiceUpdate, InvoiceWithItemsRead
from backend.app.schemas.invoice_item import InvoiceItemCreate
from backend.app.services import clients as client_service
from backend.app.services import freelancers as freelancer_service
from backend.app.services import invoices as invoice_service

logger = logging.getLogger(__name__)

GROUPS = ("freelancer", "clients", "invoices")


class AppStore:
    def __init__(self, session_factory: Callable[[], Session], user: Optional[User]):
        self.session_factory = session_factory
        self.user = user
        self.reset()

    def reset(self) -> None:
        """Drop the whole snapshot, e.g. on sign-out."""
        self.freelancer: Optional[FreelancerRead] = None
        self.clients: List[ClientRead] = []
        self.invoices: List[InvoiceWithItemsRead] = []
        self.loading: Dict[str, bool] = {group: False for group in GROUPS}
        self.errors: Dict[str, Optional[str]] = {group: None for group in GROUPS}

    def clear_error(self, group: str) -> None:
        self.errors[group] = None

    @contextmanager
    def _operation(self, group: str) -> Iterator[Session]:
        self.loading[group] = True
        self.errors[group] = None
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()
            self.loading[group] = False

    def _failed(self, group: str, result: ServiceResult) -> bool:
        if result.ok:
            return False
        logger.warning("%s operation failed: %s", group, result.error)
        self.errors[group] = result.error
        return True

    def _require_freelancer(self, group: str) -> Optional[FreelancerRead]:
        if self.freelancer is None:
            self.errors[group] = "Freelancer profile is required"
        return self.freelancer

    # Freelancer

    def load_freelancer(self) -> Optional[FreelancerRead]:
        with self._operation("freelancer") as db:
            result = freelancer_service.get_freelancer_for_user(db, self.user)
            if result.error_type == "not_found":
                self.freelancer = None
                return None
            if self._failed("freelancer", result):
                return None
            self.freelancer = FreelancerRead.model_validate(result.data)
        return self.freelancer

    def save_freelancer(self, profile: FreelancerCreate) -> Optional[FreelancerRead]:
        """Create the profile on first save and update it afterwards."""
        with self._operation("freelancer") as db:
            if self.freelancer is None:
                result = freelancer_service.create_freelancer(db, self.user, profile)
            else:
                result = freelancer_service.update_freelancer(
                    db, self.user, self.freelancer.id, FreelancerUpdate(**profile.model_dump())
                )
            if self._failed("freelancer", result):
                return None
            self.freelancer = FreelancerRead.model_validate(result.data)
        return self.freelancer

    # Clients

    def load_clients(self) -> List[ClientRead]:
        if not self._require_freelancer("clients"):
            return self.clients
        with self._operation("clients") as db:
            result = client_service.get_clients_for_freelancer(db, self.user, self.freelancer.id)
            if not self._failed("clients", result):
                self.clients = [ClientRead.model_validate(client) for client in result.data]
        return self.clients

    def add_client(self, data: ClientCreate) -> Optional[ClientRead]:
        if not self._require_freelancer("clients"):
            return None
        payload = data.model_copy(update={"freelancer_id": self.freelancer.id})
        with self._operation("clients") as db:
            result = client_service.create_client(db, self.user, payload)
            if self._failed("clients", result):
                return None
            client = ClientRead.model_validate(result.data)
        self.clients = [client, *self.clients]
        return client

    def update_client(self, client_id: str, updates: ClientUpdate) -> Optional[ClientRead]:
        with self._operation("clients") as db:
            result = client_service.update_client(db, self.user, client_id, updates)
            if self._failed("clients", result):
                return None
            client = ClientRead.model_validate(result.data)
        self.clients = [client if existing.id == client_id else existing for existing in self.clients]
        return client

    def delete_client(self, client_id: str) -> bool:
        with self._operation("clients") as db:
            result = client_service.delete_client(db, self.user, client_id)
            if self._failed("clients", result):
                return False
        self.clients = [client for client in self.clients if client.id != client_id]
        # The schema cascades client deletes to their invoices.
        self.invoices = [invoice for invoice in self.invoices if invoice.client_id != client_id]
        return True

    def get_client(self, client_id: str) -> Optional[ClientRead]:
        return next((client for client in self.clients if client.id == client_id), None)

    # Invoices

    def load_invoices(self) -> List[InvoiceWithItemsRead]:
        if not self._require_freelancer("invoices"):
            return self.invoices
        with self._operation("invoices") as db:
            result = invoice_service.get_invoices_for_freelancer(
                db, self.user, self.freelancer.id, include_relations=True
            )
            if not self._failed("invoices", result):
                self.invoices = [InvoiceWithItemsRead.model_validate(invoice) for invoice in result.data]
        return self.invoices

    def create_invoice(self, invoice: InvoiceCreate, items: Sequence[InvoiceItemCreate]) -> Optional[InvoiceWithItemsRead]:
        if not self._require_freelancer("invoices"):
            return None
        payload = invoice.model_copy(update={"freelancer_id": self.freelancer.id})
        with self._operation("invoices") as db:
            result = invoice_service.create_invoice(db, self.user, payload, items)
            if self._failed("invoices", result):
                return None
            created = InvoiceWithItemsRead.model_validate(result.data)
        self.invoices = [created, *self.invoices]
        return created

    def update_invoice(self, invoice_id: str, updates: InvoiceUpdate) -> Optional[InvoiceWithItemsRead]:
        with self._operation("invoices") as db:
            result = invoice_service.update_invoice(db, self.user, invoice_id, updates)
            if self._failed("invoices", result):
                return None
            updated = InvoiceWithItemsRead.model_validate(result.data)
        self.invoices = [updated if existing.id == invoice_id else existing for existing in self.invoices]
        return updated

    def update_invoice_status(self, invoice_id: str, status: str) -> Optional[InvoiceWithItemsRead]:
        return self.update_invoice(invoice_id, InvoiceUpdate(status=status))

    def delete_invoice(self, invoice_id: str) -> bool:
        with self._operation("invoices") as db:
            result = invoice_service.delete_invoice(db, self.user, invoice_id)
            if self._failed("invoices", result):
                return False
        self.invoices = [invoice for invoice in self.invoices if invoice.id != invoice_id]
        return True

    def get_invoice(self, invoice_id: str) -> Optional[InvoiceWithItemsRead]:
        return next((invoice for invoice in self.invoices if invoice.id == invoice_id), None)

    def load_all(self) -> None:
        if self.load_freelancer() is None:
            return
        self.load_clients()
        self.load_invoices()
