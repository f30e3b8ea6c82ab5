# InvoicePro backend entrypoint: FastAPI app for freelancer invoicing.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api import auth
from backend.app.api import clients
from backend.app.api import freelancer
from backend.app.api import invoices
from backend.app.core.logging import configure_logging
from backend.app.core.settings import get_settings
from backend.app.db.base import Base
from backend.app.db.session import engine

settings = get_settings()
configure_logging(settings.log_level)

Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(freelancer.router)
app.include_router(clients.router)
app.include_router(invoices.router)


@app.get("/")
def read_root():
    return {"app": "InvoicePro backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}
