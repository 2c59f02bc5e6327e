# Fleetdesk backend entrypoint: transport orders, recurring templates and invoicing.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.fleetdesk.api import invoices, nbp, orders, recurring_orders
from backend.fleetdesk.core.logging_config import configure_logging
from backend.fleetdesk.core.settings import get_settings
from backend.fleetdesk.db.base import Base
from backend.fleetdesk.db.session import engine

configure_logging()
settings = get_settings()

Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.app_name, version=settings.api_version)

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recurring_orders.router)
app.include_router(orders.router)
app.include_router(invoices.router)
app.include_router(nbp.router)


@app.get("/")
def read_root():
    return {"app": "Fleetdesk backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}
