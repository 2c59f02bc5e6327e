"""Invoice routes."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.fleetdesk.core.security import get_current_user
from backend.fleetdesk.core.settings import get_settings
from backend.fleetdesk.db.session import get_db
from backend.fleetdesk.models.contractor import Contractor
from backend.fleetdesk.models.invoice import Invoice
from backend.fleetdesk.models.user import User
from backend.fleetdesk.schemas.invoice import (
    InvoiceAmountsIn,
    InvoiceCalculation,
    InvoiceCreate,
    InvoiceRead,
    InvoiceStatus,
    InvoiceUpdate,
)
from backend.fleetdesk.schemas.pagination import Page, build_page
from backend.fleetdesk.services.audit import log_audit
from backend.fleetdesk.services.invoices import UnknownOrdersError, calculate_invoice, create_invoice, replace_items

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _get_owned_invoice(db: Session, invoice_id: int, tenant_id: int) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.tenant_id == tenant_id).first()
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return invoice


@router.get("/", response_model=Page[InvoiceRead])
async def list_invoices(
    status: InvoiceStatus | None = None,
    contractor_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    settings = get_settings()
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    query = db.query(Invoice).filter(Invoice.tenant_id == current_user.tenant_id)
    if status:
        query = query.filter(Invoice.status == status)
    if contractor_id:
        query = query.filter(Invoice.contractor_id == contractor_id)
    if start_date:
        query = query.filter(Invoice.issue_date >= start_date)
    if end_date:
        query = query.filter(Invoice.issue_date <= end_date)

    total = query.count()
    items = (
        query.order_by(Invoice.issue_date.desc(), Invoice.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return build_page(items, page=page, limit=limit, total=total)


@router.post("/calculate", response_model=InvoiceCalculation)
async def calculate_invoice_totals(payload: InvoiceAmountsIn, current_user: User = Depends(get_current_user)):
    return calculate_invoice(payload)


@router.post("/", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def create_new_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contractor = (
        db.query(Contractor)
        .filter(Contractor.id == payload.contractor_id, Contractor.tenant_id == current_user.tenant_id)
        .first()
    )
    if not contractor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contractor not found")
    try:
        invoice = create_invoice(db, tenant_id=current_user.tenant_id, user_id=current_user.id, payload=payload)
    except UnknownOrdersError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    log_audit(
        db,
        tenant_id=current_user.tenant_id,
        user_id=current_user.id,
        action="CREATE",
        entity_type="Invoice",
        entity_id=invoice.id,
        details={"invoice_number": invoice.invoice_number},
    )
    db.commit()
    db.refresh(invoice)
    return invoice


@router.get("/{invoice_id}", response_model=InvoiceRead)
async def get_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_owned_invoice(db, invoice_id, current_user.tenant_id)


@router.patch("/{invoice_id}", response_model=InvoiceRead)
async def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = _get_owned_invoice(db, invoice_id, current_user.tenant_id)
    if payload.items is not None:
        if invoice.status != "DRAFT":
            raise HTTPException(status_code=400, detail="Line items can only be changed on a draft invoice")
        replace_items(invoice, payload.items)

    update_data = payload.model_dump(exclude_unset=True, exclude={"items"})
    for field, value in update_data.items():
        if value is not None:
            setattr(invoice, field, value)

    log_audit(
        db,
        tenant_id=current_user.tenant_id,
        user_id=current_user.id,
        action="UPDATE",
        entity_type="Invoice",
        entity_id=invoice.id,
        details={"changed_fields": sorted(payload.model_dump(exclude_unset=True))},
    )
    db.commit()
    db.refresh(invoice)
    return invoice


@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice = _get_owned_invoice(db, invoice_id, current_user.tenant_id)
    if invoice.status != "DRAFT":
        raise HTTPException(status_code=400, detail="Only draft invoices can be deleted")
    log_audit(
        db,
        tenant_id=current_user.tenant_id,
        user_id=current_user.id,
        action="DELETE",
        entity_type="Invoice",
        entity_id=invoice.id,
        details={"invoice_number": invoice.invoice_number},
    )
    for order in invoice.orders:
        order.invoice_id = None
    db.delete(invoice)
    db.commit()
    return {"message": "Invoice deleted"}
