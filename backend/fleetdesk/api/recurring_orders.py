"""Recurring order template endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.fleetdesk.core.security import get_current_user
from backend.fleetdesk.core.settings import get_settings
from backend.fleetdesk.core.time import utc_now
from backend.fleetdesk.crud.crud_recurring_order import SORT_FIELDS, recurring_order_crud
from backend.fleetdesk.db.session import get_db
from backend.fleetdesk.models.user import User
from backend.fleetdesk.schemas.pagination import Page, build_page
from backend.fleetdesk.schemas.recurring_order import (
    Frequency,
    GenerateDueResponse,
    GenerateOrderRequest,
    GenerateOrderResponse,
    RecurringOrderCreate,
    RecurringOrderRead,
    RecurringOrderUpdate,
)
from backend.fleetdesk.services.recurring_orders import (
    ScheduleExhaustedError,
    TemplateInactiveError,
    generate_due_orders,
    generate_order,
)

router = APIRouter(prefix="/api/recurring-orders", tags=["recurring_orders"])


def _get_owned_template(db: Session, recurring_order_id: int, tenant_id: int):
    template = recurring_order_crud.get(db, recurring_order_id=recurring_order_id, tenant_id=tenant_id)
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recurring order not found")
    return template


@router.get("/", response_model=Page[RecurringOrderRead])
async def list_recurring_orders(
    is_active: bool | None = None,
    frequency: Frequency | None = None,
    contractor_id: int | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    sort_by: str = "next_generation_date",
    sort_order: str = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    settings = get_settings()
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    if sort_by not in SORT_FIELDS:
        raise HTTPException(status_code=400, detail="Invalid sort_by value")
    sort_order_normalized = (sort_order or "asc").lower()
    if sort_order_normalized not in {"asc", "desc"}:
        raise HTTPException(status_code=400, detail="Invalid sort_order value")

    items, total = recurring_order_crud.get_multi(
        db,
        tenant_id=current_user.tenant_id,
        is_active=is_active,
        frequency=frequency,
        contractor_id=contractor_id,
        search=search,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order_normalized,
    )
    return build_page(items, page=page, limit=limit, total=total)


@router.post("/", response_model=RecurringOrderRead, status_code=status.HTTP_201_CREATED)
async def create_recurring_order(
    template_in: RecurringOrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return recurring_order_crud.create(
        db,
        obj_in=template_in,
        tenant_id=current_user.tenant_id,
        user_id=current_user.id,
        today=utc_now().date(),
    )


@router.post("/generate-due", response_model=GenerateDueResponse)
async def generate_due_recurring_orders(
    reference_date: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    now = utc_now()
    day = reference_date or now.date()
    orders = generate_due_orders(db, day, now, tenant_id=current_user.tenant_id, user_id=current_user.id)
    return {"reference_date": day, "generated": orders}


@router.get("/{recurring_order_id}", response_model=RecurringOrderRead)
async def get_recurring_order(
    recurring_order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return _get_owned_template(db, recurring_order_id, current_user.tenant_id)


@router.put("/{recurring_order_id}", response_model=RecurringOrderRead)
async def update_recurring_order(
    recurring_order_id: int,
    template_in: RecurringOrderUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    template = _get_owned_template(db, recurring_order_id, current_user.tenant_id)
    try:
        return recurring_order_crud.update(
            db, db_obj=template, obj_in=template_in, user_id=current_user.id, today=utc_now().date()
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/{recurring_order_id}")
async def delete_recurring_order(
    recurring_order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    template = _get_owned_template(db, recurring_order_id, current_user.tenant_id)
    recurring_order_crud.delete(db, db_obj=template, user_id=current_user.id)
    return {"message": "Recurring order deleted"}


@router.post(
    "/{recurring_order_id}/generate",
    response_model=GenerateOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_recurring_order(
    recurring_order_id: int,
    payload: GenerateOrderRequest | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    payload = payload or GenerateOrderRequest()
    template = _get_owned_template(db, recurring_order_id, current_user.tenant_id)
    try:
        order = generate_order(
            db,
            template,
            user_id=current_user.id,
            now=utc_now(),
            loading_date=payload.loading_date,
            unloading_date=payload.unloading_date,
        )
    except (TemplateInactiveError, ScheduleExhaustedError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {
        "order": order,
        "template": template,
        "message": f"Order {order.order_number} generated successfully",
    }
