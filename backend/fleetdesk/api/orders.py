"""Order routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.fleetdesk.core.security import get_current_user
from backend.fleetdesk.core.settings import get_settings
from backend.fleetdesk.db.session import get_db
from backend.fleetdesk.models.order import Order
from backend.fleetdesk.models.user import User
from backend.fleetdesk.schemas.order import OrderRead, OrderStatus
from backend.fleetdesk.schemas.pagination import Page, build_page

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("/", response_model=Page[OrderRead])
async def list_orders(
    status: OrderStatus | None = None,
    contractor_id: int | None = None,
    recurring_order_id: int | None = None,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    settings = get_settings()
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    query = db.query(Order).filter(Order.tenant_id == current_user.tenant_id)
    if status:
        query = query.filter(Order.status == status)
    if contractor_id:
        query = query.filter(Order.contractor_id == contractor_id)
    if recurring_order_id:
        query = query.filter(Order.recurring_order_id == recurring_order_id)

    total = query.count()
    items = (
        query.order_by(Order.loading_date.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return build_page(items, page=page, limit=limit, total=total)


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    order = db.query(Order).filter(Order.id == order_id, Order.tenant_id == current_user.tenant_id).first()
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order
