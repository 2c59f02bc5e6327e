"""Materialize transport orders from recurring order templates."""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from backend.fleetdesk.models.order import Order
from backend.fleetdesk.models.order_payload import copy_order_payload
from backend.fleetdesk.models.recurring_order import RecurringOrder
from backend.fleetdesk.services.audit import log_audit
from backend.fleetdesk.services.schedule import mark_generated, should_generate_now

logger = logging.getLogger(__name__)


class TemplateInactiveError(Exception):
    pass


class ScheduleExhaustedError(Exception):
    pass


def build_order_number(template_id: int, sequence: int) -> str:
    return f"REC-{template_id:06d}-{sequence:04d}"


def _internal_notes(template: RecurringOrder) -> str:
    header = f"Generated from template: {template.name}"
    if template.internal_notes:
        return f"{header}\n\n{template.internal_notes}"
    return header


def generate_order(
    db: Session,
    template: RecurringOrder,
    *,
    user_id: Optional[int],
    now: datetime,
    loading_date: Optional[date] = None,
    unloading_date: Optional[date] = None,
) -> Order:
    """Create one PLANNED order from ``template`` and advance the template's schedule.

    The order and the template update are committed together.
    """
    if not template.is_active:
        raise TemplateInactiveError("Recurring order template is inactive")
    if template.next_generation_date is None:
        raise ScheduleExhaustedError("Recurring order template has no further occurrences")

    occurrence = loading_date or template.next_generation_date
    sequence = (template.generated_count or 0) + 1

    payload = copy_order_payload(template)
    payload["internal_notes"] = _internal_notes(template)
    order = Order(
        tenant_id=template.tenant_id,
        order_number=build_order_number(template.id, sequence),
        status="PLANNED",
        loading_date=occurrence,
        unloading_date=unloading_date or occurrence,
        recurring_order_id=template.id,
        created_by_id=user_id,
        **payload,
    )
    db.add(order)
    mark_generated(template, now, occurrence_date=occurrence)
    db.flush()

    log_audit(
        db,
        tenant_id=template.tenant_id,
        user_id=user_id,
        action="CREATE",
        entity_type="Order",
        entity_id=order.id,
        details={"order_number": order.order_number, "generated_from_template": template.id},
    )
    log_audit(
        db,
        tenant_id=template.tenant_id,
        user_id=user_id,
        action="UPDATE",
        entity_type="RecurringOrder",
        entity_id=template.id,
        details={
            "action": "GENERATE_ORDER",
            "generated_order_id": order.id,
            "generated_count": template.generated_count,
        },
    )
    db.commit()
    db.refresh(order)
    db.refresh(template)

    logger.info(
        "Generated order %s from recurring template %s; next occurrence %s",
        order.order_number,
        template.id,
        template.next_generation_date,
    )
    return order


def get_due_templates(db: Session, reference_date: date, tenant_id: Optional[int] = None) -> List[RecurringOrder]:
    query = db.query(RecurringOrder).filter(
        RecurringOrder.is_active.is_(True),
        RecurringOrder.next_generation_date.isnot(None),
        RecurringOrder.next_generation_date <= reference_date,
    )
    if tenant_id is not None:
        query = query.filter(RecurringOrder.tenant_id == tenant_id)
    return query.order_by(RecurringOrder.next_generation_date.asc(), RecurringOrder.id.asc()).all()


def generate_due_orders(
    db: Session,
    reference_date: date,
    now: datetime,
    *,
    tenant_id: Optional[int] = None,
    user_id: Optional[int] = None,
) -> List[Order]:
    """Run one generation for every template due on ``reference_date``.

    Safe to repeat: templates generated for the day have already moved their
    next occurrence past ``reference_date``.
    """
    generated_at = datetime.combine(reference_date, now.timetz())
    orders = []
    for template in get_due_templates(db, reference_date, tenant_id=tenant_id):
        if not should_generate_now(template, reference_date):
            continue
        orders.append(generate_order(db, template, user_id=user_id, now=generated_at))
    logger.info("Generated %d recurring orders for %s", len(orders), reference_date)
    return orders
