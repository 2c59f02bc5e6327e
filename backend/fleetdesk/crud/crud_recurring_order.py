"""CRUD operations for recurring order templates."""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.fleetdesk.models.recurring_order import RecurringOrder
from backend.fleetdesk.schemas.recurring_order import (
    RecurringOrderCreate,
    RecurringOrderUpdate,
    schedule_configuration_error,
)
from backend.fleetdesk.services.audit import log_audit
from backend.fleetdesk.services.schedule import compute_next_occurrence, resume_reference_date

SCHEDULE_FIELDS = {"frequency", "day_of_week", "day_of_month", "start_date", "end_date"}

SORT_FIELDS = {
    "next_generation_date": RecurringOrder.next_generation_date,
    "name": RecurringOrder.name,
    "created_at": RecurringOrder.created_at,
    "start_date": RecurringOrder.start_date,
    "generated_count": RecurringOrder.generated_count,
}

SEARCH_FIELDS = (
    RecurringOrder.name,
    RecurringOrder.origin,
    RecurringOrder.destination,
    RecurringOrder.origin_city,
    RecurringOrder.destination_city,
    RecurringOrder.cargo_description,
)


class CRUDRecurringOrder:
    def create(
        self, db: Session, *, obj_in: RecurringOrderCreate, tenant_id: int, user_id: int, today: date
    ) -> RecurringOrder:
        obj = RecurringOrder(tenant_id=tenant_id, created_by_id=user_id, generated_count=0, **obj_in.model_dump())
        obj.next_generation_date = compute_next_occurrence(obj, today)
        db.add(obj)
        db.flush()
        log_audit(
            db,
            tenant_id=tenant_id,
            user_id=user_id,
            action="CREATE",
            entity_type="RecurringOrder",
            entity_id=obj.id,
            details={"name": obj.name, "frequency": obj.frequency},
        )
        db.commit()
        db.refresh(obj)
        return obj

    def get(self, db: Session, *, recurring_order_id: int, tenant_id: int) -> Optional[RecurringOrder]:
        return (
            db.query(RecurringOrder)
            .filter(RecurringOrder.id == recurring_order_id, RecurringOrder.tenant_id == tenant_id)
            .first()
        )

    def get_multi(
        self,
        db: Session,
        *,
        tenant_id: int,
        is_active: Optional[bool] = None,
        frequency: Optional[str] = None,
        contractor_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "next_generation_date",
        sort_order: str = "asc",
    ) -> Tuple[List[RecurringOrder], int]:
        query = db.query(RecurringOrder).filter(RecurringOrder.tenant_id == tenant_id)
        if is_active is not None:
            query = query.filter(RecurringOrder.is_active.is_(is_active))
        if frequency:
            query = query.filter(RecurringOrder.frequency == frequency)
        if contractor_id:
            query = query.filter(RecurringOrder.contractor_id == contractor_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(*(column.ilike(pattern) for column in SEARCH_FIELDS)))

        total = query.count()
        sort_column = SORT_FIELDS[sort_by]
        if sort_order == "asc":
            order_by_clause = [sort_column.asc(), RecurringOrder.id.asc()]
        else:
            order_by_clause = [sort_column.desc(), RecurringOrder.id.desc()]
        items = query.order_by(*order_by_clause).offset((page - 1) * limit).limit(limit).all()
        return items, total

    def update(
        self, db: Session, *, db_obj: RecurringOrder, obj_in: RecurringOrderUpdate, user_id: int, today: date
    ) -> RecurringOrder:
        """Apply a partial update, recomputing the next occurrence when the schedule changed.

        Raises ValueError when the merged schedule is not a valid combination.
        """
        update_data = obj_in.model_dump(exclude_unset=True)
        for field in ("name", "origin", "destination", "frequency", "start_date", "type", "currency", "requires_adr", "is_active"):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        merged = {field: update_data.get(field, getattr(db_obj, field)) for field in SCHEDULE_FIELDS}
        error = schedule_configuration_error(
            merged["frequency"], merged["day_of_week"], merged["day_of_month"], merged["start_date"], merged["end_date"]
        )
        if error:
            raise ValueError(error)

        was_active = db_obj.is_active
        changed = sorted(field for field, value in update_data.items() if getattr(db_obj, field) != value)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        if SCHEDULE_FIELDS.intersection(changed) or (db_obj.is_active and not was_active):
            db_obj.next_generation_date = compute_next_occurrence(db_obj, resume_reference_date(db_obj, today))

        log_audit(
            db,
            tenant_id=db_obj.tenant_id,
            user_id=user_id,
            action="UPDATE",
            entity_type="RecurringOrder",
            entity_id=db_obj.id,
            details={"name": db_obj.name, "changed_fields": changed},
        )
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: RecurringOrder, user_id: int) -> None:
        log_audit(
            db,
            tenant_id=db_obj.tenant_id,
            user_id=user_id,
            action="DELETE",
            entity_type="RecurringOrder",
            entity_id=db_obj.id,
            details={"name": db_obj.name},
        )
        db.delete(db_obj)
        db.commit()


recurring_order_crud = CRUDRecurringOrder()
