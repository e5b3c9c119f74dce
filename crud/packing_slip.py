"""
Packing slip fulfillment.

Allocates stock against requested line items, records backorders for the
shortfall, and keeps ``InventoryItem.quantity`` in step with the slips that
reference it. Every public mutation runs in one transaction on the caller's
session: it either commits as a whole or is rolled back as a whole.

Item rows are locked (``SELECT ... FOR UPDATE``) in id order before any
quantity changes, and quantities only move through conditional UPDATEs, so
stock can never be driven below zero by concurrent slips.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from config import settings
from models.inventory import InventoryItem
from models.packing_slip import PackingSlip, PackingSlipItem, SlipSequence
from schemas.packing_slip import PackingSlipCreate, PackingSlipUpdate, LineItemRequest
from crud.errors import (
    FulfillmentError, ItemNotFound, SlipNotFound,
    ValidationError, InsufficientStock, SlipCompleted
)

logger = logging.getLogger(__name__)

SLIP_PREFIX = "PS"
CUSTOMER_FIELDS = (
    'customer_name', 'customer_contact', 'customer_phone',
    'customer_email', 'customer_address', 'customer_company',
)
CENT = Decimal('0.01')


def calculate_allocation(requested: int, available: int) -> Tuple[int, int]:
    """Split a requested quantity into (allocated, backorder) against available stock."""
    backorder = max(0, requested - max(0, available))
    return requested - backorder, backorder


def slip_prefix(now: datetime) -> str:
    return f"{SLIP_PREFIX}{now:%Y%m%d}"


def _last_sequence(db: Session, prefix: str) -> int:
    # longer numbers sort first so a day past 999 keeps counting up
    last_number = db.execute(
        select(PackingSlip.slip_number)
        .where(PackingSlip.slip_number.like(f"{prefix}%"))
        .order_by(func.length(PackingSlip.slip_number).desc(), PackingSlip.slip_number.desc())
        .limit(1)
    ).scalar_one_or_none()

    if last_number is None:
        return 0
    suffix = last_number[len(prefix):]
    return int(suffix) if suffix.isdigit() else 0


def _lock_sequence(db: Session, prefix: str) -> Optional[SlipSequence]:
    return db.execute(
        select(SlipSequence)
        .where(SlipSequence.prefix == prefix)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def generate_slip_number(db: Session, now: Optional[datetime] = None) -> str:
    """
    Allocate the next ``PSYYYYMMDDNNN`` number for the day of ``now``.

    The per-day counter row is incremented in place and stays locked for
    the rest of the caller's transaction, so concurrent creations on the
    same day are serialized. A missing counter is seeded from the last
    existing slip number of the day. Must be called before any other work
    in the transaction: losing the counter-creation race rolls the session
    back.
    """
    prefix = slip_prefix(now or datetime.now())

    if _lock_sequence(db, prefix) is None:
        try:
            db.add(SlipSequence(prefix=prefix, current_value=_last_sequence(db, prefix)))
            db.flush()
        except IntegrityError:
            logger.debug("slip sequence %s created concurrently, retrying", prefix)
            db.rollback()

    db.execute(
        update(SlipSequence)
        .where(SlipSequence.prefix == prefix)
        .values(current_value=SlipSequence.current_value + 1)
        .execution_options(synchronize_session=False)
    )
    value = db.execute(
        select(SlipSequence.current_value).where(SlipSequence.prefix == prefix)
    ).scalar_one()
    return f"{prefix}{value:03d}"


def _validate_slip(slip: PackingSlipCreate) -> None:
    if not slip.customer_name or not slip.customer_name.strip():
        raise ValidationError("Customer name is required")
    if not slip.items:
        raise ValidationError("At least one item is required")
    for line in slip.items:
        if line.item_id is None:
            raise ValidationError("Line item is missing item_id")
        if line.quantity is None or line.quantity <= 0:
            raise ValidationError(f"Quantity for item {line.item_id} must be a positive integer")
        if line.price is None or line.price < 0:
            raise ValidationError(f"Price for item {line.item_id} must not be negative")


def _lock_items(db: Session, item_ids: Iterable[int]) -> Dict[int, InventoryItem]:
    ids = sorted(set(item_ids))
    if not ids:
        return {}
    items = db.execute(
        select(InventoryItem)
        .where(InventoryItem.id.in_(ids))
        .order_by(InventoryItem.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalars().all()
    return {item.id: item for item in items}


def _adjust_quantity(db: Session, item: InventoryItem, delta: int) -> None:
    stmt = update(InventoryItem).where(InventoryItem.id == item.id)
    if delta < 0:
        stmt = stmt.where(InventoryItem.quantity >= -delta)
    result = db.execute(
        stmt.values(quantity=InventoryItem.quantity + delta)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientStock(item.id, -delta)
    db.expire(item, ['quantity'])


def _allocate_lines(db: Session, db_slip: PackingSlip, lines: List[LineItemRequest],
                    items: Dict[int, InventoryItem]) -> None:
    total = Decimal('0')

    for position, line in enumerate(lines):
        item = items.get(line.item_id)
        if item is None:
            raise ItemNotFound(line.item_id)

        allocated, backorder = calculate_allocation(line.quantity, item.quantity)
        if allocated:
            _adjust_quantity(db, item, -allocated)
        if backorder:
            logger.info(
                "slip %s: item %s (%s) backordered %s of %s",
                db_slip.slip_number, item.id, item.name, backorder, line.quantity,
            )

        price = Decimal(line.price)
        db_slip.items.append(PackingSlipItem(
            position=position,
            item_id=item.id,
            name=item.name,
            quantity=allocated,
            price=price,
            backorder_quantity=backorder,
        ))
        total += price * allocated

    db_slip.total_amount = total.quantize(CENT)


def _restore_lines(db: Session, db_slip: PackingSlip, items: Dict[int, InventoryItem]) -> None:
    for line in db_slip.items:
        item = items.get(line.item_id)
        if item is None:
            logger.warning(
                "slip %s: item %s no longer exists, %s units not restored",
                db_slip.slip_number, line.item_id, line.quantity,
            )
            continue
        if line.quantity:
            _adjust_quantity(db, item, line.quantity)


def _lock_slip(db: Session, slip_id: int) -> PackingSlip:
    db_slip = db.execute(
        select(PackingSlip)
        .where(PackingSlip.id == slip_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if db_slip is None:
        raise SlipNotFound(slip_id)
    return db_slip


def get_packing_slip(db: Session, slip_id: int) -> Optional[PackingSlip]:
    return db.query(PackingSlip).filter(PackingSlip.id == slip_id).first()

def get_packing_slip_by_number(db: Session, slip_number: str) -> Optional[PackingSlip]:
    return db.query(PackingSlip).filter(PackingSlip.slip_number == slip_number).first()

def get_packing_slips(db: Session, skip: int = 0, limit: int = 100) -> List[PackingSlip]:
    return db.query(PackingSlip).order_by(
        PackingSlip.date.desc(), PackingSlip.slip_number.desc()
    ).offset(skip).limit(limit).all()


def create_packing_slip(db: Session, slip: PackingSlipCreate, now: Optional[datetime] = None) -> PackingSlip:
    _validate_slip(slip)
    now = now or datetime.now()

    try:
        slip_number = generate_slip_number(db, now)
        db_slip = PackingSlip(
            slip_number=slip_number,
            date=now,
            notes=slip.notes,
            is_completed=False,
            **slip.model_dump(include=set(CUSTOMER_FIELDS)),
        )
        items = _lock_items(db, (line.item_id for line in slip.items))
        _allocate_lines(db, db_slip, slip.items, items)
        db.add(db_slip)
        db.commit()
    except FulfillmentError as e:
        db.rollback()
        logger.error("creating packing slip rolled back: %s", e.message)
        raise
    except Exception:
        db.rollback()
        logger.exception("creating packing slip failed, rolled back")
        raise

    db.refresh(db_slip)
    logger.info("created packing slip %s total %s", db_slip.slip_number, db_slip.total_amount)
    return db_slip


def update_packing_slip(db: Session, slip_id: int, slip_update: PackingSlipUpdate,
                        allow_edit_completed: Optional[bool] = None) -> PackingSlip:
    """
    Replace a slip's line items and customer details.

    Stock allocated under the previous line items is restored first and the
    new list is allocated from scratch. ``is_completed=True`` completes the
    slip; a completed slip is never reopened.
    """
    _validate_slip(slip_update)
    if allow_edit_completed is None:
        allow_edit_completed = settings.ALLOW_EDIT_COMPLETED_SLIPS

    try:
        db_slip = _lock_slip(db, slip_id)
        if db_slip.is_completed and not allow_edit_completed:
            raise SlipCompleted(db_slip.slip_number)

        items = _lock_items(
            db,
            [line.item_id for line in db_slip.items] + [line.item_id for line in slip_update.items],
        )
        _restore_lines(db, db_slip, items)
        db_slip.items.clear()
        db.flush()
        _allocate_lines(db, db_slip, slip_update.items, items)

        for field, value in slip_update.model_dump(include=set(CUSTOMER_FIELDS) | {'notes'}).items():
            setattr(db_slip, field, value)
        if slip_update.is_completed:
            db_slip.is_completed = True
        db.commit()
    except FulfillmentError as e:
        db.rollback()
        logger.error("updating packing slip %s rolled back: %s", slip_id, e.message)
        raise
    except Exception:
        db.rollback()
        logger.exception("updating packing slip %s failed, rolled back", slip_id)
        raise

    db.refresh(db_slip)
    logger.info("updated packing slip %s total %s", db_slip.slip_number, db_slip.total_amount)
    return db_slip


def complete_packing_slip(db: Session, slip_id: int) -> PackingSlip:
    db_slip = get_packing_slip(db, slip_id)
    if db_slip is None:
        raise SlipNotFound(slip_id)

    if not db_slip.is_completed:
        db_slip.is_completed = True
        db.commit()
        db.refresh(db_slip)
        logger.info("completed packing slip %s", db_slip.slip_number)
    return db_slip


def cancel_packing_slip(db: Session, slip_id: int) -> None:
    """Return allocated (never backordered) units to stock and delete the slip."""
    try:
        db_slip = _lock_slip(db, slip_id)
        items = _lock_items(db, (line.item_id for line in db_slip.items))
        _restore_lines(db, db_slip, items)
        slip_number = db_slip.slip_number
        db.delete(db_slip)
        db.commit()
    except FulfillmentError as e:
        db.rollback()
        logger.error("cancelling packing slip %s rolled back: %s", slip_id, e.message)
        raise
    except Exception:
        db.rollback()
        logger.exception("cancelling packing slip %s failed, rolled back", slip_id)
        raise

    logger.info("cancelled packing slip %s", slip_number)


def preview_allocation(db: Session, lines: List[LineItemRequest]) -> dict:
    """What allocating ``lines`` right now would ship and backorder; changes nothing."""
    items: Dict[int, InventoryItem] = {}
    remaining: Dict[int, int] = {}
    preview_lines = []
    total = Decimal('0')

    for line in lines:
        if line.item_id not in items:
            item = db.query(InventoryItem).filter(InventoryItem.id == line.item_id).first()
            if item is None:
                raise ItemNotFound(line.item_id)
            items[line.item_id] = item
            remaining[line.item_id] = item.quantity

        available = remaining[line.item_id]
        allocated, backorder = calculate_allocation(line.quantity, available)
        remaining[line.item_id] = available - allocated
        price = Decimal(line.price)
        total += price * allocated

        preview_lines.append({
            "item_id": line.item_id,
            "name": items[line.item_id].name,
            "requested": line.quantity,
            "available": available,
            "quantity": allocated,
            "backorder_quantity": backorder,
            "price": price,
        })

    return {
        "items": preview_lines,
        "total_amount": total.quantize(CENT),
        "has_backorder": any(p["backorder_quantity"] for p in preview_lines),
    }
