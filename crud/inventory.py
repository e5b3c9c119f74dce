import logging
from decimal import Decimal
from sqlalchemy import select, update
from sqlalchemy.orm import Session
from typing import List, Optional
from models.inventory import InventoryItem, PurchaseRecord
from schemas.inventory import InventoryItemCreate, InventoryItemUpdate, StockAddition
from crud.errors import ItemNotFound

logger = logging.getLogger(__name__)

VENDOR_FIELDS = (
    'vendor_name', 'vendor_contact', 'vendor_phone',
    'vendor_email', 'vendor_address', 'vendor_notes',
)

def _lock_item_by_name(db: Session, name: str) -> Optional[InventoryItem]:
    return db.execute(
        select(InventoryItem)
        .where(InventoryItem.name == name)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()

def _increment_quantity(db: Session, item_id: int, quantity: int) -> None:
    # relative to the stored value, never to a copy read earlier
    db.execute(
        update(InventoryItem)
        .where(InventoryItem.id == item_id)
        .values(quantity=InventoryItem.quantity + quantity)
        .execution_options(synchronize_session=False)
    )

def create_inventory_item(db: Session, item: InventoryItemCreate) -> InventoryItem:
    """Create an item, or restock the existing item of the same name."""
    item_data = item.model_dump(exclude={'vendor_id'})
    if item_data['latest_price'] is None:
        item_data['latest_price'] = item_data['price']

    db_item = _lock_item_by_name(db, item.name)
    if db_item:
        logger.info("item %r exists, adding %s units", item.name, item.quantity)
        if item.quantity:
            _increment_quantity(db, db_item.id, item.quantity)
            db.expire(db_item, ['quantity'])
        db_item.price = item_data['price']
        db_item.selling_price = item_data['selling_price']
        db_item.latest_price = item_data['latest_price']
        if item.reorder_level:
            db_item.reorder_level = item.reorder_level
        if item.vendor_name:
            for field in VENDOR_FIELDS:
                setattr(db_item, field, item_data[field])
    else:
        db_item = InventoryItem(**item_data)
        db.add(db_item)

    if item.quantity > 0:
        db_item.purchase_history.append(PurchaseRecord(
            price=item_data['price'],
            quantity=item.quantity,
            vendor_id=item.vendor_id,
            vendor_name=item.vendor_name,
        ))

    db.commit()
    db.refresh(db_item)
    return db_item

def get_inventory_item(db: Session, item_id: int) -> Optional[InventoryItem]:
    return db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

def get_inventory_item_by_name(db: Session, name: str) -> Optional[InventoryItem]:
    return db.query(InventoryItem).filter(InventoryItem.name == name).first()

def get_inventory_items(db: Session, skip: int = 0, limit: int = 100, search: Optional[str]=None) -> List[InventoryItem]:
    query = db.query(InventoryItem)

    if search:
        query = query.filter(InventoryItem.name.ilike(f'%{search}%'))

    return query.order_by(InventoryItem.id).offset(skip).limit(limit).all()

def get_low_stock_items(db: Session) -> List[InventoryItem]:
    return db.query(InventoryItem).filter(
        InventoryItem.quantity <= InventoryItem.reorder_level
    ).order_by(InventoryItem.quantity, InventoryItem.id).all()

def update_inventory_item(db: Session, item_id: int, item_update: InventoryItemUpdate) -> Optional[InventoryItem]:
    db_item = get_inventory_item(db, item_id)

    if db_item:
        update_data = item_update.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_item, key, value)
        db.commit()
        db.refresh(db_item)
    return db_item

def delete_inventory_item(db: Session, item_id: int) -> bool:
    db_item = get_inventory_item(db, item_id)

    if db_item:
        db.delete(db_item)
        db.commit()
        return True
    return False

def add_stock(db: Session, item_id: int, stock: StockAddition) -> InventoryItem:
    db_item = db.execute(
        select(InventoryItem)
        .where(InventoryItem.id == item_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if not db_item:
        raise ItemNotFound(item_id)

    _increment_quantity(db, item_id, stock.quantity)
    db.expire(db_item, ['quantity'])
    db_item.latest_price = Decimal(stock.price)
    db_item.purchase_history.append(PurchaseRecord(
        price=stock.price,
        quantity=stock.quantity,
        vendor_id=stock.vendor_id,
        vendor_name=stock.vendor_name,
    ))
    db.commit()
    db.refresh(db_item)
    logger.info("added %s units to item %s at %s", stock.quantity, item_id, stock.price)
    return db_item
