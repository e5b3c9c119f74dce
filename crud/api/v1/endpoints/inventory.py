from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.inventory import InventoryItem, InventoryItemCreate, InventoryItemUpdate, StockAddition
from crud import inventory
from crud.errors import ItemNotFound

router = APIRouter()

@router.post("/", response_model=InventoryItem)
def create_inventory_item(item: InventoryItemCreate, db: Session = Depends(get_db)):
    return inventory.create_inventory_item(db, item)

@router.get("/", response_model=List[InventoryItem])
def list_inventory_items(skip: int = 0, limit: int = 100, search: Optional[str] = None, db: Session = Depends(get_db)):
    return inventory.get_inventory_items(db, skip, limit, search)

@router.get("/low-stock", response_model=List[InventoryItem])
def list_low_stock_items(db: Session = Depends(get_db)):
    return inventory.get_low_stock_items(db)

@router.get("/{item_id}", response_model=InventoryItem)
def get_inventory_item(item_id: int, db: Session = Depends(get_db)):
    db_item = inventory.get_inventory_item(db, item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item is not found")
    return db_item

@router.put("/{item_id}", response_model=InventoryItem)
def update_inventory_item(item_id: int, item_update: InventoryItemUpdate, db: Session = Depends(get_db)):
    try:
        db_item = inventory.update_inventory_item(db, item_id, item_update)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="An item with this name already exists")
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item is not found")
    return db_item

@router.put("/{item_id}/add-stock", response_model=InventoryItem)
def add_stock(item_id: int, stock: StockAddition, db: Session = Depends(get_db)):
    try:
        return inventory.add_stock(db, item_id, stock)
    except ItemNotFound:
        raise HTTPException(status_code=404, detail="Inventory item is not found")

@router.delete("/{item_id}")
def delete_inventory_item(item_id: int, db: Session = Depends(get_db)):
    success = inventory.delete_inventory_item(db, item_id)
    if not success:
        raise HTTPException(status_code=404, detail="Inventory item is not found")
    return {"status": "success"}
