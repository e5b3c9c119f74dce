from pydantic import BaseModel, Field, condecimal
from typing import List, Optional
from datetime import datetime

Money = condecimal(max_digits=15, decimal_places=2, ge=0)

class VendorSnapshot(BaseModel):
    vendor_name: Optional[str] = None
    vendor_contact: Optional[str] = None
    vendor_phone: Optional[str] = None
    vendor_email: Optional[str] = None
    vendor_address: Optional[str] = None
    vendor_notes: Optional[str] = None

class PurchaseRecord(BaseModel):
    id: int
    price: Money
    quantity: int
    date: Optional[datetime] = None
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None

    class Config:
        from_attributes = True

class InventoryItemBase(VendorSnapshot):
    name: str = Field(min_length=1)
    price: Money
    selling_price: Money
    latest_price: Optional[Money] = None
    reorder_level: int = Field(0, ge=0)

class InventoryItemCreate(InventoryItemBase):
    quantity: int = Field(0, ge=0)
    vendor_id: Optional[str] = None

class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[Money] = None
    selling_price: Optional[Money] = None
    latest_price: Optional[Money] = None
    reorder_level: Optional[int] = Field(None, ge=0)
    vendor_name: Optional[str] = None
    vendor_contact: Optional[str] = None
    vendor_phone: Optional[str] = None
    vendor_email: Optional[str] = None
    vendor_address: Optional[str] = None
    vendor_notes: Optional[str] = None

class StockAddition(BaseModel):
    quantity: int = Field(gt=0)
    price: Money
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None

class InventoryItem(InventoryItemBase):
    id: int
    quantity: int
    latest_price: Money
    is_low_stock: bool
    purchase_history: List[PurchaseRecord] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
