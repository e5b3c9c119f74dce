from pydantic import BaseModel, EmailStr, Field, condecimal, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

class CustomerInfo(BaseModel):
    customer_name: str
    customer_contact: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    customer_address: Optional[str] = None
    customer_company: Optional[str] = None

    @field_validator('customer_name')
    @classmethod
    def validate_customer_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Customer name is required')
        return v.strip()

class LineItemRequest(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)
    price: condecimal(max_digits=15, decimal_places=2, ge=0)

class PackingSlipCreate(CustomerInfo):
    items: List[LineItemRequest]
    notes: Optional[str] = None

    @field_validator('items')
    @classmethod
    def validate_items(cls, v):
        if not v:
            raise ValueError('At least one item is required')
        return v

class PackingSlipUpdate(PackingSlipCreate):
    is_completed: Optional[bool] = None

class AllocationPreviewRequest(BaseModel):
    items: List[LineItemRequest]

class AllocationPreviewLine(BaseModel):
    item_id: int
    name: str
    requested: int
    available: int
    quantity: int
    backorder_quantity: int
    price: Decimal

class AllocationPreview(BaseModel):
    items: List[AllocationPreviewLine]
    total_amount: Decimal
    has_backorder: bool

class PackingSlipItem(BaseModel):
    id: int
    item_id: int
    name: str
    quantity: int
    price: Decimal
    backorder_quantity: int

    class Config:
        from_attributes = True

class PackingSlip(CustomerInfo):
    id: int
    slip_number: str
    date: datetime
    items: List[PackingSlipItem]
    total_amount: Decimal
    notes: Optional[str] = None
    is_completed: bool

    class Config:
        from_attributes = True
