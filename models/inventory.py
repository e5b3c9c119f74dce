from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database import Base

class InventoryItem(Base):
    __tablename__ = 'inventory_items'
    __table_args__ = (
        CheckConstraint('quantity >= 0', name='ck_inventory_items_quantity_non_negative'),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(15, 2), nullable=False)
    selling_price = Column(Numeric(15, 2), nullable=False)
    latest_price = Column(Numeric(15, 2), nullable=False)
    reorder_level = Column(Integer, nullable=False, default=0)

    vendor_name = Column(String, nullable=True)
    vendor_contact = Column(String, nullable=True)
    vendor_phone = Column(String, nullable=True)
    vendor_email = Column(String, nullable=True)
    vendor_address = Column(String, nullable=True)
    vendor_notes = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    purchase_history = relationship(
        "PurchaseRecord",
        back_populates="inventory_item",
        cascade="all, delete-orphan",
        order_by="[PurchaseRecord.date, PurchaseRecord.id]",
    )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= (self.reorder_level or 0)


class PurchaseRecord(Base):
    __tablename__ = 'purchase_records'

    id = Column(Integer, primary_key=True, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    date = Column(DateTime(timezone=True), server_default=func.now())
    vendor_id = Column(String, nullable=True)
    vendor_name = Column(String, nullable=True)

    inventory_item = relationship("InventoryItem", back_populates="purchase_history")
