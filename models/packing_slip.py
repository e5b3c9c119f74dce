from sqlalchemy import Column, Integer, String, Numeric, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database import Base

class PackingSlip(Base):
    __tablename__ = "packing_slips"

    id = Column(Integer, primary_key=True, index=True)
    slip_number = Column(String, unique=True, nullable=False, index=True)
    date = Column(DateTime(timezone=True), server_default=func.now())
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    customer_name = Column(String, nullable=False)
    customer_contact = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)
    customer_email = Column(String, nullable=True)
    customer_address = Column(String, nullable=True)
    customer_company = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)

    items = relationship(
        "PackingSlipItem",
        back_populates="packing_slip",
        cascade="all, delete-orphan",
        order_by="PackingSlipItem.position",
    )

class PackingSlipItem(Base):
    __tablename__ = "packing_slip_items"

    id = Column(Integer, primary_key=True, index=True)
    packing_slip_id = Column(Integer, ForeignKey("packing_slips.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    # plain reference: the item may be deleted while the slip lives on
    item_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    backorder_quantity = Column(Integer, nullable=False, default=0)

    packing_slip = relationship("PackingSlip", back_populates="items")


class SlipSequence(Base):
    """Per-day slip counter, keyed by the ``PSYYYYMMDD`` prefix."""

    __tablename__ = "slip_sequences"

    prefix = Column(String(10), primary_key=True)
    current_value = Column(Integer, nullable=False, default=0)
