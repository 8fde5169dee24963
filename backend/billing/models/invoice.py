from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from billing.database import Base
from billing.models.enums import InvoiceStatus


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    invoice_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False, index=True)
    subtotal = Column(Numeric(16, 4), nullable=False)  # Unrounded sum of item totals
    tax_rate = Column(Numeric(5, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    discount_rate = Column(Numeric(5, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String, nullable=False)  # Bank Transfer, Cash, Credit Card, Check, Other
    status = Column(String, nullable=False, default=InvoiceStatus.UNPAID.value, index=True)  # Unpaid, Partial, Paid, Overdue
    notes = Column(Text, nullable=True)
    seller_name = Column(String, nullable=False)
    seller_email = Column(String, nullable=True)
    seller_phone = Column(String, nullable=True)
    seller_address = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InvoiceItem.id",
    )
    payments = relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Payment.id",
    )
