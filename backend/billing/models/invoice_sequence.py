from sqlalchemy import Column, Integer, String
from billing.database import Base


class InvoiceSequence(Base):
    """Counter row backing invoice number allocation"""
    __tablename__ = "invoice_sequences"

    name = Column(String, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
