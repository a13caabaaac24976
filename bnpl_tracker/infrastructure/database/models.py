"""SQLAlchemy ORM models for the tracker's local database"""

from sqlalchemy import Column, Date, DateTime, Float, Integer, JSON, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TransactionRecord(Base):
    """Purchase recorded under a payment plan"""

    __tablename__ = "bnpl_transaction"

    # Insertion order of the collection
    position = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Text, nullable=False, unique=True, index=True)
    product_name = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    amount = Column(Float, nullable=False)
    order_date = Column(Date, nullable=False)
    payment_plan = Column(Text, nullable=False)
    monthly_payment = Column(Float, nullable=True)
    mode = Column(Text, nullable=False, default="single")
    borrower = Column(Text, nullable=False)
    shares = Column(JSON, nullable=False, default=list)  # [{"borrower", "amount_per_cycle"}]
    total_months = Column(Integer, nullable=False)
    start_cycle_index = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())


class PaymentRecord(Base):
    """Borrower payment counted against one billing cycle"""

    __tablename__ = "bnpl_payment"

    position = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Text, nullable=False, unique=True, index=True)
    borrower = Column(Text, nullable=False, index=True)
    cycle_index = Column(Integer, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    method = Column(Text, nullable=False, default="cash")
    method_note = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())


class BorrowerRecord(Base):
    """Known borrower name"""

    __tablename__ = "bnpl_borrower"

    position = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)


class SettingRecord(Base):
    """Scalar setting stored as a JSON value (credit limit, paid cycles)"""

    __tablename__ = "bnpl_setting"

    key = Column(Text, primary_key=True)
    value = Column(JSON, nullable=True)
