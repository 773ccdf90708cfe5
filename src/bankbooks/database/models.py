"""SQLAlchemy models for bankbooks database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Company(Base):
    """Company model."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    fiscal_periods = relationship("FiscalPeriod", back_populates="company", cascade="all, delete-orphan")
    accounts = relationship("Account", back_populates="company", cascade="all, delete-orphan")


class FiscalPeriod(Base):
    """Fiscal period model. Start and end dates are inclusive."""

    __tablename__ = "fiscal_periods"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    company = relationship("Company", back_populates="fiscal_periods")


class Account(Base):
    """Chart-of-accounts model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    category = Column(String, nullable=False, default="Other")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "code", name="uq_company_account_code"),)

    company = relationship("Company", back_populates="accounts")


class BankTransaction(Base):
    """Bank statement transaction model."""

    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    fiscal_period_id = Column(Integer, ForeignKey("fiscal_periods.id"), nullable=True)
    transaction_date = Column(Date, nullable=False)
    details = Column(String, nullable=False)
    debit_amount = Column(Numeric(14, 2), nullable=False, default=0)
    credit_amount = Column(Numeric(14, 2), nullable=False, default=0)
    balance = Column(Numeric(14, 2), nullable=True)
    account_code = Column(String, nullable=True)
    account_name = Column(String, nullable=True)
    reference = Column(String, nullable=True)
    source_file = Column(String, nullable=True)
    account_number = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("ix_bank_transactions_company_date", "company_id", "transaction_date"),)


class ClassificationRule(Base):
    """Transaction classification rule model."""

    __tablename__ = "classification_rules"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    rule_name = Column(String, nullable=True)
    pattern = Column(String, nullable=False)
    match_type = Column(String, nullable=False, default="CONTAINS")
    account_code = Column(String, nullable=False)
    account_name = Column(String, nullable=False)
    priority = Column(Integer, nullable=False, default=0)
    usage_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_learned = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class JournalEntry(Base):
    """Journal entry header model."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    fiscal_period_id = Column(Integer, ForeignKey("fiscal_periods.id"), nullable=True)
    reference = Column(String, nullable=False)
    entry_date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "reference", name="uq_company_entry_reference"),)

    lines = relationship(
        "JournalEntryLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryLine.line_number",
    )


class JournalEntryLine(Base):
    """Journal entry line model."""

    __tablename__ = "journal_entry_lines"

    id = Column(Integer, primary_key=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    line_number = Column(Integer, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    debit_amount = Column(Numeric(14, 2), nullable=True)
    credit_amount = Column(Numeric(14, 2), nullable=True)
    description = Column(String, nullable=False)
    source_transaction_id = Column(Integer, ForeignKey("bank_transactions.id"), nullable=True, index=True)

    entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("Account")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
