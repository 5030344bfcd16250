"""SQLAlchemy models for splitledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from splitledger.domain.entities import (
    TransactionSource,
    TransactionSubtype,
    TransactionType,
)

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """Transaction owner model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    transactions = relationship("Transaction", back_populates="owner")


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    subcategories = relationship("Subcategory", back_populates="category")


class Subcategory(Base):
    """Subcategory model."""

    __tablename__ = "subcategories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    category = relationship("Category", back_populates="subcategories")


class SourceEntity(Base):
    """Bank, card or wallet model."""

    __tablename__ = "source_entities"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class Responsible(Base):
    """Responsible party model."""

    __tablename__ = "responsibles"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(TransactionType), nullable=False)
    subtype = Column(Enum(TransactionSubtype), nullable=False)
    source = Column(Enum(TransactionSource), nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(19, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    subcategory_id = Column(Integer, ForeignKey("subcategories.id"), nullable=True)
    source_entity_id = Column(Integer, ForeignKey("source_entities.id"), nullable=True)

    # Reconciliation fields
    reconciled_amount = Column(Numeric(19, 2), nullable=True)
    reconciliation_date = Column(DateTime, nullable=True)  # naive UTC
    reconciled = Column(Boolean, nullable=True, default=False)
    reconciliation_notes = Column(String(1000), nullable=True)
    bank_reference = Column(String(100), nullable=True)
    external_reference = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="transactions")
    responsibilities = relationship(
        "TransactionResponsibility",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionResponsibility.position",
    )


class TransactionResponsibility(Base):
    """Share of a transaction attributed to one responsible."""

    __tablename__ = "transaction_responsibilities"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    responsible_id = Column(Integer, ForeignKey("responsibles.id"), nullable=False)
    percentage = Column(Numeric(5, 2), nullable=False)
    notes = Column(String, nullable=True)
    position = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("transaction_id", "responsible_id", name="uq_transaction_responsible"),
    )

    transaction = relationship("Transaction", back_populates="responsibilities")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
