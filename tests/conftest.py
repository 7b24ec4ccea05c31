"""Pytest configuration: in-memory database and common fixtures."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from settleup.models import Base, Expense, Group, Settlement, SettlementStatus, User

SCOPE_DAY = date(2026, 1, 31)


@pytest.fixture
def engine():
    """Fresh in-memory SQLite engine with all tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create test database session."""
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def group(db_session):
    group = Group(name="Trip")
    db_session.add(group)
    db_session.commit()
    return group


@pytest.fixture
def users(db_session):
    """Create test users A, B, C and D."""
    users = {name: User(name=name) for name in ("A", "B", "C", "D")}
    db_session.add_all(users.values())
    db_session.commit()
    return users


@pytest.fixture
def add_expense(db_session, group):
    """Factory: persist an expense in the test group."""

    def _add(payer, amount, participants, when=None, is_active=True):
        expense = Expense(
            group_id=group.id,
            paid_by_id=payer.id,
            amount=Decimal(amount),
            description="test",
            expense_date=when or datetime.combine(SCOPE_DAY, datetime.min.time()).replace(hour=12),
            participants=list(participants),
            is_active=is_active,
        )
        db_session.add(expense)
        db_session.commit()
        return expense

    return _add


@pytest.fixture
def add_settlement(db_session, group):
    """Factory: persist a settlement in the test group."""

    def _add(from_user, to_user, amount, status=SettlementStatus.PENDING, day=SCOPE_DAY):
        settlement = Settlement(
            group_id=group.id,
            from_user_id=from_user.id,
            to_user_id=to_user.id,
            amount=Decimal(amount),
            status=status,
            settlement_date=day,
        )
        db_session.add(settlement)
        db_session.commit()
        return settlement

    return _add
