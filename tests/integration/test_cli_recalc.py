"""Tests for the recalculation CLI."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import select

from settleup.cli.recalc import main
from settleup.models import Expense, Group, Settlement, User
from settleup.services.audit_service import SCOPE_ENTITY, AuditService
from settleup.services.db import create_session_factory


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers.copy()
    level = root.level
    yield
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def database(monkeypatch, tmp_path):
    """File-backed SQLite database with one scenario group, wired through env vars."""
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "cli.log"))
    monkeypatch.setenv("LOCALE", "en_US")

    session_factory = create_session_factory(url, create_tables=True)
    db = session_factory()
    a, b, c = User(name="A"), User(name="B"), User(name="C")
    group = Group(name="Trip")
    db.add_all([a, b, c, group])
    db.flush()
    db.add_all(
        [
            Expense(
                group_id=group.id,
                paid_by_id=a.id,
                amount=Decimal("90"),
                expense_date=datetime(2026, 1, 31, 12, 0),
                participants=[a, b, c],
            ),
            Expense(
                group_id=group.id,
                paid_by_id=b.id,
                amount=Decimal("30"),
                expense_date=datetime(2026, 1, 31, 13, 0),
                participants=[b, c],
            ),
        ]
    )
    db.commit()
    yield session_factory, group.id
    db.close()


def count_settlements(session_factory):
    db = session_factory()
    try:
        return len(db.execute(select(Settlement)).scalars().all())
    finally:
        db.close()


def test_recalc_prints_plan(database, capsys):
    session_factory, group_id = database

    exit_code = main(["--group", str(group_id), "--date", "2026-01-31"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "create  3 -> 1  $45.00" in out
    assert "create  2 -> 1  $15.00" in out
    assert count_settlements(session_factory) == 2


def test_second_run_reports_no_changes(database, capsys):
    _, group_id = database
    main(["--group", str(group_id), "--date", "2026-01-31"])
    capsys.readouterr()

    assert main(["--group", str(group_id), "--date", "2026-01-31"]) == 0
    assert "no changes" in capsys.readouterr().out


def test_dry_run_writes_nothing(database, capsys):
    session_factory, group_id = database

    assert main(["--group", str(group_id), "--date", "2026-01-31", "--dry-run"]) == 0

    assert "$45.00" in capsys.readouterr().out
    assert count_settlements(session_factory) == 0


def test_retry_failed_reruns_stale_scopes(database, capsys):
    session_factory, group_id = database
    db = session_factory()
    AuditService.log(
        db,
        entity_type=SCOPE_ENTITY,
        entity_id=group_id,
        action="recalc_failed",
        changes={"date": "2026-01-31", "error": "OperationalError: locked"},
        scope_date=date(2026, 1, 31),
    )
    db.commit()
    db.close()

    assert main(["--retry-failed"]) == 0

    assert f"group {group_id} 2026-01-31:" in capsys.readouterr().out
    assert count_settlements(session_factory) == 2


def test_missing_scope_arguments_rejected(database):
    with pytest.raises(SystemExit):
        main(["--group", "1"])


def test_invalid_config_exits_with_error(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", "not-a-url")

    assert main(["--group", "1", "--date", "2026-01-31"]) == 1
    assert "Configuration error" in capsys.readouterr().err
