from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from crud import accessory as crud_accessory
from crud import stock_audit as crud_stock_audit
from crud.accessory import derive_accessory_status
from crud.accessory_category import ensure_preset_categories, get_categories
from crud.usage_ledger import STOCK_EXCEEDED, count_policy
from database import Base
from exceptions import Conflict, NotFound, ValidationFailed
from models.accessory import Accessory, AccessoryStatus, AccessoryUsageType
from schemas.accessory import AccessoryCreate, AccessoryUpdate, AccessoryUsageCreate
from utils.time_utils import utcnow

from conftest import OTHER_OWNER, OWNER


def _accessory(db, category, **fields):
    data = {"category_id": category.id, "name": "0.4mm Hardened Nozzle", **fields}
    return crud_accessory.create_accessory(db, AccessoryCreate(**data), OWNER)


def _use(db, accessory_id, quantity, purpose=None):
    return crud_accessory.record_usage(
        db, accessory_id, AccessoryUsageCreate(usage_date=date(2026, 3, 1), quantity=quantity, purpose=purpose), OWNER
    )


def test_create_defaults(db, nozzle_category):
    accessory = _accessory(db, nozzle_category)

    assert accessory.quantity == 1
    assert accessory.remaining_qty == 1
    assert accessory.usage_type is AccessoryUsageType.CONSUMABLE
    assert accessory.status is AccessoryStatus.AVAILABLE
    assert accessory.category.name == "Nozzles"


@pytest.mark.parametrize("fields, message", [
    ({"name": " "}, "Name is required"),
    ({"quantity": 0}, "Quantity must be at least 1"),
    ({"price": -5}, "Price cannot be negative"),
])
def test_create_validation(db, nozzle_category, fields, message):
    with pytest.raises(ValidationFailed, match=message):
        _accessory(db, nozzle_category, **fields)


def test_create_with_unknown_category_is_not_found(db):
    with pytest.raises(NotFound, match="Category not found"):
        crud_accessory.create_accessory(db, AccessoryCreate(category_id="missing", name="Grease"), OWNER)


def test_stock_runs_down_through_low_stock_to_depleted(db, nozzle_category):
    accessory = _accessory(db, nozzle_category, quantity=10, low_stock_threshold=3)

    accessory = _use(db, accessory.id, 7)
    assert accessory.remaining_qty == 3
    assert accessory.status is AccessoryStatus.LOW_STOCK

    accessory = _use(db, accessory.id, 3, purpose="Swapped on X1C")
    assert accessory.remaining_qty == 0
    assert accessory.status is AccessoryStatus.DEPLETED
    assert sorted(u.quantity for u in accessory.usage_records) == [3, 7]


def test_usage_beyond_stock_is_rejected_and_changes_nothing(db, nozzle_category):
    accessory = _accessory(db, nozzle_category, quantity=5)
    _use(db, accessory.id, 2)

    with pytest.raises(Conflict, match="Usage quantity exceeds remaining stock"):
        _use(db, accessory.id, 4)

    accessory = crud_accessory.get_accessory(db, accessory.id, OWNER, with_usage=True)
    assert accessory.remaining_qty == 3
    assert len(accessory.usage_records) == 1


def test_usage_quantity_must_be_positive(db, nozzle_category):
    accessory = _accessory(db, nozzle_category, quantity=5)
    with pytest.raises(ValidationFailed, match="Usage quantity must be positive"):
        _use(db, accessory.id, 0)


def test_each_successful_usage_decrements_exactly(db, nozzle_category):
    accessory = _accessory(db, nozzle_category, quantity=6)
    remaining = accessory.remaining_qty
    for quantity in (1, 2, 3):
        accessory = _use(db, accessory.id, quantity)
        assert accessory.remaining_qty == remaining - quantity
        remaining = accessory.remaining_qty
    assert remaining == 0
    with pytest.raises(Conflict):
        _use(db, accessory.id, 1)


def test_durable_accessories_are_not_counted_down(db, nozzle_category):
    tool = _accessory(db, nozzle_category, name="Nozzle wrench", usage_type="durable", quantity=2, low_stock_threshold=5)
    assert tool.status is AccessoryStatus.AVAILABLE

    with pytest.raises(Conflict, match="start/stop"):
        _use(db, tool.id, 1)


@pytest.mark.parametrize("remaining, threshold, usage_type, started, expected", [
    (10, 3, AccessoryUsageType.CONSUMABLE, None, AccessoryStatus.AVAILABLE),
    (3, 3, AccessoryUsageType.CONSUMABLE, None, AccessoryStatus.LOW_STOCK),
    (1, None, AccessoryUsageType.CONSUMABLE, None, AccessoryStatus.AVAILABLE),
    (0, 3, AccessoryUsageType.CONSUMABLE, None, AccessoryStatus.DEPLETED),
    (0, None, AccessoryUsageType.DURABLE, None, AccessoryStatus.AVAILABLE),
    (1, 5, AccessoryUsageType.DURABLE, None, AccessoryStatus.AVAILABLE),
    (1, 5, AccessoryUsageType.DURABLE, "now", AccessoryStatus.IN_USE),
])
def test_status_is_a_function_of_its_inputs(remaining, threshold, usage_type, started, expected):
    started_at = utcnow() if started else None
    assert derive_accessory_status(remaining, threshold, usage_type, started_at) is expected
    assert derive_accessory_status(remaining, threshold, usage_type, started_at) is expected


def test_start_using_requires_a_durable_accessory(db, nozzle_category):
    accessory = _accessory(db, nozzle_category)
    with pytest.raises(Conflict, match="Only durable accessories can be marked as in use"):
        crud_accessory.start_using(db, accessory.id, OWNER)


def test_sessions_are_exclusive(db, nozzle_category):
    tool = _accessory(db, nozzle_category, name="Hex key set", usage_type="durable")

    with pytest.raises(Conflict, match="Accessory is not in use"):
        crud_accessory.stop_using(db, tool.id, OWNER)

    tool = crud_accessory.start_using(db, tool.id, OWNER)
    assert tool.status is AccessoryStatus.IN_USE
    assert tool.in_use_started_at is not None

    with pytest.raises(Conflict, match="Accessory is already in use"):
        crud_accessory.start_using(db, tool.id, OWNER)


def test_stop_using_logs_one_session_with_its_duration(db, nozzle_category):
    tool = _accessory(db, nozzle_category, name="Hex key set", usage_type="durable")
    crud_accessory.start_using(db, tool.id, OWNER)

    row = crud_accessory.require_accessory(db, tool.id, OWNER)
    row.in_use_started_at = utcnow() - timedelta(minutes=45)
    db.commit()

    tool = crud_accessory.stop_using(db, tool.id, OWNER, notes="Re-tensioned belts")

    assert tool.status is AccessoryStatus.AVAILABLE
    assert tool.in_use_started_at is None
    assert tool.remaining_qty == tool.quantity
    assert len(tool.usage_records) == 1
    session = tool.usage_records[0]
    assert session.quantity == 0
    assert 45 <= session.duration <= 46
    assert session.purpose == "Re-tensioned belts"


def test_in_use_accessory_cannot_be_deleted(db, nozzle_category):
    tool = _accessory(db, nozzle_category, name="Feeler gauge", usage_type="durable")
    crud_accessory.start_using(db, tool.id, OWNER)

    with pytest.raises(Conflict, match="Cannot delete accessory that is in use"):
        crud_accessory.delete_accessory(db, tool.id, OWNER)

    tool = crud_accessory.get_accessory(db, tool.id, OWNER)
    assert tool is not None
    assert tool.status is AccessoryStatus.IN_USE


def test_delete_removes_history_and_audit(db, nozzle_category):
    accessory_id = _accessory(db, nozzle_category, quantity=4).id
    _use(db, accessory_id, 1)

    crud_accessory.delete_accessory(db, accessory_id, OWNER)

    assert crud_accessory.get_accessory(db, accessory_id, OWNER) is None
    assert crud_stock_audit.get_stock_audits(db, "accessory", accessory_id, OWNER) == []


def test_restock_replays_usage_history(db, nozzle_category):
    accessory = _accessory(db, nozzle_category, quantity=10, low_stock_threshold=3)
    _use(db, accessory.id, 8)

    accessory = crud_accessory.update_accessory(db, accessory.id, AccessoryUpdate(quantity=20), OWNER)
    assert accessory.remaining_qty == 12
    assert accessory.status is AccessoryStatus.AVAILABLE

    accessory = crud_accessory.update_accessory(db, accessory.id, AccessoryUpdate(quantity=5), OWNER)
    assert accessory.remaining_qty == 0
    assert accessory.status is AccessoryStatus.DEPLETED

    audits = crud_stock_audit.get_stock_audits(db, "accessory", accessory.id, OWNER)
    assert [a.change_type for a in audits] == ["usage", "restock", "restock"]


def test_threshold_change_rederives_status(db, nozzle_category):
    accessory = _accessory(db, nozzle_category, quantity=10)
    _use(db, accessory.id, 6)

    accessory = crud_accessory.update_accessory(db, accessory.id, AccessoryUpdate(low_stock_threshold=4), OWNER)
    assert accessory.status is AccessoryStatus.LOW_STOCK


def test_list_filters_and_owner_scope(db, nozzle_category):
    _accessory(db, nozzle_category, quantity=1)
    low = _accessory(db, nozzle_category, name="PTFE tube", quantity=3, low_stock_threshold=2)
    _use(db, low.id, 1)

    assert len(crud_accessory.get_accessories(db, OWNER)) == 2
    assert [a.id for a in crud_accessory.get_accessories(db, OWNER, status=AccessoryStatus.LOW_STOCK)] == [low.id]
    assert len(crud_accessory.get_accessories(db, OWNER, category_id=nozzle_category.id)) == 2
    assert crud_accessory.get_accessories(db, OTHER_OWNER) == []
    with pytest.raises(NotFound):
        crud_accessory.start_using(db, low.id, OTHER_OWNER)


def test_replacement_alert_counts_from_creation_then_from_replacement(db, nozzle_category):
    accessory = _accessory(db, nozzle_category, quantity=2, replacement_cycle=30)
    soon = utcnow() + timedelta(days=29)
    later = utcnow() + timedelta(days=31)

    assert crud_accessory.get_alerts(db, OWNER, now=soon) == []

    alerts = crud_accessory.get_alerts(db, OWNER, now=later)
    assert [(a["alert_type"], a["accessory_id"]) for a in alerts] == [("replacement_due", accessory.id)]
    assert alerts[0]["category_name"] == "Nozzles"
    assert alerts[0]["id"] == f"replacement-{accessory.id}"

    crud_accessory.mark_replaced(db, accessory.id, OWNER, replaced_at=later)
    assert crud_accessory.get_alerts(db, OWNER, now=later) == []


def test_stock_alerts_for_low_and_depleted(db, nozzle_category):
    low = _accessory(db, nozzle_category, name="PTFE tube", quantity=5, low_stock_threshold=2)
    gone = _accessory(db, nozzle_category, name="Brass nozzle", quantity=1)
    _use(db, low.id, 3)
    _use(db, gone.id, 1)

    alerts = {a["accessory_id"]: a for a in crud_accessory.get_alerts(db, OWNER)}
    assert set(alerts) == {low.id, gone.id}
    assert all(a["alert_type"] == "low_stock" for a in alerts.values())
    assert "2 left" in alerts[low.id]["message"]
    assert "used up" in alerts[gone.id]["message"]


def test_alerts_do_not_change_state(db, nozzle_category):
    accessory = _accessory(db, nozzle_category, quantity=1, replacement_cycle=1)
    _use(db, accessory.id, 1)
    before = crud_accessory.get_accessory(db, accessory.id, OWNER)
    snapshot = (before.status, before.remaining_qty, before.last_replaced_at)

    crud_accessory.get_alerts(db, OWNER, now=utcnow() + timedelta(days=5))

    after = crud_accessory.get_accessory(db, accessory.id, OWNER)
    assert (after.status, after.remaining_qty, after.last_replaced_at) == snapshot


def test_racing_usages_cannot_both_take_the_last_units(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    first, second = Session(), Session()
    try:
        ensure_preset_categories(first)
        category = next(c for c in get_categories(first, OWNER) if c.name == "Nozzles")
        accessory_id = crud_accessory.create_accessory(
            first, AccessoryCreate(category_id=category.id, name="Brass nozzle", quantity=5), OWNER
        ).id

        # Both sessions have seen 5 left before either one writes
        stale = crud_accessory.require_accessory(second, accessory_id, OWNER)
        assert stale.remaining_qty == 5

        crud_accessory.record_usage(first, accessory_id, AccessoryUsageCreate(usage_date=date(2026, 3, 1), quantity=3), OWNER)
        assert stale.remaining_qty == 5

        with pytest.raises(Conflict, match=STOCK_EXCEEDED):
            crud_accessory.record_usage(second, accessory_id, AccessoryUsageCreate(usage_date=date(2026, 3, 1), quantity=3), OWNER)
        with pytest.raises(Conflict, match=STOCK_EXCEEDED):
            count_policy.reserve(second, Accessory, accessory_id, OWNER, 3)
        second.rollback()

        remaining = second.query(Accessory.remaining_qty).filter(Accessory.id == accessory_id).scalar()
        assert remaining == 2
        assert len(crud_accessory.get_accessory(second, accessory_id, OWNER, with_usage=True).usage_records) == 1
    finally:
        first.close()
        second.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
