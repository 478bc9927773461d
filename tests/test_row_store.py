"""
Tests for the owner-scoped row store (SQLite).
"""
from __future__ import annotations

from datetime import date, timedelta

import logging

import pytest

from daylog.core.errors import MetricAlreadyExistsError, MetricNotFoundError, RowStoreError
from daylog.services import row_store
from daylog.services.row_store import SaveEntry

BASE = date(2091, 1, 1)


def _metric(db, owner_id, metric_id, **fields):
    fields.setdefault("metric_name", metric_id.title())
    fields.setdefault("type", "number")
    return row_store.create_metric(db, owner_id, metric_id, fields)


class TestConfig:
    def test_create_and_get(self, db, owner_id):
        cfg = _metric(db, owner_id, "weight", min_value=30.0)
        assert cfg.id > 0
        assert cfg.active is True
        assert cfg.private is False
        assert row_store.get_config(db, owner_id, "weight").min_value == 30.0

    def test_duplicate_metric_id(self, db, owner_id):
        _metric(db, owner_id, "weight")
        with pytest.raises(MetricAlreadyExistsError):
            _metric(db, owner_id, "weight")

    def test_same_metric_id_for_two_owners(self, db, owner_id):
        _metric(db, owner_id, "weight")
        _metric(db, owner_id + "-other", "weight")

    def test_get_missing(self, db, owner_id):
        with pytest.raises(MetricNotFoundError):
            row_store.get_config(db, owner_id, "nope")

    def test_update_subset(self, db, owner_id):
        _metric(db, owner_id, "weight", max_value=200.0)
        cfg = row_store.update_metric(db, owner_id, "weight", {"required": True, "max_value": None})
        assert cfg.required is True
        assert cfg.max_value is None
        assert cfg.metric_name == "Weight"

    def test_update_ignores_null_for_required_columns(self, db, owner_id):
        _metric(db, owner_id, "weight")
        cfg = row_store.update_metric(db, owner_id, "weight", {"metric_name": None, "active": None})
        assert cfg.metric_name == "Weight"
        assert cfg.active is True

    def test_update_ignores_unknown_fields(self, db, owner_id):
        _metric(db, owner_id, "weight")
        cfg = row_store.update_metric(db, owner_id, "weight", {"metric_id": "renamed", "owner_id": "x"})
        assert cfg.metric_id == "weight"
        assert cfg.owner_id == owner_id

    def test_list_order_and_filters(self, db, owner_id):
        _metric(db, owner_id, "c", group="body", group_order=2, metric_order=1)
        _metric(db, owner_id, "b", group="mind", group_order=1, metric_order=2)
        _metric(db, owner_id, "a", group="mind", group_order=1, metric_order=1, type="checkbox")
        _metric(db, owner_id, "d", active=False)

        assert [c.metric_id for c in row_store.list_configs(db, owner_id)] == ["d", "a", "b", "c"]
        assert [c.metric_id for c in row_store.list_configs(db, owner_id, active=True)] == ["a", "b", "c"]
        assert [c.metric_id for c in row_store.list_configs(db, owner_id, type="checkbox")] == ["a"]


class TestLog:
    def test_save_upserts_and_deletes(self, db, owner_id):
        _metric(db, owner_id, "weight")
        _metric(db, owner_id, "gym", type="checkbox")

        r1 = row_store.save_log(db, owner_id, BASE, [SaveEntry("weight", 80.0), SaveEntry("gym", 1.0)])
        assert (r1.upserted, r1.deleted) == (2, 0)

        r2 = row_store.save_log(db, owner_id, BASE, [SaveEntry("weight", 79.5), SaveEntry("gym", None)])
        assert (r2.upserted, r2.deleted) == (1, 1)

        rows = row_store.list_logs(db, owner_id, on=BASE)
        assert [(r.metric_id, r.value) for r in rows] == [("weight", 79.5)]

    def test_zero_is_a_logged_value(self, db, owner_id):
        _metric(db, owner_id, "gym", type="checkbox")
        row_store.save_log(db, owner_id, BASE, [SaveEntry("gym", 0.0)])
        (row,) = row_store.list_logs(db, owner_id)
        assert row.value == 0.0

    def test_first_save_sets_start_date(self, db, owner_id):
        _metric(db, owner_id, "weight")
        r = row_store.save_log(db, owner_id, BASE + timedelta(days=3), [SaveEntry("weight", 80.0)])
        assert r.start_dates_set == 1
        row_store.save_log(db, owner_id, BASE, [SaveEntry("weight", 81.0)])
        db.expire_all()
        assert row_store.get_config(db, owner_id, "weight").start_date == BASE + timedelta(days=3)

    def test_list_filters_and_order(self, db, owner_id):
        for i in range(4):
            row_store.save_log(db, owner_id, BASE + timedelta(days=i),
                               [SaveEntry("b", float(i)), SaveEntry("a", float(i))])
        rows = row_store.list_logs(
            db, owner_id,
            date_from=BASE + timedelta(days=1),
            date_to=BASE + timedelta(days=2),
        )
        assert [(r.date, r.metric_id) for r in rows] == [
            (BASE + timedelta(days=1), "a"), (BASE + timedelta(days=1), "b"),
            (BASE + timedelta(days=2), "a"), (BASE + timedelta(days=2), "b"),
        ]
        assert {r.metric_id for r in row_store.list_logs(db, owner_id, metric_ids=["b"])} == {"b"}
        assert row_store.list_logs(db, owner_id, metric_ids=[]) == []

    def test_owner_isolation(self, db, owner_id):
        other = owner_id + "-other"
        row_store.save_log(db, owner_id, BASE, [SaveEntry("w", 1.0)])
        row_store.save_log(db, other, BASE + timedelta(days=9), [SaveEntry("w", 2.0)])
        assert [r.value for r in row_store.list_logs(db, owner_id)] == [1.0]
        assert row_store.last_log_date(db, owner_id) == BASE
        assert row_store.last_log_date(db, other) == BASE + timedelta(days=9)

    def test_last_log_date_empty(self, db, owner_id):
        assert row_store.last_log_date(db, owner_id) is None


class TestFailures:
    def test_driver_error_is_logged_with_context(self, owner_id, broken_session, caplog):
        with caplog.at_level(logging.ERROR, logger="daylog.services.row_store"):
            with pytest.raises(RowStoreError) as exc:
                row_store.list_configs(broken_session, owner_id)

        assert exc.value.message == "list_configs failed."
        assert "SELECT" not in str(exc.value.to_dict())
        (record,) = [r for r in caplog.records if r.name == "daylog.services.row_store"]
        assert "disk I/O error" in record.getMessage()
        assert record.extra_fields == {"operation": "list_configs", "owner_id": owner_id}
