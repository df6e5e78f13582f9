# tests/test_maintenance_costs.py
"""Tests for maintenance cost bookkeeping (total = labor + parts)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from decimal import Decimal
from app.services.maintenance_costs import (
    recompute_maintenance_costs, remove_part_line, set_labor_cost, upsert_part_line,
)
from factories import make_bus, make_maintenance, make_part


class TestMaintenanceCosts:
    def test_part_lines_roll_up_into_total(self, db):
        mant = make_maintenance(db, make_bus(db), labor_cost="100.00")
        pad = make_part(db, "Brake pad", "12.50")
        oil = make_part(db, "Oil filter", "8.00")

        upsert_part_line(db, mant.id, pad.id, 4)
        result = upsert_part_line(db, mant.id, oil.id, 1)

        assert result.parts_cost == Decimal("58.00")
        assert result.total_cost == Decimal("158.00")

    def test_replacing_quantity(self, db):
        mant = make_maintenance(db, make_bus(db))
        pad = make_part(db, "Brake pad", "10.00")

        upsert_part_line(db, mant.id, pad.id, 2)
        result = upsert_part_line(db, mant.id, pad.id, 5)

        assert result.parts_cost == Decimal("50.00")
        assert len(result.part_lines) == 1

    def test_removing_line_recomputes(self, db):
        mant = make_maintenance(db, make_bus(db), labor_cost="30.00")
        pad = make_part(db, "Brake pad", "12.50")
        oil = make_part(db, "Oil filter", "8.00")
        upsert_part_line(db, mant.id, pad.id, 2)
        upsert_part_line(db, mant.id, oil.id, 1)

        result = remove_part_line(db, mant.id, pad.id)

        assert result.parts_cost == Decimal("8.00")
        assert result.total_cost == result.labor_cost + result.parts_cost == Decimal("38.00")
        assert [line.part_id for line in result.part_lines] == [oil.id]

    def test_removing_unknown_line(self, db):
        mant = make_maintenance(db, make_bus(db))
        assert remove_part_line(db, mant.id, 404) is None

    def test_labor_change_keeps_invariant(self, db):
        mant = make_maintenance(db, make_bus(db), labor_cost="20.00")
        upsert_part_line(db, mant.id, make_part(db).id, 3)

        set_labor_cost(mant, Decimal("70.00"))
        db.commit()
        db.refresh(mant)

        assert mant.total_cost == mant.labor_cost + mant.parts_cost == Decimal("100.00")

    def test_negative_labor_rejected(self, db):
        mant = make_maintenance(db, make_bus(db))
        with pytest.raises(ValueError):
            set_labor_cost(mant, -1)

    def test_zero_quantity_rejected(self, db):
        mant = make_maintenance(db, make_bus(db))
        with pytest.raises(ValueError):
            upsert_part_line(db, mant.id, make_part(db).id, 0)

    def test_recompute_unknown_job(self, db):
        assert recompute_maintenance_costs(db, 404) is None
