# tests/test_scheduler.py
"""Tests for the scheduled sweep entry point."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from app.services import scheduler
from app.services.alert_sweep import SweepReport


class TestScheduledSweep:
    @pytest.mark.asyncio
    async def test_session_closed_after_run(self):
        db = MagicMock()
        with patch("app.services.scheduler.run_alert_sweep",
                   new_callable=AsyncMock, return_value=SweepReport(extinguishers=2)) as sweep:
            await scheduler.run_scheduled_sweep(lambda: db)
        sweep.assert_awaited_once()
        db.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self):
        db = MagicMock()
        with patch("app.services.scheduler.run_alert_sweep",
                   new_callable=AsyncMock, side_effect=RuntimeError("db gone")):
            await scheduler.run_scheduled_sweep(lambda: db)
        db.rollback.assert_called_once()
        db.close.assert_called_once()

    def test_disabled_scheduler_does_not_start(self):
        assert scheduler.start_scheduler() is None
        assert scheduler.describe_scheduler()["running"] is False
