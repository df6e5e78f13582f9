# tests/conftest.py
"""Shared fixtures: an isolated in-memory SQLite database per test."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ALERTS_SCHEDULER_ENABLED"] = "false"
os.environ["MAIL_BACKEND"] = "log"
os.environ["ALERTS_FALLBACK_TO"] = ""
os.environ["API_KEY"] = ""

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import create_tables


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mail():
    """Replaces the outbound e-mail call; inspect .await_count / .call_args."""
    with patch("app.services.alert_service.send_alert_email", new_callable=AsyncMock) as mock_send:
        yield mock_send
