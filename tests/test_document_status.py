# tests/test_document_status.py
"""Unit tests for the document status policy."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date, datetime, timedelta
from app.models.catalogs import DocumentStatusName
from app.services.document_status import classify_document, EXPIRING_SOON_DAYS

TODAY = date(2026, 3, 10)


class TestClassifyDocument:
    @pytest.mark.parametrize("offset, expected", [
        (-1, DocumentStatusName.EXPIRED),
        (-400, DocumentStatusName.EXPIRED),
        (0, DocumentStatusName.EXPIRING_SOON),
        (1, DocumentStatusName.EXPIRING_SOON),
        (EXPIRING_SOON_DAYS, DocumentStatusName.EXPIRING_SOON),
        (EXPIRING_SOON_DAYS + 1, DocumentStatusName.VIGENT),
        (365, DocumentStatusName.VIGENT),
    ])
    def test_offsets(self, offset, expected):
        assert classify_document(TODAY + timedelta(days=offset), TODAY) == expected

    def test_missing_expiry_is_vigent(self):
        assert classify_document(None, TODAY) == DocumentStatusName.VIGENT

    def test_datetime_is_truncated_to_date(self):
        late_today = datetime(2026, 3, 10, 23, 59)
        assert classify_document(late_today, TODAY) == DocumentStatusName.EXPIRING_SOON

    def test_value_is_catalog_name(self):
        assert classify_document(TODAY - timedelta(days=3), TODAY).value == "EXPIRED"
