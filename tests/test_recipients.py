# tests/test_recipients.py
"""Tests for alert recipient resolution and role configuration."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.config import AlertCategory, Settings, parse_role_names
from app.services.recipients import (
    RecipientDirectory, UnknownRoleError, merge_recipients, role_emails, validate_alert_roles,
)
from factories import make_role, make_user


class TestRoleConfiguration:
    def test_parse_role_names(self):
        assert parse_role_names(" admin, ,Fleet_Manager ") == ["admin", "Fleet_Manager"]
        assert parse_role_names(None) == []

    def test_categories_fall_back_to_default(self):
        cfg = Settings(ALERTS_DEFAULT_ROLES="admin", ALERTS_EXTINGUISHER_ROLES="safety")
        roles = cfg.alert_roles()
        assert roles[AlertCategory.DOCUMENTS] == ["admin"]
        assert roles[AlertCategory.EXTINGUISHERS] == ["safety"]
        # inspections inherit the extinguisher roles
        assert roles[AlertCategory.INSPECTIONS] == ["safety"]

    def test_unknown_role_fails_fast(self, db):
        make_role(db, "admin")
        with pytest.raises(UnknownRoleError, match="superviser"):
            validate_alert_roles(db, {AlertCategory.INCIDENTS: ["admin", "superviser"]})

    def test_known_roles_pass_case_insensitively(self, db):
        make_role(db, "Admin")
        roles = {AlertCategory.DOCUMENTS: ["admin"]}
        assert validate_alert_roles(db, roles) == roles


class TestResolution:
    def test_role_emails_deduplicated_in_id_order(self, db):
        admin = make_role(db, "admin")
        ops = make_role(db, "ops")
        make_user(db, name="B", email="b@fleet.test", roles=[admin, ops])
        make_user(db, name="A", email="a@fleet.test", roles=[ops])
        make_user(db, name="No mail", email="  ", roles=[admin])

        assert role_emails(db, ["ADMIN", "ops"]) == ["b@fleet.test", "a@fleet.test"]

    def test_fallback_only_when_empty(self):
        assert merge_recipients([None, ""], [], fallback="root@fleet.test") == ["root@fleet.test"]
        assert merge_recipients(["x@fleet.test"], fallback="root@fleet.test") == ["x@fleet.test"]

    def test_directory_merges_direct_and_role_addresses(self, db):
        manager = make_role(db, "manager")
        make_user(db, name="M", email="m@fleet.test", roles=[manager])
        directory = RecipientDirectory(db, {AlertCategory.DOCUMENTS: ["manager"]})

        assert directory.recipients(AlertCategory.DOCUMENTS, "owner@fleet.test", "m@fleet.test") == [
            "owner@fleet.test", "m@fleet.test",
        ]
        assert directory.recipients(AlertCategory.MAINTENANCE) == []
