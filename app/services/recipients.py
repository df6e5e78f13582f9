# app/services/recipients.py
"""
Alert recipient resolution.
Role names come from settings.alert_roles() (one list per AlertCategory).
They are checked against the roles table at startup so a typo fails fast
instead of silently producing alerts that nobody receives.
"""

from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import settings, AlertCategory
from app.models.user import User, Role
from app.utils.logger import get_logger

logger = get_logger(__name__)


class UnknownRoleError(ValueError):
    """Raised when alert configuration names a role that does not exist."""


def user_email(user: Optional[User]) -> Optional[str]:
    if user is None:
        return None
    email = (user.email or "").strip()
    return email or None


def validate_alert_roles(db: Session, roles_by_category: Optional[dict] = None) -> dict[AlertCategory, list[str]]:
    """Fail fast on role names that are configured but absent from the roles table."""
    roles_by_category = roles_by_category if roles_by_category is not None else settings.alert_roles()
    known = {name.lower() for (name,) in db.query(Role.name).all()}

    unknown = {}
    for category, names in roles_by_category.items():
        missing = [name for name in names if name.lower() not in known]
        if missing:
            unknown[category.value] = missing
    if unknown:
        raise UnknownRoleError(f"Unknown roles in alert configuration: {unknown}")

    summary = {category.value: names for category, names in roles_by_category.items()}
    logger.info(f"Alert roles validated: {summary}")
    return roles_by_category


def role_emails(db: Session, role_names: Iterable[str]) -> list[str]:
    """Emails of every user holding any of the roles, deduplicated, in id order."""
    wanted = [name.lower() for name in role_names]
    if not wanted:
        return []

    role_ids = [rid for (rid,) in db.query(Role.id).filter(func.lower(Role.name).in_(wanted)).all()]
    if not role_ids:
        return []

    users = (
        db.query(User)
        .filter(User.roles.any(Role.id.in_(role_ids)))
        .order_by(User.id)
        .all()
    )
    emails = []
    for user in users:
        email = user_email(user)
        if email and email not in emails:
            emails.append(email)
    return emails


def merge_recipients(*groups: Iterable[Optional[str]], fallback: Optional[str] = None) -> list[str]:
    """
    Union of the groups in order, without blanks or duplicates.
    The fallback address is used only when nothing else resolved.
    """
    merged = []
    for group in groups:
        for email in group:
            if email and email not in merged:
                merged.append(email)
    fallback = (fallback if fallback is not None else settings.ALERTS_FALLBACK_TO).strip()
    if not merged and fallback:
        merged.append(fallback)
    return merged


class RecipientDirectory:
    """
    Role-email lookups memoised for one sweep or trigger invocation.
    Create a new instance per run; it must not outlive the session it wraps.
    """

    def __init__(self, db: Session, roles_by_category: Optional[dict] = None):
        self.db = db
        self.roles_by_category = roles_by_category if roles_by_category is not None else settings.alert_roles()
        self._cache: dict[AlertCategory, list[str]] = {}

    def for_category(self, category: AlertCategory) -> list[str]:
        if category not in self._cache:
            self._cache[category] = role_emails(self.db, self.roles_by_category.get(category, []))
        return self._cache[category]

    def recipients(self, category: Optional[AlertCategory] = None, *direct: Optional[str]) -> list[str]:
        roles = self.for_category(category) if category else []
        return merge_recipients(direct, roles)
