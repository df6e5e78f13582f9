# scripts/setup/init_db.py
"""
Initialize database: creates all tables and seeds the status catalogs.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--roles admin,fleet_manager]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables, engine
from app.config import settings
from app.models.user import Role
from app.services.catalog_service import seed_catalogs
from app.services.recipients import UnknownRoleError, validate_alert_roles
from sqlalchemy import inspect, text


def main():
    parser = argparse.ArgumentParser(description="Create tables and seed catalogs")
    parser.add_argument("--roles", default="", help="Comma-separated role names to create")
    args = parser.parse_args()

    print("🗄️  Fleet DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"✅ {len(tables)} tables ready:")
    for t in tables:
        print(f"   ✓ {t}")

    db = SessionLocal()
    try:
        seed_catalogs(db)
        print("✅ Status catalogs seeded")

        for name in [r.strip() for r in args.roles.split(",") if r.strip()]:
            if not db.query(Role).filter(Role.name == name).first():
                db.add(Role(name=name))
                print(f"   + role {name}")
        db.commit()

        try:
            validate_alert_roles(db)
            print("✅ Alert role configuration matches the roles table")
        except UnknownRoleError as e:
            print(f"⚠️  {e}")
            print("   Create the missing roles (--roles) or fix ALERTS_*_ROLES in .env")
    finally:
        db.close()

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn app.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
