# scripts/test/run_sweep.py
"""Trigger the alert sweep: through the running API, or in-process against the DB."""

import argparse
import asyncio
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import requests

BACKEND_URL = "http://127.0.0.1:8080/api/v1/alerts/generate"


def sweep_via_api(url, window_days, api_key):
    headers = {"X-API-Key": api_key} if api_key else {}
    body = {"window_days": window_days} if window_days is not None else {}
    resp = requests.post(url, json=body, headers=headers, timeout=60)
    print(f"✅ POST {url} → HTTP {resp.status_code}: {resp.json()}")


def sweep_in_process(window_days):
    from app.database import SessionLocal
    from app.services.alert_sweep import run_alert_sweep

    db = SessionLocal()
    try:
        report = asyncio.run(run_alert_sweep(db, window_days))
    finally:
        db.close()
    print(f"✅ Sweep finished (in-process): {report.as_dict()}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the daily alert sweep on demand")
    parser.add_argument("--url", default=BACKEND_URL)
    parser.add_argument("--window", type=int, default=None, help="Look-ahead window in days")
    parser.add_argument("--api-key", default=os.getenv("API_KEY", ""))
    parser.add_argument("--local", action="store_true", help="Skip HTTP and run against DATABASE_URL")
    args = parser.parse_args()

    if args.local:
        sweep_in_process(args.window)
    else:
        sweep_via_api(args.url, args.window, args.api_key)
