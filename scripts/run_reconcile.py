"""Trigger one reconciliation pass on a deployed instance.

    RECONCILE_URL=https://host/reconcile CRON_SECRET=... python scripts/run_reconcile.py
"""
import os
import sys

import requests
from dotenv import load_dotenv


def trigger(url: str, secret: str, timeout: float = 30):
    response = requests.get(url, params={"secret": secret}, timeout=timeout)
    return response.status_code, response.json()


def main():
    load_dotenv()
    url = os.getenv("RECONCILE_URL", "http://localhost:8000/reconcile")
    secret = os.getenv("CRON_SECRET")
    if not secret:
        print("CRON_SECRET is not set")
        return 1
    status, data = trigger(url, secret)
    print("Response:", status, data)
    return 0 if status == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
