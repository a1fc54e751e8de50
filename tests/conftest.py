"""
Test configuration: repo root on sys.path and a throwaway environment.

Environment variables are set at load time because helpers.tortoise_config
reads DATABASE_URI on import.
"""

import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

os.environ["DATABASE_URI"] = "sqlite://:memory:"
os.environ["LEDGER_DATABASE_URI"] = "sqlite://:memory:"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["DISPLAY_TIMEZONE"] = "Asia/Kolkata"
for key in ("REMINDER_BUFFER_MINUTES", "REMINDER_HORIZON_MINUTES", "DB_GENERATE_SCHEMAS"):
    os.environ.pop(key, None)
