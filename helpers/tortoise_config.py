from dotenv import load_dotenv
load_dotenv()
from tortoise import Tortoise
from contextlib import asynccontextmanager
import logging
import os
from typing import Optional


logger = logging.getLogger(__name__)

db_url = os.getenv("DATABASE_URI")
if not db_url:
    raise ValueError("DATABASE_URI environment variable is not set.")

ledger_db_url = os.getenv("LEDGER_DATABASE_URI")


def build_tortoise_config(database_uri: str, ledger_uri: Optional[str] = None) -> dict:
    config = {
        'connections': {
            'default': database_uri
        },
        "apps": {
            "models": {
                "models": [
                    "models.user",
                    "models.quiet_hour",
                    "aerich.models"
                ],
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }
    if ledger_uri:
        config["connections"]["ledger"] = ledger_uri
        config["apps"]["ledger"] = {
            "models": ["models.notification"],
            "default_connection": "ledger",
        }
    return config


TORTOISE_CONFIG = build_tortoise_config(db_url, ledger_db_url)


def ledger_enabled() -> bool:
    return "ledger" in TORTOISE_CONFIG["apps"]


async def init_db(generate_schemas: Optional[bool] = None):
    if generate_schemas is None:
        generate_schemas = os.getenv("DB_GENERATE_SCHEMAS", "").lower() in ("1", "true", "yes")
    await Tortoise.init(config=TORTOISE_CONFIG)
    if not ledger_enabled():
        logger.warning("LEDGER_DATABASE_URI is not set; notification ledger is disabled")
    if generate_schemas:
        await Tortoise.generate_schemas()


async def close_db():
    await Tortoise.close_connections()


@asynccontextmanager
async def lifespan(_):
    await init_db()
    try:
        yield
    finally:
        await close_db()
