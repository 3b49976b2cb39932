"""
Settings read from the environment (or a local .env in dev).
In prod the platform injects env vars.
"""

import os

from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "local")

# Required; db.py refuses to start without it
DATABASE_URL = os.getenv("DATABASE_URL")

RANDOM_ORG_URL = os.getenv("RANDOM_ORG_URL", "https://www.random.org/integers/")
RANDOM_TIMEOUT_SECONDS = float(os.getenv("RANDOM_TIMEOUT_SECONDS", "3.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
