import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./ledger.db")

SECRET_KEY = os.getenv("LEDGER_SECRET_KEY", "ledger-dev-secret")
ALGORITHM = "HS256"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("LEDGER_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LEDGER_LOG_LEVEL", "INFO").upper()

ENTRY_NUMBER_PREFIX = os.getenv("LEDGER_ENTRY_NUMBER_PREFIX", "JE-")
ENTRY_NUMBER_START = int(os.getenv("LEDGER_ENTRY_NUMBER_START", "10001"))
