"""Application configuration loaded from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings:
    # SQLite DB URL
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'shopledger.db'}"
    )

    # API server
    API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "logs/shopledger.log")

    # CORS
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
        ).split(",")
    ]

    # Seed demo products + walk-in party when the catalog is empty
    SEED_DEFAULTS: bool = os.getenv("SEED_DEFAULTS", "true").lower() == "true"

    # Party id used for invoices saved without a party
    WALK_IN_PARTY_ID: str = os.getenv("WALK_IN_PARTY_ID", "WALK_IN")

    # Low-stock threshold for products that don't set their own
    DEFAULT_REORDER_LEVEL: float = float(os.getenv("DEFAULT_REORDER_LEVEL", "10"))


settings = Settings()
