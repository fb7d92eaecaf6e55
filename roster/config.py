import os

from dotenv import load_dotenv

load_dotenv()

# App
TITLE: str = os.getenv("ROSTER_APP_TITLE", "Roster Status Service")
API_PREFIX: str = os.getenv("ROSTER_API_PREFIX", "/api")
APP_HOST: str = os.getenv("ROSTER_APP_HOST", "0.0.0.0")
APP_PORT: int = int(os.getenv("ROSTER_APP_PORT", 8000))

# Team / secrets
TEAM_ID: str = os.getenv("TEAM_ID", "default")
PIN_SALT: str = os.getenv("PIN_SALT", "")
ADMIN_PIN: str = os.getenv("ADMIN_PIN", "")

# Redis
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
