import os

from dotenv import load_dotenv

load_dotenv()

# API Configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Persistence
# Single JSON file holding key -> serialized value, like browser local storage
STORAGE_PATH = os.getenv("STATION_STORAGE_PATH", "station_storage.json")
STATIONS_KEY = "stations"
INVENTORY_KEY = "app_inventory"
NOTIFICATIONS_KEY = "app_notifications"

# Inventory / seed data
INITIAL_INVENTORY = int(os.getenv("INITIAL_INVENTORY", "45"))
SEED_DEMO_STATION = os.getenv("SEED_DEMO_STATION", "true").lower() in ("1", "true", "yes")

# Actor recorded in history when no employee is supplied
DEFAULT_EMPLOYEE = os.getenv("DEFAULT_EMPLOYEE", "Система")

# Note generation (Gemini REST API)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
NOTES_TIMEOUT_SEC = float(os.getenv("NOTES_TIMEOUT_SEC", "15"))
