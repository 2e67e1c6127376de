from pathlib import Path
import os
from dotenv import load_dotenv
load_dotenv()

BASE = Path(__file__).resolve().parents[1]
DB_PATH = os.getenv("DB_PATH", str(BASE / "data/app.db"))
SHIPPING_FEE = int(os.getenv("SHIPPING_FEE", "500"))
PAGE_LIMIT = int(os.getenv("PAGE_LIMIT", "10"))
DEFAULT_IMAGE_URL = os.getenv("DEFAULT_IMAGE_URL", "/images/default.jpg")
SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "1").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
