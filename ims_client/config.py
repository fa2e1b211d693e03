import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Settings:
    api_url: str = os.getenv("IMS_API_URL", "http://localhost:8000")
    request_timeout: float = float(os.getenv("IMS_REQUEST_TIMEOUT", "30"))
    session_file: Path = Path(os.getenv("IMS_SESSION_FILE", "~/.ims/session.json")).expanduser()
    atomic_sales: bool = os.getenv("IMS_ATOMIC_SALES", "False").lower() == "true"
    log_level: str = os.getenv("IMS_LOG_LEVEL", "WARNING").upper()


settings = Settings()
