from pathlib import Path
import os
from dotenv import load_dotenv

ENV_PATH = Path(__file__).parent.parent / ".env"

load_dotenv(dotenv_path=ENV_PATH)


def env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").strip().upper()
AUTO_CREATE_TABLES = env_bool("AUTO_CREATE_TABLES", True)
BREADCRUMB_SEPARATOR = os.getenv("BREADCRUMB_SEPARATOR", " > ")
NAME_MAX_LENGTH = 255
