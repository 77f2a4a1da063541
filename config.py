import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Data file
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "database.txt")

    # Application
    app_name: str = os.getenv("APP_NAME", "Library CLI")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "False")
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG" if _env_flag("DEBUG", "False") else "WARNING").upper()

    # Input limits checked before the catalog is touched
    max_field_length: int = int(os.getenv("MAX_FIELD_LENGTH", "50"))
    min_current_year: int = int(os.getenv("MIN_CURRENT_YEAR", "1970"))
    max_current_year: int = int(os.getenv("MAX_CURRENT_YEAR", "9999"))

    # Output mode: plain | json | rich
    output_mode: str = os.getenv("LIB_CLI_OUTPUT", "plain").lower()


settings = Settings()
