from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings

from jobsweep.core.models import ProxyCredential

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    class Config:
        env_file = BASE_DIR / ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    """
    Configuration settings for the scraper.
    Every field can be overridden from the environment or the .env file.
    """

    # Browser settings
    HEADLESS: bool = True
    # None uses the bundled Chromium; "chrome" uses the system Chrome build
    BROWSER_CHANNEL: Optional[str] = None
    # Residential proxies terminate TLS with their own CA
    IGNORE_HTTPS_ERRORS: bool = True
    LOCALE: str = "en-CA"
    TIMEZONE_ID: Optional[str] = "America/Toronto"
    VIEWPORT_WIDTH: int = 1290
    VIEWPORT_HEIGHT: int = 900

    # Attempts & budgets
    MAX_ATTEMPTS: int = 3
    MAX_PAGES: int = 3
    SCROLL_ROUNDS: int = 24
    GATE_ROUNDS: int = 5
    EVASION_ROUNDS: int = 1

    # Retries
    NAVIGATION_RETRIES: int = 3
    RETRY_BASE_DELAY: float = 2.0  # seconds
    RETRY_MAX_DELAY: float = 10.0  # seconds

    # Timeouts
    NAVIGATION_TIMEOUT: int = 60000  # ms
    SELECTOR_TIMEOUT: int = 8000  # ms
    RESULTS_TIMEOUT: int = 20000  # ms
    ATTEMPT_TIMEOUT: float = 240.0  # seconds

    # Proxies
    PROXY_PROVIDER: str = "none"  # none, generic, pool
    PROXY_SERVER: Optional[str] = None
    PROXY_USERNAME: Optional[str] = None
    PROXY_PASSWORD: Optional[str] = None
    # JSON list, e.g. [{"server": "http://host:port", "username": "u", "password": "p"}]
    PROXY_POOL: List[ProxyCredential] = []
    PROXY_COUNTRY: Optional[str] = "ca"

    # Output & diagnostics
    OUTPUT_DIR: Path = BASE_DIR / "data"
    ARTIFACTS_DIR: Path = BASE_DIR / "screens"
    CAPTURE_DIAGNOSTICS: str = "failures"  # off, failures, full


settings = Settings()
