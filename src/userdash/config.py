"""Runtime configuration for userdash.

Values come from environment variables with local-development defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_API_DOMAIN = "http://localhost:8000"
DEFAULT_DB_PATH = Path("data/userdash.db")
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class Settings:
    """Settings shared by the API service and the admin page.

    Attributes:
        api_domain: Base URL of the users service (no trailing slash).
        api_token: Bearer token attached to every request, if any.
        db_path: SQLite database file for the users service.
        request_timeout: Per-request timeout in seconds.
        page_size: Default number of rows per table page.
    """

    api_domain: str = DEFAULT_API_DOMAIN
    api_token: str | None = None
    db_path: Path = DEFAULT_DB_PATH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from USERDASH_* environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed or is not positive.
        """
        timeout = float(os.environ.get("USERDASH_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT))
        page_size = int(os.environ.get("USERDASH_PAGE_SIZE", DEFAULT_PAGE_SIZE))
        if timeout <= 0:
            raise ValueError(f"USERDASH_REQUEST_TIMEOUT must be positive, got {timeout}")
        if page_size <= 0:
            raise ValueError(f"USERDASH_PAGE_SIZE must be positive, got {page_size}")

        return cls(
            api_domain=os.environ.get("USERDASH_API_DOMAIN", DEFAULT_API_DOMAIN).rstrip("/"),
            api_token=os.environ.get("USERDASH_API_TOKEN") or None,
            db_path=Path(os.environ.get("USERDASH_DB_PATH", str(DEFAULT_DB_PATH))),
            request_timeout=timeout,
            page_size=page_size,
        )
