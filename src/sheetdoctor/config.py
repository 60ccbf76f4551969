"""Configuration management for SheetDoctor."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Google Sheets API credentials
    google_credentials_path: Path = Path(os.getenv("GOOGLE_CREDENTIALS_PATH", "credentials.json"))
    google_token_path: Path = Path(os.getenv("GOOGLE_TOKEN_PATH", "token.json"))

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Circular reference walk - hops followed beyond the formula's own references
    max_circular_depth: int = int(os.getenv("MAX_CIRCULAR_DEPTH", "2"))

    # Inline performance check thresholds
    nested_if_threshold: int = int(os.getenv("NESTED_IF_THRESHOLD", "3"))
    volatile_length_threshold: int = int(os.getenv("VOLATILE_LENGTH_THRESHOLD", "100"))
    bounded_range_rows: int = int(os.getenv("BOUNDED_RANGE_ROWS", "1000"))

    # Performance scorer thresholds
    score_length_threshold: int = int(os.getenv("SCORE_LENGTH_THRESHOLD", "200"))
    score_nesting_threshold: int = int(os.getenv("SCORE_NESTING_THRESHOLD", "5"))

    # Scanning - grid positions per chunk (0 scans everything in one pass)
    scan_chunk_size: int = int(os.getenv("SCAN_CHUNK_SIZE", "0"))

    # Sheet bounds used when checking a formula outside of a live document
    default_max_rows: int = int(os.getenv("DEFAULT_MAX_ROWS", "1000"))
    default_max_cols: int = int(os.getenv("DEFAULT_MAX_COLS", "26"))


settings = Settings()
