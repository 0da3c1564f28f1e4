"""Runtime settings read from the environment (and an optional ``.env`` file)."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .styles import CitationStyle

DEFAULT_API_URL = "http://localhost:5000"


@dataclass
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    max_retries: int = 2
    default_style: CitationStyle = CitationStyle.APA

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        if load_env_file:
            load_dotenv()
        return cls(
            api_url=os.getenv("CITATION_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout=float(os.getenv("CITATION_API_TIMEOUT", "10.0")),
            max_retries=int(os.getenv("CITATION_API_MAX_RETRIES", "2")),
            default_style=CitationStyle.parse(os.getenv("CITATION_DEFAULT_STYLE", "apa")),
        )
