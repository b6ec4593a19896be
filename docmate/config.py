from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .reading.pagination import DEFAULT_WORDS_PER_PAGE

DEFAULT_PROVIDER_TIMEOUT = 8.0


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    return value if value not in (None, "") else default


@dataclass
class DocmateConfig:
    database_url: str = "sqlite+pysqlite:///./data/docmate.db"
    storage_root: str = "./data"
    whoosh_index_dir: str = "./data/whoosh"
    words_per_page: int = DEFAULT_WORDS_PER_PAGE
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    rate_limit_max_requests: int = 10
    rate_limit_window_ms: int = 60_000
    log_level: str = "INFO"
    log_file: Optional[str] = None

    google_translate_api_key: Optional[str] = None
    google_search_api_key: Optional[str] = None
    google_search_engine_id: Optional[str] = None
    azure_translator_key: Optional[str] = None
    azure_translator_region: Optional[str] = None
    deepl_api_key: Optional[str] = None
    deepl_api_url: str = "https://api-free.deepl.com/v2/translate"
    libretranslate_url: Optional[str] = None
    libretranslate_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    wikipedia_api_base: str = "https://en.wikipedia.org/api/rest_v1"
    duckduckgo_api_base: str = "https://api.duckduckgo.com"
    free_dictionary_api_base: str = "https://api.dictionaryapi.dev/api/v2/entries/en"

    @classmethod
    def from_env(cls) -> "DocmateConfig":
        defaults = cls()
        return cls(
            database_url=_env("DATABASE_URL", defaults.database_url),
            storage_root=_env("BOOK_STORAGE_ROOT", defaults.storage_root),
            whoosh_index_dir=_env("WHOOSH_DIR", defaults.whoosh_index_dir),
            words_per_page=int(_env("WORDS_PER_PAGE", str(defaults.words_per_page))),
            provider_timeout=float(_env("PROVIDER_TIMEOUT_SECONDS", str(defaults.provider_timeout))),
            rate_limit_max_requests=int(_env("RATE_LIMIT_MAX_REQUESTS", str(defaults.rate_limit_max_requests))),
            rate_limit_window_ms=int(_env("RATE_LIMIT_WINDOW_MS", str(defaults.rate_limit_window_ms))),
            log_level=_env("LOG_LEVEL", defaults.log_level),
            log_file=_env("LOG_FILE"),
            google_translate_api_key=_env("GOOGLE_TRANSLATE_API_KEY"),
            google_search_api_key=_env("GOOGLE_SEARCH_API_KEY"),
            google_search_engine_id=_env("GOOGLE_SEARCH_ENGINE_ID"),
            azure_translator_key=_env("AZURE_TRANSLATOR_KEY"),
            azure_translator_region=_env("AZURE_TRANSLATOR_REGION"),
            deepl_api_key=_env("DEEPL_API_KEY"),
            deepl_api_url=_env("DEEPL_API_URL", defaults.deepl_api_url),
            libretranslate_url=_env("LIBRETRANSLATE_URL"),
            libretranslate_api_key=_env("LIBRETRANSLATE_API_KEY"),
            openai_api_key=_env("OPENAI_API_KEY"),
            openai_base_url=_env("OPENAI_BASE_URL", defaults.openai_base_url),
            openai_model=_env("OPENAI_MODEL", defaults.openai_model),
        )
