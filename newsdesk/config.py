"""
Configuration management for newsdesk.

This module uses pydantic-settings to manage all configuration aspects including:
- News sections and their feeds
- Fetching and extraction thresholds
- Generative-AI providers and the retry policy around them
- Airtable and Supabase sinks
- Logging and metrics

Configuration is loaded from environment variables or a .env file, with nested
values addressed through "__" (e.g. AIRTABLE__BASE_ID).
"""
from enum import Enum
from typing import List, Optional

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Log levels supported by the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SectionConfig(BaseModel):
    """A newsroom section: its feed and the record-store table it fills."""
    id: str
    name: str
    table_name: str
    feed_url: Optional[AnyHttpUrl] = None
    color: str = "#607D8B"
    priority: int = 100
    enabled: bool = True


DEFAULT_SECTIONS = [
    SectionConfig(
        id="primera-plana",
        name="Primera Plana",
        table_name="Primera Plana",
        feed_url="https://rss.app/feeds/v1.1/_on3KHNu40zPeeYkK.json",
        color="#D32F2F",
        priority=1,
    ),
    SectionConfig(
        id="instituciones",
        name="Instituciones",
        table_name="Instituciones",
        feed_url="https://rss.app/feeds/v1.1/_iVEs2ol109NjJyce.json",
        color="#388E3C",
        priority=2,
    ),
    SectionConfig(
        id="agro",
        name="Agro",
        table_name="Agro",
        feed_url="https://rss.app/feeds/v1.1/_20zJLx8JIZ4cnqkE.json",
        color="#388E3C",
        priority=3,
    ),
    SectionConfig(
        id="deportes",
        name="Deportes",
        table_name="Deportes",
        feed_url="https://rss.app/feeds/v1.1/_GaWKBBIxuHCE5tH1.json",
        color="#1976D2",
        priority=4,
    ),
    SectionConfig(
        id="economia",
        name="Economía",
        table_name="Economia",
        feed_url="https://rss.app/feeds/v1.1/_ifKDQanGJM3BOKGC.json",
        color="#FFC107",
        priority=5,
    ),
    SectionConfig(
        id="lifestyle",
        name="Estilo de Vida",
        table_name="Lifestyle",
        feed_url="https://rss.app/feeds/v1.1/_cnOfvOavDTApWv9j.json",
        color="#9C27B0",
        priority=6,
    ),
]


class FetcherConfig(BaseModel):
    """Configuration for article and feed fetching."""
    timeout_seconds: float = 10.0
    feed_timeout_seconds: float = 30.0
    feed_retry_attempts: int = 3
    user_agent: Optional[str] = None


class ExtractionConfig(BaseModel):
    """Thresholds used by the extractors and the quality gate."""
    min_text_length: int = 50
    min_paragraph_length: int = 20
    max_article_images: int = 4

    @model_validator(mode="after")
    def _sanity_checks(self) -> "ExtractionConfig":
        if self.min_text_length <= 0 or self.min_paragraph_length < 0:
            raise ValueError("Extraction thresholds must be positive")
        return self


class RetryPolicy(BaseModel):
    """
    Retry policy for rate-limited AI calls.

    Every call waits `call_delay_seconds` first; a throttled call is retried
    with exponential backoff starting at `base_delay_seconds`, capped at
    `max_delay_seconds`, plus up to `jitter_seconds` of random jitter.
    """
    max_attempts: int = 5
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 32.0
    jitter_seconds: float = 0.5
    call_delay_seconds: float = 1.0

    @model_validator(mode="after")
    def _sanity_checks(self) -> "RetryPolicy":
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if self.base_delay_seconds < 0 or self.call_delay_seconds < 0 or self.jitter_seconds < 0:
            raise ValueError("Retry delays cannot be negative")
        return self


class LLMProvider(str, Enum):
    """Generative-AI providers supported."""
    GEMINI = "gemini"
    GROQ = "groq"
    OPENAI = "openai"


class LLMConfig(BaseModel):
    """Configuration for one generative-AI provider."""
    provider: LLMProvider = LLMProvider.GEMINI
    model_name: str = "gemini-2.0-flash"
    api_key: Optional[SecretStr] = None
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 8000
    timeout_seconds: float = 120.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.get_secret_value())


DEFAULT_LLM_PROVIDERS = [
    LLMConfig(provider=LLMProvider.GEMINI, model_name="gemini-2.0-flash"),
    LLMConfig(
        provider=LLMProvider.GROQ,
        model_name="llama-3.3-70b-versatile",
        base_url="https://api.groq.com/openai/v1",
    ),
]


class AirtableConfig(BaseModel):
    """Configuration for the Airtable sink."""
    enabled: bool = True
    api_url: str = "https://api.airtable.com/v0"
    base_id: Optional[str] = None
    token: Optional[SecretStr] = None
    batch_size: int = 10

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        """Airtable accepts at most 10 records per request."""
        if not 1 <= v <= 10:
            raise ValueError("batch_size must be between 1 and 10")
        return v

    @property
    def is_configured(self) -> bool:
        return bool(self.enabled and self.base_id and self.token)


class SupabaseConfig(BaseModel):
    """Configuration for the Supabase sink."""
    enabled: bool = False
    url: Optional[str] = None
    service_key: Optional[SecretStr] = None
    table: str = "articles"
    publish_immediately: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.enabled and self.url and self.service_key)


class BatchConfig(BaseModel):
    """Limits for batch processing."""
    max_concurrent_articles: int = 5
    max_items_per_feed: int = 20

    @model_validator(mode="after")
    def _sanity_checks(self) -> "BatchConfig":
        if self.max_concurrent_articles <= 0:
            raise ValueError("max_concurrent_articles must be positive")
        if self.max_items_per_feed <= 0:
            raise ValueError("max_items_per_feed must be positive")
        return self


class StateConfig(BaseModel):
    """Per-section record of already processed article URLs."""
    enabled: bool = True
    state_dir: str = ".newsdesk/state"
    max_urls_per_section: int = 1000


class MetricsConfig(BaseModel):
    """Configuration for metrics and logging."""
    prometheus_enabled: bool = False
    prometheus_port: int = 8000
    log_level: LogLevel = LogLevel.INFO
    structured_logging: bool = True


class Settings(BaseSettings):
    """Main settings class for newsdesk."""
    app_name: str = "newsdesk"
    version: str = "0.1.0"
    debug: bool = Field(default=False)

    sections: List[SectionConfig] = Field(default_factory=lambda: list(DEFAULT_SECTIONS))

    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    llm_providers: List[LLMConfig] = Field(default_factory=lambda: list(DEFAULT_LLM_PROVIDERS))
    airtable: AirtableConfig = Field(default_factory=AirtableConfig)
    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    state: StateConfig = Field(default_factory=StateConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    @field_validator("sections", "llm_providers", mode="before")
    @classmethod
    def _coerce_list_from_mapping(cls, v):
        """Allow SECTIONS__0__... style env to load as a list.

        pydantic-settings may assemble nested env into {"0": {...}, "1": {...}};
        convert that to a list ordered by key.
        """
        if isinstance(v, dict):
            try:
                return [v[k] for k in sorted(v.keys(), key=lambda x: int(x))]
            except ValueError:
                return list(v.values())
        return v

    @field_validator("sections")
    @classmethod
    def validate_sections(cls, sections: List[SectionConfig]) -> List[SectionConfig]:
        """Validate that section IDs are unique."""
        section_ids = [section.id for section in sections]
        if len(section_ids) != len(set(section_ids)):
            raise ValueError("Section IDs must be unique")
        return sections

    def get_section(self, section_id: str) -> Optional[SectionConfig]:
        """Get a section configuration by ID."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def section_name(self, section_id: str) -> str:
        """Display name for a section ID, or the ID itself when unknown."""
        section = self.get_section(section_id)
        return section.name if section else section_id


def load_settings() -> Settings:
    """Load settings from environment variables and .env file."""
    return Settings()
