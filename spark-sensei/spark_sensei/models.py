"""
Data Models for Spark Sensei

Type-safe Pydantic models for analysis results, subscription status
and configuration.
"""

from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProviderType(str, Enum):
    """Hosted vision backends that can analyze an image"""

    CLAUDE = "claude"
    OPENAI = "openai"
    GEMINI = "gemini"


PARSE_FAILURE_PREFIX = "Unable to parse"


class AnalysisResult(BaseModel):
    """
    Structured critique extracted from a vision model reply.

    Attributes:
        diagnosis: One-sentence summary of the problem
        details: Explanation of the error(s), usually bullet points
        fix: Instruction or code block that solves the problem
        note: Short closing tip from the sensei
        raw_response: Unmodified text returned by the provider
        provider: Which provider produced the reply
        timestamp: When this result was generated
    """

    diagnosis: str
    details: str
    fix: str
    note: str
    raw_response: Optional[str] = None
    provider: str = Field(default="unknown", description="Vision provider used")
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())

    @property
    def is_complete(self) -> bool:
        """Check that every section was found in the raw response"""
        return not any(
            value.startswith(PARSE_FAILURE_PREFIX)
            for value in (self.diagnosis, self.details, self.fix, self.note)
        )

    def summary(self) -> str:
        """Generate a human-readable summary"""
        return f"Diagnosis: {self.diagnosis}\nSensei's note: {self.note}\n"


class SubscriptionTier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"
    PRO = "pro"


class SubscriptionStatus(BaseModel):
    """
    Locally stored subscription state.

    Attributes:
        tier: Current plan
        expires_at: ISO date string when a paid plan lapses (optional)
        analysis_count: Analyses run since last_reset_date
        last_reset_date: ISO date of the last daily counter reset
    """

    tier: SubscriptionTier = SubscriptionTier.FREE
    expires_at: Optional[str] = None
    analysis_count: int = Field(default=0, ge=0)
    last_reset_date: str = Field(default_factory=lambda: date.today().isoformat())


class FeatureAccess(BaseModel):
    unlimited_analysis: bool
    all_providers: bool
    web_search: bool
    component_database: bool
    analysis_history: bool
    export_pdf: bool
    batch_analysis: bool
    circuit_simulation: bool


TIER_FEATURES: dict[SubscriptionTier, FeatureAccess] = {
    SubscriptionTier.FREE: FeatureAccess(
        unlimited_analysis=False,  # 5 per day
        all_providers=False,  # OpenAI only
        web_search=False,
        component_database=False,
        analysis_history=False,
        export_pdf=False,
        batch_analysis=False,
        circuit_simulation=False,
    ),
    SubscriptionTier.PREMIUM: FeatureAccess(
        unlimited_analysis=True,
        all_providers=True,
        web_search=True,
        component_database=True,
        analysis_history=True,
        export_pdf=True,
        batch_analysis=False,
        circuit_simulation=False,
    ),
    SubscriptionTier.PRO: FeatureAccess(
        unlimited_analysis=True,
        all_providers=True,
        web_search=True,
        component_database=True,
        analysis_history=True,
        export_pdf=True,
        batch_analysis=True,
        circuit_simulation=True,
    ),
}

TIER_PRICING: dict[SubscriptionTier, dict[str, float]] = {
    SubscriptionTier.PREMIUM: {"monthly": 6.99, "yearly": 49.99},
    SubscriptionTier.PRO: {"monthly": 14.99, "yearly": 99.99},
}


class Config(BaseModel):
    """
    Configuration for Spark Sensei.

    Loaded from .env file and environment variables.

    Attributes:
        anthropic_api_key: Anthropic API key (optional)
        openai_api_key: OpenAI API key (optional)
        gemini_api_key: Google AI Studio API key (optional)
        claude_model: Claude model name
        openai_model: OpenAI model name
        gemini_model: Gemini model name
        max_tokens: Upper bound on reply length
        default_provider: Provider used when none is saved in settings
        settings_path: Location of the key-value settings file
        request_timeout: Seconds to wait for a provider reply
    """

    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    claude_model: str = "claude-3-5-sonnet-20241022"
    openai_model: str = "gpt-4o"
    gemini_model: str = "gemini-1.5-pro"
    max_tokens: int = Field(default=1024, ge=1, le=8192)
    default_provider: Optional[ProviderType] = None
    settings_path: Path = Field(default_factory=lambda: Path.home() / ".spark-sensei" / "settings.json")
    request_timeout: float = Field(default=120.0, gt=0)

    @field_validator("default_provider", mode="before")
    @classmethod
    def blank_provider_is_none(cls, v):
        """Treat an empty SPARK_SENSEI_PROVIDER as unset"""
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator("settings_path")
    @classmethod
    def expand_settings_path(cls, v: Path) -> Path:
        return v.expanduser()

    def api_key_for(self, provider_type: ProviderType) -> Optional[str]:
        """Get the environment-supplied key for a provider, if any"""
        key = {
            ProviderType.CLAUDE: self.anthropic_api_key,
            ProviderType.OPENAI: self.openai_api_key,
            ProviderType.GEMINI: self.gemini_api_key,
        }[provider_type]
        return key if key else None

    def model_for(self, provider_type: ProviderType) -> str:
        """Get the configured model name for a provider"""
        return {
            ProviderType.CLAUDE: self.claude_model,
            ProviderType.OPENAI: self.openai_model,
            ProviderType.GEMINI: self.gemini_model,
        }[provider_type]
