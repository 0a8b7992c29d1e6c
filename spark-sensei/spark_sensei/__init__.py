"""
Spark Sensei - Hardware & Code Critique

Sends a photo of electronics or a screenshot of code to a vision model
and turns the reply into a four-part critique: diagnosis, details,
fix and a closing note.

Supports multiple vision providers:
- Anthropic Claude
- OpenAI
- Google Gemini
"""

from .models import AnalysisResult, ProviderType, SubscriptionStatus, SubscriptionTier
from .response_parser import parse_analysis_response
from .analyzer import SenseiAnalyzer
from .storage import SettingsStore

__version__ = "1.0.0"
__all__ = [
    "AnalysisResult",
    "ProviderType",
    "SubscriptionStatus",
    "SubscriptionTier",
    "parse_analysis_response",
    "SenseiAnalyzer",
    "SettingsStore",
]
