"""
Base Vision Provider Interface

Abstract base class defining the contract for vision model providers.
All providers must implement this interface for consistent behavior.
"""

import base64
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union
from urllib.parse import unquote, urlparse

from ..models import AnalysisResult
from ..response_parser import parse_analysis_response

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path]

SPARK_SENSEI_SYSTEM_PROMPT = """You are Spark Sensei, a strict but incredibly knowledgeable Senior Electrical Engineering Professor and Senior Software Architect.

Your goal is to analyze images uploaded by students. These images will be either:
- Photos of physical electronics (breadboards, PCBs, wiring).
- Screenshots of code (Python, C++, React Native, Arduino).

YOUR ANALYSIS PROTOCOL:

IF THE IMAGE IS HARDWARE (Electronics):
- Component ID: List the visible components (e.g., "ESP32 Dev Module," "10k Resistor," "HC-SR04 Ultrasonic Sensor").
- Wiring Audit: Trace the visible connections. Look specifically for:
  - Short circuits (Power connected directly to Ground).
  - Missing common grounds between modules.
  - Incorrect resistor values (read the color bands if possible).
  - Polarity errors (LEDs or Capacitors backwards).
- Functionality Guess: deduce what the circuit is trying to do based on the components.

IF THE IMAGE IS SOFTWARE (Code):
- Language ID: Identify the programming language.
- Bug Hunt: Find distinct syntax errors, logical flaws, or missing imports.
- The Fix: Rewrite the specific block of code that is broken. Do not rewrite the whole file, just the fix.

RESPONSE FORMAT:
You must output your answer in this clear structure:
🛑 DIAGNOSIS: [One sentence summary: e.g., "Your LED is backwards" or "Syntax error on line 42"]
🔍 DETAILS: [Bullet points explaining the error]
💡 THE FIX: [The specific instruction or code block to solve it]
🎓 SENSEI'S NOTE: [A brief, one-sentence tip or encouragement in a stern but helpful tone]"""

ANALYZE_INSTRUCTION = "Analyze this image according to your protocol, Spark Sensei."

_DATA_URL = re.compile(r"^data:(?P<mime>image/[\w.+-]+)?(?P<params>[^,]*),(?P<data>.*)$", re.DOTALL)


class AnalysisError(RuntimeError):
    """Raised when a provider fails to analyze an image"""


class VisionProvider(ABC):
    """
    Abstract base class for vision model providers.

    All vision providers (Claude, OpenAI, Gemini) must implement
    this interface to ensure consistent behavior and easy swapping.

    Subclasses must implement:
    - analyze_image(): Send image to the model and return parsed result
    - is_available(): Check if provider is configured and ready
    - name: Property returning provider name
    """

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024):
        self._api_key = api_key
        self.model = model
        self.max_tokens = max_tokens

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Provider name for logging and identification.

        Returns:
            Provider name (e.g., "claude", "openai", "gemini")
        """
        pass

    @abstractmethod
    async def analyze_image(self, image: ImageSource) -> AnalysisResult:
        """
        Analyze an image and return the structured critique.

        Sends the image to the vision model together with the Spark Sensei
        system prompt and normalizes the reply with the response parser.

        Args:
            image: Path to an image file, a file:// URI, or a
                   data:image/...;base64 URL

        Returns:
            AnalysisResult with diagnosis, details, fix and note

        Raises:
            AnalysisError: If the image cannot be read or the API call fails

        Example:
            result = await provider.analyze_image(Path("breadboard.jpg"))
            print(result.diagnosis)
        """
        pass

    def is_available(self) -> bool:
        """
        Check if provider is configured and ready to use.

        Returns:
            True if API key is set, False otherwise
        """
        return self._api_key is not None and len(self._api_key) > 0

    def _build_system_prompt(self) -> str:
        return SPARK_SENSEI_SYSTEM_PROMPT

    def _build_user_prompt(self) -> str:
        return ANALYZE_INSTRUCTION

    def _parse_response(self, response_text: str) -> AnalysisResult:
        """
        Normalize raw model output into an AnalysisResult.

        Args:
            response_text: Raw text returned by the provider

        Returns:
            Parsed result stamped with this provider's name
        """
        result = parse_analysis_response(response_text)
        if not result.is_complete:
            logger.warning("%s reply did not contain every section", self.name)
        return result.model_copy(update={"provider": self.name})

    def _encode_image(self, image: ImageSource) -> str:
        """
        Encode image as base64 string.

        Data URLs are returned as their (already encoded) payload.

        Args:
            image: Image path, file:// URI or data URL

        Returns:
            Base64-encoded image data

        Raises:
            AnalysisError: If the file does not exist
        """
        if isinstance(image, str):
            match = _DATA_URL.match(image)
            if match:
                if ";base64" in match.group("params"):
                    return match.group("data")
                return base64.b64encode(unquote(match.group("data")).encode("utf-8")).decode("utf-8")

        path = self._resolve_path(image)
        if not path.exists():
            raise AnalysisError(f"Image not found: {path}")

        with open(path, "rb") as f:
            return base64.b64encode(f.read()).decode("utf-8")

    def _get_media_type(self, image: ImageSource) -> str:
        """
        Determine image media type from path or data URL.

        Args:
            image: Image path, file:// URI or data URL

        Returns:
            MIME type, defaulting to image/jpeg
        """
        uri = str(image)
        if uri.startswith("data:image/"):
            match = _DATA_URL.match(uri)
            if match and match.group("mime"):
                return match.group("mime").lower()

        lower_uri = uri.lower()
        if lower_uri.endswith(".png"):
            return "image/png"
        if lower_uri.endswith(".gif"):
            return "image/gif"
        if lower_uri.endswith(".webp"):
            return "image/webp"
        return "image/jpeg"

    @staticmethod
    def _resolve_path(image: ImageSource) -> Path:
        if isinstance(image, Path):
            return image
        if image.startswith("file://"):
            return Path(unquote(urlparse(image).path))
        return Path(image).expanduser()
