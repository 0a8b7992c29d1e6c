"""
Google Gemini Vision Provider

Implements image analysis using Gemini models through the google-genai SDK.
"""

import base64
import logging

from google import genai
from google.genai import errors, types

from ..models import AnalysisResult
from .base import AnalysisError, ImageSource, VisionProvider

logger = logging.getLogger(__name__)


class GeminiProvider(VisionProvider):
    """
    Vision provider using Google's Gemini models.

    Example:
        provider = GeminiProvider(api_key="AIza...")
        result = await provider.analyze_image("pcb.jpg")
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-pro",
        max_tokens: int = 1024,
        timeout: float = 120.0
    ):
        """
        Initialize Gemini provider.

        Args:
            api_key: Google AI Studio API key (get from https://makersuite.google.com/app/apikey)
            model: Gemini model to use (default: gemini-1.5-pro)
            max_tokens: Upper bound on reply length
            timeout: Request timeout in seconds
        """
        super().__init__(api_key, model, max_tokens)
        self.timeout = timeout
        # HttpOptions takes milliseconds
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000))
        )

    @property
    def name(self) -> str:
        """Provider name for identification"""
        return "gemini"

    def list_models(self) -> list:
        """
        List models visible to this API key.

        Returns:
            Model descriptors from the SDK

        Raises:
            google.genai.errors.APIError: If the request fails
        """
        return list(self.client.models.list())

    async def analyze_image(self, image: ImageSource) -> AnalysisResult:
        """
        Analyze image using a Gemini model.

        Args:
            image: Image path, file:// URI or data URL

        Returns:
            AnalysisResult parsed from Gemini's reply

        Raises:
            AnalysisError: If the image is missing, the prompt is blocked
                or the API call fails
        """
        logger.debug("Starting analysis for %s", image)
        if logger.isEnabledFor(logging.DEBUG):
            self._log_available_models()

        try:
            image_bytes = base64.b64decode(self._encode_image(image))
            logger.debug("File read successfully, size: %d", len(image_bytes))

            logger.debug("Calling Gemini API (model: %s)", self.model)
            response = self.client.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_bytes(data=image_bytes, mime_type=self._get_media_type(image)),
                    self._build_user_prompt()
                ],
                config=types.GenerateContentConfig(
                    system_instruction=self._build_system_prompt(),
                    max_output_tokens=self.max_tokens
                )
            )

            if not response.candidates:
                raise AnalysisError(f"Gemini API error: {self._block_reason(response)}")

            response_text = response.text or ""
            logger.debug("Response text: %s...", response_text[:200])

            return self._parse_response(response_text)

        except AnalysisError:
            raise
        except errors.APIError as e:
            raise AnalysisError(f"Gemini API error: {e.message or str(e)}") from e
        except Exception as e:
            logger.debug("Gemini request failed", exc_info=True)
            raise AnalysisError(f"Gemini API error: {str(e)}") from e

    def _log_available_models(self) -> None:
        try:
            for model in self.list_models():
                actions = ", ".join(model.supported_actions or [])
                logger.debug("  - %s (supports: %s)", model.name, actions)
        except errors.APIError as e:
            logger.debug("Could not list models: %s", e)

    @staticmethod
    def _block_reason(response) -> str:
        feedback = response.prompt_feedback
        reason = feedback.block_reason if feedback else None
        if reason is None:
            return "no candidates returned"
        return getattr(reason, "name", str(reason))
