"""
Anthropic Claude Vision Provider

Implements image analysis using Claude's vision capabilities.
Supports Claude 3+ models with vision understanding.
"""

import logging

import anthropic

from ..models import AnalysisResult
from .base import AnalysisError, ImageSource, VisionProvider

logger = logging.getLogger(__name__)

SUPPORTED_MEDIA_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")


class ClaudeProvider(VisionProvider):
    """
    Vision provider using Anthropic's Claude models.

    Example:
        provider = ClaudeProvider(api_key="sk-ant-...")
        result = await provider.analyze_image("breadboard.jpg")
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        max_tokens: int = 1024,
        timeout: float = 120.0
    ):
        """
        Initialize Claude provider.

        Args:
            api_key: Anthropic API key (get from https://console.anthropic.com/)
            model: Claude model to use (default: claude-3-5-sonnet-20241022)
                   Must be a vision-capable model (Claude 3+)
            max_tokens: Upper bound on reply length
            timeout: Request timeout in seconds
        """
        super().__init__(api_key, model, max_tokens)
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout)

    @property
    def name(self) -> str:
        """Provider name for identification"""
        return "claude"

    async def analyze_image(self, image: ImageSource) -> AnalysisResult:
        """
        Analyze image using Claude vision model.

        Args:
            image: Image path, file:// URI or data URL

        Returns:
            AnalysisResult parsed from Claude's reply

        Raises:
            AnalysisError: If the image is missing or the API call fails
        """
        try:
            image_data = self._encode_image(image)
            media_type = self._get_media_type(image)
            if media_type not in SUPPORTED_MEDIA_TYPES:
                media_type = "image/jpeg"

            logger.debug("Sending %s image to %s", media_type, self.model)
            message = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=self._build_system_prompt(),
                messages=[{
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": media_type,
                                "data": image_data
                            }
                        },
                        {
                            "type": "text",
                            "text": self._build_user_prompt()
                        }
                    ]
                }]
            )

            response_text = "\n".join(
                block.text for block in message.content if block.type == "text"
            )

            return self._parse_response(response_text)

        except AnalysisError:
            raise
        except anthropic.APIError as e:
            raise AnalysisError(f"Claude API error: {str(e)}") from e
        except Exception as e:
            raise AnalysisError(f"Claude API error: {str(e)}") from e
