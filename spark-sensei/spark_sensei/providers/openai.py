"""
OpenAI Vision Provider

Implements image analysis using OpenAI's vision-capable chat models.
"""

import logging

import openai

from ..models import AnalysisResult
from .base import AnalysisError, ImageSource, VisionProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(VisionProvider):
    """
    Vision provider using OpenAI chat completions with image input.

    Example:
        provider = OpenAIProvider(api_key="sk-...")
        result = await provider.analyze_image("screenshot.png")
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        max_tokens: int = 1024,
        timeout: float = 120.0
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (get from https://platform.openai.com/api-keys)
            model: OpenAI model to use (default: gpt-4o)
                   Must be a vision-capable model
            max_tokens: Upper bound on reply length
            timeout: Request timeout in seconds
        """
        super().__init__(api_key, model, max_tokens)
        self.client = openai.OpenAI(api_key=api_key, timeout=timeout)

    @property
    def name(self) -> str:
        """Provider name for identification"""
        return "openai"

    async def analyze_image(self, image: ImageSource) -> AnalysisResult:
        """
        Analyze image using an OpenAI vision model.

        Args:
            image: Image path, file:// URI or data URL

        Returns:
            AnalysisResult parsed from the model's reply

        Raises:
            AnalysisError: If the image is missing or the API call fails
        """
        try:
            image_data = self._encode_image(image)
            data_url = f"data:{self._get_media_type(image)};base64,{image_data}"

            logger.debug("Sending image to %s", self.model)
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[
                    {
                        "role": "system",
                        "content": self._build_system_prompt()
                    },
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image_url",
                                "image_url": {
                                    "url": data_url
                                }
                            },
                            {
                                "type": "text",
                                "text": self._build_user_prompt()
                            }
                        ]
                    }
                ]
            )

            response_text = ""
            if response.choices:
                response_text = response.choices[0].message.content or ""

            return self._parse_response(response_text)

        except AnalysisError:
            raise
        except openai.APIError as e:
            raise AnalysisError(f"OpenAI API error: {str(e)}") from e
        except Exception as e:
            raise AnalysisError(f"OpenAI API error: {str(e)}") from e
