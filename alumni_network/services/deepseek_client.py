"""
DeepSeek API Client

DeepSeek uses OpenAI-compatible API, so we use the openai library.

AI is used ONLY for drafting newsletter bodies. The draft is stored in
the newsletters table like any hand-written newsletter.
"""
import logging

from openai import OpenAI
from alumni_network.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class DeepSeekClient:
    """
    Wrapper for DeepSeek API.
    """

    def __init__(self):
        self.client = OpenAI(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url
        )
        # Use the cheapest model
        self.model = "deepseek-chat"

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = 1000,
                  temperature: float = 0.7) -> str:
        """
        Internal method to call DeepSeek API.
        Returns raw text response.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens,
            temperature=temperature
        )
        return response.choices[0].message.content

    def draft_newsletter(self, ai_prompt: str) -> str:
        """
        Write a plain-text newsletter body for the alumni community.
        Paragraphs are separated by blank lines.
        """
        system_prompt = """You write newsletters for a university alumni network.
Write a warm, concise newsletter body in plain text (no markdown, no HTML).
Start with "Dear Alumni," and end with:
Best regards,
University Communications Team
Separate paragraphs with one blank line."""

        return self._call_api(system_prompt, ai_prompt, max_tokens=800).strip()

    def test_connection(self) -> bool:
        """Test if DeepSeek API is reachable"""
        try:
            response = self._call_api(
                "You are a test assistant.",
                "Reply with exactly: OK",
                max_tokens=10,
                temperature=0
            )
            return "OK" in response.upper()
        except Exception as e:
            logger.warning("DeepSeek connection failed: %s", e)
            return False


# Singleton instance
_deepseek_client: DeepSeekClient = None


def get_deepseek_client() -> DeepSeekClient:
    """Get or create DeepSeek client (singleton pattern)"""
    global _deepseek_client
    if _deepseek_client is None:
        _deepseek_client = DeepSeekClient()
    return _deepseek_client
