"""OpenAI chat-completions wrapper used as the lesson generation port."""

from typing import Optional, Protocol

import httpx
import openai
from openai import AsyncOpenAI

import config
from src.errors import ConfigurationError, InvocationError


class GenerationPort(Protocol):
    """Anything that turns a (system, user) prompt pair into raw model text."""

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        ...


class OpenAIGenerationClient:
    """Generation port backed by the OpenAI chat-completions API.

    The SDK's own retries are disabled; the retry orchestrator owns the
    attempt budget.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = config.OPENAI_MODEL,
        temperature: float = config.OPENAI_TEMPERATURE,
        timeout: float = config.OPENAI_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        api_key = api_key or config.OPENAI_API_KEY
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY not set. Check your .env file.")

        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(timeout, connect=config.OPENAI_CONNECT_TIMEOUT)
            )

        self.model = model
        self.temperature = temperature
        self.client = AsyncOpenAI(api_key=api_key, max_retries=0, http_client=http_client)

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        """
        Request a JSON-object reply from the model.

        Args:
            system_prompt: Role and task framing
            user_prompt: Leveling values and output schema

        Returns:
            Raw reply text

        Raises:
            InvocationError: On transport, timeout, authentication or API
                failure, or when the reply is empty
        """
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self.temperature,
            )
        except openai.AuthenticationError as e:
            raise InvocationError(f"OpenAI authentication failed: {e}") from e
        except openai.APITimeoutError as e:
            raise InvocationError(f"OpenAI request timed out: {e}") from e
        except openai.OpenAIError as e:
            raise InvocationError(f"OpenAI request failed: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise InvocationError("Empty response from OpenAI")

        return content

    async def aclose(self) -> None:
        await self.client.close()


def create_generation_client() -> OpenAIGenerationClient:
    """Build the process-wide generation client from configuration.

    Raises:
        ConfigurationError: If no API key is configured
    """
    return OpenAIGenerationClient()
