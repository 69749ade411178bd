"""OpenAI Responses API client for transcript understanding."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from life_tracker.domain.errors import (
    ServiceUnavailableError,
    UpstreamError,
    UpstreamTimeoutError,
)
from life_tracker.services.intents import IntentModelClient


@dataclass
class OpenAIIntentClient(IntentModelClient):
    """Intent model client backed by the OpenAI Responses API."""

    client: AsyncOpenAI
    timeout_seconds: float = 30.0

    @classmethod
    def create(
        cls, api_key: str, timeout_seconds: float = 30.0
    ) -> "OpenAIIntentClient":
        """Create an OpenAI intent client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, max_retries=0),
            timeout_seconds=timeout_seconds,
        )

    async def complete(self, *, model: str, store: bool, prompt: str) -> str:
        """Send one user message and return the output text."""
        try:
            response = await self.client.responses.create(
                model=model,
                input=[
                    {
                        "role": "user",
                        "content": [{"type": "input_text", "text": prompt}],
                    }
                ],
                text={"format": {"type": "json_object"}},
                store=store,
                timeout=self.timeout_seconds,
            )
        except openai.APITimeoutError as exc:
            raise UpstreamTimeoutError("Language model request timed out") from exc
        except openai.APIConnectionError as exc:
            raise ServiceUnavailableError("Language model is unreachable") from exc
        except openai.APIStatusError as exc:
            raise UpstreamError(
                f"Language model request failed ({exc.status_code})"
            ) from exc
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
