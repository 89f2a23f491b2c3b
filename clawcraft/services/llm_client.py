"""
OpenAI LLM client for ClawCraft QA.

Both calls are opaque text-in/text-out. Parsing and validation of the returned
text happen in the response validator, not here.
"""
from typing import Optional
from openai import OpenAI, APIError


REPAIR_INSTRUCTION = "Return ONLY valid JSON matching the schema. Here is the invalid output: "


class LLMClientError(Exception):
    """Raised when the OpenAI API call fails."""
    pass


class LLMClient:
    """Thin wrapper around the OpenAI chat completions API."""

    def __init__(self, api_key: Optional[str], model: str, client: Optional[OpenAI] = None):
        if not api_key and client is None:
            raise LLMClientError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")
        self.model = model
        self.client = client or OpenAI(api_key=api_key)

    def _complete(self, messages, temperature: float) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=temperature,
                messages=messages,
            )
        except APIError as e:
            raise LLMClientError(f"OpenAI API error: {str(e)}")

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def generate(self, system_message: str, user_message: str) -> str:
        """
        Run the generation prompt.

        Args:
            system_message: Role and output constraints
            user_message: Task, schema and issue data

        Returns:
            Raw model text (may be empty)
        """
        return self._complete(
            [
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
            temperature=0.2,
        )

    def repair(self, invalid_output: str) -> str:
        """Ask the model to turn its own invalid output into schema-conforming JSON."""
        return self._complete(
            [{"role": "user", "content": f"{REPAIR_INSTRUCTION}{invalid_output}"}],
            temperature=0,
        )
