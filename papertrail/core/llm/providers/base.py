import json
import os
from typing import Any, Dict

import httpx

from papertrail.config.models import ModelConfig
from papertrail.core.contracts.provider import LLMProvider
from papertrail.utils.errors import InputError, ProviderError


class HTTPProvider(LLMProvider):
    """
    Shared plumbing for providers that answer one JSON POST per prompt.

    Subclasses name the service, where its key comes from, how it is sent,
    and how a prompt and a reply map onto the request and response bodies.
    """

    label: str = ""
    key_env_var: str = ""
    default_base_url: str = ""

    def __init__(self, config: ModelConfig):
        self.config = config
        api_key = config.api_key or os.getenv(self.key_env_var)
        if not api_key:
            raise InputError(
                f"{self.label} API key not found. Please set it in the config or as an "
                f"environment variable {self.key_env_var}."
            )
        self._client = httpx.AsyncClient(
            base_url=config.base_url or self.default_base_url,
            headers={"Content-Type": "application/json", **self.auth_headers(api_key)},
            timeout=config.timeout_sec,
        )

    def auth_headers(self, api_key: str) -> Dict[str, str]:
        raise NotImplementedError

    def endpoint(self) -> str:
        raise NotImplementedError

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    def extract_text(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(self.endpoint(), json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProviderError(f"Request to {self.label} timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            try:
                error_message = e.response.json().get("error", {}).get("message", e.response.text)
            except json.JSONDecodeError:
                error_message = e.response.text
            raise ProviderError(f"{self.label} API error ({e.response.status_code}): {error_message}") from e
        except httpx.RequestError as e:
            raise ProviderError(f"An unexpected network error occurred: {e}") from e
        return response.json()

    async def generate(self, prompt: str) -> str:
        return self.extract_text(await self._post(self.build_payload(prompt)))

    async def aclose(self) -> None:
        await self._client.aclose()
