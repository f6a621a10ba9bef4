from papertrail.core.llm.providers.base import HTTPProvider
from papertrail.core.registry import provider_registry


@provider_registry.register("claude")
class ClaudeProvider(HTTPProvider):
    """
    A provider for the Anthropic Messages API.
    """

    label = "Anthropic"
    key_env_var = "ANTHROPIC_API_KEY"
    default_base_url = "https://api.anthropic.com/v1"

    def auth_headers(self, api_key):
        return {"x-api-key": api_key, "anthropic-version": "2023-06-01"}

    def endpoint(self):
        return "/messages"

    def build_payload(self, prompt):
        return {
            "model": self.config.name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            **self.config.parameters,
        }

    def extract_text(self, data):
        # Only text blocks carry the reply
        for block in data.get("content") or []:
            if block.get("type", "text") == "text" and block.get("text"):
                return block["text"]
        return ""
