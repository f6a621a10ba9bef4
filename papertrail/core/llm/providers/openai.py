from papertrail.core.llm.providers.base import HTTPProvider
from papertrail.core.registry import provider_registry


@provider_registry.register("openai")
class OpenAIProvider(HTTPProvider):
    """
    Chat Completions, from OpenAI or any compatible server set as ``base_url``.
    """

    label = "OpenAI"
    key_env_var = "OPENAI_API_KEY"
    default_base_url = "https://api.openai.com/v1"

    def auth_headers(self, api_key):
        return {"Authorization": f"Bearer {api_key}"}

    def endpoint(self):
        return "/chat/completions"

    def build_payload(self, prompt):
        return {
            "model": self.config.name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            **self.config.parameters,
        }

    def extract_text(self, data):
        choices = data.get("choices") or [{}]
        return choices[0].get("message", {}).get("content") or ""
