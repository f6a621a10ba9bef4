from papertrail.core.llm.providers.base import HTTPProvider
from papertrail.core.registry import provider_registry


@provider_registry.register("gemini")
class GeminiProvider(HTTPProvider):
    """
    Google Gemini ``generateContent``. Replies are requested as JSON.
    """

    label = "Gemini"
    key_env_var = "GEMINI_API_KEY"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def auth_headers(self, api_key):
        return {"x-goog-api-key": api_key}

    def endpoint(self):
        return f"/models/{self.config.name}:generateContent"

    def build_payload(self, prompt):
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": self.config.max_tokens,
                "temperature": self.config.temperature,
                "responseMimeType": "application/json",
                **self.config.parameters,
            },
        }

    def extract_text(self, data):
        # A blocked prompt comes back without candidates
        candidates = data.get("candidates") or [{}]
        parts = candidates[0].get("content", {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
