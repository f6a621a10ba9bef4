from papertrail.config.models import ModelConfig
from papertrail.core.contracts.provider import LLMProvider
from papertrail.core.registry import provider_registry
from papertrail.utils.errors import PapertrailError, ProviderError


def get_provider(config: ModelConfig) -> LLMProvider:
    """
    Instantiates the provider named by ``config.provider``.

    Raises:
        ProviderError: If the provider is unknown or fails to be created.
        InputError: If the provider's credential is missing.
    """
    try:
        return provider_registry.create(config.provider, config=config)
    except KeyError:
        raise ProviderError(
            f"Unknown provider '{config.provider}'. "
            f"Available providers: {provider_registry.names()}"
        )
    except PapertrailError:
        raise
    except Exception as e:
        raise ProviderError(f"Failed to create provider '{config.provider}': {e}") from e
