"""
Image-editing provider clients
"""
from typing import Optional

from ...config import Settings
from .base import BaseGenerator, GeneratorResult
from .openai_images import OpenAIImagesGenerator


def get_generator(provider: str = "openai", settings: Optional[Settings] = None) -> BaseGenerator:
    """
    Factory function to get the appropriate generator.

    Args:
        provider: 'openai' (only OpenAI-compatible endpoints are supported)
        settings: Settings to build the client from

    Returns:
        BaseGenerator instance
    """
    provider = provider.lower()
    if provider == "openai":
        return OpenAIImagesGenerator(settings)
    else:
        raise ValueError(f"Unknown provider: {provider}. Use 'openai'.")

__all__ = ["get_generator", "GeneratorResult", "BaseGenerator", "OpenAIImagesGenerator"]
