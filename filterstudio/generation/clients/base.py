"""
Base Generator class for image-editing providers.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

# (role, png_bytes) pairs sent to the provider
EncodedImages = List[Tuple[str, bytes]]


@dataclass
class GeneratorResult:
    """Raw result from an image-editing request.

    Providers answer either with an inline base64 payload or with a temporary
    URL that must be downloaded separately; failures carry neither.
    """
    b64_data: Optional[str] = None
    url: Optional[str] = None
    model: str = ""
    request_info: str = ""
    response_info: str = ""

    @property
    def success(self) -> bool:
        return bool(self.b64_data or self.url)


class BaseGenerator:
    """Abstract base class for image generators."""

    name = "base"

    def is_configured(self) -> bool:
        raise NotImplementedError

    def get_missing_config(self) -> list:
        return []

    def generate(
        self,
        prompt: str,
        images: EncodedImages,
        quality: str,
        model: Optional[str] = None,
        size: Optional[str] = None,
    ) -> GeneratorResult:
        """
        Edit the given images according to the prompt.
        Must be implemented by subclasses.

        Args:
            prompt: Final prompt text
            images: PNG-encoded input images, in role order
            quality: Rendering effort hint ("medium" or "high")
            model: Model id override; provider default when None
            size: Output size override; provider default when None

        Returns:
            GeneratorResult holding either b64_data or url on success
        """
        raise NotImplementedError("Subclasses must implement generate")
