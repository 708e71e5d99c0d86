"""
OpenAI-compatible image-editing generator.
Works against any endpoint exposing POST {base_url}/images/edits.

Required Environment Variables:
    IMAGE_API_KEY: Bearer credential
    IMAGE_API_BASE_URL: API base (default: https://api.openai.com/v1)
    IMAGE_MODEL: Model name (default: gpt-image-1)
"""
import logging
import time
from typing import Optional

import requests

from ...config import Settings
from .base import BaseGenerator, EncodedImages, GeneratorResult

logger = logging.getLogger(__name__)


class OpenAIImagesGenerator(BaseGenerator):
    """Image generator using the /images/edits endpoint."""

    name = "openai"

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or Settings()
        self.api_key = settings.api_key
        self.base_url = settings.base_url
        self.model = settings.model
        self.size = settings.size
        self.timeout = settings.generation_timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/images/edits"

    def is_configured(self) -> bool:
        """Check if the generator has a credential."""
        return bool(self.api_key and self.base_url)

    def get_missing_config(self) -> list:
        """Return list of missing configuration variables."""
        missing = []
        if not self.api_key:
            missing.append(Settings.ENV_API_KEY)
        if not self.base_url:
            missing.append(Settings.ENV_BASE_URL)
        return missing

    def generate(
        self,
        prompt: str,
        images: EncodedImages,
        quality: str,
        model: Optional[str] = None,
        size: Optional[str] = None,
    ) -> GeneratorResult:
        """Send the images and prompt to the image-editing endpoint."""
        if not self.is_configured():
            missing = self.get_missing_config()
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

        model = model or self.model
        size = size or self.size

        logger.info(f"Using endpoint: {self.endpoint}")
        logger.info(f"Using model: {model} (quality: {quality}, images: {len(images)})")

        headers = {"Authorization": f"Bearer {self.api_key}"}

        start_time = time.time()
        req_info = f"POST {self.endpoint}\nModel: {model}\nPrompt: {prompt[:50]}..."
        resp_info = ""

        try:
            files = [
                ("image[]", (f"{role}.png", data, "image/png"))
                for role, data in images
            ]
            data = {
                "model": model,
                "prompt": prompt,
                "quality": quality,
                "size": size,
                "n": "1",
            }

            response = requests.post(
                self.endpoint, headers=headers, files=files, data=data, timeout=self.timeout
            )

            latency = time.time() - start_time
            resp_info = f"Status: {response.status_code}\nLatency: {latency:.2f}s"

            response.raise_for_status()

            result = response.json()

            items = result.get("data") if isinstance(result, dict) else None
            if items:
                item = items[0]
                if item.get("b64_json"):
                    return GeneratorResult(
                        b64_data=item["b64_json"],
                        model=model,
                        request_info=req_info,
                        response_info=resp_info,
                    )
                if item.get("url"):
                    logger.info(f"Result is a temporary URL: {item['url']}")
                    return GeneratorResult(
                        url=item["url"],
                        model=model,
                        request_info=req_info,
                        response_info=resp_info,
                    )

            keys = list(result.keys()) if isinstance(result, dict) else type(result).__name__
            logger.error(f"Unexpected response structure: {keys}")
            return GeneratorResult(model=model, request_info=req_info,
                                   response_info=resp_info + "\nError: Unexpected structure")

        except requests.exceptions.HTTPError as e:
            logger.error(f"API error: {e}")
            error_details = e.response.text if e.response is not None else str(e)
            return GeneratorResult(model=model, request_info=req_info,
                                   response_info=f"HTTP Error: {e}\n{error_details}")

        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Error calling image API: {e}")
            return GeneratorResult(model=model, request_info=req_info,
                                   response_info=f"Exception: {e}")
