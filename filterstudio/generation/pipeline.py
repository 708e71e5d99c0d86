"""
Generation Pipeline
One parameterized flow shared by every style: prompt, encode, call the image
API, fetch the result, persist it, then record metadata.
"""
import base64
import binascii
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..catalog import StyleConfig
from ..metadata import MetadataWriter
from ..storage import ArtifactStore
from .clients import BaseGenerator, GeneratorResult
from .download import download_bytes
from .images import encode_png
from .prompts import build_prompt

logger = logging.getLogger(__name__)

ALLOWED_QUALITIES = ("medium", "high")
DEFAULT_QUALITY = "medium"
ROLE_ORDER = ("person", "celebrity")


class RequestValidationError(ValueError):
    """Raised for bad input before any work is done."""


class GenerationError(RuntimeError):
    """Raised when the image API gives no usable image."""


@dataclass
class InputImage:
    """An uploaded image tagged with its role."""
    role: str
    data: bytes
    filename: str = ""
    content_type: str = ""


@dataclass
class GenerationRequest:
    """A single generation request, built per HTTP request."""
    style_id: str
    input_images: List[InputImage]
    extra_details: str = ""
    quality: str = DEFAULT_QUALITY
    params: Dict[str, Any] = field(default_factory=dict)

    def ordered_images(self) -> List[InputImage]:
        return sorted(self.input_images, key=lambda i: ROLE_ORDER.index(i.role))


@dataclass
class GenerationResult:
    """Outcome of a pipeline run."""
    success: bool
    style_id: str
    generation_time: str
    image_url: Optional[str] = None
    file_name: Optional[str] = None
    prompt: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, style_id: str, generation_time: str, image_url: str,
                  file_name: str, prompt: str) -> "GenerationResult":
        return cls(True, style_id, generation_time,
                   image_url=image_url, file_name=file_name, prompt=prompt)

    @classmethod
    def failed(cls, style_id: str, generation_time: str, error: str) -> "GenerationResult":
        return cls(False, style_id, generation_time, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """JSON envelope in the shape the front end expects."""
        data = {
            "success": self.success,
            "generationTime": self.generation_time,
            "styleId": self.style_id,
        }
        if self.success:
            data.update(imageUrl=self.image_url, fileName=self.file_name, prompt=self.prompt)
        else:
            data["error"] = self.error
        return data


def validate_request(request: GenerationRequest, style: StyleConfig) -> None:
    """
    Check a request against its style before any work is done.

    Raises:
        RequestValidationError: With a message specific to the problem
    """
    if request.quality not in ALLOWED_QUALITIES:
        raise RequestValidationError(
            f"Invalid quality '{request.quality}'. Allowed values: {', '.join(ALLOWED_QUALITIES)}"
        )

    roles = {image.role for image in request.input_images}
    for role in style.required_images:
        if role not in roles:
            raise RequestValidationError(f"Missing required {role} image")

    for image in request.input_images:
        if image.role not in style.required_images:
            raise RequestValidationError(f"Unexpected {image.role} image for style '{style.id}'")
        if not image.data:
            raise RequestValidationError(f"The {image.role} image is empty")
        if image.content_type and not image.content_type.startswith("image/"):
            raise RequestValidationError(
                f"The {image.role} image must be an image file, got '{image.content_type}'"
            )


class GenerationPipeline:
    """
    Runs generation requests end to end.
    Each call is independent; there is no queueing or deduplication.
    """

    def __init__(
        self,
        store: ArtifactStore,
        metadata_writer: MetadataWriter,
        generator: BaseGenerator,
        download_timeout: float = 60,
        default_size: str = "1024x1024",
    ):
        self.store = store
        self.metadata = metadata_writer
        self.generator = generator
        self.download_timeout = download_timeout
        self.default_size = default_size

    def fetch_image(self, result: GeneratorResult) -> bytes:
        """Turn a raw provider result into image bytes, whichever shape it has."""
        if result.b64_data:
            try:
                return base64.b64decode(result.b64_data, validate=True)
            except (binascii.Error, ValueError) as e:
                raise GenerationError(f"Malformed base64 image payload: {e}") from e
        if result.url:
            return download_bytes(result.url, timeout=self.download_timeout)
        logger.error(f"Generation failed:\n{result.request_info}\n{result.response_info}")
        raise GenerationError("Image generation failed")

    def run(self, request: GenerationRequest, style: StyleConfig) -> GenerationResult:
        """
        Execute the full generation flow for one request.

        Args:
            request: Validated generation request
            style: Style the request targets

        Returns:
            GenerationResult; failures never raise
        """
        start_time = time.time()

        def elapsed() -> str:
            return f"{time.time() - start_time:.2f}"

        logger.info(f"Starting {style.id} generation (quality: {request.quality})...")

        try:
            prompt = build_prompt(style, request.params, request.extra_details)
            logger.info(f"Prompt built for {style.id}: {prompt[:80]}...")

            images = request.ordered_images()
            encoded = [(image.role, encode_png(image.data)) for image in images]

            size = style.size or self.default_size
            raw = self.generator.generate(prompt, encoded, request.quality, model=style.model, size=size)
            image_data = self.fetch_image(raw)

            artifact = self.store.persist(
                image_data,
                [(image.role, image.data) for image in images],
                style.id,
            )
            generation_time = elapsed()

            record = self.metadata.build_record(
                artifact,
                style,
                prompt=prompt,
                model=raw.model or style.model or "",
                quality=request.quality,
                size=size,
                extra_details=request.extra_details,
                generation_time=generation_time,
                params=request.params,
            )
            self.metadata.write(artifact.base_name, record)

            logger.info(f"{style.id} generated in {generation_time} seconds: {artifact.file_name}")
            return GenerationResult.succeeded(
                style_id=style.id,
                generation_time=generation_time,
                image_url=self.store.url_for(artifact.file_name),
                file_name=artifact.file_name,
                prompt=prompt,
            )

        except Exception as e:
            logger.error(f"Error generating {style.id}: {e}")
            return GenerationResult.failed(
                style_id=style.id,
                generation_time=elapsed(),
                error=str(e) or "Unknown generation error",
            )
