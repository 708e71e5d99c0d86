"""
Generation Module
Parameterized style generation pipeline and its image API clients.
"""
from .pipeline import (
    ALLOWED_QUALITIES,
    GenerationPipeline,
    GenerationRequest,
    GenerationResult,
    InputImage,
    RequestValidationError,
    validate_request,
)
from .clients import get_generator, GeneratorResult

__all__ = [
    "ALLOWED_QUALITIES",
    "GenerationPipeline",
    "GenerationRequest",
    "GenerationResult",
    "InputImage",
    "RequestValidationError",
    "validate_request",
    "get_generator",
    "GeneratorResult",
]
