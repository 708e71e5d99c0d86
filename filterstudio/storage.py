import logging
import random
import string
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Tuple

logger = logging.getLogger(__name__)

IMAGES_URL_PREFIX = "/api/images"
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_LENGTH = 6


@dataclass
class PersistedArtifact:
    file_name: str
    base_name: str
    path: Path
    size: int
    originals: Dict[str, dict] = field(default_factory=dict)


class PathOutsideRootError(ValueError):
    """Raised when a requested path escapes the artifact root."""


class ArtifactStore:
    """Local filesystem store for generated images and their originals."""

    def __init__(self, data_dir: Path):
        self.root = Path(data_dir)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Artifact store at {self.root.resolve()}")

    @staticmethod
    def new_file_name(style_id: str) -> str:
        millis = int(time.time() * 1000)
        suffix = "".join(random.choices(SUFFIX_ALPHABET, k=SUFFIX_LENGTH))
        return f"{style_id}_{millis}_{suffix}.png"

    @staticmethod
    def base_name(file_name: str) -> str:
        return file_name[:-len(".png")] if file_name.endswith(".png") else file_name

    @staticmethod
    def original_file_name(base_name: str, role: str) -> str:
        return f"{base_name}_{role}_original.png"

    @staticmethod
    def url_for(file_name: str) -> str:
        return f"{IMAGES_URL_PREFIX}/{file_name}"

    def write_file(self, file_name: str, data: bytes) -> Path:
        file_path = self.root / file_name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "wb") as f:
            f.write(data)
        return file_path

    def persist(
        self,
        image_data: bytes,
        input_images: Iterable[Tuple[str, bytes]],
        style_id: str,
    ) -> PersistedArtifact:
        """
        Write the generated image and the uploaded originals.

        Originals are stored byte-for-byte as uploaded, next to the generated
        file and sharing its base name.

        Args:
            image_data: Generated image bytes
            input_images: (role, original upload bytes) pairs
            style_id: Style id used as the filename prefix

        Returns:
            PersistedArtifact describing the written files
        """
        file_name = self.new_file_name(style_id)
        base = self.base_name(file_name)

        path = self.write_file(file_name, image_data)
        logger.info(f"Saved generated image: {path}")

        originals = {}
        for role, data in input_images:
            original_name = self.original_file_name(base, role)
            self.write_file(original_name, data)
            originals[role] = {
                "fileName": original_name,
                "url": self.url_for(original_name),
                "size": len(data),
            }
            logger.info(f"Saved original {role} image: {original_name}")

        return PersistedArtifact(
            file_name=file_name,
            base_name=base,
            path=path,
            size=path.stat().st_size,
            originals=originals,
        )

    def resolve(self, relative_path: str) -> Path:
        """
        Resolve a request path strictly under the artifact root.

        Raises:
            PathOutsideRootError: If the path has '..' segments or escapes the root
        """
        normalized = relative_path.replace("\\", "/")
        if any(part == ".." for part in normalized.split("/")):
            raise PathOutsideRootError(f"Parent segments not allowed: {relative_path}")

        root = self.root.resolve()
        candidate = (root / normalized.lstrip("/")).resolve()
        if candidate != root and root not in candidate.parents:
            raise PathOutsideRootError(f"Path escapes artifact root: {relative_path}")
        return candidate

    def exists(self, file_name: str) -> bool:
        try:
            return self.resolve(file_name).is_file()
        except PathOutsideRootError:
            return False
