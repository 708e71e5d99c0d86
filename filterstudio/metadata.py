"""
Metadata sidecar persistence.

Each generation gets one JSON record. The content-collection copy is
canonical; the legacy metadata/ copy is a mirror with identical text that can
be rebuilt from the canonical directory at any time.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from .catalog import StyleConfig
from .storage import ArtifactStore, PersistedArtifact

logger = logging.getLogger(__name__)

METADATA_VERSION = "1.0"
LEGACY_SUFFIX = "_metadata.json"


@dataclass
class MetadataPaths:
    content_path: Path
    legacy_path: Path


class MetadataWriter:
    """Writes and reads generation metadata records."""

    def __init__(self, content_dir: Path, legacy_dir: Path):
        self.content_dir = Path(content_dir)
        self.legacy_dir = Path(legacy_dir)

    def content_path(self, base_name: str) -> Path:
        return self.content_dir / f"{base_name}.json"

    def legacy_path(self, base_name: str) -> Path:
        return self.legacy_dir / f"{base_name}{LEGACY_SUFFIX}"

    @staticmethod
    def build_record(
        artifact: PersistedArtifact,
        style: StyleConfig,
        prompt: str,
        model: str,
        quality: str,
        size: str,
        extra_details: str,
        generation_time: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Assemble a GenerationMetadataRecord for a persisted artifact."""
        generation = {
            "styleId": style.id,
            "type": style.id,
            "theme": style.theme,
            "extraDetails": extra_details.strip() or style.default_details,
            "prompt": prompt,
            "model": model,
            "quality": quality,
            "size": size,
        }
        generation.update(style.extras)
        for key, value in (params or {}).items():
            if value:
                generation[key] = value

        now = datetime.now(timezone.utc)
        return {
            "generatedImage": {
                "fileName": artifact.file_name,
                "url": ArtifactStore.url_for(artifact.file_name),
                "createdAt": now.isoformat().replace("+00:00", "Z"),
                "generationTime": generation_time,
                "size": artifact.size,
            },
            "originalImages": artifact.originals,
            "generation": generation,
            "timestamp": int(now.timestamp() * 1000),
            "version": METADATA_VERSION,
        }

    def write(self, base_name: str, record: Dict[str, Any]) -> Optional[MetadataPaths]:
        """
        Write the record to the canonical and legacy locations.

        Failures are logged and swallowed; a missing sidecar never fails a
        generation.

        Returns:
            The written paths, or None if any write failed
        """
        try:
            text = json.dumps(record, indent=2, ensure_ascii=False)

            content_path = self.content_path(base_name)
            content_path.parent.mkdir(parents=True, exist_ok=True)
            content_path.write_text(text, encoding="utf-8")

            legacy_path = self.legacy_path(base_name)
            legacy_path.parent.mkdir(parents=True, exist_ok=True)
            legacy_path.write_text(text, encoding="utf-8")

            logger.info(f"Metadata saved: {content_path}")
            return MetadataPaths(content_path=content_path, legacy_path=legacy_path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not save metadata for {base_name}: {e}")
            return None

    def rebuild_mirror(self) -> int:
        """
        Regenerate every legacy copy from the canonical directory.

        Returns:
            Number of legacy files written
        """
        if not self.content_dir.is_dir():
            return 0

        self.legacy_dir.mkdir(parents=True, exist_ok=True)
        count = 0
        for content_path in sorted(self.content_dir.glob("*.json")):
            text = content_path.read_text(encoding="utf-8")
            self.legacy_path(content_path.stem).write_text(text, encoding="utf-8")
            count += 1
        logger.info(f"Rebuilt {count} legacy metadata files")
        return count

    def _iter_dir(self, directory: Path, pattern: str) -> Iterator[Dict[str, Any]]:
        for path in sorted(directory.glob(pattern)):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    record = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Error reading metadata {path.name}: {e}")
                continue
            if isinstance(record, dict):
                yield record

    def read_records(self) -> Iterator[Dict[str, Any]]:
        """
        Yield parsed metadata records.

        The legacy directory is scanned first; the content collection is used
        when the legacy directory holds no records.
        """
        found = False
        if self.legacy_dir.is_dir():
            for record in self._iter_dir(self.legacy_dir, f"*{LEGACY_SUFFIX}"):
                found = True
                yield record
        if not found and self.content_dir.is_dir():
            yield from self._iter_dir(self.content_dir, "*.json")
