"""
Gallery read-back of generated artifacts.
"""
import logging
import time
from typing import Any, Dict, List, Optional

from .catalog import StyleCatalog
from .metadata import MetadataWriter
from .storage import ArtifactStore

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Not specified"
RECORD_SECTIONS = ("generatedImage", "generation", "originalImages")


class GalleryService:
    """Rebuilds the list of generated images from their metadata records."""

    def __init__(self, store: ArtifactStore, metadata: MetadataWriter, catalog: StyleCatalog):
        self.store = store
        self.metadata = metadata
        self.catalog = catalog

    def normalize(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten a metadata record for display, filling optional fields."""
        generated = record.get("generatedImage") or {}
        generation = record.get("generation") or {}
        originals = record.get("originalImages") or {}
        file_name = generated["fileName"]
        style_id = generation.get("styleId") or file_name.split("_")[0]

        entry = {
            "fileName": file_name,
            "imageUrl": generated.get("url") or self.store.url_for(file_name),
            "createdAt": generated.get("createdAt"),
            "size": generated.get("size", 0),
            "styleId": style_id,
            "timestamp": record.get("timestamp", 0),
            "prompt": generation.get("prompt", ""),
            "generationTime": generated.get("generationTime") or "0",
            "extraDetails": generation.get("extraDetails") or NOT_SPECIFIED,
            "celebrityName": generation.get("celebrityName") or NOT_SPECIFIED,
            "quality": generation.get("quality", ""),
            "originalImages": originals,
            "metadata": record,
        }

        style = self.catalog.get(style_id)
        if style is not None:
            entry.update(style.display_fields(generation))
            entry["styleName"] = style.name
            entry["emoji"] = style.emoji
            entry["availableImages"] = [r for r in style.required_images if r in originals]
        else:
            entry.update(displayTitle=style_id, displaySubtitle="", displayType="")
            entry["styleName"] = style_id
            entry["emoji"] = ""
            entry["availableImages"] = list(originals)
        return entry

    def list_artifacts(self, style_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List generated images, newest first.

        Records whose image file is no longer on disk are skipped.

        Args:
            style_id: Only return entries for this style when given
        """
        entries = []
        for record in self.metadata.read_records():
            if not all(isinstance(record.get(key) or {}, dict) for key in RECORD_SECTIONS):
                logger.warning("Skipping metadata record with malformed sections")
                continue
            file_name = (record.get("generatedImage") or {}).get("fileName")
            if not isinstance(file_name, str) or not file_name or not self.store.exists(file_name):
                logger.debug(f"Skipping metadata without image file: {file_name}")
                continue
            entry = self.normalize(record)
            if style_id and entry["styleId"] != style_id:
                continue
            entries.append(entry)

        entries.sort(key=lambda e: e["timestamp"] or 0, reverse=True)
        return entries

    def latest(self) -> Dict[str, Any]:
        entries = self.list_artifacts()
        if not entries:
            return {"timestamp": int(time.time() * 1000), "image": None, "totalImages": 0}
        latest = entries[0]
        return {
            "timestamp": latest["timestamp"],
            "image": latest,
            "totalImages": len(entries),
            "imageId": latest["fileName"],
        }

    def stats(self) -> Dict[str, Any]:
        entries = self.list_artifacts()
        style_stats: Dict[str, int] = {}
        for entry in entries:
            style_stats[entry["styleId"]] = style_stats.get(entry["styleId"], 0) + 1
        return {
            "totalImages": len(entries),
            "totalSize": sum(e["size"] or 0 for e in entries),
            "styleStats": style_stats,
            "lastGenerated": entries[0]["createdAt"] if entries else None,
        }
