"""
Style catalog.
Each style is a data-only record loaded from styles.json and consumed by the
generation pipeline.
"""
import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

STYLES_FILE_PATH = Path(__file__).parent / "styles.json"

VALID_ROLES = ("person", "celebrity")


@dataclass
class StyleConfig:
    """Configuration for a generation style."""
    id: str
    name: str
    prompt_template: str
    emoji: str = ""
    description: str = ""
    required_images: List[str] = field(default_factory=lambda: ["person"])
    details_label: str = "Additional details"
    default_details: str = ""
    theme: str = ""
    type_label: str = ""
    legacy_route: Optional[str] = None
    model: Optional[str] = None
    size: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)
    display: Dict[str, str] = field(default_factory=dict)

    @property
    def has_celebrity(self) -> bool:
        return "celebrity" in self.required_images

    def display_fields(self, generation: Dict[str, Any]) -> Dict[str, str]:
        """
        Resolve the presentation-only title/subtitle/type for a record.

        Args:
            generation: The "generation" section of a metadata record

        Returns:
            Dict with displayTitle, displaySubtitle and displayType
        """
        display = self.display
        title = display.get("title")
        if title is None:
            title = generation.get(display.get("title_field", "")) or display.get("title_default", self.name)

        subtitle = display.get("subtitle")
        if subtitle is None:
            subtitle = generation.get(display.get("subtitle_field", "")) or display.get("subtitle_default", "")

        return {
            "displayTitle": title,
            "displaySubtitle": subtitle,
            "displayType": self.type_label,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["has_celebrity"] = self.has_celebrity
        return data


def load_styles_from_file(path: Path = STYLES_FILE_PATH) -> List[StyleConfig]:
    """
    Load style configurations from a styles.json file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a style declares an unknown image role
    """
    if not path.exists():
        raise FileNotFoundError(f"Styles file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    styles = []
    for raw in data.get("styles", []):
        style = StyleConfig(**raw)
        unknown = [r for r in style.required_images if r not in VALID_ROLES]
        if unknown or not style.required_images:
            raise ValueError(f"Style '{style.id}' has invalid image roles: {style.required_images}")
        styles.append(style)
    return styles


class StyleCatalog:
    """Lookup of styles by id and by legacy route slug."""

    def __init__(self, styles: List[StyleConfig]):
        self._styles = {s.id: s for s in styles}
        self._routes = {s.legacy_route: s for s in styles if s.legacy_route}
        logger.info(f"Loaded {len(self._styles)} styles")

    @classmethod
    def from_file(cls, path: Path = STYLES_FILE_PATH) -> "StyleCatalog":
        return cls(load_styles_from_file(path))

    def get(self, style_id: str) -> Optional[StyleConfig]:
        return self._styles.get(style_id)

    def by_route(self, route: str) -> Optional[StyleConfig]:
        return self._routes.get(route)

    def all(self) -> List[StyleConfig]:
        return list(self._styles.values())

    def __contains__(self, style_id: str) -> bool:
        return style_id in self._styles

    def __len__(self) -> int:
        return len(self._styles)
