"""
Prompt construction for generation styles.
"""
from typing import Any, Dict, Optional

from ..catalog import StyleConfig

# Substitutions used when a template placeholder has no value in the request
PLACEHOLDER_DEFAULTS = {
    "celebrityName": "a celebrity",
}


class _TemplateParams(dict):
    def __missing__(self, key):
        return PLACEHOLDER_DEFAULTS.get(key, "")


def build_prompt(style: StyleConfig, params: Optional[Dict[str, Any]], extra_details: str) -> str:
    """
    Build the final prompt for a style.

    The base template is returned verbatim when extra_details is empty or
    whitespace; otherwise the details are appended after the style's label.

    Args:
        style: Style whose template is used
        params: Single-field substitutions such as celebrityName
        extra_details: Free text from the user, appended as-is

    Returns:
        The prompt string sent to the image API
    """
    values = _TemplateParams()
    for key, value in (params or {}).items():
        if value is not None and str(value).strip():
            values[key] = str(value).strip()

    prompt = style.prompt_template.format_map(values)

    if extra_details and extra_details.strip():
        prompt += f"\n\n{style.details_label}: {extra_details}"

    return prompt
