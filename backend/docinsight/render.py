from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Any

from .models import AnalyzeResult


KEY_PLACEHOLDER = "Unknown"
VALUE_PLACEHOLDER = "N/A"


@dataclass(frozen=True)
class KeyValueView:
    key: str
    value: str


@dataclass(frozen=True)
class RenderedResult:
    key_value_pairs: list[KeyValueView] = field(default_factory=list)
    content: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.key_value_pairs and self.content is None

    def to_html(self) -> str:
        parts: list[str] = []
        if self.key_value_pairs:
            rows = "".join(
                '<div class="key-value-pair">'
                f'<span class="key">{html.escape(kv.key)}</span>'
                f'<span class="value">{html.escape(kv.value)}</span>'
                "</div>"
                for kv in self.key_value_pairs
            )
            parts.append(f'<div class="result-section"><h3>Key Information</h3>{rows}</div>')
        if self.content is not None:
            parts.append(
                '<div class="result-section"><h3>Full Document Text</h3>'
                f'<div class="document-text">{html.escape(self.content)}</div></div>'
            )
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "keyValuePairs": [{"key": kv.key, "value": kv.value} for kv in self.key_value_pairs],
            "content": self.content,
            "html": self.to_html(),
        }


def render_result(analyze_result: dict[str, Any] | None) -> RenderedResult:
    """
    Project an ``analyzeResult`` payload into the two display sections.

    A section is left out when its field is missing or empty. Pairs without a
    key or value element are skipped; pairs whose element has no text get a
    placeholder instead.
    """
    parsed = AnalyzeResult.model_validate(analyze_result or {})

    pairs: list[KeyValueView] = []
    for kv in parsed.keyValuePairs or []:
        if kv.key is None or kv.value is None:
            continue
        pairs.append(
            KeyValueView(
                key=kv.key.content or KEY_PLACEHOLDER,
                value=kv.value.content or VALUE_PLACEHOLDER,
            )
        )

    return RenderedResult(key_value_pairs=pairs, content=parsed.content or None)
