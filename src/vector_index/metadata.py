"""Metadata sanitization for search results.

Backends return raw document properties that mix caller metadata with fields
the index uses internally. These helpers produce the caller-facing view.
"""

import copy
from collections.abc import Mapping
from typing import Any

from vector_index.models import DEFAULT_KEY_CONTENT

DEFAULT_VECTOR_FIELD = "vec"
DEFAULT_SCORE_FIELD = "__vec_score"


def sanitize_metadata(
    properties: Mapping[str, Any],
    include_content: bool,
    vector_field: str = DEFAULT_VECTOR_FIELD,
    score_field: str = DEFAULT_SCORE_FIELD,
) -> dict[str, Any]:
    """Deep-copy ``properties`` without the reserved fields.

    Args:
        properties: Raw document properties returned by the backend
        include_content: Keep the ``content`` key when True
        vector_field: Name of the stored vector field
        score_field: Name of the computed score field

    Returns:
        New mapping that never aliases ``properties`` or its values
    """
    excluded = {vector_field, score_field}
    if not include_content:
        excluded.add(DEFAULT_KEY_CONTENT)

    return {
        key: copy.deepcopy(value) for key, value in properties.items() if key not in excluded
    }


def extract_score(properties: Mapping[str, Any], score_field: str = DEFAULT_SCORE_FIELD) -> float:
    """Parse the backend score, which backends serialize as text.

    Missing, non-string or unparsable scores yield 0.0.
    """
    raw = properties.get(score_field)
    if not isinstance(raw, str):
        return 0.0
    try:
        return float(raw)
    except ValueError:
        return 0.0
