"""Similarity scoring and design-node matching strategies.

A strategy is any callable ``(candidates, element, **thresholds)`` that
returns the chosen DesignNode or None. ``first_match`` is the default
policy; ``best_match`` scores every candidate instead of stopping early.
"""

import re
from typing import Callable, Optional, Sequence

from .design_tree import is_number
from .errors import ConfigError
from .models import DesignNode, Geometry, RenderedElement

NAME_THRESHOLD = 0.5
SIZE_THRESHOLD = 0.8

_ELEMENT_TOKEN_SPLIT = re.compile(r'[#.\s]+')


def _design_tokens(name: str) -> list[str]:
    return [t for t in name.lower().split() if t]


def _element_tokens(name: str) -> list[str]:
    return [t for t in _ELEMENT_TOKEN_SPLIT.split(name.lower()) if t]


def name_similarity(design_name: str, element_name: str) -> float:
    """Token overlap between a design label and an element's tag/id/classes.

    A design token matches when it is a substring of, or contains, any
    element token. Score is matches / max(token counts).
    """
    design_words = _design_tokens(design_name)
    element_words = _element_tokens(element_name)
    if not design_words or not element_words:
        return 0.0

    matches = 0
    for word in design_words:
        for other in element_words:
            if word in other or other in word:
                matches += 1
                break

    return matches / max(len(design_words), len(element_words))


def _axis_similarity(a: float, b: float) -> Optional[float]:
    largest = max(a, b)
    if largest <= 0:
        return None
    return 1 - abs(a - b) / largest


def size_similarity(design_geom: Optional[Geometry], element_geom: Optional[Geometry]) -> float:
    """Average per-axis closeness of width and height, in [0, 1].

    An axis where both sides are zero makes the pair non-matching.
    """
    if design_geom is None or element_geom is None:
        return 0.0
    sizes = (design_geom.width, design_geom.height, element_geom.width, element_geom.height)
    if not all(is_number(v) for v in sizes):
        return 0.0

    width = _axis_similarity(design_geom.width, element_geom.width)
    height = _axis_similarity(design_geom.height, element_geom.height)
    if width is None or height is None:
        return 0.0

    return min(1.0, max(0.0, (width + height) / 2))


def _scores(node: DesignNode, element: RenderedElement, scale: float) -> tuple[float, float]:
    geometry = node.geometry
    if geometry is not None and all(is_number(v) for v in geometry.to_dict().values()):
        geometry = geometry.scaled(scale)
    return (
        name_similarity(node.name, element.display_name),
        size_similarity(geometry, element.geometry),
    )


def first_match(
    candidates: Sequence[DesignNode],
    element: RenderedElement,
    scale: float = 1.0,
    name_threshold: float = NAME_THRESHOLD,
    size_threshold: float = SIZE_THRESHOLD,
) -> Optional[DesignNode]:
    """Return the first candidate whose name OR size similarity clears its threshold."""
    for node in candidates:
        name_score, size_score = _scores(node, element, scale)
        if name_score > name_threshold or size_score > size_threshold:
            return node
    return None


def best_match(
    candidates: Sequence[DesignNode],
    element: RenderedElement,
    scale: float = 1.0,
    name_threshold: float = NAME_THRESHOLD,
    size_threshold: float = SIZE_THRESHOLD,
) -> Optional[DesignNode]:
    """Return the qualifying candidate with the highest combined score.

    Ties go to the earliest candidate so traversal order stays the tie-break.
    """
    best: Optional[DesignNode] = None
    best_score = -1.0
    for node in candidates:
        name_score, size_score = _scores(node, element, scale)
        if not (name_score > name_threshold or size_score > size_threshold):
            continue
        combined = (name_score + size_score) / 2
        if combined > best_score:
            best, best_score = node, combined
    return best


MatchStrategy = Callable[..., Optional[DesignNode]]

STRATEGIES: dict[str, MatchStrategy] = {
    'first': first_match,
    'best': best_match,
}


def get_strategy(name: str) -> MatchStrategy:
    """Look up a registered strategy by name."""
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ConfigError(f'Unknown match strategy: {name}') from None
