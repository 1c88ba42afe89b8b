"""Property-level comparison of matched design nodes and rendered elements."""

import logging
from typing import Callable, Optional, Sequence

from .design_tree import is_number
from .matching import get_strategy
from .models import (
    ComparisonResult,
    DesignNode,
    Difference,
    RenderedElement,
    VerifyConfig,
    Viewport,
)

log = logging.getLogger(__name__)

MATERIALITY_THRESHOLD = 2.0

# (element, design_node, threshold, scale) -> Difference or None
DiffRule = Callable[[RenderedElement, DesignNode, float, float], Optional[Difference]]


def _geometry_rule(prop: str) -> DiffRule:
    def rule(element, node, threshold, scale):
        if node.geometry is None:
            return None
        design_value = getattr(node.geometry, prop)
        actual_value = getattr(element.geometry, prop)
        if not (is_number(design_value) and is_number(actual_value)):
            log.debug('Skipping %s for %s: non-numeric value', prop, node.name)
            return None
        if scale != 1:
            design_value *= scale
        delta = abs(design_value - actual_value)
        if delta > threshold:
            return Difference(prop, design_value, actual_value, delta)
        return None

    rule.__name__ = f'{prop}_rule'
    return rule


GEOMETRY_RULES: tuple = (
    _geometry_rule('width'),
    _geometry_rule('height'),
)


def _style_text(value) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f'{value:g}px'
    return str(value)


def style_differences(element: RenderedElement, node: DesignNode, style_checks: dict) -> list[Difference]:
    """Raw string comparison of design style keys against computed style.

    ``style_checks`` maps a design style key (e.g. 'fontSize') to the
    computed-style key it corresponds to. Keys missing on either side are
    skipped.
    """
    diffs = []
    for design_key, computed_key in style_checks.items():
        if design_key not in node.style or computed_key not in element.computed_style:
            continue
        expected = _style_text(node.style[design_key])
        actual = element.computed_style[computed_key]
        if expected.strip().lower() != actual.strip().lower():
            diffs.append(Difference(computed_key, expected, actual, 'mismatch'))
    return diffs


def diff(
    element: RenderedElement,
    design_node: DesignNode,
    threshold: float = MATERIALITY_THRESHOLD,
    scale: float = 1.0,
    rules: Sequence[DiffRule] = GEOMETRY_RULES,
    style_checks: Optional[dict] = None,
) -> list[Difference]:
    """Return every difference between a design node and an element.

    Geometric rules run first, in order, followed by any configured style
    checks. A node without geometry yields no geometric differences.
    """
    differences = []
    for rule in rules:
        found = rule(element, design_node, threshold, scale)
        if found is not None:
            differences.append(found)
    if style_checks:
        differences.extend(style_differences(element, design_node, style_checks))
    return differences


def compare_viewport(
    candidates: Sequence[DesignNode],
    elements: Sequence[RenderedElement],
    viewport: Viewport,
    screenshot: str = '',
    config: Optional[VerifyConfig] = None,
) -> list[ComparisonResult]:
    """Match and diff every element captured under ``viewport``.

    Unmatched elements are left out of the result.
    """
    config = config or VerifyConfig()
    strategy = get_strategy(config.match_strategy)

    results = []
    unmatched = 0
    for element in elements:
        node = strategy(
            candidates,
            element,
            scale=config.design_scale,
            name_threshold=config.name_threshold,
            size_threshold=config.size_threshold,
        )
        if node is None:
            unmatched += 1
            continue
        differences = diff(
            element,
            node,
            threshold=config.materiality_threshold,
            scale=config.design_scale,
            style_checks=config.style_checks,
        )
        results.append(ComparisonResult(
            design_node=node,
            element=element,
            viewport=viewport,
            differences=differences,
            screenshot=screenshot,
        ))

    log.info(
        'Viewport %s: %d matched, %d unmatched',
        viewport.name, len(results), unmatched,
    )
    return results
