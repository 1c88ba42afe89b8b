"""Ingestion and flattening of design trees and rendered-element records.

Raw JSON (Figma file documents, browser measurements) is validated here
and converted into the data classes the comparison engine works on.
Anything malformed fails fast with DataShapeError.
"""

import logging
import math
from typing import Optional

from .errors import DataShapeError
from .models import DesignNode, Geometry, RenderedElement

log = logging.getLogger(__name__)

# Figma keys carried through to the report without interpretation.
_PAYLOAD_KEYS = ('fills', 'strokes', 'effects', 'characters', 'constraints')


def is_number(value) -> bool:
    """True for finite ints and floats, excluding bools."""
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


def _number(value, field_name: str, owner: str) -> float:
    if not is_number(value):
        raise DataShapeError(f'{owner}: {field_name} must be a finite number, got {value!r}')
    return value


def parse_geometry(raw, owner: str) -> Optional[Geometry]:
    """Validate a ``{x, y, width, height}`` mapping.

    Returns None when ``raw`` is None (structural node). Width and height
    are required and must be non-negative; x and y default to 0.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise DataShapeError(f'{owner}: geometry must be an object, got {type(raw).__name__}')
    for key in ('width', 'height'):
        if key not in raw:
            raise DataShapeError(f'{owner}: geometry is missing {key}')

    x = _number(raw.get('x', 0), 'x', owner)
    y = _number(raw.get('y', 0), 'y', owner)
    width = _number(raw['width'], 'width', owner)
    height = _number(raw['height'], 'height', owner)
    if width < 0 or height < 0:
        raise DataShapeError(f'{owner}: negative size {width}x{height}')
    return Geometry(x=x, y=y, width=width, height=height)


def parse_design_node(raw: dict, _depth: int = 0) -> DesignNode:
    """Convert a Figma node (and its subtree) into a DesignNode."""
    if not isinstance(raw, dict):
        raise DataShapeError(f'Design node must be an object, got {type(raw).__name__}')
    if _depth > 512:
        raise DataShapeError('Design tree is nested too deeply')

    node_id = str(raw.get('id', ''))
    name = raw.get('name') or ''
    if not isinstance(name, str):
        raise DataShapeError(f'Node {node_id}: name must be a string')
    owner = f'Node {node_id or name or "?"}'

    style = raw.get('style') or {}
    if not isinstance(style, dict):
        raise DataShapeError(f'{owner}: style must be an object')

    children_raw = raw.get('children') or []
    if not isinstance(children_raw, list):
        raise DataShapeError(f'{owner}: children must be a list')

    return DesignNode(
        id=node_id,
        name=name,
        kind=str(raw.get('type', '')),
        geometry=parse_geometry(raw.get('absoluteBoundingBox'), owner),
        style=dict(style),
        payload={k: raw[k] for k in _PAYLOAD_KEYS if k in raw},
        children=[parse_design_node(child, _depth + 1) for child in children_raw],
    )


def parse_design_file(data: dict) -> DesignNode:
    """Parse a full design-file response and return its document root."""
    if not isinstance(data, dict) or not isinstance(data.get('document'), dict):
        raise DataShapeError('Design file has no document node')
    return parse_design_node(data['document'])


def select_page(document: DesignNode, page_name: str = '') -> DesignNode:
    """Return the named top-level page, or the whole document if no name."""
    if not page_name:
        return document
    wanted = page_name.strip().lower()
    for page in document.children:
        if page.name.strip().lower() == wanted:
            return page
    available = ', '.join(p.name for p in document.children) or 'none'
    raise DataShapeError(f'Page "{page_name}" not found (available: {available})')


def flatten(root: DesignNode) -> list[DesignNode]:
    """Pre-order list of every node that carries geometry.

    Structural nodes without geometry are skipped but their subtrees are
    still visited. A node reachable twice is only emitted once.
    """
    nodes: list[DesignNode] = []
    seen: set[int] = set()
    stack = [root]

    while stack:
        node = stack.pop()
        if id(node) in seen:
            log.debug('Skipping already-visited design node %s', node.id)
            continue
        seen.add(id(node))

        if node.geometry is not None:
            nodes.append(node)
        stack.extend(reversed(node.children))

    return nodes


def parse_rendered_element(raw: dict) -> RenderedElement:
    """Convert one browser measurement record into a RenderedElement."""
    if not isinstance(raw, dict):
        raise DataShapeError(f'Rendered element must be an object, got {type(raw).__name__}')
    selector = raw.get('selector') or ''
    owner = f'Element {selector or "?"}'
    geometry = parse_geometry(raw.get('dimensions') or raw.get('geometry'), owner)
    if geometry is None:
        raise DataShapeError(f'{owner}: missing geometry')

    computed = raw.get('computed') or raw.get('computed_style') or {}
    if not isinstance(computed, dict):
        raise DataShapeError(f'{owner}: computed style must be an object')

    return RenderedElement(
        selector=selector,
        display_name=raw.get('name') or raw.get('display_name') or '',
        geometry=geometry,
        computed_style={str(k): str(v) for k, v in computed.items()},
    )


def visible_elements(records: list) -> list[RenderedElement]:
    """Parse measurement records, dropping anything without positive area."""
    elements = []
    for raw in records:
        element = parse_rendered_element(raw)
        if element.geometry.width > 0 and element.geometry.height > 0:
            elements.append(element)
    return elements
