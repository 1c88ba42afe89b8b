"""Figma REST API access: fetch a file and turn it into design nodes."""

import logging

import requests

from .design_tree import flatten, parse_design_file, select_page
from .errors import ConfigError, DesignSourceError
from .models import DesignNode, VerifyConfig

log = logging.getLogger(__name__)


def fetch_design_file(file_id: str, config: VerifyConfig) -> dict:
    """GET the raw file document for ``file_id``."""
    if not config.figma_token:
        raise ConfigError('Figma API token not configured')

    url = f'{config.figma_api_base.rstrip("/")}/files/{file_id}'
    log.info('Fetching design file %s', file_id)
    try:
        response = requests.get(
            url,
            headers={'X-Figma-Token': config.figma_token},
            timeout=config.request_timeout_s,
        )
    except requests.RequestException as exc:
        raise DesignSourceError(f'Failed to fetch Figma file: {exc}') from exc

    if not response.ok:
        raise DesignSourceError(f'Figma API error: {response.status_code} {response.reason}')

    try:
        return response.json()
    except ValueError as exc:
        raise DesignSourceError(f'Figma API returned invalid JSON: {exc}') from exc


def load_design_nodes(file_id: str, config: VerifyConfig) -> tuple[DesignNode, list[DesignNode]]:
    """Fetch, parse and flatten a design file.

    Returns the selected root (document or named page) and its nodes with
    geometry in pre-order.
    """
    document = parse_design_file(fetch_design_file(file_id, config))
    root = select_page(document, config.page_name)
    nodes = flatten(root)
    log.info('Design file %s: %d nodes with dimensions', file_id, len(nodes))
    return root, nodes


def describe_design_nodes(root: DesignNode, nodes: list[DesignNode]) -> str:
    """Human-readable listing of the nodes that will be compared."""
    lines = [
        'Figma file retrieved successfully!',
        '',
        f'File: {root.name}',
        f'Nodes found: {len(nodes)}',
        '',
        'Nodes with dimensions:',
    ]
    for node in nodes:
        lines.append(f'- {node.name} ({node.kind}): {node.geometry.width:g}x{node.geometry.height:g}')
    return '\n'.join(lines)
