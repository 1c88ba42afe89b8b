"""Shared test fixtures and configuration."""

from datetime import datetime

import pytest

from verifier import (
    DesignNode,
    Difference,
    ComparisonResult,
    Geometry,
    RenderedElement,
    VerifyConfig,
    Viewport,
)


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary data directory structure."""
    data_dir = tmp_path / 'data'
    reports_dir = data_dir / 'reports'
    data_dir.mkdir()
    reports_dir.mkdir()
    return {
        'data_dir': data_dir,
        'reports_dir': reports_dir,
        'db_path': data_dir / 'verifier.db'
    }


@pytest.fixture
def mock_storage_paths(temp_data_dir, monkeypatch):
    """Patch storage module paths to use temp directories."""
    monkeypatch.setattr('server.storage.DATA_DIR', temp_data_dir['data_dir'])
    monkeypatch.setattr('server.storage.REPORTS_DIR', temp_data_dir['reports_dir'])
    monkeypatch.setattr('server.storage.DB_PATH', temp_data_dir['db_path'])
    return temp_data_dir


@pytest.fixture
def initialized_db(mock_storage_paths):
    """Initialize a test database with schema."""
    from server.storage import init_db
    init_db()
    return mock_storage_paths


@pytest.fixture
def make_node():
    """Factory for DesignNode objects; pass width=None for a structural node."""
    def _make(name='Node', width=100, height=40, node_id='1:1', kind='FRAME', children=None, **kwargs):
        geometry = None if width is None else Geometry(0, 0, width, height)
        return DesignNode(
            id=node_id,
            name=name,
            kind=kind,
            geometry=geometry,
            children=children or [],
            **kwargs,
        )
    return _make


@pytest.fixture
def make_element():
    """Factory for RenderedElement objects."""
    def _make(display_name='div', width=100, height=40, selector='div:nth-child(1)', computed_style=None):
        return RenderedElement(
            selector=selector,
            display_name=display_name,
            geometry=Geometry(10, 20, width, height),
            computed_style=computed_style or {},
        )
    return _make


@pytest.fixture
def desktop():
    return Viewport('Desktop', 1440, 900)


@pytest.fixture
def mobile():
    return Viewport('Mobile', 375, 667)


@pytest.fixture
def generated_at():
    return datetime(2024, 5, 17, 9, 30, 0)


@pytest.fixture
def submit_button(make_node):
    return make_node('Submit Button', 120, 40, node_id='10:2', kind='INSTANCE')


@pytest.fixture
def submit_element(make_element):
    return make_element('button.submit-btn', 123, 40, selector='button:nth-child(1)')


@pytest.fixture
def sample_results(make_node, make_element, desktop, mobile):
    """Three results across two viewports: one clean, one minor, one critical."""
    header = make_node('Header', 1440, 80, node_id='1:2')
    card = make_node('Card', 320, 200, node_id='1:3')
    return [
        ComparisonResult(header, make_element('header.top', 1440, 80), desktop, [], 'shots/Desktop.png'),
        ComparisonResult(
            card, make_element('div.card', 324, 200), desktop,
            [Difference('width', 320, 324, 4)], 'shots/Desktop.png',
        ),
        ComparisonResult(
            card, make_element('div.card', 343, 180), mobile,
            [Difference('width', 320, 343, 23), Difference('height', 200, 180, 20)], 'shots/Mobile.png',
        ),
    ]


@pytest.fixture
def figma_file():
    """A small Figma file response with one page and nested frames."""
    return {
        'name': 'Checkout',
        'schemaVersion': 0,
        'components': {},
        'styles': {},
        'document': {
            'id': '0:0',
            'name': 'Document',
            'type': 'DOCUMENT',
            'children': [
                {
                    'id': '0:1',
                    'name': 'Page 1',
                    'type': 'CANVAS',
                    'children': [
                        {
                            'id': '1:1',
                            'name': 'Checkout Form',
                            'type': 'FRAME',
                            'absoluteBoundingBox': {'x': 0, 'y': 0, 'width': 1440, 'height': 900},
                            'fills': [{'type': 'SOLID', 'color': {'r': 1, 'g': 1, 'b': 1, 'a': 1}}],
                            'children': [
                                {
                                    'id': '1:2',
                                    'name': 'Actions',
                                    'type': 'GROUP',
                                    'children': [
                                        {
                                            'id': '1:3',
                                            'name': 'Submit Button',
                                            'type': 'INSTANCE',
                                            'absoluteBoundingBox': {'x': 40, 'y': 800, 'width': 120, 'height': 40},
                                            'characters': 'Submit',
                                            'style': {'fontSize': 16, 'fontFamily': 'Inter'},
                                        },
                                    ],
                                },
                                {
                                    'id': '1:4',
                                    'name': 'Title',
                                    'type': 'TEXT',
                                    'absoluteBoundingBox': {'x': 40, 'y': 40, 'width': 300, 'height': 32},
                                },
                            ],
                        },
                    ],
                },
                {
                    'id': '0:2',
                    'name': 'Archive',
                    'type': 'CANVAS',
                    'children': [
                        {
                            'id': '2:1',
                            'name': 'Old Frame',
                            'type': 'FRAME',
                            'absoluteBoundingBox': {'x': 0, 'y': 0, 'width': 800, 'height': 600},
                        },
                    ],
                },
            ],
        },
    }


@pytest.fixture
def verify_config(tmp_path):
    """A fully configured VerifyConfig writing into a temp directory."""
    return VerifyConfig(
        figma_token='figd_test_token_123456',
        local_server_url='http://localhost:3000',
        output_dir=str(tmp_path / 'dist'),
    )
