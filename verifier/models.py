"""Data classes used throughout the verifier.

Design nodes, rendered elements, comparison output and run configuration
all live here so every other module can import them cleanly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from .errors import ConfigError


@dataclass(frozen=True)
class Geometry:
    """Absolute box: top-left origin, positive down/right."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def scaled(self, factor: float) -> 'Geometry':
        """Return the same box multiplied by ``factor`` on every axis."""
        if factor == 1:
            return self
        return Geometry(self.x * factor, self.y * factor, self.width * factor, self.height * factor)

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass
class DesignNode:
    """A node from the design tree.

    ``style`` holds text/style properties (font size, family...) and
    ``payload`` carries fills, strokes, effects and characters untouched.
    Neither is interpreted by matching; both are echoed into the report.
    """
    id: str
    name: str
    kind: str
    geometry: Optional[Geometry] = None
    style: dict = field(default_factory=dict)
    payload: dict = field(default_factory=dict)
    children: list = field(default_factory=list)  # List[DesignNode]


@dataclass
class RenderedElement:
    """One measured element on the live page."""
    selector: str
    display_name: str   # tag + #id + .class tokens, e.g. 'button#go.primary.large'
    geometry: Geometry
    computed_style: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Viewport:
    """A named width x height test configuration."""
    name: str
    width: int
    height: int

    @property
    def label(self) -> str:
        return f'{self.name} ({self.width}×{self.height})'


DEFAULT_VIEWPORTS = (
    Viewport('Mobile', 375, 667),
    Viewport('Tablet', 768, 1024),
    Viewport('Desktop', 1440, 900),
)

DEFAULT_SELECTORS = (
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'p', 'div', 'span', 'button', 'input', 'img',
)


@dataclass
class Difference:
    """A single property mismatch.

    ``delta`` is numeric for geometric properties and a descriptive tag
    (e.g. 'mismatch') for everything else.
    """
    property: str
    design_value: object
    actual_value: object
    delta: Union[float, str]

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.delta, (int, float)) and not isinstance(self.delta, bool)


@dataclass
class ComparisonResult:
    """A matched (design node, rendered element) pair at one viewport."""
    design_node: DesignNode
    element: RenderedElement
    viewport: Viewport
    differences: list = field(default_factory=list)  # List[Difference]
    screenshot: str = ''


@dataclass
class Summary:
    """Run-level statistics over a list of comparison results."""
    total_comparisons: int = 0
    total_differences: int = 0
    viewports_covered: list = field(default_factory=list)  # sorted names
    critical_issues: int = 0


@dataclass
class StructuredReport:
    """Serialisable snapshot of one analysis run."""
    generated_at: datetime
    results: list  # List[ComparisonResult]
    summary: Summary


@dataclass
class VerifyConfig:
    """Config for running an analysis.

    Passed explicitly into each invocation; nothing here is process-wide.
    """
    figma_token: str = ''
    local_server_url: str = ''
    figma_api_base: str = 'https://api.figma.com/v1'
    page_name: str = ''
    viewports: list = field(default_factory=lambda: list(DEFAULT_VIEWPORTS))
    element_selectors: list = field(default_factory=lambda: list(DEFAULT_SELECTORS))
    headless: bool = True
    wait_until: str = 'networkidle'
    navigation_timeout_ms: int = 30000
    request_timeout_s: float = 30.0
    output_dir: str = 'dist'
    annotate_screenshots: bool = True
    full_page_screenshots: bool = True
    annotation_min_size: int = 20
    device_scale_factor: float = 1.0
    design_scale: float = 1.0   # design units -> CSS px
    materiality_threshold: float = 2.0
    critical_threshold: float = 10.0
    name_threshold: float = 0.5
    size_threshold: float = 0.8
    match_strategy: str = 'first'  # first|best
    style_checks: dict = field(default_factory=dict)  # design style key -> computed style key

    def validate(self) -> None:
        """Raise ConfigError if the config cannot drive an analysis."""
        # Local import: matching imports models.
        from .matching import STRATEGIES

        if not self.figma_token:
            raise ConfigError('Figma API token not configured')
        if not self.local_server_url:
            raise ConfigError('Local server URL not configured')
        if self.match_strategy not in STRATEGIES:
            raise ConfigError(f'Unknown match strategy: {self.match_strategy}')
        if self.design_scale <= 0:
            raise ConfigError('design_scale must be positive')
        for vp in self.viewports:
            if vp.width <= 0 or vp.height <= 0:
                raise ConfigError(f'Viewport {vp.name} must have positive dimensions')


def config_summary(config: VerifyConfig) -> str:
    """Describe a config for display without leaking the full token."""
    token = config.figma_token
    masked = f'{token[:10]}...' if token else '(not set)'
    return '\n'.join([
        'Configuration:',
        f'- Figma API token: {masked}',
        f'- Local server URL: {config.local_server_url or "(not set)"}',
        f'- Viewports: {", ".join(vp.label for vp in config.viewports)}',
        f'- Match strategy: {config.match_strategy}',
        f'- Design scale: {config.design_scale:g}',
    ])


@dataclass
class AnalysisResult:
    """Results for an analysis run."""
    file_id: str
    report: StructuredReport
    report_path: str
    summary_text: str
