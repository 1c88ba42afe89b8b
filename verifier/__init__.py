"""Figma Design Verifier – core package.

Re-exports all public symbols so consumers can do:
    from verifier import run_analysis, VerifyConfig
or run the CLI in the top-level module:
    python design_verifier.py analyze <file_id>
"""

# Errors
from .errors import (  # noqa: F401
    VerifierError,
    ConfigError,
    DataShapeError,
    DesignSourceError,
    ReportBuildError,
)

# Models
from .models import (  # noqa: F401
    Geometry,
    DesignNode,
    RenderedElement,
    Viewport,
    Difference,
    ComparisonResult,
    Summary,
    StructuredReport,
    VerifyConfig,
    AnalysisResult,
    DEFAULT_VIEWPORTS,
    DEFAULT_SELECTORS,
    config_summary,
)

# Design tree ingestion
from .design_tree import (  # noqa: F401
    is_number,
    parse_geometry,
    parse_design_node,
    parse_design_file,
    parse_rendered_element,
    visible_elements,
    select_page,
    flatten,
)

# Matching
from .matching import (  # noqa: F401
    NAME_THRESHOLD,
    SIZE_THRESHOLD,
    STRATEGIES,
    name_similarity,
    size_similarity,
    first_match,
    best_match,
    get_strategy,
)

# Diffing
from .differ import (  # noqa: F401
    MATERIALITY_THRESHOLD,
    GEOMETRY_RULES,
    diff,
    style_differences,
    compare_viewport,
)

# Reporting
from .reporting import (  # noqa: F401
    CRITICAL_THRESHOLD,
    aggregate,
    build_report,
    report_to_dict,
    report_from_dict,
    serialize_report,
    load_report,
    render_markup,
    render_summary_text,
    write_json_report,
    write_html_report,
)

# Design source
from .figma_client import (  # noqa: F401
    fetch_design_file,
    load_design_nodes,
    describe_design_nodes,
)

# Orchestrator
from .analyzer import run_analysis  # noqa: F401
