"""Aggregation and report generation: structured JSON and HTML/text renderings.

The structured report is the contract every renderer consumes. The HTML
report is meant for people reviewing an implementation; the text summary
is what the CLI and HTTP surfaces print back.
"""

import dataclasses
import html
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from .errors import DataShapeError, ReportBuildError
from .models import (
    ComparisonResult,
    DesignNode,
    Difference,
    Geometry,
    RenderedElement,
    StructuredReport,
    Summary,
    Viewport,
)

log = logging.getLogger(__name__)

CRITICAL_THRESHOLD = 10.0


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _is_critical(result: ComparisonResult, threshold: float) -> bool:
    return any(d.is_numeric and d.delta > threshold for d in result.differences)


def aggregate(results: list[ComparisonResult], critical_threshold: float = CRITICAL_THRESHOLD) -> Summary:
    """Collect run-level counts over all comparison results."""
    return Summary(
        total_comparisons=len(results),
        total_differences=sum(len(r.differences) for r in results),
        viewports_covered=sorted({r.viewport.name for r in results}),
        critical_issues=sum(1 for r in results if _is_critical(r, critical_threshold)),
    )


def build_report(results: list[ComparisonResult], summary: Summary, generated_at: datetime) -> StructuredReport:
    """Snapshot results into a StructuredReport.

    Design nodes are detached from their children so the report only
    carries what was compared.
    """
    snapshot = [
        dataclasses.replace(r, design_node=dataclasses.replace(r.design_node, children=[]),
                            differences=list(r.differences))
        for r in results
    ]
    return StructuredReport(generated_at=generated_at, results=snapshot, summary=summary)


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

def _node_to_dict(node: DesignNode) -> dict:
    return {
        'id': node.id,
        'name': node.name,
        'kind': node.kind,
        'geometry': node.geometry.to_dict() if node.geometry else None,
        'style': node.style,
        'payload': node.payload,
    }


def _result_to_dict(result: ComparisonResult) -> dict:
    return {
        'design_node': _node_to_dict(result.design_node),
        'element': {
            'selector': result.element.selector,
            'display_name': result.element.display_name,
            'geometry': result.element.geometry.to_dict(),
            'computed_style': result.element.computed_style,
        },
        'viewport': {
            'name': result.viewport.name,
            'width': result.viewport.width,
            'height': result.viewport.height,
        },
        'differences': [dataclasses.asdict(d) for d in result.differences],
        'screenshot': result.screenshot,
    }


def report_to_dict(report: StructuredReport) -> dict:
    """Convert a StructuredReport to plain JSON-shaped data."""
    return {
        'generated_at': report.generated_at.isoformat(),
        'results': [_result_to_dict(r) for r in report.results],
        'summary': dataclasses.asdict(report.summary),
    }


def report_from_dict(data: dict) -> StructuredReport:
    """Rebuild a StructuredReport from ``report_to_dict`` output."""
    try:
        results = []
        for raw in data['results']:
            node = raw['design_node']
            element = raw['element']
            results.append(ComparisonResult(
                design_node=DesignNode(
                    id=node['id'],
                    name=node['name'],
                    kind=node['kind'],
                    geometry=Geometry(**node['geometry']) if node.get('geometry') else None,
                    style=node.get('style', {}),
                    payload=node.get('payload', {}),
                ),
                element=RenderedElement(
                    selector=element['selector'],
                    display_name=element['display_name'],
                    geometry=Geometry(**element['geometry']),
                    computed_style=element.get('computed_style', {}),
                ),
                viewport=Viewport(**raw['viewport']),
                differences=[Difference(**d) for d in raw.get('differences', [])],
                screenshot=raw.get('screenshot', ''),
            ))
        return StructuredReport(
            generated_at=datetime.fromisoformat(data['generated_at']),
            results=results,
            summary=Summary(**data['summary']),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise DataShapeError(f'Malformed report data: {exc}') from exc


def serialize_report(report: StructuredReport, indent: Optional[int] = 2) -> str:
    """Serialise a report to JSON text, or raise ReportBuildError."""
    try:
        return json.dumps(report_to_dict(report), indent=indent, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise ReportBuildError(f'Report is not serialisable: {exc}') from exc


def load_report(text: str) -> StructuredReport:
    """Parse JSON produced by ``serialize_report``."""
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise DataShapeError(f'Report is not valid JSON: {exc}') from exc
    if not isinstance(data, dict):
        raise DataShapeError('Report must be a JSON object')
    return report_from_dict(data)


# ---------------------------------------------------------------------------
# HTML rendering
# ---------------------------------------------------------------------------

_STYLE = '''
        body { font-family: Arial, sans-serif; margin: 20px; }
        .header { background: #f5f5f5; padding: 20px; border-radius: 5px; }
        .comparison { border: 1px solid #ddd; margin: 20px 0; padding: 20px; border-radius: 5px; }
        .viewport { background: #e3f2fd; padding: 10px; margin: 10px 0; border-radius: 3px; }
        .differences { background: #ffebee; padding: 10px; margin: 10px 0; border-radius: 3px; }
        .screenshot { max-width: 100%; margin: 10px 0; }
        .difference-item { margin: 5px 0; padding: 5px; background: white; border-left: 3px solid #f44336; }
        .no-differences { color: #4caf50; font-weight: bold; }
        table { width: 100%; border-collapse: collapse; margin: 10px 0; }
        th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
        th { background-color: #f2f2f2; }'''


def format_value(value) -> str:
    """Render numbers without float noise; everything else via str()."""
    if isinstance(value, float):
        return f'{value:.2f}'.rstrip('0').rstrip('.')
    if value is None:
        return 'N/A'
    return str(value)


def _esc(value) -> str:
    return html.escape(format_value(value))


def _table(rows: list[tuple[str, object]]) -> list[str]:
    lines = ['            <table>', '                <tr><th>Property</th><th>Value</th></tr>']
    for label, value in rows:
        lines.append(f'                <tr><td>{html.escape(label)}</td><td>{_esc(value)}</td></tr>')
    lines.append('            </table>')
    return lines


def _px(value) -> str:
    return 'N/A' if value is None else f'{format_value(value)}px'


def _section_header(report: StructuredReport) -> list[str]:
    s = report.summary
    viewports = ', '.join(s.viewports_covered) or 'none'
    return [
        '    <div class="header">',
        '        <h1>Design Verification Report</h1>',
        f'        <p>Generated on: {html.escape(report.generated_at.strftime("%Y-%m-%d %H:%M:%S"))}</p>',
        f'        <p>Total comparisons: {s.total_comparisons}</p>',
        f'        <p>Total differences: {s.total_differences}</p>',
        f'        <p>Viewports tested: {html.escape(viewports)}</p>',
        f'        <p>Critical issues: {s.critical_issues}</p>',
        '    </div>',
    ]


def _section_differences(differences: list[Difference]) -> list[str]:
    lines = ['            <h3>Differences</h3>', '            <div class="differences">']
    if not differences:
        lines.append('                <div class="no-differences">No significant differences found!</div>')
    for d in differences:
        unit = 'px' if d.is_numeric else ''
        lines.append(
            '                <div class="difference-item">'
            f'<strong>{html.escape(d.property)}:</strong> '
            f'Design: {_esc(d.design_value)}, '
            f'Actual: {_esc(d.actual_value)}, '
            f'Difference: {_esc(d.delta)}{unit}</div>'
        )
    lines.append('            </div>')
    return lines


def _section_comparison(index: int, result: ComparisonResult) -> list[str]:
    node = result.design_node
    element = result.element
    geometry = node.geometry
    lines = [
        '        <div class="comparison">',
        f'            <h2>Comparison {index}</h2>',
        f'            <div class="viewport"><strong>Viewport:</strong> {html.escape(result.viewport.label)}</div>',
        '            <h3>Design Node</h3>',
    ]
    lines += _table([
        ('ID', node.id),
        ('Name', node.name),
        ('Type', node.kind),
        ('X', _px(geometry.x if geometry else None)),
        ('Y', _px(geometry.y if geometry else None)),
        ('Width', _px(geometry.width if geometry else None)),
        ('Height', _px(geometry.height if geometry else None)),
    ])
    lines.append('            <h3>Actual Element</h3>')
    lines += _table([
        ('Name', element.display_name),
        ('Selector', element.selector),
        ('X', _px(element.geometry.x)),
        ('Y', _px(element.geometry.y)),
        ('Width', _px(element.geometry.width)),
        ('Height', _px(element.geometry.height)),
    ])
    lines += _section_differences(result.differences)
    lines += [
        '            <h3>Screenshot</h3>',
        f'            <img src="{html.escape(result.screenshot, quote=True)}" alt="Screenshot" class="screenshot">',
        '        </div>',
    ]
    return lines


def render_markup(report: StructuredReport) -> str:
    """Render the full HTML report. Output depends only on ``report``."""
    lines = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '    <meta charset="UTF-8">',
        '    <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        '    <title>Design Verification Report</title>',
        f'    <style>{_STYLE}\n    </style>',
        '</head>',
        '<body>',
    ]
    lines += _section_header(report)
    if not report.results:
        lines.append('    <p class="no-comparisons">No design nodes matched any rendered element.</p>')
    for i, result in enumerate(report.results, 1):
        lines += _section_comparison(i, result)
    lines += ['</body>', '</html>', '']
    return '\n'.join(lines)


# ---------------------------------------------------------------------------
# Text summary
# ---------------------------------------------------------------------------

def render_summary_text(report: StructuredReport) -> str:
    """Short plain-text summary of a run."""
    s = report.summary
    return '\n'.join([
        f'Total comparisons: {s.total_comparisons}',
        f'Total differences found: {s.total_differences}',
        f'Viewports tested: {", ".join(s.viewports_covered)}',
        f'Critical issues: {s.critical_issues}',
    ])


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

def write_json_report(report: StructuredReport, path) -> Path:
    """Serialise first, then write; nothing is written on failure."""
    text = serialize_report(report)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    log.info('JSON report saved to: %s', path)
    return path


def write_html_report(report: StructuredReport, path) -> Path:
    text = render_markup(report)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    log.info('HTML report saved to: %s', path)
    return path
