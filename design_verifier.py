#!/usr/bin/env python3
"""
Figma Design Verifier
Compares a Figma design file with a locally served implementation across
viewport sizes and reports size mismatches.
Requires: pip install playwright && playwright install chromium
"""

import argparse
import logging
import re
import sys
from pathlib import Path

from server.config import settings
from verifier import (
    DEFAULT_SELECTORS,
    DEFAULT_VIEWPORTS,
    STRATEGIES,
    VerifierError,
    VerifyConfig,
    Viewport,
    config_summary,
    describe_design_nodes,
    load_design_nodes,
    load_report,
    run_analysis,
    write_html_report,
)

log = logging.getLogger(__name__)

_VIEWPORT_RE = re.compile(r'^(?P<name>[^:]+):(?P<width>\d+)x(?P<height>\d+)$')


def parse_viewport(text: str) -> Viewport:
    """Parse ``Name:WIDTHxHEIGHT`` (e.g. ``Desktop:1440x900``)."""
    match = _VIEWPORT_RE.match(text.strip())
    if not match:
        raise argparse.ArgumentTypeError(f'Invalid viewport "{text}" (expected Name:WIDTHxHEIGHT)')
    viewport = Viewport(match['name'], int(match['width']), int(match['height']))
    if viewport.width <= 0 or viewport.height <= 0:
        raise argparse.ArgumentTypeError(f'Viewport "{text}" must have positive dimensions')
    return viewport


def build_config(args: argparse.Namespace) -> VerifyConfig:
    """Assemble a VerifyConfig from CLI flags, falling back to the environment."""
    return VerifyConfig(
        figma_token=args.token or settings.figma_token,
        local_server_url=args.url or settings.local_server_url,
        figma_api_base=settings.figma_api_base,
        page_name=getattr(args, 'page', '') or '',
        viewports=getattr(args, 'viewport', None) or list(DEFAULT_VIEWPORTS),
        element_selectors=getattr(args, 'selector', None) or list(DEFAULT_SELECTORS),
        headless=not getattr(args, 'headed', False),
        output_dir=getattr(args, 'output_dir', None) or 'dist',
        design_scale=getattr(args, 'design_scale', 1.0),
        match_strategy=getattr(args, 'strategy', 'first'),
    )


def _cmd_configure(args: argparse.Namespace) -> int:
    config = build_config(args)
    print(config_summary(config))
    return 0


def _cmd_get_file(args: argparse.Namespace) -> int:
    config = build_config(args)
    root, nodes = load_design_nodes(args.file_id, config)
    print(describe_design_nodes(root, nodes))
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    config = build_config(args)
    print('\nFigma Design Verifier')
    print(f'File: {args.file_id}')
    print(f'Target: {config.local_server_url}')
    print('-' * 40)

    result = run_analysis(args.file_id, config, progress_callback=lambda msg: log.info(msg))
    html_path = Path(result.report_path).with_suffix('.html')
    write_html_report(result.report, html_path)

    print('\nDesign implementation analysis completed!')
    print(f'Viewports analysed: {len(config.viewports)}')
    print(f'Elements compared: {result.report.summary.total_comparisons}')
    print(f'Report generated: {result.report_path}')
    print(f'HTML report: {html_path}')
    print('\nSummary:\n' + result.summary_text)
    return 0


def _cmd_render_report(args: argparse.Namespace) -> int:
    report = load_report(Path(args.report).read_text(encoding='utf-8'))
    output = args.output or str(Path(args.report).with_suffix('.html'))
    path = write_html_report(report, output)
    print(f'Detailed HTML report generated: {path}')
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run('server.app:app', host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Verify a web implementation against a Figma design')
    parser.add_argument('--token', help='Figma API access token (default: $FIGMA_TOKEN)')
    parser.add_argument('--url', help='Local development server URL (default: $LOCAL_SERVER_URL)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    configure = sub.add_parser('configure', help='Show the effective configuration')
    configure.set_defaults(func=_cmd_configure)

    get_file = sub.add_parser('get-file', help='List design nodes with dimensions')
    get_file.add_argument('file_id', help='Figma file ID')
    get_file.add_argument('--page', help='Only list nodes on this page')
    get_file.set_defaults(func=_cmd_get_file)

    analyze = sub.add_parser('analyze', help='Compare the design with the running implementation')
    analyze.add_argument('file_id', help='Figma file ID')
    analyze.add_argument('--page', help='Specific page name to analyse')
    analyze.add_argument('--viewport', action='append', type=parse_viewport,
                         help='Viewport as Name:WIDTHxHEIGHT (repeatable)')
    analyze.add_argument('--selector', action='append', help='CSS selector to compare (repeatable)')
    analyze.add_argument('--output-dir', '-o', default='dist', help='Where reports and screenshots go')
    analyze.add_argument('--design-scale', type=float, default=1.0,
                         help='CSS pixels per design unit')
    analyze.add_argument('--strategy', choices=sorted(STRATEGIES), default='first',
                         help='Matching strategy')
    analyze.add_argument('--headed', action='store_true', help='Show the browser window')
    analyze.set_defaults(func=_cmd_analyze)

    render = sub.add_parser('render-report', help='Render a JSON report as HTML')
    render.add_argument('report', help='Path to a design-verification JSON report')
    render.add_argument('--output', help='Output path for the HTML report')
    render.set_defaults(func=_cmd_render_report)

    serve = sub.add_parser('serve', help='Run the HTTP API')
    serve.add_argument('--host', default='127.0.0.1')
    serve.add_argument('--port', type=int, default=8000)
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv=None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='[%(levelname)s] %(message)s',
    )
    try:
        return args.func(args)
    except VerifierError as exc:
        log.error('%s', exc)
        return 1


if __name__ == '__main__':
    sys.exit(main())
