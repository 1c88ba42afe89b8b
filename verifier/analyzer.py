"""Analysis orchestrator: drives the multi-viewport comparison and produces reports."""

import logging
from datetime import datetime
from pathlib import Path

from playwright.sync_api import sync_playwright, TimeoutError as PlaywrightTimeout

from .differ import compare_viewport
from .figma_client import load_design_nodes
from .models import AnalysisResult, VerifyConfig
from .page_helpers import collect_elements, take_annotated_screenshot
from .reporting import aggregate, build_report, render_summary_text, write_json_report

log = logging.getLogger(__name__)


def _measure_viewport(browser, viewport, candidates, config: VerifyConfig, _progress) -> list:
    """Open a fresh context for one viewport, measure, compare and close it."""
    context = browser.new_context(
        viewport={'width': viewport.width, 'height': viewport.height},
        device_scale_factor=config.device_scale_factor,
    )
    try:
        page = context.new_page()
        _progress(f'NAVIGATING TO {config.local_server_url} AT {viewport.label}')
        try:
            page.goto(config.local_server_url, wait_until=config.wait_until,
                      timeout=config.navigation_timeout_ms)
        except PlaywrightTimeout:
            log.warning('Navigation timed out for %s at %s – proceeding anyway',
                        config.local_server_url, viewport.name)
            _progress('NAVIGATION TIMED OUT - PROCEEDING ANYWAY')

        screenshot = take_annotated_screenshot(
            page,
            viewport,
            config.output_dir,
            annotate=config.annotate_screenshots,
            min_size=config.annotation_min_size,
            full_page=config.full_page_screenshots,
        )
        elements = collect_elements(page, config.element_selectors)
        _progress(f'COMPARING {len(elements)} ELEMENTS AT {viewport.label}')
        return compare_viewport(candidates, elements, viewport, screenshot, config)
    finally:
        context.close()


def run_analysis(file_id: str, config: VerifyConfig, progress_callback=None) -> AnalysisResult:
    """Compare a design file against the configured page at every viewport.

    Args:
        file_id: Figma file key.
        config: Analysis configuration; must carry a token and server URL.
        progress_callback: Optional callable(str) receiving human-readable
            progress messages.
    """
    _progress = progress_callback or (lambda msg: None)
    config.validate()

    _progress('FETCHING DESIGN FILE...')
    _, candidates = load_design_nodes(file_id, config)
    _progress(f'FOUND {len(candidates)} DESIGN NODES WITH DIMENSIONS')

    results = []
    with sync_playwright() as p:
        _progress('LAUNCHING BROWSER...')
        browser = p.chromium.launch(headless=config.headless)
        try:
            for idx, viewport in enumerate(config.viewports, start=1):
                _progress(f'ANALYSING VIEWPORT {idx}/{len(config.viewports)}: {viewport.label}')
                log.info('Analysing viewport %s', viewport.label)
                try:
                    results.extend(_measure_viewport(browser, viewport, candidates, config, _progress))
                except Exception as exc:
                    log.warning('Failed to analyse viewport %s: %s', viewport.name, exc)
                    _progress(f'FAILED: {viewport.name} ({exc})')
                    raise
        finally:
            browser.close()

    _progress('GENERATING REPORT...')
    summary = aggregate(results, critical_threshold=config.critical_threshold)
    report = build_report(results, summary, datetime.now())
    report_path = write_json_report(report, Path(config.output_dir) / 'design-verification-report.json')
    _progress('ANALYSIS COMPLETE')

    return AnalysisResult(
        file_id=file_id,
        report=report,
        report_path=str(report_path),
        summary_text=render_summary_text(report),
    )
