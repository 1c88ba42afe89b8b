"""Background tasks for running analyses."""

import logging
from typing import Any

from server.schemas import AnalysisConfig
from server.storage import FAILED, FINISHED, REPORTS_DIR, RUNNING, attach_results, update_status
from verifier import run_analysis, write_html_report

log = logging.getLogger(__name__)


def run_analysis_task(analysis_id: str, payload: dict[str, Any]) -> None:
    """Run an analysis and persist its reports."""
    update_status(analysis_id, RUNNING)
    try:
        output_dir = REPORTS_DIR / analysis_id
        config = AnalysisConfig(**payload.get('config', {})).to_verify_config(output_dir=str(output_dir))
        result = run_analysis(payload['file_id'], config)

        html_path = write_html_report(result.report, output_dir / 'design-verification-report.html')

        attach_results(analysis_id, result.report_path, str(html_path))
        update_status(analysis_id, FINISHED)
    except Exception as exc:
        log.exception('Analysis %s failed', analysis_id)
        update_status(analysis_id, FAILED, error_message=str(exc)[:200])
