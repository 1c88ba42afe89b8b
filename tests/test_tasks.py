"""Tests for the background analysis task."""

from unittest.mock import patch

import pytest

from verifier import AnalysisResult, DesignSourceError, aggregate, build_report


@pytest.fixture
def tasks_env(initialized_db, monkeypatch):
    """Point the worker at the temp reports directory."""
    monkeypatch.setattr('worker.tasks.REPORTS_DIR', initialized_db['reports_dir'])
    return initialized_db


@pytest.fixture
def payload():
    return {
        'file_id': 'abc123',
        'config': {
            'figma_token': 'figd_secret',
            'local_server_url': 'http://localhost:3000',
            'viewports': [{'name': 'Desktop', 'width': 1440, 'height': 900}],
        },
    }


class TestRunAnalysisTask:
    """Tests for run_analysis_task."""

    def test_success_attaches_reports(self, tasks_env, payload, sample_results, generated_at):
        from server.storage import create_analysis, get_analysis
        from worker.tasks import run_analysis_task

        analysis_id = create_analysis('abc123', payload['config'])
        report = build_report(sample_results, aggregate(sample_results), generated_at)
        json_path = str(tasks_env['reports_dir'] / analysis_id / 'design-verification-report.json')
        result = AnalysisResult('abc123', report, json_path, 'Total comparisons: 3')

        with patch('worker.tasks.run_analysis', return_value=result) as run:
            run_analysis_task(analysis_id, payload)

        analysis = get_analysis(analysis_id)
        assert analysis['status'] == 'finished'
        assert analysis['report_json_path'] == json_path
        html = tasks_env['reports_dir'] / analysis_id / 'design-verification-report.html'
        assert analysis['report_html_path'] == str(html)
        assert 'Total comparisons: 3' in html.read_text(encoding='utf-8')

        file_id, config = run.call_args[0]
        assert file_id == 'abc123'
        assert config.figma_token == 'figd_secret'
        assert [vp.name for vp in config.viewports] == ['Desktop']
        assert config.output_dir == str(tasks_env['reports_dir'] / analysis_id)

    def test_failure_marks_job(self, tasks_env, payload):
        from server.storage import create_analysis, get_analysis
        from worker.tasks import run_analysis_task

        analysis_id = create_analysis('abc123', payload['config'])

        with patch('worker.tasks.run_analysis', side_effect=DesignSourceError('Figma API error: 404 Not Found')):
            run_analysis_task(analysis_id, payload)

        analysis = get_analysis(analysis_id)
        assert analysis['status'] == 'failed'
        assert analysis['error_message'] == 'Figma API error: 404 Not Found'
        assert analysis['report_html_path'] is None

    def test_error_message_truncated(self, tasks_env, payload):
        from server.storage import create_analysis, get_analysis
        from worker.tasks import run_analysis_task

        analysis_id = create_analysis('abc123', payload['config'])

        with patch('worker.tasks.run_analysis', side_effect=RuntimeError('x' * 500)):
            run_analysis_task(analysis_id, payload)

        assert len(get_analysis(analysis_id)['error_message']) == 200
