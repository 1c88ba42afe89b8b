"""FastAPI app exposing design verification as HTTP operations."""

from typing import Optional

from fastapi import Body, FastAPI, Header, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from verifier import (
    ConfigError,
    DataShapeError,
    DesignSourceError,
    VerifierError,
    describe_design_nodes,
    load_design_nodes,
    render_markup,
    report_from_dict,
)
from .queue import enqueue_analysis
from .schemas import AnalysisConfig, AnalysisRequest
from .storage import QUEUED, STATUSES, init_db, create_analysis, get_analysis, list_analyses


app = FastAPI(title='Figma Design Verifier')

_ERROR_STATUS = (
    (ConfigError, 400),
    (DataShapeError, 400),
    (DesignSourceError, 502),
)


@app.exception_handler(VerifierError)
async def verifier_error_handler(request: Request, exc: VerifierError):
    """Map verifier failures onto HTTP status codes."""
    status = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500)
    return JSONResponse(status_code=status, content={'detail': str(exc)})


@app.on_event('startup')
def on_startup() -> None:
    """Initialize DB on startup."""
    init_db()


@app.get('/health')
def health() -> dict:
    """Health check."""
    return {'status': 'ok'}


@app.get('/api/figma/files/{file_id}')
def figma_file(
    file_id: str,
    page_name: str = '',
    x_figma_token: Optional[str] = Header(default=None),
):
    """List the design nodes with dimensions in a Figma file."""
    config = AnalysisConfig(figma_token=x_figma_token or '', page_name=page_name).to_verify_config()
    root, nodes = load_design_nodes(file_id, config)
    return {
        'name': root.name,
        'nodes': [
            {
                'id': n.id,
                'name': n.name,
                'kind': n.kind,
                'width': n.geometry.width,
                'height': n.geometry.height,
            }
            for n in nodes
        ],
        'summary': describe_design_nodes(root, nodes),
    }


@app.post('/api/analyses')
def create_analysis_job(payload: AnalysisRequest):
    """Validate and enqueue an analysis job."""
    payload.config.to_verify_config().validate()
    analysis_id = create_analysis(payload.file_id, payload.config.model_dump())
    enqueue_analysis(analysis_id, payload.model_dump())
    return {'id': analysis_id, 'status': QUEUED}


@app.get('/api/analyses')
def analyses_list(status: Optional[str] = None, limit: int = 50):
    """List recent analyses, optionally filtered by status."""
    if status is not None and status not in STATUSES:
        raise HTTPException(status_code=400, detail=f'Unknown status: {status}')
    return list_analyses(limit=limit, status=status)


@app.get('/api/analyses/{analysis_id}')
def analysis_detail(analysis_id: str):
    """Get analysis status and metadata."""
    analysis = get_analysis(analysis_id)
    if not analysis:
        raise HTTPException(status_code=404, detail='Analysis not found')
    return analysis


@app.get('/api/analyses/{analysis_id}/report')
def analysis_report(analysis_id: str):
    """Get the HTML report."""
    analysis = get_analysis(analysis_id)
    if not analysis or not analysis.get('report_html_path'):
        raise HTTPException(status_code=404, detail='Report not found')
    return FileResponse(analysis['report_html_path'], media_type='text/html')


@app.get('/api/analyses/{analysis_id}/report.json')
def analysis_report_json(analysis_id: str):
    """Get the structured JSON report."""
    analysis = get_analysis(analysis_id)
    if not analysis or not analysis.get('report_json_path'):
        raise HTTPException(status_code=404, detail='Report not found')
    return FileResponse(analysis['report_json_path'], media_type='application/json')


@app.post('/api/reports/render', response_class=HTMLResponse)
def render_report(report: dict = Body(...)):
    """Render a structured report (as produced by report.json) to HTML."""
    return HTMLResponse(render_markup(report_from_dict(report)))

