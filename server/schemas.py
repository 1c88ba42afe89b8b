"""Pydantic schemas for API."""

from pydantic import BaseModel, Field

from verifier import DEFAULT_SELECTORS, DEFAULT_VIEWPORTS, VerifyConfig, Viewport
from .config import settings


class ViewportModel(BaseModel):
    """A named viewport size."""
    name: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class AnalysisConfig(BaseModel):
    """Config passed to the analyzer.

    Fields mirror VerifyConfig in the verifier package. Token and server
    URL fall back to the server's environment when omitted.
    """
    figma_token: str = ''
    local_server_url: str = ''
    page_name: str = ''
    viewports: list[ViewportModel] = Field(default_factory=list)
    element_selectors: list[str] = Field(default_factory=list)
    headless: bool = True
    wait_until: str = 'networkidle'
    navigation_timeout_ms: int = 30000
    annotate_screenshots: bool = True
    full_page_screenshots: bool = True
    device_scale_factor: float = 1.0
    design_scale: float = Field(default=1.0, gt=0)
    materiality_threshold: float = 2.0
    critical_threshold: float = 10.0
    match_strategy: str = 'first'
    style_checks: dict[str, str] = Field(default_factory=dict)

    def to_verify_config(self, output_dir: str = 'dist') -> VerifyConfig:
        """Build the VerifyConfig an analysis runs with."""
        fields = self.model_dump(exclude={'viewports', 'element_selectors', 'figma_token', 'local_server_url'})
        return VerifyConfig(
            figma_token=self.figma_token or settings.figma_token,
            local_server_url=self.local_server_url or settings.local_server_url,
            figma_api_base=settings.figma_api_base,
            viewports=[Viewport(v.name, v.width, v.height) for v in self.viewports] or list(DEFAULT_VIEWPORTS),
            element_selectors=list(self.element_selectors) or list(DEFAULT_SELECTORS),
            output_dir=output_dir,
            **fields,
        )


class AnalysisRequest(BaseModel):
    """Analysis request payload."""
    file_id: str
    config: AnalysisConfig = AnalysisConfig()
