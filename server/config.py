"""Configuration for the API server and CLI defaults."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """Environment-backed settings.

    Only read at the edges (CLI, HTTP) to fill in a VerifyConfig; the
    analysis itself never looks at them.
    """
    figma_token: str = os.getenv('FIGMA_TOKEN', '')
    local_server_url: str = os.getenv('LOCAL_SERVER_URL', '')
    figma_api_base: str = os.getenv('FIGMA_API_BASE', 'https://api.figma.com/v1')
    data_dir: str = os.getenv('VERIFIER_DATA_DIR', '')
    redis_url: str = os.getenv('REDIS_URL', 'redis://localhost:6379/0')


settings = Settings()
