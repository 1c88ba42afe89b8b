"""Redis queue for analysis jobs, shared by the API and the worker."""

from redis import Redis
from rq import Queue
from .config import settings

QUEUE_NAME = 'design-verification'
TASK_PATH = 'worker.tasks.run_analysis_task'
JOB_TIMEOUT_S = 60 * 30


def get_redis() -> Redis:
    return Redis.from_url(settings.redis_url)


def get_queue(connection: Redis | None = None) -> Queue:
    """Get the analysis queue."""
    return Queue(QUEUE_NAME, connection=connection or get_redis())


def enqueue_analysis(analysis_id: str, payload: dict):
    """Schedule ``run_analysis_task`` for a stored analysis and return the rq job."""
    return get_queue().enqueue(TASK_PATH, analysis_id, payload, job_timeout=JOB_TIMEOUT_S)
