"""Async task definitions for layout model training.

Uses arq (async Redis queue) for background task processing. Training is
slow and CPU bound, so it runs in the worker process rather than on the
request path; the API picks up the result through its reload endpoint.

Based on arq documentation:
https://arq-docs.helpmanual.io/
"""

import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from services.layout.model import LayoutModel
from services.layout.synthesizer import TrainingDataSynthesizer
from services.shared.config import Settings, get_settings

logger = logging.getLogger(__name__)


class JobResult(BaseModel):
    """Result of a background training job.

    Attributes:
        job_id: Unique job identifier
        status: Job status (pending, processing, completed, failed)
        sample_count: Number of synthetic samples used
        training_data_path: Where the training data was written
        model_path: Where the trained model was saved (if completed)
        error: Error message (if failed)
        created_at: Job creation timestamp
        completed_at: Job completion timestamp
    """

    job_id: str
    status: str
    sample_count: int
    training_data_path: str | None = None
    model_path: str | None = None
    error: str | None = None
    created_at: str
    completed_at: str | None = None


def run_training(settings: Settings, sample_count: int) -> str | None:
    """Synthesize data, train a fresh model and save it.

    Args:
        settings: Application settings (paths and training knobs)
        sample_count: Number of synthetic samples

    Returns:
        None on success, otherwise a description of the failed step
    """
    data_path = Path(settings.training_data_path)
    model_path = Path(settings.layout_model_path)

    synthesizer = TrainingDataSynthesizer(seed=settings.layout_seed)
    if not synthesizer.write(data_path, sample_count):
        return f"Could not write training data to {data_path}"

    model = LayoutModel(
        epochs=settings.layout_training_epochs,
        learning_rate=settings.layout_learning_rate,
        hidden_size=settings.layout_hidden_size,
        seed=settings.layout_seed,
    )
    if not model.train_from_file(data_path):
        return f"Training failed on {data_path}"
    if not model.save(model_path):
        return f"Could not save model to {model_path}"
    return None


async def train_layout_model(
    ctx: dict[str, Any],
    job_id: str,
    sample_count: int | None = None,
) -> dict[str, Any]:
    """Train the layout model on synthetic data.

    Args:
        ctx: arq context (contains redis connection)
        job_id: Unique job identifier
        sample_count: Number of samples (defaults to settings.training_sample_count)

    Returns:
        JobResult as dict
    """
    settings: Settings = ctx.get("settings") or get_settings()
    redis = ctx["redis"]
    sample_count = sample_count or settings.training_sample_count

    logger.info(f"Processing training job {job_id} with {sample_count} samples")

    result = JobResult(
        job_id=job_id,
        status="processing",
        sample_count=sample_count,
        training_data_path=settings.training_data_path,
        created_at=datetime.now(UTC).isoformat(),
    )
    await redis.set(f"job:{job_id}", result.model_dump_json(), ex=86400)  # 24h TTL

    try:
        error = await asyncio.to_thread(run_training, settings, sample_count)
        if error:
            result.status = "failed"
            result.error = error
        else:
            result.status = "completed"
            result.model_path = settings.layout_model_path
    except Exception as e:
        logger.exception(f"Job {job_id} failed with error: {e}")
        result.status = "failed"
        result.error = str(e)

    result.completed_at = datetime.now(UTC).isoformat()
    await redis.set(f"job:{job_id}", result.model_dump_json(), ex=86400)
    logger.info(f"Job {job_id} completed with status: {result.status}")

    return result.model_dump()


async def startup(ctx: dict[str, Any]) -> None:
    """Worker startup hook - load settings once for all jobs."""
    logger.info("Initializing worker...")
    ctx["settings"] = get_settings()
    logger.info("Worker initialized")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Worker shutdown hook - cleanup resources."""
    logger.info("Worker shutting down...")


class WorkerSettings:
    """arq worker settings.

    Defines the worker configuration including:
    - Task functions to register
    - Redis connection settings
    - Job timeout and retry settings
    """

    functions = [train_layout_model]
    on_startup = startup
    on_shutdown = shutdown

    # These will be set from environment
    redis_settings = None
    max_jobs = 2
    job_timeout = 600

    @classmethod
    def get_redis_settings(cls) -> Any:
        """Get Redis settings from configuration."""
        from arq.connections import RedisSettings as ArqRedisSettings

        settings = get_settings()
        # Parse redis URL
        url = settings.redis_url
        if url.startswith("redis://"):
            url = url[8:]
        host_port = url.split("/")[0]
        host, port = host_port.split(":") if ":" in host_port else (host_port, "6379")
        db = int(url.split("/")[1]) if "/" in url else 0

        return ArqRedisSettings(host=host, port=int(port), database=db)
