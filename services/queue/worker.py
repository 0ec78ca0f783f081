"""Layout training worker and job submission.

Run the worker:
    python -m services.queue.worker
    arq services.queue.tasks.WorkerSettings

Submit a training job to a running worker:
    python -m services.queue.worker --enqueue 2000
"""

import argparse
import asyncio
import logging
import uuid

from arq import create_pool, run_worker

from services.queue.tasks import WorkerSettings
from services.shared.config import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_worker(settings: Settings) -> type[WorkerSettings]:
    """Apply queue settings to the arq worker class."""
    WorkerSettings.redis_settings = WorkerSettings.get_redis_settings()
    WorkerSettings.max_jobs = settings.queue_max_jobs
    WorkerSettings.job_timeout = settings.queue_job_timeout
    return WorkerSettings


async def enqueue_training(sample_count: int | None = None) -> str:
    """Submit a layout training job.

    Args:
        sample_count: Synthetic samples to train on (worker default when None)

    Returns:
        Job identifier; the job status is stored under ``job:<id>`` in Redis
    """
    job_id = uuid.uuid4().hex
    redis = await create_pool(WorkerSettings.get_redis_settings())
    try:
        await redis.enqueue_job("train_layout_model", job_id, sample_count, _job_id=job_id)
    finally:
        await redis.close()

    logger.info(f"Enqueued layout training job {job_id}")
    return job_id


def main(argv: list[str] | None = None) -> None:
    """Run the arq worker, or submit a training job with --enqueue."""
    parser = argparse.ArgumentParser(description="Layout model training worker")
    parser.add_argument(
        "--enqueue",
        type=int,
        nargs="?",
        const=0,
        default=None,
        metavar="N",
        help="Submit a training job on N samples (settings default when omitted) and exit",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.enqueue is not None:
        asyncio.run(enqueue_training(args.enqueue or None))
        return

    logger.info(f"Starting layout training worker with Redis: {settings.redis_url}")
    logger.info(f"Max jobs: {settings.queue_max_jobs}, job timeout: {settings.queue_job_timeout}s")
    run_worker(configure_worker(settings))  # type: ignore[arg-type]


if __name__ == "__main__":
    main()
