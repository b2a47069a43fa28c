"""Worker bootstrap.

Builds every process-wide service exactly once, in order:

    logger → tracing → config checks → metrics registry → job/runner/loop

then starts the ``/metrics`` listener and runs the loop until a shutdown
signal arrives.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry

from sample_services.core.durations import format_duration
from sample_services.core.errors import ListenerBindError
from sample_services.core.settings import WorkerSettings
from sample_services.observability.exposition import start_metrics_server
from sample_services.observability.logging import build_logger, error_fields
from sample_services.observability.metrics import PipelineMetrics, register_worker_info
from sample_services.observability.tracing import Tracing, init_tracer
from sample_services.pipeline.delays import SimulatedWork
from sample_services.pipeline.runner import PipelineRunner
from sample_services.worker.email_job import EmailJob
from sample_services.worker.loop import Job, WorkerLoop
from sample_services.worker.task_job import TaskJob

JOBS: dict[str, type] = {
    EmailJob.name: EmailJob,
    TaskJob.name: TaskJob,
}


@dataclass
class WorkerServices:
    """Everything one worker process owns."""

    settings: WorkerSettings
    logger: Any
    tracing: Tracing
    registry: CollectorRegistry
    metrics: PipelineMetrics
    job: Job
    loop: WorkerLoop


def build_job(
    settings: WorkerSettings,
    *,
    work: SimulatedWork | None = None,
    rng: random.Random | None = None,
) -> Job:
    job_cls = JOBS[settings.worker_job]
    return job_cls(fail_simulate=settings.fail_simulate_enabled, work=work, rng=rng)


def build_worker(
    settings: WorkerSettings | None = None,
    *,
    logger: Any = None,
    tracing: Tracing | None = None,
    registry: CollectorRegistry | None = None,
    work: SimulatedWork | None = None,
    install_signal_handlers: bool = True,
    max_runs: int | None = None,
) -> WorkerServices:
    """Construct the worker's services without starting anything.

    Keyword overrides exist for tests: an in-memory tracer, a captured log
    stream, a fresh registry, instant simulated work.
    """
    settings = settings or WorkerSettings()
    log = logger or build_logger(settings.log_level, service=settings.otel_service_name)

    if tracing is None:
        tracing = init_tracer(
            settings.otel_service_name,
            endpoint=settings.otel_exporter_otlp_endpoint,
            environment=settings.environment,
            version=settings.service_version,
            logger=log,
        )

    if settings.secret_key_is_default:
        log.warning("SECRET_KEY not set, using default")
    log.info("fail_simulate_configured", fail_simulate_enabled=settings.fail_simulate_enabled)

    interval = settings.interval_seconds
    registry = registry or CollectorRegistry()
    register_worker_info(registry, format_duration(interval))

    job = build_job(settings, work=work)
    metrics = PipelineMetrics(job.metric_names, registry)
    runner = PipelineRunner(tracing, log, metrics)
    loop = WorkerLoop(
        job,
        runner,
        interval=interval,
        logger=log,
        tracing=tracing,
        install_signal_handlers=install_signal_handlers,
        max_runs=max_runs,
    )
    return WorkerServices(
        settings=settings,
        logger=log,
        tracing=tracing,
        registry=registry,
        metrics=metrics,
        job=job,
        loop=loop,
    )


def run_worker(settings: WorkerSettings | None = None) -> int:
    """Run the worker until SIGINT/SIGTERM. Returns the process exit code."""
    services = build_worker(settings)
    log = services.logger

    try:
        start_metrics_server(services.settings.metrics_port, services.registry, logger=log)
    except ListenerBindError as e:
        log.error("metrics_server_failed", **error_fields(e))
        services.tracing.shutdown()
        return 1

    services.loop.start()
    log.info("worker_stopped")
    return 0


__all__ = ["JOBS", "WorkerServices", "build_job", "build_worker", "run_worker"]
