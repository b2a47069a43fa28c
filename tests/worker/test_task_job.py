"""Tests for the simulated task job."""

from __future__ import annotations

import random

import pytest
from opentelemetry.trace import StatusCode

from sample_services.core.errors import PersistError, ValidationError
from sample_services.observability.metrics import TASK_METRICS, PipelineMetrics
from sample_services.pipeline.delays import SimulatedWork
from sample_services.pipeline.runner import PipelineRunner
from sample_services.worker.task_job import TaskJob

STEP_NAMES = ["validate_task", "fetch_task_input", "process_task", "save_task_result"]


@pytest.fixture
def runner(tracing, logger, registry):
    return PipelineRunner(tracing, logger, PipelineMetrics(TASK_METRICS, registry))


class TestTaskJob:
    def test_success(self, runner, registry, finished_spans):
        job = TaskJob(work=SimulatedWork.instant(), rng=random.Random(11))

        result = job.run(runner, None, 3).unwrap().value

        assert result.task_id == 3
        assert len(result.checksum) == 16
        assert registry.get_sample_value("worker_tasks_processed_total") == 1.0
        assert registry.get_sample_value("worker_tasks_failed_total") == 0.0

        spans = finished_spans()
        assert set(spans) == {"process_task_job", *STEP_NAMES}
        root = spans["process_task_job"]
        assert root.attributes["task.id"] == 3
        assert root.attributes["task.status"] == "completed"
        assert root.attributes["task.records"] == result.records
        assert spans["save_task_result"].attributes["storage.status"] == "success"

    def test_fail_simulate(self, runner, registry, finished_spans):
        job = TaskJob(fail_simulate=True, work=SimulatedWork.instant())

        error = job.run(runner, None, 1).error

        assert isinstance(error, PersistError)
        assert str(error) == "storage backend unavailable"
        assert error.step == "save_task_result"
        assert registry.get_sample_value("worker_tasks_failed_total") == 1.0
        assert registry.get_sample_value("worker_task_duration_seconds_count") == 0.0
        assert finished_spans()["save_task_result"].status.status_code == StatusCode.ERROR

    def test_checksum_is_deterministic(self, runner):
        a = TaskJob(work=SimulatedWork.instant(), rng=random.Random(1)).run(runner, None, 1).unwrap().value
        b = TaskJob(work=SimulatedWork.instant(), rng=random.Random(1)).run(runner, None, 1).unwrap().value
        assert a.checksum == b.checksum

    def test_non_positive_id_rejected(self, runner, registry, finished_spans):
        job = TaskJob(work=SimulatedWork.instant())

        error = job.run(runner, None, -1).error

        assert isinstance(error, ValidationError)
        assert error.step == "validate_task"
        assert registry.get_sample_value("worker_tasks_failed_total") == 1.0
        assert set(finished_spans()) == {"process_task_job", "validate_task"}
