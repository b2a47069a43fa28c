"""Simulated batch task: validate → fetch → process → save.

The generic variant of the worker's unit of work. With ``fail_simulate`` on,
``save_task_result`` fails immediately with "storage backend unavailable".
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import Any

from opentelemetry.context import Context

from sample_services.core.errors import PersistError, ValidationError
from sample_services.core.result import Err, Ok, Result
from sample_services.observability.metrics import TASK_METRICS
from sample_services.pipeline.delays import SimulatedWork, uniform_ms
from sample_services.pipeline.runner import Pipeline, PipelineOutcome, PipelineRunner, Step, StepScope


@dataclass(frozen=True)
class TaskRequest:
    task_id: int


@dataclass(frozen=True)
class TaskInput:
    task_id: int
    records: int


@dataclass(frozen=True)
class TaskResult:
    task_id: int
    records: int
    checksum: str


def default_task_work(rng: random.Random | None = None) -> SimulatedWork:
    return SimulatedWork(
        delays={
            "validate_task": uniform_ms(10, 30, rng),
            "fetch_task_input": uniform_ms(50, 150, rng),
            "process_task": uniform_ms(100, 200, rng),
            "save_task_result": uniform_ms(50, 100, rng),
        }
    )


class TaskJob:
    """The task worker's unit of work."""

    name = "task"
    pipeline_name = "process_task_job"
    metric_names = TASK_METRICS

    def __init__(
        self,
        *,
        fail_simulate: bool = False,
        work: SimulatedWork | None = None,
        rng: random.Random | None = None,
    ):
        self.fail_simulate = fail_simulate
        self._rng = rng or random.Random()
        self._work = work or default_task_work(self._rng)
        self.pipeline = Pipeline(
            self.pipeline_name,
            (
                Step("validate_task", self.validate, lambda req: {"task.id": req.task_id}),
                Step("fetch_task_input", self.fetch, lambda req: {"task.id": req.task_id}),
                Step("process_task", self.process, lambda inp: {"task.id": inp.task_id, "input.records": inp.records}),
                Step("save_task_result", self.save, lambda res: {"task.id": res.task_id}),
            ),
        )

    def run(self, runner: PipelineRunner, ctx: Context | None, sequence: int) -> Result[PipelineOutcome]:
        return runner.run(
            ctx,
            self.pipeline,
            TaskRequest(sequence),
            root_attributes={"task.id": sequence, "task.type": "batch"},
            log_fields={"task_id": sequence},
            summarize=_summarize,
        )

    def validate(self, scope: StepScope, request: TaskRequest) -> Result[TaskRequest]:
        self._work.pause("validate_task")
        if request.task_id < 1:
            scope.event("task_validated", valid=False)
            return Err(ValidationError(f"invalid task id {request.task_id}", step="validate_task"))
        scope.event("task_validated", valid=True)
        return Ok(request)

    def fetch(self, scope: StepScope, request: TaskRequest) -> Result[TaskInput]:
        self._work.pause("fetch_task_input")
        task_input = TaskInput(request.task_id, records=self._rng.randrange(1, 500))
        scope.set_attributes(**{"input.records": task_input.records})
        scope.event("task_input_fetched", **{"input.records": task_input.records})
        return Ok(task_input)

    def process(self, scope: StepScope, task_input: TaskInput) -> Result[TaskResult]:
        elapsed = self._work.pause("process_task")
        checksum = hashlib.sha256(f"{task_input.task_id}:{task_input.records}".encode()).hexdigest()[:16]
        scope.set_attributes(**{"process.duration_ms": float(round(elapsed * 1000)), "result.checksum": checksum})
        scope.event("task_processed")
        return Ok(TaskResult(task_input.task_id, task_input.records, checksum))

    def save(self, scope: StepScope, result: TaskResult) -> Result[TaskResult]:
        if self.fail_simulate:
            return Err(PersistError("storage backend unavailable", step="save_task_result"))

        self._work.pause("save_task_result")
        scope.set_attributes(**{"storage.status": "success"})
        scope.event("task_result_saved", **{"result.checksum": result.checksum})
        scope.log.debug("task_result_saved", checksum=result.checksum)
        return Ok(result)


def _summarize(result: TaskResult, duration: float) -> dict[str, Any]:
    return {
        "task.duration_ms": float(round(duration * 1000)),
        "task.status": "completed",
        "task.records": result.records,
    }


__all__ = ["TaskRequest", "TaskInput", "TaskResult", "TaskJob", "default_task_work"]
