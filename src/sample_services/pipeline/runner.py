"""
Traced, metered pipeline of result-returning steps.

A :class:`Pipeline` is an ordered tuple of :class:`Step` objects. The
:class:`PipelineRunner` executes it as a strict sequence:

    Start → step 1 → step 2 → … → step N → Completed
                 ╲        ╲              ╲
                  Failed-at-step-k (remaining steps skipped)

Each invocation opens a root span named after the pipeline and one child span
per step. A step receives the previous step's value and returns ``Ok`` with
its own value or ``Err`` with the failure. The first ``Err`` ends the run.

Terminal bookkeeping happens exactly once per invocation:

    Completed: success counter +1, duration histogram observes the whole
               run's wall-clock time, root span gets summary attributes and
               status OK.
    Failed:    failure counter +1 (no duration observation), the failing
               step's span and the root span record the error.

Every span is ended on every path. A step, attribute hook or summarizer that
raises instead of returning is converted into an ``UnexpectedStepError``
failure and counted like any other.

Example:
    >>> pipeline = Pipeline("send_mail", (Step("validate", validate), Step("send", send)))
    >>> runner = PipelineRunner(tracing, logger, metrics)
    >>> result = runner.run(None, pipeline, request, root_attributes={"email.id": 1})
    >>> match result:
    ...     case Ok(outcome): print(outcome.duration_seconds)
    ...     case Err(error): print(error.step)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from opentelemetry.context import Context

from sample_services.core.errors import StepError, UnexpectedStepError
from sample_services.core.result import Err, Ok, Result, try_result
from sample_services.observability.correlation import logger_with_trace
from sample_services.observability.logging import error_fields
from sample_services.observability.metrics import PipelineMetrics
from sample_services.observability.tracing import Attributes, SpanHandle, Tracing


@dataclass
class StepScope:
    """What a running step can see: its context, span and correlated logger."""

    context: Context | None
    span: SpanHandle
    log: Any

    def event(self, name: str, **attributes: Any) -> None:
        self.span.add_event(name, attributes)

    def set_attributes(self, **attributes: Any) -> None:
        self.span.set_attributes(attributes)


StepFn = Callable[[StepScope, Any], Result[Any]]


@dataclass(frozen=True)
class Step:
    """One named pipeline step.

    ``attributes`` derives span attributes from the step input. It runs inside
    the step span, so a hook that raises fails the step.
    """

    name: str
    run: StepFn
    attributes: Callable[[Any], Attributes] | None = None


@dataclass(frozen=True)
class Pipeline:
    name: str
    steps: tuple[Step, ...]


@dataclass(frozen=True)
class PipelineOutcome:
    """Summary of a completed invocation."""

    pipeline: str
    value: Any
    duration_seconds: float
    steps: tuple[str, ...] = field(default_factory=tuple)


Summarizer = Callable[[Any, float], Mapping[str, Any]]

SUMMARY_STEP = "summarize"


class PipelineRunner:
    """Runs pipelines with tracing, correlated logging and outcome metrics."""

    def __init__(
        self,
        tracing: Tracing,
        logger: Any,
        metrics: PipelineMetrics,
        *,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._tracing = tracing
        self._logger = logger
        self._metrics = metrics
        self._clock = clock

    def run(
        self,
        ctx: Context | None,
        pipeline: Pipeline,
        value: Any,
        *,
        root_attributes: Attributes | None = None,
        log_fields: Mapping[str, Any] | None = None,
        summarize: Summarizer | None = None,
    ) -> Result[PipelineOutcome]:
        """Execute ``pipeline`` once, starting from ``value``.

        Args:
            ctx: Parent trace context, or None for a new trace.
            pipeline: Steps to run in order.
            value: Input of the first step.
            root_attributes: Start attributes of the root span.
            log_fields: Extra fields on the started/failed/completed entries.
            summarize: ``(final_value, duration_seconds) -> attributes`` set on
                the root span and logged on success.

        Returns:
            ``Ok(PipelineOutcome)`` or ``Err(StepError)`` naming the failed step.
        """
        fields = dict(log_fields or {})
        root_ctx, root = self._tracing.start_span(ctx, pipeline.name, root_attributes)
        try:
            start = self._clock()
            logger_with_trace(self._logger, root_ctx).info(f"{pipeline.name}_started", **fields)

            current = value
            completed: list[str] = []
            for step in pipeline.steps:
                result = self._run_step(root_ctx, step, current)
                if result.is_err():
                    return self._fail(root_ctx, root, pipeline, result.error, fields)
                current = result.unwrap()
                completed.append(step.name)
                logger_with_trace(self._logger, root_ctx).debug("step_completed", step=step.name)

            duration = self._clock() - start
            summarized = try_result(lambda: dict(summarize(current, duration)) if summarize is not None else {})
            if summarized.is_err():
                error = UnexpectedStepError(str(summarized.error), step=SUMMARY_STEP, cause=summarized.error)
                return self._fail(root_ctx, root, pipeline, error, fields)
            summary = summarized.unwrap()

            self._metrics.record_success(duration)
            root.set_attributes(summary)
            root.set_ok()
            logger_with_trace(self._logger, root_ctx).info(
                f"{pipeline.name}_completed",
                duration_ms=round(duration * 1000),
                **fields,
                **summary,
            )
            return Ok(
                PipelineOutcome(
                    pipeline=pipeline.name,
                    value=current,
                    duration_seconds=duration,
                    steps=tuple(completed),
                )
            )
        finally:
            root.end()

    def _run_step(self, ctx: Context | None, step: Step, value: Any) -> Result[Any]:
        with self._tracing.span(ctx, step.name) as (step_ctx, span):
            scope = StepScope(
                context=step_ctx,
                span=span,
                log=logger_with_trace(self._logger, step_ctx),
            )

            def invoke() -> Result[Any]:
                if step.attributes is not None:
                    span.set_attributes(step.attributes(value))
                return step.run(scope, value)

            result = (
                try_result(invoke)
                .map_err(lambda e: UnexpectedStepError(str(e), step=step.name, cause=e))
                .flat_map(lambda returned: returned)
                .map_err(lambda e: _as_step_error(e, step.name))
            )
            if result.is_err():
                span.record_error(result.error)
            return result

    def _fail(
        self,
        ctx: Context | None,
        root: SpanHandle,
        pipeline: Pipeline,
        error: StepError,
        fields: dict[str, Any],
    ) -> Result[PipelineOutcome]:
        root.record_error(error)
        self._metrics.record_failure()
        logger_with_trace(self._logger, ctx).error(
            f"{pipeline.name}_failed",
            step=error.step,
            **fields,
            **error_fields(error),
        )
        return Err(error)


def _as_step_error(error: Exception, step: str) -> StepError:
    if isinstance(error, StepError):
        if error.step is None:
            error.step = step
        return error
    return StepError(str(error), step=step, cause=error)


__all__ = [
    "StepScope",
    "StepFn",
    "Step",
    "Pipeline",
    "PipelineOutcome",
    "PipelineRunner",
    "SUMMARY_STEP",
]
