"""Operation pipeline - ordered, traced steps with outcome metrics.

Key components:
- runner: Step, Pipeline and the PipelineRunner that executes them
- delays: injectable simulated work for the demo steps
"""

from sample_services.pipeline.delays import DelayFn, SimulatedWork, fixed_delay, no_delay, uniform_ms
from sample_services.pipeline.runner import Pipeline, PipelineOutcome, PipelineRunner, Step, StepScope

__all__ = [
    # Runner
    "Step",
    "StepScope",
    "Pipeline",
    "PipelineOutcome",
    "PipelineRunner",
    # Delays
    "DelayFn",
    "SimulatedWork",
    "no_delay",
    "fixed_delay",
    "uniform_ms",
]
