"""
OpenTelemetry tracing with explicit context passing.

:func:`init_tracer` builds a ``TracerProvider`` (OTLP gRPC exporter behind a
``BatchSpanProcessor`` flushing every 5 seconds, always-on sampling, service
resource) and wraps it in a :class:`Tracing` service object. The provider is
not installed globally; callers hold the ``Tracing`` object and pass an
``opentelemetry.context.Context`` down the call chain.

When initialization fails, or when a service runs without tracing,
``Tracing.disabled()`` is used instead. Its ``start_span`` returns the
caller's context unchanged together with a :class:`NoopSpan`, which accepts
the same calls as a real span and ignores them. Call sites never check whether a
span exists.

Example:
    >>> tracing = init_tracer("sampleworker", endpoint="localhost:4317", logger=log)
    >>> ctx, span = tracing.start_span(None, "send_mail", {"email.id": 7})
    >>> span.add_event("validation_complete", {"valid": True})
    >>> span.end()
    >>> tracing.shutdown()  # flush before exit
"""

from __future__ import annotations

import socket
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Protocol

from opentelemetry import trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import ProcessResourceDetector, Resource, get_aggregated_resources
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace import INVALID_SPAN_CONTEXT, SpanContext, SpanKind, Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator
from opentelemetry.util.types import AttributeValue

from sample_services.core.errors import TracingInitError
from sample_services.observability.logging import error_fields

BATCH_SCHEDULE_DELAY_MILLIS = 5_000
DEFAULT_OTLP_ENDPOINT = "localhost:4317"

Attributes = Mapping[str, AttributeValue]


class SpanHandle(Protocol):
    """Operations available on every span, real or no-op."""

    @property
    def span_context(self) -> SpanContext: ...

    @property
    def ended(self) -> bool: ...

    def is_recording(self) -> bool: ...

    def set_attribute(self, key: str, value: AttributeValue) -> None: ...

    def set_attributes(self, attributes: Attributes) -> None: ...

    def add_event(self, name: str, attributes: Attributes | None = None) -> None: ...

    def record_error(self, error: BaseException) -> None: ...

    def set_error(self, description: str) -> None: ...

    def set_ok(self) -> None: ...

    def update_name(self, name: str) -> None: ...

    def end(self) -> None: ...


class TracedSpan:
    """A recording SDK span. ``end()`` closes the underlying span once."""

    def __init__(self, span: trace.Span):
        self._span = span
        self._ended = False
        self._lock = threading.Lock()

    @property
    def span_context(self) -> SpanContext:
        return self._span.get_span_context()

    @property
    def ended(self) -> bool:
        return self._ended

    def is_recording(self) -> bool:
        return self._span.is_recording()

    def set_attribute(self, key: str, value: AttributeValue) -> None:
        self._span.set_attribute(key, value)

    def set_attributes(self, attributes: Attributes) -> None:
        self._span.set_attributes(attributes)

    def add_event(self, name: str, attributes: Attributes | None = None) -> None:
        self._span.add_event(name, attributes=attributes)

    def record_error(self, error: BaseException) -> None:
        """Record ``error`` as an exception event and mark the span failed."""
        self._span.record_exception(error)
        self._span.set_status(Status(StatusCode.ERROR, str(error)))

    def set_error(self, description: str) -> None:
        self._span.set_status(Status(StatusCode.ERROR, description))

    def set_ok(self) -> None:
        self._span.set_status(Status(StatusCode.OK))

    def update_name(self, name: str) -> None:
        self._span.update_name(name)

    def end(self) -> None:
        with self._lock:
            if self._ended:
                return
            self._ended = True
        self._span.end()


class NoopSpan:
    """Stand-in span used when tracing is disabled."""

    def __init__(self):
        self._ended = False

    @property
    def span_context(self) -> SpanContext:
        return INVALID_SPAN_CONTEXT

    @property
    def ended(self) -> bool:
        return self._ended

    def is_recording(self) -> bool:
        return False

    def set_attribute(self, key: str, value: AttributeValue) -> None:
        pass

    def set_attributes(self, attributes: Attributes) -> None:
        pass

    def add_event(self, name: str, attributes: Attributes | None = None) -> None:
        pass

    def record_error(self, error: BaseException) -> None:
        pass

    def set_error(self, description: str) -> None:
        pass

    def set_ok(self) -> None:
        pass

    def update_name(self, name: str) -> None:
        pass

    def end(self) -> None:
        self._ended = True


class Tracing:
    """Tracer handle owned by one service process.

    Build once at startup (see :func:`init_tracer`), share by reference, and
    call :meth:`shutdown` once during teardown to flush buffered spans.
    """

    def __init__(self, provider: TracerProvider | None, instrumentation_name: str = "sample_services"):
        self._provider = provider
        self._tracer = provider.get_tracer(instrumentation_name) if provider is not None else None
        self._propagator = CompositePropagator([TraceContextTextMapPropagator(), W3CBaggagePropagator()])
        self._shut_down = False

    @classmethod
    def disabled(cls) -> Tracing:
        return cls(None)

    @property
    def enabled(self) -> bool:
        return self._tracer is not None

    @property
    def provider(self) -> TracerProvider | None:
        return self._provider

    # ------------------------------------------------------------------ #
    # Spans
    # ------------------------------------------------------------------ #

    def start_span(
        self,
        ctx: Context | None,
        name: str,
        attributes: Attributes | None = None,
        *,
        kind: SpanKind = SpanKind.INTERNAL,
    ) -> tuple[Context | None, SpanHandle]:
        """Start a child of the context's current span, or a new root.

        ``ctx=None`` means "no parent". The returned context carries the new
        span as current. When disabled, returns ``ctx`` unchanged (``None``
        included) with a fresh :class:`NoopSpan`.
        """
        if self._tracer is None:
            return ctx, NoopSpan()

        parent = ctx if ctx is not None else Context()
        span = self._tracer.start_span(name, context=parent, kind=kind, attributes=attributes)
        return trace.set_span_in_context(span, parent), TracedSpan(span)

    @contextmanager
    def span(
        self,
        ctx: Context | None,
        name: str,
        attributes: Attributes | None = None,
        *,
        kind: SpanKind = SpanKind.INTERNAL,
    ) -> Iterator[tuple[Context | None, SpanHandle]]:
        """Context-manager form of :meth:`start_span`; ends the span on exit."""
        child_ctx, handle = self.start_span(ctx, name, attributes, kind=kind)
        try:
            yield child_ctx, handle
        finally:
            handle.end()

    def add_event(self, ctx: Context | None, name: str, **attributes: AttributeValue) -> None:
        """Add an event to the context's current span."""
        if ctx is not None:
            trace.get_current_span(ctx).add_event(name, attributes=attributes)

    def set_attributes(self, ctx: Context | None, **attributes: AttributeValue) -> None:
        if ctx is not None:
            trace.get_current_span(ctx).set_attributes(attributes)

    def record_error(self, ctx: Context | None, error: BaseException) -> None:
        """Record an exception event on the context's current span."""
        if ctx is not None:
            trace.get_current_span(ctx).record_exception(error)

    # ------------------------------------------------------------------ #
    # Propagation
    # ------------------------------------------------------------------ #

    def extract(self, carrier: Mapping[str, str]) -> Context:
        """Read W3C ``traceparent``/``baggage`` headers into a context.

        Disabled tracing ignores incoming headers so no span is ever active.
        """
        if self._tracer is None:
            return Context()
        return self._propagator.extract(carrier=carrier, context=Context())

    def inject(self, ctx: Context | None, carrier: dict[str, str]) -> dict[str, str]:
        if self._tracer is not None and ctx is not None:
            self._propagator.inject(carrier, context=ctx)
        return carrier

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def force_flush(self, timeout_millis: int = 30_000) -> bool:
        if self._provider is None:
            return True
        return self._provider.force_flush(timeout_millis)

    def shutdown(self) -> None:
        """Flush buffered spans and stop the exporter. Safe to call twice."""
        if self._provider is None or self._shut_down:
            return
        self._shut_down = True
        self._provider.shutdown()


def build_resource(service_name: str, *, version: str = "1.0.0", environment: str = "development") -> Resource:
    """Service resource plus host and process attributes."""
    initial = Resource.create(
        {
            "service.name": service_name,
            "service.version": version,
            "environment": environment,
            "host.name": socket.gethostname(),
        }
    )
    return get_aggregated_resources([ProcessResourceDetector()], initial_resource=initial)


def init_tracer(
    service_name: str,
    *,
    endpoint: str = DEFAULT_OTLP_ENDPOINT,
    environment: str = "development",
    version: str = "1.0.0",
    logger: Any = None,
    exporter: SpanExporter | None = None,
) -> Tracing:
    """Build the process tracer.

    Never raises: any failure is logged as a warning and a disabled
    :class:`Tracing` is returned so the service keeps running untraced.

    Args:
        service_name: ``service.name`` resource attribute and tracer name.
        endpoint: OTLP gRPC collector address (plaintext).
        environment: ``environment`` resource attribute.
        version: ``service.version`` resource attribute.
        logger: structlog logger for the init outcome.
        exporter: Override the OTLP exporter (tests use an in-memory one).
    """
    try:
        if exporter is None:
            exporter = OTLPSpanExporter(endpoint=endpoint, insecure=True)
        provider = TracerProvider(
            resource=build_resource(service_name, version=version, environment=environment),
            sampler=ALWAYS_ON,
        )
        provider.add_span_processor(
            BatchSpanProcessor(exporter, schedule_delay_millis=BATCH_SCHEDULE_DELAY_MILLIS)
        )
    except Exception as e:
        if logger is not None:
            err = TracingInitError("failed to initialize tracing", cause=e, endpoint=endpoint)
            logger.warning("tracing_init_failed", **error_fields(err))
        return Tracing.disabled()

    if logger is not None:
        logger.info("tracing_initialized", endpoint=endpoint, service=service_name)
    return Tracing(provider, service_name)


__all__ = [
    "BATCH_SCHEDULE_DELAY_MILLIS",
    "DEFAULT_OTLP_ENDPOINT",
    "SpanHandle",
    "TracedSpan",
    "NoopSpan",
    "Tracing",
    "build_resource",
    "init_tracer",
]
