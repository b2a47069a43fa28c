"""
Simulated transactional email delivery.

One invocation is the ``send_mail`` pipeline:

    validate_email_request → fetch_email_data → prepare_email_content → send_email_smtp

Each step pauses for a simulated I/O delay (see :mod:`sample_services.pipeline.delays`)
and annotates its span with the attributes and events dashboards expect:

    ┌───────────────────────┬──────────────────────────────────────┬────────────────────────┐
    │ Step                  │ Attributes                           │ Event                  │
    ├───────────────────────┼──────────────────────────────────────┼────────────────────────┤
    │ validate_email_request│ email.id                             │ validation_complete    │
    │ fetch_email_data      │ email.recipient, email.template,     │ email_data_fetched     │
    │                       │ fetch.latency_ms, data.source        │                        │
    │ prepare_email_content │ email.subject, email.body_size,      │ email_content_prepared │
    │                       │ preparation.duration_ms              │                        │
    │ send_email_smtp       │ smtp.duration_ms, smtp.status        │ email_sent_via_smtp    │
    └───────────────────────┴──────────────────────────────────────┴────────────────────────┘

With ``fail_simulate`` on, ``send_email_smtp`` fails immediately with
"SMTP server unavailable" on every invocation.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

from opentelemetry.context import Context

from sample_services.core.errors import DeliveryError, ValidationError
from sample_services.core.result import Err, Ok, Result
from sample_services.observability.metrics import EMAIL_METRICS
from sample_services.pipeline.delays import SimulatedWork, uniform_ms
from sample_services.pipeline.runner import Pipeline, PipelineOutcome, PipelineRunner, Step, StepScope

SMTP_SERVER = "smtp.example.com"
TEMPLATE_COUNT = 5


@dataclass(frozen=True)
class EmailRequest:
    email_id: int


@dataclass(frozen=True)
class EmailData:
    """Recipient and template looked up for one email."""

    email_id: int
    recipient: str
    template: str


@dataclass(frozen=True)
class EmailContent:
    email_id: int
    recipient: str
    subject: str
    body: str


def default_email_work(rng: random.Random | None = None) -> SimulatedWork:
    """Delay ranges of the demo deployment, in milliseconds."""
    return SimulatedWork(
        delays={
            "validate_email_request": uniform_ms(10, 30, rng),
            "fetch_email_data": uniform_ms(50, 150, rng),
            "prepare_email_content": uniform_ms(30, 80, rng),
            "send_email_smtp": uniform_ms(100, 300, rng),
        }
    )


def _ms(seconds: float) -> int:
    return int(round(seconds * 1000))


class EmailJob:
    """The email worker's unit of work."""

    name = "email"
    pipeline_name = "send_mail"
    metric_names = EMAIL_METRICS

    def __init__(
        self,
        *,
        fail_simulate: bool = False,
        work: SimulatedWork | None = None,
        rng: random.Random | None = None,
    ):
        self.fail_simulate = fail_simulate
        self._rng = rng or random.Random()
        self._work = work or default_email_work(self._rng)
        self.pipeline = Pipeline(
            self.pipeline_name,
            (
                Step(
                    "validate_email_request",
                    self.validate,
                    lambda req: {"email.id": req.email_id},
                ),
                Step(
                    "fetch_email_data",
                    self.fetch,
                    lambda req: {"email.id": req.email_id, "data.source": "email_service"},
                ),
                Step(
                    "prepare_email_content",
                    self.prepare,
                    lambda data: {"email.template": data.template, "email.recipient": data.recipient},
                ),
                Step(
                    "send_email_smtp",
                    self.send,
                    lambda content: {"email.recipient": content.recipient, "email.subject": content.subject},
                ),
            ),
        )

    def run(self, runner: PipelineRunner, ctx: Context | None, sequence: int) -> Result[PipelineOutcome]:
        """Send email number ``sequence``."""
        return runner.run(
            ctx,
            self.pipeline,
            EmailRequest(sequence),
            root_attributes={"email.id": sequence, "email.type": "transactional"},
            log_fields={"email_id": sequence},
            summarize=_summarize,
        )

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    def validate(self, scope: StepScope, request: EmailRequest) -> Result[EmailRequest]:
        self._work.pause("validate_email_request")
        if request.email_id < 1:
            scope.event("validation_complete", valid=False)
            return Err(ValidationError(f"invalid email id {request.email_id}", step="validate_email_request"))
        scope.event("validation_complete", valid=True)
        return Ok(request)

    def fetch(self, scope: StepScope, request: EmailRequest) -> Result[EmailData]:
        latency = self._work.pause("fetch_email_data")

        data = EmailData(
            email_id=request.email_id,
            recipient=f"user{self._rng.randrange(1000)}@example.com",
            template=f"template_{request.email_id % TEMPLATE_COUNT}",
        )
        scope.set_attributes(
            **{
                "email.recipient": data.recipient,
                "email.template": data.template,
                "fetch.latency_ms": float(_ms(latency)),
            }
        )
        scope.event("email_data_fetched", **{"email.recipient": data.recipient, "email.template": data.template})
        scope.log.debug("email_data_fetched", recipient=data.recipient)
        return Ok(data)

    def prepare(self, scope: StepScope, data: EmailData) -> Result[EmailContent]:
        elapsed = self._work.pause("prepare_email_content")

        subject = f"Welcome! Email #{self._rng.randrange(1000)}"
        body = (
            f"Hello {data.recipient},\n\n"
            f"This is a dummy email sent using template: {data.template}\n\n"
            "Thank you for using our service!"
        )
        scope.set_attributes(
            **{
                "email.subject": subject,
                "email.body_size": len(body),
                "preparation.duration_ms": float(_ms(elapsed)),
            }
        )
        scope.event("email_content_prepared", **{"email.subject": subject})
        scope.log.debug("email_content_prepared", subject=subject)
        return Ok(EmailContent(data.email_id, data.recipient, subject, body))

    def send(self, scope: StepScope, content: EmailContent) -> Result[EmailContent]:
        if self.fail_simulate:
            return Err(DeliveryError("SMTP server unavailable", step="send_email_smtp"))

        elapsed = self._work.pause("send_email_smtp")
        scope.set_attributes(
            **{
                "smtp.duration_ms": float(_ms(elapsed)),
                "smtp.status": "success",
            }
        )
        scope.event("email_sent_via_smtp", **{"email.recipient": content.recipient, "smtp.server": SMTP_SERVER})
        return Ok(content)


def _summarize(content: EmailContent, duration: float) -> dict[str, Any]:
    return {
        "email.duration_ms": float(_ms(duration)),
        "email.status": "sent",
        "email.recipient": content.recipient,
        "email.subject": content.subject,
    }


__all__ = ["EmailRequest", "EmailData", "EmailContent", "EmailJob", "default_email_work"]
