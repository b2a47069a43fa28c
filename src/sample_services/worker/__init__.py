"""Background worker - simulated jobs run on a fixed interval.

Key components:
- email_job: send_mail pipeline (validate → fetch → prepare → send)
- task_job: generic validate → fetch → process → save pipeline
- loop: WorkerLoop with graceful SIGINT/SIGTERM shutdown
- main: bootstrap (build_worker, run_worker)
"""

from sample_services.worker.email_job import EmailContent, EmailData, EmailJob, EmailRequest
from sample_services.worker.loop import Job, WorkerLoop, WorkerStats
from sample_services.worker.main import WorkerServices, build_job, build_worker, run_worker
from sample_services.worker.task_job import TaskInput, TaskJob, TaskRequest, TaskResult

__all__ = [
    # Jobs
    "Job",
    "EmailJob",
    "EmailRequest",
    "EmailData",
    "EmailContent",
    "TaskJob",
    "TaskRequest",
    "TaskInput",
    "TaskResult",
    # Loop
    "WorkerLoop",
    "WorkerStats",
    # Bootstrap
    "WorkerServices",
    "build_job",
    "build_worker",
    "run_worker",
]
