import logging
from typing import Optional

from .classifier import classify
from .errors import ParseError, TransportError
from .fetcher import Fetcher
from .models import Failed, Job, Outcome, Result, Succeeded, SucceededWithDiagnostic

log = logging.getLogger(__name__)

HTTP_OK = 200


class JobProcessor:
    """Fetch and classify one job at a time. Never raises for per-job failures."""

    def __init__(self, fetcher: Optional[Fetcher] = None):
        self.fetcher = fetcher or Fetcher()

    def evaluate(self, job: Job) -> Outcome:
        blank = job.blank_field()
        if blank:
            return Failed(Result(original_job=job, success=False), f"{blank} is blank")

        try:
            with self.fetcher.fetch(job.target_url) as response:
                if response.status_code != HTTP_OK:
                    return Failed(
                        Result(
                            original_job=job,
                            success=False,
                            title=job.suggested_name,
                            status_code=response.status_code,
                            duration=response.duration,
                        ),
                        f"http status {response.status_code}",
                    )

                ok = Result(
                    original_job=job,
                    success=True,
                    title=job.suggested_name,
                    status_code=response.status_code,
                    duration=response.duration,
                )
                try:
                    title = classify(response, fallback=job.suggested_name)
                except ParseError as e:
                    # the request succeeded; only the title is degraded
                    return SucceededWithDiagnostic(ok, str(e))

                return Succeeded(
                    Result(
                        original_job=job,
                        success=True,
                        title=title,
                        status_code=ok.status_code,
                        duration=ok.duration,
                    )
                )
        except TransportError as e:
            return Failed(Result(original_job=job, success=False), str(e))

    def process(self, job: Job) -> Result:
        outcome = self.evaluate(job)
        if isinstance(outcome, Failed):
            log.warning(
                "Job %r failed: %s", job.suggested_name, outcome.reason,
                extra={"url": job.target_url, "event": "job_failed"},
            )
        elif isinstance(outcome, SucceededWithDiagnostic):
            log.warning(
                "Job %r succeeded without a title: %s", job.suggested_name, outcome.note,
                extra={"url": job.target_url, "event": "job_parse_degraded"},
            )
        return outcome.result

    def close(self) -> None:
        self.fetcher.close()


def process(job: Job, fetcher: Optional[Fetcher] = None) -> Result:
    """Process a single job with a throwaway Fetcher unless one is given."""
    if fetcher is not None:
        return JobProcessor(fetcher).process(job)
    with Fetcher() as own:
        return JobProcessor(own).process(job)
