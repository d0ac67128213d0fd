from dataclasses import dataclass
from typing import Optional, Union

# Outcome kinds
SUCCEEDED = "succeeded"
SUCCEEDED_WITH_DIAGNOSTIC = "succeeded_with_diagnostic"
FAILED = "failed"


@dataclass(frozen=True)
class Job:
    suggested_name: str
    target_url: str

    def blank_field(self) -> Optional[str]:
        """Name of the first blank field, or None if the job is usable."""
        if not (self.suggested_name or "").strip():
            return "suggested_name"
        if not (self.target_url or "").strip():
            return "target_url"
        return None


@dataclass(frozen=True)
class Result:
    original_job: Job
    success: bool
    title: Optional[str] = None
    status_code: Optional[int] = None
    duration: float = 0.0  # seconds

    @property
    def duration_ms(self) -> int:
        return int(self.duration * 1000)


@dataclass(frozen=True)
class Succeeded:
    result: Result
    kind: str = SUCCEEDED


@dataclass(frozen=True)
class SucceededWithDiagnostic:
    result: Result
    note: str
    kind: str = SUCCEEDED_WITH_DIAGNOSTIC


@dataclass(frozen=True)
class Failed:
    result: Result
    reason: str
    kind: str = FAILED


Outcome = Union[Succeeded, SucceededWithDiagnostic, Failed]
