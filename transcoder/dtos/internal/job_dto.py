"""
Internal Job DTOs
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class TranscodeTicket:
    """Returned to the requester as soon as the job is committed."""

    job_id: str
    output_file_id: str


@dataclass(frozen=True)
class DispatchRequest:
    """
    A unit of work for the worker pool.

    Paths are resolved when the job is created so workers never need to
    read file records before launching the encoder.
    """

    job_id: str
    input_path: str
    output_path: str


@dataclass
class EncodeResult:
    """Outcome of one encoder process."""

    returncode: Optional[int]
    stderr_tail: List[str] = field(default_factory=list)
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.timed_out and self.returncode == 0
