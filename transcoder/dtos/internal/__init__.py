"""
Internal DTOs

DTOs passed between the orchestrator, the worker pool and the supervisor.
These are not exposed to external APIs.
"""

from .job_dto import DispatchRequest, EncodeResult, TranscodeTicket

__all__ = ["DispatchRequest", "EncodeResult", "TranscodeTicket"]
