from __future__ import annotations
from typing import Optional


class TrackerError(Exception):
	"""Base class for errors raised outside the HTTP layer."""


class UnknownStepError(TrackerError):
	def __init__(self, step_id: str) -> None:
		super().__init__(f"Unknown wizard step: {step_id}")
		self.step_id = step_id


class BackendError(TrackerError):
	"""The hosted backend rejected a call or could not be reached."""

	def __init__(self, message: str, status_code: int = 502, detail: Optional[str] = None) -> None:
		super().__init__(message)
		self.status_code = status_code
		self.detail = detail or message
