"""
Error types raised by the CinemaHub client.
UI actions catch these and turn them into notifications.
"""

from typing import List, Optional


class CinemaHubError(Exception):
	"""Base class for every client-side failure."""


class RequestError(CinemaHubError):
	"""
	A backend call failed: non-2xx status, or the request never got a response.
	status is None for transport failures (refused connection, timeout).
	"""

	def __init__(self, message: str, status: Optional[int] = None, body: str = ''):
		super().__init__(message)
		self.status = status  # HTTP status code, None if no response
		self.body = body  # raw response text


class AuthError(CinemaHubError):
	"""Login or registration was rejected, or the action needs a signed-in user."""


class ValidationError(CinemaHubError):
	"""Client-side check failed before any request was made."""

	def __init__(self, message: str, fields: Optional[List[str]] = None):
		super().__init__(message)
		self.fields = fields or []  # names of the offending fields
