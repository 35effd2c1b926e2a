"""
Player overlay: modal that plays one movie and reports playback position.
"""

import math  # floor positions to whole seconds
from typing import Callable, Dict, List, Optional

from loguru import logger  # console logger

from .api_client import ApiClient
from .errors import RequestError
from .models import Movie, ProgressReport
from .session import SessionStore

ESCAPE = 'Escape'
NO_SOURCE_TEXT = 'No video source'

# Click targets inside an open overlay
BACKDROP = 'backdrop'
CONTENT = 'content'


class KeyListeners:
	"""Window-level key listener registry; overlays add a handler while mounted and remove it on unmount."""

	def __init__(self):
		self._handlers: List[Callable[[str], None]] = []

	def add(self, handler: Callable[[str], None]) -> None:
		self._handlers.append(handler)

	def remove(self, handler: Callable[[str], None]) -> None:
		if handler in self._handlers:
			self._handlers.remove(handler)

	def dispatch(self, key: str) -> None:
		for handler in list(self._handlers):  # handlers may deregister themselves
			handler(key)

	def __len__(self) -> int:
		return len(self._handlers)


class PlayerOverlay:
	"""
	closed -> open(movie) -> closed.
	While open the first source of the movie is the active media; without one the
	overlay renders a placeholder instead of a media element.
	Given a KeyListeners registry, the overlay listens for Escape only while open.
	"""

	def __init__(self, api: ApiClient, session: SessionStore, keys: Optional[KeyListeners] = None):
		self.api = api
		self.session = session
		self.keys = keys  # registry the overlay mounts on when it opens
		self.movie: Optional[Movie] = None
		self.is_open = False
		self._keys: Optional[KeyListeners] = None  # registry currently holding our handler

	@property
	def active_source(self) -> Optional[str]:
		if not self.is_open or self.movie is None:
			return None
		return self.movie.primary_source

	@property
	def shows_placeholder(self) -> bool:
		return self.is_open and self.active_source is None

	def open(self, movie: Movie) -> None:
		self.movie = movie
		self.is_open = True
		if self.keys is not None:
			self.mount(self.keys)
		logger.debug(f"[Player] Opened movie={movie.id} source={movie.primary_source}")

	def close(self) -> None:
		if self.is_open:
			logger.debug(f"[Player] Closed movie={self.movie.id if self.movie else None}")
		self.is_open = False
		self._stop_listening()

	def click(self, target: str) -> None:
		"""Backdrop clicks dismiss the overlay; clicks inside the content area do not."""
		if target == BACKDROP:
			self.close()

	def handle_key(self, key: str) -> None:
		if key == ESCAPE and self.is_open:
			self.close()

	def mount(self, keys: KeyListeners) -> None:
		if self._keys is not None:  # already listening
			return
		self._keys = keys
		keys.add(self.handle_key)

	def unmount(self) -> None:
		self._stop_listening()
		self.close()

	def _stop_listening(self) -> None:
		if self._keys is not None:
			self._keys.remove(self.handle_key)
			self._keys = None

	def on_time_update(self, current_time: float) -> Optional[ProgressReport]:
		"""
		Called on every playback time update. Best effort: a failed report is dropped.
		Returns the report that was sent, or None if nothing was sent.
		"""
		current = self.session.current
		if not self.is_open or self.movie is None or current is None:
			return None
		report = ProgressReport(
			user_id=current.user.id,
			movie_id=self.movie.id,
			position_sec=int(math.floor(max(0.0, current_time))),
		)
		try:
			self.api.report_progress(report)
		except RequestError as e:
			logger.debug(f"[Player] Progress report dropped: {e}")
			return None
		return report

	def describe(self) -> Dict[str, str]:
		"""Header text for the overlay: title and "year • genres"."""
		if self.movie is None:
			return {'title': '', 'subtitle': ''}
		return {
			'title': self.movie.title,
			'subtitle': f"{self.movie.year} • {', '.join(self.movie.genres)}",
		}
