"""
Admin panel: content management (create/update/delete movies) and user role management.
Every mutation failure is reported through the notify callback and leaves state as it was.
"""

from typing import Callable, List, Optional

from loguru import logger  # console logger

from .api_client import ApiClient
from .config import ADMIN_MOVIE_LIMIT
from .errors import RequestError, ValidationError
from .models import Movie, MovieForm, Role, User, build_payload
from .session import SessionStore

MOVIES_TAB = 'movies'
USERS_TAB = 'users'


def _noop(*_args) -> None:
	return None


class AdminPanel:
	"""
	Modal with a content tab and a users tab.
	The caller gates the entry point on SessionStore.is_admin(); the users tab re-checks it before loading.
	"""

	def __init__(
		self,
		api: ApiClient,
		session: SessionStore,
		notify: Callable[[str], None] = _noop,
		on_data_changed: Callable[[], None] = _noop,
		movie_limit: int = ADMIN_MOVIE_LIMIT,
	):
		self.api = api
		self.session = session
		self.notify = notify  # blocking user-facing notification
		self.on_data_changed = on_data_changed  # lets the home page refresh its slices
		self.movie_limit = movie_limit
		self.is_open = False
		self.tab = MOVIES_TAB
		self.movies: List[Movie] = []
		self.users: List[User] = []
		self.form = MovieForm()
		self.form_revision = 0  # bumped whenever the form is replaced; renderers key their inputs on it
		self.busy = False

	def _token(self) -> Optional[str]:
		current = self.session.current
		return current.token if current else None

	def open(self) -> None:
		"""Show the panel and load both tabs."""
		self.is_open = True
		try:
			self.load_movies()
		except RequestError as e:
			self.notify(f"Loading movies failed: {e}")
		try:
			self.load_users()
		except RequestError as e:
			self.notify(f"Loading users failed: {e}")

	def close(self) -> None:
		self.is_open = False

	def switch_tab(self, tab: str) -> None:
		if tab in (MOVIES_TAB, USERS_TAB):
			self.tab = tab

	# --- content tab ---

	def load_movies(self) -> List[Movie]:
		"""Movies are public, so the listing goes out without a token."""
		self.movies = self.api.list_movies(limit=self.movie_limit)
		logger.debug(f"[Admin] Loaded {len(self.movies)} movies")
		return self.movies

	def edit(self, movie: Movie) -> None:
		self.tab = MOVIES_TAB
		self._replace_form(MovieForm.from_movie(movie))

	def reset_form(self) -> None:
		self._replace_form(MovieForm())

	def _replace_form(self, form: MovieForm) -> None:
		self.form = form
		self.form_revision += 1

	def submit(self) -> bool:
		"""
		Create (form.id is None) or update the movie in the form.
		On success: reload the list, tell the parent view, clear the form.
		"""
		if not self.form.title.strip():
			raise ValidationError('Title is required', fields=['title'])
		payload = build_payload(self.form)
		self.busy = True
		try:
			if self.form.is_edit:
				self.api.update_movie(self.form.id, payload, token=self._token())
				logger.info(f"[Admin] Updated movie {self.form.id} '{payload.title}'")
			else:
				self.api.create_movie(payload, token=self._token())
				logger.info(f"[Admin] Created movie '{payload.title}'")
			self.load_movies()
		except RequestError as e:
			self.notify(f"Saving failed: {e}")
			return False
		finally:
			self.busy = False
		self.on_data_changed()
		self.reset_form()
		self.notify('Saved')
		return True

	def delete(self, movie_id: str, confirm: Callable[[], bool]) -> bool:
		"""Delete after an explicit confirmation; a declined confirmation makes no call."""
		if not confirm():
			return False
		try:
			self.api.delete_movie(movie_id, token=self._token())
			self.load_movies()
		except RequestError as e:
			self.notify(f"Deleting failed: {e}")
			return False
		logger.info(f"[Admin] Deleted movie {movie_id}")
		self.on_data_changed()
		return True

	# --- users tab ---

	def load_users(self) -> List[User]:
		"""Only an admin session loads the user list; anyone else gets an empty list and no request."""
		if not self.session.is_admin():
			self.users = []
			return self.users
		self.users = self.api.list_users(self._token())
		logger.debug(f"[Admin] Loaded {len(self.users)} users")
		return self.users

	def change_role(self, user_id: str, role) -> bool:
		try:
			new_role = Role(role)
		except ValueError as e:
			raise ValidationError(f"Unknown role: {role!r}", fields=['role']) from e
		try:
			self.api.update_user_role(user_id, new_role, self._token())
			self.load_users()
		except RequestError as e:
			self.notify(f"Updating role failed: {e}")
			return False
		logger.info(f"[Admin] Role of user {user_id} set to {new_role.value}")
		self.notify('Role updated')
		return True
