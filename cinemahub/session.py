"""
Session store: the single owner of the signed-in identity.
restore/login/register/logout are its only mutators; every component receives the same instance.
"""

import json  # user record serialization
from typing import Any, Optional

from loguru import logger  # console logger

from .api_client import ApiClient  # auth endpoints
from .config import TOKEN_KEY, USER_KEY  # storage keys
from .errors import AuthError, RequestError
from .models import Role, Session, User
from .storage import LocalStorage  # durable token/user entries


class SessionStore:
	"""
	Holds at most one Session and mirrors it into durable storage.
	Role checks go through current_role()/is_admin() at the point of use, so logout
	revokes privileged UI on the very next check.
	"""

	def __init__(self, api: ApiClient, storage: LocalStorage):
		self.api = api
		self.storage = storage
		self._session: Optional[Session] = None

	@property
	def current(self) -> Optional[Session]:
		return self._session

	def current_role(self) -> Optional[Role]:
		return self._session.role if self._session else None

	def is_admin(self) -> bool:
		return self.current_role() == Role.ADMIN

	def restore(self) -> Optional[Session]:
		"""
		Rebuild the session persisted by a previous run.
		Both entries must be present and the user record must parse; otherwise there is no session.
		"""
		token = self.storage.get(TOKEN_KEY)
		raw_user = self.storage.get(USER_KEY)
		if not token or not raw_user:
			self._session = None
			return None
		try:
			user = User.from_dict(json.loads(raw_user))
		except (ValueError, TypeError) as e:  # JSONDecodeError is a ValueError
			logger.warning(f"[Session] Ignoring unreadable persisted user: {e}")
			self._session = None
			return None
		self._session = Session(token=token, user=user)
		logger.info(f"[Session] Restored session for {user.email} ({user.role.value})")
		return self._session

	def login(self, email: str, password: str) -> Session:
		try:
			data = self.api.login(email, password)
		except RequestError as e:
			logger.info(f"[Session] Login rejected for {email}: status={e.status}")
			raise AuthError('Login failed') from e
		return self._install(data)

	def register(self, name: str, email: str, password: str) -> Session:
		try:
			data = self.api.register(name, email, password)
		except RequestError as e:
			logger.info(f"[Session] Registration rejected for {email}: status={e.status}")
			raise AuthError('Registration failed') from e
		return self._install(data)

	def logout(self) -> None:
		"""Purely local: forget the token and user, no backend call."""
		self.storage.update({TOKEN_KEY: None, USER_KEY: None})
		if self._session:
			logger.info(f"[Session] Signed out {self._session.user.email}")
		self._session = None

	def _install(self, data: Any) -> Session:
		"""Validate an auth response and make it the current, persisted session."""
		if not isinstance(data, dict) or not data.get('token'):
			raise AuthError('Backend returned no token')
		try:
			user = User.from_dict(data.get('user'))
		except ValueError as e:
			raise AuthError(f"Backend returned an invalid user: {e}") from e
		session = Session(token=str(data['token']), user=user)
		self._persist(session)
		self._session = session
		logger.info(f"[Session] Signed in {user.email} as {user.role.value}")
		return session

	def _persist(self, session: Session) -> None:
		"""Token and user go to disk in one write, so storage never pairs one account's token with another's record."""
		try:
			self.storage.update({TOKEN_KEY: session.token, USER_KEY: json.dumps(session.user.to_dict())})
		except OSError as e:
			logger.warning(f"[Session] Could not persist session for {session.user.email}: {e}")
			raise AuthError('Could not save the session') from e
