"""
Auth overlay: the sign-in / registration form.
"""

from typing import Dict, List

from loguru import logger  # console logger

from .errors import AuthError, ValidationError
from .session import SessionStore

LOGIN = 'login'
REGISTER = 'register'

FAILURE_NOTICE = 'Sign-in or registration failed'


class AuthOverlay:
	"""Two modes: login (email + password) and register (name + email + password)."""

	def __init__(self, session: SessionStore):
		self.session = session
		self.is_open = False
		self.mode = LOGIN
		self.form: Dict[str, str] = {'name': '', 'email': '', 'password': ''}
		self.notice = ''  # generic failure text shown in the form
		self.busy = False  # form is blocked while a call is in flight

	def show(self, mode: str = LOGIN) -> None:
		self.mode = mode if mode in (LOGIN, REGISTER) else LOGIN
		self.notice = ''
		self.is_open = True

	def close(self) -> None:
		self.is_open = False
		self.notice = ''

	def toggle_mode(self) -> None:
		self.mode = REGISTER if self.mode == LOGIN else LOGIN
		self.notice = ''

	def required_fields(self) -> List[str]:
		return ['name', 'email', 'password'] if self.mode == REGISTER else ['email', 'password']

	def validate(self) -> None:
		missing = [f for f in self.required_fields() if not (self.form.get(f) or '').strip()]
		if missing:
			raise ValidationError(f"Required: {', '.join(missing)}", fields=missing)

	def submit(self) -> bool:
		"""
		Validate, then sign in or register. On success the overlay closes and the form is cleared;
		on rejection it stays open with a generic notice and returns False.
		"""
		self.validate()
		self.busy = True
		try:
			if self.mode == LOGIN:
				self.session.login(self.form['email'].strip(), self.form['password'])
			else:
				self.session.register(self.form['name'].strip(), self.form['email'].strip(), self.form['password'])
		except AuthError as e:
			logger.info(f"[Auth] {self.mode} failed: {e}")
			self.notice = FAILURE_NOTICE
			return False
		finally:
			self.busy = False
		self.form = {'name': '', 'email': '', 'password': ''}
		self.close()
		return True
