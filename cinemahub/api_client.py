"""
HTTP client for the CinemaHub backend REST API.
Wraps every consumed endpoint; non-2xx responses and transport failures become RequestError.
"""

from typing import Any, Dict, List, Optional  # type hints

# HTTP client for calling the backend
import requests  # make web requests to the backend

from loguru import logger  # console logger

from .config import Settings  # base URL and timeout
from .errors import RequestError  # failure type surfaced to the UI
from .models import Movie, MoviePayload, ProgressReport, Role, User  # typed responses and payloads


class ApiClient:
	"""
	Thin wrapper issuing requests to the backend.
	The transport is injectable: anything with a requests-style request(method, url, ...) works,
	which lets tests hand in a FastAPI TestClient or a scripted fake.
	"""

	def __init__(self, base_url: str, timeout: float = 10.0, http=None):
		self.base_url = base_url.rstrip('/')  # no trailing slash, paths start with '/'
		self.timeout = timeout  # seconds per request
		self.http = http if http is not None else requests.Session()  # shared connection pool

	@classmethod
	def from_settings(cls, settings: Settings, http=None) -> 'ApiClient':
		return cls(settings.backend_url, timeout=settings.timeout, http=http)

	def request(
		self,
		path: str,
		method: str = 'GET',
		body: Any = None,
		token: Optional[str] = None,
		params: Optional[Dict[str, Any]] = None,
	) -> Any:
		"""
		Issue one request and return the decoded JSON body (None for 204).
		Attaches a bearer token when given and a JSON content type on every write (any method but GET).
		"""
		headers = {}
		if method.upper() != 'GET':
			headers['Content-Type'] = 'application/json'
		if token:
			headers['Authorization'] = f"Bearer {token}"
		url = f"{self.base_url}{path}"
		logger.debug(f"[Api] {method} {path} params={params}")
		try:
			resp = self.http.request(method, url, json=body, headers=headers, params=params, timeout=self.timeout)
		except requests.RequestException as e:  # refused connection, timeout, bad URL
			logger.debug(f"[Api] {method} {path} failed before a response: {e}")
			raise RequestError(str(e)) from e
		if not 200 <= resp.status_code < 300:
			text = resp.text
			logger.debug(f"[Api] {method} {path} -> {resp.status_code}: {text[:200]}")
			raise RequestError(text or f"HTTP {resp.status_code}", status=resp.status_code, body=text)
		if resp.status_code == 204 or not resp.content:
			return None
		try:
			return resp.json()
		except ValueError as e:  # 2xx but not JSON
			raise RequestError(f"Invalid JSON from {path}: {e}", status=resp.status_code, body=resp.text) from e

	# --- catalog ---

	def seed(self) -> Any:
		"""Ask the backend to make sure demo data exists (idempotent)."""
		return self.request('/api/seed', 'POST')

	def list_movies(self, sort: Optional[str] = None, limit: int = 12) -> List[Movie]:
		params: Dict[str, Any] = {'limit': limit}
		if sort:
			params['sort'] = sort
		data = self.request('/api/movies', params=params)
		return [Movie.from_dict(item) for item in (data or [])]

	def create_movie(self, payload: MoviePayload, token: Optional[str] = None) -> Any:
		return self.request('/api/movies', 'POST', body=payload.model_dump(), token=token)

	def update_movie(self, movie_id: str, payload: MoviePayload, token: Optional[str] = None) -> Any:
		return self.request(f"/api/movies/{movie_id}", 'PUT', body=payload.model_dump(), token=token)

	def delete_movie(self, movie_id: str, token: Optional[str] = None) -> None:
		self.request(f"/api/movies/{movie_id}", 'DELETE', token=token)

	def report_progress(self, report: ProgressReport) -> Any:
		return self.request(f"/api/movies/{report.movie_id}/progress", 'POST', body=report.to_body())

	def toggle_watchlist(self, movie_id: str, user_id: str, token: Optional[str] = None) -> Any:
		return self.request(f"/api/movies/{movie_id}/watchlist", 'POST', body={'user_id': user_id}, token=token)

	# --- auth ---

	def login(self, email: str, password: str) -> Dict[str, Any]:
		return self.request('/api/auth/login', 'POST', body={'email': email, 'password': password})

	def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
		return self.request('/api/auth/register', 'POST', body={'name': name, 'email': email, 'password': password})

	# --- admin ---

	def list_users(self, token: str) -> List[User]:
		data = self.request('/api/admin/users', token=token)
		return [User.from_dict(item) for item in (data or [])]

	def update_user_role(self, user_id: str, role: Role, token: str) -> Any:
		return self.request(f"/api/admin/users/{user_id}/role", 'PATCH', body={'role': Role(role).value}, token=token)
