"""
In-memory demo backend for the CinemaHub client.
Implements the REST surface the client consumes, so the UI can run locally and tests
have a real server to talk to.

Endpoints:
- POST   /api/seed                        idempotent demo data
- GET    /api/movies?sort=&limit=         ranked page of movies
- POST   /api/movies                      create
- PUT    /api/movies/{id}                 update
- DELETE /api/movies/{id}                 delete (204)
- POST   /api/movies/{id}/progress        playback position
- POST   /api/movies/{id}/watchlist       toggle watchlist membership
- POST   /api/auth/login | /api/auth/register
- GET    /api/admin/users                 admin only
- PATCH  /api/admin/users/{id}/role       admin only

Run: uvicorn dev_backend:app --reload
"""

import hashlib  # password digests
import secrets  # opaque tokens
import threading  # guard the in-memory store
import uuid  # identifiers
from typing import Any, Dict, List, Optional, Set, Tuple

# FastAPI primitives and Pydantic for request/response models
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Response
from pydantic import BaseModel

from loguru import logger  # console logger

from cinemahub.models import PLACEHOLDER_VIDEO_URL, MoviePayload, Role  # same payload shape the client sends

SORT_KEYS = ('new', 'popular', 'rating')


class LoginIn(BaseModel):
	email: str
	password: str


class RegisterIn(BaseModel):
	name: str
	email: str
	password: str


class UserOut(BaseModel):
	id: str
	name: str
	email: str
	role: Role


class AuthOut(BaseModel):
	token: str
	user: UserOut


class ProgressIn(BaseModel):
	user_id: str
	position_sec: int


class WatchlistIn(BaseModel):
	user_id: str


class RoleIn(BaseModel):
	role: Role


class MovieOut(MoviePayload):
	id: str


def _digest(password: str) -> str:
	return hashlib.sha256(password.encode('utf-8')).hexdigest()


DEMO_MOVIES: List[Dict[str, Any]] = [
	{'title': 'Mehrobdan chayon', 'original_title': 'Scorpion from the Altar', 'year': 1989, 'genres': ['Drama', 'History'], 'director': 'Yo\'ldosh A\'zamov', 'cast': ['Bahodir Yo\'ldoshev', 'Dilorom Karimova'], 'imdb_rating': 7.8, 'avg_rating': 4.6, 'views': 1200},
	{'title': 'Shum bola', 'original_title': 'The Naughty Boy', 'year': 1977, 'genres': ['Comedy', 'Adventure'], 'director': 'Melis Abzalov', 'cast': ['Pavel Ivanov', 'Yo\'ldosh Nurmatov'], 'imdb_rating': 8.4, 'avg_rating': 4.9, 'views': 3400},
	{'title': 'Abdullajon', 'original_title': 'Abdullajon', 'year': 1991, 'genres': ['Comedy', 'Science Fiction'], 'director': 'Zulfiqor Musoqov', 'cast': ['Ortiq Otajonov', 'Sayyora Yunusova'], 'imdb_rating': 7.6, 'avg_rating': 4.7, 'views': 2800},
	{'title': 'Yor-yor', 'original_title': 'Yor-yor', 'year': 1964, 'genres': ['Musical', 'Romance'], 'director': 'Ali Hamroyev', 'cast': ['Tamara Shakirova'], 'sources': [], 'imdb_rating': 7.1, 'avg_rating': 4.2, 'views': 900},
	{'title': 'Sevishganlar', 'original_title': 'Lovers', 'year': 1969, 'genres': ['Romance', 'Drama'], 'director': 'Elyor Ishmuhamedov', 'cast': ['Rodion Nahapetov', 'Anastasiya Vertinskaya'], 'imdb_rating': 6.9, 'avg_rating': 4.0, 'views': 700},
	{'title': 'Suyunchi', 'original_title': 'Good News', 'year': 1982, 'genres': ['Comedy', 'Family'], 'director': 'Shuhrat Abbosov', 'cast': ['Ergash Karimov'], 'imdb_rating': 7.3, 'avg_rating': 4.4, 'views': 1500},
]


class Store:
	"""All backend state, guarded by one lock."""

	def __init__(self):
		self.lock = threading.Lock()
		self.movies: Dict[str, Dict[str, Any]] = {}
		self.created_at: Dict[str, int] = {}
		self.users: Dict[str, Dict[str, Any]] = {}
		self.tokens: Dict[str, str] = {}  # token -> user id
		self.watchlists: Dict[str, Set[str]] = {}  # user id -> movie ids
		self.progress: Dict[Tuple[str, str], int] = {}  # (user id, movie id) -> seconds
		self._clock = 0

	def _tick(self) -> int:
		self._clock += 1  # insertion counter, newest is highest
		return self._clock

	def add_movie(self, payload: MoviePayload) -> Dict[str, Any]:
		movie_id = uuid.uuid4().hex
		record = {'id': movie_id, **payload.model_dump()}
		self.movies[movie_id] = record
		self.created_at[movie_id] = self._tick()
		return record

	def sorted_movies(self, sort: Optional[str]) -> List[Dict[str, Any]]:
		items = list(self.movies.values())
		if sort == 'popular':
			items.sort(key=lambda m: m.get('views', 0), reverse=True)
		elif sort == 'rating':
			items.sort(key=lambda m: m.get('avg_rating', 0.0), reverse=True)
		else:  # 'new' and unsorted listings: newest first
			items.sort(key=lambda m: self.created_at[m['id']], reverse=True)
		return items

	def add_user(self, name: str, email: str, password: str) -> Dict[str, Any]:
		role = Role.ADMIN if not self.users else Role.USER  # first account administers the demo
		user = {'id': uuid.uuid4().hex, 'name': name, 'email': email.lower(), 'role': role, 'password': _digest(password)}
		self.users[user['id']] = user
		return user

	def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
		email = email.lower()
		return next((u for u in self.users.values() if u['email'] == email), None)

	def issue_token(self, user_id: str) -> str:
		token = secrets.token_urlsafe(24)
		self.tokens[token] = user_id
		return token


def _public_user(user: Dict[str, Any]) -> UserOut:
	return UserOut(id=user['id'], name=user['name'], email=user['email'], role=user['role'])


def create_app() -> FastAPI:
	"""Build a fresh app with its own store; tests create one per test."""
	app = FastAPI(title="CinemaHub Demo Backend", version="1.0.0")
	store = Store()
	app.state.store = store

	def require_admin(authorization: Optional[str] = Header(default=None)) -> Dict[str, Any]:
		if not authorization or not authorization.startswith('Bearer '):
			raise HTTPException(status_code=401, detail='Missing bearer token')
		user_id = store.tokens.get(authorization[len('Bearer '):])
		user = store.users.get(user_id) if user_id else None
		if user is None:
			raise HTTPException(status_code=401, detail='Invalid token')
		if user['role'] != Role.ADMIN:
			raise HTTPException(status_code=403, detail='Admin role required')
		return user

	def get_movie_or_404(movie_id: str) -> Dict[str, Any]:
		movie = store.movies.get(movie_id)
		if movie is None:
			raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")
		return movie

	@app.post("/api/seed")
	def seed():
		"""Add the demo movies only when the catalog is empty."""
		with store.lock:
			created = 0
			if not store.movies:
				for raw in DEMO_MOVIES:
					sources = raw.get('sources', [{'label': 'auto', 'url': PLACEHOLDER_VIDEO_URL}])
					store.add_movie(MoviePayload(**{**raw, 'sources': sources}))
					created += 1
			logger.info(f"[Backend] Seed: created={created} total={len(store.movies)}")
			return {'created': created, 'total': len(store.movies)}

	@app.get("/api/movies", response_model=List[MovieOut])
	def list_movies(sort: Optional[str] = Query(default=None), limit: int = Query(default=20, ge=1, le=500)):
		if sort is not None and sort not in SORT_KEYS:
			raise HTTPException(status_code=422, detail=f"Unknown sort '{sort}'")
		with store.lock:
			return store.sorted_movies(sort)[:limit]

	@app.post("/api/movies", response_model=MovieOut, status_code=201)
	def create_movie(payload: MoviePayload):
		with store.lock:
			record = store.add_movie(payload)
		logger.info(f"[Backend] Created movie {record['id']} '{payload.title}'")
		return record

	@app.put("/api/movies/{movie_id}", response_model=MovieOut)
	def update_movie(movie_id: str, payload: MoviePayload):
		with store.lock:
			get_movie_or_404(movie_id)
			record = {'id': movie_id, **payload.model_dump()}
			store.movies[movie_id] = record
		return record

	@app.delete("/api/movies/{movie_id}", status_code=204)
	def delete_movie(movie_id: str):
		with store.lock:
			get_movie_or_404(movie_id)
			del store.movies[movie_id]
			store.created_at.pop(movie_id, None)
		return Response(status_code=204)

	@app.post("/api/movies/{movie_id}/progress")
	def report_progress(movie_id: str, body: ProgressIn):
		with store.lock:
			movie = get_movie_or_404(movie_id)
			key = (body.user_id, movie_id)
			if key not in store.progress:  # first report from this viewer counts as a view
				movie['views'] = movie.get('views', 0) + 1
			store.progress[key] = max(0, body.position_sec)
			return {'ok': True, 'position_sec': store.progress[key]}

	@app.post("/api/movies/{movie_id}/watchlist")
	def toggle_watchlist(movie_id: str, body: WatchlistIn):
		with store.lock:
			get_movie_or_404(movie_id)
			saved = store.watchlists.setdefault(body.user_id, set())
			if movie_id in saved:
				saved.remove(movie_id)
			else:
				saved.add(movie_id)
			return {'in_watchlist': movie_id in saved}

	@app.post("/api/auth/register", response_model=AuthOut)
	def register(body: RegisterIn):
		with store.lock:
			if store.find_user_by_email(body.email):
				raise HTTPException(status_code=409, detail='Email already registered')
			user = store.add_user(body.name, body.email, body.password)
			token = store.issue_token(user['id'])
		logger.info(f"[Backend] Registered {user['email']} as {user['role'].value}")
		return AuthOut(token=token, user=_public_user(user))

	@app.post("/api/auth/login", response_model=AuthOut)
	def login(body: LoginIn):
		with store.lock:
			user = store.find_user_by_email(body.email)
			if user is None or user['password'] != _digest(body.password):
				raise HTTPException(status_code=401, detail='Invalid credentials')
			token = store.issue_token(user['id'])
		return AuthOut(token=token, user=_public_user(user))

	@app.get("/api/admin/users", response_model=List[UserOut])
	def list_users(admin: Dict[str, Any] = Depends(require_admin)):
		with store.lock:
			return [_public_user(u) for u in store.users.values()]

	@app.patch("/api/admin/users/{user_id}/role", response_model=UserOut)
	def update_role(user_id: str, body: RoleIn, admin: Dict[str, Any] = Depends(require_admin)):
		with store.lock:
			user = store.users.get(user_id)
			if user is None:
				raise HTTPException(status_code=404, detail=f"User {user_id} not found")
			user['role'] = body.role
		logger.info(f"[Backend] {admin['email']} set role of {user['email']} to {body.role.value}")
		return _public_user(user)

	return app


# Module-level app for uvicorn
app = create_app()
