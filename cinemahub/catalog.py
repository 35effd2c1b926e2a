"""
Catalog view state: the three ranked slices shown on the home page and the search filter.
"""

from concurrent.futures import ThreadPoolExecutor  # the three slice fetches run side by side
from typing import Any, Dict, List, Optional

from loguru import logger  # console logger

from .api_client import ApiClient
from .config import SLICE_PAGE_SIZE, SLICE_SORTS
from .errors import AuthError, RequestError
from .models import CatalogSlice, Movie
from .session import SessionStore


def filter_movies(movies: List[Movie], query: str) -> List[Movie]:
	"""
	Keep movies whose title, original title, director or any cast member contains
	the query, case-insensitively. An empty query returns the list unchanged.
	"""
	if not query:
		return movies
	q = query.lower()
	return [m for m in movies if any(q in f.lower() for f in m.searchable_fields())]


class CatalogView:
	"""
	Owns the "new", "popular" and "rating" slices.
	load() reseeds, then fetches all three slices concurrently; each result replaces its slice wholesale.
	"""

	def __init__(self, api: ApiClient, session: SessionStore, page_size: int = SLICE_PAGE_SIZE):
		self.api = api
		self.session = session
		self.page_size = page_size
		self.slices: Dict[str, CatalogSlice] = {name: CatalogSlice(name) for name in SLICE_SORTS}
		self.loading = False  # renderers show a loading indicator while True

	@property
	def newest(self) -> List[Movie]:
		return self.slices['new'].movies

	@property
	def popular(self) -> List[Movie]:
		return self.slices['popular'].movies

	@property
	def top_rated(self) -> List[Movie]:
		return self.slices['rating'].movies

	def load(self) -> None:
		"""
		Reseed the backend, then fetch the three slices.
		The reseed is awaited only to sequence the fetches; its failure does not stop them.
		A failed fetch keeps that slice's previous contents; the first failure is raised
		after every fetch has finished.
		"""
		self.loading = True
		try:
			try:
				self.api.seed()
			except RequestError as e:
				logger.warning(f"[Catalog] Reseed failed, loading anyway: {e}")

			first_error: Optional[RequestError] = None
			with ThreadPoolExecutor(max_workers=len(SLICE_SORTS)) as pool:
				futures = {name: pool.submit(self.api.list_movies, name, self.page_size) for name in SLICE_SORTS}
				for name, future in futures.items():
					try:
						movies = future.result()
					except RequestError as e:
						logger.warning(f"[Catalog] Fetching slice '{name}' failed: {e}")
						first_error = first_error or e
						continue
					self.slices[name] = CatalogSlice(name, movies)  # replace wholesale
			logger.info(
				f"[Catalog] Loaded slices | new={len(self.newest)} popular={len(self.popular)} rating={len(self.top_rated)}"
			)
			if first_error is not None:
				raise first_error
		finally:
			self.loading = False

	def filtered(self, query: str) -> List[Movie]:
		"""Search box filter; only the newest slice is filtered."""
		return filter_movies(self.newest, query)

	def toggle_watchlist(self, movie: Movie) -> Any:
		"""Add or remove a movie on the signed-in user's watchlist; the backend decides which."""
		current = self.session.current
		if current is None:
			raise AuthError('Sign in to save movies')
		result = self.api.toggle_watchlist(movie.id, current.user.id, token=current.token)
		logger.info(f"[Catalog] Watchlist toggled for movie={movie.id} user={current.user.id}")
		return result
