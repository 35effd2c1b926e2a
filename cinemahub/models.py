"""
Data models for the CinemaHub client.
Defines the records shared by the API client, the session store and the overlays.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field, asdict  # auto-generates __init__, __repr__, etc.
# Enum gives the role field a closed set of values
from enum import Enum  # user / moderator / admin
# Typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional  # containers and optional values

# Pydantic describes the fixed-shape payload sent when saving a movie
from pydantic import BaseModel  # write-payload schema


class Role(str, Enum):
	"""Roles a backend user can hold."""
	USER = 'user'
	MODERATOR = 'moderator'
	ADMIN = 'admin'

	@classmethod
	def values(cls) -> List[str]:
		return [r.value for r in cls]


def split_csv(value) -> List[str]:
	"""
	Turn free-form comma-separated input into an ordered list of trimmed, non-empty strings.
	Lists are cleaned item by item; None and other types become an empty list.
	"""
	if value is None:  # missing field
		return []
	if isinstance(value, list):  # already a list
		return [str(item).strip() for item in value if item is not None and str(item).strip()]
	return [item.strip() for item in str(value).split(',') if item.strip()]  # split/trim


def _as_list(value) -> List[Any]:
	"""Backend lists may arrive as null; treat them as empty."""
	return list(value) if isinstance(value, (list, tuple)) else []


@dataclass
class MovieSource:
	label: str  # e.g. "auto", "720p"
	url: str  # direct progressive-download URL


@dataclass
class Movie:
	"""
	A single catalog entry as returned by the backend.
	Only the admin content form creates or edits these; everything else reads them.
	"""
	id: str  # backend identifier
	title: str  # display title
	original_title: str = ''  # title in the original language
	year: int = 0  # release year
	duration_min: int = 0  # runtime in minutes
	genres: List[str] = field(default_factory=list)  # ordered genre names
	poster_url: str = ''  # poster image reference
	description: str = ''  # synopsis
	director: str = ''  # director name
	cast: List[str] = field(default_factory=list)  # ordered cast members
	country: str = ''  # production country code
	trailer_youtube: str = ''  # optional trailer reference
	sources: List[MovieSource] = field(default_factory=list)  # playable sources, may be empty
	subtitles: List[Any] = field(default_factory=list)  # subtitle tracks
	audio_tracks: List[str] = field(default_factory=list)  # audio track names
	status: str = 'active'  # lifecycle status
	imdb_rating: float = 0.0  # editorial rating
	avg_rating: float = 0.0  # computed average user rating
	views: int = 0  # view counter
	tags: List[str] = field(default_factory=list)  # free-form tags

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> 'Movie':
		"""Build a Movie from a backend JSON object, tolerating missing keys and null lists."""
		sources = []
		for raw in _as_list(data.get('sources')):
			if isinstance(raw, dict) and raw.get('url'):  # skip entries without a URL
				sources.append(MovieSource(label=str(raw.get('label') or ''), url=str(raw['url'])))
		return cls(
			id=str(data.get('id', '')),
			title=data.get('title') or '',
			original_title=data.get('original_title') or '',
			year=int(data.get('year') or 0),
			duration_min=int(data.get('duration_min') or 0),
			genres=split_csv(_as_list(data.get('genres'))),
			poster_url=data.get('poster_url') or '',
			description=data.get('description') or '',
			director=data.get('director') or '',
			cast=split_csv(_as_list(data.get('cast'))),
			country=data.get('country') or '',
			trailer_youtube=data.get('trailer_youtube') or '',
			sources=sources,
			subtitles=_as_list(data.get('subtitles')),
			audio_tracks=[str(a) for a in _as_list(data.get('audio_tracks'))],
			status=data.get('status') or 'active',
			imdb_rating=float(data.get('imdb_rating') or 0.0),
			avg_rating=float(data.get('avg_rating') or 0.0),
			views=int(data.get('views') or 0),
			tags=[str(t) for t in _as_list(data.get('tags'))],
		)

	@property
	def primary_source(self) -> Optional[str]:
		"""URL of the first playable source, or None when the movie has none."""
		return self.sources[0].url if self.sources else None

	def searchable_fields(self) -> List[str]:
		"""Fields the catalog filter matches against: title, original title, director and each cast member."""
		return [f for f in [self.title, self.original_title, self.director, *self.cast] if f]


@dataclass
class User:
	id: str  # backend identifier
	name: str  # display name
	email: str  # login email
	role: Role = Role.USER  # authorization role

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> 'User':
		"""Parse a backend user record; raises ValueError on an unknown role or missing id."""
		if not isinstance(data, dict) or not data.get('id'):
			raise ValueError(f"Invalid user record: {data!r}")
		return cls(
			id=str(data['id']),
			name=data.get('name') or '',
			email=data.get('email') or '',
			role=Role(data.get('role') or Role.USER.value),  # ValueError on unknown roles
		)

	def to_dict(self) -> Dict[str, Any]:
		return {'id': self.id, 'name': self.name, 'email': self.email, 'role': self.role.value}


@dataclass
class Session:
	"""Client-held proof of authentication: bearer token plus the signed-in user."""
	token: str  # opaque bearer token
	user: User  # identity and role

	@property
	def role(self) -> Role:
		return self.user.role


@dataclass
class CatalogSlice:
	"""One named, ordered list of movies for a single ranking criterion."""
	name: str  # "new", "popular" or "rating"
	movies: List[Movie] = field(default_factory=list)  # replaced wholesale on every load


@dataclass
class ProgressReport:
	user_id: str  # who is watching
	movie_id: str  # what is playing
	position_sec: int  # floored playback position

	def to_body(self) -> Dict[str, Any]:
		return {'user_id': self.user_id, 'position_sec': self.position_sec}


# Defaults the admin form starts from
DEFAULT_YEAR = 2024
DEFAULT_GENRES = 'Action'
DEFAULT_COUNTRY = 'UZ'
DEFAULT_DURATION_MIN = 100
PLACEHOLDER_POSTER_URL = 'https://images.unsplash.com/photo-1524985069026-dd778a71c7b4?q=80&w=800&auto=format&fit=crop'
PLACEHOLDER_VIDEO_URL = 'https://samplelib.com/lib/preview/mp4/sample-5s.mp4'


@dataclass
class MovieForm:
	"""
	Scratch record mirroring a Movie's editable fields.
	id None means "create" mode; any id means "edit" mode.
	List fields are kept as the comma-separated text the admin types.
	"""
	id: Optional[str] = None
	title: str = ''
	original_title: str = ''
	year: Any = DEFAULT_YEAR  # raw input, coerced when the payload is built
	genres: str = DEFAULT_GENRES
	poster_url: str = ''
	description: str = ''
	director: str = ''
	cast: str = ''
	country: str = DEFAULT_COUNTRY
	source_url: str = ''

	@property
	def is_edit(self) -> bool:
		return self.id is not None

	@classmethod
	def from_movie(cls, movie: Movie) -> 'MovieForm':
		"""Populate the form from an existing movie, rejoining list fields with ', '."""
		return cls(
			id=movie.id,
			title=movie.title or '',
			original_title=movie.original_title or '',
			year=movie.year or DEFAULT_YEAR,
			genres=', '.join(movie.genres),
			poster_url=movie.poster_url or '',
			description=movie.description or '',
			director=movie.director or '',
			cast=', '.join(movie.cast),
			country=movie.country or DEFAULT_COUNTRY,
			source_url=movie.primary_source or '',
		)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


class SourcePayload(BaseModel):
	label: str
	url: str


class MoviePayload(BaseModel):
	"""Fixed-shape body sent to POST /api/movies and PUT /api/movies/{id}."""
	title: str
	original_title: str
	description: str = ''
	year: int = DEFAULT_YEAR
	duration_min: int = DEFAULT_DURATION_MIN
	genres: List[str] = []
	director: str = ''
	cast: List[str] = []
	country: str = DEFAULT_COUNTRY
	poster_url: str = PLACEHOLDER_POSTER_URL
	trailer_youtube: str = ''
	sources: List[SourcePayload] = []
	subtitles: List[Any] = []
	audio_tracks: List[str] = ['original']
	status: str = 'active'
	imdb_rating: float = 0.0
	avg_rating: float = 0.0
	views: int = 0
	tags: List[str] = []


def _coerce_year(value) -> int:
	"""Numeric years pass through; blanks, zero and junk fall back to the default year."""
	try:
		year = int(float(value))
	except (TypeError, ValueError):
		return DEFAULT_YEAR
	return year or DEFAULT_YEAR


def build_payload(form: MovieForm) -> MoviePayload:
	"""
	Build the write payload from the simplified admin form.
	Fields the form does not expose are defaulted; blank poster/video fall back to placeholders.
	"""
	title = form.title.strip()
	return MoviePayload(
		title=title,
		original_title=form.original_title.strip() or title,
		description=form.description or '',
		year=_coerce_year(form.year),
		duration_min=DEFAULT_DURATION_MIN,
		genres=split_csv(form.genres),
		director=form.director.strip(),
		cast=split_csv(form.cast),
		country=form.country.strip() or DEFAULT_COUNTRY,
		poster_url=form.poster_url.strip() or PLACEHOLDER_POSTER_URL,
		sources=[SourcePayload(label='auto', url=form.source_url.strip() or PLACEHOLDER_VIDEO_URL)],
	)
