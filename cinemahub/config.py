"""
Runtime configuration for the CinemaHub client.
Values come from environment variables (a local .env file is loaded first).
"""

import os  # env-based settings
import sys  # stderr sink for logging
from dataclasses import dataclass  # settings record
from pathlib import Path  # storage location

from dotenv import load_dotenv  # read .env if present
from loguru import logger  # console logger

# Load .env file if it exists
load_dotenv()

# Backend used when CINEMAHUB_BACKEND_URL is not set
DEFAULT_BACKEND_URL = 'http://localhost:8000'

# Number of movies fetched per catalog slice
SLICE_PAGE_SIZE = 12

# Admin content tab lists at most this many movies
ADMIN_MOVIE_LIMIT = 100

# Sort keys for the three home page slices, in display order
SLICE_SORTS = ('new', 'popular', 'rating')

# Keys of the two durable local storage entries
TOKEN_KEY = 'cinemahub_token'
USER_KEY = 'cinemahub_user'


@dataclass
class Settings:
	backend_url: str = DEFAULT_BACKEND_URL  # base URL of the REST backend
	timeout: float = 10.0  # per-request timeout in seconds
	storage_path: Path = Path.home() / '.cinemahub' / 'storage.json'  # durable client storage
	page_size: int = SLICE_PAGE_SIZE
	admin_limit: int = ADMIN_MOVIE_LIMIT
	log_level: str = 'INFO'

	@classmethod
	def from_env(cls) -> 'Settings':
		"""Build settings from CINEMAHUB_* environment variables, falling back to defaults."""
		defaults = cls()
		timeout_raw = os.environ.get('CINEMAHUB_TIMEOUT')
		try:
			timeout = float(timeout_raw) if timeout_raw else defaults.timeout
		except ValueError:
			logger.warning(f"[Config] Ignoring invalid CINEMAHUB_TIMEOUT={timeout_raw!r}")
			timeout = defaults.timeout
		storage_raw = os.environ.get('CINEMAHUB_STORAGE')
		return cls(
			backend_url=(os.environ.get('CINEMAHUB_BACKEND_URL') or DEFAULT_BACKEND_URL).rstrip('/'),
			timeout=timeout,
			storage_path=Path(storage_raw).expanduser() if storage_raw else defaults.storage_path,
			log_level=(os.environ.get('CINEMAHUB_LOG_LEVEL') or defaults.log_level).upper(),
		)


def configure_logging(level: str = 'INFO') -> None:
	"""Replace loguru's default sink with a stderr sink at the given level."""
	logger.remove()
	logger.add(sys.stderr, level=level, format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}")
