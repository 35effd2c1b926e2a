"""
Seed the backend and load the home page catalog from the command line.

This script:
1) Reads settings from the environment (CINEMAHUB_BACKEND_URL etc.)
2) Optionally signs in (--email/--password)
3) Runs the same reseed + three-slice load the UI runs
4) Logs slice sizes and, with --query, the filtered newest slice

Usage:
    python -m scripts.smoke_catalog --query nolan
"""

import argparse  # command line flags
import sys  # exit codes

from loguru import logger  # console logging

from cinemahub.api_client import ApiClient
from cinemahub.catalog import CatalogView
from cinemahub.config import Settings, configure_logging
from cinemahub.errors import AuthError, RequestError
from cinemahub.session import SessionStore
from cinemahub.storage import MemoryStorage


def parse_args(argv=None):
	parser = argparse.ArgumentParser(description="Load the CinemaHub catalog and print slice sizes.")
	parser.add_argument('--query', default='', help="filter applied to the newest slice")
	parser.add_argument('--email', help="sign in before loading")
	parser.add_argument('--password', default='')
	return parser.parse_args(argv)


def main(argv=None) -> int:
	args = parse_args(argv)
	settings = Settings.from_env()
	configure_logging(settings.log_level)

	logger.info("=" * 60)
	logger.info(f"Catalog smoke test against {settings.backend_url}")
	logger.info("=" * 60)

	api = ApiClient.from_settings(settings)
	session = SessionStore(api, MemoryStorage())  # nothing persisted from a script
	if args.email:
		try:
			s = session.login(args.email, args.password)
			logger.info(f"[OK] Signed in as {s.user.name} ({s.role.value})")
		except AuthError as e:
			logger.error(f"Sign-in failed: {e}")
			return 1

	catalog = CatalogView(api, session, page_size=settings.page_size)
	try:
		catalog.load()
	except RequestError as e:
		logger.error(f"Catalog load failed: {e}")
		return 1

	for name, slice_ in catalog.slices.items():
		logger.info(f"[{name}] {len(slice_.movies)} movies")
		for movie in slice_.movies[:3]:
			logger.info(f"    {movie.title} ({movie.year}) views={movie.views} rating={movie.avg_rating:.1f}")

	if args.query:
		hits = catalog.filtered(args.query)
		logger.info(f"Query '{args.query}' matched {len(hits)} of {len(catalog.newest)} newest movies")
		for movie in hits:
			logger.info(f"    {movie.title} | {movie.director} | {', '.join(movie.cast[:3])}")
	return 0


if __name__ == '__main__':
	sys.exit(main())
