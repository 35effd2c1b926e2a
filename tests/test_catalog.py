"""
Tests for the catalog view: reseed-then-fetch loading, slice replacement and the search filter.
"""

import pytest

from cinemahub.api_client import ApiClient
from cinemahub.catalog import CatalogView, filter_movies
from cinemahub.errors import AuthError, RequestError
from cinemahub.models import Movie
from cinemahub.session import SessionStore
from cinemahub.storage import MemoryStorage

from conftest import BASE_URL, ScriptedHttp, movie_dict

SAMPLE = [
	Movie.from_dict({'id': '1', 'title': 'Shum bola', 'original_title': 'The Naughty Boy', 'director': 'Melis Abzalov', 'cast': ['Pavel Ivanov']}),
	Movie.from_dict({'id': '2', 'title': 'Abdullajon', 'director': 'Zulfiqor Musoqov', 'cast': ['Ortiq Otajonov', 'Sayyora Yunusova']}),
	Movie.from_dict({'id': '3', 'title': 'Lovers', 'original_title': 'Sevishganlar', 'director': '', 'cast': []}),
]


def make_catalog(route):
	http = ScriptedHttp(route)
	api = ApiClient(BASE_URL, http=http)
	return CatalogView(api, SessionStore(api, MemoryStorage())), http


def test_empty_query_is_identity():
	assert filter_movies(SAMPLE, '') is SAMPLE


@pytest.mark.parametrize('query,expected', [
	('shum', ['1']),
	('NAUGHTY', ['1']),  # original title, any case
	('abzalov', ['1']),  # director
	('yunusova', ['2']),  # cast member
	('sevish', ['3']),
	('o', ['1', '2', '3']),
	('nobody', []),
])
def test_filter_matches_title_original_director_cast(query, expected):
	result = filter_movies(SAMPLE, query)
	assert [m.id for m in result] == expected
	for movie in result:
		assert movie in SAMPLE
		assert any(query.lower() in f.lower() for f in movie.searchable_fields())


def test_load_fills_slices_regardless_of_arrival_order():
	counts = {'new': 5, 'popular': 3, 'rating': 8}
	delays = {'new': 0.15, 'popular': 0.0, 'rating': 0.05}  # "new" answers last

	def route(method, path, params):
		if path == '/api/seed':
			return 200, {'created': 0}, 0
		sort = params['sort']
		return 200, [movie_dict(i) for i in range(counts[sort])], delays[sort]

	catalog, http = make_catalog(route)
	catalog.load()
	assert len(catalog.newest) == 5
	assert len(catalog.popular) == 3
	assert len(catalog.top_rated) == 8
	assert catalog.loading is False


def test_reseed_precedes_slice_fetches_with_page_size():
	def route(method, path, params):
		if path == '/api/seed':
			return 200, {}, 0.05
		return 200, [], 0

	catalog, http = make_catalog(route)
	catalog.load()
	assert http.calls[0]['path'] == '/api/seed' and http.calls[0]['method'] == 'POST'
	fetches = http.calls[1:]
	assert sorted(c['params']['sort'] for c in fetches) == ['new', 'popular', 'rating']
	assert all(c['params']['limit'] == 12 for c in fetches)
	assert all(c['started'] >= http.calls[0]['started'] + 0.05 for c in fetches)


def test_failed_reseed_does_not_stop_loading():
	def route(method, path, params):
		if path == '/api/seed':
			return 500, {'detail': 'boom'}, 0
		return 200, [movie_dict(1)], 0

	catalog, _ = make_catalog(route)
	catalog.load()
	assert len(catalog.newest) == 1


def test_failed_slice_keeps_previous_contents_and_raises():
	state = {'fail': False}

	def route(method, path, params):
		if path == '/api/seed':
			return 200, {}, 0
		if state['fail'] and params['sort'] == 'popular':
			return 503, {'detail': 'down'}, 0
		return 200, [movie_dict(i) for i in range(2 if state['fail'] else 4)], 0

	catalog, _ = make_catalog(route)
	catalog.load()
	state['fail'] = True
	with pytest.raises(RequestError):
		catalog.load()
	assert len(catalog.popular) == 4  # untouched
	assert len(catalog.newest) == 2  # replaced wholesale
	assert catalog.loading is False


def test_filtered_applies_to_newest_only():
	def route(method, path, params):
		if path == '/api/seed':
			return 200, {}, 0
		title = {'new': 'Shum bola', 'popular': 'Shum bola 2', 'rating': 'Other'}[params['sort']]
		return 200, [movie_dict(1, title=title), movie_dict(2, title='Yor-yor')], 0

	catalog, _ = make_catalog(route)
	catalog.load()
	assert [m.title for m in catalog.filtered('shum')] == ['Shum bola']
	assert len(catalog.popular) == 2


def test_watchlist_requires_sign_in(api, session):
	catalog = CatalogView(api, session)
	api.seed()
	movie = api.list_movies(limit=1)[0]
	with pytest.raises(AuthError):
		catalog.toggle_watchlist(movie)


def test_watchlist_toggle_is_decided_by_backend(api, admin_session):
	catalog = CatalogView(api, admin_session)
	api.seed()
	movie = api.list_movies(limit=1)[0]
	assert catalog.toggle_watchlist(movie) == {'in_watchlist': True}
	assert catalog.toggle_watchlist(movie) == {'in_watchlist': False}


def test_load_against_demo_backend(api, session):
	catalog = CatalogView(api, session, page_size=4)
	catalog.load()
	assert len(catalog.newest) == 4
	views = [m.views for m in catalog.popular]
	assert views == sorted(views, reverse=True)
	ratings = [m.avg_rating for m in catalog.top_rated]
	assert ratings == sorted(ratings, reverse=True)
