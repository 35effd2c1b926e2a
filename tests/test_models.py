"""
Unit tests for the data models: CSV coercion, backend parsing and the admin write payload.
"""

import pytest

from cinemahub.models import (
	DEFAULT_COUNTRY,
	PLACEHOLDER_POSTER_URL,
	PLACEHOLDER_VIDEO_URL,
	Movie,
	MovieForm,
	Role,
	User,
	build_payload,
	split_csv,
)


def test_split_csv_trims_and_drops_blanks():
	assert split_csv(" a, ,b ,") == ["a", "b"]
	assert split_csv("Drama") == ["Drama"]
	assert split_csv("") == []
	assert split_csv(None) == []
	assert split_csv([" x ", "", None, "y"]) == ["x", "y"]


def test_movie_from_dict_tolerates_nulls():
	movie = Movie.from_dict({'id': 7, 'title': 'Shum bola', 'genres': None, 'cast': None, 'sources': None, 'avg_rating': None})
	assert movie.id == '7'
	assert movie.genres == [] and movie.cast == [] and movie.sources == []
	assert movie.avg_rating == 0.0
	assert movie.primary_source is None


def test_movie_primary_source_is_first_entry():
	movie = Movie.from_dict({'id': 'a', 'title': 'T', 'sources': [
		{'label': '720p', 'url': 'http://cdn/a.mp4'},
		{'label': '480p', 'url': 'http://cdn/b.mp4'},
	]})
	assert movie.primary_source == 'http://cdn/a.mp4'


def test_form_from_movie_rejoins_lists():
	movie = Movie.from_dict({'id': 'x', 'title': 'Abdullajon', 'year': 1991, 'genres': ['Comedy', 'Science Fiction'],
		'cast': ['Ortiq Otajonov', 'Sayyora Yunusova'], 'sources': [{'label': 'auto', 'url': 'http://v/1.mp4'}]})
	form = MovieForm.from_movie(movie)
	assert form.is_edit
	assert form.genres == 'Comedy, Science Fiction'
	assert form.cast == 'Ortiq Otajonov, Sayyora Yunusova'
	assert form.source_url == 'http://v/1.mp4'


def test_build_payload_defaults_blank_fields():
	payload = build_payload(MovieForm(title='Test Film', year=2024, genres='', country=''))
	assert payload.title == 'Test Film'
	assert payload.original_title == 'Test Film'
	assert payload.year == 2024
	assert payload.duration_min == 100
	assert payload.genres == [] and payload.cast == []
	assert payload.country == DEFAULT_COUNTRY
	assert payload.poster_url == PLACEHOLDER_POSTER_URL
	assert [s.url for s in payload.sources] == [PLACEHOLDER_VIDEO_URL]
	assert payload.subtitles == [] and payload.tags == []
	assert payload.audio_tracks == ['original']


def test_build_payload_year_falls_back_when_not_numeric():
	assert build_payload(MovieForm(title='T', year='soon')).year == 2024
	assert build_payload(MovieForm(title='T', year='1999')).year == 1999


def test_user_from_dict_rejects_unknown_role():
	with pytest.raises(ValueError):
		User.from_dict({'id': 'u1', 'name': 'A', 'email': 'a@x', 'role': 'superuser'})
	user = User.from_dict({'id': 'u1', 'name': 'A', 'email': 'a@x', 'role': 'moderator'})
	assert user.role is Role.MODERATOR
