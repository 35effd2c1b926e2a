"""
Shared fixtures: an in-memory demo backend behind FastAPI's TestClient, and a scripted
fake transport for tests that need exact control over responses and timing.
"""

import json
import sys
import threading
import time
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient

from cinemahub.api_client import ApiClient
from cinemahub.session import SessionStore
from cinemahub.storage import LocalStorage
from dev_backend import create_app

BASE_URL = 'http://testserver'


class RecordingHttp:
	"""Delegates to another transport and remembers every (method, url, headers) it sent."""

	def __init__(self, inner):
		self.inner = inner
		self.calls = []

	def request(self, method, url, **kwargs):
		self.calls.append((method, url, dict(kwargs.get('headers') or {})))
		return self.inner.request(method, url, **kwargs)

	def paths(self):
		return [url[len(BASE_URL):] for _, url, _ in self.calls]


class FakeResponse:
	def __init__(self, status_code=200, payload=None, text=None):
		self.status_code = status_code
		if text is None:
			text = '' if payload is None else json.dumps(payload)
		self.text = text
		self.content = text.encode('utf-8')

	def json(self):
		return json.loads(self.text)


class ScriptedHttp:
	"""
	Answers requests from a routing function: route(method, path, params) -> (status, payload, delay).
	Records calls with the time each request started.
	"""

	def __init__(self, route):
		self.route = route
		self.calls = []
		self._lock = threading.Lock()

	def request(self, method, url, json=None, headers=None, params=None, timeout=None):
		path = url[len(BASE_URL):]
		with self._lock:
			self.calls.append({'method': method, 'path': path, 'params': dict(params or {}), 'body': json,
				'headers': dict(headers or {}), 'started': time.monotonic()})
		result = self.route(method, path, params or {})
		if isinstance(result, Exception):
			raise result
		status, payload, delay = result
		if delay:
			time.sleep(delay)
		return FakeResponse(status, payload)


def movie_dict(i, **extra):
	data = {'id': f"m{i}", 'title': f"Movie {i}", 'year': 2000 + i, 'genres': ['Drama'], 'cast': [], 'sources': []}
	data.update(extra)
	return data


@pytest.fixture
def backend():
	return TestClient(create_app())


@pytest.fixture
def http(backend):
	return RecordingHttp(backend)


@pytest.fixture
def api(http):
	return ApiClient(BASE_URL, http=http)


@pytest.fixture
def storage(tmp_path):
	return LocalStorage(tmp_path / 'storage.json')


@pytest.fixture
def session(api, storage):
	return SessionStore(api, storage)


@pytest.fixture
def admin_session(session):
	"""First account registered on the demo backend is an admin."""
	session.register('Admin', 'admin@example.com', 'secret')
	return session
