"""
Tests for the admin panel against the demo backend.
"""

import pytest

from cinemahub.admin import MOVIES_TAB, USERS_TAB, AdminPanel
from cinemahub.errors import ValidationError
from cinemahub.models import MovieForm, Role
from cinemahub.session import SessionStore
from cinemahub.storage import MemoryStorage


class Recorder:
	def __init__(self):
		self.messages = []
		self.refreshes = 0

	def notify(self, message):
		self.messages.append(message)

	def refresh(self):
		self.refreshes += 1


@pytest.fixture
def recorder():
	return Recorder()


@pytest.fixture
def panel(api, admin_session, recorder):
	api.seed()
	return AdminPanel(api, admin_session, notify=recorder.notify, on_data_changed=recorder.refresh)


def test_open_loads_both_tabs(panel):
	panel.open()
	assert panel.is_open
	assert len(panel.movies) > 0
	assert [u.email for u in panel.users] == ['admin@example.com']


def test_create_appears_in_list_and_refreshes_home(panel, recorder):
	panel.load_movies()
	panel.form = MovieForm(title='Test Film', year=2024, genres='', country='')
	assert panel.submit() is True
	titles = [m.title for m in panel.movies]
	assert 'Test Film' in titles
	assert recorder.refreshes == 1
	assert recorder.messages[-1] == 'Saved'
	assert not panel.form.is_edit and panel.form.title == ''


def test_edit_then_update(panel):
	panel.load_movies()
	target = panel.movies[0]
	panel.switch_tab(USERS_TAB)
	panel.edit(target)
	assert panel.tab == MOVIES_TAB
	assert panel.form.id == target.id
	panel.form.title = 'Renamed'
	panel.form.cast = 'A, B ,, C'
	assert panel.submit() is True
	updated = next(m for m in panel.movies if m.id == target.id)
	assert updated.title == 'Renamed'
	assert updated.cast == ['A', 'B', 'C']


def test_submit_without_title_is_rejected_before_any_call(panel, http):
	before = len(http.calls)
	panel.form = MovieForm(title='  ')
	with pytest.raises(ValidationError):
		panel.submit()
	assert len(http.calls) == before


def test_delete_nonexistent_notifies_and_keeps_list(panel, recorder):
	panel.load_movies()
	before = [m.id for m in panel.movies]
	assert panel.delete('does-not-exist', confirm=lambda: True) is False
	assert [m.id for m in panel.movies] == before
	assert recorder.refreshes == 0
	assert 'does-not-exist' in recorder.messages[-1]


def test_delete_requires_confirmation(panel, recorder, http):
	panel.load_movies()
	target = panel.movies[0].id
	before = len(http.calls)
	assert panel.delete(target, confirm=lambda: False) is False
	assert len(http.calls) == before
	assert panel.delete(target, confirm=lambda: True) is True
	assert target not in [m.id for m in panel.movies]
	assert recorder.refreshes == 1


def test_role_change_is_reflected(panel, api, recorder):
	other = SessionStore(api, MemoryStorage())
	user = other.register('Sardor', 'sardor@example.com', 'pw').user
	assert panel.change_role(user.id, 'moderator') is True
	roles = {u.id: u.role for u in panel.users}
	assert roles[user.id] is Role.MODERATOR
	assert recorder.messages[-1] == 'Role updated'


def test_unknown_role_is_rejected(panel):
	with pytest.raises(ValidationError):
		panel.change_role('someone', 'owner')


def test_non_admin_does_not_load_users(api, session, http, recorder):
	api.seed()
	session.register('First', 'first@example.com', 'pw')  # becomes admin
	session.register('Second', 'second@example.com', 'pw')  # plain user, now current
	panel = AdminPanel(api, session, notify=recorder.notify)
	before = len(http.calls)
	assert panel.load_users() == []
	assert len(http.calls) == before


def test_logout_hides_users_immediately(panel, http):
	panel.load_users()
	assert panel.users
	panel.session.logout()
	before = len(http.calls)
	assert panel.load_users() == []
	assert len(http.calls) == before


def test_form_revision_changes_when_form_is_replaced(panel):
	start = panel.form_revision
	panel.form = MovieForm(title='   ')
	with pytest.raises(ValidationError):
		panel.submit()
	assert panel.form_revision == start  # typed input stays on a rejected save
	panel.form.title = 'Test Film'
	assert panel.submit() is True
	assert panel.form_revision == start + 1
	assert panel.form.title == ''
	panel.load_movies()
	panel.edit(panel.movies[0])
	assert panel.form_revision == start + 2
	panel.reset_form()
	assert panel.form_revision == start + 3


def test_failed_role_change_keeps_stored_role(panel, api, recorder):
	other = SessionStore(api, MemoryStorage())
	user = other.register('Sardor', 'sardor@example.com', 'pw').user
	panel.load_users()
	panel.session.current.token = 'revoked'  # backend answers 401 from now on
	assert panel.change_role(user.id, 'admin') is False
	assert {u.id: u.role for u in panel.users}[user.id] is Role.USER
	assert 'Updating role failed' in recorder.messages[-1]
