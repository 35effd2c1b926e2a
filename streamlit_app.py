"""
Streamlit UI for CinemaHub.
Lists the newest, most viewed and top rated movies from the backend, plays them in a
modal player, and offers sign-in plus an admin panel for admin accounts.

Run backend (demo):  uvicorn dev_backend:app --reload
Run UI:              streamlit run streamlit_app.py
"""

from dataclasses import dataclass  # per-browser-session container
from datetime import date  # footer year

# Streamlit framework to build the interactive UI
import streamlit as st  # UI primitives

from loguru import logger  # console logger

from cinemahub.admin import MOVIES_TAB, USERS_TAB, AdminPanel
from cinemahub.api_client import ApiClient
from cinemahub.auth import LOGIN, REGISTER, AuthOverlay
from cinemahub.catalog import CatalogView
from cinemahub.config import Settings, configure_logging
from cinemahub.errors import AuthError, RequestError, ValidationError
from cinemahub.models import Movie, Role
from cinemahub.player import NO_SOURCE_TEXT, KeyListeners, PlayerOverlay
from cinemahub.session import SessionStore
from cinemahub.storage import LocalStorage

APP_NAME = "CinemaHub"
CARDS_PER_ROW = 6

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title=APP_NAME, page_icon="🎬", layout="wide")


@dataclass
class ClientContext:
	"""Everything one browser session needs, built once and kept in st.session_state."""
	settings: Settings
	session: SessionStore
	catalog: CatalogView
	player: PlayerOverlay
	auth: AuthOverlay
	admin: AdminPanel
	keys: KeyListeners


def notify(message: str) -> None:
	"""Queue a notification; shown as a toast on the next render."""
	st.session_state.setdefault('notices', []).append(message)


def flush_notices() -> None:
	for message in st.session_state.pop('notices', []):
		st.toast(message)


def request_catalog_reload() -> None:
	st.session_state['reload_catalog'] = True


def build_context() -> ClientContext:
	settings = Settings.from_env()  # env / .env driven
	configure_logging(settings.log_level)
	api = ApiClient.from_settings(settings)
	session = SessionStore(api, LocalStorage(settings.storage_path))
	session.restore()  # never raises; None when nothing valid is stored
	keys = KeyListeners()
	player = PlayerOverlay(api, session, keys=keys)  # listens for Escape only while open
	logger.info(f"[UI] Client ready against {settings.backend_url}")
	return ClientContext(
		settings=settings,
		session=session,
		catalog=CatalogView(api, session, page_size=settings.page_size),
		player=player,
		auth=AuthOverlay(session),
		admin=AdminPanel(api, session, notify=notify, on_data_changed=request_catalog_reload, movie_limit=settings.admin_limit),
		keys=keys,
	)


if 'ctx' not in st.session_state:
	st.session_state['ctx'] = build_context()
ctx: ClientContext = st.session_state['ctx']


def load_catalog() -> None:
	with st.spinner("Loading..."):  # loading indicator instead of the slices
		try:
			ctx.catalog.load()
		except RequestError as e:
			st.error(f"Could not load the catalog: {e}")


# --- dialogs ---

@st.dialog("Player", width="large")
def player_dialog():
	player = ctx.player
	header = player.describe()
	st.subheader(header['title'])
	st.caption(header['subtitle'])
	source = player.active_source
	if source:
		st.video(source)
		# Streamlit has no time-update callback, so the position is reported explicitly
		c1, c2 = st.columns([3, 1])
		with c1:
			position = st.number_input("Position (seconds)", min_value=0.0, step=1.0, key="player_position")
		with c2:
			if st.button("Save position", width="stretch"):
				if player.on_time_update(position) is not None:
					st.toast(f"Position saved at {int(position)}s")
	else:
		st.info(NO_SOURCE_TEXT)  # placeholder, never a broken media element
	if player.movie and player.movie.description:
		st.write(player.movie.description)
	if st.button("Close", key="player_close"):
		player.close()
		st.rerun()


@st.dialog("Sign in")
def auth_dialog():
	auth = ctx.auth
	st.subheader("Sign in" if auth.mode == LOGIN else "Create account")
	with st.form("auth_form"):
		if auth.mode == REGISTER:
			auth.form['name'] = st.text_input("Name", value=auth.form['name'])
		auth.form['email'] = st.text_input("Email", value=auth.form['email'])
		auth.form['password'] = st.text_input("Password", value=auth.form['password'], type="password")
		submitted = st.form_submit_button("Sign in" if auth.mode == LOGIN else "Register", type="primary", width="stretch")
	if submitted:
		try:
			ok = auth.submit()
		except ValidationError as e:
			st.warning(str(e))
		else:
			if ok:
				st.rerun()
			st.error(auth.notice)
	toggle_label = "No account? Register" if auth.mode == LOGIN else "Already have an account? Sign in"
	if st.button(toggle_label, key="auth_toggle"):
		auth.toggle_mode()
		st.rerun(scope="fragment")


def _render_movie_form(admin: AdminPanel) -> None:
	form = admin.form
	rev = admin.form_revision  # new keys after save/cancel/edit, so inputs start from the new form
	st.markdown("**Edit movie**" if form.is_edit else "**Add movie**")
	with st.form(f"admin_movie_form_{rev}", clear_on_submit=False):
		form.title = st.text_input("Title", value=form.title, key=f"title_{rev}")
		form.original_title = st.text_input("Original title", value=form.original_title, key=f"original_title_{rev}")
		c1, c2 = st.columns(2)
		with c1:
			form.year = st.text_input("Year", value=str(form.year), key=f"year_{rev}")
		with c2:
			form.country = st.text_input("Country", value=form.country, key=f"country_{rev}")
		form.genres = st.text_input("Genres (comma separated)", value=form.genres, key=f"genres_{rev}")
		form.poster_url = st.text_input("Poster URL", value=form.poster_url, key=f"poster_url_{rev}")
		form.source_url = st.text_input("Video URL", value=form.source_url, key=f"source_url_{rev}")
		form.director = st.text_input("Director", value=form.director, key=f"director_{rev}")
		form.cast = st.text_input("Cast (comma separated)", value=form.cast, key=f"cast_{rev}")
		form.description = st.text_area("Description", value=form.description, height=80, key=f"description_{rev}")
		saved = st.form_submit_button("Update" if form.is_edit else "Add", type="primary", disabled=admin.busy)
	if saved:
		try:
			admin.submit()
		except ValidationError as e:
			st.warning(str(e))
		st.rerun(scope="fragment")
	if form.is_edit and st.button("Cancel edit"):
		admin.reset_form()
		st.rerun(scope="fragment")


def _render_movie_list(admin: AdminPanel) -> None:
	st.markdown(f"**Movies** ({len(admin.movies)})")
	pending = st.session_state.get('confirm_delete')
	for movie in admin.movies:
		c1, c2, c3 = st.columns([1, 4, 2])
		with c1:
			if movie.poster_url:
				st.image(movie.poster_url, width=56)
		with c2:
			st.write(movie.title)
			st.caption(f"{movie.year} • {', '.join(movie.genres)}")
		with c3:
			if st.button("Edit", key=f"edit_{movie.id}"):
				admin.edit(movie)
				st.rerun(scope="fragment")
			if pending == movie.id:
				if st.button("Confirm delete", key=f"confirm_{movie.id}", type="primary"):
					st.session_state.pop('confirm_delete', None)
					admin.delete(movie.id, confirm=lambda: True)
					st.rerun(scope="fragment")
			elif st.button("Delete", key=f"delete_{movie.id}"):
				st.session_state['confirm_delete'] = movie.id
				st.rerun(scope="fragment")


def _change_role(admin: AdminPanel, user_id: str) -> None:
	key = f"role_{user_id}"
	if not admin.change_role(user_id, st.session_state[key]):
		st.session_state.pop(key, None)  # selector falls back to the user's stored role


def _render_users(admin: AdminPanel) -> None:
	st.markdown(f"**Users** ({len(admin.users)})")
	roles = Role.values()
	for user in admin.users:
		c1, c2 = st.columns([3, 2])
		with c1:
			st.write(f"{user.name} ({user.email})")
			st.caption(user.role.value)
		with c2:
			st.selectbox(
				"Role",
				roles,
				index=roles.index(user.role.value),
				key=f"role_{user.id}",
				label_visibility="collapsed",
				on_change=_change_role,
				args=(admin, user.id),
			)


@st.dialog("Admin panel", width="large")
def admin_dialog():
	admin = ctx.admin
	if not ctx.session.is_admin():  # re-checked on every render
		st.warning("Admin role required")
		return
	for message in st.session_state.pop('notices', []):
		st.info(message)
	tab = st.radio("Section", [MOVIES_TAB, USERS_TAB], index=0 if admin.tab == MOVIES_TAB else 1,
		format_func=lambda t: "Content" if t == MOVIES_TAB else "Users", horizontal=True)
	admin.switch_tab(tab)
	left, right = st.columns([1, 2])
	if admin.tab == MOVIES_TAB:
		with left:
			_render_movie_form(admin)
		with right:
			_render_movie_list(admin)
	else:
		with left:
			_render_users(admin)
		with right:
			st.markdown("**User statistics**")
			st.caption(f"Total: {len(admin.users)}")
	if st.button("Close", key="admin_close"):
		admin.close()
		st.rerun()


# --- page ---

def render_card(movie: Movie, section: str) -> None:
	if movie.poster_url:
		st.image(movie.poster_url, width='stretch')
	st.caption(f"{movie.year} · ⭐ {movie.avg_rating:.1f}")
	st.markdown(f"**{movie.title}**")
	st.caption(', '.join(movie.genres))
	c1, c2 = st.columns(2)
	with c1:
		if st.button("▶ Watch", key=f"play_{section}_{movie.id}"):
			ctx.player.open(movie)
			st.session_state['dialog'] = 'player'
			st.rerun()
	with c2:
		if st.button("🔖", key=f"save_{section}_{movie.id}", help="Toggle watchlist"):
			try:
				result = ctx.catalog.toggle_watchlist(movie)
			except AuthError as e:
				notify(str(e))
			except RequestError as e:
				notify(f"Saving failed: {e}")
			else:
				in_list = isinstance(result, dict) and result.get('in_watchlist')
				notify("Added to watchlist" if in_list else "Removed from watchlist")
			st.rerun()


def render_section(title: str, movies, section: str) -> None:
	st.subheader(title)
	if not movies:
		st.caption("Nothing here yet.")
		return
	for start in range(0, len(movies), CARDS_PER_ROW):
		cols = st.columns(CARDS_PER_ROW)
		for col, movie in zip(cols, movies[start:start + CARDS_PER_ROW]):
			with col:
				render_card(movie, section)


# Header: brand, search box, session controls
brand, search_col, session_col = st.columns([2, 4, 3])
with brand:
	st.markdown(f"## 🎬 {APP_NAME}")
with search_col:
	query = st.text_input("Search", placeholder="Search", label_visibility="collapsed")
with session_col:
	current = ctx.session.current
	if current is not None:
		c1, c2, c3 = st.columns(3)
		with c1:
			if ctx.session.is_admin() and st.button("🛡 Admin"):  # role checked each render
				ctx.admin.open()
				st.session_state['dialog'] = 'admin'
				st.rerun()
		with c2:
			st.caption(f"Hello, {current.user.name}")
		with c3:
			if st.button("Sign out"):
				ctx.session.logout()
				ctx.admin.close()
				st.rerun()
	elif st.button("Sign in"):
		ctx.auth.show(LOGIN)
		st.session_state['dialog'] = 'auth'
		st.rerun()

flush_notices()

if 'catalog_loaded' not in st.session_state or st.session_state.pop('reload_catalog', False):
	load_catalog()
	st.session_state['catalog_loaded'] = True

st.markdown("### New releases")
st.caption("The latest movies and series")
render_section("Newly added", ctx.catalog.filtered(query), 'new')
render_section("Most viewed", ctx.catalog.popular, 'popular')
render_section("Recommended", ctx.catalog.top_rated, 'rating')

st.divider()
st.caption(f"© {date.today().year} {APP_NAME}")

# Dialogs open only on the run that requested them; a full rerun without a request
# means the dialog was dismissed (Escape or backdrop), so the overlay state follows.
dialog = st.session_state.pop('dialog', None)
if dialog == 'player':
	player_dialog()
else:
	if ctx.player.is_open:
		ctx.keys.dispatch('Escape')
	if dialog == 'auth':
		auth_dialog()
	elif dialog == 'admin':
		admin_dialog()
	else:
		ctx.auth.close()
		ctx.admin.close()
