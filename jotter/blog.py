#!/usr/bin/env python3
"""
A single-file multi-user blog.
"""

import os
import re
import sqlite3
from collections import defaultdict, deque
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from functools import wraps
from html import unescape
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from time import time
from typing import DefaultDict

import bleach
import click
import markdown
from flask import (
    Flask,
    Response,
    g,
    redirect,
    render_template_string,
    request,
    url_for,
)
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from markupsafe import Markup
from werkzeug.middleware.proxy_fix import ProxyFix
from werkzeug.security import check_password_hash, generate_password_hash

################################################################################
# Imports & constants
################################################################################

ROOT = Path(__file__).parent
ENV_FILE = ROOT.parent / ".env"
DB_FILE = Path(os.environ.get("JOTTER_DB", ROOT / "blog.sqlite3"))

SECRET_ENV = "JOTTER_SECRET"
COOKIE_NAME = "jotter_session"
SESSION_MAX_AGE = 60 * 60 * 24  # 24 h, both token expiry and cookie max-age
LOGIN_RATE_LIMIT = int(os.environ.get("JOTTER_LOGIN_RATE_LIMIT", "10"))

# pbkdf2 with a pinned iteration count so every hash costs the same
PASSWORD_METHOD = os.environ.get("JOTTER_PASSWORD_METHOD", "pbkdf2:sha256:600000")
PASSWORD_SALT_LENGTH = 16

USERNAME_RE = re.compile(r"^[a-zA-Z0-9]+$")
USERNAME_MIN, USERNAME_MAX = 3, 10
PASSWORD_MIN, PASSWORD_MAX = 8, 50

LOGIN_ERROR = "Invalid username/password."
USERNAME_TAKEN = "Username already taken."

ALLOWED_TAGS = [
    "p",
    "br",
    "ul",
    "ol",
    "li",
    "strong",
    "b",
    "em",
    "i",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
]
MD_EXTENSIONS = ["pymdownx.betterem", "pymdownx.saneheaders"]

try:
    __version__ = version("jotter")
except PackageNotFoundError:
    __version__ = "0.1.0-dev"


def _read_env_file(env_file: Path = ENV_FILE) -> dict[str, str]:
    env = {}
    if not env_file.exists():
        return env
    for ln in env_file.read_text().splitlines():
        ln = ln.strip()
        if not ln or ln.startswith("#") or "=" not in ln:
            continue
        k, v = ln.split("=", 1)
        env[k.strip()] = v.strip()
    return env


def load_secret(environ=None, env_file: Path = ENV_FILE) -> str:
    """
    Return the signing secret from the process env (or the .env file).
    A missing secret is a startup error, never a silently generated key.
    """
    environ = os.environ if environ is None else environ
    secret = environ.get(SECRET_ENV) or _read_env_file(env_file).get(SECRET_ENV) or ""
    secret = secret.strip()
    if not secret:
        raise RuntimeError(f"{SECRET_ENV} must be set in the environment")
    return secret


SECRET_KEY = load_secret()

################################################################################
# App + template filters
################################################################################
app = Flask(__name__)
app.url_map.strict_slashes = False
app.config.update(SECRET_KEY=SECRET_KEY, DATABASE=str(DB_FILE))
app.config.update(
    SESSION_COOKIE_SAMESITE="Strict",  # never sent on cross-site requests
    SESSION_COOKIE_HTTPONLY=True,  # mitigate XSS → cookie theft
    SESSION_COOKIE_SECURE=True,  # only over HTTPS
)
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)
app.jinja_env.globals["version"] = __version__


def to_safe_html(text: str | None) -> str:
    """
    Render markdown, then keep only the allow-listed tags with no
    attributes at all. Anything else survives only as escaped text.
    """
    # stored bodies are entity-escaped by strip_html; bleach is the gate
    html = markdown.markdown(unescape(text or ""), extensions=MD_EXTENSIONS)
    return bleach.clean(html, tags=ALLOWED_TAGS, attributes={}, strip=True)


def strip_html(text: str | None) -> str:
    """Drop every tag; the result is escaped plain text."""
    return bleach.clean(text or "", tags=[], attributes={}, strip=True)


@app.template_filter("md")
def md_filter(text: str | None) -> Markup:
    return Markup(to_safe_html(text))


@app.template_filter("plain")
def plain_filter(text: str | None) -> str:
    # stored text is entity-escaped by strip_html; autoescape re-applies it
    return unescape(text or "")


@app.template_filter("ts")
def ts_filter(iso: str | None) -> str:
    if not iso:
        return ""
    try:
        dt = datetime.fromisoformat(iso.replace("Z", "+00:00"))
    except ValueError:
        return iso
    return dt.strftime("%Y.%m.%d %H:%M")


###############################################################################
# Database helpers
###############################################################################
SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        id        INTEGER PRIMARY KEY AUTOINCREMENT,
        username  TEXT NOT NULL UNIQUE,
        password  TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS posts (
        id           INTEGER PRIMARY KEY AUTOINCREMENT,
        createdDate  TEXT,
        title        TEXT NOT NULL,
        body         TEXT NOT NULL,
        authorid     INTEGER,
        FOREIGN KEY (authorid) REFERENCES users(id)
    );
"""


def get_db():
    if "db" not in g:
        g.db = sqlite3.connect(app.config["DATABASE"])
        g.db.execute("PRAGMA foreign_keys = ON;")
        g.db.row_factory = sqlite3.Row
    return g.db


@app.teardown_appcontext
def close_db(error=None):
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db():
    """Create both tables or neither."""
    db = get_db()
    db.execute("PRAGMA journal_mode = WAL;")
    try:
        db.executescript("BEGIN;" + SCHEMA + "COMMIT;")
    except sqlite3.Error:
        if db.in_transaction:
            db.rollback()
        raise


@dataclass
class User:
    id: int
    username: str
    password: str

    @classmethod
    def from_row(cls, row) -> "User":
        return cls(id=row["id"], username=row["username"], password=row["password"])


@dataclass
class Post:
    id: int
    created_date: str
    title: str
    body: str
    author_id: int
    username: str | None = None  # only set by the joined lookup

    @classmethod
    def from_row(cls, row) -> "Post":
        return cls(
            id=row["id"],
            created_date=row["createdDate"],
            title=row["title"],
            body=row["body"],
            author_id=row["authorid"],
            username=row["username"] if "username" in row.keys() else None,
        )


class Store:
    """Every statement the app runs against `users` and `posts`."""

    def __init__(self, db: sqlite3.Connection):
        self.db = db

    # ── users ────────────────────────────────────────────────────────
    def create_user(self, username: str, password_hash: str) -> User:
        cur = self.db.execute(
            "INSERT INTO users (username, password) VALUES (?, ?)",
            (username, password_hash),
        )
        self.db.commit()
        return User(id=cur.lastrowid, username=username, password=password_hash)

    def find_user_by_username(self, username: str) -> User | None:
        row = self.db.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone()
        return User.from_row(row) if row else None

    # ── posts ────────────────────────────────────────────────────────
    def create_post(
        self, title: str, body: str, author_id: int, created_at: str
    ) -> Post:
        cur = self.db.execute(
            "INSERT INTO posts (title, body, authorid, createdDate) VALUES (?, ?, ?, ?)",
            (title, body, author_id, created_at),
        )
        self.db.commit()
        return Post(
            id=cur.lastrowid,
            created_date=created_at,
            title=title,
            body=body,
            author_id=author_id,
        )

    def find_post(self, post_id: int) -> Post | None:
        row = self.db.execute("SELECT * FROM posts WHERE id = ?", (post_id,)).fetchone()
        return Post.from_row(row) if row else None

    def find_post_with_author(self, post_id: int) -> Post | None:
        row = self.db.execute(
            """
            SELECT posts.*, users.username
              FROM posts
              JOIN users ON posts.authorid = users.id
             WHERE posts.id = ?
            """,
            (post_id,),
        ).fetchone()
        return Post.from_row(row) if row else None

    def list_posts_by_author(self, author_id: int) -> list[Post]:
        rows = self.db.execute(
            "SELECT * FROM posts WHERE authorid = ? ORDER BY createdDate DESC, id DESC",
            (author_id,),
        ).fetchall()
        return [Post.from_row(r) for r in rows]

    def update_post(self, post_id: int, title: str, body: str) -> None:
        self.db.execute(
            "UPDATE posts SET title = ?, body = ? WHERE id = ?", (title, body, post_id)
        )
        self.db.commit()

    def delete_post(self, post_id: int) -> None:
        self.db.execute("DELETE FROM posts WHERE id = ?", (post_id,))
        self.db.commit()


def get_store() -> Store:
    return Store(get_db())


# -------------------------------------------------------------------------
# Time helpers
# -------------------------------------------------------------------------
def utc_now() -> datetime:
    """Return an *aware* datetime in UTC."""
    return datetime.now(timezone.utc)


def iso_stamp(dt: datetime) -> str:
    """2024-05-01T12:00:00.000Z – sorts lexicographically."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


###############################################################################
# CLI – create schema
###############################################################################
@app.cli.command("init-db")
def cli_init_db():
    """Create the users/posts tables (no-op if they exist)."""
    init_db()
    click.secho(f"\n✅  Database ready at {app.config['DATABASE']}\n", fg="green")


###############################################################################
# Credentials + session tokens
###############################################################################
def hash_password(password: str) -> str:
    return generate_password_hash(
        password, method=PASSWORD_METHOD, salt_length=PASSWORD_SALT_LENGTH
    )


def verify_password(password: str, pwhash: str | None) -> bool:
    """A malformed or empty hash never matches."""
    if not pwhash:
        return False
    try:
        return check_password_hash(pwhash, password)
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str


class TokenService:
    """
    Signed, time-limited session tokens.

    • The payload carries the user id + username.
    • The issue time is the signed timestamp; `max_age` enforces expiry.
    • Every failure collapses into ``None``.
    """

    def __init__(self, secret: str, *, max_age: int = SESSION_MAX_AGE):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret, salt="session")

    def issue(self, user_id: int, username: str) -> str:
        return self._serializer.dumps({"userid": user_id, "username": username})

    def verify(self, token: str | None) -> Identity | None:
        if not token:
            return None
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            return None  # too old ➜ invalid
        except BadSignature:
            return None  # forged ➜ invalid
        if not isinstance(data, dict):
            return None
        user_id, username = data.get("userid"), data.get("username")
        if not isinstance(user_id, int) or not isinstance(username, str):
            return None
        return Identity(user_id=user_id, username=username)


tokens = TokenService(SECRET_KEY)


def set_session_cookie(resp: Response, identity: Identity) -> Response:
    resp.set_cookie(
        COOKIE_NAME,
        tokens.issue(identity.user_id, identity.username),
        max_age=SESSION_MAX_AGE,
        httponly=app.config["SESSION_COOKIE_HTTPONLY"],
        secure=app.config["SESSION_COOKIE_SECURE"],
        samesite=app.config["SESSION_COOKIE_SAMESITE"],
    )
    return resp


###############################################################################
# Authentication
###############################################################################
@app.before_request
def load_identity():
    g.user = tokens.verify(request.cookies.get(COOKIE_NAME))


@app.context_processor
def inject_user():
    return {"user": g.get("user")}


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if g.get("user") is None:
            return redirect(url_for("index"))
        return view(*args, **kwargs)

    return wrapped


def rate_limit(max_requests: int, window: int = 60):
    hits: DefaultDict[str, deque] = defaultdict(deque)

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if request.method != "POST":
                return view(*args, **kwargs)

            now = time()
            # left-most entry after ProxyFix = real client
            ip = (
                request.access_route[0] if request.access_route else request.remote_addr
            ) or "unknown"

            # forget clients whose newest hit has left the window
            for stale in [k for k, v in hits.items() if not v or now - v[-1] > window]:
                del hits[stale]

            dq = hits[ip]
            while dq and now - dq[0] > window:
                dq.popleft()

            if len(dq) >= max_requests:
                retry_after = int(window - (now - dq[0]))
                app.logger.warning("login rate limit hit for %s", ip)
                return Response(
                    "Too many requests – try again later.",
                    status=429,
                    headers={"Retry-After": str(retry_after)},
                )

            dq.append(now)
            return view(*args, **kwargs)

        wrapped.hits = hits
        return wrapped

    return decorator


@app.after_request
def sec_headers(resp):
    resp.headers.update(
        {
            "X-Frame-Options": "DENY",
            "X-Content-Type-Options": "nosniff",
            "Referrer-Policy": "strict-origin-when-cross-origin",
        }
    )
    return resp


###############################################################################
# Form input + validation
###############################################################################
@dataclass
class Credentials:
    username: str = ""
    password: str = ""

    @classmethod
    def from_form(cls, form) -> "Credentials":
        return cls(
            username=form.get("username", "") or "",
            password=form.get("password", "") or "",
        )


@dataclass
class PostInput:
    title: str = ""
    body: str = ""

    @classmethod
    def from_form(cls, form) -> "PostInput":
        return cls(title=form.get("title", "") or "", body=form.get("body", "") or "")


def validate_registration(creds: Credentials, *, store: Store) -> list[str]:
    """Collect every problem, not just the first one."""
    errors = []
    username, password = creds.username, creds.password

    if not username:
        errors.append("Username is required.")
    elif len(username) < USERNAME_MIN:
        errors.append(f"Username must be at least {USERNAME_MIN} characters.")
    elif len(username) > USERNAME_MAX:
        errors.append(f"Username cannot exceed {USERNAME_MAX} characters.")
    elif not USERNAME_RE.match(username):
        errors.append("Username can only contain letters and numbers.")

    if not password:
        errors.append("Password is required.")
    elif len(password) < PASSWORD_MIN:
        errors.append(f"Password must be at least {PASSWORD_MIN} characters.")
    elif len(password) > PASSWORD_MAX:
        errors.append(f"Password cannot exceed {PASSWORD_MAX} characters.")

    if username and store.find_user_by_username(username):
        errors.append(USERNAME_TAKEN)

    return errors


def validate_post(data: PostInput) -> tuple[PostInput, list[str]]:
    """Strip markup from title + body; both must survive non-empty."""
    cleaned = PostInput(
        title=strip_html(data.title.strip()).strip(),
        body=strip_html(data.body.strip()).strip(),
    )
    errors = []
    if not cleaned.title:
        errors.append("You must provide a title.")
    if not cleaned.body:
        errors.append("You must provide content.")
    return cleaned, errors


def owned_post(post_id: int) -> Post | None:
    """The post if the current user wrote it; missing and foreign look alike."""
    post = get_store().find_post(post_id)
    if post is None or post.author_id != g.user.user_id:
        app.logger.warning(
            "user %s denied access to post %s", g.user.username, post_id
        )
        return None
    return post


###############################################################################
# Templates + Views
###############################################################################


def wrap(body: str) -> str:
    """Glue prolog + page-specific body + epilog."""
    return TEMPL_PROLOG + body + TEMPL_EPILOG


TEMPL_PROLOG = """
<!doctype html>
<html lang="en">
<title>{{ title or 'jotter' }}</title>
<meta name="viewport" content="width=device-width, initial-scale=1, shrink-to-fit=no">
<meta charset="utf-8">
<meta name="description" content="jotter – a minimal blog">
<style>
html{font-size:62.5%;font-family:-apple-system,BlinkMacSystemFont,"Segoe UI",Roboto,"Helvetica Neue",Arial,"Noto Sans",sans-serif}
body{font-size:1.8rem;line-height:1.618;max-width:38em;margin:auto;color:#c9c9c9;background-color:#222222;padding:13px}
h1,h2,h3,h4,h5,h6{line-height:1.1;font-weight:700;margin-top:3rem;margin-bottom:1.5rem;overflow-wrap:break-word}
p{margin-top:0;margin-bottom:2.5rem}
a{color:#ffffff;text-decoration:underline;text-decoration-color:transparent;text-underline-offset:0.18em}
a:hover{color:#c9c9c9;text-decoration-color:#c9c9c9}
textarea,input{color:#c9c9c9;padding:6px 10px;margin-bottom:10px;background-color:#4a4a4a;border:1px solid #4a4a4a;border-radius:4px;box-sizing:border-box;width:100%}
button{padding:5px 10px;background-color:#ffffff;color:#222222;border:1px solid #ffffff;border-radius:1px;cursor:pointer}
.errors{border-left:3px solid #c00;padding-left:1rem;color:#f9c0c0}
.nav{display:flex;justify-content:space-between;align-items:center;font-size:.9em}
.nav-links{display:flex;gap:1.25rem}
small{color:#aaa}
</style>
<div class="container">
<nav class="nav">
  <a href="{{ url_for('index') }}"><strong>jotter</strong></a>
  <div class="nav-links">
  {% if user %}
    <a href="{{ url_for('create_post') }}">New post</a>
    <span>{{ user.username }}</span>
    <a href="{{ url_for('logout') }}">Log out</a>
  {% else %}
    <a href="{{ url_for('login') }}">Log in</a>
  {% endif %}
  </div>
</nav>
{% if errors %}
<ul class="errors">
  {% for e in errors %}<li>{{ e }}</li>{% endfor %}
</ul>
{% endif %}
"""

TEMPL_EPILOG = """
<hr>
<small>jotter {{ version }}</small>
</div> <!-- container -->
</html>
"""


@app.route("/")
def index():
    if g.user:
        posts = get_store().list_posts_by_author(g.user.user_id)
        return render_template_string(TEMPL_DASHBOARD, posts=posts, title="Dashboard")
    return render_template_string(TEMPL_HOME, errors=[], form=Credentials())


TEMPL_HOME = wrap("""
{% block body %}
<hr>
<h2>Write things down.</h2>
<p>A small place for your posts. Create an account to get started.</p>
<form method="post" action="{{ url_for('register') }}">
  <label for="username">Username</label>
  <input id="username" name="username" autocomplete="off" value="{{ form.username }}">
  <label for="password">Password</label>
  <input id="password" name="password" type="password" autocomplete="new-password">
  <button type="submit">Create account</button>
</form>
{% endblock %}
""")

TEMPL_DASHBOARD = wrap("""
{% block body %}
<hr>
<h2>Hello, {{ user.username }}</h2>
{% if posts %}
<ul>
  {% for p in posts %}
  <li>
    <a href="{{ url_for('view_post', post_id=p.id) }}">{{ p.title|plain }}</a>
    <small>{{ p.created_date|ts }}</small>
  </li>
  {% endfor %}
</ul>
{% else %}
<p>You have no posts yet. <a href="{{ url_for('create_post') }}">Write one</a>.</p>
{% endif %}
{% endblock %}
""")


@app.route("/register", methods=["POST"])
def register():
    creds = Credentials.from_form(request.form)
    creds.username = creds.username.strip()
    store = get_store()

    errors = validate_registration(creds, store=store)
    user = None
    if not errors:
        try:
            user = store.create_user(creds.username, hash_password(creds.password))
        except sqlite3.IntegrityError:
            # lost a race against a concurrent registration
            errors.append(USERNAME_TAKEN)

    if errors:
        return render_template_string(TEMPL_HOME, errors=errors, form=creds)

    app.logger.info("registered user %s (id=%s)", user.username, user.id)
    resp = redirect(url_for("index"))
    return set_session_cookie(resp, Identity(user_id=user.id, username=user.username))


@app.route("/login", methods=["GET", "POST"])
@rate_limit(max_requests=LOGIN_RATE_LIMIT, window=60)
def login():
    if request.method == "GET":
        return render_template_string(TEMPL_LOGIN, errors=[], title="Log in")

    creds = Credentials.from_form(request.form)
    if not creds.username.strip() or not creds.password:
        return render_template_string(TEMPL_LOGIN, errors=[LOGIN_ERROR], title="Log in")

    user = get_store().find_user_by_username(creds.username)
    if user is None or not verify_password(creds.password, user.password):
        app.logger.warning("failed login for %r", creds.username)
        return render_template_string(TEMPL_LOGIN, errors=[LOGIN_ERROR], title="Log in")

    app.logger.info("user %s logged in", user.username)
    resp = redirect(url_for("index"))
    return set_session_cookie(resp, Identity(user_id=user.id, username=user.username))


TEMPL_LOGIN = wrap("""
{% block body %}
<hr>
<h2>Log in</h2>
<form method="post">
  <label for="username">Username</label>
  <input id="username" name="username" autocomplete="username">
  <label for="password">Password</label>
  <input id="password" name="password" type="password" autocomplete="current-password">
  <button type="submit">Log in</button>
</form>
{% endblock %}
""")


@app.route("/logout")
def logout():
    if g.user:
        app.logger.info("user %s logged out", g.user.username)
    resp = redirect(url_for("index"))
    resp.delete_cookie(
        COOKIE_NAME,
        httponly=app.config["SESSION_COOKIE_HTTPONLY"],
        secure=app.config["SESSION_COOKIE_SECURE"],
        samesite=app.config["SESSION_COOKIE_SAMESITE"],
    )
    return resp


###############################################################################
# Posts
###############################################################################
@app.route("/create-post", methods=["GET", "POST"])
@login_required
def create_post():
    if request.method == "GET":
        return render_template_string(
            TEMPL_POST_FORM, errors=[], post=PostInput(), action="create", title="New post"
        )

    data, errors = validate_post(PostInput.from_form(request.form))
    if errors:
        return render_template_string(
            TEMPL_POST_FORM, errors=errors, post=data, action="create", title="New post"
        )

    post = get_store().create_post(
        data.title, data.body, g.user.user_id, iso_stamp(utc_now())
    )
    app.logger.info("user %s created post %s", g.user.username, post.id)
    return redirect(url_for("view_post", post_id=post.id))


TEMPL_POST_FORM = wrap("""
{% block body %}
<hr>
{% if action == 'edit' %}
<p><a href="{{ url_for('view_post', post_id=post.id) }}">&laquo; Back to post</a></p>
<h2>Edit post</h2>
<form method="post" action="{{ url_for('edit_post', post_id=post.id) }}">
{% else %}
<h2>New post</h2>
<form method="post" action="{{ url_for('create_post') }}">
{% endif %}
  <label for="title">Title</label>
  <input id="title" name="title" autocomplete="off" value="{{ post.title|plain }}">
  <label for="body">Body</label>
  <textarea id="body" name="body" rows="12">{{ post.body|plain }}</textarea>
  <button type="submit">{{ 'Save changes' if action == 'edit' else 'Publish' }}</button>
</form>
{% endblock %}
""")


@app.route("/post/<int:post_id>")
def view_post(post_id: int):
    post = get_store().find_post_with_author(post_id)
    if post is None:
        return redirect(url_for("index"))

    is_author = g.user is not None and post.author_id == g.user.user_id
    return render_template_string(
        TEMPL_POST, post=post, is_author=is_author, title=plain_filter(post.title)
    )


TEMPL_POST = wrap("""
{% block body %}
<hr>
<article>
  <h2>{{ post.title|plain }}</h2>
  <small>Posted by <strong>{{ post.username }}</strong> on {{ post.created_date|ts }}</small>
  {% if is_author %}
  <div class="post-controls">
    <a href="{{ url_for('edit_post', post_id=post.id) }}">Edit</a>
    <form method="post" action="{{ url_for('delete_post', post_id=post.id) }}" style="display:inline">
      <button type="submit">Delete</button>
    </form>
  </div>
  {% endif %}
  <div class="e-content" style="margin-top:1.5em;">{{ post.body|md }}</div>
</article>
{% endblock %}
""")


@app.route("/edit-post/<int:post_id>", methods=["GET", "POST"])
@login_required
def edit_post(post_id: int):
    post = owned_post(post_id)
    if post is None:
        return redirect(url_for("index"))

    if request.method == "GET":
        return render_template_string(
            TEMPL_POST_FORM, errors=[], post=post, action="edit", title="Edit post"
        )

    data, errors = validate_post(PostInput.from_form(request.form))
    if errors:
        filled = replace(post, title=data.title, body=data.body)
        return render_template_string(
            TEMPL_POST_FORM, errors=errors, post=filled, action="edit", title="Edit post"
        )

    get_store().update_post(post.id, data.title, data.body)
    app.logger.info("user %s updated post %s", g.user.username, post.id)
    return redirect(url_for("view_post", post_id=post.id))


@app.route("/delete-post/<int:post_id>", methods=["POST"])
@login_required
def delete_post(post_id: int):
    post = owned_post(post_id)
    if post is None:
        return redirect(url_for("index"))

    get_store().delete_post(post.id)
    app.logger.info("user %s deleted post %s", g.user.username, post.id)
    return redirect(url_for("index"))


###############################################################################
# Error pages
###############################################################################
@app.errorhandler(404)
def not_found(exc):
    """Site-wide “Not Found” page."""
    return render_template_string(TEMPL_404, title="jotter"), 404


@app.errorhandler(500)
def internal_error(exc):
    """
    Generic 500 page for production. With debug on, Flask bypasses this
    handler and shows the Werkzeug traceback instead.
    """
    app.logger.error("500 on %s %s", request.method, request.path)
    return render_template_string(TEMPL_500, title="jotter"), 500


TEMPL_404 = wrap("""
{% block body %}
  <hr>
  <h2 style="margin-top:0">Page not found</h2>
  <p>The URL you asked for doesn’t exist.
     <a href="{{ url_for('index') }}">Back to the front page</a>.</p>
{% endblock %}
""")

TEMPL_500 = wrap("""
{% block body %}
  <hr>
  <h2 style="margin-top:0">Internal Server Error</h2>
  <p>Our fault, not yours. Please try again in a minute.</p>
{% endblock %}
""")

###############################################################################
# Startup
###############################################################################
with app.app_context():
    init_db()

if __name__ == "__main__":
    app.run(debug=True)
