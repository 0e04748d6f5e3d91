"""
Flask web app for the SmartShop shopping-list chat.

Serves the chat page, the login / signup pages and a small JSON + SSE API
that the chat page script talks to.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Optional

import structlog
from flask import (
    Flask,
    Response,
    abort,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from smartshop.assistant.actions import ShoppingAssistant, ai_state_from_chat, ui_messages_from_chat
from smartshop.assistant.agent import create_recommendation_agent
from smartshop.assistant.repository import ChatRepository
from smartshop.auth.config import AuthConfig, AuthPages
from smartshop.auth.session import auth, init_auth, sign_in, sign_out
from smartshop.auth.users import UserStore, authenticate, signup
from smartshop.chat.state import AIState
from smartshop.core.config import Config, get_auth_secret, load_config
from smartshop.core.ids import custom_alphabet
from smartshop.core.results import get_message_from_code
from smartshop.web.header import build_header
from smartshop.web.runtime import ChatRegistry, EventLoopThread, stream_events

logger = structlog.get_logger(__name__)

REGISTRY_KEY = "smartshop.registry"


def create_app(
    config: Optional[Config] = None,
    assistant: Optional[ShoppingAssistant] = None,
    users: Optional[UserStore] = None,
    auth_config: Optional[AuthConfig] = None,
) -> Flask:
    """Build the Flask app.

    Args:
        config: Settings (loaded from config.toml if None)
        assistant: Submission service (OpenAI-backed agent if None)
        users: User accounts (empty in-memory store if None)
        auth_config: Auth callbacks and pages (built from config if None)
    """
    if config is None:
        config = load_config()

    app = Flask(__name__)

    if auth_config is None:
        auth_config = AuthConfig(
            secret=get_auth_secret(),
            pages=AuthPages(
                sign_in=config.auth.sign_in_page,
                new_user=config.auth.new_user_page,
            ),
        )
    if not auth_config.secret:
        logger.warning("auth.ephemeral_secret", hint="set AUTH_SECRET to keep sessions across restarts")
        auth_config.secret = secrets.token_hex(32)
    init_auth(app, auth_config)
    app.permanent_session_lifetime = timedelta(days=config.auth.session_days)

    if users is None:
        users = UserStore()
    if assistant is None:
        assistant = ShoppingAssistant(create_recommendation_agent(), ChatRepository())

    new_id = custom_alphabet(config.chat.id_alphabet, config.chat.id_length)
    registry = ChatRegistry(
        assistant,
        EventLoopThread(),
        debounce_seconds=config.chat.debounce_seconds,
        id_factory=new_id,
        max_open=config.chat.max_open_chats,
    )
    app.extensions[REGISTRY_KEY] = registry

    @app.before_request
    def check_authorized():
        if not auth_config.authorized(auth(), request.path):
            return redirect(auth_config.pages.sign_in)
        return None

    @app.context_processor
    def inject_header():
        return {"header": build_header(auth(), assistant.chats, login_path=auth_config.pages.sign_in)}

    def current_user_id() -> Optional[str]:
        session = auth()
        return session.user.id if session and session.user else None

    def can_access(owner_id: Optional[str]) -> bool:
        """Anonymous chats are open to anyone; owned chats only to their owner."""
        return owner_id is None or owner_id == current_user_id()

    def accessible_runtime(chat_id: str):
        """The open runtime for ``chat_id``, or None if missing or not ours."""
        runtime = registry.get(chat_id)
        if runtime is None or not can_access(runtime.ai_state.user_id):
            return None
        return runtime

    def chat_not_found():
        return jsonify({"error": "Chat not found"}), 404

    # -------------------------------------------------------------------------
    # Pages
    # -------------------------------------------------------------------------

    @app.route("/")
    def index():
        return redirect(url_for("new_chat"))

    @app.route("/new")
    def new_chat():
        """Open an empty chat with a fresh id."""
        runtime = registry.open(AIState(chat_id=new_id(), user_id=current_user_id()))
        return render_template("chat.html", chat_id=runtime.chat_id, messages=[])

    @app.route("/list/<chat_id>")
    def chat_page(chat_id: str):
        """Rebuild a saved chat from the server-side state."""
        chat = assistant.chats.get(chat_id)
        if chat is None or not can_access(chat.user_id):
            abort(404)

        runtime = registry.open(ai_state_from_chat(chat), ui_messages_from_chat(chat.id, chat.messages))
        messages = [m.to_dict() for m in runtime.store.snapshot().messages]
        return render_template("chat.html", chat_id=chat.id, messages=messages)

    @app.route("/login", methods=["GET", "POST"])
    def login():
        if request.method == "POST":
            result_code, user = authenticate(users, request.form)
            if user is None:
                flash(get_message_from_code(result_code), "error")
                return redirect(url_for("login"))
            sign_in(user)
            flash(get_message_from_code(result_code), "success")
            return redirect(url_for("index"))

        if auth():
            return redirect(url_for("index"))
        return render_template("login.html")

    @app.route("/signup", methods=["GET", "POST"])
    def signup_page():
        if request.method == "POST":
            result_code, user = signup(users, request.form)
            if user is None:
                flash(get_message_from_code(result_code), "error")
                return redirect(url_for("signup_page"))
            sign_in(user)
            flash(get_message_from_code(result_code), "success")
            return redirect(url_for("index"))

        if auth():
            return redirect(url_for("index"))
        return render_template("signup.html")

    @app.route("/logout", methods=["POST"])
    def logout():
        sign_out()
        return redirect(url_for("index"))

    # -------------------------------------------------------------------------
    # Chat API
    # -------------------------------------------------------------------------

    @app.route("/api/chat/<chat_id>/submit", methods=["POST"])
    def submit(chat_id: str):
        """Queue the chat input; the form debounces and submits it."""
        data = request.get_json(silent=True) or {}
        message = data.get("message") or ""

        if accessible_runtime(chat_id) is None:
            return chat_not_found()
        try:
            queued = registry.submit(chat_id, message)
        except KeyError:
            # Evicted since the lookup
            return chat_not_found()
        if not queued:
            return jsonify({"error": "Missing message"}), 400
        return jsonify({"status": "queued"}), 202

    @app.route("/api/chat/<chat_id>/new", methods=["POST"])
    def start_new_chat(chat_id: str):
        if accessible_runtime(chat_id) is None:
            return chat_not_found()
        try:
            registry.new_chat(chat_id)
        except KeyError:
            return chat_not_found()
        return jsonify({"status": "queued"}), 202

    @app.route("/api/chat/<chat_id>/messages")
    def messages(chat_id: str):
        runtime = accessible_runtime(chat_id)
        if runtime is None:
            return chat_not_found()
        return jsonify(runtime.store.snapshot().to_dict())

    @app.route("/api/chat/<chat_id>/stream")
    def stream(chat_id: str):
        """Server-Sent Events with store snapshots, toasts and navigation."""
        runtime = accessible_runtime(chat_id)
        if runtime is None:
            return chat_not_found()

        return Response(
            stream_events(
                runtime,
                poll_interval=config.chat.stream_poll_interval,
                keepalive_seconds=config.chat.stream_keepalive_seconds,
            ),
            mimetype="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
                "Connection": "keep-alive",
            },
        )

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok"})

    return app
