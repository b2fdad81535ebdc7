import os
import json
import queue
import threading
import time
import uuid

from flask import Blueprint, Flask, Response, current_app, flash, jsonify, redirect, render_template, request, session, url_for

from gateway.config import has_api_key
from quiz.machine import ADVANCE_DELAY_MS, LOADING_STATES, AppState, QuizMachine
from storage.auth import AuthError, AuthService
from storage.local_store import DEFAULT_STORE_PATH, JsonFileStore

CLIENT_TTL = 600  # 10 minutes
HEARTBEAT_SECONDS = 30

main_bp = Blueprint("main", __name__)


def spawn_thread(fn, *args):
    """Run gateway work off the request thread."""
    thread = threading.Thread(target=fn, args=args, daemon=True)
    thread.start()


class ControllerRegistry:
    """One QuizMachine (plus its event queue) per browser client."""

    def __init__(self, auth, gateway, spawn=None, ttl=CLIENT_TTL):
        self.auth = auth
        self.gateway = gateway
        self.spawn = spawn
        self.ttl = ttl
        self._machines = {}
        self._queues = {}
        self._timestamps = {}
        self._lock = threading.Lock()

    def _prune(self, now: float):
        stale = [cid for cid, ts in self._timestamps.items() if ts < now - self.ttl]
        for cid in stale:
            self._machines.pop(cid, None)
            self._queues.pop(cid, None)
            self._timestamps.pop(cid, None)
        if stale:
            print(f"  [Cleanup] Removed {len(stale)} idle client(s)")

    def get(self, client_id: str) -> QuizMachine:
        now = time.time()
        with self._lock:
            self._prune(now)
            machine = self._machines.get(client_id)
            if machine is None:
                machine = QuizMachine(self.auth.for_client(client_id), self.gateway, spawn=self.spawn)
                events = queue.Queue()
                machine.add_listener(events.put)
                self._machines[client_id] = machine
                self._queues[client_id] = events
            self._timestamps[client_id] = now
            return machine

    def events(self, client_id: str):
        with self._lock:
            return self._queues.get(client_id)

    def __len__(self):
        with self._lock:
            return len(self._machines)


def create_app(store=None, gateway=None, spawn=spawn_thread) -> Flask:
    """Build the web app around one store for the lifetime of the process."""
    app = Flask(
        __name__,
        template_folder=os.path.join(os.path.dirname(__file__), "templates"),
        static_folder=os.path.join(os.path.dirname(__file__), "static"),
    )
    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret-key")

    if store is None:
        store = JsonFileStore(os.environ.get("MINDSPARK_STORE", DEFAULT_STORE_PATH))
    if gateway is None:
        from gateway.core import QuizGateway
        gateway = QuizGateway()

    auth = AuthService(store)
    app.extensions["mindspark"] = ControllerRegistry(auth, gateway, spawn=spawn)
    app.register_blueprint(main_bp)
    return app


def _registry() -> ControllerRegistry:
    return current_app.extensions["mindspark"]


def _client_id() -> str:
    if "client_id" not in session:
        session["client_id"] = uuid.uuid4().hex
    return session["client_id"]


def _machine() -> QuizMachine:
    return _registry().get(_client_id())


def _home():
    return redirect(url_for("main.index"))


# ---- Screens ----

@main_bp.route("/")
def index():
    machine = _machine()
    history = []
    if machine.state == AppState.DASHBOARD:
        history = machine.get_history()
    return render_template(
        "index.html",
        machine=machine,
        state=machine.state.value,
        user=machine.user,
        question=machine.current_question,
        result=machine.displayed_result,
        history=history,
        api_key_configured=has_api_key(),
        advance_delay_ms=ADVANCE_DELAY_MS,
    )


@main_bp.route("/navigate/<target>", methods=["POST"])
def navigate(target):
    machine = _machine()
    actions = {
        "home": machine.go_home,
        "dashboard": machine.go_dashboard,
        "login": machine.show_login,
        "signup": machine.show_signup,
    }
    action = actions.get(target)
    if action is None:
        return jsonify({"error": f"Unknown screen '{target}'"}), 404
    action()
    return _home()


# ---- Auth ----

@main_bp.route("/auth/login", methods=["POST"])
def login():
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    try:
        _machine().login(email, password)
    except AuthError as e:
        flash(str(e), "error")
    return _home()


@main_bp.route("/auth/signup", methods=["POST"])
def signup():
    name = request.form.get("name", "")
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    try:
        _machine().signup(name, email, password)
    except AuthError as e:
        flash(str(e), "error")
    return _home()


@main_bp.route("/logout", methods=["POST"])
def logout():
    _machine().logout()
    return _home()


# ---- Quiz ----

@main_bp.route("/quiz/start", methods=["POST"])
def start_quiz():
    _machine().start_quiz()
    return _home()


@main_bp.route("/quiz/answer", methods=["POST"])
def answer():
    question_id = request.form.get("question_id", type=int)
    option_id = request.form.get("option_id", "")
    if question_id is None or not option_id:
        return jsonify({"error": "question_id and option_id are required"}), 400
    _machine().select_option(question_id, option_id)
    return _home()


@main_bp.route("/quiz/retake", methods=["POST"])
def retake():
    _machine().retake()
    return _home()


@main_bp.route("/quiz/try-again", methods=["POST"])
def try_again():
    _machine().try_again()
    return _home()


@main_bp.route("/history/<result_id>", methods=["POST"])
def view_history(result_id):
    if not _machine().view_history_item(result_id):
        flash("That result could not be found.", "error")
    return _home()


# ---- JSON / streaming ----

@main_bp.route("/api/state", methods=["GET"])
def get_state():
    return jsonify(_machine().snapshot())


@main_bp.route("/api/status", methods=["GET"])
def get_status():
    """Return integration status (API key, signed-in user)."""
    machine = _machine()
    return jsonify({
        "apiKey": has_api_key(),
        "user": machine.user.to_dict() if machine.user else None,
    })


@main_bp.route("/api/stream")
def stream():
    """Stream state snapshots via Server-Sent Events."""
    client_id = _client_id()
    registry = _registry()
    machine = registry.get(client_id)
    events = registry.events(client_id)

    loading = {s.value for s in LOADING_STATES}

    def generate():
        # Drop transitions nobody was listening for, then send the current state
        while True:
            try:
                events.get_nowait()
            except queue.Empty:
                break
        snap = machine.snapshot()
        yield f"data: {json.dumps(snap)}\n\n"
        if snap["state"] not in loading:
            return
        while True:
            try:
                snap = events.get(timeout=HEARTBEAT_SECONDS)
            except queue.Empty:
                # Send heartbeat to keep connection alive
                yield f"data: {json.dumps({'type': 'heartbeat'})}\n\n"
                continue
            yield f"data: {json.dumps(snap)}\n\n"
            if snap["state"] not in loading:
                break

    return Response(generate(), mimetype="text/event-stream")


def start_server(host="127.0.0.1", port=5000):
    """Start the web interface server."""
    app = create_app()
    print(f"\n{'=' * 60}")
    print("  MindSpark")
    print(f"  Open http://localhost:{port} in your browser")
    print(f"{'=' * 60}\n")
    app.run(host=host, port=port, debug=False, threaded=True)
