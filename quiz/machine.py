import threading
from enum import Enum

from gateway.errors import GenerationError
from quiz.types import UserAnswer

# Pause the view holds on a chosen option before showing the next question
ADVANCE_DELAY_MS = 200

QUESTIONS_FAILED_MESSAGE = "Failed to generate the quiz. Please check your connection or API key."
ANALYSIS_FAILED_MESSAGE = "Failed to analyze results. Please try again."


class AppState(str, Enum):
    INTRO = "INTRO"
    LOGIN = "LOGIN"
    SIGNUP = "SIGNUP"
    DASHBOARD = "DASHBOARD"
    LOADING_QUESTIONS = "LOADING_QUESTIONS"
    QUIZ = "QUIZ"
    ANALYZING = "ANALYZING"
    RESULTS = "RESULTS"
    ERROR = "ERROR"


LOADING_STATES = (AppState.LOADING_QUESTIONS, AppState.ANALYZING)


def run_inline(fn, *args):
    fn(*args)


class QuizMachine:
    """Owns the visible screen and the in-memory quiz data for one client.

    Gateway work is handed to `spawn` together with a ticket (the generation
    counter at the time it started). Completions whose ticket is no longer
    current are dropped, so leaving a loading screen never lets an old call
    overwrite newer state.
    """

    def __init__(self, auth, gateway, spawn=None):
        self.auth = auth
        self.gateway = gateway
        self._spawn = spawn or run_inline
        self._lock = threading.RLock()
        self._listeners = []
        self._generation = 0

        self.user = auth.get_current_user()
        self.state = AppState.DASHBOARD if self.user else AppState.INTRO
        self.questions = []
        self.current_index = 0
        self.answers = []
        self.result = None
        self.history_result = None
        self.error = None

    # ---- Observation ----

    def add_listener(self, fn):
        """Call `fn(snapshot)` after every transition."""
        self._listeners.append(fn)

    def _set_state(self, state: AppState):
        self.state = state
        snap = self.snapshot()
        for fn in list(self._listeners):
            fn(snap)

    @property
    def current_question(self):
        if self.state != AppState.QUIZ or not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def displayed_result(self):
        return self.history_result or self.result

    @property
    def is_history_view(self) -> bool:
        return self.history_result is not None

    def snapshot(self) -> dict:
        with self._lock:
            question = self.current_question
            return {
                "state": self.state.value,
                "user": self.user.to_dict() if self.user else None,
                "questionId": question.id if question else None,
                "current": self.current_index + 1 if question else 0,
                "total": len(self.questions),
                "answered": len(self.answers),
                "error": self.error,
                "isHistoryView": self.is_history_view,
            }

    # ---- Tickets ----

    def _next_ticket(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, ticket: int) -> bool:
        return ticket == self._generation

    def _landing_state(self) -> AppState:
        return AppState.DASHBOARD if self.user else AppState.INTRO

    # ---- Navigation ----

    def show_login(self):
        with self._lock:
            self._next_ticket()
            self._set_state(AppState.LOGIN)

    def show_signup(self):
        with self._lock:
            self._next_ticket()
            self._set_state(AppState.SIGNUP)

    def go_home(self):
        with self._lock:
            self._next_ticket()
            self._set_state(self._landing_state())

    def go_dashboard(self):
        with self._lock:
            if not self.user:
                return
            self._next_ticket()
            self.history_result = None
            self._set_state(AppState.DASHBOARD)

    # ---- Auth ----

    def login(self, email: str, password: str):
        """Raises AuthError on bad credentials; state is left unchanged."""
        user = self.auth.login(email, password)
        with self._lock:
            self.user = user
            self._set_state(AppState.DASHBOARD)
        return user

    def signup(self, name: str, email: str, password: str):
        """Raises AuthError on duplicate email or blank name; state is left unchanged."""
        user = self.auth.signup(name, email, password)
        with self._lock:
            self.user = user
            self._set_state(AppState.DASHBOARD)
        return user

    def logout(self):
        with self._lock:
            self.auth.logout()
            self._next_ticket()
            self.user = None
            self.result = None
            self.history_result = None
            self._set_state(AppState.INTRO)

    # ---- Quiz loop ----

    def start_quiz(self) -> int:
        """Enter LOADING_QUESTIONS and hand question generation to the spawner."""
        with self._lock:
            if self.state in LOADING_STATES:
                return self._generation
            ticket = self._next_ticket()
            self.error = None
            self.result = None
            self.history_result = None
            self._set_state(AppState.LOADING_QUESTIONS)
        self._spawn(self._load_questions, ticket)
        return ticket

    def _load_questions(self, ticket: int):
        try:
            questions = self.gateway.generate_questions()
        except GenerationError as e:
            print(f"  Question generation failed ({type(e).__name__}): {e}")
            self._fail(ticket, QUESTIONS_FAILED_MESSAGE)
            return

        with self._lock:
            if not self._is_current(ticket):
                print("  Discarding questions from an abandoned request")
                return
            self.questions = list(questions)
            self.current_index = 0
            self.answers = []
            self._set_state(AppState.QUIZ)

    def select_option(self, question_id: int, option_id: str) -> bool:
        """Record the answer to the current question.

        Returns False when the submission does not match the current question
        (a stale or repeated click) or names an unknown option.
        """
        with self._lock:
            question = self.current_question
            if question is None or question.id != question_id:
                return False
            if len(self.answers) >= len(self.questions):
                return False
            option = next((o for o in question.options if o.id == option_id), None)
            if option is None:
                return False

            self.answers.append(UserAnswer(
                question_id=question.id,
                question_text=question.text,
                selected_option_text=option.text,
                selected_trait=option.trait,
            ))

            if self.current_index < len(self.questions) - 1:
                self.current_index += 1
                self._set_state(AppState.QUIZ)
                return True

            ticket = self._next_ticket()
            self.error = None
            self.result = None
            answers = list(self.answers)
            self._set_state(AppState.ANALYZING)

        self._spawn(self._analyze, ticket, answers)
        return True

    def _analyze(self, ticket: int, answers: list):
        try:
            analysis = self.gateway.analyze_personality(answers)
        except GenerationError as e:
            print(f"  Analysis failed ({type(e).__name__}): {e}")
            self._fail(ticket, ANALYSIS_FAILED_MESSAGE)
            return

        with self._lock:
            if not self._is_current(ticket):
                print("  Discarding analysis from an abandoned request")
                return
            if self.user:
                self.auth.save_result(self.user.id, analysis)
            self.result = analysis
            self._set_state(AppState.RESULTS)

    def _fail(self, ticket: int, message: str):
        with self._lock:
            if not self._is_current(ticket):
                return
            self.error = message
            self._set_state(AppState.ERROR)

    # ---- Results & history ----

    def retake(self):
        with self._lock:
            self.result = None
            self.history_result = None
            self.error = None
            self.answers = []
            self.current_index = 0
            self._set_state(self._landing_state())

    def try_again(self):
        self.retake()

    def view_history_item(self, result_id: str) -> bool:
        with self._lock:
            if not self.user:
                return False
            saved = self.auth.get_saved_result(self.user.id, result_id)
            if saved is None:
                return False
            self._next_ticket()
            self.history_result = saved
            self._set_state(AppState.RESULTS)
            return True

    def get_history(self) -> list:
        if not self.user:
            return []
        return self.auth.get_history(self.user.id)
