"""Canned quiz data and a fake gateway shared by the test modules."""

from quiz.types import Option, PersonalityResult, Question, TraitScore


def make_questions(count=3):
    return [
        Question(
            id=i,
            text=f"Scenario {i}: your study group cancels the night before the exam.",
            options=[
                Option(id="a", text="Study alone in the library", trait="Introverted"),
                Option(id="b", text="Rally a new group in the dorm lounge", trait="Extraverted"),
            ],
        )
        for i in range(1, count + 1)
    ]


def make_result(archetype="The Midnight Scholar"):
    return PersonalityResult(
        archetype=archetype,
        tagline="Brilliance after dark",
        description="Learns best alone, late, and in long focused sessions.",
        strengths=["Deep focus", "Independent research", "Persistence"],
        weaknesses=["Procrastination"],
        study_tips=["Block out evening study sessions"],
        career_paths=["Research Scientist", "Software Engineer"],
        traits=[
            TraitScore(trait="Focus", score=88),
            TraitScore(trait="Sociability", score=35),
        ],
    )


class FakeGateway:
    """Stands in for QuizGateway; records the answers it was asked to analyze."""

    def __init__(self, questions=None, result=None, question_error=None, analysis_error=None):
        self.questions = questions if questions is not None else make_questions()
        self.result = result or make_result()
        self.question_error = question_error
        self.analysis_error = analysis_error
        self.question_calls = 0
        self.analyzed = []

    def generate_questions(self):
        self.question_calls += 1
        if self.question_error:
            raise self.question_error
        return list(self.questions)

    def analyze_personality(self, answers):
        self.analyzed.append(list(answers))
        if self.analysis_error:
            raise self.analysis_error
        return self.result


class DeferredSpawner:
    """Collects spawned gateway work so a test decides when it completes."""

    def __init__(self):
        self.pending = []

    def __call__(self, fn, *args):
        self.pending.append((fn, args))

    def run_all(self):
        pending, self.pending = self.pending, []
        for fn, args in pending:
            fn(*args)
