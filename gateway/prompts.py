import json

QUESTION_COUNT = 20

SYSTEM_INSTRUCTION = (
    "You are an expert educational psychologist. "
    "Create a detailed student personality assessment inspired by the Big Five and MBTI."
)

# Four dimensions from the 16Personalities framework, each with its two poles
PERSONALITY_DIMENSIONS = [
    {"name": "Energy", "poles": ("Introverted", "Extraverted")},
    {"name": "Mind", "poles": ("Intuitive", "Observant")},
    {"name": "Nature", "poles": ("Thinking", "Feeling")},
    {"name": "Tactics", "poles": ("Judging", "Prospecting")},
]

STUDENT_SCENARIOS = [
    "dorm living",
    "study groups",
    "exam pressure",
    "parties",
    "club leadership",
]


def _format_dimensions() -> str:
    return ", ".join(
        f"{d['name']} ({d['poles'][0]}/{d['poles'][1]})" for d in PERSONALITY_DIMENSIONS
    )


def build_question_prompt(count: int = QUESTION_COUNT) -> str:
    """Prompt for a fresh set of scenario-based multiple choice questions."""
    return (
        f"Generate {count} engaging, scenario-based multiple choice questions designed to "
        "assess a student's personality. Draw inspiration from the 16Personalities "
        f"framework (MBTI), covering dimensions such as {_format_dimensions()}. "
        "Scenarios should be highly relevant to student life: "
        f"{', '.join(STUDENT_SCENARIOS[:-1])}, and {STUDENT_SCENARIOS[-1]}. "
        "Number the questions from 1. Give every option a short string id and "
        "a one-word trait it signals."
    )


def build_analysis_prompt(answers: list) -> str:
    """Prompt asking for a personality profile from the ordered answers.

    Args:
        answers: UserAnswer models in the order they were given.
    """
    answers_json = json.dumps([a.to_dict() for a in answers], indent=2)

    return f"""Analyze the following {len(answers)} student quiz answers (based on a 16-personalities style assessment) and generate a comprehensive personality profile. Determine their archetype (e.g., similar to INTJ, ESFP, etc., but give it a creative student-centric name like 'The Midnight Philosopher' or 'The Campus Catalyst').

Answers:
{answers_json}

Provide deep insights into their learning psychology, potential pitfalls, social dynamics, and ideal career paths.
Score 5-6 key personality dimensions from 0 to 100."""
