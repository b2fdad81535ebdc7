"""
Output schemas in Gemini response_schema format.
The model is asked to return JSON that conforms to these shapes.
"""

OPTION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "id": {"type": "STRING"},
        "text": {"type": "STRING"},
        "trait": {
            "type": "STRING",
            "description": (
                "One word trait associated with this answer "
                "(e.g., Introverted, Sensing, Feeling, Judging)"
            ),
        },
    },
    "required": ["id", "text", "trait"],
}

QUESTION_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": {"type": "INTEGER"},
            "text": {"type": "STRING"},
            "options": {"type": "ARRAY", "items": OPTION_SCHEMA},
        },
        "required": ["id", "text", "options"],
    },
}

TRAIT_SCORE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "trait": {
            "type": "STRING",
            "description": "Name of the trait (e.g. Creativity, Focus)",
        },
        "score": {"type": "INTEGER", "minimum": 0, "maximum": 100},
        "fullMark": {"type": "INTEGER", "description": "Always 100"},
    },
    "required": ["trait", "score", "fullMark"],
}

_STRING_LIST = {"type": "ARRAY", "items": {"type": "STRING"}}

ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "archetype": {
            "type": "STRING",
            "description": "A creative name for the student persona (e.g., The Midnight Scholar)",
        },
        "tagline": {
            "type": "STRING",
            "description": "A short, catchy slogan for this personality.",
        },
        "description": {
            "type": "STRING",
            "description": "A detailed paragraph describing their learning style.",
        },
        "strengths": _STRING_LIST,
        "weaknesses": _STRING_LIST,
        "studyTips": _STRING_LIST,
        "careerPaths": _STRING_LIST,
        "traits": {
            "type": "ARRAY",
            "description": "Numerical scores for 5-6 key personality dimensions (0-100 scale)",
            "items": TRAIT_SCORE_SCHEMA,
        },
    },
    "required": [
        "archetype",
        "tagline",
        "description",
        "strengths",
        "weaknesses",
        "studyTips",
        "careerPaths",
        "traits",
    ],
}
