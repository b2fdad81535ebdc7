import os

QUESTION_MODEL = os.environ.get("GEMINI_QUESTION_MODEL", "gemini-3-flash-preview")
ANALYSIS_MODEL = os.environ.get("GEMINI_ANALYSIS_MODEL", "gemini-3-pro-preview")


def select_model(task: str) -> str:
    """
    Select Gemini model for a gateway task.
    Question generation uses the fast model; analysis needs the stronger reasoning model.
    """
    if task == "analysis":
        return ANALYSIS_MODEL
    return QUESTION_MODEL
