from typing import List

from google import genai
from google.genai import types
from pydantic import TypeAdapter

from gateway.config import get_api_key
from gateway.errors import (
    EmptyResponseError,
    GenerationError,
    MalformedJSONError,
    MissingApiKeyError,
    NetworkFailureError,
)
from gateway.models import select_model
from gateway.parsing import parse_payload
from gateway.prompts import SYSTEM_INSTRUCTION, build_analysis_prompt, build_question_prompt
from gateway.schemas import ANALYSIS_SCHEMA, QUESTION_SCHEMA
from quiz.types import PersonalityResult, Question

_QUESTIONS = TypeAdapter(List[Question])
_RESULT = TypeAdapter(PersonalityResult)


def _extract_response_text(response) -> str:
    # Prefer direct text field if present.
    text = (getattr(response, "text", "") or "").strip()
    if text:
        return text
    # Fallback: join candidate parts.
    candidates = getattr(response, "candidates", None) or []
    parts = []
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            value = getattr(part, "text", "") or ""
            if value:
                parts.append(value.strip())
    return "\n".join(parts).strip()


class QuizGateway:
    """The two Gemini round trips: generate a quiz, analyze its answers.

    Each call is a single request with a declared output schema. Nothing is
    retried; every failure is raised as a GenerationError subclass.
    """

    def __init__(self, api_key: str = None, client=None):
        self._api_key = api_key
        self.client = client

    def _get_client(self):
        """Lazy-initialize the genai client on first use."""
        if self.client is None:
            api_key = self._api_key or get_api_key()
            if not api_key:
                print("  GEMINI_API_KEY is empty. Cannot reach Gemini.")
                raise MissingApiKeyError("GEMINI_API_KEY is not set")
            self.client = genai.Client(api_key=api_key)
        return self.client

    def _generate(self, task: str, contents: str, schema: dict, system_instruction: str = None) -> str:
        model = select_model(task)
        print(f"  Requesting {task} from {model}")
        try:
            client = self._get_client()
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
                system_instruction=system_instruction,
            )
            response = client.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except GenerationError:
            raise
        except Exception as e:
            print(f"  API error during {task}: {e}")
            raise NetworkFailureError(f"Gemini request failed: {e}") from e

        text = _extract_response_text(response)
        if not text:
            print(f"  Warning: Empty response from model during {task}")
            raise EmptyResponseError(f"No {task} returned from Gemini")
        return text

    def generate_questions(self) -> List[Question]:
        """Ask Gemini for a fresh question set and return it in display order."""
        text = self._generate(
            "questions",
            build_question_prompt(),
            QUESTION_SCHEMA,
            system_instruction=SYSTEM_INSTRUCTION,
        )
        try:
            questions = parse_payload(text, _QUESTIONS, "questions")
        except MalformedJSONError as e:
            print(f"  Failed to parse questions JSON: {e}. Raw text: {text[:500]}")
            raise

        if not questions:
            print("  Warning: Model returned an empty question list")
            raise EmptyResponseError("No questions returned from Gemini")
        return questions

    def analyze_personality(self, answers: list) -> PersonalityResult:
        """Send the ordered answers to Gemini and return the parsed profile."""
        text = self._generate("analysis", build_analysis_prompt(answers), ANALYSIS_SCHEMA)
        try:
            return parse_payload(text, _RESULT, "analysis")
        except MalformedJSONError as e:
            print(f"  Failed to parse analysis JSON: {e}. Raw text: {text[:500]}")
            raise
