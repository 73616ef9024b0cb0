# advice/service.py
# Dietary advice from Gemini for a computed plan.
# - one generate_content call, JSON reply only
# - every failure becomes AdviceError with a single user-facing message

import json
import logging
from dataclasses import dataclass

import google.generativeai as genai

from models import CalculationResult, Gender, UserProfile
from .config import GEMINI_API_KEY, GEMINI_MODEL

log = logging.getLogger(__name__)

USER_MESSAGE = "Could not reach the virtual nutritionist right now."


class AdviceError(Exception):
    pass


@dataclass(frozen=True)
class Advice:
    tip: str
    meal_plan: str
    macros: str

    def to_dict(self) -> dict:
        return {"tip": self.tip, "mealPlan": self.meal_plan, "macros": self.macros}


def _model() -> "genai.GenerativeModel":
    if not GEMINI_API_KEY:
        raise AdviceError("GEMINI_API_KEY not set")
    genai.configure(api_key=GEMINI_API_KEY)
    return genai.GenerativeModel(GEMINI_MODEL)


def build_prompt(profile: UserProfile, result: CalculationResult) -> str:
    gender = "Male" if profile.gender == Gender.MALE else "Female"

    warning = ""
    if result.warning:
        warning = (
            "IMPORTANT: the raw calculation gave a dangerously low intake, so it was "
            "raised to the safe minimum. Stress that they should not starve themselves.\n"
        )

    return f"""
Act as a specialized, motivating sports nutritionist.

Analyze this user's data:
- Gender: {gender}
- Age: {profile.age} years
- Current weight: {profile.current_weight_kg:.1f} kg
- Target weight: {profile.target_weight_kg:.1f} kg
- Activity level: {profile.activity_level.value}
- BMR: {round(result.bmr)} kcal
- Total daily energy expenditure (TDEE): {round(result.tdee)} kcal
- Recommended daily calories: {round(result.daily_calories)} kcal
- Days to reach the goal: {result.days_to_goal}

{warning}
Reply in JSON with this structure (no markdown code blocks, only the raw JSON):
{{
  "tip": "A short, motivating, science-based tip about their journey (max 2 sentences).",
  "mealPlan": "A breakfast and lunch idea that fits these calories.",
  "macros": "An approximate macro split (protein/carbs/fat) in percent."
}}
"""


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_advice(text: str) -> Advice:
    """
    Reply text -> Advice. Tolerates a markdown code fence around the JSON.
    Raises AdviceError when a field is missing or not a string.
    """
    try:
        obj = json.loads(_strip_fences(text or ""))
    except json.JSONDecodeError as e:
        raise AdviceError(f"reply is not JSON: {e}") from e

    if not isinstance(obj, dict):
        raise AdviceError("reply is not a JSON object")

    fields = {}
    for key in ("tip", "mealPlan", "macros"):
        value = obj.get(key)
        if not isinstance(value, str):
            raise AdviceError(f"reply field {key!r} missing or not a string")
        fields[key] = value.strip()

    return Advice(tip=fields["tip"], meal_plan=fields["mealPlan"], macros=fields["macros"])


def get_advice(profile: UserProfile, result: CalculationResult) -> Advice:
    try:
        model = _model()
        response = model.generate_content(
            build_prompt(profile, result),
            generation_config={"response_mime_type": "application/json"},
        )
        return parse_advice(response.text or "{}")
    except Exception as e:
        log.exception("Error fetching advice: %s", e)
        raise AdviceError(USER_MESSAGE) from e
