from datetime import date
from pathlib import Path
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import Form, Request
from fastapi.templating import Jinja2Templates

from calculator import GoalCalculator
from chart import render_projection_chart
from models import (
    ACTIVITY_LABELS,
    ActivityLevel,
    CalculationResult,
    FormInput,
    Gender,
    GoalType,
    UnitSystem,
    UserProfile,
)
from units import kg_to_lbs


templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
calculator = GoalCalculator()


def display_weight(kg: float, unit_system: str) -> str:
    if unit_system == UnitSystem.IMPERIAL.value:
        return f"{kg_to_lbs(kg):.1f} lbs"
    return f"{kg:.1f} kg"


templates.env.globals["display_weight"] = display_weight


def get_today() -> date:
    return date.today()


def default_profile(today: date) -> UserProfile:
    """Values the form starts with."""
    return UserProfile(
        gender=Gender.MALE,
        age=30,
        height_cm=175,
        current_weight_kg=80,
        target_weight_kg=70,
        activity_level=ActivityLevel.MODERATELY_ACTIVE,
        goal_type=GoalType.TARGET_DATE,
        target_date=today + relativedelta(months=3),
        weekly_loss_kg=0.5,
    )


def plan_form(
    sex: str = Form(...),
    age: int = Form(...),
    unit_system: str = Form("metric"),
    height: Optional[float] = Form(None),
    height_ft: Optional[float] = Form(None),
    height_in: Optional[float] = Form(None),
    weight: float = Form(...),
    goal_weight: float = Form(...),
    activity: str = Form(...),
    goal_type: str = Form(...),
    goal_date: Optional[str] = Form(None),
    weekly_rate: Optional[float] = Form(None),
) -> FormInput:
    return FormInput(
        sex=sex,
        age=age,
        unit_system=unit_system,
        height=height,
        height_ft=height_ft,
        height_in=height_in,
        weight=weight,
        goal_weight=goal_weight,
        activity=activity,
        goal_type=goal_type,
        goal_date=goal_date,
        weekly_rate=weekly_rate,
    )


def render_form(
    request: Request,
    today: date,
    error: Optional[str] = None,
    form: Optional[FormInput] = None,
    unit_system: UnitSystem = UnitSystem.METRIC,
    status_code: int = 200,
):
    if form is not None and form.unit_system == UnitSystem.IMPERIAL.value:
        unit_system = UnitSystem.IMPERIAL

    profile = default_profile(today)
    return templates.TemplateResponse(
        request,
        "form.html",
        {
            "request": request,
            "error": error,
            "form": form,
            "unit_system": unit_system.value,
            "defaults": profile,
            "display": profile.display(unit_system),
            "activity_labels": ACTIVITY_LABELS,
            "today": today,
        },
        status_code=status_code,
    )


def results_context(
    request: Request,
    form: FormInput,
    profile: UserProfile,
    plan: CalculationResult,
) -> dict:
    unit_system = UnitSystem(form.unit_system)
    return {
        "request": request,
        "form": form,
        "profile": profile,
        "plan": plan,
        "unit_system": unit_system.value,
        "display": profile.display(unit_system),
        "activity_labels": ACTIVITY_LABELS,
        "chart": render_projection_chart(plan, profile, unit_system),
        "advice": None,
        "advice_error": None,
    }
