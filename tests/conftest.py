from datetime import date

import pytest

from models import ActivityLevel, Gender, GoalType, UserProfile

TODAY = date(2025, 1, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def profile():
    """80 -> 70 kg, 0.5 kg/week, moderately active man."""
    return UserProfile(
        gender=Gender.MALE,
        age=30,
        height_cm=175,
        current_weight_kg=80,
        target_weight_kg=70,
        activity_level=ActivityLevel.MODERATELY_ACTIVE,
        goal_type=GoalType.WEEKLY_RATE,
        weekly_loss_kg=0.5,
    )


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from forms import get_today
    from main import app

    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def form_data():
    return {
        "sex": "male",
        "age": "30",
        "unit_system": "metric",
        "height": "175",
        "weight": "80",
        "goal_weight": "70",
        "activity": "moderately_active",
        "goal_type": "weekly_rate",
        "weekly_rate": "0.5",
    }
