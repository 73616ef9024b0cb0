import asyncio
import sys
from types import ModuleType

import pytest

from advice import routes
from advice.service import Advice, AdviceError


def test_home_shows_form(client) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert 'action="/calculate"' in response.text
    # default target date is three months out
    assert 'value="2025-04-15"' in response.text


def test_home_imperial_fields(client) -> None:
    response = client.get("/", params={"units": "imperial"})
    assert response.status_code == 200
    assert 'name="height_ft"' in response.text
    assert 'value="176.4"' in response.text


def test_calculate(client, form_data) -> None:
    response = client.post("/calculate", data=form_data)
    assert response.status_code == 200
    assert "2161" in response.text
    assert "Duration: 140 days" in response.text
    assert "data:image/png;base64," in response.text
    assert 'action="/advice"' in response.text


def test_calculate_shows_safety_warning(client, form_data) -> None:
    form_data.update(goal_weight="40", weekly_rate="2")
    response = client.post("/calculate", data=form_data)
    assert response.status_code == 200
    assert "safe minimum of 1500 kcal" in response.text


def test_calculate_imperial(client, form_data) -> None:
    form_data.update(
        unit_system="imperial", height="", height_ft="5", height_in="9",
        weight="176", goal_weight="154", weekly_rate="1",
    )
    response = client.post("/calculate", data=form_data)
    assert response.status_code == 200
    assert "lbs" in response.text


def test_calculate_rejects_bad_goal(client, form_data) -> None:
    form_data.update(weekly_rate="-0.5")
    response = client.post("/calculate", data=form_data)
    assert response.status_code == 400
    assert "Weekly rate must be a loss" in response.text
    assert 'action="/calculate"' in response.text


def test_calculate_rejects_past_date(client, form_data) -> None:
    form_data.update(goal_type="target_date", goal_date="2024-12-31")
    response = client.post("/calculate", data=form_data)
    assert response.status_code == 400
    assert "past" in response.text


def test_advice_success(client, form_data, monkeypatch) -> None:
    monkeypatch.setattr(
        routes, "get_advice", lambda profile, plan: Advice("Keep going.", "Eggs and rice.", "30/40/30")
    )
    response = client.post("/advice", data=form_data)
    assert response.status_code == 200
    assert "Keep going." in response.text
    assert "Eggs and rice." in response.text


def test_advice_failure_keeps_plan(client, form_data, monkeypatch) -> None:
    def fail(profile, plan):
        raise AdviceError("Could not reach the virtual nutritionist right now.")

    monkeypatch.setattr(routes, "get_advice", fail)
    response = client.post("/advice", data=form_data)
    assert response.status_code == 200
    assert "Could not reach the virtual nutritionist" in response.text
    assert "Duration: 140 days" in response.text


def test_advice_api(client, form_data, monkeypatch) -> None:
    monkeypatch.setattr(routes, "get_advice", lambda profile, plan: Advice("t", "m", "x"))
    response = client.post("/api/advice", data=form_data)
    assert response.status_code == 200
    body = response.json()
    assert body["advice"] == {"tip": "t", "mealPlan": "m", "macros": "x"}
    assert body["plan"]["days_to_goal"] == 140


def test_advice_api_failure(client, form_data, monkeypatch) -> None:
    def fail(profile, plan):
        raise AdviceError("Could not reach the virtual nutritionist right now.")

    monkeypatch.setattr(routes, "get_advice", fail)
    response = client.post("/api/advice", data=form_data)
    assert response.status_code == 502


def test_plan_api(client) -> None:
    response = client.post(
        "/api/plan",
        json={
            "gender": "male",
            "age": 30,
            "height_cm": 175,
            "current_weight_kg": 80,
            "target_weight_kg": 70,
            "activity_level": "moderately_active",
            "goal_type": "weekly_rate",
            "weekly_loss_kg": 0.5,
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["bmr"] == pytest.approx(1748.75)
    assert body["daily_calories"] == pytest.approx(2160.5625)
    assert body["days_to_goal"] == 140
    assert body["completion_date"] == "2025-06-04"
    assert len(body["projected_data"]) == 11


def test_plan_api_missing_goal_field(client) -> None:
    response = client.post(
        "/api/plan",
        json={
            "gender": "female",
            "age": 30,
            "height_cm": 165,
            "current_weight_kg": 70,
            "target_weight_kg": 60,
            "activity_level": "sedentary",
            "goal_type": "target_date",
        },
    )
    assert response.status_code == 422
    assert "target date" in response.json()["detail"]


def test_report_pdf(client, form_data, monkeypatch) -> None:
    rendered = {}

    class FakeHTML:
        def __init__(self, string):
            rendered["html"] = string

        def write_pdf(self, target):
            target.write(b"%PDF-1.7 fake")

    fake = ModuleType("weasyprint")
    fake.HTML = FakeHTML
    monkeypatch.setitem(sys.modules, "weasyprint", fake)

    response = client.post("/report", data=form_data)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert "weight_plan_2025-01-15.pdf" in response.headers["content-disposition"]
    assert "Days to goal" in rendered["html"]


def _in_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def test_unit_toggle_keeps_entered_values(client, form_data) -> None:
    form_data.update(age="41", weight="95", units="imperial")
    response = client.post("/units", data=form_data)
    assert response.status_code == 200
    assert 'name="height_ft"' in response.text
    assert 'value="41"' in response.text
    assert 'value="209.4"' in response.text
    assert 'value="154.3"' in response.text
    assert 'value="1.1"' in response.text

    back = {
        **form_data,
        "unit_system": "imperial",
        "height": "",
        "height_ft": "5",
        "height_in": "9",
        "weight": "209.4",
        "goal_weight": "154.3",
        "weekly_rate": "1.1",
        "units": "metric",
    }
    response = client.post("/units", data=back)
    assert response.status_code == 200
    assert 'name="height"' in response.text
    assert 'value="95.0"' in response.text
    assert 'value="175.3"' in response.text


def test_calculate_rejects_endless_timeline(client, form_data) -> None:
    form_data.update(weekly_rate="0.000001")
    response = client.post("/calculate", data=form_data)
    assert response.status_code == 400
    assert "too far away" in response.text


def test_advice_runs_off_the_event_loop(client, form_data, monkeypatch) -> None:
    seen = {}

    def fake_advice(profile, plan):
        seen["in_loop"] = _in_event_loop()
        return Advice("t", "m", "x")

    monkeypatch.setattr(routes, "get_advice", fake_advice)
    assert client.post("/advice", data=form_data).status_code == 200
    assert seen["in_loop"] is False

    seen.clear()
    assert client.post("/api/advice", data=form_data).status_code == 200
    assert seen["in_loop"] is False


def test_pdf_rendering_runs_off_the_event_loop(client, form_data, monkeypatch) -> None:
    seen = {}

    class FakeHTML:
        def __init__(self, string):
            pass

        def write_pdf(self, target):
            seen["in_loop"] = _in_event_loop()
            target.write(b"%PDF-1.7 fake")

    fake = ModuleType("weasyprint")
    fake.HTML = FakeHTML
    monkeypatch.setitem(sys.modules, "weasyprint", fake)

    assert client.post("/report", data=form_data).status_code == 200
    assert seen["in_loop"] is False
