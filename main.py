import logging
import os
from datetime import date
from io import BytesIO
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, StreamingResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from calculator import InvalidGoalError
from forms import calculator, get_today, plan_form, render_form, results_context, templates
from models import ActivityLevel, FormInput, Gender, GoalType, UnitSystem, UserProfile

from advice.routes import router as advice_router


load_dotenv()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(title="Weight Goal Planner")
app.include_router(advice_router)


class PlanRequest(BaseModel):
    gender: Gender
    age: int = Field(..., gt=0)
    height_cm: float = Field(..., gt=0)
    current_weight_kg: float = Field(..., gt=0)
    target_weight_kg: float = Field(..., gt=0)
    activity_level: ActivityLevel
    goal_type: GoalType
    target_date: Optional[date] = None
    weekly_loss_kg: Optional[float] = None

    def to_profile(self) -> UserProfile:
        return UserProfile(
            gender=self.gender,
            age=self.age,
            height_cm=self.height_cm,
            current_weight_kg=self.current_weight_kg,
            target_weight_kg=self.target_weight_kg,
            activity_level=self.activity_level,
            goal_type=self.goal_type,
            target_date=self.target_date if self.goal_type == GoalType.TARGET_DATE else None,
            weekly_loss_kg=self.weekly_loss_kg if self.goal_type == GoalType.WEEKLY_RATE else None,
        )


@app.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    units: UnitSystem = UnitSystem.METRIC,
    today: date = Depends(get_today),
):
    return render_form(request, today, unit_system=units)


@app.post("/units", response_class=HTMLResponse)
async def switch_units(
    request: Request,
    units: UnitSystem = Form(...),
    form: FormInput = Depends(plan_form),
    today: date = Depends(get_today),
):
    """Redisplay the entered values converted to another unit system."""
    try:
        converted = form.in_units(units)
    except ValueError as e:
        return render_form(request, today, error=str(e), form=form, status_code=400)
    return render_form(request, today, form=converted)


@app.post("/calculate", response_class=HTMLResponse)
async def calculate_view(
    request: Request,
    form: FormInput = Depends(plan_form),
    today: date = Depends(get_today),
):
    try:
        profile = form.to_profile()
        plan = calculator.calculate_plan(profile, today)
    except ValueError as e:
        log.info("rejected calculation: %s", e)
        return render_form(request, today, error=str(e), form=form, status_code=400)

    return templates.TemplateResponse(
        request, "results.html", results_context(request, form, profile, plan)
    )


@app.post("/report")
async def report_pdf(
    request: Request,
    form: FormInput = Depends(plan_form),
    today: date = Depends(get_today),
):
    try:
        profile = form.to_profile()
        plan = calculator.calculate_plan(profile, today)
    except ValueError as e:
        return render_form(request, today, error=str(e), form=form, status_code=400)

    from weasyprint import HTML

    template = templates.get_template("pdf_report.html")
    html_content = template.render(**results_context(request, form, profile, plan), today=today)

    pdf_io = BytesIO()
    await run_in_threadpool(HTML(string=html_content).write_pdf, pdf_io)
    pdf_io.seek(0)

    filename = f"weight_plan_{today.isoformat()}.pdf"

    return StreamingResponse(
        pdf_io,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/api/plan")
async def plan_api(body: PlanRequest, today: date = Depends(get_today)):
    try:
        plan = calculator.calculate_plan(body.to_profile(), today)
    except InvalidGoalError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return plan.to_dict()
