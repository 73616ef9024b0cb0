# advice/routes.py

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from starlette.concurrency import run_in_threadpool

from calculator import InvalidGoalError
from forms import calculator, get_today, plan_form, render_form, results_context, templates
from models import FormInput
from .service import AdviceError, get_advice

log = logging.getLogger(__name__)

router = APIRouter()


@router.post("/advice", response_class=HTMLResponse)
async def advice_view(
    request: Request,
    form: FormInput = Depends(plan_form),
    today: date = Depends(get_today),
):
    """
    Recompute the plan from the submitted form and ask Gemini for advice.
    A failed request keeps the plan on screen and shows a notice instead.
    """
    try:
        profile = form.to_profile()
        plan = calculator.calculate_plan(profile, today)
    except ValueError as e:
        return render_form(request, today, error=str(e), form=form, status_code=400)

    context = results_context(request, form, profile, plan)
    try:
        context["advice"] = await run_in_threadpool(get_advice, profile, plan)
    except AdviceError as e:
        context["advice_error"] = str(e)

    return templates.TemplateResponse(request, "results.html", context)


@router.post("/api/advice")
async def advice_api(
    form: FormInput = Depends(plan_form),
    today: date = Depends(get_today),
):
    try:
        profile = form.to_profile()
        plan = calculator.calculate_plan(profile, today)
    except InvalidGoalError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        advice = await run_in_threadpool(get_advice, profile, plan)
    except AdviceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"plan": plan.to_dict(), "advice": advice.to_dict()}
