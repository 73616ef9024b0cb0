import logging
import math
from datetime import date, timedelta
from typing import List, Optional, Tuple

from models import (
    ActivityLevel,
    CalculationResult,
    Gender,
    GoalType,
    ProjectionPoint,
    UserProfile,
)


log = logging.getLogger(__name__)

ACTIVITY_MAP = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTRA_ACTIVE: 1.9,
}

CALORIES_PER_KG = 7700  # approx. kcal per kg of body mass

MIN_SAFE_CALORIES = {
    Gender.MALE: 1500,
    Gender.FEMALE: 1200,
}

PROJECTION_POINTS = 10


class InvalidGoalError(ValueError):
    """The goal fields can't produce a timeline."""


class GoalCalculator:
    """
    Core logic:
    - Compute BMR (Mifflin-St Jeor)
    - Apply activity factor -> TDEE
    - Resolve the timeline from a target date or a weekly rate
    - Turn the daily deficit into a calorie target (surplus for gains)
    - Clamp loss plans to the gender-specific safe minimum
    - Project the weight curve for the chart
    """

    def _bmr(self, gender: Gender, age: int, weight_kg: float, height_cm: float) -> float:
        val = 10 * weight_kg + 6.25 * height_cm - 5 * age
        if gender == Gender.MALE:
            return val + 5
        return val - 161

    def _schedule(self, total_kcal: float, daily_kcal: float, today: date) -> Tuple[int, date]:
        """Days needed at daily_kcal per day, and the date they end on."""
        try:
            days = max(math.ceil(total_kcal / daily_kcal), 1)
            return days, today + timedelta(days=days)
        except OverflowError:
            raise InvalidGoalError(
                "This goal is too far away to plan. Choose a faster rate or a closer target."
            ) from None

    def _timeline(
        self, profile: UserProfile, total_kcal: float, today: date
    ) -> Tuple[float, int, date]:
        """
        Returns: (daily_deficit, days_to_goal, completion_date)
        daily_deficit is unsigned; direction is applied by the caller.
        """
        if profile.goal_type == GoalType.TARGET_DATE:
            if profile.target_date is None:
                raise InvalidGoalError("A target date is required for a target date goal.")
            if profile.target_date < today:
                raise InvalidGoalError("Target date must not be in the past.")

            days = max((profile.target_date - today).days, 1)
            return abs(total_kcal) / days, days, profile.target_date

        if profile.weekly_loss_kg is None:
            raise InvalidGoalError("A weekly rate is required for a weekly rate goal.")
        if profile.weekly_loss_kg == 0:
            raise InvalidGoalError("Weekly rate must not be zero.")

        if profile.is_weight_loss and profile.weekly_loss_kg < 0:
            raise InvalidGoalError("Weekly rate must be a loss when the target weight is lower.")
        if profile.is_weight_gain and profile.weekly_loss_kg > 0:
            raise InvalidGoalError("Weekly rate must be a gain when the target weight is higher.")

        weekly_deficit = profile.weekly_loss_kg * CALORIES_PER_KG
        daily_deficit = weekly_deficit / 7
        days, completion_date = self._schedule(total_kcal, daily_deficit, today)

        if total_kcal == 0:
            # maintenance, nothing to burn whatever the rate
            daily_deficit = 0.0

        return abs(daily_deficit), days, completion_date

    def _projection(
        self, profile: UserProfile, days_to_goal: int, today: date
    ) -> List[ProjectionPoint]:
        interval = math.ceil(days_to_goal / PROJECTION_POINTS)
        delta = profile.weight_delta_kg

        points = []
        for i in range(PROJECTION_POINTS + 1):
            day = min(i * interval, days_to_goal)
            progress = day / days_to_goal
            weight = round(profile.current_weight_kg - delta * progress, 1)
            points.append(
                ProjectionPoint(
                    day=day,
                    weight=weight,
                    date_str=(today + timedelta(days=day)).strftime("%d/%m"),
                )
            )

        last = points[-1]
        if last.weight != profile.target_weight_kg:
            points[-1] = ProjectionPoint(
                day=last.day, weight=profile.target_weight_kg, date_str=last.date_str
            )
        return points

    def calculate_plan(self, profile: UserProfile, today: date) -> CalculationResult:
        # BMR
        bmr = self._bmr(
            profile.gender, profile.age, profile.current_weight_kg, profile.height_cm
        )

        # TDEE
        tdee = bmr * ACTIVITY_MAP[profile.activity_level]

        # Timeline
        total_kcal = profile.weight_delta_kg * CALORIES_PER_KG
        daily_deficit, days_to_goal, completion_date = self._timeline(
            profile, total_kcal, today
        )

        # Gains turn the deficit into a surplus
        adjusted_deficit = daily_deficit if profile.is_weight_loss else -daily_deficit
        daily_calories = tdee - adjusted_deficit

        # Never below the safe minimum when losing
        warning: Optional[str] = None
        min_calories = MIN_SAFE_CALORIES[profile.gender]
        if profile.is_weight_loss and daily_calories < min_calories:
            assert total_kcal > 0, "loss goal with no calories to burn"

            max_safe_deficit = tdee - min_calories
            if max_safe_deficit <= 0:
                raise InvalidGoalError(
                    f"Maintenance calories ({round(tdee)} kcal) are at or below the safe "
                    f"minimum of {min_calories} kcal, so this loss goal can't be reached safely."
                )

            warning = (
                f"Warning: your goal requires a dangerously low intake "
                f"({round(daily_calories)} kcal). We use a safe minimum of {min_calories} kcal."
            )
            log.info(
                "safety floor applied: %.0f kcal -> %d kcal", daily_calories, min_calories
            )

            daily_calories = float(min_calories)
            adjusted_deficit = max_safe_deficit
            days_to_goal, completion_date = self._schedule(
                abs(total_kcal), max_safe_deficit, today
            )

        projected_data = self._projection(profile, days_to_goal, today)

        return CalculationResult(
            bmr=bmr,
            tdee=tdee,
            daily_calories=daily_calories,
            days_to_goal=days_to_goal,
            completion_date=completion_date,
            weekly_deficit=adjusted_deficit * 7,
            projected_data=projected_data,
            warning=warning,
        )
