from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import List, Optional

from units import cm_to_feet, feet_to_cm, kg_to_lbs, lbs_to_kg


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTRA_ACTIVE = "extra_active"


class GoalType(str, Enum):
    TARGET_DATE = "target_date"
    WEEKLY_RATE = "weekly_rate"


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


ACTIVITY_LABELS = {
    ActivityLevel.SEDENTARY: "Sedentary (little or no exercise)",
    ActivityLevel.LIGHTLY_ACTIVE: "Lightly active (light exercise 1-3 days/week)",
    ActivityLevel.MODERATELY_ACTIVE: "Moderately active (exercise 3-5 days/week)",
    ActivityLevel.VERY_ACTIVE: "Very active (hard exercise 6-7 days/week)",
    ActivityLevel.EXTRA_ACTIVE: "Extra active (physical job or training twice a day)",
}


@dataclass(frozen=True)
class ProfileDisplay:
    unit_system: UnitSystem
    height_cm: float
    height_ft: int
    height_in: int
    current_weight: float      # kg or lbs
    target_weight: float       # kg or lbs
    weekly_rate: Optional[float]
    weight_unit: str


@dataclass(frozen=True)
class UserProfile:
    gender: Gender
    age: int
    height_cm: float
    current_weight_kg: float
    target_weight_kg: float
    activity_level: ActivityLevel
    goal_type: GoalType
    target_date: Optional[date] = None      # only for target_date goals
    weekly_loss_kg: Optional[float] = None  # only for weekly_rate goals, negative = gain

    @property
    def weight_delta_kg(self) -> float:
        return self.current_weight_kg - self.target_weight_kg

    @property
    def is_weight_loss(self) -> bool:
        return self.current_weight_kg > self.target_weight_kg

    @property
    def is_weight_gain(self) -> bool:
        return self.target_weight_kg > self.current_weight_kg

    def display(self, unit_system: UnitSystem) -> ProfileDisplay:
        """Derive the form values shown for a unit system."""
        feet, inches = cm_to_feet(self.height_cm)
        if unit_system == UnitSystem.IMPERIAL:
            convert = kg_to_lbs
            weight_unit = "lbs"
        else:
            convert = float
            weight_unit = "kg"

        weekly_rate = None
        if self.weekly_loss_kg is not None:
            weekly_rate = round(convert(self.weekly_loss_kg), 1)

        return ProfileDisplay(
            unit_system=unit_system,
            height_cm=round(self.height_cm, 1),
            height_ft=feet,
            height_in=inches,
            current_weight=round(convert(self.current_weight_kg), 1),
            target_weight=round(convert(self.target_weight_kg), 1),
            weekly_rate=weekly_rate,
            weight_unit=weight_unit,
        )


@dataclass
class FormInput:
    sex: str
    age: int
    unit_system: str           # metric, imperial
    height: Optional[float]    # cm, metric only
    height_ft: Optional[float] # imperial only
    height_in: Optional[float] # imperial only
    weight: float              # kg or lbs
    goal_weight: float         # kg or lbs
    activity: str              # sedentary, lightly_active, ...
    goal_type: str             # target_date, weekly_rate
    goal_date: Optional[str] = None      # YYYY-MM-DD
    weekly_rate: Optional[float] = None  # kg or lbs per week

    def in_units(self, unit_system: UnitSystem) -> "FormInput":
        """The same entries re-expressed in another unit system."""
        # weekly goal keeps the rate through to_profile whichever goal is selected
        profile = replace(self, goal_type=GoalType.WEEKLY_RATE.value, goal_date=None).to_profile()
        display = profile.display(unit_system)
        imperial = unit_system == UnitSystem.IMPERIAL

        return replace(
            self,
            unit_system=unit_system.value,
            height=None if imperial else display.height_cm,
            height_ft=display.height_ft if imperial else None,
            height_in=display.height_in if imperial else None,
            weight=display.current_weight,
            goal_weight=display.target_weight,
            weekly_rate=display.weekly_rate,
        )

    def to_profile(self) -> UserProfile:
        """
        Normalize submitted values to a metric UserProfile.
        Raises ValueError for unknown enum values or a missing height.
        """
        unit_system = UnitSystem(self.unit_system)
        goal_type = GoalType(self.goal_type)

        if unit_system == UnitSystem.IMPERIAL:
            if self.height_ft is None:
                raise ValueError("Please enter your height in feet and inches.")
            height_cm = feet_to_cm(self.height_ft, self.height_in or 0)
            to_kg = lbs_to_kg
        else:
            if self.height is None:
                raise ValueError("Please enter your height in centimeters.")
            height_cm = self.height
            to_kg = float

        target_date = None
        if goal_type == GoalType.TARGET_DATE and self.goal_date:
            try:
                target_date = date.fromisoformat(self.goal_date)
            except ValueError:
                raise ValueError("Please enter a valid goal date.")

        weekly_loss_kg = None
        if goal_type == GoalType.WEEKLY_RATE and self.weekly_rate is not None:
            weekly_loss_kg = to_kg(self.weekly_rate)

        return UserProfile(
            gender=Gender(self.sex),
            age=int(self.age),
            height_cm=height_cm,
            current_weight_kg=to_kg(self.weight),
            target_weight_kg=to_kg(self.goal_weight),
            activity_level=ActivityLevel(self.activity),
            goal_type=goal_type,
            target_date=target_date,
            weekly_loss_kg=weekly_loss_kg,
        )


@dataclass(frozen=True)
class ProjectionPoint:
    day: int
    weight: float   # kg, 1 decimal
    date_str: str   # dd/mm


@dataclass
class CalculationResult:
    bmr: float
    tdee: float
    daily_calories: float
    days_to_goal: int
    completion_date: date
    weekly_deficit: float      # positive = deficit, negative = surplus
    projected_data: List[ProjectionPoint] = field(default_factory=list)
    warning: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "bmr": self.bmr,
            "tdee": self.tdee,
            "daily_calories": self.daily_calories,
            "days_to_goal": self.days_to_goal,
            "completion_date": self.completion_date.isoformat(),
            "weekly_deficit": self.weekly_deficit,
            "projected_data": [
                {"day": p.day, "weight": p.weight, "date_str": p.date_str}
                for p in self.projected_data
            ],
            "warning": self.warning,
        }
