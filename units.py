import math
from typing import Tuple


LBS_PER_KG = 2.20462
INCHES_PER_CM = 0.393701
CM_PER_INCH = 2.54


def kg_to_lbs(kg: float) -> float:
    return kg * LBS_PER_KG


def lbs_to_kg(lbs: float) -> float:
    return lbs / LBS_PER_KG


def cm_to_feet(cm: float) -> Tuple[int, int]:
    """
    Returns (feet, inches) with inches rounded to the nearest whole inch.
    A rounded 12 inches is carried into the next foot.
    """
    total_inches = cm * INCHES_PER_CM
    feet = math.floor(total_inches / 12)
    inches = int(round(total_inches - feet * 12))
    if inches == 12:
        feet += 1
        inches = 0
    return int(feet), inches


def feet_to_cm(feet: float, inches: float) -> float:
    return (feet * 12 + inches) * CM_PER_INCH
