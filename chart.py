import base64
from io import BytesIO

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from models import CalculationResult, UnitSystem, UserProfile  # noqa: E402
from units import kg_to_lbs  # noqa: E402


LOSS_COLOR = "#10b981"
GAIN_COLOR = "#3b82f6"


def render_projection_chart(
    result: CalculationResult, profile: UserProfile, unit_system: UnitSystem
) -> str:
    """
    Draw the projected weight curve with a dashed line at the target weight.
    Returns a PNG data URI for <img src=...> in both the page and the PDF.
    """
    convert = kg_to_lbs if unit_system == UnitSystem.IMPERIAL else float
    unit = "lbs" if unit_system == UnitSystem.IMPERIAL else "kg"
    color = LOSS_COLOR if profile.is_weight_loss else GAIN_COLOR

    labels = [p.date_str for p in result.projected_data]
    weights = [round(convert(p.weight), 1) for p in result.projected_data]

    fig, ax = plt.subplots(figsize=(8, 3.5))
    try:
        ax.plot(
            range(len(weights)),
            weights,
            color=color,
            linewidth=3,
            marker="o",
            markersize=6,
            markerfacecolor=color,
            markeredgecolor="white",
        )
        ax.axhline(
            convert(profile.target_weight_kg),
            color="red",
            linestyle="--",
            linewidth=1,
            label="Goal",
        )
        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels, fontsize=8)
        ax.set_ylabel(unit)
        ax.grid(axis="y", linestyle="--", color="#e2e8f0")
        for side in ("top", "right"):
            ax.spines[side].set_visible(False)
        ax.legend(loc="best", frameon=False, fontsize=8)
        fig.tight_layout()

        buf = BytesIO()
        fig.savefig(buf, format="png", dpi=100)
    finally:
        plt.close(fig)

    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
