from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .planform import WingPlanform, linear_planform


@dataclass(frozen=True)
class WingPreset:
    """Metadata describing a curated wing configuration."""

    id: str
    label: str
    description: str
    default_alpha: float
    planform: WingPlanform
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "default_alpha": self.default_alpha,
            "planform": self.planform.to_dict(),
            "tags": list(self.tags),
            "metrics": planform_metrics(self.planform),
        }


def planform_metrics(planform: WingPlanform) -> Dict[str, float]:
    """Return simple geometric metrics for a planform."""
    chord = planform.reference_chord()
    twist = planform.twist_distribution()
    return {
        "span": planform.span,
        "reference_chord": round(chord, 6),
        "aspect_ratio": round(planform.span / chord, 6),
        "washout_deg": round(float(twist.max() - twist.min()), 6),
    }


PRESET_WINGS: Tuple[WingPreset, ...] = (
    WingPreset(
        id="rect-ar10",
        label="Rectangular AR 10",
        description="Flat, untwisted rectangular wing; the lifting-line baseline.",
        default_alpha=4.0,
        planform=linear_planform("Rectangular AR 10", span=10.0, root_chord=1.0),
        tags=("baseline", "untwisted"),
    ),
    WingPreset(
        id="washout-ar10",
        label="Washout AR 10",
        description="Rectangular wing with 2 degrees of linear washout to the tips.",
        default_alpha=4.0,
        planform=linear_planform(
            "Washout AR 10",
            span=10.0,
            root_chord=1.0,
            root_twist=0.0,
            tip_twist=-2.0,
        ),
        tags=("reference", "washout"),
    ),
    WingPreset(
        id="dihedral-ar8",
        label="Dihedral AR 8",
        description="Constant 5 degree dihedral for roll stability on trainers.",
        default_alpha=3.0,
        planform=linear_planform(
            "Dihedral AR 8",
            span=8.0,
            root_chord=1.0,
            root_dihedral=5.0,
            tip_dihedral=5.0,
        ),
        tags=("trainer", "dihedral"),
    ),
    WingPreset(
        id="polyhedral-glider",
        label="Polyhedral Glider",
        description="High aspect ratio sailplane wing with tip polyhedral and washout.",
        default_alpha=2.0,
        planform=WingPlanform(
            name="Polyhedral Glider",
            span=15.0,
            chord=((0.0, 1.0), (5.0, 0.8), (7.5, 0.45)),
            twist=((0.0, 0.0), (5.0, -0.5), (7.5, -2.5)),
            dihedral=((0.0, 2.0), (4.99, 2.0), (5.0, 8.0), (7.5, 8.0)),
        ),
        tags=("glider", "high-AR"),
    ),
    WingPreset(
        id="tapered-ar6",
        label="Tapered AR 6",
        description="Moderately tapered general aviation wing with mild washout.",
        default_alpha=4.0,
        planform=linear_planform(
            "Tapered AR 6",
            span=9.0,
            root_chord=1.9,
            tip_chord=1.1,
            root_twist=1.0,
            tip_twist=-1.0,
            root_dihedral=3.0,
            tip_dihedral=3.0,
        ),
        tags=("general-aviation", "tapered"),
    ),
)


_PRESET_LOOKUP: Dict[str, WingPreset] = {preset.id: preset for preset in PRESET_WINGS}


def list_presets() -> List[Dict[str, object]]:
    return [preset.to_dict() for preset in PRESET_WINGS]


def get_preset(preset_id: str) -> WingPreset:
    try:
        return _PRESET_LOOKUP[preset_id]
    except KeyError as exc:
        raise KeyError(f"Unknown wing preset '{preset_id}'") from exc
