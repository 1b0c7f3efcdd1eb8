from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from solvers.vortex_lattice import DEFAULT_MAX_CONDITION, VortexLattice

DEFAULT_STATIONS = 250

Breakpoints = Tuple[Tuple[float, float], ...]


def station_positions(span: float, n: int) -> np.ndarray:
    """Spanwise centers of N uniform horseshoe vortices, left tip to right tip."""
    s = span / n
    return -0.5 * span + (np.arange(n) + 0.5) * s


def _as_breakpoints(points: Sequence[Sequence[float]]) -> Breakpoints:
    return tuple((float(y), float(v)) for y, v in points)


def _check_breakpoints(label: str, points: Breakpoints, semi_span: float) -> None:
    if not points:
        raise ValueError(f"{label} needs at least one breakpoint")
    y = np.array([p[0] for p in points])
    if np.any(np.diff(y) <= 0.0):
        raise ValueError(f"{label} breakpoints must be strictly increasing in y")
    if y[0] < 0.0 or y[-1] > semi_span + 1e-12:
        raise ValueError(
            f"{label} breakpoints must lie on the semi-span [0, {semi_span:g}]"
        )


@dataclass(frozen=True)
class WingPlanform:
    """Piecewise-linear wing definition over the semi-span.

    Each distribution is a tuple of ``(y, value)`` pairs with ``y`` measured
    from the root (meters) and values in meters (chord) or degrees (twist,
    dihedral). Station values are linearly interpolated and mirrored about
    the root; dihedral changes sign on the left half.
    """

    name: str
    span: float
    chord: Breakpoints
    twist: Breakpoints = ((0.0, 0.0),)
    dihedral: Breakpoints = ((0.0, 0.0),)

    def __post_init__(self):
        if not (np.isfinite(self.span) and self.span > 0.0):
            raise ValueError(f"span must be positive, got {self.span}")
        for label in ("chord", "twist", "dihedral"):
            points = _as_breakpoints(getattr(self, label))
            _check_breakpoints(label, points, 0.5 * self.span)
            object.__setattr__(self, label, points)
        if any(c <= 0.0 for _, c in self.chord):
            raise ValueError("chord breakpoints must be positive")

    def _interpolate(self, points: Breakpoints, n: int) -> np.ndarray:
        y = np.abs(station_positions(self.span, n))
        yp = [p[0] for p in points]
        vp = [p[1] for p in points]
        return np.interp(y, yp, vp)

    def chord_distribution(self, n: int = DEFAULT_STATIONS) -> np.ndarray:
        return self._interpolate(self.chord, n)

    def twist_distribution(self, n: int = DEFAULT_STATIONS) -> np.ndarray:
        return self._interpolate(self.twist, n)

    def dihedral_distribution(self, n: int = DEFAULT_STATIONS) -> np.ndarray:
        beta = self._interpolate(self.dihedral, n)
        return np.where(station_positions(self.span, n) < 0.0, -beta, beta)

    def reference_chord(self, n: int = DEFAULT_STATIONS) -> float:
        """Mean station chord, used as the lattice's uniform chord."""
        return float(np.mean(self.chord_distribution(n)))

    def build_lattice(
        self,
        n: int = DEFAULT_STATIONS,
        max_condition: float = DEFAULT_MAX_CONDITION,
    ) -> VortexLattice:
        return VortexLattice(
            self.span,
            self.reference_chord(n),
            self.twist_distribution(n),
            self.dihedral_distribution(n),
            max_condition=max_condition,
        )

    def stations(self, n: int = DEFAULT_STATIONS) -> Dict[str, object]:
        return {
            "n_stations": n,
            "y": station_positions(self.span, n).tolist(),
            "chord": self.chord_distribution(n).tolist(),
            "twist": self.twist_distribution(n).tolist(),
            "dihedral": self.dihedral_distribution(n).tolist(),
            "reference_chord": self.reference_chord(n),
        }

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "span": self.span,
            "chord": [list(p) for p in self.chord],
            "twist": [list(p) for p in self.twist],
            "dihedral": [list(p) for p in self.dihedral],
        }


def linear_planform(
    name: str,
    span: float,
    root_chord: float,
    tip_chord: Optional[float] = None,
    root_twist: float = 0.0,
    tip_twist: float = 0.0,
    root_dihedral: float = 0.0,
    tip_dihedral: float = 0.0,
) -> WingPlanform:
    """Straight root-to-tip variation of chord, twist and dihedral."""
    if tip_chord is None:
        tip_chord = root_chord
    half = 0.5 * span
    return WingPlanform(
        name=name,
        span=span,
        chord=((0.0, root_chord), (half, tip_chord)),
        twist=((0.0, root_twist), (half, tip_twist)),
        dihedral=((0.0, root_dihedral), (half, tip_dihedral)),
    )
