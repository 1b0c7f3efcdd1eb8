from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

import numpy as np

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Inversion is refused above this 2-norm condition number
DEFAULT_MAX_CONDITION = 1e12


class LatticeError(ValueError):
    """Base class for lattice construction failures."""


class InvalidGeometry(LatticeError):
    pass


class SingularMatrix(LatticeError):
    pass


def _offsets(n: int) -> np.ndarray:
    # (j - i) for row i, column j
    idx = np.arange(n, dtype=float)
    return idx[np.newaxis, :] - idx[:, np.newaxis]


def kronecker(n: int) -> np.ndarray:
    return np.eye(n)


def circulation_tensor(span: float, chord: float, dihedral: np.ndarray) -> np.ndarray:
    """Assemble the circulation (influence) tensor Q.

    Q[m, n] = delta(m, n)/pi
              + cos(dihedral[m]) / (4*pi*xi) * (1/(j-i+0.5) - 1/(j-i-0.5))

    with xi = (span/N)/chord. Offsets are half-integers, so no term is singular.
    """
    n = len(dihedral)
    xi = span / n / chord
    d = _offsets(n)
    coupling = 1.0 / (d + 0.5) - 1.0 / (d - 0.5)
    weight = np.cos(dihedral)[:, np.newaxis] / (4.0 * np.pi * xi)
    return kronecker(n) / np.pi + weight * coupling


def downwash_kernel(span: float, n: int) -> np.ndarray:
    """Induced-velocity kernel K; depends only on station spacing span/N."""
    s = span / n
    d = _offsets(n)
    return 1.0 / (4.0 * np.pi * s) * (-1.0 / (d + 0.5) + 1.0 / (d - 0.5))


def invert(q: np.ndarray, max_condition: float = DEFAULT_MAX_CONDITION) -> np.ndarray:
    """LU-based dense inverse, refusing singular or ill-conditioned input."""
    cond = np.linalg.cond(q)
    if not np.isfinite(cond) or cond > max_condition:
        raise SingularMatrix(
            f"circulation tensor is singular (condition number {cond:.3e} "
            f"exceeds {max_condition:.3e})"
        )
    try:
        inv = np.linalg.inv(q)
    except np.linalg.LinAlgError as exc:
        raise SingularMatrix(f"circulation tensor is singular: {exc}") from exc
    if not np.all(np.isfinite(inv)):
        raise SingularMatrix("circulation tensor inverse is not finite")
    logger.debug("Inverted %dx%d circulation tensor (cond=%.3e)", *q.shape, cond)
    return inv


def _readonly(a: np.ndarray) -> np.ndarray:
    a.flags.writeable = False
    return a


def _ratio(num: float, den: float) -> float:
    # Zero denominators yield inf/nan rather than raising
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(num) / np.float64(den))


@dataclass(frozen=True)
class LatticeSolution:
    alpha_deg: float
    circulation: np.ndarray
    downwash: np.ndarray
    induced_aoa: np.ndarray
    lift_distribution: np.ndarray
    cl: float
    cd: float
    ld: float
    span_efficiency: float
    aspect_ratio: float

    def coefficients(self) -> Dict[str, float]:
        return {
            "alpha_deg": self.alpha_deg,
            "cl": self.cl,
            "cd": self.cd,
            "ld": self.ld,
            "span_efficiency": self.span_efficiency,
            "aspect_ratio": self.aspect_ratio,
        }

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = dict(self.coefficients())
        data["circulation"] = self.circulation.tolist()
        data["downwash"] = self.downwash.tolist()
        data["induced_aoa"] = self.induced_aoa.tolist()
        data["lift_distribution"] = self.lift_distribution.tolist()
        return data


class VortexLattice:
    """Spanwise horseshoe-vortex lattice over N uniform stations.

    Geometry is fixed at construction, where the circulation tensor is
    assembled and inverted once. Every query (``solve``, ``cl``, ``cd`` ...)
    is a pure function of the angle of attack in degrees, so a single lattice
    may be shared between threads.

    Raises:
        InvalidGeometry: fewer than two stations, mismatched arrays,
            non-positive span/chord or non-finite input.
        SingularMatrix: the circulation tensor cannot be inverted.
    """

    def __init__(
        self,
        span: float,
        chord: float,
        twist: Sequence[float],
        dihedral: Sequence[float],
        max_condition: float = DEFAULT_MAX_CONDITION,
    ):
        twist_deg = np.asarray(twist, dtype=float)
        dihedral_deg = np.asarray(dihedral, dtype=float)

        if twist_deg.ndim != 1 or dihedral_deg.ndim != 1:
            raise InvalidGeometry(
                f"twist and dihedral must be one-dimensional "
                f"(got shapes {twist_deg.shape} and {dihedral_deg.shape})"
            )
        if len(twist_deg) != len(dihedral_deg):
            raise InvalidGeometry(
                f"twist and dihedral must have the same length "
                f"({len(twist_deg)} != {len(dihedral_deg)})"
            )
        if len(twist_deg) < 2:
            raise InvalidGeometry(
                f"lattice needs at least 2 stations, got {len(twist_deg)}"
            )
        if not (np.isfinite(span) and span > 0.0):
            raise InvalidGeometry(f"span must be positive, got {span}")
        if not (np.isfinite(chord) and chord > 0.0):
            raise InvalidGeometry(f"chord must be positive, got {chord}")
        if not (np.all(np.isfinite(twist_deg)) and np.all(np.isfinite(dihedral_deg))):
            raise InvalidGeometry("twist and dihedral must be finite")

        self.span = float(span)
        self.chord = float(chord)
        self.n_stations = len(twist_deg)
        self.twist = _readonly(np.deg2rad(twist_deg))
        self.dihedral = _readonly(np.deg2rad(dihedral_deg))

        q = circulation_tensor(self.span, self.chord, self.dihedral)
        self.inverse_influence = _readonly(invert(q, max_condition))
        self.downwash_kernel = _readonly(downwash_kernel(self.span, self.n_stations))

        logger.debug(
            "Built lattice: span=%g chord=%g stations=%d",
            self.span,
            self.chord,
            self.n_stations,
        )

    def __repr__(self) -> str:
        return (
            f"VortexLattice(span={self.span!r}, chord={self.chord!r}, "
            f"n_stations={self.n_stations})"
        )

    def circulation_tensor(self) -> np.ndarray:
        return circulation_tensor(self.span, self.chord, self.dihedral)

    def solve(self, aoa: float) -> np.ndarray:
        """Circulation strengths for an angle of attack in degrees."""
        alpha = self.twist + np.deg2rad(aoa)
        return self.inverse_influence @ alpha

    def downwash(self, aoa: float) -> np.ndarray:
        return self._downwash(self.solve(aoa))

    def induced_aoa(self, aoa: float) -> np.ndarray:
        """Induced angle of attack in degrees (exact arctangent)."""
        return self._induced_aoa(self.downwash(aoa))

    def lift_distribution(self, aoa: float) -> np.ndarray:
        gamma = self.solve(aoa)
        return self._lift_distribution(gamma, self._induced_aoa(self._downwash(gamma)))

    def cl(self, aoa: float) -> float:
        return self._cl(self.lift_distribution(aoa))

    def cd(self, aoa: float) -> float:
        gamma = self.solve(aoa)
        return self._cd(gamma, self._induced_aoa(self._downwash(gamma)))

    def ld(self, aoa: float) -> float:
        return _ratio(self.cl(aoa), self.cd(aoa))

    def span_efficiency(self, aoa: float) -> float:
        return self._span_efficiency(self.cl(aoa), self.cd(aoa))

    def aspect_ratio(self) -> float:
        # Planform area is span * chord for the uniform-chord idealization
        return self.span ** 2 / (self.span * self.chord)

    def analyze(self, aoa: float) -> LatticeSolution:
        """Evaluate every quantity from a single circulation solve."""
        gamma = self.solve(aoa)
        w = self._downwash(gamma)
        ai = self._induced_aoa(w)
        lift = self._lift_distribution(gamma, ai)
        cl = self._cl(lift)
        cd = self._cd(gamma, ai)
        return LatticeSolution(
            alpha_deg=float(aoa),
            circulation=gamma,
            downwash=w,
            induced_aoa=ai,
            lift_distribution=lift,
            cl=cl,
            cd=cd,
            ld=_ratio(cl, cd),
            span_efficiency=self._span_efficiency(cl, cd),
            aspect_ratio=self.aspect_ratio(),
        )

    def sweep(self, aoas: Iterable[float]) -> List[LatticeSolution]:
        return [self.analyze(aoa) for aoa in aoas]

    def _downwash(self, gamma: np.ndarray) -> np.ndarray:
        return self.downwash_kernel @ gamma

    @staticmethod
    def _induced_aoa(w: np.ndarray) -> np.ndarray:
        return -np.rad2deg(np.arctan2(w, 1.0))

    def _lift_distribution(self, gamma: np.ndarray, ai: np.ndarray) -> np.ndarray:
        return gamma * np.cos(self.dihedral) * np.cos(np.deg2rad(ai)) * self.chord

    def _cl(self, lift: np.ndarray) -> float:
        total = np.sum(lift * self.span / self.n_stations)
        return float(total / (0.5 * self.span * self.chord))

    def _cd(self, gamma: np.ndarray, ai: np.ndarray) -> float:
        # Normalized by N alone, unlike the area-normalized lift integral
        terms = 2.0 * gamma * np.cos(self.dihedral) * np.sin(np.deg2rad(ai))
        return float(np.sum(terms / self.n_stations))

    def _span_efficiency(self, cl: float, cd: float) -> float:
        return _ratio(cl ** 2, cd * np.pi * self.span / self.chord)


def solve_vortex_lattice(
    span: float,
    chord: float,
    twist: Sequence[float],
    dihedral: Sequence[float],
    alpha_deg: float,
) -> LatticeSolution:
    return VortexLattice(span, chord, twist, dihedral).analyze(alpha_deg)
