from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from solvers.vortex_lattice import (
    LatticeError,
    LatticeSolution,
    VortexLattice,
)
from wings.library import get_preset, list_presets
from wings.planform import DEFAULT_STATIONS, station_positions

logger = logging.getLogger(__name__)

app = FastAPI(title="WingStack API", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Upper bound on stations for requests; inversion is O(N^3)
_MAX_STATIONS = 2000


class AnalyzeRequest(BaseModel):
    span: float = 10.0
    chord: float = 1.0
    twist: List[float]
    dihedral: List[float]
    alpha_deg: float = 4.0


class SweepRequest(BaseModel):
    span: float = 10.0
    chord: float = 1.0
    twist: List[float]
    dihedral: List[float]
    alphas: List[float] = Field(default_factory=lambda: [-2.0, 0.0, 2.0, 4.0, 6.0, 8.0])


class PresetAnalyzeRequest(BaseModel):
    alpha_deg: Optional[float] = None
    stations: int = Field(DEFAULT_STATIONS, ge=2, le=_MAX_STATIONS)


def _finite_or_none(value: float) -> Optional[float]:
    # JSON has no inf/nan; zero induced drag is reported as null
    return value if math.isfinite(value) else None


def _coefficients(solution: LatticeSolution) -> Dict[str, Optional[float]]:
    return {key: _finite_or_none(val) for key, val in solution.coefficients().items()}


def _response(solution: LatticeSolution, span: float) -> Dict[str, object]:
    data = solution.to_dict()
    return {
        "coefficients": _coefficients(solution),
        "distribution": {
            "y": station_positions(span, len(solution.circulation)).tolist(),
            "circulation": data["circulation"],
            "downwash": data["downwash"],
            "induced_aoa": data["induced_aoa"],
            "lift": data["lift_distribution"],
        },
    }


def _rejected(exc: LatticeError) -> HTTPException:
    logger.info("Rejected lattice geometry: %s", exc)
    return HTTPException(status_code=422, detail=str(exc))


def _build_lattice(span: float, chord: float, twist: List[float], dihedral: List[float]) -> VortexLattice:
    if len(twist) > _MAX_STATIONS:
        raise HTTPException(
            status_code=422,
            detail=f"at most {_MAX_STATIONS} stations are supported",
        )
    try:
        return VortexLattice(span, chord, twist, dihedral)
    except LatticeError as exc:
        raise _rejected(exc) from exc


@app.get("/api/health")
def health():
    return {"ok": True}


@app.get("/api/wings")
def api_wing_presets():
    return {"presets": list_presets()}


@app.get("/api/wings/{preset_id}")
def api_wing_preset(preset_id: str, stations: int = DEFAULT_STATIONS):
    try:
        preset = get_preset(preset_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    if not 2 <= stations <= _MAX_STATIONS:
        raise HTTPException(
            status_code=422,
            detail=f"stations must be between 2 and {_MAX_STATIONS}",
        )
    return {
        "preset": preset.to_dict(),
        "geometry": preset.planform.stations(stations),
    }


@app.post("/api/wings/{preset_id}/analyze")
def api_analyze_preset(preset_id: str, req: PresetAnalyzeRequest):
    try:
        preset = get_preset(preset_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    alpha_deg = preset.default_alpha if req.alpha_deg is None else req.alpha_deg
    try:
        lattice = preset.planform.build_lattice(req.stations)
    except LatticeError as exc:
        raise _rejected(exc) from exc
    logger.info("Analyzing preset %s at %.2f deg", preset_id, alpha_deg)
    body = _response(lattice.analyze(alpha_deg), preset.planform.span)
    body["preset"] = preset.id
    return body


@app.post("/api/analyze")
def api_analyze(req: AnalyzeRequest):
    lattice = _build_lattice(req.span, req.chord, req.twist, req.dihedral)
    logger.info(
        "Analyzing %d-station lattice at %.2f deg", lattice.n_stations, req.alpha_deg
    )
    return _response(lattice.analyze(req.alpha_deg), req.span)


@app.post("/api/sweep")
def api_sweep(req: SweepRequest):
    lattice = _build_lattice(req.span, req.chord, req.twist, req.dihedral)
    logger.info(
        "Sweeping %d-station lattice over %d angles",
        lattice.n_stations,
        len(req.alphas),
    )
    return {
        "aspect_ratio": lattice.aspect_ratio(),
        "polar": [_coefficients(solution) for solution in lattice.sweep(req.alphas)],
    }
