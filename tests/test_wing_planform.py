"""
Piecewise wing definitions interpolated onto lattice stations.
"""

import numpy as np
import pytest

from solvers.vortex_lattice import VortexLattice
from wings.library import PRESET_WINGS, get_preset, list_presets, planform_metrics
from wings.planform import WingPlanform, linear_planform, station_positions


class TestStations:
    def test_station_centers(self):
        y = station_positions(10.0, 4)
        np.testing.assert_allclose(y, [-3.75, -1.25, 1.25, 3.75])

    def test_stations_are_symmetric(self):
        y = station_positions(7.0, 11)
        np.testing.assert_allclose(y, -y[::-1])
        assert y[5] == pytest.approx(0.0)


class TestWingPlanform:
    def test_linear_interpolation_over_semi_span(self):
        wing = linear_planform("test", span=10.0, root_chord=2.0, tip_chord=1.0,
                               root_twist=0.0, tip_twist=-2.0)
        n = 4
        # |y| = 3.75, 1.25 -> fractions 0.75, 0.25 of the semi-span
        np.testing.assert_allclose(wing.chord_distribution(n), [1.25, 1.75, 1.75, 1.25])
        np.testing.assert_allclose(wing.twist_distribution(n), [-1.5, -0.5, -0.5, -1.5])

    def test_dihedral_is_antisymmetric(self):
        wing = linear_planform("test", span=6.0, root_chord=1.0,
                               root_dihedral=4.0, tip_dihedral=4.0)
        beta = wing.dihedral_distribution(6)
        np.testing.assert_allclose(beta, [-4.0, -4.0, -4.0, 4.0, 4.0, 4.0])

    def test_breakpoints_outside_range_are_clamped(self):
        wing = WingPlanform(
            name="kinked",
            span=8.0,
            chord=((0.0, 1.0), (2.0, 1.0), (4.0, 0.5)),
            twist=((1.0, 0.0), (3.0, -1.0)),
        )
        twist = wing.twist_distribution(8)
        # Right-half stations at y = 0.5, 1.5, 2.5, 3.5
        np.testing.assert_allclose(twist[4:], [0.0, -0.25, -0.75, -1.0])
        assert wing.reference_chord(8) == pytest.approx(np.mean(wing.chord_distribution(8)))

    def test_rejects_unsorted_breakpoints(self):
        with pytest.raises(ValueError, match="strictly increasing"):
            WingPlanform(name="bad", span=4.0, chord=((1.0, 1.0), (0.5, 1.0)))

    def test_rejects_breakpoints_beyond_tip(self):
        with pytest.raises(ValueError, match="semi-span"):
            WingPlanform(name="bad", span=4.0, chord=((0.0, 1.0), (3.0, 1.0)))

    def test_rejects_empty_distribution(self):
        with pytest.raises(ValueError):
            WingPlanform(name="bad", span=4.0, chord=())

    def test_rejects_non_positive_chord(self):
        with pytest.raises(ValueError, match="chord breakpoints must be positive"):
            linear_planform("bad", span=4.0, root_chord=1.0, tip_chord=-0.2)

    def test_rejects_non_positive_span(self):
        with pytest.raises(ValueError, match="span"):
            linear_planform("bad", span=0.0, root_chord=1.0)

    def test_breakpoints_are_normalized_to_tuples(self):
        wing = WingPlanform(name="lists", span=4.0, chord=[[0, 1], [2, 1]])
        assert wing.chord == ((0.0, 1.0), (2.0, 1.0))

    def test_build_lattice(self):
        wing = linear_planform("washout", span=10.0, root_chord=1.0, tip_twist=-2.0)
        lattice = wing.build_lattice(100)

        assert isinstance(lattice, VortexLattice)
        assert lattice.n_stations == 100
        assert lattice.aspect_ratio() == pytest.approx(10.0)
        np.testing.assert_allclose(
            lattice.twist, np.deg2rad(wing.twist_distribution(100))
        )

    def test_stations_payload(self):
        wing = linear_planform("flat", span=2.0, root_chord=0.5)
        payload = wing.stations(4)

        assert payload["n_stations"] == 4
        assert payload["reference_chord"] == pytest.approx(0.5)
        assert len(payload["y"]) == len(payload["dihedral"]) == 4


class TestPresetLibrary:
    def test_ids_are_unique(self):
        ids = [preset.id for preset in PRESET_WINGS]
        assert len(ids) == len(set(ids))

    def test_list_presets(self):
        presets = list_presets()
        assert {p["id"] for p in presets} >= {"rect-ar10", "washout-ar10"}
        assert all("metrics" in p for p in presets)

    def test_unknown_preset(self):
        with pytest.raises(KeyError, match="Unknown wing preset"):
            get_preset("naca-0012")

    def test_metrics(self):
        metrics = planform_metrics(get_preset("tapered-ar6").planform)
        assert metrics["aspect_ratio"] == pytest.approx(6.0, rel=1e-3)
        assert metrics["washout_deg"] == pytest.approx(2.0, abs=0.05)

    @pytest.mark.parametrize("preset", PRESET_WINGS, ids=lambda p: p.id)
    def test_every_preset_builds_a_lattice(self, preset):
        lattice = preset.planform.build_lattice(60)
        solution = lattice.analyze(preset.default_alpha)

        assert np.isfinite(solution.cl)
        assert solution.cl > 0.0
