from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from remsens.constants import SIGMA
from remsens.errors import PreconditionError
from remsens.formulas import el_opt
from remsens.formulas.bands import ASTER, MODIS, OCM_2, find_band
from remsens.quantity import Angle, OpticalDepth, Temperature


# ---------------------------- band tables ----------------------------


def test_band_tables():
    assert len(ASTER) == 9 and len(MODIS) == 19 and len(OCM_2) == 8
    assert [b.index for b in MODIS] == list(range(1, 20))
    assert ASTER[0].bandwidth == pytest.approx(0.08e-6)
    assert find_band(OCM_2, 1e-6) is None


def test_aster_lookup():
    assert el_opt.aster(0.55e-6) == 1
    assert el_opt.aster(0.65e-6) == 2
    assert el_opt.aster(2.43e-6) == 9


def test_shared_bound_goes_to_first_band():
    assert el_opt.aster(2.185e-6) == 5


def test_aster_gap_rejected():
    with pytest.raises(PreconditionError) as e:
        el_opt.aster(0.61e-6)
    assert e.value.violation.contract == "wavelength_in_aster_band"

    with pytest.raises(PreconditionError):
        el_opt.aster(0.50e-6)


def test_modis_lookup_uses_table_order():
    assert el_opt.modis(6.45e-7) == 1
    assert el_opt.modis(4.1e-7) == 8
    # bands 17 and 19 overlap
    assert el_opt.modis(9.16e-7) == 17
    assert el_opt.modis(9.5e-7) == 19


def test_ocm_2_lookup():
    assert el_opt.ocm_2(5.1e-7) == 4
    with pytest.raises(PreconditionError):
        el_opt.ocm_2(8.0e-7)


# ---------------------------- diffraction ----------------------------


def test_diffraction_angle():
    a = el_opt.diffraction_angle(1, 500e-9, 1e-6)
    assert isinstance(a, Angle)
    assert a.magnitude == pytest.approx(math.pi / 6)
    assert el_opt.diffraction_angle(2, 500e-9, 1e-6).magnitude == pytest.approx(math.pi / 2)


@pytest.mark.parametrize(
    "n, wavelength, d, contract",
    [
        (0, 500e-9, 1e-6, "order_valid"),
        (True, 500e-9, 1e-6, "order_valid"),
        (1.5, 500e-9, 1e-6, "order_valid"),
        (1, 500e-9, 1.0, "d_in_range"),
        (3, 500e-9, 1e-6, "order_exists"),
    ],
)
def test_diffraction_angle_preconditions(n, wavelength, d, contract):
    with pytest.raises(PreconditionError) as e:
        el_opt.diffraction_angle(n, wavelength, d)
    assert e.value.violation.contract == contract


# ---------------------------- split window ----------------------------


def test_split_window_default_averages():
    assert el_opt.surface_temp_split_window(300.0, 310.0).magnitude == pytest.approx(305.0)


def test_split_window_explicit_coefficients():
    coef = el_opt.SplitWindowCoefficients(a0=1.0, a1=0.9, a2=0.1)
    assert el_opt.surface_temp_split_window(300.0, 310.0, coef).magnitude == pytest.approx(302.0)

    with pytest.raises(PreconditionError) as e:
        el_opt.surface_temp_split_window(300.0, 310.0, (1.0, 0.9, 0.1))
    assert e.value.violation.contract == "coefficients_type"


def test_train_split_window_recovers_coefficients(caplog):
    b1 = np.array([290.0, 295.0, 300.0, 305.0, 310.0])
    b2 = np.array([288.0, 296.0, 299.0, 309.0, 311.0])
    b0 = 2.0 + 0.6 * b1 + 0.4 * b2

    with caplog.at_level(logging.INFO, logger="remsens.formulas.el_opt"):
        coef = el_opt.train_split_window(list(b0), list(b1), list(b2))

    assert coef.as_tuple() == pytest.approx((2.0, 0.6, 0.4), abs=1e-6)
    assert "split-window fit" in caplog.text

    # trained coefficients feed straight back into the retrieval
    assert el_opt.surface_temp_split_window(300.0, 299.0, coef).magnitude == pytest.approx(2.0 + 180.0 + 119.6)


@pytest.mark.parametrize(
    "b0, b1, b2, contract",
    [
        ([300.0, 301.0, 302.0], [300.0, 301.0], [300.0, 301.0, 302.0], "same_length"),
        ([300.0, 301.0], [300.0, 301.0], [300.0, 301.0], "enough_samples"),
        ([300.0, float("nan"), 302.0], [300.0, 301.0, 302.0], [300.0, 301.0, 302.0], "samples_finite"),
    ],
)
def test_train_split_window_preconditions(b0, b1, b2, contract):
    with pytest.raises(PreconditionError) as e:
        el_opt.train_split_window(b0, b1, b2)
    assert e.value.violation.contract == contract


# ---------------------------- two-look ----------------------------


def _looks(t0, ta, tau, theta):
    tb1 = ta + (t0 - ta) * math.exp(-tau)
    tb2 = ta + (t0 - ta) * math.exp(-tau / math.cos(theta))
    return tb1, tb2


@pytest.mark.parametrize("t0, ta", [(300.0, 250.0), (260.0, 280.0)])
def test_surface_temp_tau_inverts_forward_model(t0, ta):
    tb1, tb2 = _looks(t0, ta, 0.5, math.pi / 3)
    t, tau = el_opt.surface_temp_tau(tb1, tb2, ta, math.pi / 3)

    assert isinstance(t, Temperature) and isinstance(tau, OpticalDepth)
    assert t.magnitude == pytest.approx(t0, rel=1e-9)
    assert tau.magnitude == pytest.approx(0.5, rel=1e-9)
    assert el_opt.surface_temp(tb1, tb2, ta, math.pi / 3).magnitude == pytest.approx(t0, rel=1e-9)


def test_two_look_preconditions():
    tb1, tb2 = _looks(300.0, 250.0, 0.5, math.pi / 3)

    with pytest.raises(PreconditionError) as e:
        el_opt.surface_temp(tb1, tb2, 250.0, 0.0)
    assert e.value.violation.contract == "theta_oblique"

    with pytest.raises(PreconditionError) as e:
        el_opt.surface_temp(250.0, tb2, 250.0, math.pi / 3)
    assert e.value.violation.contract == "same_side_of_atmosphere"

    with pytest.raises(PreconditionError) as e:
        el_opt.surface_temp(tb2, tb1, 250.0, math.pi / 3)
    assert e.value.violation.contract == "oblique_attenuated"


# ---------------------------- calibration constants ----------------------------

# Landsat 8 TIRS band 10
K1 = 774.8853
K2 = 1321.0789


@pytest.mark.parametrize("t", [220.0, 288.15, 330.0])
def test_radiance_temperature_round_trip(t):
    radiance = el_opt.avg_spectral_radiance(K1, K2, t)
    assert el_opt.earth_surface_temp(K1, K2, radiance).magnitude == pytest.approx(t, rel=1e-9)


def test_avg_spectral_radiance_value():
    assert el_opt.avg_spectral_radiance(K1, K2, 300.0).magnitude == pytest.approx(K1 / (math.exp(K2 / 300.0) - 1.0))


def test_earth_surface_temp_requires_positive_radiance():
    with pytest.raises(PreconditionError) as e:
        el_opt.earth_surface_temp(K1, K2, 0.0)
    assert e.value.violation.contract == "radiance_positive"


# ---------------------------- thermal ----------------------------


def test_thermal_properties():
    c, rho, k = 800.0, 2000.0, 2.0
    omega = 2.0 * math.pi / 86400.0

    assert el_opt.thermal_inertia(c, rho, k).magnitude == pytest.approx(math.sqrt(c * rho * k))
    assert el_opt.thermal_diffusivity(c, rho, k).magnitude == pytest.approx(1.25e-6)
    assert el_opt.thermal_wave_speed(c, rho, k, omega).magnitude == pytest.approx(math.sqrt(2 * k * omega / (rho * c)))


def test_thermal_inertia_rejects_zero_heat_capacity():
    with pytest.raises(PreconditionError) as e:
        el_opt.thermal_inertia(0.0, 2000.0, 2.0)
    assert e.value.violation.contract == "heat_capacity.domain"


def test_upward_heat_flux():
    alpha = el_opt.upward_heat_flux_weight(300.0, 0.95)
    assert alpha == pytest.approx(4 * 0.95 * SIGMA * 300.0**3)
    assert el_opt.upward_heat_flux(290.0, 300.0, 0.95) == pytest.approx(-10.0 * alpha)
    assert el_opt.upward_heat_flux(300.0, 300.0, 0.95) == 0.0


def test_upward_heat_flux_rejects_zero_emissivity():
    with pytest.raises(PreconditionError) as e:
        el_opt.upward_heat_flux(290.0, 300.0, 0.0)
    assert e.value.violation.contract == "emissivity.domain"
