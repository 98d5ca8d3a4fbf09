from dataclasses import replace

import pytest

from eleveld_tci import ModelConstants, compute_loading_dose, compute_parameters, max_mass_rate


def test_max_mass_rate():
    # 10 mg/mL at 1000 mL/h
    assert max_mass_rate(10) == pytest.approx(10 * 1000 / 60)
    assert max_mass_rate(10, ModelConstants(max_pump_flow=1200)) == pytest.approx(200)


def test_loading_dose_reaches_target(propofol_patient):
    vc = compute_parameters(propofol_patient).vc
    dose, duration = compute_loading_dose(propofol_patient)
    assert dose == pytest.approx(3 * vc)
    # given at 1000 mL/h of 10 mg/mL, i.e. 10000/3600 mg/s
    assert duration == pytest.approx(dose / (10 * 1000 / 3600))


def test_loading_dose_from_current_ce(remifentanil_patient):
    covariates = replace(remifentanil_patient, current_ce=1.5)
    vc = compute_parameters(covariates).vc
    dose, duration = compute_loading_dose(covariates)
    assert dose == pytest.approx((4 - 1.5) * vc)
    assert duration > 0


@pytest.mark.parametrize('current_ce', [3, 4.5])
def test_no_loading_dose_above_target(propofol_patient, current_ce):
    dose, duration = compute_loading_dose(replace(propofol_patient, current_ce=current_ce))
    assert dose == 0
    assert duration == 0


def test_given_values_are_kept(propofol_patient):
    assert compute_loading_dose(replace(propofol_patient, loading_dose=25, loading_duration=60)) == (25, 60)
    dose, duration = compute_loading_dose(replace(propofol_patient, loading_dose=25))
    assert dose == 25
    assert duration == pytest.approx(25 / (10 * 1000 / 3600))
    computed_dose, _ = compute_loading_dose(propofol_patient)
    dose, duration = compute_loading_dose(replace(propofol_patient, loading_duration=120))
    assert dose == pytest.approx(computed_dose)
    assert duration == 120


def test_duration_is_zero_only_without_dose(propofol_patient):
    dose, duration = compute_loading_dose(replace(propofol_patient, loading_dose=0, loading_duration=30))
    assert (dose, duration) == (0, 0)
    dose, duration = compute_loading_dose(replace(propofol_patient, loading_dose=10, loading_duration=0))
    assert duration == pytest.approx(10 / (10 * 1000 / 3600))


def test_precomputed_parameters_are_used(propofol_patient):
    parameters = replace(compute_parameters(propofol_patient), v1=10.0)
    dose, _ = compute_loading_dose(propofol_patient, parameters)
    assert dose == pytest.approx(30)
