from dataclasses import replace

import numpy as np
import pytest

from eleveld_tci import (PatientCovariates, InvalidCovariateError, ModelConstants,
                         compute_parameters, fat_free_mass)


def test_reference_propofol_patient(propofol_patient):
    p = compute_parameters(propofol_patient)
    assert p.v1 == pytest.approx(6.2830780766822)
    assert p.v2 == pytest.approx(25.5013145036879)
    # opiate co-administration lowers V3 and CL for a 35 yr old
    assert p.v3 == pytest.approx(272.8166615043603 * np.exp(-0.0138166 * 35))
    assert p.cl1 == pytest.approx(1.7895836588902 * np.exp(-0.00285709 * 35))
    assert p.ke0 == pytest.approx(0.146)
    assert p.k10 == pytest.approx(p.cl1 / p.v1)
    assert p.k21 == pytest.approx(p.cl2 / p.v2)
    assert p.k31 == pytest.approx(p.cl3 / p.v3)


def test_propofol_without_opiate(propofol_patient):
    p = compute_parameters(replace(propofol_patient, opiate=False))
    assert p.v3 == pytest.approx(272.8166615043603)
    assert p.cl1 == pytest.approx(1.7895836588902)


def test_propofol_venous_sampling(propofol_patient):
    arterial = compute_parameters(propofol_patient)
    venous = compute_parameters(replace(propofol_patient, measurement='venous'))
    assert venous.ke0 == pytest.approx(1.24)
    assert venous.v1 > arterial.v1
    assert venous.cl2 < arterial.cl2


def test_reference_remifentanil_patient(remifentanil_patient):
    p = compute_parameters(remifentanil_patient)
    assert p.v1 == pytest.approx(5.81)
    assert p.v2 == pytest.approx(8.82)
    assert p.v3 == pytest.approx(5.03)
    assert p.cl1 == pytest.approx(2.58)
    assert p.cl2 == pytest.approx(1.72)
    assert p.cl3 == pytest.approx(0.124)
    assert p.ke0 == pytest.approx(1.09)


def test_remifentanil_ke0_children(remifentanil_patient):
    child = replace(remifentanil_patient, age=16, weight=55, height=165)
    assert compute_parameters(child).ke0 == 0.71
    teenager = replace(child, age=17)
    assert compute_parameters(teenager).ke0 == pytest.approx(1.09 * np.exp(-0.0289 * (17 - 35)))


def test_remifentanil_female_correction(remifentanil_patient):
    def fsig(x, c50, gam): return x**gam/(c50**gam + x**gam)
    male = compute_parameters(replace(remifentanil_patient, age=30))
    female = compute_parameters(replace(remifentanil_patient, age=30, gender=0))
    # SIZE cancels in V2/V1, only KSEX remains
    ksex = 1 + 0.47*fsig(30, 12, 6)*(1 - fsig(30, 45, 6))
    assert (female.v2 / female.v1) / (male.v2 / male.v1) == pytest.approx(ksex)
    assert ksex > 1.4


@pytest.mark.parametrize('drug', ['Propofol', 'Remifentanil'])
@pytest.mark.parametrize('gender', [0, 1])
@pytest.mark.parametrize('age, height, weight', [(1, 75, 10), (5, 110, 20), (12, 150, 40),
                                                 (35, 170, 70), (50, 185, 120), (70, 160, 55), (90, 165, 60)])
def test_parameters_are_positive(drug, gender, age, height, weight):
    covariates = PatientCovariates(drug=drug, concentration=10, age=age, height=height, weight=weight,
                                   gender=gender, target=2)
    p = compute_parameters(covariates)
    for value in (p.v1, p.v2, p.v3, p.cl1, p.cl2, p.cl3, p.k10, p.k12, p.k13, p.k21, p.k31, p.ke0):
        assert value > 0
    assert np.all(np.real(p.state_space().poles()) < 0)


def test_parameters_are_deterministic(propofol_patient):
    assert compute_parameters(propofol_patient) == compute_parameters(propofol_patient)


def test_reference_patient_is_injected(propofol_patient):
    heavier_reference = ModelConstants(reference_weight=80)
    default = compute_parameters(propofol_patient)
    other = compute_parameters(propofol_patient, heavier_reference)
    assert other.ke0 > default.ke0
    assert other.v2 < default.v2


def test_euler_matrix(propofol_patient):
    p = compute_parameters(propofol_patient)
    A, B = p.matrices()
    assert np.allclose(p.euler_matrix(0.5), np.eye(4) + 0.5 * A)
    assert B[0, 0] == pytest.approx(1 / p.v1)
    # the effect site does not drain the central compartment
    assert A[0, 0] == pytest.approx(-(p.k10 + p.k12 + p.k13))


def test_fat_free_mass():
    male = fat_free_mass(70, 170, 35, 1)
    female = fat_free_mass(70, 170, 35, 0)
    assert 50 < male < 60
    assert female < male


@pytest.mark.parametrize('field, value', [('weight', 0), ('height', -170), ('age', 0),
                                          ('concentration', 0), ('interval', 0), ('target', -1),
                                          ('volume', -5), ('gender', 2), ('drug', 'Ketamine'),
                                          ('measurement', 'capillary'), ('weight', float('nan')),
                                          ('loading_dose', -1), ('age', '35')])
def test_invalid_covariates(propofol_patient, field, value):
    with pytest.raises(InvalidCovariateError) as excinfo:
        compute_parameters(replace(propofol_patient, **{field: value}))
    assert excinfo.value.covariate == field
    assert isinstance(excinfo.value, ValueError)
