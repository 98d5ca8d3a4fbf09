"""Shared fixtures: the reference patients used across the tests."""
import pytest

from eleveld_tci import PatientCovariates


@pytest.fixture
def propofol_patient():
    """70 kg, 35 yr, 170 cm male, 3 µg/mL target, 20 mL of 10 mg/mL propofol for maintenance."""
    return PatientCovariates(drug='Propofol', concentration=10, age=35, height=170, weight=70, gender=1,
                             target=3, volume=20, interval=10)


@pytest.fixture
def remifentanil_patient():
    """Same patient, 4 ng/mL target, 10 mL of 50 µg/mL remifentanil for maintenance."""
    return PatientCovariates(drug='Remifentanil', concentration=50, age=35, height=170, weight=70, gender=1,
                             target=4, volume=10, interval=10)
