"""Patient covariates and the precondition check run before any model computation."""
# Standard import
from dataclasses import dataclass
from typing import Optional

# Third party imports
import numpy as np

# Local imports
from .constants import SUPPORTED_DRUGS
from .exceptions import InvalidCovariateError


@dataclass(frozen=True)
class PatientCovariates:
    r"""Patient characteristics and infusion options of one dosing plan.

    Units depend on the drug: masses are in mg for Propofol and µg for Remifentanil,
    concentrations in µg/mL for Propofol and ng/mL for Remifentanil.

    Parameters
    ----------
    drug : str
        Can be "Propofol" or "Remifentanil".
    concentration : float
        Drug concentration in the syringe (mg/mL for Propofol, µg/mL for Remifentanil).
    age : float
        Age of the patient (yr).
    height : float
        Height of the patient (cm).
    weight : float
        Weight of the patient (kg).
    gender : int
        1 for male, 0 for female.
    target : float
        Targeted effect-site concentration.
    current_ce : float, optional
        Effect-site concentration at the start of the plan. The default is 0.
    interval : float, optional
        Integration and output interval (s). The default is 10.
    volume : float, optional
        Syringe volume available for the maintenance phase (mL). The default is 0.
    loading_dose : float, optional
        Loading dose (mass). Computed from the target if not given.
    loading_duration : float, optional
        Duration of the loading infusion (s). Computed from the pump capacity if not given.
    opiate : bool, optional
        For the Propofol model, co-administration of opiates. The default is True.
    measurement : str, optional
        For the Propofol model, blood sampling site used by the model,
        either 'arterial' or 'venous'. The default is 'arterial'.

    """

    drug: str
    concentration: float
    age: float
    height: float
    weight: float
    gender: int
    target: float
    current_ce: float = 0
    interval: float = 10
    volume: float = 0
    loading_dose: Optional[float] = None
    loading_duration: Optional[float] = None
    opiate: bool = True
    measurement: str = 'arterial'

    @property
    def maintenance_dose(self) -> float:
        """Drug mass available for the maintenance phase."""
        return self.volume * self.concentration


def _is_finite_number(value) -> bool:
    try:
        return value is not None and bool(np.isfinite(value))
    except TypeError:
        return False


def _check_positive(name: str, value) -> None:
    if not _is_finite_number(value) or value <= 0:
        raise InvalidCovariateError(name, value, "must be a finite number > 0")


def _check_non_negative(name: str, value) -> None:
    if not _is_finite_number(value) or value < 0:
        raise InvalidCovariateError(name, value, "must be a finite number >= 0")


def check_covariates(covariates: PatientCovariates) -> None:
    """
    Reject covariates for which the models would give meaningless results.

    Parameters
    ----------
    covariates : PatientCovariates
        Covariates to check.

    Raises
    ------
    InvalidCovariateError
        On the first invalid field found.

    """
    if covariates.drug not in SUPPORTED_DRUGS:
        raise InvalidCovariateError('drug', covariates.drug, f"must be one of {SUPPORTED_DRUGS}")
    if covariates.gender not in (0, 1):
        raise InvalidCovariateError('gender', covariates.gender, "must be 1 (male) or 0 (female)")
    if covariates.measurement not in ('arterial', 'venous'):
        raise InvalidCovariateError('measurement', covariates.measurement, "must be 'arterial' or 'venous'")
    for name in ('age', 'height', 'weight', 'concentration', 'interval'):
        _check_positive(name, getattr(covariates, name))
    for name in ('target', 'current_ce', 'volume'):
        _check_non_negative(name, getattr(covariates, name))
    for name in ('loading_dose', 'loading_duration'):
        if getattr(covariates, name) is not None:
            _check_non_negative(name, getattr(covariates, name))


def bmi(weight: float, height: float) -> float:
    """Body mass index (kg/m²), height in cm."""
    return weight / (height / 100)**2


def fat_free_mass(weight: float, height: float, age: float, gender: int) -> float:
    r"""Fat-free mass from Al-Sallami et al., as used by the Eleveld models.

    .. math:: FFM = \left(a + \frac{1 - a}{1 + (age/b)^{c}}\right) \frac{9270 \, W}{d + e \, BMI}

    Parameters
    ----------
    weight : float
        Weight (kg).
    height : float
        Height (cm).
    age : float
        Age (yr).
    gender : int
        1 for male, 0 for female.

    Returns
    -------
    float
        Fat-free mass (kg).

    References
    ----------
    .. [AlSallami2015] H. S. Al-Sallami et al., “Prediction of Fat-Free Mass in Children,”
            Clin Pharmacokinet, vol. 54, no. 11, pp. 1169–1178, Nov. 2015, doi: 10.1007/s40262-015-0277-z.

    """
    body_mass_index = bmi(weight, height)
    if gender:
        return (0.88 + (1 - 0.88)/(1 + (age/13.4)**(-12.7))) * (9270*weight)/(6680 + 216*body_mass_index)
    return (1.11 + (1 - 1.11)/(1 + (age/7.1)**(-1.1))) * (9270*weight)/(8780 + 244*body_mass_index)
