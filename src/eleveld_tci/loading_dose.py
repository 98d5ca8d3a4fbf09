# Standard import
import logging
from typing import Optional

# Local imports
from .constants import ModelConstants, DEFAULT_CONSTANTS
from .patient import PatientCovariates
from .pk_models import CompartmentalParameters, compute_parameters

logger = logging.getLogger(__name__)


def max_mass_rate(concentration: float, constants: ModelConstants = DEFAULT_CONSTANTS) -> float:
    """
    Maximum drug rate the pump can deliver.

    Parameters
    ----------
    concentration : float
        Drug concentration in the syringe (mass/mL).
    constants : ModelConstants, optional
        Provides the maximum volumetric flow of the pump. The default is DEFAULT_CONSTANTS.

    Returns
    -------
    float
        Maximum infusion rate (mass/min).

    """
    return concentration * constants.max_pump_flow / 60


def compute_loading_dose(covariates: PatientCovariates,
                         parameters: Optional[CompartmentalParameters] = None,
                         constants: ModelConstants = DEFAULT_CONSTANTS) -> tuple[float, float]:
    r"""
    Compute the loading dose and its duration.

    The loading dose is the drug mass that would step the concentration of the central
    compartment from the current effect-site concentration to the target:

    .. math:: dose = \max(C_{target} - C_{e,0}, 0) \cdot V_1

    It is given at the maximum rate of the pump. Values given in the covariates are kept,
    only the missing ones are computed.

    Parameters
    ----------
    covariates : PatientCovariates
        Patient covariates and plan options.
    parameters : CompartmentalParameters, optional
        Parameters of the patient. Computed from the covariates if not given.
    constants : ModelConstants, optional
        Model and pump constants. The default is DEFAULT_CONSTANTS.

    Returns
    -------
    dose : float
        Loading dose (mg for Propofol, µg for Remifentanil).
    duration : float
        Loading duration (s), 0 if and only if the dose is 0.

    """
    if parameters is None:
        parameters = compute_parameters(covariates, constants)

    dose = covariates.loading_dose
    if dose is None:
        dose = max(covariates.target - covariates.current_ce, 0) * parameters.vc

    duration = covariates.loading_duration
    if duration is None or (duration == 0 and dose > 0):
        # as fast as the pump allows
        duration = dose / max_mass_rate(covariates.concentration, constants) * 60

    if dose == 0 and duration != 0:
        logger.debug("No loading dose, loading duration of %.1f s ignored", duration)
        duration = 0.0
    return float(dose), float(duration)
