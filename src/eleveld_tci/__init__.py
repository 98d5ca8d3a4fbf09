import logging

from .constants import ModelConstants, DEFAULT_CONSTANTS, SUPPORTED_DRUGS, DRUG_UNITS
from .exceptions import EleveldError, InvalidCovariateError, ConvergenceError
from .patient import PatientCovariates, check_covariates, bmi, fat_free_mass
from .pk_models import CompartmentalParameters, compute_parameters, eleveld_propofol, eleveld_remifentanil
from .loading_dose import compute_loading_dose, max_mass_rate
from .simulator import Phase, DosingStep, InfusionSimulator, simulate, steps_to_dataframe
from .metrics import compute_plan_metrics

logging.getLogger(__name__).addHandler(logging.NullHandler())
