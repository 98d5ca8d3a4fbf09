# Standard import
import logging
from dataclasses import dataclass

# Third party imports
import numpy as np
import control

# Local imports
from .constants import ModelConstants, DEFAULT_CONSTANTS
from .patient import PatientCovariates, check_covariates, fat_free_mass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompartmentalParameters:
    r"""Parameters of the three-compartment model with effect site of one patient.

    The model is a LTI model with the form:

    .. math::  \dot{x} = Ax + Bu
    .. math::  y = Cx

    The state vector is, in the following order: blood concentration, drug amount in the
    muscles and in the fat both divided by the central volume, effect-site concentration.
    The input is the infusion rate in mass/min
    and the output is the effect-site concentration. The effect site is a zero-volume
    compartment: it does not take any drug from the central compartment.

    Attributes
    ----------
    v1 : float
        Volume of the central compartment (L).
    v2 : float
        Volume of the fast peripheral compartment (L).
    v3 : float
        Volume of the slow peripheral compartment (L).
    cl1 : float
        Elimination clearance (L/min).
    cl2 : float
        Inter-compartmental clearance between central and fast peripheral compartments (L/min).
    cl3 : float
        Inter-compartmental clearance between central and slow peripheral compartments (L/min).
    k10, k12, k13, k21, k31 : float
        Drug amount transfer rates (1/min).
    ke0 : float
        Effect-site equilibration rate (1/min).

    """

    v1: float
    v2: float
    v3: float
    cl1: float
    cl2: float
    cl3: float
    k10: float
    k12: float
    k13: float
    k21: float
    k31: float
    ke0: float

    @property
    def vc(self) -> float:
        """Volume of the central compartment (L)."""
        return self.v1

    @classmethod
    def from_volumes_and_clearances(cls, v1: float, v2: float, v3: float,
                                    cl1: float, cl2: float, cl3: float, ke0: float):
        """Build the parameter set and derive the transfer rates."""
        return cls(v1=v1, v2=v2, v3=v3, cl1=cl1, cl2=cl2, cl3=cl3,
                   k10=cl1 / v1,
                   k12=cl2 / v1,
                   k13=cl3 / v1,
                   k21=cl2 / v2,
                   k31=cl3 / v3,
                   ke0=ke0)

    def matrices(self) -> tuple[np.ndarray, np.ndarray]:
        """Return the A (1/min) and B (1/L) matrices of the continuous model."""
        A = np.array([[-(self.k10 + self.k12 + self.k13), self.k21, self.k31, 0],
                      [self.k12, -self.k21, 0, 0],
                      [self.k13, 0, -self.k31, 0],
                      [self.ke0, 0, 0, -self.ke0]])
        B = np.array([[1/self.v1], [0], [0], [0]])
        return A, B

    def state_space(self) -> control.StateSpace:
        """Continuous state space model, time in minutes, effect-site concentration as output."""
        A, B = self.matrices()
        C = np.array([[0, 0, 0, 1]])
        D = np.array([[0]])
        return control.ss(A, B, C, D)

    def euler_matrix(self, dt: float) -> np.ndarray:
        """Transition matrix of one explicit Euler step of dt minutes."""
        A, _ = self.matrices()
        return np.eye(len(A)) + A * dt


def _fsig(x: float, c50: float, gam: float) -> float:
    return x**gam/(c50**gam + x**gam)


def eleveld_propofol(covariates: PatientCovariates,
                     constants: ModelConstants = DEFAULT_CONSTANTS) -> CompartmentalParameters:
    """Propofol parameters from [Eleveld2018]_.

    References
    ----------
    .. [Eleveld2018] D. J. Eleveld, P. Colin, A. R. Absalom, and M. M. R. F. Struys,
            “Pharmacokinetic–pharmacodynamic model for propofol for broad application in anaesthesia and sedation”
            British Journal of Anaesthesia, vol. 120, no. 5, pp. 942–959, mai 2018, doi:10.1016/j.bja.2018.01.018.

    """
    age = covariates.age
    height = covariates.height
    weight = covariates.weight
    gender = covariates.gender

    # reference patient
    AGE_ref = constants.reference_age
    WGT_ref = constants.reference_weight
    HGT_ref = constants.reference_height
    GDR_ref = constants.reference_gender
    PMA_ref = (40+AGE_ref*52)/52  # not born prematurely

    theta = [None,                    # just to get same index than in the paper
             6.2830780766822,       # V1ref [l]
             25.5013145036879,      # V2ref [l]
             272.8166615043603,     # V3ref [l]
             1.7895836588902,       # Clref [l/min]
             1.7500983738779,       # Q2ref [l/min]
             1.1085424008536,       # Q3ref [l/min]
             0.191307,              # Typical residual error
             42.2760190602615,      # CL maturation E50
             9.0548452392807,       # CL maturation slope [weeks]
             -0.015633,             # Smaller V2 with age
             -0.00285709,           # Lower CL with age
             33.5531248778544,      # Weight for 50 % of maximal V1 [kg]
             -0.0138166,            # Smaller V3 with age
             68.2767978846832,      # Maturation of Q3 [weeks]
             2.1002218877899,       # CLref (female) [l/min]
             1.3042680471360,       # Higher Q2 for maturation of Q3
             1.4189043652084,       # V1 venous samples (children)
             0.6805003109141]       # Higer Q2 venous samples

    def faging(x): return np.exp(x * (age - AGE_ref))
    def fcentral(x): return _fsig(x, theta[12], 1)

    if covariates.opiate:
        def fopiate(x): return np.exp(x*age)
    else:
        def fopiate(x): return 1

    PMA = age + 40/52
    fCLmat = _fsig(PMA * 52, theta[8], theta[9])
    fCLmat_ref = _fsig(PMA_ref*52, theta[8], theta[9])
    fQ3mat = _fsig(PMA * 52, theta[14], 1)
    fQ3mat_ref = _fsig(PMA_ref * 52, theta[14], 1)
    fsal = fat_free_mass(weight, height, age, gender)
    fsal_ref = fat_free_mass(WGT_ref, HGT_ref, AGE_ref, GDR_ref)

    venous = covariates.measurement == 'venous'

    v1 = theta[1] * fcentral(weight)/fcentral(WGT_ref)
    if venous:
        v1 = v1 * (1 + theta[17] * (1 - fcentral(weight)))
    v2 = theta[2] * weight/WGT_ref * faging(theta[10])
    v3 = theta[3] * fsal/fsal_ref * fopiate(theta[13])
    cl1 = (gender*theta[4] + (1-gender)*theta[15]) * (weight/WGT_ref)**0.75 * \
        fCLmat/fCLmat_ref * fopiate(theta[11])
    cl2 = theta[5]*(v2/theta[2])**0.75 * (1 + theta[16] * (1 - fQ3mat))
    if venous:
        cl2 = cl2*theta[18]
    cl3 = theta[6] * (v3/theta[3])**0.75 * fQ3mat/fQ3mat_ref
    if venous:
        ke0 = 1.24*(weight/WGT_ref)**(-0.25)
    else:
        ke0 = 0.146*(weight/WGT_ref)**(-0.25)

    return CompartmentalParameters.from_volumes_and_clearances(
        float(v1), float(v2), float(v3), float(cl1), float(cl2), float(cl3), float(ke0))


def eleveld_remifentanil(covariates: PatientCovariates,
                         constants: ModelConstants = DEFAULT_CONSTANTS) -> CompartmentalParameters:
    """Remifentanil parameters from [Eleveld2017]_.

    Under 16 years old, ke0 is fixed to 0.71 1/min.

    References
    ----------
    .. [Eleveld2017] D. J. Eleveld et al., “An Allometric Model of Remifentanil Pharmacokinetics and Pharmacodynamics,”
            Anesthesiology, vol. 126, no. 6, pp. 1005–1018, juin 2017, doi: 10.1097/ALN.0000000000001634.

    """
    age = covariates.age
    height = covariates.height
    weight = covariates.weight
    gender = covariates.gender

    AGE_ref = constants.reference_age
    WGT_ref = constants.reference_weight

    def faging(x): return np.exp(x * (age - AGE_ref))

    SIZE = (fat_free_mass(weight, height, age, gender)
            / fat_free_mass(WGT_ref, constants.reference_height, AGE_ref, constants.reference_gender))

    theta = [None,      # Juste to have the same index as in the paper
             2.88,
             -0.00554,
             -0.00327,
             -0.0315,
             0.470,
             -0.0260]

    KMAT = _fsig(weight, theta[1], 2)
    KMATref = _fsig(WGT_ref, theta[1], 2)
    if gender:
        KSEX = 1
    else:
        KSEX = 1+theta[5]*_fsig(age, 12, 6)*(1-_fsig(age, 45, 6))

    v1ref = 5.81
    v1 = v1ref * SIZE * faging(theta[2])
    V2ref = 8.82
    v2 = V2ref * SIZE * faging(theta[3]) * KSEX
    V3ref = 5.03
    v3 = V3ref * SIZE * faging(theta[4])*np.exp(theta[6]*(weight - WGT_ref))
    cl1ref = 2.58
    cl2ref = 1.72
    cl3ref = 0.124
    cl1 = cl1ref * SIZE**0.75 * (KMAT/KMATref)*KSEX*faging(theta[3])
    cl2 = cl2ref * (v2/V2ref)**0.75 * faging(theta[2]) * KSEX
    cl3 = cl3ref * (v3/V3ref)**0.75 * faging(theta[2])

    if age <= 16:
        ke0 = 0.71
    else:
        ke0 = 1.09 * faging(-0.0289)

    return CompartmentalParameters.from_volumes_and_clearances(
        float(v1), float(v2), float(v3), float(cl1), float(cl2), float(cl3), float(ke0))


def compute_parameters(covariates: PatientCovariates,
                       constants: ModelConstants = DEFAULT_CONSTANTS) -> CompartmentalParameters:
    """
    Compute the Eleveld compartmental parameters of a patient.

    Parameters
    ----------
    covariates : PatientCovariates
        Patient covariates, checked before any computation.
    constants : ModelConstants, optional
        Reference patient used to normalize the covariate functions. The default is DEFAULT_CONSTANTS.

    Returns
    -------
    CompartmentalParameters
        Volumes, clearances and transfer rates of the patient.

    Raises
    ------
    InvalidCovariateError
        If the covariates fail the precondition check.

    """
    check_covariates(covariates)
    if covariates.drug == 'Propofol':
        parameters = eleveld_propofol(covariates, constants)
    else:
        parameters = eleveld_remifentanil(covariates, constants)
    logger.debug("%s parameters: %s", covariates.drug, parameters)
    return parameters
