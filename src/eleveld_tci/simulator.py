# Standard import
import logging
from dataclasses import dataclass, astuple
from enum import Enum
from typing import Optional

# Third party imports
import numpy as np
import pandas as pd

# Local imports
from .constants import ModelConstants, DEFAULT_CONSTANTS, DRUG_UNITS
from .exceptions import ConvergenceError
from .loading_dose import compute_loading_dose, max_mass_rate
from .patient import PatientCovariates
from .pk_models import compute_parameters

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    """Phase of the dosing plan."""

    LOADING = 'loading'
    MAINTENANCE = 'maintenance'
    DECAY = 'decay'


@dataclass(frozen=True)
class DosingStep:
    """One tick of the dosing plan.

    Attributes
    ----------
    time : int
        Elapsed time at the end of the tick, rounded to the second (s).
    rate : float
        Infusion rate during the tick (µg/kg/min).
    ce : float
        Predicted effect-site concentration at the end of the tick.
    cumulative_dose : float
        Drug delivered since the start of the plan (mg for Propofol, µg for Remifentanil).
    phase : Phase
        Phase of the plan during the tick.

    """

    time: int
    rate: float
    ce: float
    cumulative_dose: float
    phase: Phase


@dataclass
class SimulationState:
    """Mutable state of one simulation run."""

    phase: Phase
    elapsed: float = 0.0
    c1: float = 0.0
    c2: float = 0.0
    c3: float = 0.0
    ce: float = 0.0
    cumulative_dose: float = 0.0
    remaining_dose: float = 0.0
    decay_start: Optional[float] = None


def _round_seconds(time: float) -> int:
    return int(np.floor(time + 0.5))


class InfusionSimulator:
    r"""Compute the dosing plan of one patient with a fixed step explicit Euler integration.

    The model is the three-compartment model with effect site of :class:`CompartmentalParameters`:

    .. math:: \dot{C_1} = u/V_1 - (k_{10} + k_{12} + k_{13}) C_1 + k_{21} C_2 + k_{31} C_3
    .. math:: \dot{C_2} = k_{12} C_1 - k_{21} C_2
    .. math:: \dot{C_3} = k_{13} C_1 - k_{31} C_3
    .. math:: \dot{C_e} = k_{e0} (C_1 - C_e)

    The plan goes through three phases:

    - loading: the loading dose is delivered at a constant rate, at most the pump capacity;
    - maintenance: the rate holding the effect-site concentration at the target,
      :math:`u = C_{target} CL_1 + (C_{target} - C_e) V_1 k_{e0}`, is delivered until the
      maintenance syringe volume is used;
    - decay: no infusion, until the effect-site concentration falls below the decay threshold.

    Since all transfer rates are positive, the state converges to zero once the infusion is
    stopped as long as the Euler step is stable, which is checked at initialization.

    Parameters
    ----------
    covariates : PatientCovariates
        Patient covariates and plan options.
    constants : ModelConstants, optional
        Model and pump constants. The default is DEFAULT_CONSTANTS.

    Attributes
    ----------
    parameters : CompartmentalParameters
        Parameters of the patient.
    continuous_sys : control.StateSpace
        Continuous state space model (time in minutes).
    loading_dose : float
        Loading dose (mass).
    loading_duration : float
        Loading duration (s), rounded up to the second and extended if the loading rate
        exceeded the pump capacity.
    bolus_rate : float
        Loading infusion rate (mass/min).
    max_rate : float
        Pump capacity (mass/min).
    maintenance_dose : float
        Drug available for the maintenance phase (mass).
    steps : list
        Dosing steps of the last run.
    dataframe : pd.DataFrame
        Dosing steps of the last run as a dataframe.

    """

    def __init__(self, covariates: PatientCovariates, constants: ModelConstants = DEFAULT_CONSTANTS):
        self.covariates = covariates
        self.constants = constants
        self.parameters = compute_parameters(covariates, constants)
        self.interval = float(covariates.interval)
        self.max_rate = max_mass_rate(covariates.concentration, constants)
        # mass/min -> µg/kg/min
        self.rate_factor = DRUG_UNITS[covariates.drug][2] / covariates.weight
        self.concentration_unit = DRUG_UNITS[covariates.drug][1]

        self.loading_dose, self.loading_duration = compute_loading_dose(covariates, self.parameters, constants)
        self.bolus_rate = 0.0
        if self.loading_dose > 0:
            self.bolus_rate = self.loading_dose / self.loading_duration * 60
            if self.bolus_rate > self.max_rate:
                if self.bolus_rate > self.max_rate * (1 + 1e-9):
                    logger.warning("Loading rate of %.3g/min exceeds the pump capacity of %.3g/min, "
                                   "loading extended", self.bolus_rate, self.max_rate)
                self.bolus_rate = self.max_rate
                self.loading_duration = self.loading_dose / self.bolus_rate * 60
            # whole seconds, so that every loading tick ends on a distinct second
            self.loading_duration = max(float(np.ceil(np.round(self.loading_duration, 6))), 1.0)
            self.bolus_rate = self.loading_dose / self.loading_duration * 60

        self.maintenance_dose = covariates.maintenance_dose
        if covariates.target == 0 and self.maintenance_dose > 0:
            logger.warning("Target is 0, the maintenance volume of %g mL is not used", covariates.volume)
            self.maintenance_dose = 0.0

        self.continuous_sys = self.parameters.state_space()
        self._check_stability()

        self.steps = []
        self.dataframe = steps_to_dataframe(self.steps)

    def _check_stability(self):
        """Check that the plan is guaranteed to decay once the infusion is stopped."""
        if np.any(np.real(self.continuous_sys.poles()) >= 0):
            raise ConvergenceError("The compartment model is not asymptotically stable, "
                                   f"check the parameters: {self.parameters}")
        euler = self.parameters.euler_matrix(self.interval / 60)
        radius = np.max(np.abs(np.linalg.eigvals(euler)))
        if radius >= 1 or np.any(euler < 0):
            raise ConvergenceError(f"An explicit Euler step of {self.interval:g} s is unstable for this patient "
                                   f"(spectral radius {radius:.3f}), use a smaller interval")

    def run(self) -> list:
        """
        Simulate the whole dosing plan.

        Returns
        -------
        list
            Ordered list of DosingStep, one per tick.

        Raises
        ------
        ConvergenceError
            If the effect-site concentration is still above the decay threshold after
            the maximum simulated time spent in the decay phase.

        """
        current_ce = self.covariates.current_ce
        if self.loading_duration > 0:
            phase = Phase.LOADING
        else:
            phase = self._phase_after_loading(self.maintenance_dose)
        state = SimulationState(phase=phase, c1=current_ce, ce=current_ce,
                                remaining_dose=self.maintenance_dose)
        if phase is Phase.DECAY:
            state.decay_start = 0.0

        steps = []
        while not self._finished(state):
            if (state.decay_start is not None
                    and state.elapsed - state.decay_start >= self.constants.max_simulated_time):
                raise ConvergenceError(
                    f"Effect-site concentration is still {state.ce:.3g} {self.concentration_unit} "
                    f"> {self.constants.decay_threshold:g} after {state.elapsed - state.decay_start:.0f} s of decay",
                    phase=state.phase.value, elapsed=state.elapsed)
            steps.append(self._tick(state))

        self.steps = steps
        self.dataframe = steps_to_dataframe(steps)
        logger.info("%s plan: %d steps, %.0f s, total dose %.4g %s", self.covariates.drug, len(steps),
                    state.elapsed, state.cumulative_dose, DRUG_UNITS[self.covariates.drug][0])
        return steps

    def _finished(self, state: SimulationState) -> bool:
        # Ce must also have stopped rising, right after a short loading it is still ~0
        return (state.phase is not Phase.LOADING and state.remaining_dose <= 0
                and state.ce <= self.constants.decay_threshold and state.c1 <= state.ce)

    @staticmethod
    def _phase_after_loading(remaining_dose: float) -> Phase:
        return Phase.MAINTENANCE if remaining_dose > 0 else Phase.DECAY

    def _enter(self, state: SimulationState, phase: Phase):
        if phase is not state.phase:
            logger.debug("t = %.1f s: %s -> %s (Ce = %.4g)", state.elapsed, state.phase.value, phase.value, state.ce)
            state.phase = phase
            if phase is Phase.DECAY:
                state.decay_start = state.elapsed

    def _tick(self, state: SimulationState) -> DosingStep:
        """Advance the state of one tick and return the corresponding step."""
        if state.phase is Phase.LOADING:
            remaining_time = self.loading_duration - state.elapsed
            dt = min(self.interval, remaining_time)
            self._euler_step(state, self.bolus_rate, dt)
            # land exactly on the end of the loading phase
            state.elapsed = self.loading_duration if dt == remaining_time else state.elapsed + dt
            step = self._record(state, self.bolus_rate)
            if state.elapsed >= self.loading_duration:
                self._enter(state, self._phase_after_loading(state.remaining_dose))
            return step

        rate = 0.0
        if state.phase is Phase.MAINTENANCE:
            rate = self._maintenance_rate(state)
            if state.remaining_dose <= 0:
                self._enter(state, Phase.DECAY)
        self._euler_step(state, rate, self.interval)
        state.elapsed += self.interval
        return self._record(state, rate)

    def _maintenance_rate(self, state: SimulationState) -> float:
        """Rate holding the effect site at the target, within pump capacity and remaining drug (mass/min)."""
        p = self.parameters
        target = self.covariates.target
        dt = self.interval / 60
        rate = target * p.cl1 + (target - state.ce) * p.vc * p.ke0
        rate = min(max(rate, 0.0), self.max_rate)
        if rate * dt >= state.remaining_dose:
            rate = state.remaining_dose / dt
            state.remaining_dose = 0.0
        else:
            state.remaining_dose -= rate * dt
        return rate

    def _euler_step(self, state: SimulationState, rate: float, dt: float):
        """Integrate the model over dt seconds with a constant rate (mass/min)."""
        p = self.parameters
        h = dt / 60
        dc1 = rate / p.v1 - (p.k10 + p.k12 + p.k13) * state.c1 + p.k21 * state.c2 + p.k31 * state.c3
        dc2 = p.k12 * state.c1 - p.k21 * state.c2
        dc3 = p.k13 * state.c1 - p.k31 * state.c3
        dce = p.ke0 * (state.c1 - state.ce)
        state.c1 += dc1 * h
        state.c2 += dc2 * h
        state.c3 += dc3 * h
        state.ce += dce * h
        state.cumulative_dose += rate * h

    def _record(self, state: SimulationState, rate: float) -> DosingStep:
        return DosingStep(time=_round_seconds(state.elapsed),
                          rate=rate * self.rate_factor,
                          ce=state.ce,
                          cumulative_dose=state.cumulative_dose,
                          phase=state.phase)


def steps_to_dataframe(steps: list) -> pd.DataFrame:
    """Convert a list of DosingStep to a dataframe with columns Time, rate, ce, cumulative_dose, phase."""
    dataframe = pd.DataFrame([astuple(step) for step in steps],
                             columns=['Time', 'rate', 'ce', 'cumulative_dose', 'phase'])
    dataframe['phase'] = dataframe['phase'].map(lambda phase: Phase(phase).value)
    return dataframe


def simulate(covariates: PatientCovariates, constants: ModelConstants = DEFAULT_CONSTANTS) -> list:
    """
    Compute the dosing plan of a patient.

    Parameters
    ----------
    covariates : PatientCovariates
        Patient covariates and plan options.
    constants : ModelConstants, optional
        Model and pump constants. The default is DEFAULT_CONSTANTS.

    Returns
    -------
    list
        Ordered list of DosingStep.

    """
    return InfusionSimulator(covariates, constants).run()
