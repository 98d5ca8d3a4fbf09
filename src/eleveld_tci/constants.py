"""Model constants shared by the parameter model, the loading dose and the simulator."""
# Standard import
from dataclasses import dataclass

SUPPORTED_DRUGS = ('Propofol', 'Remifentanil')


@dataclass(frozen=True)
class ModelConstants:
    r"""Constants of the Eleveld models and of the infusion device.

    Override a field with :func:`dataclasses.replace` to test against reference datasets.

    Parameters
    ----------
    reference_age : float, optional
        Age of the reference patient (yr). The default is 35.
    reference_weight : float, optional
        Weight of the reference patient (kg). The default is 70.
    reference_height : float, optional
        Height of the reference patient (cm). The default is 170.
    reference_gender : int, optional
        Gender of the reference patient (1: male, 0: female). The default is 1.
    max_pump_flow : float, optional
        Maximum volumetric flow of the pump (mL/h). The default is 1000.
    decay_threshold : float, optional
        Effect-site concentration below which the decay phase ends
        (µg/mL for Propofol, ng/mL for Remifentanil). The default is 0.01.
    max_simulated_time : float, optional
        Time spent in the decay phase after which a plan that has not decayed is reported
        as non-convergent (s). The default is 24 h.

    """

    reference_age: float = 35
    reference_weight: float = 70
    reference_height: float = 170
    reference_gender: int = 1
    max_pump_flow: float = 1000
    decay_threshold: float = 0.01
    max_simulated_time: float = 24 * 3600


DEFAULT_CONSTANTS = ModelConstants()

# mass unit, concentration unit, factor from mass to µg
DRUG_UNITS = {
    'Propofol': ('mg', 'µg/mL', 1000),
    'Remifentanil': ('µg', 'ng/mL', 1),
}
