# Third party imports
import numpy as np
import pandas as pd

# Local imports
from .simulator import Phase, steps_to_dataframe


def compute_plan_metrics(steps: list, target: float, tolerance: float = 0.1) -> pd.DataFrame:
    """Compute summary metrics of a dosing plan.

    Parameters
    ----------
    steps : list
        Dosing steps, as returned by :func:`simulate`.
    target : float
        Targeted effect-site concentration.
    tolerance : float, optional
        Relative band around the target considered as reached. The default is 0.1.

    Returns
    -------
    df : pd.DataFrame
        One row dataframe containing:
        TT : float
            Time-to-target (in minute), first time the effect-site concentration is within
            the tolerance band of the target. NaN if never reached.
        CE_PEAK : float
            Highest effect-site concentration of the plan.
        OVERSHOOT : float
            Part of the peak above the target.
        LOADING_END : float
            Time at the end of the loading phase (s), 0 without loading phase.
        MAINTENANCE_END : float
            Time at the end of the maintenance phase (s), NaN without maintenance.
        END : float
            Time at the end of the plan (s).
        LOADING_DOSE : float
            Drug delivered during the loading phase (mass).
        TOTAL_DOSE : float
            Drug delivered during the whole plan (mass).

    """
    df = steps_to_dataframe(steps)
    if df.empty:
        return pd.DataFrame([{'TT': np.nan,
                              'CE_PEAK': 0.0,
                              'OVERSHOOT': 0.0,
                              'LOADING_END': 0.0,
                              'MAINTENANCE_END': np.nan,
                              'END': np.nan,
                              'LOADING_DOSE': 0.0,
                              'TOTAL_DOSE': 0.0}])

    TT = np.nan
    if target > 0:
        reached = np.abs(df['ce'] - target) <= tolerance * target
        if reached.any():
            TT = df.loc[reached.idxmax(), 'Time']/60

    loading = df[df['phase'] == Phase.LOADING.value]
    maintenance = df[df['phase'] == Phase.MAINTENANCE.value]
    # the tick using the last of the syringe is tagged decay
    decay = df[df['phase'] == Phase.DECAY.value]

    LOADING_END = loading['Time'].iloc[-1] if not loading.empty else 0.0
    LOADING_DOSE = loading['cumulative_dose'].iloc[-1] if not loading.empty else 0.0
    if not maintenance.empty:
        MAINTENANCE_END = decay['Time'].iloc[0] if not decay.empty else maintenance['Time'].iloc[-1]
    else:
        MAINTENANCE_END = np.nan

    CE_PEAK = df['ce'].max()
    return pd.DataFrame([{'TT': TT,
                          'CE_PEAK': CE_PEAK,
                          'OVERSHOOT': max(0.0, CE_PEAK - target),
                          'LOADING_END': float(LOADING_END),
                          'MAINTENANCE_END': float(MAINTENANCE_END),
                          'END': float(df['Time'].iloc[-1]),
                          'LOADING_DOSE': float(LOADING_DOSE),
                          'TOTAL_DOSE': float(df['cumulative_dose'].iloc[-1])}])
