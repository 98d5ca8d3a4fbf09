import numpy as np
import pytest

from eleveld_tci import compute_loading_dose, compute_plan_metrics, simulate


def test_remifentanil_plan_metrics(remifentanil_patient):
    steps = simulate(remifentanil_patient)
    df = compute_plan_metrics(steps, target=4)
    loading_dose, _ = compute_loading_dose(remifentanil_patient)

    assert len(df) == 1
    assert 0 < df['TT'][0] < 10
    assert df['CE_PEAK'][0] == pytest.approx(max(step.ce for step in steps))
    assert df['OVERSHOOT'][0] == pytest.approx(max(0, df['CE_PEAK'][0] - 4))
    assert df['LOADING_DOSE'][0] == pytest.approx(loading_dose)
    assert df['TOTAL_DOSE'][0] == pytest.approx(steps[-1].cumulative_dose)
    assert df['TOTAL_DOSE'][0] == pytest.approx(loading_dose + 500)
    assert df['LOADING_END'][0] < df['MAINTENANCE_END'][0] < df['END'][0]
    assert df['END'][0] == steps[-1].time


def test_target_never_reached(propofol_patient):
    # the arterial propofol ke0 is slow, the effect site stays below 90 % of the target
    df = compute_plan_metrics(simulate(propofol_patient), target=3)
    assert np.isnan(df['TT'][0])
    assert df['OVERSHOOT'][0] == 0
    assert df['TOTAL_DOSE'][0] == pytest.approx(compute_loading_dose(propofol_patient)[0] + 200)


def test_empty_plan_metrics():
    df = compute_plan_metrics([], target=0)
    assert np.isnan(df['TT'][0])
    assert np.isnan(df['END'][0])
    assert df['TOTAL_DOSE'][0] == 0
