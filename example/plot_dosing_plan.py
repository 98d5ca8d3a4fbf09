"""Compute and plot the dosing plan of a propofol and a remifentanil infusion."""
# %% Import
import logging

import matplotlib.pyplot as plt

from eleveld_tci import InfusionSimulator, PatientCovariates, compute_plan_metrics

logging.basicConfig(level=logging.INFO)

# %% Patient
age, height, weight, gender = 45, 175, 80, 1

propofol = PatientCovariates(drug='Propofol', concentration=10, age=age, height=height, weight=weight,
                             gender=gender, target=3.5, volume=30)
remifentanil = PatientCovariates(drug='Remifentanil', concentration=50, age=age, height=height, weight=weight,
                                 gender=gender, target=4, volume=20)

# %% Simulation
propo_sim = InfusionSimulator(propofol)
propo_sim.run()
remi_sim = InfusionSimulator(remifentanil)
remi_sim.run()

print(compute_plan_metrics(propo_sim.steps, propofol.target))
print(compute_plan_metrics(remi_sim.steps, remifentanil.target))

# %% plot
if __name__ == '__main__':
    fig, ax = plt.subplots(2, 2, sharex='col')
    for col, (name, sim) in enumerate([('Propofol', propo_sim), ('Remifentanil', remi_sim)]):
        Time = sim.dataframe['Time']/60
        ax[0][col].step(Time, sim.dataframe['rate'], where='post')
        ax[0][col].set_title(name)
        ax[1][col].plot(Time, sim.dataframe['ce'])
        ax[1][col].axhline(sim.covariates.target, linestyle='--', color='k')
        ax[1][col].set_xlabel("Time (min)")
        for i in range(2):
            ax[i][col].grid()
    ax[0][0].set_ylabel("Rate (µg/kg/min)")
    ax[1][0].set_ylabel("Effect-site concentration")
    plt.show()
