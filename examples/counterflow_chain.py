import numpy as np
import cantera as ct

from pyoned import (
    BandedJacobian, DomainChain, FlowConfig, Inlet1D, StagnationFlow, newton_step
)
from pyoned.utils.visualization import FlowVisualizer

# Gas and flow configuration
gas = ct.Solution('h2o2.yaml')
config = FlowConfig(
    pressure=ct.one_atm,  # Pa
    n_points=21,
    z_min=0.0,  # m
    z_max=0.02  # m
)

# Assemble fuel | flow | oxidizer
fuel = Inlet1D('fuel')
flow = StagnationFlow(gas, config=config, name='flow')
oxidizer = Inlet1D('oxidizer')
chain = DomainChain([fuel, flow, oxidizer])

chain.set_mdot('fuel', 0.1)  # kg/m^2/s
chain.set_temperature('fuel', 300.0)  # K
chain.set_mole_fractions('fuel', 'H2:1.0, AR:1.0')
chain.set_mdot('oxidizer', 0.3)
chain.set_temperature('oxidizer', 300.0)
chain.set_mole_fractions('oxidizer', 'O2:0.21, AR:0.79')

chain.init()
x = chain.initial_solution()
print(f"Unknowns: {chain.size}, bandwidth: {chain.layout.bandwidth()}")
print(f"Initial residual norm: {np.linalg.norm(chain.residual(x)):.4e}")

# Pseudo-time continuation
jacobian = BandedJacobian(chain)
vis = FlowVisualizer(chain, flow.index)
dt = 1e-5  # s
t = 0.0
vis.save_state(t, x)
for step in range(20):
    rdt = chain.init_time_integration(dt, x)
    x = newton_step(chain, jacobian, x, rdt)
    chain.finalize(x)
    t += dt
    vis.save_state(t, x)
    print(f"t = {t:.6f}, residual norm = {np.linalg.norm(chain.residual(x)):.4e}")

chain.show_solution(x)

# Plot results
import matplotlib.pyplot as plt

vis.plot_current_state(x, species_names=['H2', 'O2', 'H2O'])
plt.show()
