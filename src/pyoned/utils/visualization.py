"""
Visualization tools for PyOneD flow solutions
"""
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from typing import Optional, List, Tuple

from ..flow.stagnation import c_offset_T, c_offset_U, c_offset_Y


class FlowVisualizer:
    """
    Profiles of one flow domain of a chain, read from global solution vectors
    """
    def __init__(self, chain, flow_index: int):
        self.chain = chain
        self.flow = chain.domains[flow_index]
        self.fig = None
        self._animation = None
        self.history = {
            't': [],
            'T': [],
            'Y': [],
            'm': []
        }

    def profiles(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Temperature, mass fractions (K x N) and mass flux of the flow"""
        flow = self.flow
        X = self.chain.layout.local(x, flow.index).reshape(flow.n_points, flow.n_components)
        T = X[:, c_offset_T].copy()
        Y = X[:, c_offset_Y:].T.copy()
        m = np.zeros(flow.n_points)
        for j in range(flow.n_points):
            flow.gas.TPY = T[j], flow.pressure, X[j, c_offset_Y:]
            m[j] = flow.gas.density * X[j, c_offset_U]
        return T, Y, m

    def save_state(self, t: float, x: np.ndarray):
        """Save current state for animation"""
        T, Y, m = self.profiles(x)
        self.history['t'].append(t)
        self.history['T'].append(T)
        self.history['Y'].append(Y)
        self.history['m'].append(m)

    def _species(self, Y: np.ndarray, species_names: Optional[List[str]]):
        if species_names is None:
            # Major species (Y > 0.01 anywhere)
            species_indices = list(np.where(np.max(Y, axis=1) > 0.01)[0])
            species_names = [self.flow.species_names[k] for k in species_indices]
        else:
            species_indices = [self.flow.species_index(name) for name in species_names]
        return species_indices, species_names

    def plot_current_state(self, x: np.ndarray, species_names: Optional[List[str]] = None):
        """
        Plot the flow profiles of solution x

        Args:
            x: Global solution vector of the chain
            species_names: List of species to plot (if None, plots major species)
        """
        z = self.flow.grid.x * 1000  # mm
        T, Y, m = self.profiles(x)

        if self.fig is None:
            self.fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(10, 12))
            self.fig.suptitle('Flow Structure')
        else:
            ax1, ax2, ax3 = self.fig.axes
            for ax in (ax1, ax2, ax3):
                ax.clear()

        ax1.plot(z, T, 'r-', label='Temperature')
        ax1.set_ylabel('Temperature [K]')
        ax1.legend()
        ax1.grid(True)

        species_indices, species_names = self._species(Y, species_names)
        for k, name in zip(species_indices, species_names):
            ax2.plot(z, Y[k], label=name)
        ax2.set_ylabel('Mass Fraction')
        ax2.legend()
        ax2.grid(True)

        ax3.plot(z, m, 'b-', label='Mass Flux')
        ax3.set_xlabel('Position [mm]')
        ax3.set_ylabel('Mass Flux [kg/m²/s]')
        ax3.legend()
        ax3.grid(True)

        self.fig.tight_layout()
        self.fig.canvas.draw_idle()
        return self.fig

    def create_animation(self, species_names: Optional[List[str]] = None,
                         interval: int = 50) -> FuncAnimation:
        """
        Create animation of the saved states

        Args:
            species_names: List of species to animate
            interval: Time between frames in milliseconds

        Returns:
            matplotlib.animation.FuncAnimation object
        """
        if not self.history['t']:
            raise RuntimeError("No saved states to animate")

        fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(10, 12))
        z = self.flow.grid.x * 1000  # mm
        species_indices, species_names = self._species(self.history['Y'][-1], species_names)

        T_min = min(np.min(T) for T in self.history['T'])
        T_max = max(np.max(T) for T in self.history['T'])
        m_min = min(np.min(m) for m in self.history['m'])
        m_max = max(np.max(m) for m in self.history['m'])

        def animate(frame):
            for ax in (ax1, ax2, ax3):
                ax.clear()
                ax.grid(True)

            ax1.plot(z, self.history['T'][frame], 'r-')
            ax1.set_ylabel('Temperature [K]')
            ax1.set_ylim(T_min, T_max * 1.1)

            for k, name in zip(species_indices, species_names):
                ax2.plot(z, self.history['Y'][frame][k], label=name)
            ax2.set_ylabel('Mass Fraction')
            if species_names:
                ax2.legend()

            ax3.plot(z, self.history['m'][frame], 'b-')
            ax3.set_xlabel('Position [mm]')
            ax3.set_ylabel('Mass Flux [kg/m²/s]')
            if m_max > m_min:
                ax3.set_ylim(m_min - 0.1*abs(m_min), m_max + 0.1*abs(m_max))

            fig.suptitle(f'Flow Evolution (t = {self.history["t"][frame]:.3g} s)')

        self._animation = FuncAnimation(
            fig, animate, frames=len(self.history['t']),
            interval=interval, blit=False
        )

        return self._animation

    def save_animation(self, filename: str, fps: int = 20):
        """
        Save animation to file

        Args:
            filename: Output filename (.mp4 or .gif)
            fps: Frames per second
        """
        if self._animation is None:
            self.create_animation()

        self._animation.save(filename, fps=fps)
