"""
Simulation package for smart-space Q-learning.
Provides a simulated lab to train and evaluate goal policies against.
"""

from Simulation.lab_environment import SimulatedLab, ACTUATOR_ATTRIBUTES

# Package metadata
__version__ = '1.0.0'
__all__ = [
    'SimulatedLab',
    'ACTUATOR_ATTRIBUTES'
]
