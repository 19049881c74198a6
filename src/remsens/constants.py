"""Physical constants (SI, CODATA 2018)."""

from __future__ import annotations

import math

# Speed of light in vacuum [m/s]
C = 299_792_458.0

# Free space
MU_0 = 1.25663706212e-6  # vacuum permeability [N A^-2]
EPSILON_0 = 8.8541878128e-12  # vacuum permittivity [F/m]
Z_0 = math.sqrt(MU_0 / EPSILON_0)  # impedance of free space [ohm]

PI = math.pi

# Boltzmann constant [J/K] and Stefan-Boltzmann constant [W m^-2 K^-4]
K_B = 1.380649e-23
SIGMA = 5.670374419e-8

# Planck constant [J s]
H = 6.62607015e-34
