"""
Orbit Tracker Package

This package predicts the position of tracked satellites with SGP4 and keeps,
for one or more ground observers, the set of satellites above the horizon.

Modules:
    transforms: Inertial, geodetic and topocentric frame transforms
    geodesy: Closed-form geodetic inversion (Zhu 1994)
    propagation: sgp4 adapter (element sets, propagation, sidereal time)
    constellation: Per-object propagated state store
    observer: Per-observer visibility tracking
    engine: Propagate/update cycle and read accessors

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

__version__ = "1.0.0"
