"""
Physics objects: closed-form state functions (motion) and their renderers.
"""
from . import motion
from .diagrams import (
    render_coordinate_system,
    render_coulomb,
    render_collision,
    render_doppler,
    render_electric_field,
    render_electric_potential,
    render_fbd,
    render_graph,
    render_gravitation,
    render_inclined_plane,
    render_lens,
    render_magnetic_force,
    render_refraction,
    render_vector,
)
from .renderers import (
    render_circular,
    render_deceleration,
    render_ideal_gas,
    render_pendulum,
    render_projectile,
    render_radioactive_decay,
    render_shm,
    render_spring_mass,
    render_wave,
)

__all__ = [
    "motion",
    "render_circular",
    "render_collision",
    "render_coordinate_system",
    "render_coulomb",
    "render_deceleration",
    "render_doppler",
    "render_electric_field",
    "render_electric_potential",
    "render_fbd",
    "render_graph",
    "render_gravitation",
    "render_ideal_gas",
    "render_inclined_plane",
    "render_lens",
    "render_magnetic_force",
    "render_pendulum",
    "render_projectile",
    "render_radioactive_decay",
    "render_refraction",
    "render_shm",
    "render_spring_mass",
    "render_vector",
    "render_wave",
]
