"""
Closed-form physics state as a function of elapsed time. No integration: every value is a
direct formula of the parameters and t. Angles in degrees where scenes give degrees.
"""
import math
from dataclasses import dataclass

WAVE_STEP = 0.15
COULOMB_K = 9e9
SPEED_OF_SOUND = 340.0


@dataclass(frozen=True)
class ProjectileState:
    x: float
    y: float
    vx: float
    vy: float


@dataclass(frozen=True)
class CircularState:
    x: float
    y: float
    theta: float
    v_mag: float


@dataclass(frozen=True)
class SHMState:
    x: float
    v: float
    a: float


@dataclass(frozen=True)
class PendulumState:
    x: float
    y: float
    theta: float


@dataclass(frozen=True)
class SpringState:
    x: float
    v: float
    force: float
    omega: float


@dataclass(frozen=True)
class WaveState:
    points: tuple[tuple[float, float], ...]


@dataclass(frozen=True)
class DecelerationState:
    x: float
    v: float
    stopped: bool


@dataclass(frozen=True)
class DecayState:
    nuclei: float
    activity: float

    def fraction_of(self, n0: float) -> float:
        return self.nuclei / n0 if n0 else 0.0


@dataclass(frozen=True)
class GasState:
    pressure: float
    volume: float


@dataclass(frozen=True)
class RefractionState:
    incident: float
    refracted: float | None
    total_internal: bool


@dataclass(frozen=True)
class LensState:
    image_distance: float
    magnification: float
    is_real: bool


@dataclass(frozen=True)
class CoulombState:
    force: float


@dataclass(frozen=True)
class DopplerState:
    frequency: float
    wavelength: float


@dataclass(frozen=True)
class PotentialState:
    potential: float


@dataclass(frozen=True)
class MagneticState:
    force: float


def projectile(x0: float, y0: float, v0: float, angle: float, t: float, g: float = 10.0) -> ProjectileState:
    """x = x0 + v0·cosθ·t, y = y0 + v0·sinθ·t − ½gt² (vx, vy are launch components)."""
    rad = math.radians(angle)
    vx = v0 * math.cos(rad)
    vy = v0 * math.sin(rad)
    return ProjectileState(
        x=x0 + vx * t,
        y=y0 + vy * t - 0.5 * g * t * t,
        vx=vx,
        vy=vy,
    )


def circular(cx: float, cy: float, radius: float, omega: float, t: float, phase: float = 0.0) -> CircularState:
    theta = omega * t + phase
    return CircularState(
        x=cx + radius * math.cos(theta),
        y=cy + radius * math.sin(theta),
        theta=theta,
        v_mag=radius * omega,
    )


def shm(x0: float, amplitude: float, omega: float, t: float, phase: float = 0.0) -> SHMState:
    arg = omega * t + phase
    return SHMState(
        x=x0 + amplitude * math.cos(arg),
        v=-amplitude * omega * math.sin(arg),
        a=-amplitude * omega * omega * math.cos(arg),
    )


def pendulum(
    x0: float, y0: float, length: float, max_angle: float, omega: float, t: float, phase: float = 0.0
) -> PendulumState:
    """θ = maxAngle·sin(ωt + phase) (radians), bob at (x0 + L·sinθ, y0 − L·cosθ)."""
    theta = max_angle * math.sin(omega * t + phase)
    return PendulumState(
        x=x0 + length * math.sin(theta),
        y=y0 - length * math.cos(theta),
        theta=theta,
    )


def spring_mass(x0: float, k: float, m: float, amplitude: float, t: float, phase: float = 0.0) -> SpringState:
    """ω = √(k/m); x as in SHM; F = −k(x − x0)."""
    omega = math.sqrt(k / m)
    arg = omega * t + phase
    x = x0 + amplitude * math.cos(arg)
    return SpringState(
        x=x,
        v=-amplitude * omega * math.sin(arg),
        force=-k * (x - x0),
        omega=omega,
    )


def wave(
    amplitude: float,
    wavelength: float,
    frequency: float,
    x_start: float,
    x_end: float,
    t: float,
    step: float = WAVE_STEP,
) -> WaveState:
    """Polyline samples of y = A·sin(kx − ωt) on [x_start, x_end] at a fixed step."""
    if step <= 0:
        raise ValueError("wave step must be positive")
    k = 2 * math.pi / wavelength
    omega = 2 * math.pi * frequency
    points = []
    n = 0
    x = x_start
    # index-based stepping avoids accumulating float error over long spans
    while x <= x_end + 1e-12:
        points.append((x, amplitude * math.sin(k * x - omega * t)))
        n += 1
        x = x_start + n * step
    return WaveState(points=tuple(points))


def deceleration(x0: float, v0: float, a: float, t: float, max_dist: float = math.inf) -> DecelerationState:
    """x = min(x0 + v0·t + ½at², x0 + maxDist); stopped once v = v0 + at ≤ 0."""
    x = min(x0 + v0 * t + 0.5 * a * t * t, x0 + max_dist)
    v = v0 + a * t
    return DecelerationState(x=x, v=v, stopped=v <= 0)


def radioactive_decay(n0: float, lam: float, t: float) -> DecayState:
    n = n0 * math.exp(-lam * t)
    return DecayState(nuclei=n, activity=lam * n)


def ideal_gas(p0: float, v0: float, t0: float, temperature: float) -> GasState:
    """P = P0·T/T0, V = V0·T/T0."""
    ratio = temperature / t0
    return GasState(pressure=p0 * ratio, volume=v0 * ratio)


def refraction(angle1: float, n1: float, n2: float) -> RefractionState:
    """Snell's law in degrees. Past the critical angle there is no refracted ray."""
    sin2 = (n1 / n2) * math.sin(math.radians(angle1))
    if abs(sin2) > 1:
        return RefractionState(incident=angle1, refracted=None, total_internal=True)
    return RefractionState(incident=angle1, refracted=math.degrees(math.asin(sin2)), total_internal=False)


def lens(f: float, u: float) -> LensState:
    """v = fu/(u − f), m = −v/u. An object at the focal point images at infinity."""
    if u == f:
        return LensState(image_distance=math.inf, magnification=math.inf, is_real=False)
    v = (f * u) / (u - f)
    m = -v / u
    return LensState(image_distance=v, magnification=m, is_real=v > 0)


def coulomb(q1: float, q2: float, r: float, k: float = COULOMB_K) -> CoulombState:
    return CoulombState(force=k * abs(q1 * q2) / (r * r))


def doppler(f0: float, v_source: float, v_observer: float, v_sound: float = SPEED_OF_SOUND) -> DopplerState:
    f = f0 * ((v_sound + v_observer) / (v_sound - v_source))
    return DopplerState(frequency=f, wavelength=v_sound / f)


def electric_potential(q: float, r: float, k: float = COULOMB_K) -> PotentialState:
    return PotentialState(potential=k * q / r)


def magnetic_force(q: float, v: float, b: float, angle: float = 90.0) -> MagneticState:
    return MagneticState(force=q * v * b * math.sin(math.radians(angle)))
