"""Two- and three-state Kalman filters for altitude and climb rate.

Also holds the shared filter configuration constants.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Environmental acceleration variance, divided by 1000.
KF_ACCEL_VARIANCE = 100
# Adaptive uncertainty injection, as a percentage.
KF_ADAPT_DEFAULT = 100
KF_ACCELBIAS_VARIANCE = 0.005
KF_A_MEAS_VARIANCE_4 = 10000.0
KF_A_MEAS_VARIANCE_4D = 10.0
KF_Z_MEAS_VARIANCE = 200.0
IMU_SAMPLE_PERIOD_SECS = 0.002
KF_SAMPLE_PERIOD_SECS = 0.02

INITIAL_VARIANCE = 1500.0


class KalmanFilter2:
    """Tracks altitude z and velocity v from altitude measurements only.

    Random accelerations with variance ``accel_variance`` perturb the motion.
    """

    def __init__(self, z_variance: float, accel_variance: float,
                 z_initial: float, v_initial: float) -> None:
        self.z_variance = z_variance
        self.accel_variance = accel_variance
        self.z = z_initial
        self.v = v_initial
        self.p_zz = INITIAL_VARIANCE
        self.p_zv = 0.0
        self.p_vv = INITIAL_VARIANCE

    def predict(self, accel_variance: float, dt: float) -> None:
        """Advance the state by ``dt`` seconds."""
        self.accel_variance = accel_variance
        self.z += self.v * dt
        dt2 = dt * dt
        self.p_zz += 2.0 * dt * self.p_zv + dt2 * self.p_vv + accel_variance * dt2 * dt2 / 4.0
        self.p_zv += dt * self.p_vv + accel_variance * dt2 * dt / 2.0
        self.p_vv += accel_variance * dt2

    def update(self, z: float) -> tuple[float, float]:
        """Correct the state with an altitude measurement; return (z, v)."""
        innovation = z - self.z
        s_inv = 1.0 / (self.p_zz + self.z_variance)
        kz = self.p_zz * s_inv
        kv = self.p_zv * s_inv

        self.z += kz * innovation
        self.v += kv * innovation

        self.p_vv -= self.p_zv * kv
        self.p_zv -= self.p_zv * kz
        self.p_zz -= self.p_zz * kz

        logger.debug("%.1f %.1f %.1f %.1f %.1f", z, self.z, self.p_zz, self.v, self.p_vv)
        return self.z, self.v


class KalmanFilter3:
    """Tracks altitude, velocity and accelerometer bias.

    Acceleration drives the prediction; altitude measurements correct it.
    """

    def __init__(self, z_sensor_variance: float, accel_variance: float,
                 z_initial: float, v_initial: float) -> None:
        self.z_sensor_variance = z_sensor_variance
        self.accel_variance = accel_variance
        self.bias_variance = KF_ACCELBIAS_VARIANCE
        self.z = z_initial
        self.v = v_initial
        self.b = 0.0
        self.p_zz = INITIAL_VARIANCE
        self.p_zv = 0.0
        self.p_zb = 0.0
        self.p_vv = INITIAL_VARIANCE
        self.p_vb = 0.0
        self.p_bb = INITIAL_VARIANCE

    def predict(self, a: float, dt: float) -> None:
        """Advance by ``dt`` seconds with gravity-compensated acceleration ``a``."""
        accel_true = a - self.b
        self.z += self.v * dt
        self.v += accel_true * dt

        dt2 = dt * dt
        dt3 = dt2 * dt
        dt2div2 = dt2 * 0.5
        dt3div2 = dt3 * 0.5
        dt4div4 = dt2div2 * dt2div2

        p_zz, p_zv, p_zb = self.p_zz, self.p_zv, self.p_zb
        p_vv, p_vb, p_bb = self.p_vv, self.p_vb, self.p_bb

        self.p_zz = (p_zz + 2.0 * dt * p_zv + dt2 * (p_vv - p_zb) - dt3 * p_vb
                     + dt4div4 * p_bb + dt4div4 * self.accel_variance)
        self.p_zv = (p_zv + dt * (p_vv - p_zb) - 3.0 * dt2div2 * p_vb
                     + dt3div2 * p_bb + dt3div2 * self.accel_variance)
        self.p_zb = p_zb + dt * p_vb - dt2div2 * p_bb
        self.p_vv = p_vv - 2.0 * dt * p_vb + dt2 * p_bb + dt2 * self.accel_variance
        self.p_vb = p_vb - dt * p_bb
        self.p_bb = p_bb + self.bias_variance

    def update(self, zm: float) -> tuple[float, float]:
        """Correct the state with an altitude measurement; return (z, v)."""
        innovation = zm - self.z
        s_inv = 1.0 / (self.p_zz + self.z_sensor_variance)

        kz = self.p_zz * s_inv
        kv = self.p_zv * s_inv
        kb = self.p_zb * s_inv

        self.z += kz * innovation
        self.v += kv * innovation
        self.b += kb * innovation

        p_zz, p_zv, p_zb = self.p_zz, self.p_zv, self.p_zb
        self.p_zz = p_zz - kz * p_zz
        self.p_zv = p_zv - kz * p_zv
        self.p_zb = p_zb - kz * p_zb
        self.p_vv = self.p_vv - kv * p_zv
        self.p_vb = self.p_vb - kv * p_zb
        self.p_bb = self.p_bb - kb * p_zb

        logger.debug("%.1f %.1f %.1f %.1f %.1f %.1f %.1f", zm, self.z, self.p_zz,
                     self.v, self.p_vv, self.b, self.p_bb)
        return self.z, self.v