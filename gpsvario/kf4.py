"""Four-state Kalman filters fusing altitude and vertical acceleration.

The state is altitude z, climb rate v, gravity-compensated earth-z
acceleration a and residual accelerometer bias b.  Both an altitude and an
acceleration measurement correct the state on each update.
"""

from __future__ import annotations

import logging

from gpsvario.kf import (
    INITIAL_VARIANCE,
    KF_A_MEAS_VARIANCE_4,
    KF_A_MEAS_VARIANCE_4D,
    KF_ACCELBIAS_VARIANCE,
    KF_Z_MEAS_VARIANCE,
)

logger = logging.getLogger(__name__)

INITIAL_ACCEL_VARIANCE = 100000.0


class KalmanFilter4:
    """Tracks altitude and climb rate from altitude and acceleration samples.

    ``accel_variance`` is the environmental acceleration variance; it should
    be higher for more thermic or turbulent conditions.
    """

    a_meas_variance = KF_A_MEAS_VARIANCE_4

    def __init__(self, accel_variance: float, z_initial: float,
                 v_initial: float = 0.0, a_initial: float = 0.0) -> None:
        self.z_meas_variance = KF_Z_MEAS_VARIANCE
        self.bias_variance = KF_ACCELBIAS_VARIANCE
        self.accel_variance = accel_variance

        self.z = z_initial
        self.v = v_initial
        self.a = a_initial
        self.b = 0.0

        # Upper triangle of the symmetric 4x4 state covariance.
        self.p_zz = INITIAL_VARIANCE
        self.p_zv = 0.0
        self.p_za = 0.0
        self.p_zb = 0.0
        self.p_vv = INITIAL_VARIANCE
        self.p_va = 0.0
        self.p_vb = 0.0
        self.p_aa = INITIAL_ACCEL_VARIANCE
        self.p_ab = 0.0
        self.p_bb = INITIAL_VARIANCE

    def predict(self, dt: float) -> None:
        """Advance the state estimate and its covariance by ``dt`` seconds."""
        accel_true = self.a - self.b
        self.z += self.v * dt + accel_true * dt * dt * 0.5
        self.v += accel_true * dt

        dt2 = dt * dt
        dt3 = dt2 * dt
        dt4 = dt2 * dt2
        dt2div2 = dt2 * 0.5
        dt3div2 = dt3 * 0.5
        dt4div2 = dt4 * 0.5
        dt4div4 = dt4 * 0.25

        p_zz, p_zv, p_za, p_zb = self.p_zz, self.p_zv, self.p_za, self.p_zb
        p_vv, p_va, p_vb = self.p_vv, self.p_va, self.p_vb
        p_aa, p_ab, p_bb = self.p_aa, self.p_ab, self.p_bb

        self.p_zz = (p_zz + 2.0 * p_zv * dt + (p_za - p_zb) * dt2 + p_vv * dt2div2
                     + (p_va - p_vb) * dt3 + (p_aa + p_bb) * dt4div4 - p_ab * dt4div2)
        self.p_zv = (p_zv + dt * (p_za - p_zb + p_vv) + 3.0 * dt2div2 * (p_va - p_vb)
                     - p_ab * dt3 + (p_aa + p_bb) * dt3div2)
        self.p_za = p_za + p_va * dt + (p_aa - p_ab) * dt2div2
        self.p_zb = p_zb + p_vb * dt + (p_ab - p_bb) * dt2div2

        self.p_vv = p_vv + 2.0 * dt * (p_va - p_vb) + dt2 * (p_aa - 2.0 * p_ab + p_bb)
        self.p_va = p_va + dt * (p_aa - p_ab)
        self.p_vb = p_vb + dt * (p_ab - p_bb)

        self.p_aa = p_aa + self.accel_variance
        self.p_bb = p_bb + self.bias_variance

    def _extra_accel_variance(self, am: float) -> float:
        """Additional acceleration innovation variance for measurement ``am``."""
        return 0.0

    def update(self, zm: float, am: float) -> tuple[float, float]:
        """Correct the state with altitude ``zm`` and acceleration ``am``.

        Returns the updated (z, v).
        """
        z_err = zm - self.z
        a_err = am - self.a

        s00 = self.p_zz + self.z_meas_variance
        s01 = self.p_za
        s11 = self.p_aa + self.a_meas_variance + self._extra_accel_variance(am)

        sdetinv = 1.0 / (s00 * s11 - s01 * s01)
        sinv00 = sdetinv * s11
        sinv01 = -sdetinv * s01
        sinv11 = sdetinv * s00

        p_zz, p_zv, p_za, p_zb = self.p_zz, self.p_zv, self.p_za, self.p_zb
        p_vv, p_va, p_vb = self.p_vv, self.p_va, self.p_vb
        p_aa, p_ab, p_bb = self.p_aa, self.p_ab, self.p_bb

        k00 = p_zz * sinv00 + p_za * sinv01
        k01 = p_zz * sinv01 + p_za * sinv11
        k10 = p_zv * sinv00 + p_va * sinv01
        k11 = p_zv * sinv01 + p_va * sinv11
        k20 = p_za * sinv00 + p_aa * sinv01
        k21 = p_za * sinv01 + p_aa * sinv11
        k30 = p_zb * sinv00 + p_ab * sinv01
        k31 = p_zb * sinv01 + p_ab * sinv11

        self.z += k00 * z_err + k01 * a_err
        self.v += k10 * z_err + k11 * a_err
        self.a += k20 * z_err + k21 * a_err
        self.b += k30 * z_err + k31 * a_err

        tmp = 1.0 - k00
        self.p_zz = tmp * p_zz - k01 * p_za
        self.p_zv = tmp * p_zv - k01 * p_va
        self.p_za = tmp * p_za - k01 * p_aa
        self.p_zb = tmp * p_zb - k01 * p_ab

        self.p_vv = -k10 * p_zv + p_vv - k11 * p_va
        self.p_va = -k10 * p_za + p_va - k11 * p_aa
        self.p_vb = -k10 * p_zb + p_vb - k11 * p_ab

        self.p_aa = -k20 * p_za + (1.0 - k21) * p_aa
        self.p_ab = -k20 * p_zb + (1.0 - k21) * p_ab

        self.p_bb = -k30 * p_zb - k31 * p_ab + p_bb

        logger.debug("%.1f %.1f %.1f %.1f %.1f %.1f %.1f %.1f %.1f",
                     zm, self.z, self.p_zz, self.v, self.p_vv,
                     self.a - self.b, self.p_aa, self.b, self.p_bb)
        return self.z, self.v


class KalmanFilter4D(KalmanFilter4):
    """Four-state filter with adaptive uncertainty injection.

    ``k_adapt`` adds acceleration measurement uncertainty in proportion to the
    square of the measured acceleration, so the filter responds faster in
    high-acceleration situations.  The bias estimate is allowed to move only
    when acceleration is low.
    """

    a_meas_variance = KF_A_MEAS_VARIANCE_4D

    def __init__(self, accel_variance: float, k_adapt: float, z_initial: float,
                 v_initial: float = 0.0, a_initial: float = 0.0) -> None:
        super().__init__(accel_variance, z_initial, v_initial, a_initial)
        self.k_adapt = k_adapt

    def _extra_accel_variance(self, am: float) -> float:
        accel_ext = abs(am - self.b)
        self.bias_variance = KF_ACCELBIAS_VARIANCE / (1.0 + accel_ext)
        return self.k_adapt * accel_ext * accel_ext

    def predict(self, dt: float) -> None:
        """Advance the state estimate and its covariance by ``dt`` seconds."""
        super().predict(dt)

    def update(self, zm: float, am: float) -> tuple[float, float]:
        """Correct the state with altitude ``zm`` and acceleration ``am``.

        Returns the updated (z, v).
        """
        return super().update(zm, am)