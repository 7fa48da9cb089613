import pytest

from gpsvario.kf import KF_ACCELBIAS_VARIANCE, KF_SAMPLE_PERIOD_SECS
from gpsvario.kf4 import KalmanFilter4, KalmanFilter4D

ADAPTIVE = [False, True]


def test_initial_covariance_matches_source_defaults():
    kf = KalmanFilter4(100000.0, 123.0)
    assert kf.z == 123.0
    assert (kf.v, kf.a, kf.b) == (0.0, 0.0, 0.0)
    assert kf.p_zz == 1500.0
    assert kf.p_vv == 1500.0
    assert kf.p_aa == 100000.0
    assert kf.p_bb == 1500.0


def test_predict_state_moves_with_velocity_and_acceleration():
    kf = KalmanFilter4(1000.0, 0.0, v_initial=10.0, a_initial=2.0)
    kf.predict(1.0)
    assert kf.z == pytest.approx(11.0)
    assert kf.v == pytest.approx(12.0)
    assert kf.a == 2.0


def test_predict_zero_dt_only_adds_process_noise():
    kf = KalmanFilter4(1234.0, 0.0)
    kf.predict(0.0)
    assert kf.p_zz == 1500.0
    assert kf.p_vv == 1500.0
    assert kf.p_aa == 100000.0 + 1234.0
    assert kf.p_bb == pytest.approx(1500.0 + KF_ACCELBIAS_VARIANCE)


@pytest.mark.parametrize("adaptive", ADAPTIVE)
def test_stationary_measurements_converge(adaptive):
    kf = KalmanFilter4D(100000.0, 1.0, 500.0) if adaptive else KalmanFilter4(100000.0, 500.0)
    for _ in range(1000):
        kf.predict(KF_SAMPLE_PERIOD_SECS)
        z, v = kf.update(800.0, 0.0)
    assert z == pytest.approx(800.0, abs=1.0)
    assert v == pytest.approx(0.0, abs=1.0)


@pytest.mark.parametrize("adaptive", ADAPTIVE)
def test_constant_climb_is_tracked(adaptive):
    kf = KalmanFilter4D(100000.0, 1.0, 500.0) if adaptive else KalmanFilter4(100000.0, 500.0)
    z_true = 500.0
    for _ in range(1000):
        z_true += 100.0 * KF_SAMPLE_PERIOD_SECS
        kf.predict(KF_SAMPLE_PERIOD_SECS)
        z, v = kf.update(z_true, 0.0)
    assert v == pytest.approx(100.0, abs=5.0)
    assert z == pytest.approx(z_true, abs=5.0)


@pytest.mark.parametrize("adaptive", ADAPTIVE)
def test_update_reduces_altitude_variance(adaptive):
    kf = KalmanFilter4D(100000.0, 1.0, 500.0) if adaptive else KalmanFilter4(100000.0, 500.0)
    kf.predict(KF_SAMPLE_PERIOD_SECS)
    before = kf.p_zz
    kf.update(510.0, 0.0)
    assert 0.0 < kf.p_zz < before


@pytest.mark.parametrize("adaptive", ADAPTIVE)
def test_update_returns_current_state(adaptive):
    kf = KalmanFilter4D(100000.0, 1.0, 500.0) if adaptive else KalmanFilter4(100000.0, 500.0)
    kf.predict(KF_SAMPLE_PERIOD_SECS)
    result = kf.update(520.0, 50.0)
    assert result == (kf.z, kf.v)
    assert kf.z > 500.0


def test_adaptive_filter_lowers_bias_variance_under_acceleration():
    kf = KalmanFilter4D(100000.0, 1.0, 0.0)
    kf.predict(KF_SAMPLE_PERIOD_SECS)
    kf.update(0.0, 1000.0)
    assert kf.bias_variance < KF_ACCELBIAS_VARIANCE
    quiet = KalmanFilter4D(100000.0, 1.0, 0.0)
    quiet.predict(KF_SAMPLE_PERIOD_SECS)
    quiet.update(0.0, 0.0)
    assert quiet.bias_variance == pytest.approx(KF_ACCELBIAS_VARIANCE)
    assert kf.bias_variance < quiet.bias_variance


def test_adaptation_damps_response_to_large_acceleration():
    plain = KalmanFilter4D(100000.0, 0.0, 0.0)
    adaptive = KalmanFilter4D(100000.0, 1.0, 0.0)
    for kf in (plain, adaptive):
        kf.predict(KF_SAMPLE_PERIOD_SECS)
        kf.update(0.0, 2000.0)
    assert 0.0 < adaptive.a < plain.a


def test_plain_filter_bias_variance_is_constant():
    kf = KalmanFilter4(100000.0, 0.0)
    kf.predict(KF_SAMPLE_PERIOD_SECS)
    kf.update(0.0, 2000.0)
    assert kf.bias_variance == KF_ACCELBIAS_VARIANCE