import numpy as np
import pytest

from fluid2d.advect import cerp, lerp, runge_kutta3, sample_cubic, sample_linear
from fluid2d.grid import StaggeredField


def test_lerp_endpoints():
    assert lerp(2.0, 5.0, 0.0) == 2.0
    assert lerp(2.0, 5.0, 1.0) == 5.0
    assert lerp(2.0, 5.0, 0.5) == pytest.approx(3.5)


def test_cerp_never_overshoots():
    rng = np.random.default_rng(1234)
    a, b, c, d = rng.uniform(-10, 10, size=(4, 10_000))
    t = rng.uniform(0, 1, size=10_000)

    value = cerp(a, b, c, d, t)

    lo = np.minimum(np.minimum(a, b), np.minimum(c, d))
    hi = np.maximum(np.maximum(a, b), np.maximum(c, d))
    assert np.all(value >= lo)
    assert np.all(value <= hi)


def test_cerp_clamps_step_edge():
    # An unclamped Catmull-Rom spline dips below 0 next to a step
    assert cerp(0.0, 0.0, 1.0, 1.0, 0.1) >= 0.0
    assert cerp(1.0, 0.0, 0.0, 0.0, 0.3) >= 0.0
    assert cerp(0.0, 1.0, 1.0, 0.0, 0.5) <= 1.0


def test_cerp_hits_interior_samples():
    assert cerp(3.0, 1.0, 7.0, 2.0, 0.0) == 1.0
    assert cerp(3.0, 1.0, 7.0, 2.0, 1.0) == pytest.approx(7.0)


def test_cerp_reproduces_linear_data():
    t = np.linspace(0, 1, 11)
    np.testing.assert_allclose(cerp(0.0, 1.0, 2.0, 3.0, t), 1.0 + t)


class TestSampling:

    def setup_method(self):
        rng = np.random.default_rng(7)
        self.field = rng.uniform(-1, 1, size=(6, 5))

    @pytest.mark.parametrize("offset", [(0.5, 0.5), (0.0, 0.5), (0.5, 0.0)])
    def test_linear_identity_at_grid_points(self, offset):
        ox, oy = offset
        for i in range(5):
            for j in range(4):
                value = sample_linear(self.field, i + ox, j + oy, ox, oy)
                assert value == pytest.approx(self.field[i, j])

    def test_cubic_identity_at_grid_points(self):
        for i in range(5):
            for j in range(4):
                value = sample_cubic(self.field, i + 0.5, j + 0.5, 0.5, 0.5)
                assert value == pytest.approx(self.field[i, j])

    def test_linear_midpoint(self):
        value = sample_linear(self.field, 1.5, 2.0, 0.0, 0.0)
        assert value == pytest.approx(0.5 * (self.field[1, 2] + self.field[2, 2]))

    def test_sampling_outside_grid_is_clamped(self):
        far_left = sample_linear(self.field, -100.0, 0.0, 0.0, 0.0)
        assert far_left == pytest.approx(self.field[0, 0])

        far_right = sample_cubic(self.field, 100.0, 100.0, 0.0, 0.0)
        assert far_right == pytest.approx(self.field[-1, -1], abs=0.01 * np.ptp(self.field))

    def test_vectorized_matches_scalar(self):
        x = np.array([0.3, 2.7, 4.1])
        y = np.array([1.2, 0.0, 3.9])
        vec = sample_cubic(self.field, x, y, 0.5, 0.5)
        for k in range(3):
            assert vec[k] == pytest.approx(sample_cubic(self.field, x[k], y[k], 0.5, 0.5))

    def test_one_cell_wide_field(self):
        field = np.array([[4.0, 8.0]])
        assert sample_linear(field, 0.5, 1.0, 0.5, 0.5) == pytest.approx(6.0)
        assert sample_cubic(field, 3.0, 0.5, 0.5, 0.5) == pytest.approx(4.0)


def test_rk3_zero_velocity_stays_put():
    hx = 0.25
    u = StaggeredField(5, 4, 0.0, 0.5, hx)
    v = StaggeredField(4, 5, 0.5, 0.0, hx)
    x = np.array([0.5, 1.7, 3.2])
    y = np.array([0.5, 2.2, 1.0])

    xb, yb = runge_kutta3(x, y, 0.1, u, v, hx)

    np.testing.assert_array_equal(xb, x)
    np.testing.assert_array_equal(yb, y)


def test_rk3_uniform_velocity_translates():
    hx = 0.25
    u = StaggeredField(5, 4, 0.0, 0.5, hx)
    v = StaggeredField(4, 5, 0.5, 0.0, hx)
    u.src[:] = 0.5
    v.src[:] = -0.25

    x = np.array([1.5, 2.5])
    y = np.array([1.5, 2.5])
    xb, yb = runge_kutta3(x, y, 0.1, u, v, hx)

    # weights sum to 1 → displacement = dt * velocity / hx
    np.testing.assert_allclose(xb, x - 0.1 * 0.5 / hx)
    np.testing.assert_allclose(yb, y + 0.1 * 0.25 / hx)
