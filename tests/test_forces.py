import numpy as np
import pytest

from fluid2d.forces import cubic_pulse
from fluid2d.grid import StaggeredField


def test_cubic_pulse_shape():
    assert cubic_pulse(0.0) == 1.0
    assert cubic_pulse(0.5) == pytest.approx(0.5)
    assert cubic_pulse(1.0) == 0.0
    assert cubic_pulse(3.0) == 0.0
    assert cubic_pulse(-0.25) == pytest.approx(cubic_pulse(0.25))

    d = np.linspace(0, 1, 21)
    assert np.all(np.diff(cubic_pulse(d)) < 0)


class TestInflow:

    def setup_method(self):
        self.n = 16
        self.hx = 1.0 / self.n
        self.field = StaggeredField(self.n, self.n, 0.5, 0.5, self.hx)
        # Rectangle centered on cell (8, 8), 8 cells wide
        c = 8.5 * self.hx
        self.rect = (c - 4 * self.hx, c - 4 * self.hx, c + 4 * self.hx, c + 4 * self.hx)

    def test_peak_at_center_and_falloff(self):
        self.field.add_inflow(*self.rect, 2.0)
        d = self.field.src

        assert np.unravel_index(np.argmax(d), d.shape) == (8, 8)
        assert d[8, 8] == pytest.approx(2.0)

        row = d[8:13, 8]
        assert np.all(np.diff(row) < 0)
        assert row[-1] == 0.0

        col = d[8, 4:9]
        assert np.all(np.diff(col) > 0)

    def test_nothing_outside_rectangle(self):
        self.field.add_inflow(*self.rect, 1.0)
        d = self.field.src
        assert not np.any(d[:4, :])
        assert not np.any(d[13:, :])
        assert not np.any(d[:, :4])
        assert not np.any(d[:, 13:])

    def test_max_blend_never_decreases_magnitude(self):
        rng = np.random.default_rng(11)
        self.field.src[:] = rng.uniform(-1.5, 1.5, size=self.field.shape)
        before = self.field.src.copy()

        self.field.add_inflow(*self.rect, 1.0)
        self.field.add_inflow(*self.rect, -1.2)

        assert np.all(np.abs(self.field.src) >= np.abs(before))
        # Cells already stronger than the pulse are untouched
        strong = np.abs(before) >= 1.2
        np.testing.assert_array_equal(self.field.src[strong], before[strong])

    def test_repeated_inflow_saturates(self):
        self.field.add_inflow(*self.rect, 1.0)
        once = self.field.src.copy()
        self.field.add_inflow(*self.rect, 1.0)
        np.testing.assert_array_equal(self.field.src, once)

    def test_negative_value(self):
        self.field.add_inflow(*self.rect, -3.0)
        assert self.field.src.min() == pytest.approx(-3.0)
        assert self.field.src.max() == 0.0

    def test_degenerate_rectangle_is_noop(self):
        self.field.add_inflow(0.5, 0.5, 0.5, 0.7, 1.0)
        self.field.add_inflow(0.5, 0.7, 0.9, 0.2, 1.0)
        assert not np.any(self.field.src)

    def test_rectangle_clamped_to_grid(self):
        self.field.add_inflow(-0.5, -0.5, 0.25, 0.25, 1.0)
        assert self.field.src[0, 0] > 0.0
        self.field.add_inflow(2.0, 2.0, 3.0, 3.0, 1.0)

    def test_staggered_field_uses_face_positions(self):
        u = StaggeredField(self.n + 1, self.n, 0.0, 0.5, self.hx)
        # Centered on the face between cells 7 and 8
        x0, x1 = 6 * self.hx, 10 * self.hx
        u.add_inflow(x0, 0.25, x1, 0.75, 1.0)
        assert np.unravel_index(np.argmax(u.src), u.shape)[0] == 8
