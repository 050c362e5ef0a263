import numpy as np

from fluid2d.advect import advect


W, H = 10, 8


def _field(seed):
    return np.random.default_rng(seed).random(W * H).astype(np.float32)


def test_zero_velocity_is_identity_on_interior():
    d0 = _field(0)
    d = np.full(W * H, -7.0, dtype=np.float32)
    zero = np.zeros(W * H, dtype=np.float32)

    advect(d, d0, zero, zero, 0.5, W, H)

    v, v0 = d.reshape(H, W), d0.reshape(H, W)
    assert np.array_equal(v[1:-1, 1:-1], v0[1:-1, 1:-1])
    # boundary ring untouched
    assert np.all(v[0] == -7.0) and np.all(v[-1] == -7.0)
    assert np.all(v[:, 0] == -7.0) and np.all(v[:, -1] == -7.0)


def test_uniform_flow_shifts_by_one_cell():
    d0 = _field(1)
    d = d0.copy()
    vx = np.ones(W * H, dtype=np.float32)
    vy = np.zeros(W * H, dtype=np.float32)

    advect(d, d0, vx, vy, 1.0, W, H)

    v, v0 = d.reshape(H, W), d0.reshape(H, W)
    assert np.allclose(v[1:-1, 2:-1], v0[1:-1, 1:-2])


def test_fast_flow_is_clamped_and_bounded():
    d0 = _field(2)
    d = d0.copy()
    vx = np.full(W * H, 1e6, dtype=np.float32)
    vy = np.full(W * H, -1e6, dtype=np.float32)

    advect(d, d0, vx, vy, 2.0, W, H)

    assert np.all(np.isfinite(d))
    assert d.min() >= d0.min() - 1e-6
    assert d.max() <= d0.max() + 1e-6


def test_interpolates_between_cells():
    d0 = np.zeros(W * H, dtype=np.float32)
    d0.reshape(H, W)[:, 4] = 1.0
    d = d0.copy()
    vx = np.full(W * H, 0.5, dtype=np.float32)
    vy = np.zeros(W * H, dtype=np.float32)

    advect(d, d0, vx, vy, 1.0, W, H)

    v = d.reshape(H, W)
    # half a cell to the right: the stripe is split between columns 4 and 5
    assert np.allclose(v[1:-1, 4], 0.5)
    assert np.allclose(v[1:-1, 5], 0.5)
    assert np.allclose(v[1:-1, 6], 0.0)


def test_nan_velocity_does_not_crash():
    d0 = _field(3)
    d = d0.copy()
    vx = np.zeros(W * H, dtype=np.float32)
    vy = np.zeros(W * H, dtype=np.float32)
    vx.reshape(H, W)[3, 4] = np.nan
    vy.reshape(H, W)[5, 6] = np.inf

    with np.errstate(all='ignore'):
        advect(d, d0, vx, vy, 0.5, W, H)

    v, v0 = d.reshape(H, W), d0.reshape(H, W)
    # the bad cell goes bad, its untouched neighbors still move normally
    assert np.isnan(v[3, 4])
    assert v[3, 3] == v0[3, 3]
    assert np.isfinite(v[5, 6])
