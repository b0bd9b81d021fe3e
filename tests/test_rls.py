# tests/test_rls.py

import numpy as np
import pytest

from pydaptivebeamforming.rls import MultiBinRLS


def test_rls_initial_state():
    rls = MultiBinRLS(n_bins=4, n_channels=3, forgetting_factor=0.95, regularization=0.5)

    assert rls.covmat_inv.shape == (4, 3, 3)
    assert rls.xcov.shape == (4, 3)
    assert rls.weights.shape == (4, 3)
    for f in range(4):
        np.testing.assert_array_equal(rls.covmat_inv[f], np.eye(3) / 0.5)
    assert not rls.xcov.any()
    assert not rls.weights.any()


@pytest.mark.parametrize("kwargs", [
    dict(forgetting_factor=0.0),
    dict(forgetting_factor=1.2),
    dict(regularization=0.0),
    dict(regularization=-1.0),
])
def test_rls_rejects_bad_parameters(kwargs):
    with pytest.raises(ValueError):
        MultiBinRLS(n_bins=2, n_channels=2, **kwargs)


def test_sherman_morrison_matches_direct_inverse(complex_gaussian):
    """The recursive inverse equals inv(lambda^k delta I + sum lambda^(k-j) b b^H) at every step."""
    rng = np.random.default_rng(11)
    F, n, lam, delta = 3, 3, 0.95, 0.5
    rls = MultiBinRLS(n_bins=F, n_channels=n, forgetting_factor=lam, regularization=delta)

    R = np.stack([delta * np.eye(n, dtype=complex)] * F)
    p = np.zeros((F, n), dtype=complex)

    for _ in range(40):
        b = complex_gaussian(rng, (F, n))
        y = complex_gaussian(rng, F)
        reset = rls.update(b, y)
        assert not reset.any()

        R = lam * R + b[:, :, None] * np.conj(b)[:, None, :]
        p = lam * p + np.conj(y)[:, None] * b

        R_inv = np.linalg.inv(R)
        np.testing.assert_allclose(rls.covmat_inv, R_inv, rtol=1e-8, atol=1e-10)
        np.testing.assert_allclose(rls.xcov, p, rtol=1e-12, atol=1e-12)
        np.testing.assert_allclose(rls.weights, np.linalg.solve(R, p[..., None])[..., 0], rtol=1e-7, atol=1e-9)


def test_inverse_covariance_stays_hermitian_positive_definite(complex_gaussian):
    rng = np.random.default_rng(5)
    rls = MultiBinRLS(n_bins=8, n_channels=4, forgetting_factor=0.9, regularization=1e-3)

    for _ in range(2000):
        rls.update(complex_gaussian(rng, (8, 4)), complex_gaussian(rng, 8))

    P = rls.covmat_inv
    np.testing.assert_array_equal(P, np.conj(np.swapaxes(P, 1, 2)))
    assert np.all(np.linalg.eigvalsh(P) > 0.0)


def test_rls_identifies_linear_predictor(complex_gaussian):
    """y = w^H b without noise: the weights converge to w."""
    rng = np.random.default_rng(1)
    F, n = 5, 2
    w_true = complex_gaussian(rng, (F, n))
    rls = MultiBinRLS(n_bins=F, n_channels=n, forgetting_factor=1.0, regularization=1e-6)

    for _ in range(200):
        b = complex_gaussian(rng, (F, n))
        y = np.einsum("fi,fi->f", np.conj(w_true), b)
        rls.update(b, y)

    msd = float(np.mean(np.abs(rls.weights - w_true) ** 2))
    assert msd < 1e-10
    np.testing.assert_allclose(rls.predict(b), y, rtol=1e-6)


def test_unit_forgetting_factor_zero_reference_keeps_weights_at_zero(complex_gaussian):
    rng = np.random.default_rng(0)
    rls = MultiBinRLS(n_bins=3, n_channels=2, forgetting_factor=1.0, regularization=1e-2)

    for _ in range(100):
        rls.update(np.zeros((3, 2), dtype=complex), complex_gaussian(rng, 3))

    assert not rls.weights.any()
    np.testing.assert_allclose(rls.covmat_inv, np.stack([np.eye(2) * 100.0] * 3), rtol=1e-12)


def test_degenerate_bin_is_reset(complex_gaussian):
    rng = np.random.default_rng(9)
    rls = MultiBinRLS(n_bins=4, n_channels=2, forgetting_factor=0.99, regularization=0.1)
    for _ in range(10):
        rls.update(complex_gaussian(rng, (4, 2)), complex_gaussian(rng, 4))

    healthy_before = rls.covmat_inv[[0, 1, 3]].copy()
    rls.covmat_inv[2] = -np.eye(2)  # no longer positive definite

    reset = rls.update(complex_gaussian(rng, (4, 2)), complex_gaussian(rng, 4))

    np.testing.assert_array_equal(reset, [False, False, True, False])
    np.testing.assert_array_equal(rls.covmat_inv[2], np.eye(2) / 0.1)
    assert not rls.xcov[2].any()
    assert not rls.weights[2].any()
    assert np.all(np.isfinite(rls.weights))
    assert not np.allclose(rls.covmat_inv[[0, 1, 3]], healthy_before)


def test_indefinite_inverse_with_positive_diagonal_is_reset():
    rls = MultiBinRLS(n_bins=3, n_channels=2, forgetting_factor=0.99, regularization=1.0)
    rls.covmat_inv[1] = np.array([[1.0, 2.0], [2.0, 1.0]])  # eigenvalues 3 and -1

    b = np.tile(np.array([1e-3, 0.0], dtype=complex), (3, 1))
    reset = rls.update(b, np.zeros(3, dtype=complex))

    np.testing.assert_array_equal(reset, [False, True, False])
    np.testing.assert_array_equal(rls.covmat_inv[1], np.eye(2))

    for _ in range(5):
        assert not rls.update(b, np.zeros(3, dtype=complex)).any()
    assert np.all(np.linalg.eigvalsh(rls.covmat_inv) > 0.0)


def test_update_works_in_place(complex_gaussian):
    rng = np.random.default_rng(13)
    rls = MultiBinRLS(n_bins=4, n_channels=3)
    state = (rls.covmat_inv, rls.xcov, rls.weights)
    scratch = (rls._u, rls._bc, rls._yc, rls._quad, rls._den, rls._v, rls._outer)

    for _ in range(5):
        rls.update(complex_gaussian(rng, (4, 3)), complex_gaussian(rng, 4))

    assert all(a is b for a, b in zip(state, (rls.covmat_inv, rls.xcov, rls.weights)))
    assert all(
        a is b
        for a, b in zip(scratch, (rls._u, rls._bc, rls._yc, rls._quad, rls._den, rls._v, rls._outer))
    )
    assert rls.weights.any()


def test_nonfinite_input_resets_only_affected_bins():
    rls = MultiBinRLS(n_bins=3, n_channels=2)
    b = np.ones((3, 2), dtype=complex)
    b[1, 0] = np.nan

    reset = rls.update(b, np.ones(3, dtype=complex))

    np.testing.assert_array_equal(reset, [False, True, False])
    assert np.all(np.isfinite(rls.covmat_inv))
    assert np.all(np.isfinite(rls.weights))


def test_reset_selected_bins(complex_gaussian):
    rng = np.random.default_rng(2)
    rls = MultiBinRLS(n_bins=3, n_channels=2, regularization=0.2)
    rls.update(complex_gaussian(rng, (3, 2)), complex_gaussian(rng, 3))

    rls.reset(bins=[0])
    np.testing.assert_array_equal(rls.covmat_inv[0], np.eye(2) / 0.2)
    assert rls.weights[1].any()

    rls.reset()
    assert not rls.weights.any()


def test_update_shape_checks():
    rls = MultiBinRLS(n_bins=3, n_channels=2)
    with pytest.raises(ValueError, match="reference"):
        rls.update(np.zeros((2, 3)), np.zeros(3))
    with pytest.raises(ValueError, match="target"):
        rls.update(np.zeros((3, 2)), np.zeros(4))
