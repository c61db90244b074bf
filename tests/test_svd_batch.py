import numpy as np
import pytest
import scipy.sparse as sp

from amf import (
    AMF,
    AverageInitialization,
    GivenInitialization,
    MatrixFactorizationDataGenerator,
    MaxIterationTermination,
    RandomInitialization,
    SimpleToleranceTermination,
    SVDBatchConfig,
    SVDBatchLearning,
    TerminationConfig,
    ValidationRMSETermination,
    rmse,
)


def _reference_w_step(V, W, H, lr, kw, momentum, mW):
    """Entry-by-entry W half step, written out as plainly as possible."""
    V = sp.csr_matrix(V) if sp.issparse(V) else V
    n, m = V.shape
    dense = V.toarray() if sp.issparse(V) else V
    observed = (dense != 0) if sp.issparse(V) else np.ones_like(dense, dtype=bool)
    deltaW = np.zeros_like(W)
    for i in range(n):
        for j in range(m):
            if observed[i, j]:
                deltaW[i] += (dense[i, j] - W[i] @ H[:, j]) * H[:, j]
        deltaW[i] -= kw * W[i]
    mW = momentum * mW + lr * deltaW
    return W + mW, mW


@pytest.mark.parametrize("sparse", [False, True])
def test_w_update_matches_entrywise_formula(sparse):
    """The vectorized half step must equal the per-entry accumulation."""
    rng = np.random.default_rng(seed=3)
    dense = rng.uniform(1, 5, size=(7, 6))
    dense[rng.uniform(size=dense.shape) < 0.5] = 0.0
    V = sp.csr_matrix(dense) if sparse else dense
    W = rng.uniform(size=(7, 2))
    H = rng.uniform(size=(2, 6))

    rule = SVDBatchLearning(SVDBatchConfig(learning_rate=0.01, kw=0.3, kh=0.2, momentum=0.5))
    rule.initialize(V, 2)

    expected, mW = W.copy(), np.zeros_like(W)
    got = W.copy()
    for _ in range(3):
        expected, mW = _reference_w_step(V, expected, H, 0.01, 0.3, 0.5, mW)
        rule.w_update(V, got, H)

    np.testing.assert_allclose(got, expected, rtol=1e-12, atol=1e-12)
    np.testing.assert_allclose(rule.mW, mW, rtol=1e-12, atol=1e-12)


def test_sparse_and_dense_updates_differ():
    """Zeros are unobserved in a sparse V but observed in a dense one."""
    rng = np.random.default_rng(seed=5)
    dense = rng.uniform(1, 5, size=(8, 8))
    dense[rng.uniform(size=dense.shape) < 0.6] = 0.0
    W0 = rng.uniform(size=(8, 2))
    H0 = rng.uniform(size=(2, 8))

    results = []
    for V in (dense, sp.csr_matrix(dense)):
        rule = SVDBatchLearning(SVDBatchConfig(learning_rate=0.01, momentum=0.0))
        rule.initialize(V, 2)
        W, H = W0.copy(), H0.copy()
        rule.w_update(V, W, H)
        rule.h_update(V, W, H)
        results.append((W, H))

    assert not np.allclose(results[0][0], results[1][0])
    assert not np.allclose(results[0][1], results[1][1])


def test_sparse_random_converges_before_max_iterations():
    """100x100 sparse normal matrix at 20% density must stop on tolerance."""
    V = MatrixFactorizationDataGenerator(100, 100, 2, seed=0).sparse_random(0.2)
    amf = AMF(SimpleToleranceTermination(TerminationConfig(max_iterations=1000)),
              AverageInitialization(random_state=0),
              SVDBatchLearning())
    W, H, residue = amf.apply(V, 2)

    policy = amf.termination_policy
    assert policy.iteration < policy.max_iterations
    assert policy.status == "tolerance"
    assert W.shape == (100, 2) and H.shape == (2, 100)
    assert np.isfinite(residue)


def test_plain_gradient_is_monotone():
    """Zero momentum and regularization with a small step never increases RMSE."""
    V, _, _ = MatrixFactorizationDataGenerator(20, 15, 2, seed=1).low_rank()
    rng = np.random.default_rng(seed=11)
    W = rng.uniform(size=(20, 2))
    H = rng.uniform(size=(2, 15))

    rule = SVDBatchLearning(SVDBatchConfig(learning_rate=0.001, momentum=0.0))
    rule.initialize(V, 2)
    errors = [rmse(V, W, H)]
    for _ in range(200):
        rule.w_update(V, W, H)
        rule.h_update(V, W, H)
        errors.append(rmse(V, W, H))

    assert all(b <= a + 1e-12 for a, b in zip(errors, errors[1:]))
    assert errors[-1] < errors[0]


def _ratings_setup():
    V = MatrixFactorizationDataGenerator(120, 90, 2, seed=7, sigma=0.2).ratings(0.15)
    rng = np.random.default_rng(seed=8)
    # Start near the mean rating so both runs share the same easy first phase
    start = np.sqrt(V.data.mean() / 2)
    W0 = start + 0.1 * rng.uniform(size=(120, 2))
    H0 = start + 0.1 * rng.uniform(size=(2, 90))
    vrt = ValidationRMSETermination(
        V, 150,
        TerminationConfig(max_iterations=5000, reverse_step_tolerance=10),
        random_state=0)
    return V, GivenInitialization(W0, H0), vrt


def test_momentum_does_not_hurt():
    V, sri, vrt = _ratings_setup()

    _, _, regular_rmse = AMF(vrt, sri, SVDBatchLearning(
        SVDBatchConfig(learning_rate=0.0009, momentum=0.0))).apply(V, 2)
    _, _, momentum_rmse = AMF(vrt, sri, SVDBatchLearning(
        SVDBatchConfig(learning_rate=0.0009, momentum=0.8))).apply(V, 2)

    assert momentum_rmse <= regular_rmse + 0.1


def test_regularization_does_not_hurt():
    V, sri, vrt = _ratings_setup()

    _, _, regular_rmse = AMF(vrt, sri, SVDBatchLearning(
        SVDBatchConfig(learning_rate=0.0009, momentum=0.0))).apply(V, 2)
    _, _, regularized_rmse = AMF(vrt, sri, SVDBatchLearning(
        SVDBatchConfig(learning_rate=0.0009, kw=0.5, kh=0.5, momentum=0.8))).apply(V, 2)

    assert regularized_rmse <= regular_rmse + 0.05


def test_recovers_matrix_with_negative_entries():
    """A 5x5 rank-3 product of shifted factors is recovered within 9% in norm."""
    test, _, _ = MatrixFactorizationDataGenerator(5, 5, 3, seed=2).low_rank(shift=0.5)
    assert (test < 0).any()

    amf = AMF(SimpleToleranceTermination(),
              RandomInitialization(random_state=0),
              SVDBatchLearning(SVDBatchConfig(learning_rate=0.1, kw=0.001, kh=0.001, momentum=0.0)))
    W, H, _ = amf.apply(test, 3)

    result = W @ H
    assert np.linalg.norm(result, "fro") == pytest.approx(np.linalg.norm(test, "fro"), rel=0.09)


def test_fixed_start_is_deterministic():
    V = MatrixFactorizationDataGenerator(30, 25, 2, seed=4).sparse_random(0.3)
    rng = np.random.default_rng(seed=9)
    sri = GivenInitialization(rng.uniform(size=(30, 2)), rng.uniform(size=(2, 25)))

    runs = [AMF(MaxIterationTermination(50), sri, SVDBatchLearning()).apply(V, 2)
            for _ in range(2)]

    np.testing.assert_allclose(runs[0][0], runs[1][0])
    np.testing.assert_allclose(runs[0][1], runs[1][1])
    assert runs[0][2] == pytest.approx(runs[1][2])


@pytest.mark.parametrize("kwargs", [
    dict(learning_rate=0.0),
    dict(learning_rate=-1.0),
    dict(kw=-0.1),
    dict(kh=-0.1),
    dict(momentum=1.0),
    dict(momentum=-0.2),
])
def test_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        SVDBatchLearning(SVDBatchConfig(**kwargs))
