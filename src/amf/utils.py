# utils.py
from __future__ import annotations
from typing import Tuple, Union
import logging
import numpy as np
from numpy.typing import NDArray
import scipy.sparse as sp

logger = logging.getLogger(__name__)

MatType = Union[NDArray, sp.spmatrix]
Entries = Tuple[NDArray, NDArray, NDArray]

def _validate_matrix(V: MatType) -> MatType:
    if sp.issparse(V):
        if V.ndim != 2:
            raise ValueError(f"V must be two-dimensional, got ndim={V.ndim}")
        V = sp.csr_matrix(V, dtype=float)
    else:
        V = np.asarray(V, dtype=float)
        if V.ndim != 2:
            raise ValueError(f"V must be two-dimensional, got ndim={V.ndim}")
    if V.shape[0] == 0 or V.shape[1] == 0:
        raise ValueError(f"V must be non-empty, got shape {V.shape}")
    return V

def _validate_rank(rank) -> int:
    if isinstance(rank, bool) or not isinstance(rank, (int, np.integer)):
        raise ValueError(f"Bad rank: {rank!r}. Must be positive integer.")
    if rank < 1:
        raise ValueError(f"Bad rank: {rank}. Must be positive integer.")
    return int(rank)

def _check_factors(V: MatType, rank: int, W: NDArray, H: NDArray):
    n, m = V.shape
    if W.shape != (n, rank):
        raise ValueError(f"W must have shape {(n, rank)}, got {W.shape}")
    if H.shape != (rank, m):
        raise ValueError(f"H must have shape {(rank, m)}, got {H.shape}")

def _observed_entries(V: MatType) -> Entries:
    '''
    Observed (row, col, value) triplets of V. Every entry of a dense 
    matrix is observed; for a sparse matrix only stored nonzeros are. 
    '''
    if sp.issparse(V):
        coo = V.tocoo(copy=True)
        coo.sum_duplicates()
        keep = coo.data != 0
        return coo.row[keep], coo.col[keep], coo.data[keep].astype(float)
    V = np.asarray(V, dtype=float)
    rows, cols = np.indices(V.shape)
    return rows.ravel(), cols.ravel(), V.ravel()

def _predict_entries(W: NDArray, H: NDArray, rows: NDArray, cols: NDArray) -> NDArray:
    # row i of W dotted with column j of H, without forming W @ H
    return np.einsum("ij,ji->i", W[rows], H[:, cols])

def _residual(V: MatType, W: NDArray, H: NDArray, entries: Entries = None) -> MatType:
    '''
    V - W @ H restricted to observed entries. Sparse in, sparse out. 
    '''
    if not sp.issparse(V):
        return np.asarray(V, dtype=float) - W @ H
    rows, cols, vals = entries if entries is not None else _observed_entries(V)
    err = vals - _predict_entries(W, H, rows, cols)
    return sp.csr_matrix((err, (rows, cols)), shape=V.shape)

def _rmse_entries(rows: NDArray, cols: NDArray, vals: NDArray, W: NDArray, H: NDArray) -> float:
    if len(vals) == 0:
        return 0.0
    err = vals - _predict_entries(W, H, rows, cols)
    return float(np.sqrt(np.mean(err ** 2)))

def rmse(V: MatType, W: NDArray, H: NDArray) -> float:
    '''
    Root-mean-squared error of W @ H over the observed entries of V. 
    '''
    return _rmse_entries(*_observed_entries(V), W, H)

def frob_error(A: MatType, B: MatType) -> float:
    A = A.toarray() if sp.issparse(A) else np.asarray(A)
    B = B.toarray() if sp.issparse(B) else np.asarray(B)
    return float(np.linalg.norm(A - B, "fro"))

def _relative_improvement(old: float, new: float) -> float:
    if not np.isfinite(old):
        return np.inf
    if old == 0:
        logger.warning("Previous residue is zero; treating step as non-improving.")
        return 0.0
    return (old - new) / old
