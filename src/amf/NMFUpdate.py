import numpy as np
from numpy.typing import NDArray
import scipy.sparse as sp
from .utils import MatType

'''
Non-negative update rules for AMF. Both treat V as fully observed, so 
missing entries of a sparse V act as zeros. 
'''

EPS = 1e-16

def _dense(A) -> NDArray:
    return np.asarray(A.toarray() if sp.issparse(A) else A)


class NMFMultiplicativeDistanceUpdate:
    '''
    Lee & Seung multiplicative rules minimizing ||V - WH||_F. Factors stay 
    non-negative as long as V and the initial factors are. 
    '''
    def initialize(self, V: MatType, rank: int):
        pass

    def w_update(self, V: MatType, W: NDArray, H: NDArray):
        numer = _dense(V @ H.T)
        W *= numer / (W @ (H @ H.T) + EPS)

    def h_update(self, V: MatType, W: NDArray, H: NDArray):
        numer = _dense((V.T @ W).T)
        H *= numer / ((W.T @ W) @ H + EPS)


class NMFALSUpdate:
    '''
    Alternating least squares: each factor is solved exactly with the 
    other one fixed, then negative entries are set to zero. 
    '''
    def initialize(self, V: MatType, rank: int):
        pass

    def w_update(self, V: MatType, W: NDArray, H: NDArray):
        W[:] = _dense(V @ H.T) @ np.linalg.pinv(H @ H.T)
        W[W < 0] = 0.0

    def h_update(self, V: MatType, W: NDArray, H: NDArray):
        H[:] = np.linalg.pinv(W.T @ W) @ _dense((V.T @ W).T)
        H[H < 0] = 0.0
