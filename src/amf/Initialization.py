from typing import Optional, Tuple
import logging
import numpy as np
from numpy.typing import NDArray
import scipy.sparse as sp
from sklearn.utils import check_random_state
from .BaseConfig import RandomState
from .utils import MatType, _check_factors, _observed_entries, _validate_rank

logger = logging.getLogger(__name__)

'''
Initialization rules for AMF. Each rule produces fresh W (n x r) and 
H (r x m) factors for a target matrix V (n x m). 
'''

class RandomInitialization:
    '''
    W and H filled with uniform random values in [0, 1). 
    '''
    def __init__(self, random_state: RandomState = None):
        self.random_state = check_random_state(random_state)

    def initialize(self, V: MatType, rank: int) -> Tuple[NDArray, NDArray]:
        rank = _validate_rank(rank)
        n, m = V.shape
        W = self.random_state.uniform(size=(n, rank))
        H = self.random_state.uniform(size=(rank, m))
        return W, H


class AverageInitialization:
    '''
    Random uniform factors shifted by sqrt((mean(V) - min(V)) / r), so that 
    W @ H starts close to the average value of V. Mean and minimum are taken 
    over all n * m cells, so unobserved cells of a sparse V count as zeros. 
    '''
    def __init__(self, random_state: RandomState = None):
        self.random_state = check_random_state(random_state)

    def initialize(self, V: MatType, rank: int) -> Tuple[NDArray, NDArray]:
        rank = _validate_rank(rank)
        n, m = V.shape
        _, _, vals = _observed_entries(V)
        if len(vals) == 0:
            shift = 0.0
        else:
            low = vals.min() if len(vals) == n * m else min(vals.min(), 0.0)
            # Rounding can leave the mean a hair below the minimum
            shift = np.sqrt(max(vals.sum() / (n * m) - low, 0.0) / rank)
        logger.debug("AverageInitialization shift: %.6f", shift)

        W = self.random_state.uniform(size=(n, rank)) + shift
        H = self.random_state.uniform(size=(rank, m)) + shift
        return W, H


class GivenInitialization:
    '''
    Returns copies of caller-supplied factors, e.g. to start several runs 
    from the same point. A factor that is not given is drawn uniformly. 
    '''
    def __init__(self, W: Optional[NDArray] = None, H: Optional[NDArray] = None,
                 random_state: RandomState = None):
        if W is None and H is None:
            raise ValueError("At least one of W, H must be given.")
        self.W = None if W is None else np.array(W, dtype=float)
        self.H = None if H is None else np.array(H, dtype=float)
        self.random_state = check_random_state(random_state)

    def initialize(self, V: MatType, rank: int) -> Tuple[NDArray, NDArray]:
        rank = _validate_rank(rank)
        n, m = V.shape
        W = self.W.copy() if self.W is not None else self.random_state.uniform(size=(n, rank))
        H = self.H.copy() if self.H is not None else self.random_state.uniform(size=(rank, m))
        _check_factors(V, rank, W, H)
        return W, H


class RandomAcolInitialization:
    '''
    Each column of W is the average of `columns` randomly chosen columns 
    of V; H is uniform random. 
    '''
    def __init__(self, columns: int = 5, random_state: RandomState = None):
        if columns < 1:
            raise ValueError(f"columns must be positive, got {columns}")
        self.columns = columns
        self.random_state = check_random_state(random_state)

    def initialize(self, V: MatType, rank: int) -> Tuple[NDArray, NDArray]:
        rank = _validate_rank(rank)
        n, m = V.shape
        if self.columns > m:
            raise ValueError(
                f"Cannot average {self.columns} columns of a matrix with {m} columns.")

        W = np.empty((n, rank))
        for k in range(rank):
            picked = self.random_state.randint(0, m, size=self.columns)
            cols = V[:, picked]
            if sp.issparse(cols):
                W[:, k] = np.asarray(cols.mean(axis=1)).ravel()
            else:
                W[:, k] = cols.mean(axis=1)
        H = self.random_state.uniform(size=(rank, m))
        return W, H
