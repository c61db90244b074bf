from typing import Optional
import logging
import numpy as np
from numpy.typing import NDArray
import scipy.sparse as sp
from .BaseConfig import SVDBatchConfig
from .utils import MatType, _observed_entries, _residual, _validate_rank

logger = logging.getLogger(__name__)

'''
Batch gradient descent for the regularized SVD objective 

    sum_{(i,j) observed} (V_ij - W_i . H_j)^2 + kw ||W||^2 + kh ||H||^2 

with classical momentum. W is updated first, then H from the new W. 
'''

class SVDBatchLearning:
    '''
    Update rule for AMF. Every iteration accumulates the gradient over all 
    observed entries of V before touching the factors. For dense V every 
    entry is observed; for sparse V only the stored nonzeros are. 
    '''
    def __init__(self, config: Optional[SVDBatchConfig] = None):
        cfg = config if config is not None else SVDBatchConfig()
        if cfg.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {cfg.learning_rate}")
        if cfg.kw < 0 or cfg.kh < 0:
            raise ValueError(f"Regularization must be non-negative, got kw={cfg.kw}, kh={cfg.kh}")
        if not 0 <= cfg.momentum < 1:
            raise ValueError(f"momentum must be in [0, 1), got {cfg.momentum}")
        self.config = cfg
        self.mW = None
        self.mH = None
        self._entries = None

    def initialize(self, V: MatType, rank: int):
        rank = _validate_rank(rank)
        n, m = V.shape
        self.mW = np.zeros((n, rank))
        self.mH = np.zeros((rank, m))
        # Observed entries do not change during a run
        self._entries = _observed_entries(V) if sp.issparse(V) else None
        logger.debug("SVDBatchLearning on %s %s matrix, rank %d.",
                     "sparse" if self._entries is not None else "dense", V.shape, rank)

    def w_update(self, V: MatType, W: NDArray, H: NDArray):
        cfg = self.config
        R = _residual(V, W, H, self._entries)
        deltaW = np.asarray(R @ H.T)
        if cfg.kw != 0:
            deltaW -= cfg.kw * W

        self.mW *= cfg.momentum
        self.mW += cfg.learning_rate * deltaW
        W += self.mW

    def h_update(self, V: MatType, W: NDArray, H: NDArray):
        cfg = self.config
        R = _residual(V, W, H, self._entries)
        deltaH = np.asarray((R.T @ W).T)
        if cfg.kh != 0:
            deltaH -= cfg.kh * H

        self.mH *= cfg.momentum
        self.mH += cfg.learning_rate * deltaH
        H += self.mH
