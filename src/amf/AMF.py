from typing import Optional, Tuple
import logging
import numpy as np
from numpy.typing import NDArray
from .BaseConfig import AMFConfig
from .Initialization import RandomAcolInitialization
from .MatrixCompletionSolver import MatrixCompletionSolver
from .NMFUpdate import NMFMultiplicativeDistanceUpdate
from .SimpleToleranceTermination import SimpleToleranceTermination
from .utils import MatType, _check_factors, _validate_matrix, _validate_rank

logger = logging.getLogger(__name__)

'''
Alternating matrix factorization: V ~ W @ H, driven by three 
interchangeable policies. 

    termination_policy  : initialize(V) -> data, is_converged(W, H) -> bool 
    initialization_rule : initialize(data, rank) -> (W, H) 
    update_rule         : initialize(data, rank), w_update / h_update(data, W, H) 
'''

class AMF(MatrixCompletionSolver):
    '''
    Factorization driver. Defaults reproduce plain NMF: random-column 
    initialization, multiplicative distance updates and a tolerance stop. 
    '''
    def __init__(self,
                 termination_policy=None,
                 initialization_rule=None,
                 update_rule=None,
                 config: Optional[AMFConfig] = None):
        super().__init__(config if config is not None else AMFConfig())
        cfg: AMFConfig = self.config  # type: ignore
        self.termination_policy = termination_policy or SimpleToleranceTermination()
        self.initialization_rule = initialization_rule or RandomAcolInitialization(
            random_state=cfg.random_state)
        self.update_rule = update_rule or NMFMultiplicativeDistanceUpdate()
        self.W = None
        self.H = None
        self.residue = None
        self.iteration = None

    def apply(self, V: MatType, rank: int) -> Tuple[NDArray, NDArray, float]:
        '''
        Factorize V with the given rank. Returns (W, H, residue) where 
        residue is the last error computed by the termination policy. 
        '''
        rank = _validate_rank(rank)
        V = _validate_matrix(V)

        data = self.termination_policy.initialize(V)
        W, H = self.initialization_rule.initialize(data, rank)
        W = np.array(W, dtype=float)
        H = np.array(H, dtype=float)
        _check_factors(data, rank, W, H)
        self.update_rule.initialize(data, rank)

        cfg: AMFConfig = self.config  # type: ignore
        policy = self.termination_policy
        while not policy.is_converged(W, H):
            self.update_rule.w_update(data, W, H)
            self.update_rule.h_update(data, W, H)
            if cfg.log_every and policy.iteration % cfg.log_every == 0:
                logger.info("Iteration %d; residue %.6f.", policy.iteration, policy.index)

        self.residue = policy.index
        self.iteration = policy.iteration
        logger.info("AMF converged to residue of %.6f in %d iterations (%s).",
                    self.residue, self.iteration, policy.status)
        return W, H, self.residue

    def fit(self, V: MatType):
        cfg: AMFConfig = self.config  # type: ignore
        if cfg.rank is None:
            raise ValueError("config.rank must be set to call fit().")
        self.W, self.H, _ = self.apply(V, cfg.rank)
        self._fitted = True
        return self

    def predict(self, *, clip: Optional[Tuple[float, float]] = None) -> NDArray:
        self._check_fitted()
        Y = self.W @ self.H
        if clip is not None:
            Y = np.clip(Y, *clip)
        return Y
