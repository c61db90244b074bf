from typing import Optional, Tuple
from numpy.typing import NDArray
from .BaseConfig import BaseConfig
from .utils import MatType

'''
Base class for factorization solvers. A solver is fitted on a target 
matrix V once; predict() then returns the reconstruction W @ H. 
'''

class MatrixCompletionSolver:
    """Fits low-rank factors to a dense or sparse V and reconstructs it."""
    def __init__(self, config: Optional[BaseConfig] = None):
        self.config = config if config is not None else BaseConfig()
        self._fitted = False

    def fit(self, V: MatType):
        raise NotImplementedError

    def predict(self, *, clip: Optional[Tuple[float, float]] = None) -> NDArray:
        raise NotImplementedError

    def _check_fitted(self):
        if not self._fitted:
            raise RuntimeError("Call fit() before predict() on the factorization.")
