from numpy.typing import NDArray
from .BaseConfig import TerminationConfig
from .TerminationPolicy import TerminationPolicy
from .utils import MatType, _observed_entries, _rmse_entries

class MaxIterationTermination(TerminationPolicy):
    '''
    Runs exactly `max_iterations` iterations. The index is still the RMSE 
    over observed entries, so runs can be compared. 
    '''
    def __init__(self, max_iterations: int = 1000):
        super().__init__(TerminationConfig(tolerance=0.0, max_iterations=max_iterations))
        self._entries = None

    def initialize(self, V: MatType) -> MatType:
        self._entries = _observed_entries(V)
        return super().initialize(V)

    def _error(self, W: NDArray, H: NDArray) -> float:
        return _rmse_entries(*self._entries, W, H)

    def is_converged(self, W: NDArray, H: NDArray) -> bool:
        if self._status != "running":
            return True
        self._residue_old = self._residue
        self._residue = self._error(W, H)
        self._iteration += 1
        if self._iteration >= self.config.max_iterations:
            self._status = "max_iterations"
            return True
        return False
