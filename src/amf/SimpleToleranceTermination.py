from typing import Optional
from numpy.typing import NDArray
from .BaseConfig import TerminationConfig
from .TerminationPolicy import TerminationPolicy
from .utils import MatType, _observed_entries, _rmse_entries

class SimpleToleranceTermination(TerminationPolicy):
    '''
    Stops when the RMSE of W @ H over the observed entries of V stops 
    improving by more than `tolerance` (relative), or after `max_iterations`. 
    '''
    converged_status = "tolerance"

    def __init__(self, config: Optional[TerminationConfig] = None):
        super().__init__(config)
        self._entries = None

    def initialize(self, V: MatType) -> MatType:
        self._entries = _observed_entries(V)
        return super().initialize(V)

    def _error(self, W: NDArray, H: NDArray) -> float:
        return _rmse_entries(*self._entries, W, H)
