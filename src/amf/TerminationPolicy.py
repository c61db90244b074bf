from typing import Optional
import logging
import numpy as np
from numpy.typing import NDArray
from .BaseConfig import TerminationConfig, TerminationStatus
from .utils import MatType, _relative_improvement

logger = logging.getLogger(__name__)

'''
Base termination policy. Subclasses define the error measured at each 
check; this class owns the iteration counter and the reverse-step logic. 
'''

class TerminationPolicy:
    """
    A check whose relative improvement (old - new) / old falls below 
    `tolerance` after the fourth iteration is a reverse step. The factors 
    are saved at the first step of a run of reverse steps and restored when 
    `reverse_step_tolerance` consecutive reverse steps stop the run. 
    Reaching `max_iterations` stops the run with the current factors. 
    """
    converged_status: TerminationStatus = "tolerance"

    def __init__(self, config: Optional[TerminationConfig] = None):
        cfg = config if config is not None else TerminationConfig()
        if cfg.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {cfg.tolerance}")
        if cfg.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {cfg.max_iterations}")
        if cfg.reverse_step_tolerance < 1:
            raise ValueError(
                f"reverse_step_tolerance must be positive, got {cfg.reverse_step_tolerance}")
        self.config = cfg
        self._reset()

    def _reset(self):
        self._iteration = 0
        self._residue = np.inf
        self._residue_old = np.inf
        self._reverse_steps = 0
        self._saved = None # (W, H, residue) at the first reverse step
        self._status: TerminationStatus = "running"

    def initialize(self, V: MatType) -> MatType:
        '''
        Reset for a new run and return the matrix the update rule should fit. 
        '''
        self._reset()
        return V

    def _error(self, W: NDArray, H: NDArray) -> float:
        raise NotImplementedError

    def is_converged(self, W: NDArray, H: NDArray) -> bool:
        if self._status != "running":
            return True
        cfg = self.config
        self._residue_old = self._residue
        self._residue = self._error(W, H)
        self._iteration += 1

        improvement = _relative_improvement(self._residue_old, self._residue)
        logger.debug("Iteration %d; residue %.8f; improvement %.3e.",
                     self._iteration, self._residue, improvement)

        if self._iteration > 4 and improvement < cfg.tolerance:
            if self._reverse_steps == 0 and self._saved is None:
                self._saved = (W.copy(), H.copy(), self._residue)
            self._reverse_steps += 1
        else:
            self._reverse_steps = 0
            if self._saved is not None and self._residue <= self._saved[2]:
                self._saved = None

        if self._reverse_steps >= cfg.reverse_step_tolerance:
            self._status = self.converged_status
        elif self._iteration >= cfg.max_iterations:
            self._status = "max_iterations"
        else:
            return False

        if self._saved is not None:
            W[...] = self._saved[0]
            H[...] = self._saved[1]
            self._residue = self._saved[2]
            self._saved = None
        return True

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def max_iterations(self) -> int:
        return self.config.max_iterations

    @property
    def index(self) -> float:
        '''Last error value computed by the policy.'''
        return self._residue

    @property
    def status(self) -> TerminationStatus:
        return self._status
