from typing import Optional
import logging
import numpy as np
from numpy.typing import NDArray
import scipy.sparse as sp
from sklearn.utils import check_random_state
from .BaseConfig import RandomState, TerminationConfig
from .TerminationPolicy import TerminationPolicy
from .utils import MatType, _observed_entries, _rmse_entries, _validate_matrix

logger = logging.getLogger(__name__)

class ValidationRMSETermination(TerminationPolicy):
    '''
    Holds out `num_test_points` observed entries of V at construction and 
    stops once the RMSE on them has not improved for 
    `reverse_step_tolerance` consecutive iterations (the patience window), 
    or after `max_iterations`. 

    V is never modified: the factorization is fitted on `train_data`, a 
    sparse copy of V without the held-out entries, which `initialize` 
    hands back to the driver. 
    '''
    converged_status = "patience"

    def __init__(self, V: MatType, num_test_points: int,
                 config: Optional[TerminationConfig] = None,
                 random_state: RandomState = None):
        super().__init__(config)
        V = sp.csr_matrix(_validate_matrix(V))
        rows, cols, vals = _observed_entries(V)
        if not 1 <= num_test_points < len(vals):
            raise ValueError(
                f"num_test_points must be in [1, {len(vals)}), got {num_test_points}")

        rng = check_random_state(random_state)
        held = rng.choice(len(vals), size=num_test_points, replace=False)
        keep = np.ones(len(vals), dtype=bool)
        keep[held] = False

        self.test_points = (rows[held], cols[held], vals[held])
        self.train_data = sp.csr_matrix((vals[keep], (rows[keep], cols[keep])), shape=V.shape)
        self.num_test_points = num_test_points
        logger.info("Held out %d of %d observed entries for validation.",
                    num_test_points, len(vals))

    def initialize(self, V: MatType) -> MatType:
        if V.shape != self.train_data.shape:
            raise ValueError(
                f"V has shape {V.shape} but the validation split was built for "
                f"{self.train_data.shape}")
        super().initialize(V)
        return self.train_data

    def _error(self, W: NDArray, H: NDArray) -> float:
        return _rmse_entries(*self.test_points, W, H)
