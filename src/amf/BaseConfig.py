from dataclasses import dataclass
from typing import Optional, Union, Literal
import numpy as np

TerminationStatus = Literal["running", "tolerance", "patience", "max_iterations"]
RandomState = Union[None, int, np.random.RandomState]

'''
Base data classes that hold the parameters of the factorization 
driver and of its policies. 
'''

@dataclass
class BaseConfig:
    rank: Optional[int] = None
    random_state: RandomState = None

@dataclass
class AMFConfig(BaseConfig):
    log_every: int = 100 # Log the residue every log_every iterations at INFO

@dataclass
class TerminationConfig:
    tolerance: float = 1e-5
    max_iterations: int = 10000
    reverse_step_tolerance: int = 3 # Consecutive non-improving steps before stopping 

@dataclass
class SVDBatchConfig:
    learning_rate: float = 0.0002
    kw: float = 0.0 # Regularization on W (users)
    kh: float = 0.0 # Regularization on H (items)
    momentum: float = 0.9
