'''
amf
===

Alternating matrix factorization V ~ W @ H, composed from interchangeable 
initialization, update and termination policies. Dense numpy arrays and 
scipy.sparse matrices are both accepted as V. 

Example
-------
>>> from amf import AMF, SimpleToleranceTermination, AverageInitialization, SVDBatchLearning
>>> amf = AMF(SimpleToleranceTermination(), AverageInitialization(), SVDBatchLearning())
>>> W, H, residue = amf.apply(V, 2)
'''

from .AMF import AMF
from .BaseConfig import AMFConfig, BaseConfig, SVDBatchConfig, TerminationConfig
from .Initialization import (
    AverageInitialization,
    GivenInitialization,
    RandomAcolInitialization,
    RandomInitialization,
)
from .MatrixCompletionSolver import MatrixCompletionSolver
from .MatrixFactorizationDataGenerator import (
    MatrixFactorizationDataGenerator,
    load_ratings,
    ratings_matrix,
)
from .MaxIterationTermination import MaxIterationTermination
from .NMFUpdate import NMFALSUpdate, NMFMultiplicativeDistanceUpdate
from .SimpleToleranceTermination import SimpleToleranceTermination
from .SVDBatchLearning import SVDBatchLearning
from .TerminationPolicy import TerminationPolicy
from .ValidationRMSETermination import ValidationRMSETermination
from .utils import frob_error, rmse

__all__ = [
    "AMF",
    "AMFConfig",
    "BaseConfig",
    "SVDBatchConfig",
    "TerminationConfig",
    "AverageInitialization",
    "GivenInitialization",
    "RandomAcolInitialization",
    "RandomInitialization",
    "MatrixCompletionSolver",
    "MatrixFactorizationDataGenerator",
    "load_ratings",
    "ratings_matrix",
    "MaxIterationTermination",
    "NMFALSUpdate",
    "NMFMultiplicativeDistanceUpdate",
    "SimpleToleranceTermination",
    "SVDBatchLearning",
    "TerminationPolicy",
    "ValidationRMSETermination",
    "frob_error",
    "rmse",
]

import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
