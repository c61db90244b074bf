import logging
import numpy as np
import pandas as pd
import scipy.sparse as sp
from sklearn.utils import check_random_state

logger = logging.getLogger(__name__)

class MatrixFactorizationDataGenerator:
    '''
    Generator for matrix factorization experiments.
    
    This class produces low-rank targets, sparse random matrices and 
    synthetic rating matrices with a controlled observation density.
    '''
    def __init__(self, n, m, d, seed=0, sigma=0.0):
        """Initialize generator with matrix dimensions and noise level.
        
        Args:
            n (int): Number of rows (users)
            m (int): Number of columns (items)
            d (int): Rank of the generated low-rank matrices
            seed (int): Random seed (default: 0)
            sigma (float): Standard deviation of Gaussian noise added to 
                           observed entries (default: 0.0)
        """
        if d < 1 or d > min(n, m):
            raise ValueError(f"Bad rank: {d}. Must be in [1, {min(n, m)}].")
        self.n = n
        self.m = m
        self.d = d
        self.seed = seed
        self.sigma = sigma
        self.rng = check_random_state(seed)

    def low_rank(self, shift=0.0):
        """Generate a rank-d matrix as the product of two uniform factors.
        
        Args:
            shift (float): Value subtracted from every factor entry, e.g. 0.5 
                           to get factors (and products) with negative entries
            
        Returns:
            tuple: (V, left, right) where V = left @ right
        """
        left = self.rng.uniform(size=(self.n, self.d)) - shift
        right = self.rng.uniform(size=(self.d, self.m)) - shift
        return left @ right, left, right

    def sparse_random(self, density):
        """Sparse n x m matrix with standard normal nonzeros at the given density."""
        k = int(round(density * self.n * self.m))
        flat = self.rng.choice(self.n * self.m, size=k, replace=False)
        rows, cols = np.unravel_index(flat, (self.n, self.m))
        return sp.csr_matrix((self.rng.standard_normal(k), (rows, cols)),
                             shape=(self.n, self.m))

    def generate_mask(self, p_entry):
        """Missing-completely-at-random mask, each entry kept with probability p_entry."""
        return self.rng.uniform(size=(self.n, self.m)) < p_entry

    def ratings(self, density, low=1, high=5):
        """Generate a sparse rating matrix from a noisy low-rank model.
        
        Args:
            density (float): Fraction of observed entries
            low (int): Lowest rating (default: 1)
            high (int): Highest rating (default: 5)
            
        Returns:
            scipy.sparse.csr_matrix: Observed ratings, integers in [low, high]
        """
        V, _, _ = self.low_rank()
        if self.sigma > 0:
            V = V + self.rng.normal(0, self.sigma, size=V.shape)

        # Rescale to the rating range before rounding
        V = (V - V.min()) / max(V.max() - V.min(), 1e-12)
        R = np.rint(low + V * (high - low))

        mask = self.generate_mask(density)
        rows, cols = np.nonzero(mask)
        return sp.csr_matrix((R[rows, cols], (rows, cols)), shape=(self.n, self.m))


def ratings_matrix(users, items, values, shape=None):
    '''
    Sparse (users x items) matrix from parallel arrays of ids and values. 
    The shape defaults to (max user id + 1, max item id + 1). 
    '''
    users = np.asarray(users, dtype=np.int64)
    items = np.asarray(items, dtype=np.int64)
    values = np.asarray(values, dtype=float)
    if not (len(users) == len(items) == len(values)):
        raise ValueError("users, items and values must have the same length.")
    if len(users) and (users.min() < 0 or items.min() < 0):
        raise ValueError("User and item ids must be non-negative.")
    if shape is None:
        shape = (int(users.max()) + 1 if len(users) else 0,
                 int(items.max()) + 1 if len(items) else 0)
    return sp.csr_matrix((values, (users, items)), shape=shape)


def load_ratings(path, delimiter=","):
    '''
    Read a headerless `user, item, rating` file into a sparse matrix. 
    '''
    frame = pd.read_csv(path, sep=delimiter, header=None, comment="#")
    if frame.shape[1] < 3:
        raise ValueError(f"{path}: expected at least three columns, got {frame.shape[1]}")
    if frame.shape[1] > 3:
        logger.warning("%s: ignoring %d extra columns.", path, frame.shape[1] - 3)
    frame = frame.iloc[:, :3].dropna()
    return ratings_matrix(frame.iloc[:, 0].astype(np.int64),
                          frame.iloc[:, 1].astype(np.int64),
                          frame.iloc[:, 2].astype(float))
