import logging

import numpy as np
import pandas as pd

from amf import (
    AMF,
    GivenInitialization,
    MatrixFactorizationDataGenerator,
    SVDBatchConfig,
    SVDBatchLearning,
    TerminationConfig,
    ValidationRMSETermination,
)

SETTINGS = {
    'plain': SVDBatchConfig(learning_rate=0.0009, momentum=0.0),
    'momentum': SVDBatchConfig(learning_rate=0.0009, momentum=0.8),
    'regularized_momentum': SVDBatchConfig(learning_rate=0.0009, kw=0.5, kh=0.5, momentum=0.8),
}

def main(): 
    logging.basicConfig(level=logging.INFO)
    results = momentum_test(n=200, m=150, rank=2, num_repetitions=3)
    print(results.groupby('method')[['rmse', 'iterations']].mean())
    results.to_csv('momentum_demo.csv', index=False)


def momentum_test(n, m, rank, 
                  num_repetitions=5, 
                  densities=None, # Fractions of observed ratings 
                  sigma=0.2, # additive noise standard deviation 
                  num_test_points=200, 
                  verbose=False):
    '''
    Runs every update setting from the same starting point on synthetic 
    rating matrices of different densities. 
    '''
    if densities is None:
        densities = [0.05, 0.1, 0.2]

    results = []
    for density in densities:
        for rep in range(num_repetitions):
            seed = int(density * 10000) + rep
            V = MatrixFactorizationDataGenerator(n, m, rank, seed=seed, sigma=sigma).ratings(density)

            rng = np.random.default_rng(seed)
            sri = GivenInitialization(rng.uniform(size=(n, rank)), rng.uniform(size=(rank, m)))
            vrt = ValidationRMSETermination(V, num_test_points, 
                                            TerminationConfig(max_iterations=3000), 
                                            random_state=seed)

            for method, cfg in SETTINGS.items():
                amf = AMF(vrt, sri, SVDBatchLearning(cfg))
                _, _, validation_rmse = amf.apply(V, rank)
                results.append({
                    'method': method,
                    'rmse': validation_rmse,
                    'iterations': amf.iteration,
                    'status': vrt.status,
                    'repetition': rep,
                    'seed': seed,
                    'density': density,
                })

            if verbose:
                print(f'Finished density={density}, rep={rep}')

    return pd.DataFrame(results)


if __name__ == '__main__':
    main()
