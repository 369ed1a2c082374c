"""
Module for extracting distribution parameters from reported percentiles.
"""

import numpy as np
from scipy.optimize import minimize
from scipy.special import gamma
from scipy.stats import norm

from ._base import DelayDistribution
from ._convert import ConvergenceError, InvalidInputError, gamma_meansd_to_shapescale


def extract_param(values, percentiles, distribution, options=None):
    """
    Finds the parameters of a distribution whose percentiles match reported values,
    e.g. the 2.5th and 97.5th percentiles of an incubation period reported in a study.

    The sum of squared differences between the distribution quantiles and the values
    is minimised using the Nelder-Mead method over the logarithm of the parameters
    (the lognormal meanlog is left untransformed).

    Parameters
    ----------
    values : sequence of float
        Two reported quantile values, strictly increasing and positive.
    percentiles : sequence of float
        Percentiles corresponding to values, expressed as proportions strictly between
        0 and 1 and strictly increasing.
    distribution : str
        Distribution family. One of "lnorm", "gamma" or "weibull".
    options : dict, optional
        Dictionary of options. Default options are used for any options not provided.
        Available option keys and defaults are as follows:
        "xatol": Absolute parameter tolerance for convergence. Default is 1e-8.
        "fatol": Absolute objective tolerance for convergence. Default is 1e-12.
        "max_iter": Maximum number of optimiser iterations. Default is 2000.
        "print_progress": Whether to print the optimiser result. Default is False.

    Returns
    -------
    dict
        Fitted parameters, with keys "meanlog" and "sdlog" for "lnorm", and "shape"
        and "scale" otherwise.
    """
    values = np.asarray(values, dtype=float)
    percentiles = np.asarray(percentiles, dtype=float)
    if distribution not in ["lnorm", "gamma", "weibull"]:
        raise InvalidInputError(f"Unknown distribution '{distribution}'")
    if values.shape != (2,) or percentiles.shape != (2,):
        raise InvalidInputError("Exactly two values and two percentiles are required")
    if np.any(values <= 0) or values[1] <= values[0]:
        raise InvalidInputError("Values must be positive and strictly increasing")
    if np.any(percentiles <= 0) or np.any(percentiles >= 1):
        raise InvalidInputError("Percentiles must lie strictly between 0 and 1")
    if percentiles[1] <= percentiles[0]:
        raise InvalidInputError("Percentiles must be strictly increasing")
    # Parse options
    options_in = options or {}
    options = {
        "xatol": 1e-8,
        "fatol": 1e-12,
        "max_iter": 2000,
        "print_progress": False,
    }
    options.update(options_in)

    def _objective(x):
        params = _params_from_optim(x, distribution)
        quantiles = DelayDistribution(distribution, params).ppf(percentiles)
        return np.sum((quantiles - values) ** 2)

    x0 = _initial_guess(values, percentiles, distribution)
    result = minimize(
        _objective,
        x0,
        method="Nelder-Mead",
        options={
            "xatol": options["xatol"],
            "fatol": options["fatol"],
            "maxiter": options["max_iter"],
        },
    )
    if options["print_progress"]:
        print(
            "Optimisation finished after",
            result.nit,
            "iterations. Sum of squared errors =",
            result.fun,
        )
    if not result.success:
        raise ConvergenceError(
            f"Failed to extract {distribution} parameters: {result.message}"
        )
    return _params_from_optim(result.x, distribution)


def _params_from_optim(x, distribution):
    # Maps optimiser coordinates to named distribution parameters
    if distribution == "lnorm":
        return {"meanlog": x[0], "sdlog": np.exp(x[1])}
    return {"shape": np.exp(x[0]), "scale": np.exp(x[1])}


def _initial_guess(values, percentiles, distribution):
    # Starting point from the lognormal matching the two quantiles exactly, mapped to
    # the other families through its mean and standard deviation
    z = norm.ppf(percentiles)
    log_values = np.log(values)
    sdlog = (log_values[1] - log_values[0]) / (z[1] - z[0])
    meanlog = log_values[0] - sdlog * z[0]
    if distribution == "lnorm":
        return np.array([meanlog, np.log(sdlog)])
    mean = np.exp(meanlog + 0.5 * sdlog**2)
    sd = mean * np.sqrt(np.exp(sdlog**2) - 1)
    if distribution == "gamma":
        shape_scale = gamma_meansd_to_shapescale(mean, sd)
        return np.log([shape_scale["shape"], shape_scale["scale"]])
    # Empirical approximation to the Weibull shape for a given coefficient of variation
    shape = (sd / mean) ** -1.086
    scale = mean / gamma(1 + 1 / shape)
    return np.log([shape, scale])
