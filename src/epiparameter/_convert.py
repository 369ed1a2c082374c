"""
Module containing functions for converting between summary statistics (mean and
standard deviation) and the standard parameterisations of delay distributions.
"""

import warnings

import numpy as np
from scipy.optimize import brentq
from scipy.special import gamma

# Interval searched for the Weibull shape parameter when inverting mean and sd
WEIBULL_SHAPE_INTERVAL = (0.1, 1000)

# Exceptions and warnings


class InvalidInputError(ValueError):
    """
    Raised when a conversion is given parameter values outside its domain.
    """


class ConvergenceError(RuntimeError):
    """
    Raised when a numerical solver fails to find distribution parameters.
    """


class NumericalApproximationWarning(UserWarning):
    """
    Issued when distribution parameters are obtained by numerical approximation
    rather than an exact inverse.
    """


def _check_positive(**kwargs):
    # Raises InvalidInputError if any of the supplied values is not strictly positive
    for name, val in kwargs.items():
        if not val > 0:
            raise InvalidInputError(f"'{name}' must be positive, got {val}")


def _check_non_negative(**kwargs):
    for name, val in kwargs.items():
        if not val >= 0:
            raise InvalidInputError(f"'{name}' must be non-negative, got {val}")


# Lognormal distribution


def lnorm_musigma_to_meansd(mu, sigma):
    """
    Converts the mu (mean log) and sigma (standard deviation log) parameters of the
    lognormal distribution to the mean and standard deviation.

    Parameters
    ----------
    mu : float
        Mean of the natural logarithm of the distribution.
    sigma : float
        Standard deviation of the natural logarithm of the distribution.

    Returns
    -------
    dict
        Dictionary with keys "mean" and "sd".
    """
    _check_non_negative(sigma=sigma)
    mean = np.exp(mu + 0.5 * sigma**2)
    sd = mean * np.sqrt(np.exp(sigma**2) - 1)
    return {"mean": mean, "sd": sd}


def lnorm_meansd_to_musigma(mean, sd):
    """
    Converts the mean and standard deviation of a lognormal distribution to the mu
    (mean log) and sigma (standard deviation log) parameters.

    Parameters
    ----------
    mean : float
        Mean of the distribution.
    sd : float
        Standard deviation of the distribution.

    Returns
    -------
    dict
        Dictionary with keys "mu" and "sigma".
    """
    _check_positive(mean=mean)
    _check_non_negative(sd=sd)
    sigma = np.sqrt(np.log(sd**2 / mean**2 + 1))
    mu = np.log(mean**2 / np.sqrt(sd**2 + mean**2))
    return {"mu": mu, "sigma": sigma}


# Gamma distribution


def gamma_shapescale_to_meansd(shape, scale):
    """
    Converts the shape and scale parameters of the gamma distribution to the mean and
    standard deviation.

    Parameters
    ----------
    shape : float
        Shape parameter of the gamma distribution.
    scale : float
        Scale parameter of the gamma distribution.

    Returns
    -------
    dict
        Dictionary with keys "mean" and "sd".
    """
    _check_positive(shape=shape, scale=scale)
    mean = shape * scale
    sd = np.sqrt(shape) * scale
    return {"mean": mean, "sd": sd}


def gamma_meansd_to_shapescale(mean, sd):
    """
    Converts the mean and standard deviation of the gamma distribution to the shape
    and scale parameters.

    Parameters
    ----------
    mean : float
        Mean of the gamma distribution. Must be positive.
    sd : float
        Standard deviation of the gamma distribution. Must be positive.

    Returns
    -------
    dict
        Dictionary with keys "shape" and "scale".
    """
    if sd == 0:
        raise InvalidInputError("'sd' must be non-zero to compute the gamma shape")
    _check_positive(mean=mean, sd=sd)
    shape = mean**2 / sd**2
    scale = sd**2 / mean
    return {"shape": shape, "scale": scale}


# Weibull distribution


def weibull_shapescale_to_meansd(shape, scale):
    """
    Converts the shape and scale parameters of the Weibull distribution to the mean
    and standard deviation.

    The standard deviation is computed as
    sqrt(scale^2 * (gamma(1 + 2/shape) - gamma(1 + 1/shape))^2), which is the formula
    used to produce previously recorded outputs. It is not the textbook Weibull
    variance; see weibull_shapescale_to_meansd_standard for that.

    Parameters
    ----------
    shape : float
        Shape parameter of the Weibull distribution.
    scale : float
        Scale parameter of the Weibull distribution.

    Returns
    -------
    dict
        Dictionary with keys "mean" and "sd".
    """
    _check_positive(shape=shape, scale=scale)
    mean = scale * gamma(1 + 1 / shape)
    sd = np.sqrt(scale**2 * (gamma(1 + 2 / shape) - gamma(1 + 1 / shape)) ** 2)
    return {"mean": mean, "sd": sd}


def weibull_shapescale_to_meansd_standard(shape, scale):
    """
    Converts the shape and scale parameters of the Weibull distribution to the mean
    and standard deviation using the standard variance identity
    scale^2 * (gamma(1 + 2/shape) - gamma(1 + 1/shape)^2).

    Parameters
    ----------
    shape : float
        Shape parameter of the Weibull distribution.
    scale : float
        Scale parameter of the Weibull distribution.

    Returns
    -------
    dict
        Dictionary with keys "mean" and "sd".
    """
    _check_positive(shape=shape, scale=scale)
    mean = scale * gamma(1 + 1 / shape)
    sd = scale * np.sqrt(gamma(1 + 2 / shape) - gamma(1 + 1 / shape) ** 2)
    return {"mean": mean, "sd": sd}


def weibull_meansd_to_shapescale(mean, sd):
    """
    Converts the mean and standard deviation of the Weibull distribution to the shape
    and scale parameters.

    There is no closed form for the shape parameter, so it is found with Brent's
    method on the interval WEIBULL_SHAPE_INTERVAL, using the default scipy tolerances
    (xtol=2e-12, rtol=4 * machine epsilon). A NumericalApproximationWarning is issued
    on every call. The mean is recovered exactly from the returned parameters.

    Parameters
    ----------
    mean : float
        Mean of the Weibull distribution.
    sd : float
        Standard deviation of the Weibull distribution.

    Returns
    -------
    dict
        Dictionary with keys "shape" and "scale".

    Raises
    ------
    InvalidInputError
        If mean or sd is not positive.
    ConvergenceError
        If no root can be bracketed in WEIBULL_SHAPE_INTERVAL or the solver does not
        converge.
    """
    _check_positive(mean=mean, sd=sd)
    warnings.warn(
        "Numerical approximation used, results may be unreliable.",
        NumericalApproximationWarning,
        stacklevel=2,
    )
    var = sd**2

    def _root_fun(k):
        return (var / mean**2) - (gamma(1 + 2 / k) / gamma(1 + 1 / k) ** 2) + 1

    try:
        shape = brentq(_root_fun, *WEIBULL_SHAPE_INTERVAL)
    except (ValueError, RuntimeError) as err:
        raise ConvergenceError(
            "Could not find a Weibull shape parameter in the interval "
            f"{WEIBULL_SHAPE_INTERVAL} for mean={mean}, sd={sd}"
        ) from err
    scale = mean / gamma(1 + 1 / shape)
    return {"shape": shape, "scale": scale}


# Dispatch on distribution family


_NATIVE_KEYS = {
    "lnorm": ("meanlog", "sdlog"),
    "gamma": ("shape", "scale"),
    "weibull": ("shape", "scale"),
}
_TO_MEANSD = {
    "lnorm": lnorm_musigma_to_meansd,
    "gamma": gamma_shapescale_to_meansd,
    "weibull": weibull_shapescale_to_meansd,
}
_FROM_MEANSD = {
    "lnorm": lnorm_meansd_to_musigma,
    "gamma": gamma_meansd_to_shapescale,
    "weibull": weibull_meansd_to_shapescale,
}


def convert_params(distribution, params):
    """
    Converts distribution parameters between the mean and standard deviation and the
    native parameterisation of the given distribution family.

    Parameters
    ----------
    distribution : str
        Distribution family. One of "lnorm", "gamma" or "weibull".
    params : dict
        Either {"mean", "sd"}, in which case the native parameters are returned, or
        the native parameters ({"meanlog", "sdlog"} or {"mu", "sigma"} for "lnorm",
        {"shape", "scale"} otherwise), in which case the mean and standard deviation
        are returned.

    Returns
    -------
    dict
        The alternate parameterisation. Lognormal native parameters are returned with
        keys "meanlog" and "sdlog".
    """
    if distribution not in _NATIVE_KEYS:
        raise InvalidInputError(
            f"Unknown distribution '{distribution}'. Possible values are: "
            + ", ".join(f"'{x}'" for x in _NATIVE_KEYS)
        )
    keys = set(params)
    if keys == {"mean", "sd"}:
        out = _FROM_MEANSD[distribution](params["mean"], params["sd"])
        if distribution == "lnorm":
            out = {"meanlog": out["mu"], "sdlog": out["sigma"]}
        return out
    native_keys = _NATIVE_KEYS[distribution]
    if distribution == "lnorm" and keys == {"mu", "sigma"}:
        return lnorm_musigma_to_meansd(params["mu"], params["sigma"])
    if keys == set(native_keys):
        return _TO_MEANSD[distribution](*(params[x] for x in native_keys))
    raise InvalidInputError(
        f"Invalid parameters {sorted(keys)} for distribution '{distribution}'"
    )
