"""Python package for epidemiological delay distribution parameters"""

from ._base import (  # noqa: F401
    DELAY_DISTS,
    DelayDistribution,
    DiscreteDelayDistribution,
    ParameterTable,
    discretise_delay_distrib,
    epidist,
    list_distributions,
    load_parameter_table,
    pathogen_summary,
)
from ._convert import (  # noqa: F401
    ConvergenceError,
    InvalidInputError,
    NumericalApproximationWarning,
    convert_params,
    gamma_meansd_to_shapescale,
    gamma_shapescale_to_meansd,
    lnorm_meansd_to_musigma,
    lnorm_musigma_to_meansd,
    weibull_meansd_to_shapescale,
    weibull_shapescale_to_meansd,
    weibull_shapescale_to_meansd_standard,
)
from ._extract import extract_param  # noqa: F401
