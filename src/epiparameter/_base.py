"""
Module containing base classes and functions for the epiparameter package.
"""

import functools

import numpy as np
import pandas as pd
from scipy import integrate
from scipy.stats import gamma, lognorm, rv_discrete, weibull_min

from ._convert import convert_params

DELAY_DISTS = [
    "incubation",
    "onset_to_admission",
    "onset_to_death",
    "serial_interval",
    "generation_time",
]
REQUIRED_COLUMNS = [
    "pathogen_id",
    "type_id",
    "study_id",
    "size",
    "distribution",
    "meanlog",
    "sdlog",
    "shape",
    "scale",
    "DOI",
]
STRING_COLUMNS = ["pathogen_id", "type_id", "study_id", "distribution", "DOI"]

# Parameter table


class ParameterTable:
    """
    Class for storing a read-only table of delay distribution parameters from the
    literature, with one record per pathogen, delay distribution type and study.

    Parameters
    ----------
    df : pandas DataFrame
        Table of records with the columns listed in REQUIRED_COLUMNS. Records are
        sorted (case-insensitively) by pathogen, delay distribution type and study.

    Attributes
    ----------
    pathogens : tuple of str
        Pathogens present in the table, in sorted order.
    """

    def __init__(self, df):
        missing = [x for x in REQUIRED_COLUMNS if x not in df.columns]
        if missing:
            raise ValueError(
                "Parameter table is missing required columns: " + ", ".join(missing)
            )
        df = df.astype({x: "string" for x in STRING_COLUMNS})
        for col in ["pathogen_id", "type_id", "distribution"]:
            empty_rows = np.flatnonzero(df[col].isna().to_numpy())
            if len(empty_rows) > 0:
                raise ValueError(
                    f"Parameter table has empty '{col}' values in rows: "
                    + ", ".join(str(x) for x in empty_rows)
                )
        df = df.sort_values(
            ["pathogen_id", "type_id", "study_id"],
            key=lambda col: col.str.lower(),
            kind="stable",
        )
        self._df = df.reset_index(drop=True)
        self.pathogens = tuple(self._df["pathogen_id"].unique())

    def __len__(self):
        return len(self._df)

    def records(self, pathogen=None, delay_dist=None):
        """
        Returns a copy of the records, optionally filtered by pathogen and delay
        distribution type.

        Parameters
        ----------
        pathogen : str, optional
            Pathogen to keep records for.
        delay_dist : str, optional
            Delay distribution type to keep records for.

        Returns
        -------
        pandas DataFrame
            Matching records.
        """
        mask = np.full(len(self._df), True)
        if pathogen is not None:
            mask &= (self._df["pathogen_id"] == pathogen).to_numpy(
                dtype=bool, na_value=False
            )
        if delay_dist is not None:
            mask &= (self._df["type_id"] == delay_dist).to_numpy(
                dtype=bool, na_value=False
            )
        return self._df[mask].reset_index(drop=True)


def load_parameter_table(data_path, data_format="csv"):
    """
    Function for loading a table of delay distribution parameters from a csv or excel
    file.

    The file should have the columns listed below:
    pathogen_id: Name of the pathogen.
    type_id: Delay distribution type, one of DELAY_DISTS.
    study_id: Identifier of the study the parameters were taken from.
    size: Sample size of the study.
    distribution: Distribution family, one of "lnorm", "gamma" or "weibull".
    meanlog, sdlog: Lognormal parameters (empty for other distributions).
    shape, scale: Gamma or Weibull parameters (empty for lognormal distributions).
    DOI: DOI of the study.

    Parameters
    ----------
    data_path : str
        Path to file containing the parameter table.
    data_format : str, optional
        Format of data file. One of "csv" or "excel". Default is "csv".

    Returns
    -------
    ParameterTable
        Parameter table object.
    """
    if data_format == "csv":
        df = pd.read_csv(data_path)
    elif data_format == "excel":
        df = pd.read_excel(data_path)
    else:
        raise ValueError("Invalid data format. Supported formats are 'csv' and 'excel'")
    return ParameterTable(df)


# Classes for continuous and discrete delay distributions


class DelayDistribution:
    """
    Class for parametric delay distributions. Provides a thin wrapper around the
    scipy.stats lognorm, gamma and weibull_min classes.

    Parameters
    ----------
    distribution : str
        Distribution family. One of "lnorm", "gamma" or "weibull".
    params : dict
        Distribution parameters: {"meanlog", "sdlog"} for "lnorm" and {"shape",
        "scale"} for "gamma" and "weibull".
    pathogen : str, optional
        Pathogen the distribution describes.
    delay_dist : str, optional
        Delay distribution type.
    study : str, optional
        Study the parameters were taken from.
    """

    def __init__(
        self, distribution, params, pathogen=None, delay_dist=None, study=None
    ):
        if distribution == "lnorm":
            self._obj = lognorm(s=params["sdlog"], scale=np.exp(params["meanlog"]))
        elif distribution == "gamma":
            self._obj = gamma(a=params["shape"], scale=params["scale"])
        elif distribution == "weibull":
            self._obj = weibull_min(c=params["shape"], scale=params["scale"])
        else:
            raise ValueError(
                f"Invalid distribution '{distribution}'. Possible values are: 'lnorm',"
                " 'gamma' or 'weibull'"
            )
        self.distribution = distribution
        self.params = dict(params)
        self.pathogen = pathogen
        self.delay_dist = delay_dist
        self.study = study

    def __str__(self):
        lines = [
            f"Pathogen: {self.pathogen}",
            f"Delay Distribution: {self.delay_dist}",
            f"Distribution: {self.distribution}",
            "Parameters:",
        ]
        lines += [f"  {name}: {val}" for name, val in self.params.items()]
        return "\n".join(lines)

    def summary(self):
        """
        Returns the mean and standard deviation of the distribution, computed from its
        parameters with convert_params.
        """
        return convert_params(self.distribution, self.params)

    def pmf(self, x):
        """
        Probability that the delay falls between x and x + 1.
        """
        return self._obj.cdf(np.asarray(x) + 1) - self._obj.cdf(x)

    def pdf(self, *args, **kwargs):
        """
        Wrapper for scipy.stats.rv_continuous.pdf.
        """
        return self._obj.pdf(*args, **kwargs)

    def cdf(self, *args, **kwargs):
        """
        Wrapper for scipy.stats.rv_continuous.cdf.
        """
        return self._obj.cdf(*args, **kwargs)

    def ppf(self, *args, **kwargs):
        """
        Wrapper for scipy.stats.rv_continuous.ppf.
        """
        return self._obj.ppf(*args, **kwargs)

    def rvs(self, *args, **kwargs):
        """
        Wrapper for scipy.stats.rv_continuous.rvs.
        """
        return self._obj.rvs(*args, **kwargs)


class DiscreteDelayDistribution:
    """
    Class for delay distributions on whole days. Provides a thin wrapper around the
    scipy.stats.rv_discrete class.
    """

    def __init__(self, vals, probs):
        if np.any(vals < 0):
            raise ValueError("Delay distribution must take non-negative values")
        if not np.issubdtype(vals.dtype, np.integer):
            raise ValueError("Delay distribution must take integer values")
        self._obj = rv_discrete(values=(vals, probs))
        self.vals = vals
        self.probs = probs

    def pmf(self, *args, **kwargs):
        """
        Wrapper for scipy.stats.rv_discrete.pmf.
        """
        return self._obj.pmf(*args, **kwargs)

    def cdf(self, *args, **kwargs):
        """
        Wrapper for scipy.stats.rv_discrete.cdf.
        """
        return self._obj.cdf(*args, **kwargs)

    def ppf(self, *args, **kwargs):
        """
        Wrapper for scipy.stats.rv_discrete.ppf.
        """
        return self._obj.ppf(*args, **kwargs)

    def rvs(self, *args, **kwargs):
        """
        Wrapper for scipy.stats.rv_discrete.rvs.
        """
        return self._obj.rvs(*args, **kwargs)

    def to_csv(self, csv_path):
        """
        Saves the discrete delay distribution to csv file.

        Parameters
        ----------
        csv_path : str
            Path to csv file to save the distribution to.

        Returns
        -------
        None
        """
        df = pd.DataFrame(
            {
                "delay": self.vals,
                "probability": self.probs,
            }
        )
        df.to_csv(csv_path, index=False)


def discretise_delay_distrib(delay_distrib):
    """
    Function for discretising a continuous delay distribution using the method
    described in https://doi.org/10.1093/aje/kwt133 (web appendix 11).
    """

    def _integrand_fun(x, y):
        # To get probability mass function at time x, need to integrate this expression
        # with respect to y between y=x-1 and y=x+1
        return (1 - abs(x - y)) * delay_distrib.pdf(y)

    # Set up vector of x values and pre-allocate vector of probabilities
    x_max = int(delay_distrib.ppf(0.9999))
    x_vec = np.arange(0, x_max + 1)
    p_vec = np.zeros(len(x_vec))
    # Calculate probability mass function at each x value. The density is zero below
    # zero, so the lower limit is clipped there.
    for i, x in enumerate(x_vec):
        integrand = functools.partial(_integrand_fun, x)
        p_vec[i] = integrate.quad(integrand, max(x - 1, 0), x + 1)[0]
    # Assign residual mass to x_max
    p_vec[-1] = p_vec[-1] + 1 - np.sum(p_vec)
    return DiscreteDelayDistribution(x_vec, p_vec)


# Lookup functions


def epidist(table, pathogen, delay_dist="incubation", study=None):
    """
    Looks up the delay distribution of a pathogen in a parameter table.

    Parameters
    ----------
    table : ParameterTable
        Table of delay distribution parameters.
    pathogen : str
        Pathogen of interest.
    delay_dist : str, optional
        Delay distribution type, one of DELAY_DISTS. Default is "incubation".
    study : str, optional
        Study to take parameters from. Default is the study with the largest sample
        size.

    Returns
    -------
    DelayDistribution
        Best-fit distribution for the chosen record.
    """
    if pathogen not in table.pathogens:
        raise ValueError(
            f"Invalid pathogen '{pathogen}'. Possible values are: "
            + ", ".join(f"'{x}'" for x in table.pathogens)
        )
    if delay_dist not in DELAY_DISTS:
        raise ValueError(
            f"Invalid delay distribution '{delay_dist}'. Possible values are: "
            + ", ".join(f"'{x}'" for x in DELAY_DISTS)
        )
    df = table.records(pathogen=pathogen, delay_dist=delay_dist)
    if len(df) == 0:
        raise ValueError("Need to select pathogen and distribution in the dataset")
    # Extract study or default to largest sample size
    if study is None:
        pick_study = df.loc[df["size"].idxmax()]
    else:
        matches = df[df["study_id"] == study]
        if len(matches) == 0:
            raise ValueError(
                f"Study '{study}' not found for pathogen '{pathogen}' and delay "
                f"distribution '{delay_dist}'"
            )
        pick_study = matches.iloc[0]
    return DelayDistribution(
        pick_study["distribution"],
        _record_params(pick_study),
        pathogen=pathogen,
        delay_dist=delay_dist,
        study=pick_study["study_id"],
    )


def list_distributions(table, delay_dist="incubation", parameters=False):
    """
    Lists the records in a parameter table for a delay distribution type.

    Parameters
    ----------
    table : ParameterTable
        Table of delay distribution parameters.
    delay_dist : str, optional
        Delay distribution type, one of DELAY_DISTS. Default is "incubation".
    parameters : bool, optional
        Whether to include the distribution parameter columns. Default is False.

    Returns
    -------
    pandas DataFrame
        Matching records.
    """
    if delay_dist not in DELAY_DISTS:
        raise ValueError(
            f"Invalid delay distribution '{delay_dist}'. Possible values are: "
            + ", ".join(f"'{x}'" for x in DELAY_DISTS)
        )
    columns = ["pathogen_id", "type_id", "study_id", "distribution"]
    if parameters:
        columns += ["meanlog", "sdlog", "shape", "scale"]
    return table.records(delay_dist=delay_dist)[columns]


def pathogen_summary(table, pathogen):
    """
    Summarises the delay distributions recorded for a pathogen, giving the mean and
    standard deviation of each.

    Parameters
    ----------
    table : ParameterTable
        Table of delay distribution parameters.
    pathogen : str
        Pathogen of interest.

    Returns
    -------
    pandas DataFrame
        One row per record with columns "pathogen", "delay_dist", "distribution",
        "mean", "sd", "study" and "DOI".
    """
    if pathogen not in table.pathogens:
        raise ValueError(
            f"Invalid pathogen '{pathogen}'. Possible values are: "
            + ", ".join(f"'{x}'" for x in table.pathogens)
        )
    df = table.records(pathogen=pathogen)
    mean_sd = [
        convert_params(row["distribution"], _record_params(row))
        for _, row in df.iterrows()
    ]
    return pd.DataFrame(
        {
            "pathogen": df["pathogen_id"].astype(str).to_numpy(),
            "delay_dist": df["type_id"].astype(str).to_numpy(),
            "distribution": df["distribution"].astype(str).to_numpy(),
            "mean": np.array([x["mean"] for x in mean_sd], dtype=float),
            "sd": np.array([x["sd"] for x in mean_sd], dtype=float),
            "study": df["study_id"].astype(str).to_numpy(),
            "DOI": df["DOI"].astype(str).to_numpy(),
        }
    )


def _record_params(row):
    # Native distribution parameters of a table record
    if row["distribution"] == "lnorm":
        return {"meanlog": float(row["meanlog"]), "sdlog": float(row["sdlog"])}
    return {"shape": float(row["shape"]), "scale": float(row["scale"])}
