import numpy as np
import numpy.testing as npt
import pandas as pd
import pytest
from scipy.stats import gamma, lognorm

import epiparameter


def test_load_parameter_table_sorts_records(parameter_table):
    assert len(parameter_table) == 5
    assert parameter_table.pathogens == ("ebola", "influenza", "SARS")
    records = parameter_table.records(pathogen="ebola")
    assert records["type_id"].tolist() == [
        "incubation",
        "incubation",
        "serial_interval",
    ]
    assert records["study_id"].tolist() == ["Study_A", "Study_B", "Study_A"]


def test_records_returns_copy(parameter_table):
    records = parameter_table.records()
    records.drop(records.index, inplace=True)
    assert len(parameter_table.records()) == 5


def test_load_parameter_table_from_excel(tmp_path, parameter_csv):
    excel_path = tmp_path / "parameters.xlsx"
    pd.read_csv(parameter_csv).to_excel(excel_path, index=False)
    table = epiparameter.load_parameter_table(excel_path, data_format="excel")
    assert len(table) == 5
    assert table.pathogens == ("ebola", "influenza", "SARS")


def test_load_parameter_table_invalid_format_raises(parameter_csv):
    with pytest.raises(ValueError, match="Invalid data format"):
        epiparameter.load_parameter_table(parameter_csv, data_format="json")


def test_load_parameter_table_missing_columns_raises(tmp_path):
    csv_path = tmp_path / "parameters.csv"
    csv_path.write_text("pathogen_id,type_id,study_id\nebola,incubation,Study_A\n")
    with pytest.raises(ValueError, match="missing required columns"):
        epiparameter.load_parameter_table(csv_path)


def test_load_parameter_table_empty_pathogen_raises(tmp_path, parameter_csv):
    csv_path = tmp_path / "incomplete.csv"
    csv_path.write_text(
        parameter_csv.read_text() + ",incubation,Study_E,20,gamma,,,2.0,3.0,10.1000/e\n"
    )
    with pytest.raises(ValueError, match="empty 'pathogen_id'"):
        epiparameter.load_parameter_table(csv_path)


def test_pathogens_is_immutable(parameter_table):
    assert isinstance(parameter_table.pathogens, tuple)


def test_epidist_defaults_to_largest_study(parameter_table):
    delay_distrib = epiparameter.epidist(parameter_table, "ebola")
    assert delay_distrib.study == "Study_B"
    assert delay_distrib.distribution == "lnorm"
    assert delay_distrib.params == {"meanlog": 2.0, "sdlog": 0.5}
    assert delay_distrib.delay_dist == "incubation"


def test_epidist_with_study(parameter_table):
    delay_distrib = epiparameter.epidist(
        parameter_table, "ebola", delay_dist="incubation", study="Study_A"
    )
    assert delay_distrib.distribution == "gamma"
    assert delay_distrib.params == {"shape": 2.0, "scale": 5.0}


def test_epidist_ties_go_to_first_study_in_sorted_order(tmp_path):
    csv_path = tmp_path / "ties.csv"
    csv_path.write_text(
        "pathogen_id,type_id,study_id,size,distribution,meanlog,sdlog,shape,scale,DOI\n"
        "zika,incubation,Zed,10,gamma,,,2.0,3.0,10.1000/z\n"
        "zika,incubation,Alpha,10,lnorm,1.0,0.4,,,10.1000/y\n"
    )
    table = epiparameter.load_parameter_table(csv_path)
    delay_distrib = epiparameter.epidist(table, "zika")
    assert delay_distrib.study == "Alpha"
    assert delay_distrib.distribution == "lnorm"


def test_epidist_invalid_arguments_raise(parameter_table):
    with pytest.raises(ValueError, match="Invalid pathogen"):
        epiparameter.epidist(parameter_table, "cholera")
    with pytest.raises(ValueError, match="Invalid delay distribution"):
        epiparameter.epidist(parameter_table, "ebola", delay_dist="incubation_time")
    with pytest.raises(ValueError, match="Need to select pathogen and distribution"):
        epiparameter.epidist(parameter_table, "ebola", delay_dist="onset_to_death")
    with pytest.raises(ValueError, match="Study 'Study_Z' not found"):
        epiparameter.epidist(parameter_table, "ebola", study="Study_Z")


def test_list_distributions(parameter_table):
    df = epiparameter.list_distributions(parameter_table, delay_dist="incubation")
    assert list(df.columns) == ["pathogen_id", "type_id", "study_id", "distribution"]
    assert df["pathogen_id"].tolist() == ["ebola", "ebola", "influenza"]
    df = epiparameter.list_distributions(
        parameter_table, delay_dist="onset_to_death", parameters=True
    )
    assert list(df.columns)[-4:] == ["meanlog", "sdlog", "shape", "scale"]
    assert len(df) == 1


def test_pathogen_summary(parameter_table):
    summary = epiparameter.pathogen_summary(parameter_table, "ebola")
    assert summary.shape == (3, 7)
    assert list(summary.columns) == [
        "pathogen",
        "delay_dist",
        "distribution",
        "mean",
        "sd",
        "study",
        "DOI",
    ]
    assert summary["mean"].dtype == np.float64
    gamma_row = summary.iloc[0]
    assert gamma_row["distribution"] == "gamma"
    assert gamma_row["mean"] == pytest.approx(10.0)
    assert gamma_row["sd"] == pytest.approx(np.sqrt(2.0) * 5.0)
    assert gamma_row["DOI"] == "10.1000/a"
    lnorm_row = summary.iloc[1]
    assert lnorm_row["mean"] == pytest.approx(lognorm(s=0.5, scale=np.exp(2.0)).mean())


def test_pathogen_summary_with_weibull(parameter_table):
    summary = epiparameter.pathogen_summary(parameter_table, "influenza")
    assert summary.shape == (1, 7)
    expected = epiparameter.weibull_shapescale_to_meansd(2.0, 1.5)
    assert summary["mean"].iloc[0] == pytest.approx(expected["mean"])
    assert summary["sd"].iloc[0] == pytest.approx(expected["sd"])


def test_delay_distribution_str(parameter_table):
    delay_distrib = epiparameter.epidist(parameter_table, "ebola")
    assert str(delay_distrib) == (
        "Pathogen: ebola\n"
        "Delay Distribution: incubation\n"
        "Distribution: lnorm\n"
        "Parameters:\n"
        "  meanlog: 2.0\n"
        "  sdlog: 0.5"
    )


def test_delay_distribution_wraps_scipy():
    delay_distrib = epiparameter.DelayDistribution(
        "gamma", {"shape": 2.0, "scale": 5.0}
    )
    distrib = gamma(a=2.0, scale=5.0)
    x = np.arange(0, 10)
    npt.assert_allclose(delay_distrib.pdf(x), distrib.pdf(x))
    npt.assert_allclose(delay_distrib.cdf(x), distrib.cdf(x))
    npt.assert_allclose(delay_distrib.pmf(x), distrib.cdf(x + 1) - distrib.cdf(x))
    assert delay_distrib.ppf(0.5) == pytest.approx(distrib.ppf(0.5))
    samples = delay_distrib.rvs(size=5, random_state=np.random.default_rng(1))
    assert samples.shape == (5,)


def test_delay_distribution_summary():
    delay_distrib = epiparameter.DelayDistribution(
        "lnorm", {"meanlog": 1.5, "sdlog": 0.9}
    )
    assert delay_distrib.summary() == epiparameter.lnorm_musigma_to_meansd(1.5, 0.9)


def test_delay_distribution_invalid_distribution_raises():
    with pytest.raises(ValueError, match="Invalid distribution"):
        epiparameter.DelayDistribution("normal", {"mean": 1.0, "sd": 1.0})


def test_discretise_delay_distrib():
    delay_distrib = epiparameter.DelayDistribution(
        "gamma", {"shape": 4.0, "scale": 1.5}
    )
    discr_distrib = epiparameter.discretise_delay_distrib(delay_distrib)
    assert discr_distrib.vals[0] == 0
    assert discr_distrib.vals[-1] == int(delay_distrib.ppf(0.9999))
    assert np.sum(discr_distrib.probs) == pytest.approx(1.0)
    assert np.all(discr_distrib.probs >= 0)
    discr_mean = np.sum(discr_distrib.vals * discr_distrib.probs)
    assert discr_mean == pytest.approx(6.0, rel=1e-2)


def test_discrete_delay_distribution_to_csv(tmp_path):
    discr_distrib = epiparameter.DiscreteDelayDistribution(
        np.array([0, 1, 2]), np.array([0.2, 0.5, 0.3])
    )
    assert discr_distrib.cdf(1) == pytest.approx(0.7)
    csv_path = tmp_path / "delay.csv"
    discr_distrib.to_csv(csv_path)
    df = pd.read_csv(csv_path)
    assert df["delay"].tolist() == [0, 1, 2]
    npt.assert_allclose(df["probability"], [0.2, 0.5, 0.3])


def test_discrete_delay_distribution_invalid_values_raise():
    with pytest.raises(ValueError, match="non-negative"):
        epiparameter.DiscreteDelayDistribution(
            np.array([-1, 0, 1]), np.array([0.2, 0.5, 0.3])
        )
    with pytest.raises(ValueError, match="integer"):
        epiparameter.DiscreteDelayDistribution(
            np.array([0.5, 1.5]), np.array([0.5, 0.5])
        )
