import pytest

import epiparameter

PARAMETER_CSV = """pathogen_id,type_id,study_id,size,distribution,meanlog,sdlog,shape,scale,DOI
SARS,onset_to_death,Study_D,30,lnorm,2.5,0.6,,,10.1000/d
ebola,serial_interval,Study_A,100,gamma,,,2.5,6.0,10.1000/a
ebola,incubation,Study_B,500,lnorm,2.0,0.5,,,10.1000/b
ebola,incubation,Study_A,100,gamma,,,2.0,5.0,10.1000/a
influenza,incubation,Study_C,50,weibull,,,2.0,1.5,10.1000/c
"""


@pytest.fixture
def parameter_csv(tmp_path):
    csv_path = tmp_path / "parameters.csv"
    csv_path.write_text(PARAMETER_CSV)
    return csv_path


@pytest.fixture
def parameter_table(parameter_csv):
    return epiparameter.load_parameter_table(parameter_csv)
