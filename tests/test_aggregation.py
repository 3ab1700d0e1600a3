import numpy as np
import pandas as pd
import pytest
from BCGroundwater import monthly_values, annual_values


@pytest.fixture
def observations():
    """Irregularly sampled observations of two wells."""
    return pd.DataFrame({
        'Well_Num': ['309', '309', '309', '309', '089', '089'],
        'EMS_ID': [np.nan] * 6,
        'Date': pd.to_datetime(['2019-01-03', '2019-01-20', '2019-01-28',
                                '2019-03-15', '2019-01-01', '2019-02-01']),
        'GWL': [10.0, 12.0, 11.0, 14.0, 3.0, 4.0],
    })


def test_monthly_values_medians(observations):
    monthly = monthly_values(observations)

    assert list(monthly.columns) == ['Well_Num', 'EMS_ID', 'Year', 'Month', 'Date',
                                     'med_GWL', 'dev_med_GWL', 'nReadings']
    well = monthly[monthly['Well_Num'] == '309']
    assert well['Month'].tolist() == [1, 3]
    assert well['med_GWL'].tolist() == [11.0, 14.0]
    assert well['nReadings'].tolist() == [3, 1]
    assert well['Date'].tolist() == [pd.Timestamp('2019-01-01'), pd.Timestamp('2019-03-01')]


def test_monthly_values_empty_month_is_absent(observations):
    monthly = monthly_values(observations)
    well = monthly[monthly['Well_Num'] == '309']
    # February has no observations
    assert 2 not in well['Month'].tolist()


def test_monthly_values_keeps_well_order(observations):
    monthly = monthly_values(observations)
    assert monthly['Well_Num'].tolist() == ['309', '309', '089', '089']


def test_monthly_values_deviation(observations):
    monthly = monthly_values(observations)
    well = monthly[monthly['Well_Num'] == '309']
    assert well['dev_med_GWL'].tolist() == pytest.approx([-1.5, 1.5])


def test_monthly_values_ignores_missing_levels():
    df = pd.DataFrame({
        'Well_Num': ['1', '1', '1'],
        'Date': pd.to_datetime(['2020-01-01', '2020-01-02', '2020-02-01']),
        'GWL': [1.0, np.nan, np.nan],
    })
    monthly = monthly_values(df)
    assert monthly['Month'].tolist() == [1]
    assert monthly['nReadings'].tolist() == [1]


def test_monthly_values_requires_columns():
    with pytest.raises(ValueError, match="missing required columns"):
        monthly_values(pd.DataFrame({'Well_Num': ['1'], 'Date': ['2020-01-01']}))
    with pytest.raises(TypeError):
        monthly_values("not a dataframe")


def test_annual_values():
    dates = pd.date_range('2018-01-01', periods=24, freq='MS')
    monthly = pd.DataFrame({
        'Well_Num': '309',
        'EMS_ID': np.nan,
        'Year': dates.year,
        'Month': dates.month,
        'Date': dates,
        'med_GWL': np.arange(24, dtype=float),
        'nReadings': [0 if i == 5 else 2 for i in range(24)],
    })
    annual = annual_values(monthly)

    assert annual['Year'].tolist() == [2018, 2019]
    assert annual['mean_GWL'].tolist() == pytest.approx([5.5, 17.5])
    assert annual['med_GWL'].tolist() == pytest.approx([5.5, 17.5])
    assert annual['SD'].iloc[0] == pytest.approx(np.std(np.arange(12), ddof=1))
    assert annual['q95'].iloc[0] == pytest.approx(np.quantile(np.arange(12), 0.95))
    assert annual['n_months'].tolist() == [11, 12]
