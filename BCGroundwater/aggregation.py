"""
This module aggregates groundwater level observations to monthly and
annual values.
"""
import numpy as np
import pandas as pd


def _check_columns(df, required, name):
    if not isinstance(df, pd.DataFrame):
        raise TypeError(f"Input '{name}' must be a pandas DataFrame.")
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"Input '{name}' is missing required columns: {missing}")


def monthly_values(df):
    """
    Calculates the monthly median groundwater level of each well.

    Input:
        df: An observation table as returned by `get_gwl`, with at least the
            columns Well_Num, Date and GWL (EMS_ID is used when present).
    Output:
        A DataFrame with one row per well and month that has at least one
        observation, with columns Well_Num, EMS_ID, Year, Month, Date (first
        day of the month), med_GWL, dev_med_GWL and nReadings.

    Months without any observation are absent from the output; `make_well_ts`
    fills them in.
    """
    _check_columns(df, ['Well_Num', 'Date', 'GWL'], 'df')

    data = df[['Well_Num', 'Date', 'GWL']].copy()
    data['EMS_ID'] = df['EMS_ID'] if 'EMS_ID' in df.columns else np.nan
    data['Date'] = pd.to_datetime(data['Date'])
    data['Year'] = data['Date'].dt.year
    data['Month'] = data['Date'].dt.month

    monthly = (
        data.groupby(['Well_Num', 'EMS_ID', 'Year', 'Month'], sort=False, dropna=False)['GWL']
        .agg(med_GWL='median', nReadings='count')
        .reset_index()
    )
    monthly = monthly[monthly['nReadings'] > 0].copy()

    monthly['Date'] = pd.to_datetime(monthly[['Year', 'Month']].assign(Day=1))
    monthly['dev_med_GWL'] = monthly['med_GWL'] - monthly.groupby('Well_Num', sort=False)['med_GWL'].transform('mean')

    monthly = _sort_by_well(monthly, data['Well_Num'])

    return monthly[['Well_Num', 'EMS_ID', 'Year', 'Month', 'Date',
                    'med_GWL', 'dev_med_GWL', 'nReadings']]


def annual_values(df):
    """
    Summarises a monthly table by well and year.

    Input:
        df: A monthly table from `monthly_values` or `make_well_ts`.
    Output:
        A DataFrame with columns Well_Num, EMS_ID, Year, mean_GWL, med_GWL,
        SD, q95 and n_months (number of months with readings).
    """
    _check_columns(df, ['Well_Num', 'Year', 'med_GWL', 'nReadings'], 'df')

    data = df.copy()
    if 'EMS_ID' not in data.columns:
        data['EMS_ID'] = np.nan
    data['has_readings'] = data['nReadings'] > 0

    grouped = data.groupby(['Well_Num', 'EMS_ID', 'Year'], sort=False, dropna=False)
    annual = grouped['med_GWL'].agg(
        mean_GWL='mean',
        med_GWL='median',
        SD='std',
        q95=lambda v: v.quantile(0.95),
    )
    annual['n_months'] = grouped['has_readings'].sum().astype(int)
    annual = annual.reset_index()

    annual = _sort_by_well(annual, data['Well_Num'], time_col='Year')

    return annual[['Well_Num', 'EMS_ID', 'Year', 'mean_GWL', 'med_GWL', 'SD', 'q95', 'n_months']]


def _sort_by_well(df, well_order, time_col='Date'):
    """Sorts by well in order of first appearance, then by time."""
    order = {well: i for i, well in enumerate(pd.unique(well_order))}
    df = df.assign(_well_order=df['Well_Num'].map(order))
    df = df.sort_values(['_well_order', time_col], kind='mergesort')
    return df.drop(columns='_well_order').reset_index(drop=True)
