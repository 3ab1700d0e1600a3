"""
This script provides plotting utilities for the BCGroundwater package.
"""
import calendar
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.dates as mdates
import seaborn as sns
from .aggregation import _check_columns


VALID_MKPERIODS = ['monthly', 'annual']


def _daily_slope(trend, mkperiod):
    """
    Converts a trend slope to metres per day so it can be drawn against a
    date axis.
    """
    if mkperiod == 'monthly':
        return trend / 12 / 365
    elif mkperiod == 'annual':
        return trend / 365
    raise ValueError(f"mkperiod must be either 'monthly' or 'annual', got '{mkperiod}'.")


def _annual_rate(daily_slope):
    """Converts a slope in metres per day to metres per year."""
    return daily_slope * 365


def gwl_area_plot(dataframe, trend, intercept, trend_category, sig,
                  showInterpolated=False, show_stable_line=False, save=False,
                  path='./', mkperiod='annual', opts=None):
    """
    Creates an area plot (hydrograph) of groundwater levels with a trend line
    of a given slope and intercept, optionally with interpolated values shown.

    Input:
        dataframe: A monthly time series of one well with the columns Date,
                   med_GWL and nReadings (e.g. from `make_well_ts`).
        trend: The trend in metres per month or per year (see `mkperiod`).
        intercept: The intercept in metres.
        trend_category: 'stable', or another description of the magnitude and
                        direction of the trend, displayed in Title Case. If
                        'stable', no trend value or significance is shown.
                        A missing category (NaN or None) is left out of the
                        title.
        sig: The significance of the trend test.
        showInterpolated: Show the months whose values were interpolated.
        show_stable_line: Show the trend line when the category is 'stable'.
        save: Save the plot to `path` as 'trend_chart_well_<Well_Num>.pdf'.
        path: Where to save the plot if `save` is True.
        mkperiod: The period ('monthly' or 'annual') the trend test was
                  performed on.
        opts: A dict of Axes properties to set, e.g. {'ylabel': 'Depth (m)'}.
    Output:
        The matplotlib Figure.
    """
    slope = _daily_slope(trend, mkperiod)
    _check_columns(dataframe, ['Date', 'med_GWL', 'nReadings'], 'dataframe')

    if showInterpolated:
        df = dataframe.copy()
        # Nothing to show if no values were interpolated
        if not (df['nReadings'] == 0).any():
            showInterpolated = False
    else:
        df = dataframe[dataframe['nReadings'] > 0].copy()

    if df.empty:
        raise ValueError("There are no groundwater levels to plot.")

    df['Date'] = pd.to_datetime(df['Date'])
    min_date = df['Date'].min()
    max_date = df['Date'].max()
    n_years = (max_date - min_date).days / 365

    well_num = df['Well_Num'].iloc[0] if 'Well_Num' in df.columns else ''

    has_category = not pd.isna(trend_category)
    is_stable = has_category and str(trend_category).lower() == 'stable'
    if is_stable or pd.isna(slope):
        trend_print = ""
    else:
        # Depth below ground: a positive slope is a falling water level
        level_rate = -_annual_rate(slope)
        sig_print = "" if pd.isna(sig) else f", p = {sig:.3f}"
        trend_print = f" ({level_rate:+.2f} m/year{sig_print})"

    max_gwl = df['med_GWL'].max()
    min_gwl = df['med_GWL'].min()
    gwl_range = max_gwl - min_gwl
    if gwl_range == 0:
        gwl_range = 1.0
    mid_gwl = (max_gwl + min_gwl) / 2
    lims = (mid_gwl + gwl_range, mid_gwl - gwl_range)
    max_lims = max(lims[0], max_gwl + 5)

    fig, ax = plt.subplots(figsize=(10, 6))

    ax.fill_between(df['Date'].to_numpy(), df['med_GWL'].to_numpy(), max_lims,
                    color='#1E90FF', alpha=0.3, label='Groundwater Level')

    if showInterpolated:
        interp = df[df['nReadings'] == 0]
        ax.scatter(interp['Date'].to_numpy(), interp['med_GWL'].to_numpy(),
                   color='grey', s=4, label='Interpolated (Missing) Values', zorder=3)

    if (show_stable_line or not is_stable) and not pd.isna(slope):
        # The intercept is one period before the first month, which is x = 1
        start_gwl = intercept + trend
        days = np.array([0, (max_date - min_date).days])
        ax.plot([min_date, max_date], start_gwl + slope * days,
                color='orange', linewidth=2, label='Long-term Trend')

    # Depth below ground, shallower at the top
    ax.set_ylim(lims)
    ax.set_xlim(min_date, max_date)

    ax.xaxis.set_major_locator(mdates.YearLocator(1 if n_years < 10 else 3))
    ax.xaxis.set_major_formatter(mdates.DateFormatter('%Y'))
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
    ax.grid(True, axis='y', color='0.9')

    fig.suptitle("Observed Long-term Trend in Groundwater Levels")
    category_print = f"Category: {str(trend_category).title()}" if has_category else ""
    ax.set_title(f"{category_print}{trend_print}".strip(), fontsize=11)
    ax.set_xlabel("Date")
    ax.set_ylabel("Depth Below Ground (metres)")
    ax.legend(loc='upper center', bbox_to_anchor=(0.5, -0.1), ncol=3, frameon=False)

    if opts:
        ax.set(**opts)

    if save:
        fig.savefig(f"{path}trend_chart_well_{well_num}.pdf", bbox_inches='tight')

    return fig


def gwl_monthly_plot(dataframe, last12=True, save=False, path='./'):
    """
    Creates a seasonal plot of a well's monthly groundwater levels: the
    distribution of each calendar month over all years, optionally with the
    most recent 12 months overlaid.

    Input:
        dataframe: A monthly time series of one well with the columns Date
                   and med_GWL (e.g. from `make_well_ts`).
        last12: Overlay the most recent 12 months (default True).
        save: Save the plot to `path` as 'monthly_chart_well_<Well_Num>.pdf'.
        path: Where to save the plot if `save` is True.
    Output:
        The matplotlib Figure.
    """
    _check_columns(dataframe, ['Date', 'med_GWL'], 'dataframe')

    df = dataframe.dropna(subset=['med_GWL']).copy()
    if df.empty:
        raise ValueError("There are no groundwater levels to plot.")

    df['Date'] = pd.to_datetime(df['Date'])
    df['Month'] = df['Date'].dt.month
    well_num = df['Well_Num'].iloc[0] if 'Well_Num' in df.columns else ''

    fig, ax = plt.subplots(figsize=(10, 6))
    sns.boxplot(x='Month', y='med_GWL', data=df, order=list(range(1, 13)),
                color='#1E90FF', ax=ax)

    if last12:
        recent = df.sort_values('Date').tail(12)
        ax.scatter(recent['Month'].to_numpy() - 1, recent['med_GWL'].to_numpy(),
                   color='orange', zorder=3, label='Last 12 months')
        ax.legend(frameon=False)

    ax.set_xticks(range(12))
    ax.set_xticklabels(calendar.month_abbr[1:])
    ax.invert_yaxis()

    title = "Monthly Groundwater Levels"
    if well_num != '':
        title += f", Well {well_num}"
    ax.set_title(title)
    ax.set_xlabel("Month")
    ax.set_ylabel("Depth Below Ground (metres)")

    if save:
        fig.savefig(f"{path}monthly_chart_well_{well_num}.pdf", bbox_inches='tight')

    return fig
