"""
This module builds complete monthly time series for each well, filling
missing months by linear interpolation and optionally trimming long runs
of interpolated months at the ends of the series.
"""
import numpy as np
import pandas as pd
from ._utils import _rle
from .aggregation import _check_columns


def trim_cons_runs(x, val=0, n_consec=5, head=0.1, tail=0.9):
    """
    Finds the part of a series left after trimming long runs of a value from
    its ends.

    A qualifying run is a maximal run of elements equal to `val` that is at
    least `n_consec` long. A qualifying run lying entirely in the first `head`
    proportion of the series is removed together with everything before it;
    one lying entirely beyond the `tail` proportion is removed together with
    everything after it. The proportions are recalculated on the shortened
    series until no further run qualifies, so a run that only falls inside the
    head (or tail) after earlier runs have been removed is trimmed as well.

    Args:
        x (array-like): The series.
        val: The value whose runs are trimmed (default 0).
        n_consec (int): Minimum run length to trim (default 5).
        head (float): Proportion of the series considered the head (default 0.1).
        tail (float): Proportion of the series after which the tail starts
                      (default 0.9).

    Returns:
        np.array: Boolean mask, True for the elements to keep. The kept
                  elements always form one contiguous block.
    """
    if not 0 <= head <= tail <= 1:
        raise ValueError("`head` and `tail` must satisfy 0 <= head <= tail <= 1.")
    if n_consec < 1:
        raise ValueError("`n_consec` must be at least 1.")

    x = np.asarray(x)
    start, end = 0, len(x)

    while end > start:
        n = end - start
        is_val, lengths, starts = _rle(x[start:end] == val)
        qualifying = is_val & (lengths >= n_consec)
        run_starts = starts[qualifying]
        run_ends = run_starts + lengths[qualifying]

        in_head = (run_ends - 1) < head * n
        in_tail = run_starts >= tail * n

        new_start = start + run_ends[in_head].max() if in_head.any() else start
        new_end = start + run_starts[in_tail].min() if in_tail.any() else end

        if new_start == start and new_end == end:
            break
        start, end = new_start, new_end

    keep = np.zeros(len(x), dtype=bool)
    keep[start:end] = True
    return keep


def make_well_ts(df, trim=True, head=0.1, tail=0.9, n_consec=5):
    """
    Creates a full regular monthly time series for each well.

    Input:
        df: A monthly table from `monthly_values`, with at least the columns
            Well_Num, Date, med_GWL and nReadings.
        trim: If True, runs of `n_consec` or more interpolated months in the
              head or tail of each series are trimmed (see `trim_cons_runs`).
        head: Proportion of the series treated as its head (default 0.1).
        tail: Proportion after which the tail starts (default 0.9).
        n_consec: Minimum number of consecutive interpolated months to trim
                  (default 5).
    Output:
        A DataFrame with one row per well and month, with no missing months
        between the first and last month of each well. Months that were missing
        from `df` have `nReadings == 0` and `med_GWL` linearly interpolated in
        time between the neighbouring months.
    """
    _check_columns(df, ['Well_Num', 'Date', 'med_GWL', 'nReadings'], 'df')

    frames = [
        _fill_well(well, group, trim, head, tail, n_consec)
        for well, group in df.groupby('Well_Num', sort=False)
    ]
    if not frames:
        return pd.DataFrame(columns=['Well_Num', 'EMS_ID', 'Year', 'Month', 'Date',
                                     'med_GWL', 'dev_med_GWL', 'nReadings'])
    return pd.concat(frames, ignore_index=True)


def _fill_well(well, group, trim, head, tail, n_consec):
    group = group.copy()
    group['Date'] = pd.to_datetime(group['Date']).dt.to_period('M').dt.to_timestamp()
    group = group.sort_values('Date').drop_duplicates(subset='Date')

    ems_id = group['EMS_ID'].iloc[0] if 'EMS_ID' in group.columns else np.nan

    full_dates = pd.date_range(group['Date'].min(), group['Date'].max(), freq='MS', name='Date')
    ts = group.set_index('Date')[['med_GWL', 'nReadings']].reindex(full_dates)
    ts.index.name = 'Date'

    ts['nReadings'] = ts['nReadings'].fillna(0).astype(int)

    # Interpolate against elapsed days, not row position
    ts['med_GWL'] = ts['med_GWL'].astype(float).interpolate(method='time', limit_area='inside')

    if trim:
        ts = ts[trim_cons_runs(ts['nReadings'].to_numpy(), val=0, n_consec=n_consec,
                               head=head, tail=tail)]

    ts = ts.reset_index()
    ts['Well_Num'] = well
    ts['EMS_ID'] = ems_id
    ts['Year'] = ts['Date'].dt.year
    ts['Month'] = ts['Date'].dt.month
    ts['dev_med_GWL'] = ts['med_GWL'] - ts['med_GWL'].mean()

    return ts[['Well_Num', 'EMS_ID', 'Year', 'Month', 'Date',
               'med_GWL', 'dev_med_GWL', 'nReadings']]
