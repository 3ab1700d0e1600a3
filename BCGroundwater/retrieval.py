"""
This module retrieves groundwater level observations for B.C. provincial
observation wells from the B.C. Data Catalogue and formats them into a
single table.
"""
import io
import warnings
import numpy as np
import pandas as pd
import requests


DEFAULT_URL = "http://www.env.gov.bc.ca/wsd/data_searches/obswell/map/data/"

VALID_WHICH = ['all', 'recent', 'daily']

# File name suffix of the primary series for each value of `which`
WHICH_FILES = {
    'all': 'data',
    'recent': 'recent',
    'daily': 'average',
}

GWL_COLUMNS = ['Well_Num', 'EMS_ID', 'Station_Name', 'Date', 'GWL',
               'Historical_Daily_Average', 'Historical_Daily_Minimum',
               'Historical_Daily_Maximum', 'Status']


def get_gwl(wells, which='all', url=None, quiet=False, timeout=60):
    """
    Retrieve and format groundwater data from the B.C. Data Catalogue.

    Well water levels are measured in metres below the ground, so higher
    values represent deeper levels. Therefore `Historical_Daily_Minimum`
    values will be greater than `Historical_Daily_Maximum` values, as they
    represent a lower water level.

    Daily averages (`which='daily'`) are pre-calculated and only cover days
    marked as "Validated" in the full hourly dataset.

    Input:
        wells: The well number(s). Accepts either the 'OW000' or the '000'
               format, but not a mix of both. Format 'OW000' requires three
               digit numbers, e.g. 'OW309', 'OW008'.
        which: Which data to retrieve: 'all' hourly data, 'recent' hourly
               data, or all 'daily' averages (default 'all').
        url: Override the base url of the data.
        quiet: Suppress progress messages (default False).
        timeout: Seconds to wait for each request (default 60).
    Output:
        A pandas DataFrame of the groundwater level observations with columns
        Well_Num, EMS_ID, Station_Name, Date, GWL, Historical_Daily_Average,
        Historical_Daily_Minimum, Historical_Daily_Maximum and Status.

    Wells whose data cannot be accessed are skipped with a warning.
    """
    if which not in VALID_WHICH:
        raise ValueError(f"Invalid `which`. Must be one of {VALID_WHICH}.")

    well_ids = _validate_wells(wells)

    if url is None:
        url = DEFAULT_URL

    if not quiet:
        print("Retrieving data...")
    downloads = [(well, _download_gwl(url, well, which, timeout)) for well in well_ids]

    if not quiet:
        print("Formatting data...")
    frames = [_format_gwl(data, which, well) for well, data in downloads if data is not None]
    frames = [frame for frame in frames if frame is not None]

    if not frames:
        return pd.DataFrame(columns=GWL_COLUMNS)

    return pd.concat(frames, ignore_index=True)


def _validate_wells(wells):
    """
    Checks the well identifiers and converts them to the 'OW000' format.
    """
    if isinstance(wells, (str, int, np.integer)):
        wells = [wells]
    wells = list(wells)

    if len(wells) == 0:
        raise ValueError("At least one well must be specified.")

    has_prefix = [isinstance(w, str) and 'OW' in w for w in wells]

    if not all(has_prefix):
        if any(has_prefix) or not all(_is_number(w) for w in wells):
            raise ValueError(
                "wells can be specified either by 'OW000' or '000'. "
                "Different formatting cannot be mixed."
            )
        return [f"OW{int(float(w)):03d}" for w in wells]

    if any(len(w) != 5 for w in wells):
        raise ValueError(
            "Wells in format OW000 must have 5 characters "
            "(OW followed by a three-digit number, e.g. OW064)."
        )
    return wells


def _is_number(value):
    if isinstance(value, bool):
        return False
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


def _fetch_text(url, timeout):
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    response.encoding = 'utf-8'
    return response.text


def _warn_inaccessible(well):
    warnings.warn(
        f"Cannot access online data for well {well}. Either it doesn't exist "
        "or the online data is inaccessible for some other reason.",
        UserWarning
    )


def _download_gwl(url, well, which, timeout):
    """
    Downloads the primary series and the historical min/max/mean summary of
    one well.

    Returns:
        tuple or None: (data_text, summary_text), or None if the primary
        series cannot be accessed.
    """
    base = f"{url}{well}-"
    try:
        gwl_data = _fetch_text(f"{base}{WHICH_FILES[which]}.csv", timeout)
    except requests.exceptions.RequestException:
        _warn_inaccessible(well)
        return None

    try:
        gwl_avg = _fetch_text(f"{base}minMaxMean.csv", timeout)
    except requests.exceptions.RequestException:
        warnings.warn(
            f"Cannot access historical min/max/mean data for well {well}. "
            "Historical columns will be missing.",
            UserWarning
        )
        gwl_avg = ""

    return gwl_data, gwl_avg


def _read_csv_text(text):
    if text is None or not text.strip():
        return pd.DataFrame()
    try:
        return pd.read_csv(io.StringIO(text))
    except pd.errors.ParserError:
        return pd.DataFrame()


def _historical_summary(text):
    """
    Pivots the min/max/mean summary to one row per calendar day.

    Returns:
        pd.DataFrame or None: columns dummydate, max, mean, min; None if the
        summary has no usable rows.
    """
    well_avg = _read_csv_text(text)
    if well_avg.empty or not {'dummydate', 'type', 'Value'}.issubset(well_avg.columns):
        return None

    well_avg = well_avg.dropna(subset=['dummydate'])
    if well_avg.empty:
        return None

    well_avg = well_avg.drop(columns=['year'], errors='ignore')
    well_avg['dummydate'] = "1800-" + well_avg['dummydate'].astype(str).str.strip().str[-5:]
    wide = well_avg.pivot_table(index='dummydate', columns='type', values='Value', aggfunc='first')
    wide = wide.reindex(columns=['max', 'mean', 'min'])
    wide.columns.name = None
    return wide.reset_index()


def _is_usable_series(welldf):
    """Checks the primary series has the columns needed for formatting."""
    if not {'myLocation', 'Value'}.issubset(welldf.columns):
        return False
    if 'QualifiedTime' in welldf.columns:
        return True
    return {'Time', 'Approval'}.issubset(welldf.columns)


def _format_gwl(data, which, well):
    """
    Formats the raw primary and summary CSV text of one well into the
    canonical observation table.

    Returns None, with a warning, if the primary series is not a usable
    CSV file (e.g. an error page served in its place).
    """
    welldf = _read_csv_text(data[0])
    if not _is_usable_series(welldf):
        _warn_inaccessible(well)
        return None

    welldf['myLocation'] = welldf['myLocation'].astype(str).str.replace("OW", "", regex=False)

    # Daily averages
    if 'QualifiedTime' in welldf.columns:
        welldf = welldf.rename(columns={'QualifiedTime': 'Time'})
        welldf['Approval'] = "Validated"

    if which == 'daily':
        welldf['Time'] = pd.to_datetime(welldf['Time']).dt.normalize()
    else:
        welldf['Time'] = pd.to_datetime(welldf['Time'], utc=True).dt.tz_localize(None)
    welldf['dummydate'] = "1800-" + welldf['Time'].dt.strftime("%m-%d")

    well_avg = _historical_summary(data[1])
    if well_avg is not None:
        welldf = welldf.merge(well_avg, on='dummydate', how='left')
    else:
        welldf['max'] = np.nan
        welldf['mean'] = np.nan
        welldf['min'] = np.nan

    welldf['EMS_ID'] = np.nan
    welldf['Station_Name'] = np.nan
    welldf['Value'] = pd.to_numeric(welldf['Value'], errors='coerce')

    welldf = welldf.rename(columns={
        'myLocation': 'Well_Num',
        'Time': 'Date',
        'Value': 'GWL',
        'mean': 'Historical_Daily_Average',
        'min': 'Historical_Daily_Minimum',
        'max': 'Historical_Daily_Maximum',
        'Approval': 'Status',
    })
    return welldf[GWL_COLUMNS]
