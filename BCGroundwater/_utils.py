"""
This script provides the Mann-Kendall test statistics and Sen's slope
estimator used by the prewhitened trend tests.
"""

import warnings
import numpy as np
from scipy.stats import norm


EPSILON = 1e-10


def _rle_lengths(a):
    """
    Calculates the lengths of runs of equal values in an array.
    Equivalent to R's `rle(x)$lengths`.
    """
    a = np.asarray(a)
    if len(a) == 0:
        return np.array([], dtype=int)
    y = a[1:] != a[:-1]
    i = np.append(np.where(y), len(a) - 1)
    return np.diff(np.append(-1, i))


def _rle(a):
    """
    Run-length encoding of an array.

    Returns:
        tuple: (values, lengths, starts) of each run, as numpy arrays.
    """
    a = np.asarray(a)
    lengths = _rle_lengths(a)
    if len(lengths) == 0:
        return a[:0], lengths, np.array([], dtype=int)
    starts = np.concatenate(([0], np.cumsum(lengths)[:-1]))
    return a[starts], lengths, starts


def _mk_score(x):
    """Mann-Kendall S statistic of a series ordered in time."""
    x = np.asarray(x, dtype=float)
    n = len(x)
    s = 0
    for k in range(n - 1):
        s += np.sum(x[k + 1:n] > x[k]) - np.sum(x[k + 1:n] < x[k])
    return s


def _variance_s(x):
    """Variance of S with the correction for tied values."""
    x = np.asarray(x, dtype=float)
    n = len(x)
    unique_x, tp = np.unique(x, return_counts=True)
    if n == len(unique_x):
        return (n * (n - 1) * (2 * n + 5)) / 18
    return (n * (n - 1) * (2 * n + 5) - np.sum(tp * (tp - 1) * (2 * tp + 5))) / 18


def _kendall_tau(x, s):
    """Kendall's tau-b between the series and its time order."""
    x = np.asarray(x, dtype=float)
    n = len(x)
    n0 = n * (n - 1) / 2.0
    _, tp = np.unique(x, return_counts=True)
    n1 = np.sum(tp * (tp - 1)) / 2.0
    denom = np.sqrt(n0 - n1) * np.sqrt(n0)
    if denom < EPSILON:
        return np.nan
    return s / denom


def _z_score(s, var_s):
    if var_s < EPSILON:
        warnings.warn("Variance near zero, Z-score may be unreliable", UserWarning)
        return 0

    if s > 0:
        return (s - 1) / np.sqrt(var_s)
    return (s + 1) / np.sqrt(var_s) if s < 0 else 0


def _p_value(z):
    """Two-sided p-value of a Z statistic."""
    return 2 * (1 - norm.cdf(abs(z)))


def _mann_kendall(x):
    """
    Mann-Kendall test of a series against its time order.

    Returns:
        tuple: (s, var_s, tau, p) where p is the two-sided significance.
    """
    x = np.asarray(x, dtype=float)
    x = x[~np.isnan(x)]
    if len(x) < 3:
        return 0, 0, np.nan, np.nan
    s = _mk_score(x)
    var_s = _variance_s(x)
    z = _z_score(s, var_s)
    return s, var_s, _kendall_tau(x, s), _p_value(z)


def _sens_slopes(x, t):
    """
    Computes the pairwise slopes of Sen's estimator using a vectorized
    approach. Pairs with equal times are skipped.
    """
    x = np.asarray(x, dtype=float)
    t = np.asarray(t, dtype=float)
    n = len(x)
    if n < 2:
        return np.array([])

    i, j = np.triu_indices(n, k=1)
    x_diff = x[j] - x[i]
    t_diff = t[j] - t[i]

    valid_mask = t_diff != 0
    return x_diff[valid_mask] / t_diff[valid_mask]


def _sens_slope(x, t):
    """
    Sen's slope and intercept of x against t.

    The intercept is the median of the residuals ``x - slope * t``.
    """
    x = np.asarray(x, dtype=float)
    t = np.asarray(t, dtype=float)
    slopes = _sens_slopes(x, t)
    if len(slopes) == 0:
        return np.nan, np.nan, slopes
    slope = np.median(slopes)
    intercept = np.median(x - slope * t)
    return slope, intercept, slopes


def _confidence_intervals(slopes, var_s, alpha):
    """
    Computes the confidence intervals for Sen's slope.
    """
    valid_slopes = slopes[~np.isnan(slopes)]
    n = len(valid_slopes)

    if n == 0 or var_s == 0:
        return np.nan, np.nan

    # For a two-sided confidence interval
    Z = norm.ppf(1 - alpha / 2)

    # Ranks of the lower and upper confidence limits (1-based)
    C = Z * np.sqrt(var_s)
    M1 = (n - C) / 2
    M2 = (n + C) / 2

    sorted_slopes = np.sort(valid_slopes)

    # Interpolate to find the values at the fractional ranks
    ranks = np.arange(1, n + 1)
    lower_ci = np.interp(M1, ranks, sorted_slopes)
    upper_ci = np.interp(M2, ranks, sorted_slopes)

    return lower_ci, upper_ci


def _lag1_autocorrelation(x):
    """
    Lag-1 sample autocorrelation, computed like R's ``acf`` with
    ``na.action = na.pass``: missing values are skipped pairwise.
    """
    x = np.asarray(x, dtype=float)
    valid = ~np.isnan(x)
    if valid.sum() < 3:
        return np.nan
    centred = x - np.nanmean(x)
    denom = np.nansum(centred ** 2)
    if denom < EPSILON:
        return np.nan
    return np.nansum(centred[:-1] * centred[1:]) / denom
