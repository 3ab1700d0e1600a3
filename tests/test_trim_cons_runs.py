import numpy as np
import pytest
from BCGroundwater import trim_cons_runs


@pytest.fixture
def head_runs():
    """
    Four runs of zeros in the head: two within the first 10%, one that falls
    within 10% once the first two are removed, and one that never does. One
    more run sits in the interior.
    """
    rng = np.random.default_rng(20)
    x = rng.standard_normal(100000)
    for start, stop in [(10, 21), (2000, 2011), (11000, 11021), (20000, 21001), (55000, 55011)]:
        x[start:stop] = 0
    return x


def _kept_range(keep):
    idx = np.flatnonzero(keep)
    return idx[0], idx[-1]


def test_trim_head_runs(head_runs):
    keep = trim_cons_runs(head_runs, val=0, n_consec=5, head=0.1, tail=0.9)
    assert _kept_range(keep) == (11021, 99999)
    # Runs left in place
    assert keep[20000:21001].all()
    assert keep[55000:55011].all()


def test_trim_tail_runs(head_runs):
    y = head_runs[::-1]
    keep = trim_cons_runs(y, val=0, n_consec=5, head=0.1, tail=0.9)
    assert _kept_range(keep) == (0, 88978)
    assert keep[78999:80000].all()


def test_trim_head_and_tail_runs(head_runs):
    y = head_runs[::-1]
    z = np.concatenate([head_runs[:50000], y[50000:]])
    keep = trim_cons_runs(z, val=0, n_consec=5, head=0.1, tail=0.9)
    assert _kept_range(keep) == (11021, 88978)
    assert keep[20000:21001].all()
    assert keep[78999:80000].all()


def test_short_runs_are_kept():
    x = np.ones(100)
    x[2:6] = 0
    x[95:99] = 0
    keep = trim_cons_runs(x, val=0, n_consec=5)
    assert keep.all()


def test_run_straddling_head_boundary_is_kept():
    x = np.ones(100)
    x[5:15] = 0
    keep = trim_cons_runs(x, val=0, n_consec=5, head=0.1, tail=0.9)
    assert keep.all()


def test_run_at_very_end_is_trimmed():
    x = np.ones(100)
    x[93:] = 0
    keep = trim_cons_runs(x, val=0, n_consec=5, head=0.1, tail=0.9)
    assert _kept_range(keep) == (0, 92)


def test_kept_block_is_contiguous(head_runs):
    keep = trim_cons_runs(head_runs[::-1], val=0)
    idx = np.flatnonzero(keep)
    assert (np.diff(idx) == 1).all()


def test_invalid_arguments():
    with pytest.raises(ValueError):
        trim_cons_runs(np.zeros(10), head=0.95, tail=0.9)
    with pytest.raises(ValueError):
        trim_cons_runs(np.zeros(10), n_consec=0)


def test_empty_series():
    assert len(trim_cons_runs(np.array([]))) == 0
