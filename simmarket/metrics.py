"""
Market Metrics.

Conservation oracles for settlement and summaries of price series and
wealth distributions.

A round must conserve, across all participants:
- the units of every resource (what a buyer gains a seller loses)
- the total cash (what a buyer pays a seller collects)

The market does not check this itself; a participant with broken
Buy/Deliver accounting is caught by comparing totals before and after.
"""

from typing import Any, Iterable

import numpy as np
from scipy import stats


def total_units(holders: Iterable[Any], resource: Any) -> float:
    """Sum the inventory of ``resource`` across participants."""
    return float(sum(h.inventory.get(resource, 0.0) for h in holders))


def total_cash(holders: Iterable[Any]) -> float:
    """Sum the cash (``cash`` or ``money`` attribute) across participants."""
    return float(sum(h.cash if hasattr(h, "cash") else h.money for h in holders))


def is_conserved(before: float, after: float, tol: float = 1e-9) -> bool:
    """True if two totals agree up to a relative tolerance."""
    return bool(np.isclose(before, after, rtol=tol, atol=tol))


def price_summary(prices: Iterable[float]) -> dict:
    """
    Summarize a price series.

    Returns:
        Dictionary with count, mean, std, min, max and volatility_pct
        (std as a percentage of the mean). All zero for an empty series.
    """
    arr = np.asarray(list(prices), dtype=float)
    if arr.size == 0:
        return {"count": 0, "mean": 0.0, "std": 0.0, "min": 0.0, "max": 0.0, "volatility_pct": 0.0}

    mean = float(np.mean(arr))
    std = float(np.std(arr))
    return {
        "count": int(arr.size),
        "mean": mean,
        "std": std,
        "min": float(np.min(arr)),
        "max": float(np.max(arr)),
        "volatility_pct": std / mean * 100 if mean > 0 else 0.0,
    }


def compute_inequality_metrics(values: list[float]) -> dict:
    """
    Compute inequality metrics for a wealth distribution.

    Args:
        values: Wealth (cash or inventory value) per participant

    Returns:
        Dictionary with:
        - gini: Gini coefficient (0 = equality, 1 = one holds all)
        - skewness: Distribution skewness (>0 = a few rich participants)
        - max_mean_ratio: max(value) / mean(value)
        - top1_share: Share held by the richest participant
        - bottom50_share: Share held by the poorer half
    """
    arr = np.array(values, dtype=float)
    n = len(arr)

    if n == 0:
        return {
            "gini": 0.0,
            "skewness": 0.0,
            "max_mean_ratio": 1.0,
            "top1_share": 0.0,
            "bottom50_share": 0.5,
        }

    total = np.sum(arr)
    mean = np.mean(arr)

    # Skewness is undefined for constant or tiny samples
    if n > 2 and np.std(arr) > 1e-10:
        raw_skew = stats.skew(arr)
        skewness = float(raw_skew) if np.isfinite(raw_skew) else 0.0
    else:
        skewness = 0.0

    if total <= 0:
        return {
            "gini": 0.0,
            "skewness": skewness,
            "max_mean_ratio": 0.0,
            "top1_share": 0.0,
            "bottom50_share": 0.0,
        }

    # Shift so every value is positive before computing the Gini coefficient
    shifted = np.sort(arr - min(np.min(arr), 0.0))
    cumsum = np.cumsum(shifted)
    gini = (n + 1 - 2 * np.sum(cumsum) / cumsum[-1]) / n

    sorted_asc = np.sort(arr)
    bottom_half = sorted_asc[: n // 2]

    return {
        "gini": float(gini),
        "skewness": skewness,
        "max_mean_ratio": float(np.max(arr) / mean) if mean > 0 else 0.0,
        "top1_share": float(sorted_asc[-1] / total),
        "bottom50_share": float(np.sum(bottom_half) / total) if len(bottom_half) > 0 else 0.0,
    }
