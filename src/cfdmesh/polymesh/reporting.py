# -*- coding: utf-8 -*-
"""
Text reports for mesh quality metrics.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import numpy as np

if TYPE_CHECKING:
    from .quality import MeshQuality

_ROW = "  {name:<25} {lo:>15} {hi:>15} {avg:>15}"


def format_quality_summary(quality: Optional["MeshQuality"]) -> str:
    """
    Formats a summary of the computed mesh quality metrics.
    """
    if quality is None:
        return "Quality metrics not computed."

    sections = [
        f"\n{'--- Mesh Quality Metrics ---':^80}",
        _format_metric_table(quality),
        _format_connectivity_issues(quality),
    ]
    return "\n".join(sections)


def _format_metric_table(quality: "MeshQuality") -> str:
    lines: List[Optional[str]] = [
        _ROW.format(name="Metric", lo="Min", hi="Max", avg="Average"),
        _ROW.format(name="-" * 24, lo="-" * 15, hi="-" * 15, avg="-" * 15),
    ]
    if quality.min_max_volume_ratio > 0:
        lines.append(
            _ROW.format(
                name="Min/Max Measure Ratio",
                lo=f"{quality.min_max_volume_ratio:.4f}",
                hi="-",
                avg="-",
            )
        )
    lines.append(_format_metric_row("Skewness", quality.cell_skewness_values))
    lines.append(
        _format_metric_row("Non-Orthogonality (deg)", quality.cell_non_orthogonality_values)
    )
    lines.append(_format_metric_row("Aspect Ratio", quality.cell_aspect_ratio_values))
    return "\n".join(line for line in lines if line)


def _format_metric_row(name: str, values: np.ndarray) -> Optional[str]:
    """Formats one metric row over the finite values, or None if there are none."""
    finite = values[np.isfinite(values)] if values.size else values
    if finite.size == 0:
        return None
    return _ROW.format(
        name=name,
        lo=f"{np.min(finite):.4f}",
        hi=f"{np.max(finite):.4f}",
        avg=f"{np.mean(finite):.4f}",
    )


def _format_connectivity_issues(quality: "MeshQuality") -> str:
    lines = [f"\n{'--- Connectivity Check ---':^80}"]
    if quality.connectivity_issues:
        lines.append("  Issues Found:")
        lines.extend(f"    - {issue}" for issue in quality.connectivity_issues)
    else:
        lines.append("  No connectivity issues found.")
    return "\n".join(lines)
