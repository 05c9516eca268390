"""
Report Generation for AHMA Results

Console, JSON and CSV renderings of an `AHMAOutput`. Charting and any
interactive presentation are left to the consumer of these files.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from ahma.ahma_engine import AHMAOutput
from ahma.config import VERSION

logger = logging.getLogger(__name__)


def _round(value: Optional[float], digits: int = 4) -> Optional[float]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return round(float(value), digits)


# =============================================================================
# CONSOLE REPORT
# =============================================================================

def print_ahma_report(output: AHMAOutput, max_zones: int = 10) -> None:
    """
    Print an AHMA summary to the console.

    Parameters
    ----------
    output : AHMAOutput
        Output from AHMAEngine.process()
    max_zones : int
        Number of most recent zones to list
    """
    metrics = output.metrics
    params = output.parameters
    last = output.points[-1]

    print("\n" + "=" * 70)
    print("ADAPTIVE HULL MOVING AVERAGE REPORT")
    print("=" * 70)
    print(f"Period: {output.period[0]} to {output.period[1]} ({len(output.points)} points)")
    print(f"Base Period: {params.base_period}")
    print(f"Adaptive Sensitivity: {params.sensitivity:.2f}")
    print(f"Normalization: {output.normalization.value}")
    print(f"Generated: {output.generated_at}")
    print(f"Version: {output.version}")

    print("\n" + "-" * 70)
    print("LATEST READING")
    print("-" * 70)
    print(f"Price: {last.close:.2f}")
    print(f"AHMA: {last.ahma:.2f}" if last.ahma is not None else "AHMA: n/a")
    print(f"Warm-up: first AHMA value at index {output.first_ahma_index}")
    print(f"Max volatility: {output.max_volatility:.4f}")

    print("\n" + "-" * 70)
    print("METRICS")
    print("-" * 70)
    print(f"  Current Bias:     {metrics.format_bias()}")
    print(f"  Slope Strength:   {metrics.format_slope()} ({metrics.slope_tone.value})")
    print(f"  Pullback Z-Score: {metrics.format_pullback()} ({metrics.pullback_tone.value})")
    for note in metrics.notes:
        print(f"  ! {note}")

    print("\n" + "-" * 70)
    print(f"TREND ZONES ({len(output.zones)} total)")
    print("-" * 70)
    for zone in output.zones[-max_zones:]:
        print(
            f"  {zone.start_label} -> {zone.end_label}: "
            f"{zone.bias.value.upper()} ({zone.length} bars)"
        )

    print("\n" + "=" * 70)


# =============================================================================
# JSON REPORT
# =============================================================================

def build_report(output: AHMAOutput) -> Dict[str, Any]:
    """Report content as a JSON-serializable dictionary."""
    metrics = output.metrics
    return {
        "metadata": {
            "generated_at": datetime.now().isoformat(),
            "report_version": VERSION,
            "engine_version": output.version,
            "period": {"start": output.period[0], "end": output.period[1]},
            "points": len(output.points),
        },
        "parameters": {
            "base_period": output.parameters.base_period,
            "sensitivity": output.parameters.sensitivity,
            "volatility_period": output.parameters.vol_period,
            "normalization": output.normalization.value,
        },
        "summary": {
            "first_ahma_index": output.first_ahma_index,
            "max_volatility": _round(output.max_volatility, 6),
        },
        "metrics": {
            "bias": metrics.bias.value,
            "slope_percent": _round(metrics.slope_percent),
            "slope_tone": metrics.slope_tone.value,
            "pullback_zscore": _round(metrics.pullback_zscore),
            "pullback_tone": metrics.pullback_tone.value,
            "notes": metrics.notes,
        },
        "zones": [
            {
                "start": z.start_label,
                "end": z.end_label,
                "bias": z.bias.value,
                "bars": z.length,
            }
            for z in output.zones
        ],
        "dataset": [
            {
                "date": p.label,
                "close": p.close,
                "ahma": _round(p.ahma),
                "bias": p.bias.value if p.bias is not None else None,
            }
            for p in output.points
        ],
    }


def generate_json_report(output: AHMAOutput, output_path: Path) -> Path:
    """Write the JSON report; absent AHMA values are written as null."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(build_report(output), f, indent=2, default=str)
    logger.info(f"Generated JSON: {output_path}")
    return output_path


# =============================================================================
# CSV EXPORT
# =============================================================================

def export_dataset_csv(output: AHMAOutput, output_path: Path) -> Path:
    """Write the per-point dataset as CSV; absent AHMA values are left empty."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output.to_frame().to_csv(output_path, float_format="%.6f")
    logger.info(f"Exported dataset: {output_path} ({len(output.points):,} rows)")
    return output_path
