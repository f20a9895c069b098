"""
Plot-data export for indicator series.

Each indicator exposes its retained output as a line series plus a scatter
series of signal markers:

    +1 / -1   bullish / bearish crossover on that bar
    +2 / -2   value sitting in the overbought / oversold zone

Formatting:
- format_plot_data_json: list of {name, x, y, type, signal, timestamp} objects
- format_plot_data_csv: long-format table via pandas, one row per point
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ...exceptions import InvalidParamsError

CSV_COLUMNS = ["Name", "X", "Y", "Type", "Signal", "Timestamp"]


@dataclass
class PlotData:
    """One named series ready for a charting front end."""

    name: str
    x: List[float]
    y: List[float]
    type: str = "line"
    signal: str = ""
    timestamp: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.x) != len(self.y):
            raise InvalidParamsError(
                f"mismatched X and Y lengths for {self.name}: {len(self.x)} vs {len(self.y)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "x": list(self.x), "y": list(self.y)}
        if self.type:
            data["type"] = self.type
        if self.signal:
            data["signal"] = self.signal
        if self.timestamp:
            data["timestamp"] = list(self.timestamp)
        return data


def generate_timestamps(start_time: int, count: int, interval: int) -> List[int]:
    """
    Evenly spaced integer timestamps.

    Args:
        start_time: First timestamp (any integer epoch unit).
        count: Number of timestamps; zero or less yields an empty list.
        interval: Step between consecutive timestamps.
    """
    if count <= 0:
        return []
    return [start_time + i * interval for i in range(count)]


def build_series_plot(
    name: str,
    values: Sequence[float],
    markers: Sequence[float],
    start_time: int,
    interval: int,
) -> List[PlotData]:
    """Line series for ``values`` plus a scatter of signal ``markers``."""
    if not values:
        return []
    x = [float(i) for i in range(len(values))]
    timestamps = generate_timestamps(start_time, len(values), interval)
    return [
        PlotData(name=name, x=x, y=[float(v) for v in values], type="line", timestamp=timestamps),
        PlotData(name=f"{name} Signals", x=list(x), y=[float(m) for m in markers],
                 type="scatter", signal=name, timestamp=list(timestamps)),
    ]


def format_plot_data_json(data: Sequence[PlotData]) -> str:
    """Serialise plot series as a JSON array."""
    return json.dumps([d.to_dict() for d in data])


def plot_data_frame(data: Sequence[PlotData]) -> pd.DataFrame:
    """Long-format DataFrame with one row per plotted point."""
    frames = []
    for d in data:
        timestamps: List[Optional[int]] = list(d.timestamp) + [None] * (len(d.x) - len(d.timestamp))
        frames.append(pd.DataFrame({
            "Name": d.name,
            "X": d.x,
            "Y": d.y,
            "Type": d.type,
            "Signal": d.signal,
            "Timestamp": pd.array(timestamps[: len(d.x)], dtype="Int64"),
        }))
    if not frames:
        return pd.DataFrame(columns=CSV_COLUMNS)
    return pd.concat(frames, ignore_index=True)[CSV_COLUMNS]


def format_plot_data_csv(data: Sequence[PlotData]) -> str:
    """Serialise plot series as CSV with a header row; empty input yields ""."""
    if not data:
        return ""
    return plot_data_frame(data).to_csv(index=False, float_format="%.6f")
