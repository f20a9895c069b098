"""Plot-data export for indicator series (JSON and CSV)."""

from .plot_export import (
    PlotData,
    build_series_plot,
    format_plot_data_csv,
    format_plot_data_json,
    generate_timestamps,
    plot_data_frame,
)

__all__ = [
    "PlotData",
    "build_series_plot",
    "format_plot_data_csv",
    "format_plot_data_json",
    "generate_timestamps",
    "plot_data_frame",
]
