# src/storage/chart_exporter.py

"""Generate an interactive Plotly HTML chart from the price history."""

import importlib
import logging
import webbrowser
from pathlib import Path
from types import ModuleType
from typing import Any

from src.config.settings import Settings
from src.models.price_snapshot import PriceSnapshot
from src.storage.history_store import HistoryStore

logger = logging.getLogger("price_tracker.chart")

_CHART_FILENAME = "price-chart.html"


def _get_plotly_go() -> ModuleType:
    """Import plotly.graph_objects lazily."""
    return importlib.import_module("plotly.graph_objects")


def _item_filter_menu(names: list[str]) -> list[dict[str, Any]]:
    """Dropdown with "All" plus one entry per item toggling trace visibility."""
    buttons: list[dict[str, Any]] = [{
        "label": "All",
        "method": "update",
        "args": [{"visible": [True] * len(names)}],
    }]
    for idx, name in enumerate(names):
        visible = [i == idx for i in range(len(names))]
        buttons.append({
            "label": name,
            "method": "update",
            "args": [{"visible": visible}],
        })
    return [{
        "buttons": buttons,
        "direction": "down",
        "x": 0.0,
        "xanchor": "left",
        "y": 1.15,
        "yanchor": "top",
    }]


def build_history_chart(
    history: dict[str, list[PriceSnapshot]],
) -> Any | None:
    """Build one line per item; ``None`` when there is nothing to plot."""
    series = {
        name: sorted(snapshots, key=lambda s: s.timestamp)
        for name, snapshots in sorted(history.items())
        if snapshots
    }
    if not series:
        return None

    go = _get_plotly_go()
    fig: Any = go.Figure()
    for name, snapshots in series.items():
        fig.add_trace(go.Scatter(
            x=[s.timestamp for s in snapshots],
            y=[s.price for s in snapshots],
            mode="lines+markers",
            name=name[:50],
            line={"shape": "spline", "smoothing": 0.3},
            hovertemplate=(
                "%{x|%Y-%m-%d %H:%M}<br>"
                "Price: $%{y:.2f}"
                "<extra></extra>"
            ),
        ))

    fig.update_layout(
        title="Price History",
        xaxis_title="Date",
        yaxis_title="Price (USD)",
        hovermode="x unified",
        template="plotly_white",
        updatemenus=_item_filter_menu(list(series)),
        legend={"orientation": "h", "y": -0.15},
    )
    return fig


def export_history_chart(
    store: HistoryStore,
    output_dir: Path | None = None,
    open_browser: bool = True,
) -> Path | None:
    """Write the history chart as HTML and return its path."""
    fig = build_history_chart(store.items())
    if fig is None:
        logger.warning("No price history to chart")
        return None

    charts_dir = output_dir or Settings.CHARTS_DIR
    charts_dir.mkdir(parents=True, exist_ok=True)
    filepath = charts_dir / _CHART_FILENAME
    fig.write_html(str(filepath))
    logger.info("Chart saved to %s", filepath)

    if open_browser:
        webbrowser.open(filepath.as_uri())

    return filepath
