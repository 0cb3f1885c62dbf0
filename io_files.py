"""Helpers for writing finished tilings to disk."""

from __future__ import annotations

import os
from typing import Optional, Sequence

from config import CFG
from models import Tile


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_coords(tiles: Sequence[Tile], Wc: int, Hc: int, base_dir: str) -> str:
    """Write one line per tile (grid coordinates) to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.COORDS_OUT, "tiling_coords.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(f"board {Wc}x{Hc} tiles {len(tiles)}\n")
        for t in tiles:
            tag = "" if t.tag is None else f" tag={t.tag}"
            f.write(f"({t.a.x},{t.a.y})-({t.b.x},{t.b.y}){tag}\n")
    return path


def write_layout_view_html(
    svg: str,
    legend_html: str,
    base_dir: str,
    grid_label: Optional[str] = None,
) -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "tiling_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    heading = f"Tiling View: {grid_label}" if grid_label else "Tiling View"
    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>Tiling View</title></head>
<body>
<h1>{heading}</h1>
<section>{svg}</section>
<section><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""
        )
    return path


__all__ = ["write_coords", "write_layout_view_html"]
