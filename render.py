from typing import Dict, List, Sequence, Tuple

from config import CFG
from models import Tile

COLORS = ["silver", "gray"]


def _color(tile: Tile) -> str:
    tag = tile.tag if tile.tag is not None else 0
    return COLORS[tag % len(COLORS)]


def render_tiles(tiles: Sequence[Tile], Wc: int, Hc: int, cell_px: int = 0) -> Tuple[str, str]:
    """Return (svg, legend_html) for a tile list on a ``Wc`` × ``Hc`` board."""
    scale = int(cell_px or CFG.CELL_PX)
    svg_w = max(0, Wc) * scale + 2
    svg_h = max(0, Hc) * scale + 2

    counts: Dict[str, int] = {}
    rects = []
    for t in tiles:
        min_x, min_y, max_x, max_y = t.bounds()
        x = min_x * scale + 1
        y = min_y * scale + 1
        w = (max_x - min_x + 1) * scale
        h = (max_y - min_y + 1) * scale
        kind = "horizontal" if t.horizontal else "vertical"
        counts[kind] = counts.get(kind, 0) + 1
        rects.append(
            f'<rect x="{x}" y="{y}" width="{w}" height="{h}" rx="{max(1, scale // 4)}" '
            f'fill="{_color(t)}" stroke="black" stroke-width="2"/>'
        )
    grid = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="tiling-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{grid}{"".join(rects)}</svg>'
    )

    legend = "".join(f"<li>{kind}: {n}</li>" for kind, n in sorted(counts.items()))
    return svg, legend


def render_ascii(tiles: Sequence[Tile], Wc: int, Hc: int) -> str:
    """Text view: ``<>`` for horizontal tiles, ``^``/``v`` for vertical, ``.`` free."""
    rows: List[List[str]] = [["."] * max(0, Wc) for _ in range(max(0, Hc))]
    for t in tiles:
        min_x, min_y, max_x, max_y = t.bounds()
        if t.horizontal:
            rows[min_y][min_x] = "<"
            rows[max_y][max_x] = ">"
        else:
            rows[min_y][min_x] = "^"
            rows[max_y][max_x] = "v"
    return "\n".join("".join(r) for r in rows)
