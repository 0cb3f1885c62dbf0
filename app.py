# app.py: step-by-step tiling viewer; one active run at a time
from __future__ import annotations
import os
import random
import threading
from typing import Any, Dict, Optional, Tuple

from flask import Flask, request, render_template_string, send_from_directory, jsonify, url_for

from config import CFG
from io_files import write_coords, write_layout_view_html
from render import render_tiles
from solver.errors import ConfigurationError, TilingError
from solver.generator import Done, GeneratorState, StepResult, advance, create_generator

from progress import (
    reset as progress_reset,
    snapshot as progress_json,
    start_run, record_step, set_done, set_result_url,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _resolve_output_paths(configured: str, fallback: str) -> Tuple[str, str, str]:
    name = (configured or "").strip() or fallback
    if os.path.isabs(name):
        full_path = name
    else:
        full_path = os.path.abspath(os.path.join(BASE_DIR, name))
    directory = os.path.dirname(full_path) or BASE_DIR
    filename = os.path.basename(full_path) or fallback
    return full_path, directory, filename


_COORDS_FULL_PATH, COORDS_DIR, COORDS_FILENAME = _resolve_output_paths(
    CFG.COORDS_OUT, "tiling_coords.txt"
)
_LAYOUT_FULL_PATH, LAYOUT_DIR, LAYOUT_FILENAME = _resolve_output_paths(
    CFG.LAYOUT_HTML, "tiling_view.html"
)

# The run currently driven by /step. Replaced wholesale by /generate so an
# older run can never touch the progress state again.
RUN_LOCK = threading.Lock()
ACTIVE_RUN: Dict[str, Any] = {"state": None, "run_id": 0}

app = Flask(__name__)

INDEX_HTML = """<!doctype html>
<html><head><meta charset='utf-8'><title>Domino Tiler</title></head>
<body>
<h1>Domino Tiler</h1>
<form id="gen">
  <label>Width <input name="width" type="number" min="0" max="{{ max_dim }}" value="{{ width }}"></label>
  <label>Height <input name="height" type="number" min="0" max="{{ max_dim }}" value="{{ height }}"></label>
  <label>Seed <input name="seed" type="number"></label>
  <button type="submit">Generate</button>
</form>
<p id="status"></p>
<div id="board"></div>
<script>
let runId = 0;
async function pump(id) {
  while (id === runId) {
    const resp = await fetch("{{ step_url }}", {method: "POST"});
    const data = await resp.json();
    if (id !== runId) return;
    if (!resp.ok) { document.getElementById("status").textContent = data.error; return; }
    show(data);
    if (data.done) return;
    await new Promise(r => setTimeout(r, {{ delay }}));
  }
}
function show(data) {
  document.getElementById("board").innerHTML = data.svg || "";
  document.getElementById("status").textContent =
    data.status + " | step " + data.step + " | tiles " + data.tiles.length + (data.message ? " | " + data.message : "");
}
document.getElementById("gen").addEventListener("submit", async (ev) => {
  ev.preventDefault();
  const body = Object.fromEntries(new FormData(ev.target).entries());
  if (body.seed === "") delete body.seed;
  const resp = await fetch("{{ generate_url }}", {
    method: "POST", headers: {"Content-Type": "application/json"}, body: JSON.stringify(body)});
  const data = await resp.json();
  if (!resp.ok) { document.getElementById("status").textContent = data.error; return; }
  runId = data.run_id;
  show(data);
  if (!data.done) pump(runId);
});
</script>
</body></html>"""


@app.after_request
def _no_cache_progress(resp):
    if request.path in ("/progress", "/step"):
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


@app.route("/")
def index():
    return render_template_string(
        INDEX_HTML,
        width=CFG.DEFAULT_WIDTH,
        height=CFG.DEFAULT_HEIGHT,
        max_dim=CFG.MAX_DIMENSION,
        delay=CFG.STEP_DELAY_MS,
        step_url=url_for("step"),
        generate_url=url_for("generate"),
    )


def _merge_like_mapping() -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)
    for k, v in request.form.to_dict(flat=False).items():
        merged.setdefault(k, v)
    for k, v in request.args.to_dict(flat=False).items():
        merged.setdefault(k, v)
    return merged


def _first_int(like: Dict[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    value = like.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {value!r}") from None


def _finish_run(state: GeneratorState, result: StepResult) -> Tuple[bool, str]:
    """Export a finished run and close it; returns the final (ok, message)."""
    ACTIVE_RUN["state"] = None
    ok_flag = isinstance(result, Done)
    if ok_flag:
        svg, legend = render_tiles(result.tiles, state.width, state.height)
        grid_label = f"{state.width} × {state.height} cells"
        try:
            write_coords(result.tiles, state.width, state.height, BASE_DIR)
            write_layout_view_html(svg, legend, BASE_DIR, grid_label=grid_label)
        except OSError as e:
            ok_flag = False
            message = f"tiling finished but export failed: {e}"
        else:
            message = f"Tiled {state.width} × {state.height} with {len(result.tiles)} dominoes"
    else:
        message = result.reason
    set_done(ok_flag, reason=message)
    set_result_url(url_for("download_html") if ok_flag else "")
    return ok_flag, message


def _advance_locked(state: GeneratorState, run_id: int) -> Dict[str, Any]:
    result = advance(state)
    record_step(result.step, len(result.tiles), state.backtracks)
    svg, _legend = render_tiles(result.tiles, state.width, state.height)
    payload: Dict[str, Any] = {
        "run_id": run_id,
        "status": result.status,
        "step": result.step,
        "tiles": [t.to_list() for t in result.tiles],
        "svg": svg,
        "done": result.final,
        "ok": isinstance(result, Done) if result.final else None,
        "message": getattr(result, "reason", ""),
    }
    if result.final:
        payload["ok"], payload["message"] = _finish_run(state, result)
    return payload


def _abort_locked(exc: Exception) -> Tuple[Any, int]:
    reason = f"generator exception: {type(exc).__name__}: {exc}"
    ACTIVE_RUN["state"] = None
    set_done(False, reason=reason)
    return jsonify({"error": reason}), 500


@app.route("/generate", methods=["POST"])
def generate():
    like = _merge_like_mapping()
    try:
        width = _first_int(like, "width", CFG.DEFAULT_WIDTH)
        height = _first_int(like, "height", CFG.DEFAULT_HEIGHT)
        seed = _first_int(like, "seed", None)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    if width > CFG.MAX_DIMENSION or height > CFG.MAX_DIMENSION:
        return jsonify({"error": f"board sides are limited to {CFG.MAX_DIMENSION} cells"}), 400

    rng = random.Random(seed) if seed is not None else random.Random()
    with RUN_LOCK:
        ACTIVE_RUN["state"] = None
        progress_reset()
        try:
            state = create_generator(width, height, rng)
        except ConfigurationError as e:
            set_done(False, reason=str(e))
            return jsonify({"error": str(e)}), 400
        run_id = start_run(width, height)
        ACTIVE_RUN.update({"state": state, "run_id": run_id})
        try:
            payload = _advance_locked(state, run_id)
        except TilingError as e:
            return _abort_locked(e)
    return jsonify(payload)


@app.route("/step", methods=["POST"])
def step():
    with RUN_LOCK:
        state = ACTIVE_RUN.get("state")
        if state is None:
            return jsonify({"error": "no active run; POST /generate first"}), 409
        try:
            payload = _advance_locked(state, int(ACTIVE_RUN["run_id"]))
        except TilingError as e:
            return _abort_locked(e)
    return jsonify(payload)


@app.route("/progress")
def progress():
    return jsonify(progress_json())


@app.route("/download/coords")
def download_coords():
    return send_from_directory(COORDS_DIR, COORDS_FILENAME, as_attachment=True)


@app.route("/download/html")
def download_html():
    return send_from_directory(LAYOUT_DIR, LAYOUT_FILENAME, as_attachment=True)


if __name__ == "__main__":
    app.run(debug=False)
