from __future__ import annotations

import json
import logging
import os
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _state_file_path() -> Path:
    configured = os.environ.get("PROGRESS_STATE_FILE")
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent / "logs" / "progress_state.json"


STATE_FILE = _state_file_path()
STATE_FILE_TMP = STATE_FILE.with_name(STATE_FILE.name + ".tmp")
_LAST_STATE_MTIME: float = 0.0


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("tiler.run_log")
    if logger.handlers:
        return logger

    log_path = Path(__file__).resolve().parent / "logs" / "tiler_runs.log"
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except OSError:
        # Progress tracking keeps working without a run log.
        logger.handlers.clear()
    return logger


RUN_LOGGER = _init_logger()


def _log_enabled() -> bool:
    return bool(RUN_LOGGER.handlers)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    try:
        return f"{float(seconds):.2f}s"
    except (TypeError, ValueError):
        return None


def _emit_log(event: str, **fields: Any) -> None:
    if not _log_enabled():
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    try:
        if extras:
            RUN_LOGGER.info("%s | %s", event, " ".join(extras))
        else:
            RUN_LOGGER.info("%s", event)
    except Exception:
        # Logging failures must never bubble back to callers.
        pass


LOG_STATE: Dict[str, Any] = {
    "run_start": None,
    "grid": "",
}


def _persist_locked() -> None:
    global _LAST_STATE_MTIME
    try:
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        with STATE_FILE_TMP.open("w", encoding="utf-8") as fh:
            json.dump(PROGRESS, fh, ensure_ascii=False, separators=(",", ":"))
        STATE_FILE_TMP.replace(STATE_FILE)
        try:
            _LAST_STATE_MTIME = STATE_FILE.stat().st_mtime
        except OSError:
            _LAST_STATE_MTIME = time.time()
    except OSError:
        # Persistence must never break progress updates.
        pass


def _load_persisted_locked(force: bool = False) -> None:
    global _LAST_STATE_MTIME
    try:
        stat = STATE_FILE.stat()
    except OSError:
        return
    if not force and stat.st_mtime <= _LAST_STATE_MTIME:
        return
    try:
        with STATE_FILE.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError):
        return
    if not isinstance(data, dict):
        return
    for key in PROGRESS.keys():
        if key in data:
            PROGRESS[key] = data[key]
    _LAST_STATE_MTIME = stat.st_mtime


# Single source of truth for the UI
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Generating | Done | Failed
    "grid": "",                # e.g. "8 × 6 cells"
    "width": 0,
    "height": 0,
    "step": 0,                 # advance() calls so far
    "tiles_placed": 0,         # tiles in the most recent step
    "tiles_total": 0,          # tiles in a complete tiling
    "best_placed": 0,          # deepest partial tiling seen
    "percent": 0.0,            # 0..100 float, board coverage
    "backtracks": 0,
    "elapsed_start": None,     # t0 (float) when the run started
    "elapsed": 0.0,            # seconds snapshot
    "message": "",
    "done": False,
    "ok": None,
    "result_url": "",
    "run_id": 0,               # monotonically increasing identifier
}

# ------------------------------
# Helpers
# ------------------------------

def _now() -> float:
    return time.time()

def _fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"

def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)

def reset() -> None:
    with PROGRESS_LOCK:
        try:
            current_run_id = int(PROGRESS.get("run_id", 0))
        except (TypeError, ValueError):
            current_run_id = 0
        PROGRESS.update({
            "status": "Idle",
            "grid": "",
            "width": 0,
            "height": 0,
            "step": 0,
            "tiles_placed": 0,
            "tiles_total": 0,
            "best_placed": 0,
            "percent": 0.0,
            "backtracks": 0,
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "result_url": "",
            "run_id": current_run_id + 1,
        })
        LOG_STATE.update({"run_start": None, "grid": ""})
        _emit_log("Progress reset")
        _persist_locked()

def start_run(width: int, height: int) -> int:
    """Mark a fresh run as generating and return its ``run_id``."""
    with PROGRESS_LOCK:
        now = _now()
        grid = f"{width} × {height} cells"
        PROGRESS.update({
            "status": "Generating",
            "grid": grid,
            "width": int(width),
            "height": int(height),
            "tiles_total": (int(width) * int(height)) // 2,
            "elapsed_start": now,
            "elapsed": 0.0,
        })
        LOG_STATE.update({"run_start": now, "grid": grid})
        _emit_log("Run started", run_id=PROGRESS["run_id"], grid=grid)
        _persist_locked()
        return int(PROGRESS["run_id"])

# ------------------------------
# Setters
# ------------------------------

def set_result_url(url: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["result_url"] = "" if url is None else str(url)
        _persist_locked()

def record_step(step: int, tiles_placed: int, backtracks: int = 0) -> None:
    with PROGRESS_LOCK:
        placed = max(0, int(tiles_placed))
        total = int(PROGRESS.get("tiles_total") or 0)
        prev_backtracks = int(PROGRESS.get("backtracks") or 0)
        PROGRESS["step"] = max(0, int(step))
        PROGRESS["tiles_placed"] = placed
        PROGRESS["best_placed"] = max(int(PROGRESS.get("best_placed") or 0), placed)
        PROGRESS["percent"] = (100.0 * placed / total) if total else 0.0
        PROGRESS["backtracks"] = max(0, int(backtracks))
        if backtracks > prev_backtracks:
            _emit_log(
                "Backtracked",
                grid=LOG_STATE.get("grid") or "",
                step=step,
                tiles=placed,
                backtracks=backtracks,
            )
        _touch_elapsed_locked()
        _persist_locked()

def set_done(ok: bool, *, reason: Any = None) -> None:
    """Mark the run complete as ``Done`` (``ok``) or ``Failed``.

    ``reason`` is surfaced via the ``message`` field.
    """

    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        now = _now()
        ok_flag = bool(ok)
        PROGRESS["status"] = "Done" if ok_flag else "Failed"
        PROGRESS["ok"] = ok_flag
        if ok_flag:
            PROGRESS["percent"] = 100.0
        if reason is not None:
            PROGRESS["message"] = str(reason)
        PROGRESS["done"] = True
        run_start = LOG_STATE.get("run_start")
        if isinstance(run_start, (int, float)):
            total = max(0.0, now - float(run_start))
        else:
            total = None
        LOG_STATE["run_start"] = None
        _emit_log(
            "Run finished",
            status=PROGRESS.get("status"),
            ok=PROGRESS.get("ok"),
            grid=PROGRESS.get("grid"),
            duration=_fmt_seconds(total),
            steps=PROGRESS.get("step"),
            backtracks=PROGRESS.get("backtracks"),
            message=PROGRESS.get("message"),
        )
        _persist_locked()

# ------------------------------
# Snapshots for the UI
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _load_persisted_locked()
        _touch_elapsed_locked()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
        snap["elapsed_str"] = _fmt_elapsed(PROGRESS["elapsed"])
        return snap


with PROGRESS_LOCK:
    _load_persisted_locked(force=True)
