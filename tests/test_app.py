import pytest

import app as tiler_app
from config import CFG


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(CFG, "COORDS_OUT", str(tmp_path / "coords.txt"))
    monkeypatch.setattr(CFG, "LAYOUT_HTML", str(tmp_path / "view.html"))
    monkeypatch.setitem(tiler_app.ACTIVE_RUN, "state", None)
    tiler_app.app.config["TESTING"] = True
    with tiler_app.app.test_client() as c:
        yield c


def _drain(client, limit=10000):
    for _ in range(limit):
        resp = client.post("/step")
        assert resp.status_code == 200
        data = resp.get_json()
        if data["done"]:
            return data
    raise AssertionError("run did not finish")


def test_index_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Domino Tiler" in resp.data


def test_generate_then_step_to_done(client, tmp_path):
    resp = client.post("/generate", json={"width": 2, "height": 2, "seed": 1})
    assert resp.status_code == 200
    first = resp.get_json()
    assert first["status"] == "in_progress"
    assert first["step"] == 1
    assert first["tiles"] == []
    assert first["done"] is False

    final = _drain(client)
    assert final["status"] == "done"
    assert final["ok"] is True
    assert len(final["tiles"]) == 2
    assert "<svg" in final["svg"]
    assert (tmp_path / "coords.txt").exists()
    assert (tmp_path / "view.html").exists()

    snap = client.get("/progress").get_json()
    assert snap["status"] == "Done"
    assert snap["done"] is True

    # The finished run is no longer steppable.
    assert client.post("/step").status_code == 409


def test_generate_accepts_form_fields(client):
    resp = client.post("/generate", data={"width": "4", "height": "1", "seed": "3"})
    assert resp.status_code == 200
    assert resp.get_json()["step"] == 1
    final = _drain(client)
    assert len(final["tiles"]) == 2


def test_zero_area_board_finishes_on_generate(client):
    resp = client.post("/generate", json={"width": 0, "height": 0})
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["done"] is True
    assert data["ok"] is True
    assert data["tiles"] == []


@pytest.mark.parametrize(
    "payload",
    [
        {"width": -1, "height": 4},
        {"width": 3, "height": 3},
        {"width": "abc", "height": 2},
        {"width": 10000, "height": 2},
    ],
)
def test_generate_rejects_bad_boards(client, payload):
    resp = client.post("/generate", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"]


def test_step_without_run_is_conflict(client):
    resp = client.post("/step")
    assert resp.status_code == 409


def test_new_generate_abandons_previous_run(client):
    first = client.post("/generate", json={"width": 8, "height": 8, "seed": 2}).get_json()
    client.post("/step")
    second = client.post("/generate", json={"width": 2, "height": 2, "seed": 2}).get_json()
    assert second["run_id"] == first["run_id"] + 1
    assert second["step"] == 1

    data = client.post("/step").get_json()
    assert data["run_id"] == second["run_id"]
    for tile in data["tiles"]:
        assert all(0 <= v < 2 for v in tile[:4])


def test_progress_is_not_cached(client):
    resp = client.get("/progress")
    assert resp.status_code == 200
    assert resp.headers["Cache-Control"] == "no-store, max-age=0"
    assert "run_id" in resp.get_json()


def test_invariant_violation_aborts_run(client, monkeypatch):
    from solver.errors import InvariantViolation

    client.post("/generate", json={"width": 4, "height": 4, "seed": 1})

    def _broken(state):
        raise InvariantViolation("overlapping tile")

    monkeypatch.setattr(tiler_app, "advance", _broken)
    resp = client.post("/step")
    assert resp.status_code == 500
    assert "InvariantViolation" in resp.get_json()["error"]

    assert client.post("/step").status_code == 409
    snap = client.get("/progress").get_json()
    assert snap["status"] == "Failed"
    assert snap["ok"] is False
    assert "overlapping tile" in snap["message"]


def test_export_failure_closes_run(client, monkeypatch):
    def _unwritable(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(tiler_app, "write_coords", _unwritable)
    client.post("/generate", json={"width": 2, "height": 2, "seed": 1})
    final = _drain(client)
    assert final["status"] == "done"
    assert final["ok"] is False
    assert "disk full" in final["message"]

    assert client.post("/step").status_code == 409
    snap = client.get("/progress").get_json()
    assert snap["status"] == "Failed"
    assert snap["result_url"] == ""
