"""Tests for grid layout endpoints."""
from httpx import AsyncClient


async def test_list_layouts(client: AsyncClient) -> None:
    """Only active notes' layouts are listed."""
    await client.post("/notes/")
    await client.post("/notes/")
    await client.delete("/notes/n1")

    response = await client.get("/layouts/")

    assert response.status_code == 200
    assert [e["note_id"] for e in response.json()] == ["n2"]


async def test_apply_layout_merges_user_geometry(client: AsyncClient) -> None:
    """Moved entries come first; untouched entries are kept."""
    for _ in range(3):
        await client.post("/notes/")

    response = await client.put(
        "/layouts/",
        json=[{"note_id": "n3", "x": 0, "y": 4, "w": 4, "h": 6}],
    )

    assert response.status_code == 200
    data = response.json()
    assert [e["note_id"] for e in data] == ["n3", "n1", "n2"]
    assert (data[0]["x"], data[0]["y"], data[0]["w"], data[0]["h"]) == (0, 4, 4, 6)


async def test_apply_layout_duplicate_note_id_keeps_last(client: AsyncClient) -> None:
    """A note listed twice in one request keeps a single entry."""
    await client.post("/notes/")

    response = await client.put(
        "/layouts/",
        json=[
            {"note_id": "n1", "x": 0, "y": 0, "w": 3, "h": 4},
            {"note_id": "n1", "x": 6, "y": 0, "w": 3, "h": 4},
        ],
    )

    assert response.status_code == 200
    assert [(e["note_id"], e["x"]) for e in response.json()] == [("n1", 6)]
    board = (await client.get("/board")).json()
    assert [e["note_id"] for e in board["layouts"]] == ["n1"]


async def test_apply_layout_ignores_trashed_notes(client: AsyncClient) -> None:
    """Geometry for a trashed note does not bring it back onto the grid."""
    await client.post("/notes/")
    await client.post("/notes/")
    await client.delete("/notes/n2")

    response = await client.put(
        "/layouts/",
        json=[
            {"note_id": "n1", "x": 3, "y": 0, "w": 3, "h": 4},
            {"note_id": "n2", "x": 6, "y": 0, "w": 3, "h": 4},
        ],
    )

    assert response.status_code == 200
    assert [e["note_id"] for e in response.json()] == ["n1"]


async def test_apply_layout_rejects_out_of_bounds(client: AsyncClient) -> None:
    """Sizes beyond the entry's bounds fail validation."""
    await client.post("/notes/")

    response = await client.put(
        "/layouts/",
        json=[{"note_id": "n1", "x": 0, "y": 0, "w": 10, "h": 4}],
    )

    assert response.status_code == 422
