from conftest import insert_song

UNKNOWN_ID = "6f1c1f4e-3a51-4b0c-9d7a-1f0a2b3c4d5e"


def test_create_and_list_playlist(client, songs):
    a = insert_song(songs, title="a", n=1)
    b = insert_song(songs, title="b", n=2)

    resp = client.post("/api/playlists/", json={"name": "Evening", "songs": [b.id, a.id]})
    assert resp.status_code == 201
    playlist = resp.json()
    assert playlist["name"] == "Evening"
    assert playlist["songs"] == [b.id, a.id]

    listed = client.get("/api/playlists/").json()
    assert [p["id"] for p in listed] == [playlist["id"]]

    tracks = client.get(f"/api/playlists/{playlist['id']}/songs").json()
    assert [t["title"] for t in tracks] == ["b", "a"]


def test_playlist_requires_name(client):
    resp = client.post("/api/playlists/", json={"name": "  "})
    assert resp.status_code == 400


def test_playlist_rejects_malformed_song_ids(client):
    resp = client.post("/api/playlists/", json={"name": "x", "songs": ["42"]})
    assert resp.status_code == 400


def test_playlist_body_validation_is_400(client):
    resp = client.post("/api/playlists/", json={"songs": []})
    assert resp.status_code == 400
    assert "message" in resp.json()


def test_unknown_playlist_is_404(client):
    assert client.get(f"/api/playlists/{UNKNOWN_ID}/songs").status_code == 404


def test_history(client, songs):
    a = insert_song(songs, n=1)
    b = insert_song(songs, n=2)

    assert client.post("/api/history/", json={"user_id": "u1", "song_id": a.id}).status_code == 201
    assert client.post("/api/history/", json={"user_id": "u1", "song_id": b.id}).status_code == 201

    entries = client.get("/api/history/u1").json()
    assert [e["song_id"] for e in entries] == [b.id, a.id]
    assert client.get("/api/history/someone-else").json() == []


def test_history_unknown_song_is_404(client):
    resp = client.post("/api/history/", json={"user_id": "u1", "song_id": UNKNOWN_ID})
    assert resp.status_code == 404
