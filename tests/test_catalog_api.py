"""
Tests for the task catalog endpoints and seeding.
"""
from planta.services.areas import all_areas
from planta.services.catalog import seed_catalog_from_areas


def _create(client, **overrides):
    body = {"proceso": "pintura", "seccion": "Cabina 1", "label": "Lijado fino", "activa": True}
    body.update(overrides)
    return client.post("/tareas", json=body)


class TestCatalog:
    def test_create_and_list(self, client):
        response = _create(client)
        assert response.status_code == 201
        entry = response.json()["tarea"]
        assert entry["proceso"] == "pintura"
        assert entry["seccion"] == "Cabina 1"

        listed = client.get("/tareas")
        assert [e["id"] for e in listed.json()] == [entry["id"]]
        assert listed.headers["Cache-Control"].startswith("no-store")

    def test_filters(self, client):
        _create(client)
        _create(client, proceso="chasis", label="Granallado", activa=False)
        assert [e["label"] for e in client.get("/tareas", params={"proceso": "chasis"}).json()] == ["Granallado"]
        assert [e["label"] for e in client.get("/tareas", params={"activa": "true"}).json()] == ["Lijado fino"]

    def test_blank_section_is_stored_as_null(self, client):
        assert _create(client, seccion="   ").json()["tarea"]["seccion"] is None

    def test_invalid_process(self, client):
        assert _create(client, proceso="soldadura").status_code == 422

    def test_update(self, client):
        entry_id = _create(client).json()["tarea"]["id"]
        response = client.put(f"/tareas/{entry_id}", json={"label": "Lijado grueso", "activa": False})
        assert response.json() == {"status": "success"}
        entry = client.get("/tareas").json()[0]
        assert (entry["label"], entry["activa"], entry["seccion"]) == ("Lijado grueso", False, "Cabina 1")

    def test_update_can_clear_section(self, client):
        entry_id = _create(client).json()["tarea"]["id"]
        client.put(f"/tareas/{entry_id}", json={"seccion": None})
        assert client.get("/tareas").json()[0]["seccion"] is None

    def test_empty_update_is_noop(self, client):
        entry_id = _create(client).json()["tarea"]["id"]
        assert client.put(f"/tareas/{entry_id}", json={}).json() == {"status": "noop"}

    def test_missing_entry(self, client):
        assert client.put("/tareas/999", json={"label": "X"}).status_code == 404
        assert client.delete("/tareas/999").status_code == 404

    def test_delete(self, client):
        entry_id = _create(client).json()["tarea"]["id"]
        assert client.delete(f"/tareas/{entry_id}").json() == {"status": "success"}
        assert client.get("/tareas").json() == []


class TestSeedCatalog:
    def test_seed_is_idempotent(self, db_session):
        expected = sum(len(area.checklist) for area in all_areas())
        assert seed_catalog_from_areas(db_session) == expected
        assert seed_catalog_from_areas(db_session) == 0

    def test_seeded_entries_are_listed(self, client, db_session):
        seed_catalog_from_areas(db_session)
        labels = [e["label"] for e in client.get("/tareas", params={"proceso": "chasis"}).json()]
        assert "Primer aplicado" in labels
