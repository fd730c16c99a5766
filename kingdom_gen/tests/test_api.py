import importlib

from starlette.testclient import TestClient

from kingdom_gen.services import catalogue_loader
from kingdom_gen.tests.generator_test_utils import SAMPLE_CATALOGUE, FakeGenerator
from kingdom_gen.type_definitions import GeneratedSetup


def _client():
    return TestClient(importlib.import_module("kingdom_gen.web.app").app)


def test_catalogue(client):
    r = client.get("/api/catalogue")
    assert r.status_code == 200
    data = r.json()
    assert data["expansion_cards"] == SAMPLE_CATALOGUE
    assert data["project_counts"] == [0, 1, 2]
    assert data["bane_counts"] == [0, 1, 2, 3]


def test_catalogue_not_ready():
    r = _client().get("/api/catalogue")
    assert r.status_code == 503
    assert r.json()["error"]["code"] == "GEN_NOT_READY"


def test_generate_ok(client):
    r = client.post("/api/generate", json={"include_cards": ["YoungWitch"], "project_count": 0})
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert data["request"]["include_cards"] == ["YoungWitch"]
    assert data["setup"]["bane_card"] == "Harbinger"
    labels = [g["expansion_label"] for g in data["display"]["groups"]]
    assert labels == sorted(labels)
    assert data["display"]["project_cards"] == []


def test_empty_lists_travel_as_null(client, fake_generator):
    r = client.post("/api/generate", json={"include_expansions": [], "ban_cards": [], "include_cards": [" "]})
    assert r.status_code == 200
    req = fake_generator.requests[-1]
    assert req.include_expansions is None
    assert req.ban_cards is None
    assert req.include_cards is None
    assert r.json()["request"]["include_expansions"] is None


def test_generate_conflict(client):
    r = client.post("/api/generate", json={"include_cards": ["Sentry"], "ban_cards": ["Sentry"]})
    assert r.status_code == 409
    err = r.json()["error"]
    assert err["code"] == "CONFLICT"
    assert err["details"]["cards"] == ["Sentry"]
    assert "ban and include" in err["message"]


def test_generate_unsatisfiable(client):
    r = client.post("/api/generate", json={"include_expansions": ["Guilds", "Seaside"], "project_count": 1})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "UNSATISFIABLE"
    assert err["details"]["kind"] == "CouldNotSatisfyProjectsFromExpansions"


def test_generate_defect_hides_details():
    catalogue_loader.initialize(FakeGenerator(setup=GeneratedSetup(kingdom_cards=("Chancellor",))), force=True)
    r = _client().post("/api/generate", json={})
    assert r.status_code == 500
    err = r.json()["error"]
    assert err["code"] == "INDEX_MISS"
    assert err["details"] == {}
    assert "Chancellor" not in err["message"]


def test_generate_unavailable():
    from kingdom_gen.exceptions import GeneratorUnavailableError

    catalogue_loader.initialize(FakeGenerator(error=GeneratorUnavailableError("timed out")), force=True)
    r = _client().post("/api/generate", json={})
    assert r.status_code == 503
    assert r.json()["error"]["code"] == "GEN_UNAVAILABLE"


class OpaqueError(Exception):
    pass


def test_generate_foreign_error_kind_is_422():
    catalogue_loader.initialize(FakeGenerator(error=OpaqueError("CouldNotSatisfyKingdomCards")), force=True)
    r = _client().post("/api/generate", json={})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "UNSATISFIABLE"
    assert err["message"].startswith("Could not pick 10 kingdom cards!")


def test_generate_foreign_error_text_is_422():
    catalogue_loader.initialize(FakeGenerator(error=ValueError("no legal kingdom")), force=True)
    r = _client().post("/api/generate", json={})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "GEN_ERR"
    assert err["message"] == "no legal kingdom"
    assert err["details"] == {"type": "ValueError"}
