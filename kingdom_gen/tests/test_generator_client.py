import pytest
import requests

from kingdom_gen.exceptions import ConflictError, GenerationError, GeneratorUnavailableError, UnsatisfiableError
from kingdom_gen.services.generator_client import (
    ERROR_MESSAGES,
    HttpGenerator,
    KingdomGenerator,
    coerce_generator_error,
    import_generator,
    load_generator,
    translate_generator_error,
)
from kingdom_gen.tests.generator_test_utils import FakeGenerator
from kingdom_gen.type_definitions import GenerationRequest


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, responses=None, exc=None):
        self.responses = dict(responses or {})
        self.exc = exc
        self.calls = []

    def _respond(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.responses[(method, url)]

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)


BASE = "http://gen.local"


def test_translate_bare_kind():
    err = translate_generator_error("CouldNotSatisfyKingdomCards")
    assert isinstance(err, UnsatisfiableError)
    assert err.kind == "CouldNotSatisfyKingdomCards"
    assert err.message == ERROR_MESSAGES["CouldNotSatisfyKingdomCards"]


def test_translate_conflict():
    err = translate_generator_error({"IntersectingCardBansAndIncludes": ["Sentry", "Jester"]})
    assert isinstance(err, ConflictError)
    assert err.cards == ["Sentry", "Jester"]
    assert err.message.endswith("Sentry, Jester")


def test_translate_unknown_kind_keeps_generic_text():
    err = translate_generator_error("SomethingNew")
    assert isinstance(err, UnsatisfiableError)
    assert "SomethingNew" in err.message


def test_translate_garbage_is_unavailable():
    assert isinstance(translate_generator_error(42), GeneratorUnavailableError)


class OpaqueError(Exception):
    pass


def test_coerce_keeps_local_errors():
    err = ConflictError(["Sentry"])
    assert coerce_generator_error(err) is err


def test_coerce_translates_serialised_kinds():
    err = coerce_generator_error(OpaqueError("CouldNotSatisfyBaneCard"))
    assert isinstance(err, UnsatisfiableError)
    assert err.kind == "CouldNotSatisfyBaneCard"
    conflict = coerce_generator_error(OpaqueError({"IntersectingCardBansAndIncludes": ["Moat"]}))
    assert isinstance(conflict, ConflictError)
    assert conflict.cards == ["Moat"]


@pytest.mark.parametrize("error,message", [
    (OpaqueError("solver gave up"), "solver gave up"),
    (OpaqueError("CouldNotSatisfy", "extra"), str(("CouldNotSatisfy", "extra"))),
    (OpaqueError({"Unheard": 1}), "{'Unheard': 1}"),
    (KeyError(), "KeyError"),
])
def test_coerce_wraps_other_exceptions_verbatim(error, message):
    err = coerce_generator_error(error)
    assert type(err) is GenerationError
    assert err.code == "GEN_ERR"
    assert err.message == message
    assert err.details == {"type": type(error).__name__}


def test_http_catalogue_and_counts():
    session = FakeSession({
        ("GET", f"{BASE}/catalogue"): FakeResponse(payload={"Seaside": ["Haven", "Lookout"]}),
        ("GET", f"{BASE}/project-counts"): FakeResponse(payload=[0, 1, 2]),
        ("GET", f"{BASE}/bane-counts"): FakeResponse(payload=["0", "1"]),
    })
    gen = HttpGenerator(BASE + "/", timeout=3, session=session)
    assert gen.catalogue() == {"Seaside": ["Haven", "Lookout"]}
    assert gen.project_count_options() == [0, 1, 2]
    assert gen.bane_count_options() == [0, 1]
    assert all(call[2]["timeout"] == 3 for call in session.calls)


def test_http_generate_sends_nulls_and_parses_setup():
    session = FakeSession({
        ("POST", f"{BASE}/generate"): FakeResponse(payload={
            "kingdom_cards": ["Haven"],
            "bane_card": None,
            "bane_cards": {"Haven": "Zebra"},
            "second_zebra": "Lookout",
            "project_cards": [],
        }),
    })
    gen = HttpGenerator(BASE, session=session)
    setup = gen.generate(GenerationRequest(project_count=0))
    assert setup.kingdom_cards == ("Haven",)
    assert setup.second_zebra == "Lookout"
    sent = session.calls[0][2]["json"]
    assert sent["include_cards"] is None
    assert sent["project_count"] == 0


def test_http_generate_translates_error_body():
    session = FakeSession({
        ("POST", f"{BASE}/generate"): FakeResponse(
            status_code=422, payload={"error": {"IntersectingCardBansAndIncludes": ["Sentry"]}}
        ),
    })
    with pytest.raises(ConflictError):
        HttpGenerator(BASE, session=session).generate(GenerationRequest())


def test_http_generate_server_error_is_unavailable():
    session = FakeSession({("POST", f"{BASE}/generate"): FakeResponse(status_code=502, payload=None)})
    with pytest.raises(GeneratorUnavailableError):
        HttpGenerator(BASE, session=session).generate(GenerationRequest())


def test_http_generate_malformed_setup_is_unavailable():
    session = FakeSession({("POST", f"{BASE}/generate"): FakeResponse(payload={"cards": []})})
    with pytest.raises(GeneratorUnavailableError):
        HttpGenerator(BASE, session=session).generate(GenerationRequest())


def test_http_connection_failure_is_unavailable():
    session = FakeSession(exc=requests.ConnectionError("refused"))
    with pytest.raises(GeneratorUnavailableError) as exc:
        HttpGenerator(BASE, session=session).catalogue()
    assert exc.value.details["url"] == f"{BASE}/catalogue"


def test_http_invalid_json_is_unavailable():
    session = FakeSession({("GET", f"{BASE}/catalogue"): FakeResponse(invalid_json=True)})
    with pytest.raises(GeneratorUnavailableError):
        HttpGenerator(BASE, session=session).catalogue()


def test_http_catalogue_shape_checked():
    session = FakeSession({("GET", f"{BASE}/catalogue"): FakeResponse(payload={"Seaside": "Haven"})})
    with pytest.raises(GeneratorUnavailableError):
        HttpGenerator(BASE, session=session).catalogue()


def test_import_generator_class_and_factory():
    gen = import_generator("kingdom_gen.tests.generator_test_utils:FakeGenerator")
    assert isinstance(gen, FakeGenerator)
    gen = import_generator("kingdom_gen.tests.generator_test_utils:make_generator")
    assert isinstance(gen, KingdomGenerator)


@pytest.mark.parametrize("target", ["no_colon", "kingdom_gen.nope:Thing", "kingdom_gen.settings:RANDOM_CHOICE"])
def test_import_generator_rejects_bad_targets(target):
    with pytest.raises(GeneratorUnavailableError):
        import_generator(target)


def test_load_generator_prefers_import_path(monkeypatch):
    monkeypatch.setenv("KINGDOM_GENERATOR", "kingdom_gen.tests.generator_test_utils:FakeGenerator")
    monkeypatch.setenv("GENERATOR_URL", BASE)
    assert isinstance(load_generator(), FakeGenerator)


def test_load_generator_uses_url(monkeypatch):
    monkeypatch.setenv("GENERATOR_URL", BASE)
    gen = load_generator()
    assert isinstance(gen, HttpGenerator)
    assert gen.base_url == BASE


def test_load_generator_without_backend():
    with pytest.raises(GeneratorUnavailableError):
        load_generator()
