import pytest

httpx = pytest.importorskip("httpx")

from authzrules.readers.http import HttpDataReader, HttpReaderConfig  # noqa: E402


def _reader(handler, token=None):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpDataReader(HttpReaderConfig(base_url="http://idm.local/openidm/", api_token=token), client=client)


def test_read_sends_token_and_returns_json():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"configuration": {"selfRegistration": True}})

    reader = _reader(handler, token="t0k")
    assert reader.read("/config/ui/configuration") == {"configuration": {"selfRegistration": True}}
    assert seen["url"] == "http://idm.local/openidm/config/ui/configuration"
    assert seen["auth"] == "Bearer t0k"


def test_read_404_is_none_and_5xx_raises():
    reader = _reader(lambda request: httpx.Response(404))
    assert reader.read("workflow/taskinstance/1") is None

    reader = _reader(lambda request: httpx.Response(503))
    with pytest.raises(httpx.HTTPStatusError):
        reader.read("workflow/taskinstance/1")


def test_query_passes_params_and_unwraps_result():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"result": [{"_id": "1"}]})

    reader = _reader(handler)
    out = reader.query("workflow/taskinstance", {"_queryId": "filtered-query", "taskCandidateUser": "alice"})
    assert out == [{"_id": "1"}]
    assert seen["params"] == {"_queryId": "filtered-query", "taskCandidateUser": "alice"}


def test_query_accepts_bare_list_and_rejects_other_shapes():
    reader = _reader(lambda request: httpx.Response(200, json=[{"_id": "p1"}]))
    assert reader.query("endpoint/getprocessesforuser", {}) == [{"_id": "p1"}]

    reader = _reader(lambda request: httpx.Response(200, json="nope"))
    with pytest.raises(ValueError):
        reader.query("endpoint/getprocessesforuser", {})


def test_timeout_propagates():
    def handler(request):
        raise httpx.ConnectTimeout("slow", request=request)

    reader = _reader(handler)
    with pytest.raises(httpx.TimeoutException):
        reader.read("config/ui/configuration")
    reader.close()
