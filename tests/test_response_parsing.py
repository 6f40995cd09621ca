import copy
import json
import pickle

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from jsonclient.core.errors import ResponseError
from jsonclient.core.http import JsonClient


class Point(BaseModel):
    x: int


class FailingStream(httpx.SyncByteStream):
    def __init__(self) -> None:
        self.closed = False

    def __iter__(self):
        yield b'{"x":'
        raise httpx.ReadError("connection reset")

    def close(self) -> None:
        self.closed = True


class ClosableStream(httpx.SyncByteStream):
    def __init__(self, content: bytes) -> None:
        self._content = content
        self.closed = False

    def __iter__(self):
        yield self._content

    def close(self) -> None:
        self.closed = True


class Flag(BaseModel):
    ok: bool


def _client(handler) -> JsonClient:
    return JsonClient(transport=httpx.Client(transport=httpx.MockTransport(handler)))


def test_invalid_json_with_200_is_a_decode_error():
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(ResponseError) as excinfo:
        _client(handler).fetch_json("https://example.test/point", Point)

    err = excinfo.value
    assert err.status_code == 200
    assert err.body == "<html>oops</html>"
    assert isinstance(err.cause, ValidationError)
    assert not isinstance(err.cause, httpx.HTTPStatusError)


def test_wrong_shape_with_200_is_a_decode_error():
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, json={"x": "not-a-number"})

    with pytest.raises(ResponseError) as excinfo:
        _client(handler).fetch_json("https://example.test/point", Point)

    assert isinstance(excinfo.value.cause, ValidationError)
    assert json.loads(excinfo.value.body) == {"x": "not-a-number"}


def test_empty_body_with_500_keeps_empty_text():
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(500)

    with pytest.raises(ResponseError) as excinfo:
        _client(handler).fetch_json("https://example.test/point", Point)

    err = excinfo.value
    assert err.status_code == 500
    assert err.body == ""
    assert isinstance(err.cause, httpx.HTTPStatusError)


def test_empty_body_with_200_is_a_decode_error():
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(204)

    with pytest.raises(ResponseError) as excinfo:
        _client(handler).fetch_json("https://example.test/point", Point)

    assert excinfo.value.body == ""
    assert isinstance(excinfo.value.cause, ValidationError)


def test_status_failure_wins_over_valid_json_body():
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(400, json={"x": 1})

    with pytest.raises(ResponseError) as excinfo:
        _client(handler).fetch_json("https://example.test/point", Point)

    assert isinstance(excinfo.value.cause, httpx.HTTPStatusError)
    assert json.loads(excinfo.value.body) == {"x": 1}


def test_body_read_failure_is_reported_and_stream_closed():
    stream = FailingStream()

    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, stream=stream)

    with pytest.raises(ResponseError) as excinfo:
        _client(handler).fetch_json("https://example.test/point", Point)

    assert isinstance(excinfo.value.cause, httpx.ReadError)
    assert excinfo.value.body == ""
    assert stream.closed is True


def test_response_error_attributes_are_read_only():
    err = ResponseError(status_code=418, body="teapot", cause=ValueError("x"))

    assert repr(err).startswith("ResponseError(status_code=418")
    assert str(err) == "HTTP 418: x"
    with pytest.raises(AttributeError):
        err.status_code = 200  # type: ignore[misc]


@pytest.mark.parametrize(
    ("content", "response_type"),
    [(b'{"x":"1"}', Point), (b'{"ok":"yes"}', Flag), (b'{"ok":1}', Flag)],
)
def test_type_mismatch_is_not_coerced(content, response_type):
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, content=content)

    with pytest.raises(ResponseError) as excinfo:
        _client(handler).fetch_json("https://example.test/value", response_type)

    assert excinfo.value.status_code == 200
    assert excinfo.value.body == content.decode()
    assert isinstance(excinfo.value.cause, ValidationError)


@pytest.mark.parametrize(
    ("status", "content", "cause_type"),
    [
        (404, b"not found", httpx.HTTPStatusError),
        (200, b"{not json", ValidationError),
        (200, b'{"x":2}', None),
    ],
)
def test_stream_is_closed_on_every_exit_path(status, content, cause_type):
    stream = ClosableStream(content)

    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(status, stream=stream)

    client = _client(handler)
    if cause_type is None:
        assert client.fetch_json("https://example.test/point", Point) == Point(x=2)
    else:
        with pytest.raises(ResponseError) as excinfo:
            client.fetch_json("https://example.test/point", Point)
        assert isinstance(excinfo.value.cause, cause_type)
        assert excinfo.value.body == content.decode()

    assert stream.closed is True


def test_response_error_survives_pickle_and_copy():
    err = ResponseError(status_code=503, body="busy", cause=ValueError("upstream"))

    for clone in (pickle.loads(pickle.dumps(err)), copy.copy(err)):
        assert isinstance(clone, ResponseError)
        assert clone.status_code == 503
        assert clone.body == "busy"
        assert str(clone.cause) == "upstream"
        assert str(clone) == "HTTP 503: upstream"
