"""Tests for the shared JSON-RPC 2.0 models, errors and validator."""

import pytest
from wire.errors import (
    InvalidArgumentsError,
    InvalidRequestError,
    ParseError,
    ProcedureNotFoundError,
    ResponseError,
    error_for_code,
)
from wire.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
)
from wire.validator import decode, is_batch, validate_json_format, validate_rpc_format


class TestJsonRpcRequest:
    def test_to_dict(self):
        req = JsonRpcRequest(method="echo", params={"a": 1}, id="abc")
        d = req.to_dict()
        assert d == {"jsonrpc": "2.0", "method": "echo", "params": {"a": 1}, "id": "abc"}

    def test_to_dict_omits_empty_params_and_notification_id(self):
        d = JsonRpcRequest(method="ping", params=[]).to_dict()
        assert d == {"jsonrpc": "2.0", "method": "ping"}

    def test_attributes_never_overwrite_reserved_keys(self):
        req = JsonRpcRequest(
            method="echo", id=1, attributes={"method": "evil", "id": 2, "trace": "t-1"}
        )
        d = req.to_dict()
        assert d["method"] == "echo"
        assert d["id"] == 1
        assert d["trace"] == "t-1"

    def test_from_dict(self):
        raw = {"jsonrpc": "2.0", "method": "test", "params": [1], "id": 7, "meta": True}
        req = JsonRpcRequest.from_dict(raw)
        assert req.method == "test"
        assert req.params == [1]
        assert req.id == 7
        assert req.attributes == {"meta": True}
        assert not req.is_notification

    def test_from_dict_null_id_is_notification(self):
        req = JsonRpcRequest.from_dict({"jsonrpc": "2.0", "method": "t", "id": None})
        assert req.is_notification


class TestJsonRpcResponse:
    def test_success(self):
        d = JsonRpcResponse.success("1", {"value": 42}).to_dict()
        assert d == {"jsonrpc": "2.0", "result": {"value": 42}, "id": "1"}

    def test_success_with_null_result_keeps_result_key(self):
        d = JsonRpcResponse.success(3, None).to_dict()
        assert "result" in d and d["result"] is None
        assert "error" not in d

    def test_fail(self):
        d = JsonRpcResponse.fail("2", METHOD_NOT_FOUND, "Method not found").to_dict()
        assert d["id"] == "2"
        assert d["error"] == {"code": METHOD_NOT_FOUND, "message": "Method not found"}
        assert "result" not in d

    def test_fail_no_id(self):
        d = JsonRpcResponse.fail(None, PARSE_ERROR, "bad").to_dict()
        assert d["id"] is None


class TestJsonRpcError:
    def test_to_dict_without_data(self):
        d = JsonRpcError(code=INTERNAL_ERROR, message="oops").to_dict()
        assert d == {"code": INTERNAL_ERROR, "message": "oops"}

    def test_to_dict_with_data(self):
        d = JsonRpcError(code=INTERNAL_ERROR, message="oops", data={"trace": "..."}).to_dict()
        assert d["data"] == {"trace": "..."}


class TestErrorCodes:
    def test_standard_codes(self):
        assert PARSE_ERROR == -32700
        assert INVALID_REQUEST == -32600
        assert METHOD_NOT_FOUND == -32601
        assert INVALID_PARAMS == -32602
        assert INTERNAL_ERROR == -32603

    @pytest.mark.parametrize(
        "code, kind",
        [
            (-32700, ParseError),
            (-32600, InvalidRequestError),
            (-32601, ProcedureNotFoundError),
            (-32602, InvalidArgumentsError),
        ],
    )
    def test_reserved_codes_map_to_their_kind(self, code, kind):
        exc = error_for_code(code, "whatever the server said")
        assert type(exc) is kind
        assert exc.code == code

    def test_mapping_ignores_message_text(self):
        exc = error_for_code(-32601, "Parse error")
        assert isinstance(exc, ProcedureNotFoundError)
        assert str(exc) == "Procedure not found: Parse error"

    def test_other_codes_become_response_error(self):
        exc = error_for_code(42, "Something", "foobar")
        assert type(exc) is ResponseError
        assert exc.code == 42
        assert exc.message == "Something"
        assert exc.data == "foobar"

    def test_internal_error_is_a_response_error(self):
        assert type(error_for_code(INTERNAL_ERROR, "boom")) is ResponseError

    def test_exception_to_error(self):
        err = InvalidArgumentsError("Missing argument: b").to_error()
        assert err == JsonRpcError(INVALID_PARAMS, "Missing argument: b")


class TestValidator:
    def test_decode_bad_json(self):
        with pytest.raises(ParseError):
            decode(b"not json")

    def test_decode_bad_utf8(self):
        with pytest.raises(ParseError):
            decode(b"\x80\x81")

    @pytest.mark.parametrize("payload", ["foobar", 42, None, 1.5, True])
    def test_scalars_are_malformed(self, payload):
        with pytest.raises(ParseError):
            validate_json_format(payload)

    @pytest.mark.parametrize("payload", [{}, [], [1]])
    def test_objects_and_arrays_pass_json_format(self, payload):
        validate_json_format(payload)

    def test_valid_envelopes(self):
        validate_rpc_format({"jsonrpc": "2.0", "method": "a"})
        validate_rpc_format({"jsonrpc": "2.0", "method": "a", "params": [], "id": 1})
        validate_rpc_format({"jsonrpc": "2.0", "method": "a", "params": {}, "id": "x"})
        validate_rpc_format({"jsonrpc": "2.0", "method": "a", "id": None})

    @pytest.mark.parametrize(
        "payload",
        [
            {"method": "a"},
            {"jsonrpc": "1.0", "method": "a"},
            {"jsonrpc": "2.0"},
            {"jsonrpc": "2.0", "method": ""},
            {"jsonrpc": "2.0", "method": 5},
            {"jsonrpc": "2.0", "method": "a", "params": "x"},
            {"jsonrpc": "2.0", "method": "a", "params": 3},
            {"jsonrpc": "2.0", "method": "a", "id": {"nested": 1}},
            {"jsonrpc": "2.0", "method": "a", "id": True},
            [],
            "hello",
        ],
    )
    def test_invalid_envelopes(self, payload):
        with pytest.raises(InvalidRequestError):
            validate_rpc_format(payload)

    def test_is_batch(self):
        assert is_batch([{}])
        assert not is_batch([])
        assert not is_batch({"jsonrpc": "2.0"})
