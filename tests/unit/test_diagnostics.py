"""
Tests unitaires pour le mode debug.
"""
from gemini_proxy.services.diagnostics import (
    build_debug_payload,
    get_server_info,
    is_debug_request,
)


def test_debug_query_flag():
    assert is_debug_request({"debug": "true"}, {})
    assert not is_debug_request({"debug": "false"}, {})
    assert not is_debug_request({"debug": "1"}, {})


def test_debug_header_flag():
    assert is_debug_request({}, {"http-debug": "true"})
    assert is_debug_request({}, {"HTTP-Debug": "true"})
    assert not is_debug_request({}, {"http-debug": "yes"})


def test_payload_never_contains_key(make_inbound):
    inbound = make_inbound("GET", "/models", query={"key": "ABC123", "debug": "true"})

    payload = build_debug_payload(inbound, api_key_found=True)

    assert payload["debug"] is True
    assert payload["method"] == "GET"
    assert payload["path"] == "/models"
    assert payload["api_key_found"] is True
    assert "ABC123" not in repr(payload)


def test_server_info():
    info = get_server_info()
    assert {"platform", "python_version", "implementation", "pid", "memory"} <= set(info)
