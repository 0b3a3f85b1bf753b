"""
Tests unitaires pour la négociation de version et la compatibilité du body.

Pourquoi: v1 rejette les champs beta; un body mal formé ne doit jamais
faire échouer la requête.
"""
import copy

import pytest

from gemini_proxy.core.models import ApiVersion
from gemini_proxy.proxy.versioning import (
    has_beta_features,
    make_body_compatible,
    negotiate_version,
    path_version,
    strip_restricted_fields,
)


class TestPathVersion:
    """Détection du préfixe de version."""

    def test_v1_prefix(self):
        assert path_version("/v1/models") == ApiVersion.V1

    def test_v1beta_prefix(self):
        assert path_version("/v1beta/models/gemini:generateContent") == ApiVersion.V1BETA

    @pytest.mark.parametrize("path", ["/models", "/v1", "/v1beta", "/v2/models", "v1/models", "/v1alpha/x"])
    def test_no_prefix(self, path):
        assert path_version(path) is None


class TestHasBetaFeatures:
    """Détection des fonctionnalités v1beta."""

    def test_root_system_instruction(self):
        assert has_beta_features({"systemInstruction": {"parts": [{"text": "x"}]}})

    def test_falsy_value_ignored(self):
        assert not has_beta_features({"tool_config": {}, "tool_calls": [], "systemInstruction": None})

    def test_tool_calls_in_parts(self):
        body = {"contents": [{"parts": [{"text": "a"}, {"text": "b"}, {"tool_calls": [{"id": 1}]}]}]}
        assert has_beta_features(body)

    def test_field_in_later_content(self):
        body = {"contents": [{"parts": [{"text": "a"}]}, {"parts": [{"tool_config": {"mode": "AUTO"}}]}]}
        assert has_beta_features(body)

    def test_plain_body(self, sample_body):
        assert not has_beta_features(sample_body)

    @pytest.mark.parametrize("body", [
        None,
        "texte",
        42,
        [1, 2, 3],
        b"raw bytes",
        {"contents": "pas une liste"},
        {"contents": [None, 1, "x"]},
        {"contents": [{"parts": "pas une liste"}]},
        {"contents": [{"parts": [None, 3, ["tool_calls"]]}]},
    ])
    def test_malformed_shapes_never_raise(self, body):
        assert has_beta_features(body) is False


class TestNegotiateVersion:
    """Choix de la version cible."""

    def test_nested_tool_calls_selects_v1beta(self):
        body = {"contents": [{"parts": [{}, {}, {"tool_calls": [{"function": {"name": "f"}}]}]}]}
        assert negotiate_version("/models/gemini:generateContent", body, ApiVersion.V1) == ApiVersion.V1BETA

    def test_explicit_v1_path_wins_over_features(self):
        body = {"contents": [{"parts": [{"tool_calls": [{"id": 1}]}]}]}
        assert negotiate_version("/v1/models", body) == ApiVersion.V1

    def test_explicit_v1beta_path(self, sample_body):
        assert negotiate_version("/v1beta/models", sample_body, ApiVersion.V1) == ApiVersion.V1BETA

    def test_default_version(self, sample_body):
        assert negotiate_version("/models", sample_body) == ApiVersion.V1BETA
        assert negotiate_version("/models", sample_body, ApiVersion.V1) == ApiVersion.V1

    def test_malformed_body_uses_default(self):
        assert negotiate_version("/models", b"not json", ApiVersion.V1) == ApiVersion.V1


class TestStripRestrictedFields:
    """Retrait récursif des champs non supportés par v1."""

    @pytest.fixture
    def beta_body(self):
        return {
            "systemInstruction": {"parts": [{"text": "Sois bref"}]},
            "tool_config": {"function_calling_config": {"mode": "ANY"}},
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": "Salut"},
                        {"tool_calls": [{"id": "1"}], "text": "garde-moi"},
                        {"inlineData": {"meta": {"systemInstruction": "caché"}}},
                    ],
                }
            ],
            "extra": [[{"tool_calls": 1}], "tool_calls"],
        }

    def test_removes_at_every_depth(self, beta_body):
        result = strip_restricted_fields(beta_body)
        assert result == {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": "Salut"},
                        {"text": "garde-moi"},
                        {"inlineData": {"meta": {}}},
                    ],
                }
            ],
            "extra": [[{}], "tool_calls"],
        }

    def test_input_not_mutated(self, beta_body):
        snapshot = copy.deepcopy(beta_body)
        strip_restricted_fields(beta_body)
        assert beta_body == snapshot

    def test_returns_new_containers(self, sample_body):
        result = strip_restricted_fields(sample_body)
        assert result == sample_body
        assert result is not sample_body
        assert result["contents"] is not sample_body["contents"]

    def test_idempotent(self, beta_body):
        once = strip_restricted_fields(beta_body)
        assert strip_restricted_fields(once) == once

    def test_scalars_unchanged(self):
        assert strip_restricted_fields("tool_calls") == "tool_calls"
        assert strip_restricted_fields(None) is None

    def test_nesting_deeper_than_recursion_limit(self):
        body = {"text": "fond", "tool_calls": [1]}
        for _ in range(5000):
            body = {"child": body, "systemInstruction": "x"}

        result = strip_restricted_fields(body)

        depth = 0
        node = result
        while "child" in node:
            assert "systemInstruction" not in node
            node = node["child"]
            depth += 1
        assert depth == 5000
        assert node == {"text": "fond"}
        assert "systemInstruction" in body

    def test_key_order_preserved(self):
        body = {"b": 1, "tool_config": {}, "a": [{"z": 1, "tool_calls": 2, "y": 3}]}
        result = strip_restricted_fields(body)
        assert list(result) == ["b", "a"]
        assert list(result["a"][0]) == ["z", "y"]


class TestMakeBodyCompatible:
    """Compatibilité selon la version."""

    def test_v1beta_returns_same_object(self):
        body = {"systemInstruction": {"parts": []}}
        assert make_body_compatible(body, ApiVersion.V1BETA) is body

    def test_v1_strips_copy(self):
        body = {"systemInstruction": {"parts": []}, "contents": []}
        result = make_body_compatible(body, ApiVersion.V1)
        assert result == {"contents": []}
        assert "systemInstruction" in body

    def test_v1_twice_is_stable(self):
        body = {"contents": [{"parts": [{"tool_calls": []}]}]}
        once = make_body_compatible(body, ApiVersion.V1)
        assert make_body_compatible(once, ApiVersion.V1) == once

    @pytest.mark.parametrize("body", [None, b"raw", "texte", 7])
    def test_non_container_passthrough(self, body):
        assert make_body_compatible(body, ApiVersion.V1) == body
