"""
Design tokens：預設表、合併、Figma Variables 抽取、JSON 讀寫
"""
import json

import pytest

from figma2react.errors import ConfigError
from figma2react.ir import DesignTokens
from figma2react.tokens import (
    DEFAULT_TOKENS,
    load_tokens,
    merge_tokens,
    parse_token_path,
    save_tokens,
    tokens_from_dict,
    tokens_from_variables,
)

VARIABLES = {
    "meta": {
        "variableCollections": {
            "c1": {"name": "Colors", "defaultModeId": "m1"},
            "c2": {"name": "Spacing", "defaultModeId": "m2"},
            "c3": {"name": "Radius", "defaultModeId": "m3"},
            "c4": {"name": "Typography", "defaultModeId": "m4"},
        },
        "variables": {
            "v1": {"name": "primary/500", "variableCollectionId": "c1", "resolvedType": "COLOR",
                   "valuesByMode": {"m1": {"r": 0, "g": 0.4, "b": 1, "a": 1}, "dark": {"r": 1, "g": 1, "b": 1}}},
            "v2": {"name": "overlay", "variableCollectionId": "c1", "resolvedType": "COLOR",
                   "valuesByMode": {"m1": {"r": 0, "g": 0, "b": 0, "a": 0.5}}},
            "v3": {"name": "4", "variableCollectionId": "c2", "resolvedType": "FLOAT",
                   "valuesByMode": {"m2": 16}},
            "v4": {"name": "lg", "variableCollectionId": "c3", "resolvedType": "FLOAT",
                   "valuesByMode": {"m3": 8}},
            "v5": {"name": "body/size", "variableCollectionId": "c4", "resolvedType": "FLOAT",
                   "valuesByMode": {"m4": 16}},
            "v6": {"name": "body/font family", "variableCollectionId": "c4", "resolvedType": "STRING",
                   "valuesByMode": {"m4": "Inter"}},
            "v7": {"name": "orphan", "variableCollectionId": "missing", "resolvedType": "FLOAT",
                   "valuesByMode": {}},
        },
    }
}


# ─── defaults / merge ────────────────────────────────────────────────────────

def test_default_tokens():
    assert DEFAULT_TOKENS.colors["gray"]["500"] == "#6b7280"
    assert DEFAULT_TOKENS.spacing["4"] == 16
    assert DEFAULT_TOKENS.border_radius["full"] == 9999
    assert "md" in DEFAULT_TOKENS.shadows


def test_merge_replaces_whole_color_group():
    override = DesignTokens(colors={"gray": {"500": "#777777"}, "brand": {"500": "#ff0000"}}, spacing={"4": 15})
    merged = merge_tokens(DEFAULT_TOKENS, override)
    assert merged.colors["gray"] == {"500": "#777777"}
    assert merged.colors["brand"]["500"] == "#ff0000"
    assert merged.colors["white"] == {"DEFAULT": "#ffffff"}
    assert merged.spacing["4"] == 15
    assert merged.spacing["2"] == 8


# ─── Figma Variables ─────────────────────────────────────────────────────────

def test_parse_token_path():
    assert parse_token_path("primary/500", "Colors") == ("primary", "500")
    assert parse_token_path("Brand Blue", "Colors") == ("colors", "brand-blue")
    assert parse_token_path("text/muted/default", "Colors") == ("text-muted", "default")


class TestTokensFromVariables:
    def setup_method(self):
        self.tokens = tokens_from_variables(VARIABLES)

    def test_colors_use_default_mode(self):
        assert self.tokens.colors["primary"]["500"] == "#0066ff"

    def test_alpha_color_has_8_digit_hex(self):
        assert self.tokens.colors["colors"]["overlay"] == "#00000080"

    def test_numeric_collections(self):
        assert self.tokens.spacing == {"4": 16}
        assert self.tokens.border_radius == {"lg": 8}

    def test_typography(self):
        body = self.tokens.typography["body"]
        assert body.font_family == "Inter"
        assert body.font_size == 16

    def test_unwrapped_meta(self):
        assert tokens_from_variables(VARIABLES["meta"]).spacing == {"4": 16}


# ─── JSON I/O ────────────────────────────────────────────────────────────────

class TestJson:
    def test_round_trip_through_file(self, tmp_path):
        path = tmp_path / "theme" / "tokens.json"
        save_tokens(tokens_from_variables(VARIABLES), str(path))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["colors"]["primary"]["500"] == "#0066ff"
        assert data["typography"]["body"]["fontFamily"] == "Inter"

        loaded = load_tokens(str(path))
        assert loaded.colors["primary"]["500"] == "#0066ff"
        # 預設表仍在
        assert loaded.colors["gray"]["500"] == "#6b7280"
        assert load_tokens(str(path), merge_defaults=False).colors.get("gray") is None

    def test_no_path_returns_defaults(self):
        assert load_tokens() is DEFAULT_TOKENS

    def test_numeric_keys_become_strings(self):
        tokens = tokens_from_dict({"spacing": {4: 16}, "borderRadius": {"lg": 8}})
        assert tokens.spacing == {"4": 16}

    @pytest.mark.parametrize("data", [[], {"colors": {"gray": "#6b7280"}}])
    def test_invalid_shapes(self, data):
        with pytest.raises(ConfigError):
            tokens_from_dict(data)
