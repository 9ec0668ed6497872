"""Category preset registry tests."""

from __future__ import annotations

import json

import pytest

from studio.prompts.category_presets import (
    GENERIC_SUBJECT,
    CategoryPreset,
    CategoryPresetRegistry,
    find_quick_edit,
)


def test_compose_wraps_prompt():
    registry = CategoryPresetRegistry()

    prompt = registry.compose("ecommerce", "leather wallet")

    assert prompt.startswith("Product photography")
    assert "leather wallet" in prompt
    assert prompt.endswith("marketing material")


def test_unknown_category_falls_back_to_advertising():
    registry = CategoryPresetRegistry()

    assert registry.compose("unknown", "car") == registry.compose("advertentie", "car")


def test_blank_prompt_uses_generic_subject():
    registry = CategoryPresetRegistry()

    assert GENERIC_SUBJECT in registry.compose("foodfoto", "   ")


def test_empty_registry_returns_plain_prompt():
    registry = CategoryPresetRegistry(presets=[])

    assert registry.compose("foodfoto", " soup ") == "soup"
    assert registry.suggestions("foodfoto") == []


def test_load_from_file_overrides_defaults(tmp_path):
    path = tmp_path / "categories.json"
    path.write_text(
        json.dumps([{"name": "restaurant", "prefix": "Menu shot: ", "suffix": "", "suggestions": ["Soup"]}]),
        encoding="utf-8",
    )
    registry = CategoryPresetRegistry()

    registry.load_from_file(path)

    assert registry.compose("restaurant", "soup") == "Menu shot: soup"
    assert registry.suggestions("restaurant") == ["Soup"]


def test_get_missing_preset_raises():
    registry = CategoryPresetRegistry(presets=[CategoryPreset(name="only", prefix="")])

    with pytest.raises(KeyError):
        registry.get("missing")


def test_find_quick_edit():
    assert "background" in find_quick_edit("Remove Background").prompt
    with pytest.raises(KeyError):
        find_quick_edit("Sparkles")
