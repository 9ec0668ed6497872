"""Category prompt presets and quick-edit shortcuts."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

FALLBACK_CATEGORY = "advertentie"
GENERIC_SUBJECT = "high-quality professional image"


@dataclass(slots=True)
class CategoryPreset:
    """Prefix/suffix wrapped around a user prompt for one business category."""

    name: str
    prefix: str
    suffix: str = ""
    suggestions: List[str] = field(default_factory=list)


@dataclass(slots=True)
class QuickEdit:
    """One-click edit offered by the photo editor."""

    label: str
    prompt: str


DEFAULT_PRESETS = [
    CategoryPreset(
        name="foodfoto",
        prefix="Professional food photography, high-quality, appetizing, perfect lighting, ",
        suffix=", food styling, restaurant quality, vibrant colors, shallow depth of field, gourmet presentation",
        suggestions=[
            "Gourmet burger with crispy fries and perfect lighting",
            "Fresh sushi platter with wasabi and ginger garnish",
            "Artisanal pizza with melted cheese and fresh basil",
            "Decadent chocolate dessert with berry garnish",
            "Colorful salad bowl with vibrant vegetables and dressing",
        ],
    ),
    CategoryPreset(
        name="restaurant",
        prefix="Restaurant menu photography, professional lighting, appetizing presentation, ",
        suffix=", commercial food photography, high-end dining, elegant plating",
        suggestions=[
            "Gourmet steak with roasted vegetables and wine sauce",
            "Elegant seafood platter with lobster and oysters",
            "Fine dining dessert with chocolate and gold leaf",
            "Chef's special pasta with truffle and herbs",
            "Premium sushi platter with wasabi and ginger",
        ],
    ),
    CategoryPreset(
        name="ecommerce",
        prefix="Product photography, clean background, professional lighting, commercial quality, ",
        suffix=", e-commerce ready, high resolution, marketing material",
        suggestions=[
            "Modern smartphone on clean white background",
            "Luxury watch with elegant lighting and shadows",
            "Fashion accessories arranged aesthetically",
            "High-tech gadget with professional product lighting",
            "Skincare products with natural lighting setup",
        ],
    ),
    CategoryPreset(
        name="advertentie",
        prefix="Advertisement photography, eye-catching, professional, marketing quality, ",
        suffix=", commercial use, brand-focused, high impact visual",
        suggestions=[
            "Dynamic sports car in urban environment",
            "Happy family enjoying vacation at beach resort",
            "Professional business team in modern office",
            "Luxury lifestyle product in elegant setting",
            "Technology innovation concept with futuristic design",
        ],
    ),
]

QUICK_EDITS = [
    QuickEdit(
        label="Light & Contrast",
        prompt="Improve the lighting and contrast of the image for a professional, bright look",
    ),
    QuickEdit(
        label="Remove Background",
        prompt="Remove the background and make it transparent. Return a PNG.",
    ),
    QuickEdit(
        label="Replace Background",
        prompt="Replace the background with a professional, blurred studio background in grey tones.",
    ),
]

ASPECT_RATIO_OPTIONS = [
    ("original", "Original size - keeps the source dimensions"),
    ("1:1", "Square (1:1) - social media"),
    ("4:3", "Standard (4:3) - general use"),
    ("16:9", "Widescreen (16:9) - banners/headers"),
    ("3:4", "Portrait (3:4) - mobile/stories"),
    ("9:16", "Vertical (9:16) - short video"),
]


class CategoryPresetRegistry:
    """In-memory registry of category presets."""

    def __init__(self, presets: Optional[List[CategoryPreset]] = None) -> None:
        self._presets: Dict[str, CategoryPreset] = {}
        for preset in DEFAULT_PRESETS if presets is None else presets:
            self.add(preset)

    def load_from_file(self, path: Path) -> None:
        """Load presets from a JSON list, overriding defaults with the same name."""
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        for entry in data:
            self.add(
                CategoryPreset(
                    name=entry["name"],
                    prefix=entry.get("prefix", ""),
                    suffix=entry.get("suffix", ""),
                    suggestions=list(entry.get("suggestions", [])),
                )
            )

    def add(self, preset: CategoryPreset) -> None:
        self._presets[preset.name] = preset

    def names(self) -> List[str]:
        return list(self._presets.keys())

    def get(self, name: str) -> CategoryPreset:
        """Retrieve a preset by name."""
        try:
            return self._presets[name]
        except KeyError as exc:
            raise KeyError(f"Category preset '{name}' not found") from exc

    def resolve(self, name: Optional[str]) -> Optional[CategoryPreset]:
        """Return the named preset, the fallback category, or None."""
        if name and name in self._presets:
            return self._presets[name]
        return self._presets.get(FALLBACK_CATEGORY)

    def compose(self, category: Optional[str], prompt: str) -> str:
        """Wrap ``prompt`` in the category's prefix and suffix."""
        preset = self.resolve(category)
        subject = prompt.strip() or GENERIC_SUBJECT
        if preset is None:
            return subject
        return f"{preset.prefix}{subject}{preset.suffix}"

    def suggestions(self, category: Optional[str]) -> List[str]:
        preset = self.resolve(category)
        return list(preset.suggestions) if preset else []


def find_quick_edit(label: str) -> QuickEdit:
    for edit in QUICK_EDITS:
        if edit.label == label:
            return edit
    raise KeyError(f"Quick edit '{label}' not found")
