"""Unit tests for the legacy schema bridge."""

import copy

import pytest
from pydantic import ValidationError

from tokenscope.legacy import LegacySchemaBridge
from tokenscope.schemas import (
    BrandProfile,
    ColorSystem,
    ColorToken,
    ContentInventory,
    DesignTokens,
    LegacyContentInventory,
    LegacyDesignTokens,
    LogoAsset,
    PageContent,
    Typography,
    TypographyStep,
)
from tokenscope.schemas.legacy import format_px, parse_px

LEGACY_TOKENS = {
    "colors": {
        "primary": {"main": {"value": "#1A73E8", "contrast": 4.6}, "light": {"value": "#8AB4F8"}},
        "neutral": {"neutral-100": {"value": "#FFFFFF"}},
        "semantic": {"error": {"value": "#D93025"}},
    },
    "typography": {
        "headings": {"h1": {"fontFamily": "Inter", "fontSize": "32px", "fontWeight": 700, "lineHeight": 1.2}},
        "body": {"fontFamily": "Inter", "fontSize": "16px", "fontWeight": 400, "lineHeight": 1.6},
        "small": {"fontFamily": "Inter", "fontSize": "14px", "fontWeight": 400, "lineHeight": 1.5},
    },
    "spacing": {"xs": "4px", "sm": "8px", "md": "16px"},
    "effects": {"shadows": {"sm": "0px 1px 2px rgba(0,0,0,0.1)"}, "transitions": {"fast": "150ms ease"}},
    "borderRadius": {"small": "4px", "medium": "8px", "large": "16px", "full": "9999px"},
    "breakpoints": {"mobile": 375, "tablet": 768, "desktop": 1440, "wide": 1920},
}


@pytest.fixture
def bridge():
    return LegacySchemaBridge()


class TestPixelHelpers:
    def test_format_px(self):
        assert format_px(16.0) == "16px"
        assert format_px(1.5) == "1.5px"

    def test_parse_px(self):
        assert parse_px(" 14px ") == 14.0
        with pytest.raises(ValueError):
            parse_px("1rem")


class TestLegacyModels:
    def test_spacing_must_increase(self):
        data = copy.deepcopy(LEGACY_TOKENS)
        data["spacing"] = {"xs": "8px", "sm": "4px"}
        with pytest.raises(ValidationError):
            LegacyDesignTokens.model_validate(data)

    def test_heading_keys(self):
        data = copy.deepcopy(LEGACY_TOKENS)
        data["typography"]["headings"]["lead"] = data["typography"]["body"]
        with pytest.raises(ValidationError):
            LegacyDesignTokens.model_validate(data)

    def test_camel_case_on_the_wire(self):
        assert "borderRadius" in LegacyDesignTokens.model_validate(LEGACY_TOKENS).to_dict()


class TestDesignTokens:
    """Test design token conversion in both directions."""

    def test_from_legacy_maps_fields(self, bridge):
        tokens = bridge.from_legacy(LEGACY_TOKENS, schema="design-tokens").value

        assert tokens.colors.primary.value == "#1A73E8"
        assert tokens.colors.primary.usage == "primary"
        assert tokens.colors.neutral["neutral-100"].usage == "neutral"
        assert tokens.typography.hierarchy["h1"].size_px == 32.0
        assert tokens.typography.hierarchy["body"].line_height == 1.6
        assert tokens.spacing.scale == {"xs": 4.0, "sm": 8.0, "md": 16.0}
        assert tokens.border_radius["full"] == 9999.0

    def test_legacy_only_fields_are_preserved(self, bridge):
        tokens = bridge.from_legacy(LEGACY_TOKENS, schema="design-tokens").value
        extension = tokens.extensions["legacy:colors.primary.light"]

        assert extension.kind == "object"
        assert extension.value == {"value": "#8AB4F8"}

    def test_round_trip_is_exact(self, bridge):
        current = bridge.from_legacy(LEGACY_TOKENS, schema="design-tokens").value
        result = bridge.to_legacy(current)

        assert result.schema == "design-tokens"
        assert result.value.to_dict() == LEGACY_TOKENS
        assert result.dropped == []
        assert result.defaulted == []
        assert result.flags == []

    def test_schema_detected_from_legacy_model(self, bridge):
        legacy = LegacyDesignTokens.model_validate(LEGACY_TOKENS)
        assert bridge.from_legacy(legacy).schema == "design-tokens"

    def test_fields_without_legacy_home_are_dropped(self, bridge):
        tokens = DesignTokens(colors=ColorSystem(primary=ColorToken(value="#1A73E8", usage="primary", count=3)))
        result = bridge.to_legacy(tokens)

        assert result.dropped == ["colors.primary.count"]
        assert result.lossy is True
        assert [f.kind for f in result.flags] == ["schema_bridge_lossy"]
        assert result.flags[0].details["dropped"] == "colors.primary.count"

    def test_required_legacy_fields_get_defaults(self, bridge):
        result = bridge.to_legacy(DesignTokens())
        legacy = result.value

        assert "typography.body" in result.defaulted
        assert "typography.small" in result.defaulted
        assert "borderRadius.full" in result.defaulted
        assert "breakpoints.tablet" in result.defaulted
        assert legacy.typography.body.font_size == "16px"
        assert legacy.border_radius.full == "9999px"
        assert legacy.breakpoints.desktop == 1440

    def test_partial_steps_record_defaults(self, bridge):
        tokens = DesignTokens(
            typography=Typography(hierarchy={"h1": TypographyStep(size_px=32.0), "lead": TypographyStep(size_px=20.0)})
        )
        result = bridge.to_legacy(tokens)

        assert "typography.headings.h1.fontFamily" in result.defaulted
        assert result.value.typography.headings["h1"].font_family == "inherit"
        assert result.dropped == ["typography.hierarchy.lead"]


class TestBrandProfile:
    def test_logo_alt_is_dropped(self, bridge):
        brand = BrandProfile(name="Acme", logo=LogoAsset(src="/logo.svg", alt="Acme logo"))
        result = bridge.to_legacy(brand)

        assert result.schema == "brand-profile"
        assert result.value.logo == "/logo.svg"
        assert result.dropped == ["logo.alt"]

    def test_from_legacy(self, bridge):
        legacy = {"name": "Acme", "themeColor": "#1A73E8", "voiceTone": {"primary": "friendly", "attributes": ["warm"]}}
        brand = bridge.from_legacy(legacy, schema="brand-profile").value

        assert brand.theme_color == "#1A73E8"
        assert brand.voice_tone.primary == "friendly"
        assert brand.voice_tone.attributes == ["warm"]
        assert brand.extensions == {}


class TestContentInventory:
    def test_content_is_split_into_paragraphs(self, bridge):
        legacy = LegacyContentInventory.model_validate(
            {
                "pages": [
                    {"url": "https://example.com/", "title": "Home", "content": "First.\n\nSecond.", "wordCount": 2}
                ],
                "keywords": ["acme"],
            }
        )
        inventory = bridge.from_legacy(legacy).value

        assert inventory.pages[0].text == ["First.", "Second."]
        assert inventory.keywords[0].word == "acme"
        assert bridge.to_legacy(inventory).value == legacy

    def test_page_fields_without_legacy_home(self, bridge):
        page = PageContent(url="https://example.com/", title="Home", text=["Hi"], word_count=1, headings=["Welcome"])
        result = bridge.to_legacy(ContentInventory(pages=[page]))
        assert result.dropped == ["pages[].headings"]


class TestErrors:
    def test_unsupported_version(self, bridge):
        with pytest.raises(ValueError, match="Unsupported legacy schema version"):
            bridge.to_legacy(DesignTokens(), version="legacy-v0")

    def test_unknown_schema(self, bridge):
        with pytest.raises(ValueError, match="Unknown legacy schema"):
            bridge.from_legacy({"name": "Acme"})
