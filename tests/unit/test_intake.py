"""Unit tests for sample contract validation and page grouping."""

import math

import pytest
from prometheus_client import REGISTRY

from tokenscope.errors import SampleContractError
from tokenscope.intake import IntakeReport, PageSamples, collect_page, group_batches, merge_pages, validate_sample
from tokenscope.protocols import (
    ColorSample,
    DomCandidate,
    EffectSample,
    LinkContext,
    LinkEdge,
    PageBatch,
    RawSample,
    SpacingSample,
    TextBlock,
    TextKind,
    TimingMetric,
    TimingSample,
)

URL = "https://example.com/"


def rejected_count(reason):
    return REGISTRY.get_sample_value("tokenscope_samples_rejected_total", {"reason": reason}) or 0.0


class TestValidateSample:
    """Test the per-sample contract checks."""

    def test_buckets(self):
        assert validate_sample(ColorSample(URL, "desktop", value="#fff")) == "colors"
        assert validate_sample(TextBlock(URL, "desktop", text="Hello")) == "texts"
        assert validate_sample(EffectSample(URL, "desktop", property="box-shadow", value="none")) == "effects"

    @pytest.mark.parametrize(
        "sample,reason",
        [
            ({"url": URL}, "unknown-sample-type"),
            (RawSample(URL, "desktop"), "unknown-sample-type"),
            (ColorSample("", "desktop", value="#fff"), "missing-url"),
            (ColorSample(URL, "", value="#fff"), "missing-viewport"),
            (ColorSample(URL, "desktop", value="  "), "missing-color-value"),
            (ColorSample(URL, "desktop", value="#fff", area=-1.0), "negative-area"),
            (SpacingSample(URL, "desktop", value=""), "missing-spacing-value"),
            (EffectSample(URL, "desktop", property="opacity", value="0.5"), "unknown-effect-property"),
            (TimingSample(URL, "desktop", metric=TimingMetric.LCP, value=math.nan), "invalid-timing-value"),
            (TimingSample(URL, "desktop", metric=TimingMetric.LCP, value=-5.0), "invalid-timing-value"),
            (TextBlock(URL, "desktop", kind=TextKind.HEADING, text="  ", level=1), "empty-text"),
            (TextBlock(URL, "desktop", kind=TextKind.TITLE), "empty-text"),
            (TextBlock(URL, "desktop", kind=TextKind.LOGO), "empty-text"),
        ],
    )
    def test_rejections(self, sample, reason):
        with pytest.raises(SampleContractError) as exc_info:
            validate_sample(sample)
        assert exc_info.value.reason == reason

    def test_text_blocks_may_carry_their_value_elsewhere(self):
        assert validate_sample(TextBlock(URL, "desktop", kind=TextKind.IMAGE, alt="")) == "texts"
        assert validate_sample(TextBlock(URL, "desktop", kind=TextKind.LOGO, href="/logo.svg")) == "texts"
        assert validate_sample(TextBlock(URL, "desktop", kind=TextKind.CANONICAL, href=URL)) == "texts"

    def test_url_mismatch(self):
        with pytest.raises(SampleContractError, match="url-mismatch"):
            validate_sample(ColorSample(URL + "other", "desktop", value="#fff"), expected_url=URL)

    def test_contract_error_is_a_value_error(self):
        assert issubclass(SampleContractError, ValueError)


class TestCollectPage:
    """Test grouping of delivered batches into page samples."""

    def test_malformed_samples_are_counted_not_processed(self):
        before = rejected_count("negative-area")
        batch = PageBatch(
            URL,
            "desktop",
            samples=(
                ColorSample(URL, "desktop", value="#fff"),
                ColorSample(URL, "desktop", value="#000", area=-3.0),
                SpacingSample(URL, "desktop", value="8px"),
            ),
        )
        report = IntakeReport()
        page = collect_page(URL, [batch], report)

        assert len(page.colors) == 1
        assert len(page.spacing) == 1
        assert report.accepted == 2
        assert report.rejected == {"negative-area": 1}
        assert report.rejected_total == 1
        assert rejected_count("negative-area") == before + 1

    def test_undelivered_batches_are_skipped(self):
        batches = [
            PageBatch(URL, "desktop", samples=(ColorSample(URL, "desktop", value="#fff"),)),
            PageBatch(URL, "mobile", samples=(ColorSample(URL, "mobile", value="#000"),), delivered=False),
        ]
        page = collect_page(URL, batches)

        assert page.viewports == ["desktop"]
        assert [c.value for c in page.colors] == ["#fff"]

    def test_viewports_in_delivery_order(self):
        batches = [PageBatch(URL, "mobile"), PageBatch(URL, "desktop"), PageBatch(URL, "mobile")]
        assert collect_page(URL, batches).viewports == ["mobile", "desktop"]

    def test_samples_for_other_pages_are_rejected(self):
        batch = PageBatch(URL, "desktop", samples=(ColorSample(URL + "about", "desktop", value="#fff"),))
        report = IntakeReport()
        page = collect_page(URL, [batch], report)

        assert page.colors == []
        assert report.rejected == {"url-mismatch": 1}


class TestViewportContent:
    """Document content delivered at several viewports counts once."""

    @staticmethod
    def content(viewport, extra=()):
        return (
            TextBlock(URL, viewport, kind=TextKind.HEADING, text="Welcome", level=1),
            TextBlock(URL, viewport, kind=TextKind.PARAGRAPH, text="Read more."),
            TextBlock(URL, viewport, kind=TextKind.PARAGRAPH, text="Read more."),
            LinkEdge(URL, viewport, target=URL + "about", context=LinkContext.NAVIGATION),
            DomCandidate(URL, viewport, order=0, tag="nav", child_tags=("ul",)),
            ColorSample(URL, viewport, value="#fff"),
        ) + tuple(extra)

    def test_repeats_in_later_viewports_are_dropped(self):
        report = IntakeReport()
        batches = [
            PageBatch(URL, "desktop", samples=self.content("desktop")),
            PageBatch(URL, "mobile", samples=self.content("mobile")),
        ]
        page = collect_page(URL, batches, report)

        assert [t.text for t in page.texts] == ["Welcome", "Read more.", "Read more."]
        assert len(page.links) == 1
        assert len(page.candidates) == 1
        assert [c.viewport for c in page.colors] == ["desktop", "mobile"]
        assert report.accepted == 12
        assert report.repeated == 5

    def test_content_seen_at_one_viewport_is_kept(self):
        mobile_only = (
            DomCandidate(URL, "mobile", order=0, tag="nav", child_tags=("button",)),
            TextBlock(URL, "mobile", kind=TextKind.PARAGRAPH, text="Read more."),
        )
        batches = [
            PageBatch(URL, "desktop", samples=self.content("desktop")),
            PageBatch(URL, "mobile", samples=self.content("mobile", mobile_only)),
        ]
        page = collect_page(URL, batches)

        assert [c.child_tags for c in page.candidates] == [("ul",), ("button",)]
        assert [t.text for t in page.texts].count("Read more.") == 3


class TestGrouping:
    def test_group_batches_keeps_first_seen_order(self):
        batches = [PageBatch(URL + "b", "desktop"), PageBatch(URL, "desktop"), PageBatch(URL + "b", "mobile")]
        grouped = group_batches(batches)

        assert list(grouped) == [URL + "b", URL]
        assert [b.viewport for b in grouped[URL + "b"]] == ["desktop", "mobile"]

    def test_merge_pages(self):
        first = PageSamples(url=URL, viewports=["desktop"], colors=[ColorSample(URL, "desktop", value="#fff")])
        second = PageSamples(
            url=URL + "about",
            viewports=["desktop", "mobile"],
            colors=[ColorSample(URL + "about", "desktop", value="#000")],
        )
        merged = merge_pages("site", [first, second])

        assert merged.url == "site"
        assert merged.viewports == ["desktop", "mobile"]
        assert [c.value for c in merged.colors] == ["#fff", "#000"]

    def test_batch_requires_identity(self):
        with pytest.raises(ValueError):
            PageBatch("", "desktop")
