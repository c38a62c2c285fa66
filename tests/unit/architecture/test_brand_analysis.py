"""Unit tests for brand identity, voice and content clustering."""

import pytest

from tokenscope.architecture import BrandAnalyzer, ContentAnalyzer, ContentClusterer, LinkGraph
from tokenscope.architecture.brand import derive_personality, formality_score, primary_voice, voice_scores
from tokenscope.architecture.clustering import user_intent
from tokenscope.config import ArchitectureConfig
from tokenscope.protocols import TextBlock, TextKind

URL = "https://example.com/"


def digests_for(text_map):
    analyzer = ContentAnalyzer()
    return [analyzer.analyze_page(url, texts) for url, texts in text_map.items()]


def links_for(link_map):
    return [link for links in link_map.values() for link in links]


class TestVoice:
    def test_indicators_match_whole_words(self):
        scores = voice_scores("Trusted by experts. A robust enterprise solution.")
        assert scores["authoritative"] == 1
        assert scores["professional"] == 3

    def test_ties_go_to_earlier_voice(self):
        assert primary_voice({"professional": 1, "authoritative": 1}) == "professional"
        assert primary_voice({"professional": 0, "casual": 0}) is None

    def test_formality(self):
        assert formality_score([["We provide enterprise tools."]]) == 1.0
        assert formality_score([["Don't worry, you'll love it! Awesome."]]) == 0.0
        assert formality_score([]) == 0.5

    @pytest.mark.parametrize(
        "voice,formality,personality",
        [
            ("professional", 0.9, "corporate"),
            ("professional", 0.5, "balanced"),
            ("casual", 0.2, "playful"),
            ("technical", 0.5, "expert"),
            ("friendly", 0.5, "approachable"),
            ("innovative", 0.5, "visionary"),
        ],
    )
    def test_personality(self, voice, formality, personality):
        assert derive_personality(voice, formality) == personality


class TestBrandProfile:
    """Test brand profile extraction from the sample site."""

    def test_identity_fields(self, site_text_map, root_url):
        brand = BrandAnalyzer().build_profile(digests_for(site_text_map), root_url)

        assert brand.name == "Acme"
        assert brand.tagline == "Analytics for everyone"
        assert brand.logo.src == "/logo.svg"
        assert brand.logo.alt == "Acme logo"
        assert brand.theme_color == "#1A73E8"

    def test_site_voice(self, site_text_map):
        analyzer = BrandAnalyzer()
        digests = digests_for(site_text_map)
        voice = analyzer.analyze_voice(digests)

        assert voice.primary == "authoritative"
        assert voice.secondary == ["professional"]
        assert voice.formality == "formal"
        assert voice.personality == ["balanced"]
        assert analyzer.messaging_consistency(digests, voice) == pytest.approx(0.5)

    def test_name_falls_back_to_title_then_host(self):
        analyzer = ContentAnalyzer()
        titled = analyzer.analyze_page(URL, [TextBlock(URL, "desktop", kind=TextKind.TITLE, text="Home | Globex")])
        untitled = analyzer.analyze_page(URL, [])

        assert BrandAnalyzer().build_profile([titled], URL).name == "Globex"
        assert BrandAnalyzer().build_profile([untitled], "https://www.initech.io/").name == "Initech"

    def test_title_fallback_finds_root_page_by_normalized_url(self):
        def titled(url, title):
            return ContentAnalyzer().analyze_page(url, [TextBlock(url, "desktop", kind=TextKind.TITLE, text=title)])

        team = titled("https://globex.com/team", "Team | Hooli")
        home = titled("https://GLOBEX.com", "Home | Globex")

        assert BrandAnalyzer().build_profile([team, home], "https://globex.com/").name == "Globex"

    def test_social_links_and_contact(self):
        texts = [
            TextBlock(URL, "desktop", kind=TextKind.SOCIAL_LINK, href="https://www.twitter.com/acme"),
            TextBlock(URL, "desktop", kind=TextKind.SOCIAL_LINK, href="https://x.com/acme-other"),
            TextBlock(URL, "desktop", kind=TextKind.CONTACT, text="hello@acme.com"),
            TextBlock(URL, "desktop", kind=TextKind.CONTACT, text="hello@acme.com"),
        ]
        brand = BrandAnalyzer().build_profile([ContentAnalyzer().analyze_page(URL, texts)], URL)

        assert brand.social_links == {"twitter": "https://www.twitter.com/acme"}
        assert brand.contact == ["hello@acme.com"]

    def test_no_voice_evidence_defaults_to_professional(self):
        voice = BrandAnalyzer().analyze_voice([])
        assert voice.primary == "professional"
        assert voice.attributes == []


class TestClustering:
    """Test keyword co-occurrence clustering."""

    def test_sample_site_forms_one_cluster(self, site_text_map, site_link_map, root_url):
        digests = digests_for(site_text_map)
        graph = LinkGraph.build(root_url, [d.url for d in digests], links_for(site_link_map))
        clusters = ContentClusterer().cluster(digests, graph)

        assert len(clusters) == 1
        cluster = clusters[0]
        assert cluster.name == "acme"
        assert cluster.pages == list(site_text_map)
        assert cluster.keywords[:3] == ["acme", "analytics", "platform"]
        assert cluster.pillar_page == root_url
        assert cluster.authority == pytest.approx(64.0)
        assert "product" in cluster.keywords
        assert cluster.user_intent == "commercial"
        assert cluster.linking_opportunities == []

    def test_missing_links_become_opportunities(self, site_text_map, root_url):
        digests = digests_for(site_text_map)
        graph = LinkGraph.build(root_url, [d.url for d in digests], [])
        cluster = ContentClusterer().cluster(digests, graph)[0]

        assert cluster.pillar_page == root_url
        assert len(cluster.linking_opportunities) == 4
        assert all(o.keyword == "acme" for o in cluster.linking_opportunities)

    def test_opportunity_cap(self, site_text_map, root_url):
        digests = digests_for(site_text_map)
        graph = LinkGraph.build(root_url, [d.url for d in digests], [])
        clusterer = ContentClusterer(ArchitectureConfig(max_opportunities_per_cluster=1))
        assert len(clusterer.cluster(digests, graph)[0].linking_opportunities) == 1

    def test_unrelated_pages_do_not_cluster(self, site_text_map, root_url):
        digests = digests_for(site_text_map)
        graph = LinkGraph.build(root_url, [d.url for d in digests], [])
        clusterer = ContentClusterer(ArchitectureConfig(min_shared_keywords=8))
        assert clusterer.cluster(digests, graph) == []

    def test_user_intent(self):
        assert user_intent(["pricing", "plans", "team"]) == "transactional"
        assert user_intent(["analytics"]) == "informational"
        assert user_intent(["acme", "analytics", "platform", "product", "trusted"]) == "commercial"
