"""
Keyword co-occurrence clustering of pages.

Pages sharing at least ``min_shared_keywords`` of their top keywords are
linked; connected components with two or more pages become clusters.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional, Sequence

from tokenscope.architecture.content import PageDigest
from tokenscope.architecture.graph import LinkGraph, normalize_url
from tokenscope.config import ArchitectureConfig
from tokenscope.schemas import ContentCluster, LinkOpportunity

INTENT_LEXICON: Dict[str, frozenset] = {
    "transactional": frozenset({"buy", "pricing", "price", "order", "shop", "cart", "purchase", "plan", "plans",
                                "subscribe", "trial", "checkout"}),
    "commercial": frozenset({"best", "review", "reviews", "compare", "comparison", "features", "product",
                             "products", "solution", "solutions"}),
    "navigational": frozenset({"login", "contact", "about", "account", "support", "careers", "team"}),
}


class _UnionFind:
    def __init__(self, size: int) -> None:
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra != rb:
            # Smaller index stays root so components keep page order.
            self.parent[max(ra, rb)] = min(ra, rb)


def user_intent(keywords: Sequence[str]) -> str:
    hits = {intent: sum(1 for k in keywords if k in lexicon) for intent, lexicon in INTENT_LEXICON.items()}
    best = max(hits, key=lambda intent: hits[intent])
    return best if hits[best] > 0 else "informational"


class ContentClusterer:
    def __init__(self, config: Optional[ArchitectureConfig] = None) -> None:
        self.config = config or ArchitectureConfig()

    def _components(self, keyword_sets: List[set]) -> List[List[int]]:
        uf = _UnionFind(len(keyword_sets))
        for i in range(len(keyword_sets)):
            for j in range(i + 1, len(keyword_sets)):
                if len(keyword_sets[i] & keyword_sets[j]) >= self.config.min_shared_keywords:
                    uf.union(i, j)
        groups: Dict[int, List[int]] = {}
        for i in range(len(keyword_sets)):
            groups.setdefault(uf.find(i), []).append(i)
        return [members for members in groups.values() if len(members) >= 2]

    def cluster(self, digests: Sequence[PageDigest], graph: LinkGraph) -> List[ContentCluster]:
        urls = [normalize_url(d.url) for d in digests]
        keyword_sets = [set(d.top_keywords) for d in digests]
        depths = graph.depths()
        max_inbound = max((graph.inbound[u] for u in urls), default=0)

        clusters: List[ContentCluster] = []
        for members in self._components(keyword_sets):
            member_urls = [urls[i] for i in members]
            counts: Counter = Counter()
            first_seen: Dict[str, int] = {}
            for i in members:
                for word in digests[i].top_keywords:
                    counts[word] += 1
                    first_seen.setdefault(word, len(first_seen))
            shared = sorted((w for w in counts if counts[w] >= 2), key=lambda w: (-counts[w], first_seen[w]))

            inbound = [graph.inbound[u] for u in member_urls]
            inbound_norm = (sum(inbound) / len(inbound)) / max_inbound if max_inbound else 0.0
            member_depths = [depths[u] for u in member_urls if u in depths]
            depth_term = 1.0 / (1.0 + sum(member_depths) / len(member_depths)) if member_depths else 0.0
            authority = round(100.0 * (0.6 * inbound_norm + 0.4 * depth_term), 2)

            pillar = min(
                member_urls,
                key=lambda u: (-graph.inbound[u], depths.get(u, float("inf")), member_urls.index(u)),
            )
            name = shared[0] if shared else f"cluster-{len(clusters) + 1}"
            clusters.append(
                ContentCluster(
                    name=name,
                    pages=member_urls,
                    keywords=shared,
                    pillar_page=pillar,
                    authority=authority,
                    user_intent=user_intent(shared),
                    linking_opportunities=self._opportunities(member_urls, pillar, name, graph),
                )
            )
        clusters.sort(key=lambda c: -c.authority)
        return clusters

    def _opportunities(self, members: List[str], pillar: str, keyword: str, graph: LinkGraph) -> List[LinkOpportunity]:
        """Missing links between the pillar page and the rest of its cluster."""
        opportunities: List[LinkOpportunity] = []
        for member in members:
            if member == pillar:
                continue
            if not graph.has_edge(member, pillar):
                opportunities.append(LinkOpportunity(source=member, target=pillar, keyword=keyword))
            if not graph.has_edge(pillar, member):
                opportunities.append(LinkOpportunity(source=pillar, target=member, keyword=keyword))
        return opportunities[: self.config.max_opportunities_per_cluster]
