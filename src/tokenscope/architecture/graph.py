"""
Directed internal link graph: depth, orphans, broken links and link counts.

An edge counts toward reachability and inbound links only when it is
internal, fetched successfully, not a self-link, and both ends are crawled
pages.
"""

from __future__ import annotations

import statistics
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple
from urllib.parse import urlparse, urlunparse

from tokenscope.protocols import LinkEdge
from tokenscope.schemas import BrokenLink, LinkingDepth, SiteDepthMetrics


def normalize_url(url: str) -> str:
    """Lowercase scheme/host, drop fragments and trailing slashes."""
    parts = urlparse(url.strip())
    path = parts.path or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return urlunparse((parts.scheme.lower(), parts.netloc.lower(), path, "", parts.query, ""))


@dataclass
class LinkGraph:
    root: str
    nodes: List[str]
    edges: Dict[str, Set[str]] = field(default_factory=dict)
    inbound: Counter = field(default_factory=Counter)
    broken: List[BrokenLink] = field(default_factory=list)
    internal_links: int = 0
    context_distribution: Counter = field(default_factory=Counter)

    @classmethod
    def build(cls, root: str, pages: Sequence[str], links: Sequence[LinkEdge]) -> "LinkGraph":
        nodes = list(dict.fromkeys(normalize_url(p) for p in pages))
        graph = cls(root=normalize_url(root), nodes=nodes, edges={n: set() for n in nodes})
        node_set = set(nodes)
        seen_broken: Set[Tuple[str, str]] = set()
        for link in links:
            source = normalize_url(link.url)
            target = normalize_url(link.target)
            if not link.internal:
                continue
            if not link.fetch_ok:
                if (source, target) not in seen_broken:
                    seen_broken.add((source, target))
                    graph.broken.append(BrokenLink(source=source, target=target, status_code=link.status_code))
                continue
            graph.internal_links += 1
            graph.context_distribution[link.context.value] += 1
            if source == target or source not in node_set or target not in node_set:
                continue
            if target not in graph.edges[source]:
                graph.edges[source].add(target)
                graph.inbound[target] += 1
        return graph

    def has_edge(self, source: str, target: str) -> bool:
        return target in self.edges.get(source, set())

    def depths(self) -> Dict[str, int]:
        """Shortest path length from the root to every reachable page."""
        if self.root not in self.edges:
            return {}
        depths = {self.root: 0}
        queue = deque([self.root])
        while queue:
            node = queue.popleft()
            # Sorted for deterministic traversal order.
            for target in sorted(self.edges[node]):
                if target not in depths:
                    depths[target] = depths[node] + 1
                    queue.append(target)
        return depths

    def orphans(self) -> List[str]:
        return [n for n in self.nodes if n != self.root and self.inbound[n] == 0]

    def unreachable(self, depths: Optional[Dict[str, int]] = None) -> List[str]:
        depths = self.depths() if depths is None else depths
        return [n for n in self.nodes if n not in depths]

    def depth_metrics(self) -> SiteDepthMetrics:
        depths = self.depths()
        values = [depths[n] for n in self.nodes if n in depths]
        if not values:
            return SiteDepthMetrics(unreachable=self.unreachable(depths))
        distribution = Counter(values)
        return SiteDepthMetrics(
            average=round(sum(values) / len(values), 4),
            median=float(statistics.median(values)),
            min=min(values),
            max=max(values),
            distribution={str(depth): distribution[depth] for depth in sorted(distribution)},
            unreachable=self.unreachable(depths),
        )

    def linking_depth(self) -> LinkingDepth:
        counts = [len(self.edges[n]) for n in self.nodes]
        if not counts:
            return LinkingDepth()
        return LinkingDepth(average=round(sum(counts) / len(counts), 4), max=max(counts))
