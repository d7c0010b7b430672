"""In-memory provider backed by the demo dataset."""

import asyncio
from datetime import datetime
from typing import Optional

from hfn_discovery.core import ItemType, SearchFilters, SearchProvider, SearchResult
from hfn_discovery.core.filters import apply_search


def demo_results() -> list[SearchResult]:
    """Demo content used for local testing."""
    return [
        SearchResult(
            id="1",
            type=ItemType.PROFILE,
            title="Rahul Sharma",
            description="Founder & CEO at TechInnovate",
            url="/profile/rahul-sharma",
            image_url="/avatars/rahul.jpg",
            tags=["tech", "startup", "ai"],
        ),
        SearchResult(
            id="2",
            type=ItemType.PROFILE,
            title="Priya Patel",
            description="Angel Investor | Former CTO at CloudScale",
            url="/profile/priya-patel",
            image_url="/avatars/priya.jpg",
            tags=["investor", "tech", "saas"],
        ),
        SearchResult(
            id="3",
            type=ItemType.JOB,
            title="Senior Full Stack Developer",
            description="TechInnovate is looking for a senior developer to join our growing team.",
            url="/jobs/senior-full-stack-developer",
            date=datetime(2023, 11, 15),
            tags=["tech", "remote", "full-time"],
        ),
        SearchResult(
            id="4",
            type=ItemType.EVENT,
            title="Startup Funding Masterclass",
            description="Learn how to secure funding for your startup from experienced VCs.",
            url="/events/startup-funding-masterclass",
            image_url="/events/funding-masterclass.jpg",
            date=datetime(2023, 12, 10),
            tags=["funding", "workshop", "networking"],
        ),
        SearchResult(
            id="5",
            type=ItemType.GROUP,
            title="Bangalore Tech Founders",
            description="A community of tech founders in Bangalore sharing experiences and opportunities.",
            url="/groups/bangalore-tech-founders",
            image_url="/groups/bangalore-tech.jpg",
            tags=["bangalore", "tech", "networking"],
        ),
        SearchResult(
            id="6",
            type=ItemType.ARTICLE,
            title="How to Create the Perfect Pitch Deck",
            description="A comprehensive guide to creating a pitch deck that will impress investors.",
            url="/resources/perfect-pitch-deck",
            image_url="/articles/pitch-deck.jpg",
            date=datetime(2023, 10, 5),
            tags=["pitch", "funding", "guide"],
        ),
        SearchResult(
            id="7",
            type=ItemType.POST,
            title="Looking for co-founder with technical background",
            description="I have a promising idea in the fintech space and looking for a technical co-founder.",
            url="/posts/looking-for-cofounder",
            date=datetime(2023, 11, 20),
            tags=["co-founder", "fintech", "startup"],
        ),
        SearchResult(
            id="8",
            type=ItemType.JOB,
            title="Marketing Director",
            description="Growing startup seeking an experienced Marketing Director to lead our team.",
            url="/jobs/marketing-director",
            date=datetime(2023, 11, 18),
            tags=["marketing", "leadership", "full-time"],
        ),
        SearchResult(
            id="9",
            type=ItemType.EVENT,
            title="AI in Business: Practical Applications",
            description="A workshop on implementing AI solutions in your business.",
            url="/events/ai-in-business",
            image_url="/events/ai-workshop.jpg",
            date=datetime(2023, 12, 15),
            tags=["ai", "workshop", "tech"],
        ),
        SearchResult(
            id="10",
            type=ItemType.ARTICLE,
            title="Navigating the Funding Landscape in 2023",
            description="An overview of the current funding environment for startups.",
            url="/resources/funding-landscape-2023",
            image_url="/articles/funding-landscape.jpg",
            date=datetime(2023, 9, 28),
            tags=["funding", "venture-capital", "startup"],
        ),
    ]


class DemoSearchProvider(SearchProvider):
    """Search an in-memory list of results."""

    name = "Demo dataset"

    def __init__(
        self,
        results: Optional[list[SearchResult]] = None,
        latency: float = 0.0,
    ) -> None:
        self.results = demo_results() if results is None else list(results)
        self.latency = latency

    async def search(self, query: str, filters: SearchFilters) -> list[SearchResult]:
        """Filter the dataset, optionally simulating network latency."""
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        return apply_search(self.results, query, filters)
