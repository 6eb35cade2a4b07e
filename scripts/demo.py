#!/usr/bin/env python3
"""
Demo script for Digitization Finder.

Runs the client matcher against a sample catalog and shows the analytics
cache serving repeat requests, all without touching the network.
"""

import asyncio
import time

from digitization_finder import AnalyticsCacheService, ClientRecord, TimeRange, search

SAMPLE_CATALOG = [
    ClientRecord(space_id="s1", space_name="Private Credit", folder_name="Apogem", folder_id="f1"),
    ClientRecord(space_id="s1", space_name="Private Credit", folder_name="Blackstone", folder_id="f2"),
    ClientRecord(space_id="s2", space_name="Venture", folder_name="Acne Ventures", folder_id="f3"),
    ClientRecord(space_id="s2", space_name="Venture", folder_name="Acmi Partners", folder_id="f4"),
    ClientRecord(space_id="s3", space_name="Real Estate", folder_name="Zephyr Realty", folder_id="f5"),
]


class SlowSampleSource:
    """Pretends to be the warehouse: every query takes a little while."""

    def __init__(self, delay: float = 0.2) -> None:
        self.delay = delay
        self.queries = 0

    async def execute(self, query: str) -> list[dict]:
        self.queries += 1
        await asyncio.sleep(self.delay)
        if "new_build_count" in query:
            return [{"new_build_count": "4", "update_count": "11", "idm_count": "1"}]
        if "avg_effort_new_form" in query or "LIMIT" in query:
            return []
        return [{"fund_name": "Apogem Fund I", "partner": "Jane Roe"}]


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_matcher() -> None:
    """Show how typed names resolve against the catalog."""
    print_section("Client Matching")

    queries = [
        "Apogem Capital LLC",
        "Blackstome",
        "acme",
        "Holdings Inc.",
        "Unknown Fund Manager",
    ]

    for query in queries:
        decision = search(query, SAMPLE_CATALOG)
        print(f"\n  Query: '{query}' -> {decision.kind.value}")
        for candidate in decision.candidates:
            print(f"    {candidate.record.folder_name:<20} score={candidate.score:.2f}")


async def demo_cache() -> None:
    """Show cold and warm aggregate fetches."""
    print_section("Analytics Cache")

    source = SlowSampleSource()
    cache = AnalyticsCacheService(source=source)

    for label in ("cold", "warm"):
        start = time.time()
        aggregate = await cache.get_aggregate("Apogem", TimeRange.CURRENT_YEAR)
        duration = (time.time() - start) * 1000
        print(f"\n  {label:<5} fetch: {duration:7.1f}ms, warehouse queries so far: {source.queries}")
        print(f"        total projects: {aggregate.project_counts.total}")

    removed = cache.invalidate("Apogem")
    print(f"\n  Invalidated {removed} entr{'y' if removed == 1 else 'ies'}; stats: {cache.stats()}")


def main() -> None:
    """Run all demos."""
    print("\n" + "=" * 70)
    print("  DIGITIZATION FINDER DEMO")
    print("=" * 70)

    demo_matcher()
    asyncio.run(demo_cache())

    print("\n" + "=" * 70)
    print("  Demo completed!")
    print("=" * 70 + "\n")


if __name__ == "__main__":
    main()
