"""Manual source runner for testing and debugging adapters.

This script runs one source adapter from the command line so its search
results, chapter list, series info, page images or health probe can be
inspected in real time.

Usage:
    python scripts/run_source.py --source asurascan --search "solo leveling"
    python scripts/run_source.py --source mgeko --chapters https://www.mgeko.cc/manga/some-series/
    python scripts/run_source.py --source madarascans --pages https://madarascans.com/some-chapter/
    python scripts/run_source.py --source mangakatana --info https://mangakatana.com/manga/some-series.123
    python scripts/run_source.py --source webtoon --probe
    python scripts/run_source.py --list
"""

import asyncio
import argparse
import sys
import os

# Add backend to path so we can import comicsource modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from comicsource.core.exceptions import ComickSourceException
from comicsource.scrapers.register_adapters import register_all_adapters
from comicsource.scrapers.registry import AdapterRegistry
from comicsource.services.health_service import HealthProber, HealthCache


def _list_sources(registry: AdapterRegistry) -> None:
    print(f"\n📋 Available sources:")
    for descriptor in registry.descriptors():
        print(f"   - {descriptor.source_id:<12} {descriptor.name:<12} ({descriptor.type.value})")
    print()


async def run_source(args: argparse.Namespace) -> int:
    """Run one adapter operation and print the results.

    Returns:
        Process exit code
    """
    registry = register_all_adapters(AdapterRegistry())

    if args.list:
        _list_sources(registry)
        return 0

    adapter = registry.resolve_by_name(args.source)
    if adapter is None:
        print(f"\n❌ Error: Unknown source '{args.source}'")
        _list_sources(registry)
        return 1

    print(f"\n{'='*70}")
    print(f"  {adapter.name} ({adapter.source_type.value})")
    print(f"  Base URL: {adapter.base_url}")
    print(f"  Fetch strategy: {adapter.fetch_strategy.name}")
    print(f"{'='*70}\n")

    try:
        if args.search:
            results = await adapter.search(args.search)
            print(f"✅ Found {len(results)} results for '{args.search}'\n")
            for i, result in enumerate(results[: args.limit], 1):
                print(f"[{i}] {result.title}")
                print(f"    📖 Latest chapter: {result.latest_chapter:g}")
                if result.last_updated:
                    print(f"    🕒 Updated: {result.last_updated}")
                if result.rating is not None:
                    print(f"    ⭐ Rating: {result.rating}")
                print(f"    🔗 URL: {result.url}")
                print()

        elif args.chapters:
            chapters = await adapter.get_chapter_list(args.chapters)
            print(f"✅ Found {len(chapters)} chapters\n")
            for chapter in chapters[-args.limit:]:
                date = f"  ({chapter.last_updated})" if chapter.last_updated else ""
                print(f"  {chapter.number:>8g}  {chapter.title or ''}{date}")
                print(f"            {chapter.url}")

        elif args.info:
            info = await adapter.extract_info(args.info)
            print(f"✅ {info.title}")
            print(f"    🆔 Series id: {info.id}")

        elif args.pages:
            if not adapter.supports_chapter_images():
                print(f"⚠️  {adapter.name} does not support fetching chapter images.\n")
                return 1
            images = await adapter.get_chapter_images(args.pages)
            print(f"✅ Found {len(images)} pages\n")
            for image in images[: args.limit]:
                print(f"  [{image.page:>3}] {image.url}")

        else:
            prober = HealthProber(registry, cache=HealthCache())
            result = await prober.check_source(adapter)
            timing = f" in {result.response_time}ms" if result.response_time is not None else ""
            print(f"🩺 {result.status.value}: {result.message}{timing}")

    except ComickSourceException as e:
        print(f"\n❌ Error occurred while running {adapter.name}:")
        print(f"   {type(e).__name__}: {e.message}")
        for transition in getattr(e, "transitions", ()):
            print(f"   ↳ {transition.source.value} → {transition.target.value}: {transition.error.reason}")
        print()
        return 1

    print(f"\n{'='*70}\n")
    return 0


def main():
    """Parse arguments and run the source."""
    parser = argparse.ArgumentParser(
        description="Run a content source adapter for testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_source.py --source asurascan --search "solo leveling"
  python scripts/run_source.py --source mgeko --chapters <series url>
  python scripts/run_source.py --source novelcool --pages <chapter url>
  python scripts/run_source.py --source webtoon --probe
        """,
    )

    parser.add_argument("--list", action="store_true", help="List registered sources and exit")
    parser.add_argument("--source", help="Source name or id (e.g., 'asurascan', 'WEBTOON')")

    action = parser.add_mutually_exclusive_group()
    action.add_argument("--search", metavar="QUERY", help="Search the source for a series")
    action.add_argument("--chapters", metavar="URL", help="List the chapters of a series")
    action.add_argument("--info", metavar="URL", help="Extract the title and id of a series page")
    action.add_argument("--pages", metavar="URL", help="List the page images of a chapter")
    action.add_argument("--probe", action="store_true", help="Run a single health probe (default)")

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of entries to display (default: 10)",
    )

    args = parser.parse_args()
    if not args.list and not args.source:
        parser.error("--source is required unless --list is given")

    sys.exit(asyncio.run(run_source(args)))


if __name__ == "__main__":
    main()
