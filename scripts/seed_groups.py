#!/usr/bin/env python3
"""
Seed the key-value store with a sample group configuration.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from feed_aggregator.config import get_config
from feed_aggregator.core.groups import CONFIG_KEY, GroupRegistry
from feed_aggregator.storage.kv import create_store


SAMPLE_GROUPS = {
    "tech": [
        "https://news.ycombinator.com/rss",
        "https://www.reddit.com/r/programming/.rss",
        {"url": "https://feeds.feedburner.com/oreilly/radar", "author": "O'Reilly Radar"},
    ],
    "python": [
        {"url": "https://blog.python.org/feeds/posts/default", "author": "Python Insider"},
        "https://planetpython.org/rss20.xml",
    ],
}


def main() -> None:
    """Seed the store with sample groups."""
    import argparse

    parser = argparse.ArgumentParser(description="Seed the store with sample feed groups")
    parser.add_argument("--clear", action="store_true", help="Remove the existing config first")
    args = parser.parse_args()

    config = get_config()
    if config.storage.type == "memory":
        print("STORAGE_TYPE is 'memory': the seeded config will not outlive this process.")
    store = create_store(config.storage)
    registry = GroupRegistry(store, inline_json=config.groups.inline_json)

    if args.clear:
        print("Clearing existing group config...")
        store.delete(CONFIG_KEY)

    existing = registry.read()
    merged = {group: [s.model_dump(exclude_none=True) for s in sources] for group, sources in existing.items()}

    for group, sources in SAMPLE_GROUPS.items():
        if group in merged:
            print(f"Group already exists: {group}")
            continue
        merged[group] = sources
        print(f"Added group: {group} ({len(sources)} sources)")

    groups = registry.write(merged)
    print(f"\nTotal groups configured: {len(groups)}")


if __name__ == "__main__":
    main()
