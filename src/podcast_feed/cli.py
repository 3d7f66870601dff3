"""
Command-line interface for the podcast feed parser.

Usage:
    podcast-feed parse https://example.com/feed.rss      # Parse a feed and summarize it
    podcast-feed parse feed.xml --unparsed               # Also show content the parser skipped
    podcast-feed parse feed.xml --output-json            # Channel as JSON
    podcast-feed parse https://example.com/feed.rss --save   # Save channel JSON to the backup folder
    podcast-feed sync channel.json                       # Append new episodes from the channel's feed
    podcast-feed sync channel.json --source feed.xml     # Merge from a local copy of the feed
    podcast-feed sync channel.json --dry-run             # Preview without writing the file
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from podcast_feed.cache import ImageCache, backup_path
from podcast_feed.config import Config, get_config
from podcast_feed.errors import FeedFetchError, FeedParseError
from podcast_feed.ingestion.fetcher import fetch_feed
from podcast_feed.ingestion.rss_parser import parse_feed
from podcast_feed.ingestion.sync import update_channel
from podcast_feed.models.entities import Channel


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _read_source(source: str, config: Config) -> Union[str, bytes]:
    """Feed document from a URL or a local file."""
    if _is_url(source):
        return fetch_feed(source, config)
    path = Path(source)
    if not path.exists():
        print(f"ERROR: Feed file not found: {source}")
        sys.exit(1)
    return path.read_bytes()


def cmd_parse(args):
    """Parse a feed and print a summary or its JSON form."""
    config = get_config()

    try:
        xml = _read_source(args.source, config)
        channel = parse_feed(xml, show_unparsed_content=args.unparsed or None, config=config)
    except (FeedFetchError, FeedParseError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    if args.save:
        target = backup_path(config, channel)
        if target is None:
            print("ERROR: Channel has no RSS URL, cannot derive a backup file name.")
            sys.exit(1)
        config.ensure_directories()
        target.write_text(channel.to_json(), encoding="utf-8")

    # JSON output mode (for CI/automation)
    if args.output_json:
        print(channel.to_json())
        sys.exit(0)

    # Human-readable output
    print(f"Channel: {channel.title or '(untitled)'}")
    if channel.rss_url:
        print(f"RSS URL: {channel.rss_url}")
    print(f"Image: {ImageCache(config).local_path(channel.image)}")
    print(f"Episodes: {len(channel.episodes)}")
    for ep in channel.episodes:
        duration_info = f", duration={ep.duration}" if ep.duration else ""
        print(f"  - {ep.title} (guid={ep.guid[:40]}){duration_info}")

    if channel.diagnostics:
        print(f"\nChannel diagnostics ({len(channel.diagnostics)}):")
        for message in channel.diagnostics:
            print(f"  - {message}")

    episode_diagnostics = sum(len(ep.diagnostics) for ep in channel.episodes)
    if episode_diagnostics:
        print(f"Episode diagnostics: {episode_diagnostics}")

    if channel.unparsed_content:
        print("\nUnparsed content:")
        print(channel.unparsed_content)

    if args.save:
        print(f"\nSaved channel to {target}")


def cmd_sync(args):
    """Append newly published episodes to a saved channel."""
    config = get_config()

    channel_path = Path(args.channel_json)
    if not channel_path.exists():
        print(f"ERROR: Channel file not found: {args.channel_json}")
        sys.exit(1)
    channel = Channel.from_json(channel_path.read_text(encoding="utf-8"))

    fetch = None
    if args.source:
        # --source may be a local file, which fetch_feed cannot read
        def fetch(url: str, cfg: Optional[Config]) -> Union[str, bytes]:
            return _read_source(url, config)

    result = update_channel(channel, config=config, fetch=fetch, source=args.source)

    if not args.dry_run and result.has_new_episodes:
        channel_path.write_text(channel.to_json(), encoding="utf-8")

    # JSON output mode (for CI/automation)
    if args.output_json:
        print(result.to_json())
        if result.errors:
            sys.exit(1)
        sys.exit(0)

    # Human-readable output
    if result.errors:
        for err in result.errors:
            print(f"ERROR: {err}")
        sys.exit(1)

    if result.has_new_episodes:
        print(f"Found {len(result.new_episodes)} new episode(s):")
        for ep in result.new_episodes:
            print(f"  - {ep.title} (guid={ep.guid[:40]})")

        if args.dry_run:
            print("\n[dry-run] Channel file not updated.")
        else:
            print(f"\nUpdated {channel_path}")
    else:
        print("No new episodes found.")
        print(f"Feed: {result.channel_title} ({result.total_feed_episodes} episodes)")
        print(f"Known episodes: {result.known_guid_count}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="podcast-feed",
        description="Podcast feed parser -- parse RSS feeds and keep channels up to date",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse
    sub_parse = subparsers.add_parser("parse", help="Parse a feed from a URL or file")
    sub_parse.add_argument("source", help="Feed URL or path to a local XML file")
    sub_parse.add_argument(
        "--unparsed",
        action="store_true",
        default=False,
        help="Show feed content the parser did not understand",
    )
    sub_parse.add_argument(
        "--output-json",
        action="store_true",
        default=False,
        help="Output the channel as JSON (for CI/automation)",
    )
    sub_parse.add_argument(
        "--save",
        action="store_true",
        default=False,
        help="Save the channel JSON to the backup folder",
    )
    sub_parse.set_defaults(func=cmd_parse)

    # sync
    sub_sync = subparsers.add_parser(
        "sync",
        help="Append new episodes to a saved channel",
    )
    sub_sync.add_argument("channel_json", help="Path to a saved channel JSON file")
    sub_sync.add_argument(
        "--source",
        default=None,
        help="Feed URL or file to merge from (default: the channel's RSS URL)",
    )
    sub_sync.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Show what would be appended without writing the file",
    )
    sub_sync.add_argument(
        "--output-json",
        action="store_true",
        default=False,
        help="Output result as JSON (for CI/automation)",
    )
    sub_sync.set_defaults(func=cmd_sync)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    args.func(args)


if __name__ == "__main__":
    main()
