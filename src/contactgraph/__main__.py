"""
Command line interface for ContactGraph.

Usage:
    python -m contactgraph layout contacts.json -o graph.json --query sf
    python -m contactgraph search contacts.json "alice"
    python -m contactgraph rank contacts.json pm
    python -m contactgraph render contacts.json graph.png
    python -m contactgraph cache stats
"""

import argparse
import json
import sys
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from .services.contacts import apply_cached_tags, load_contacts, rank_contacts
from .services.graph_view import GraphSession, ImmediateAnimator
from .shared import (
    ConfigurationError, ContactGraphError, get_contact_cache, get_settings, setup_logging
)


def _load_settings():
    try:
        return get_settings()
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _build_session(args) -> GraphSession:
    contacts = load_contacts(args.contacts)
    if getattr(args, 'use_cache', False):
        contacts = apply_cached_tags(contacts)
    # No frame loop on the command line, so centering jumps straight to its target
    session = GraphSession(animator=ImmediateAnimator())
    session.load_contacts(contacts)
    if getattr(args, 'query', None):
        session.on_search_text_change(args.query)
    return session


def layout_command(args):
    """Build and lay out the graph, then write the render payload"""
    session = _build_session(args)
    payload = session.render_payload()

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2)
        print(f"✅ Layout written to {args.output}")
        meta = payload['metadata']
        print(f"📊 {meta['contact_count']} contacts, {meta['tag_count']} tags, {meta['edge_count']} edges")
    else:
        print(json.dumps(payload, indent=2))
    return 0


def search_command(args):
    """Resolve a search query to a highlight"""
    session = _build_session(args)
    result = session.selection

    if result.is_empty:
        print(f"❌ Nothing matches '{args.query}'")
        return 1

    names = [contact.name for contact in session.contacts if contact.id in result.contact_ids]
    print(f"🔍 Highlight mode: {result.mode.value}")
    print(f"👤 Contacts: {', '.join(names) if names else '-'}")
    print(f"🏷️  Tags: {', '.join(sorted(result.tags)) if result.tags else '-'}")
    return 0


def rank_command(args):
    """Print contacts ranked for a query"""
    contacts = load_contacts(args.contacts)
    ranked = rank_contacts(contacts, args.query or "")
    if not ranked:
        print("❌ No contacts match")
        return 1
    for index, contact in enumerate(ranked, 1):
        tags = f"  [{', '.join(contact.hashtags)}]" if contact.hashtags else ""
        print(f"{index:3d}. {contact.name}{tags}")
    return 0


def render_command(args):
    """Render a PNG snapshot of the laid-out graph"""
    from .services.graph_view.render import GraphRenderer

    session = _build_session(args)
    path = GraphRenderer().render(session, args.output)
    print(f"✅ Graph image saved to: {path}")
    return 0


def cache_command(args):
    """Inspect or maintain the contact cache"""
    cache = get_contact_cache()

    if args.action == 'stats':
        stats = cache.stats()
        print("📦 Contact cache")
        print(f"  Entries:        {stats['total_contacts']}")
        print(f"  With summary:   {stats['with_summary']}")
        print(f"  With hashtags:  {stats['with_hashtags']}")
        size = stats['database_size_bytes']
        print(f"  Database size:  {size if size is not None else 'n/a'} bytes")
    elif args.action == 'clear':
        cache.clear()
        print("🧹 Contact cache cleared")
    else:
        deleted = cache.delete_older_than(args.days)
        print(f"🧹 Deleted {deleted} old cache entries")
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='contactgraph',
        description='ContactGraph: relationship graph of contacts and hashtags'
    )
    parser.add_argument('--log-level', default=None, help='Override the configured log level')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    layout_parser = subparsers.add_parser('layout', help='Lay out a contact graph and write the render payload')
    layout_parser.add_argument('contacts', help='Path to a contacts JSON file')
    layout_parser.add_argument('-o', '--output', help='Output JSON file (default: stdout)')
    layout_parser.add_argument('--query', help='Search query to highlight')
    layout_parser.add_argument('--use-cache', action='store_true', help='Fill missing hashtags from the contact cache')
    layout_parser.set_defaults(func=layout_command)

    search_parser = subparsers.add_parser('search', help='Show what a search query highlights')
    search_parser.add_argument('contacts', help='Path to a contacts JSON file')
    search_parser.add_argument('query', help='Search query')
    search_parser.add_argument('--use-cache', action='store_true', help='Fill missing hashtags from the contact cache')
    search_parser.set_defaults(func=search_command)

    rank_parser = subparsers.add_parser('rank', help='List contacts ranked for a query')
    rank_parser.add_argument('contacts', help='Path to a contacts JSON file')
    rank_parser.add_argument('query', nargs='?', default='', help='Search query (default: all contacts)')
    rank_parser.set_defaults(func=rank_command)

    render_parser = subparsers.add_parser('render', help='Render a PNG snapshot of the graph')
    render_parser.add_argument('contacts', help='Path to a contacts JSON file')
    render_parser.add_argument('output', help='Output image path')
    render_parser.add_argument('--query', help='Search query to highlight')
    render_parser.add_argument('--use-cache', action='store_true', help='Fill missing hashtags from the contact cache')
    render_parser.set_defaults(func=render_command)

    cache_parser = subparsers.add_parser('cache', help='Contact cache maintenance')
    cache_parser.add_argument('action', choices=['stats', 'clear', 'prune'], help='Cache action')
    cache_parser.add_argument('--days', type=int, default=None,
                              help='Age limit for prune (default: configured max age)')
    cache_parser.set_defaults(func=cache_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        print("\n💡 Quick start: python -m contactgraph layout contacts.json -o graph.json")
        return 1

    try:
        settings = _load_settings()
        setup_logging(args.log_level or settings.log_level, settings.log_file)
        return args.func(args)
    except KeyboardInterrupt:
        print("\n⚠️ Operation cancelled by user")
        return 1
    except ContactGraphError as e:
        print(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
