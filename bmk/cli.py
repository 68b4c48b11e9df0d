#!/usr/bin/env python3
"""
BMK - Bookmark Keeper

Command-line interface for a personal, JSON-file backed bookmark manager.
Composable with pipes: ``bmk bookmark list -o urls | xargs ...``.
"""
import sys
import argparse
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from bmk.config import get_config, init_config
from bmk.constants import (
    COLLECTION_COLORS,
    DEFAULT_COLLECTION_ID,
    DEFAULT_LIST_LIMIT,
    EXPORT_FORMATS,
    SORT_OPTIONS,
)
from bmk.dedup import find_duplicates
from bmk.exporters import export_file, export_filename, select_for_export
from bmk.importers import (
    add_url,
    default_fetcher,
    import_bulk_links,
    import_file,
    import_urls,
    extract_urls_from_markdown,
)
from bmk.metadata import fetch_metadata
from bmk.models import Bookmark, Collection, ExtractedMetadata, now_ms
from bmk.progress import spinner
from bmk.search import filter_by_collection, filter_by_tags, search_bookmarks, sort_bookmarks
from bmk.storage import Storage, get_storage
from bmk.urls import get_domain, strip_ref_param
from bmk.utils import generate_id, parse_tags

logger = logging.getLogger(__name__)


console = Console()


def _storage() -> Storage:
    return get_storage(get_config().data_dir)


def resolve_collection(storage: Storage, value: Optional[str]) -> str:
    """
    Find a collection id from an id or a (case-insensitive) name.

    Raises:
        ValueError: If no collection matches
    """
    if not value:
        return DEFAULT_COLLECTION_ID
    for collection in storage.get_collections():
        if collection.id == value or collection.name.lower() == value.lower():
            return collection.id
    raise ValueError(f"Collection not found: {value}")


def _format_time(ms: Optional[int]) -> str:
    if not ms:
        return "(unknown)"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


# (header, style, cell) for the bookmark table
BOOKMARK_COLUMNS = (
    ("ID", "cyan", lambda b: b.id),
    ("Title", "green", lambda b: b.title[:50]),
    ("URL", "blue", lambda b: b.url[:50]),
    ("Tags", "yellow", lambda b: ", ".join(b.tags)[:30]),
)


def output_bookmarks(bookmarks: List[Bookmark], format: str = "table"):
    """Print bookmarks as a rich table, JSON, bare URLs or plain text."""
    if format == "table":
        columns = list(BOOKMARK_COLUMNS)
        if get_config().show_descriptions:
            columns.append(("Description", "white", lambda b: (b.description or "")[:40]))

        table = Table(title=f"Bookmarks ({len(bookmarks)})")
        for header, style, _ in columns:
            table.add_column(header, style=style)
        for b in bookmarks:
            table.add_row(*(cell(b) for _, _, cell in columns))

        console.print(table)
    elif format == "json":
        print(json.dumps([b.to_dict() for b in bookmarks], indent=2, ensure_ascii=False))
    elif format == "urls":
        for b in bookmarks:
            print(b.url)
    else:  # plain
        for b in bookmarks:
            tags = " ".join(f"#{t}" for t in b.tags)
            print(f"[{b.id}] {b.title}\n    {b.url}\n    {tags}")
            print()


def cmd_add(args):
    """Add a new bookmark."""
    storage = _storage()
    collection_id = resolve_collection(storage, args.collection)

    if args.no_fetch:
        def fetcher(url):
            return ExtractedMetadata(title=url)
    else:
        fetcher = spinner("Fetching metadata")(default_fetcher())

    bookmark, message = add_url(storage, args.url, collection_id, fetcher)
    if bookmark is None:
        console.print(f"[yellow]{message}[/yellow]")
        return

    updates = {}
    if args.title:
        updates["title"] = args.title
    if args.description:
        updates["description"] = args.description
    if args.tags:
        updates["tags"] = parse_tags(args.tags)
    if updates:
        bookmark = storage.update_bookmark(bookmark.id, **updates)
        storage.sync_tags()

    if args.quiet:
        print(bookmark.id)
    else:
        console.print(f"[green]{message}[/green] [{bookmark.id}] {bookmark.title}")


def cmd_list(args):
    """List bookmarks."""
    config = get_config()
    storage = _storage()

    bookmarks = filter_by_collection(storage.get_bookmarks(),
                                     resolve_collection(storage, args.collection))
    if args.tag:
        bookmarks = filter_by_tags(bookmarks, args.tag)
    bookmarks = sort_bookmarks(bookmarks, args.sort or config.sort_by)
    if args.limit:
        bookmarks = bookmarks[:args.limit]

    output_bookmarks(bookmarks, args.output)


def cmd_search(args):
    """Search bookmarks."""
    config = get_config()
    storage = _storage()

    bookmarks = filter_by_collection(storage.get_bookmarks(),
                                     resolve_collection(storage, args.collection))
    results = sort_bookmarks(search_bookmarks(bookmarks, args.query), config.sort_by)
    if args.limit:
        results = results[:args.limit]

    if not results and not args.quiet:
        console.print(f"[yellow]No bookmarks match '{args.query}'[/yellow]")
        return
    output_bookmarks(results, args.output)


def cmd_get(args):
    """Show one bookmark."""
    bookmark = _storage().get_bookmark(args.id)
    if bookmark is None:
        raise ValueError(f"Bookmark not found: {args.id}")

    if args.output == "json":
        print(json.dumps(bookmark.to_dict(), indent=2, ensure_ascii=False))
        return

    details = Table(show_header=False, box=None)
    details.add_column("Field", style="cyan bold")
    details.add_column("Value", style="white")
    details.add_row("ID", bookmark.id)
    details.add_row("URL", bookmark.url)
    details.add_row("Domain", get_domain(bookmark.url) or "(unknown)")
    details.add_row("Title", bookmark.title)
    details.add_row("Description", bookmark.description or "(none)")
    details.add_row("Tags", ", ".join(bookmark.tags) or "(none)")
    details.add_row("Collection", bookmark.collection_id)
    details.add_row("Icon", bookmark.icon or "(none)")
    details.add_row("Image", bookmark.image or "(none)")
    details.add_row("Created", _format_time(bookmark.created_at))
    details.add_row("Updated", _format_time(bookmark.updated_at))
    console.print(details)


def cmd_update(args):
    """Update a bookmark."""
    storage = _storage()
    bookmark = storage.get_bookmark(args.id)
    if bookmark is None:
        raise ValueError(f"Bookmark not found: {args.id}")

    updates = {}
    if args.url:
        updates["url"] = strip_ref_param(args.url)
    if args.title:
        updates["title"] = args.title
    if args.description is not None:
        updates["description"] = args.description
    if args.collection:
        updates["collection_id"] = resolve_collection(storage, args.collection)

    tags = list(bookmark.tags)
    if args.tags is not None:
        tags = parse_tags(args.tags)
    for tag in parse_tags(args.add_tags):
        if tag not in tags:
            tags.append(tag)
    remove = set(parse_tags(args.remove_tags))
    tags = [t for t in tags if t not in remove]
    if tags != bookmark.tags:
        updates["tags"] = tags

    if not updates:
        console.print("[yellow]Nothing to update[/yellow]")
        return

    storage.update_bookmark(args.id, **updates)
    storage.sync_tags()
    if not args.quiet:
        console.print(f"[green]Updated bookmark {args.id}[/green]")


def cmd_delete(args):
    """Delete bookmarks."""
    config = get_config()
    storage = _storage()

    if config.confirm_delete and not args.yes:
        if not Confirm.ask(f"Delete {len(args.ids)} bookmark(s)?"):
            return

    deleted = storage.delete_bookmarks(args.ids)
    if args.quiet:
        print(deleted)
    else:
        console.print(f"[green]Deleted {deleted} bookmark(s)[/green]")
        if deleted < len(args.ids):
            console.print(f"[yellow]{len(args.ids) - deleted} id(s) not found[/yellow]")


def cmd_dedupe(args):
    """Remove duplicate bookmarks and ref tracking parameters."""
    storage = _storage()

    if args.dry_run:
        duplicates = find_duplicates(storage.get_bookmarks())
        if not duplicates:
            console.print("[green]No duplicates found[/green]")
            return
        table = Table(title="Duplicates")
        table.add_column("Canonical URL", style="blue")
        table.add_column("IDs", style="cyan")
        for key, group in duplicates.items():
            table.add_row(key, ", ".join(b.id for b in group))
        console.print(table)
        return

    report = storage.dedupe_by_url()
    console.print(
        f"[green]{report.removed_count} duplicates removed, "
        f"{report.ref_stripped_count} ref params stripped[/green]"
    )


def cmd_tags(args):
    """List tags with usage counts."""
    storage = _storage()
    bookmarks = storage.get_bookmarks()
    tags = storage.sync_tags(bookmarks)

    counts = {t.name: 0 for t in tags}
    for bookmark in bookmarks:
        for tag in bookmark.tags:
            counts[tag] = counts.get(tag, 0) + 1

    if args.output == "json":
        print(json.dumps([{"tag": t.name, "count": counts[t.name], "color": t.color}
                          for t in tags], indent=2))
        return

    table = Table(title="Tags")
    table.add_column("Tag", style="cyan")
    table.add_column("Count", style="green")
    for t in tags:
        table.add_row(t.name, str(counts[t.name]))
    console.print(table)


def _retag(args, add: bool):
    storage = _storage()
    changed = 0
    for bookmark_id in args.ids:
        bookmark = storage.get_bookmark(bookmark_id)
        if bookmark is None:
            console.print(f"[yellow]Bookmark {bookmark_id} not found, skipping[/yellow]")
            continue
        if add and args.tag not in bookmark.tags:
            storage.update_bookmark(bookmark_id, tags=bookmark.tags + [args.tag])
            changed += 1
        elif not add and args.tag in bookmark.tags:
            storage.update_bookmark(bookmark_id, tags=[t for t in bookmark.tags if t != args.tag])
            changed += 1
    storage.sync_tags()
    return changed


def cmd_tag_add(args):
    """Add tag to bookmark(s)."""
    count = _retag(args, add=True)
    console.print(f"[green]✓ Added tag '{args.tag}' to {count} bookmark(s)[/green]")


def cmd_tag_remove(args):
    """Remove tag from bookmark(s)."""
    count = _retag(args, add=False)
    console.print(f"[green]✓ Removed tag '{args.tag}' from {count} bookmark(s)[/green]")


def cmd_collections(args):
    """List collections."""
    storage = _storage()
    collections = storage.get_collections()
    bookmarks = storage.get_bookmarks()

    def count(c: Collection) -> int:
        return len(filter_by_collection(bookmarks, c.id))

    if args.output == "json":
        print(json.dumps([dict(c.to_dict(), count=count(c)) for c in collections], indent=2))
        return

    table = Table(title="Collections")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Bookmarks", style="magenta")
    for c in collections:
        name = f"{c.name} (default)" if c.is_default else c.name
        table.add_row(c.id, name, str(count(c)))
    console.print(table)


def cmd_collection_add(args):
    """Create a collection."""
    storage = _storage()
    collections = storage.get_collections()
    now = now_ms()
    collection = storage.add_collection(Collection(
        id=generate_id(),
        name=args.name,
        color=COLLECTION_COLORS[len(collections) % len(COLLECTION_COLORS)],
        created_at=now,
        updated_at=now,
    ))
    if args.quiet:
        print(collection.id)
    else:
        console.print(f"[green]Created collection '{collection.name}' ({collection.id})[/green]")


def cmd_collection_rename(args):
    """Rename a collection."""
    storage = _storage()
    collection_id = resolve_collection(storage, args.id)
    storage.update_collection(collection_id, name=args.name)
    console.print(f"[green]Renamed collection to '{args.name}'[/green]")


def cmd_collection_delete(args):
    """Delete a collection and its bookmarks."""
    config = get_config()
    storage = _storage()
    collection_id = resolve_collection(storage, args.id)

    if collection_id == DEFAULT_COLLECTION_ID:
        raise ValueError("The default collection cannot be deleted")
    if config.confirm_delete and not args.yes:
        if not Confirm.ask("Delete this collection and all of its bookmarks?"):
            return

    removed = storage.delete_collection(collection_id)
    console.print(f"[green]Deleted collection and {removed} bookmark(s)[/green]")


def _report_import(result, quiet: bool):
    if quiet:
        print(result.imported)
        return
    console.print(f"[green]{result.summary()}[/green]")
    for url, error in result.failures:
        console.print(f"[red]  {url}: {error}[/red]")


def cmd_import(args):
    """Import bookmarks from a file."""
    storage = _storage()
    collection_id = resolve_collection(storage, args.collection)
    fetcher = None if not args.no_fetch else (lambda url: ExtractedMetadata(title=url))
    format = None if args.format == "auto" else args.format

    if args.file == "-":
        text = sys.stdin.read()
        urls = extract_urls_from_markdown(text)
        if not urls:
            console.print("[yellow]No URLs found in the markdown.[/yellow]")
            return
        result = import_urls(storage, urls, collection_id=collection_id, fetcher=fetcher)
    else:
        result = import_file(storage, Path(args.file), format=format,
                             collection_id=collection_id, fetcher=fetcher)
    _report_import(result, args.quiet)


def cmd_import_links(args):
    """Add pasted links (one per line) to a collection."""
    storage = _storage()
    text = sys.stdin.read() if args.file == "-" else Path(args.file).read_text(encoding="utf-8")
    collection_id = None if args.new_collection else resolve_collection(storage, args.collection)

    collection, result = import_bulk_links(storage, text, collection_id=collection_id)
    if not args.quiet:
        console.print(f"[green]Added {result.imported} link(s) to '{collection.name}'[/green]")
    _report_import(result, args.quiet)


def cmd_export(args):
    """Export bookmarks to a file."""
    config = get_config()
    storage = _storage()

    format = args.format
    if format is None and args.file:
        suffix = Path(args.file).suffix.lower().lstrip(".")
        format = next((f for f, ext in EXPORT_FORMATS.items() if ext == suffix), None)
    format = format or config.export_format

    collection_ids = [resolve_collection(storage, c) for c in args.collection] \
        if args.collection else config.export_collection_ids
    bookmarks = select_for_export(storage.get_bookmarks(), DEFAULT_COLLECTION_ID, collection_ids)
    if not bookmarks:
        console.print("[yellow]No bookmarks to export.[/yellow]")
        return

    path = Path(args.file) if args.file else Path(
        export_filename(format, storage.get_collections(), DEFAULT_COLLECTION_ID, collection_ids))
    export_file(bookmarks, path, format)

    if not args.quiet:
        plural = "" if len(bookmarks) == 1 else "s"
        console.print(f"[green]Exported {len(bookmarks)} link{plural} as {format} to {path}[/green]")


def cmd_metadata(args):
    """Fetch a page and show the extracted metadata."""
    config = get_config()
    metadata = spinner("Fetching metadata")(fetch_metadata)(
        args.url, timeout=config.timeout, user_agent=config.user_agent)

    if args.output == "json":
        print(json.dumps(metadata.to_dict(), indent=2, ensure_ascii=False))
        return

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan bold")
    table.add_column("Value", style="white")
    table.add_row("Title", metadata.title)
    table.add_row("Description", metadata.description or "(none)")
    table.add_row("Icon", metadata.icon or "(none)")
    table.add_row("Image", metadata.image or "(none)")
    console.print(table)


def cmd_config(args):
    """Manage configuration."""
    config = get_config()

    if args.action == "show":
        if args.key:
            if not hasattr(config, args.key):
                raise ValueError(f"Unknown config key: {args.key}")
            print(getattr(config, args.key))
        else:
            print(json.dumps(asdict(config), indent=2))

    elif args.action == "set":
        if not args.key or args.value is None:
            raise ValueError("config set requires KEY and VALUE")
        try:
            config.set_value(args.key, args.value)
        except KeyError:
            raise ValueError(f"Unknown config key: {args.key}")
        config.save()
        if not args.quiet:
            console.print(f"[green]Set {args.key} = {getattr(config, args.key)}[/green]")

    elif args.action == "init":
        config_path = config.save()
        console.print(f"[green]Created config at {config_path}[/green]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bmk",
        description="BMK - Bookmark Keeper: a personal, JSON-file backed bookmark manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bmk bookmark add https://example.com --tags "web,demo"
  bmk bookmark list --collection work --sort alphabetical
  bmk bookmark search "#python"
  bmk bookmark dedupe
  bmk collection add "Reading list"
  bmk import markdown notes.md --collection "Reading list"
  bmk import links links.txt --new-collection
  bmk export all.html
  bmk metadata https://example.com

Configuration:
  Data directory: ./data or from config
  Config file: ~/.config/bmk/config.toml
  Environment: BMK_DATA_DIR, BMK_OUTPUT_FORMAT
        """
    )

    # Global options
    parser.add_argument("--data-dir", help="Data directory (default: ./data)")
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-o", "--output", choices=["table", "json", "plain", "urls"],
                        help="Output format")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command groups")

    # =================
    # BOOKMARK GROUP
    # =================
    bookmarks = subparsers.add_parser("bookmark", help="Add, find and edit bookmarks")
    bookmark_cmds = bookmarks.add_subparsers(dest="bookmark_command", required=True)

    p = bookmark_cmds.add_parser("add", help="Save a URL, fetching its title and icon")
    p.add_argument("url", help="Page to save (scheme optional)")
    p.add_argument("--title", help="Use this title instead of the fetched one")
    p.add_argument("--description", help="Use this description instead of the fetched one")
    p.add_argument("--tags", help="Tags, separated by commas")
    p.add_argument("--collection", help="Target collection (id or name)")
    p.add_argument("--no-fetch", action="store_true", help="Skip the network; title defaults to the URL")
    p.set_defaults(func=cmd_add)

    p = bookmark_cmds.add_parser("list", help="Show saved bookmarks")
    p.add_argument("--collection", help="Limit to one collection (id or name)")
    p.add_argument("--sort", choices=SORT_OPTIONS, help="Ordering (default from config)")
    p.add_argument("--tag", action="append", help="Require a tag; repeat to require several")
    p.add_argument("--limit", type=int, default=DEFAULT_LIST_LIMIT,
                   help=f"Show at most N (default: {DEFAULT_LIST_LIMIT}, 0 shows everything)")
    p.set_defaults(func=cmd_list)

    p = bookmark_cmds.add_parser("search", help="Match words against title, URL, description and tags")
    p.add_argument("query", help="Words to match, or #tag / tag:name for a tag search")
    p.add_argument("--collection", help="Limit to one collection (id or name)")
    p.add_argument("--limit", type=int, help="Show at most N matches")
    p.set_defaults(func=cmd_search)

    p = bookmark_cmds.add_parser("get", help="Show every field of one bookmark")
    p.add_argument("id", help="Bookmark id")
    p.set_defaults(func=cmd_get)

    p = bookmark_cmds.add_parser("update", help="Edit fields of one bookmark")
    p.add_argument("id", help="Bookmark id")
    p.add_argument("--url", help="Replacement URL")
    p.add_argument("--title", help="Replacement title")
    p.add_argument("--description", help="Replacement description")
    p.add_argument("--collection", help="Move into this collection (id or name)")
    p.add_argument("--tags", help="Comma-separated tags replacing the current set")
    p.add_argument("--add-tags", help="Comma-separated tags to attach")
    p.add_argument("--remove-tags", help="Comma-separated tags to detach")
    p.set_defaults(func=cmd_update)

    p = bookmark_cmds.add_parser("delete", help="Remove bookmarks by id")
    p.add_argument("ids", nargs="+", help="One or more bookmark ids")
    p.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
    p.set_defaults(func=cmd_delete)

    p = bookmark_cmds.add_parser("dedupe", help="Collapse bookmarks that share a canonical URL")
    p.add_argument("--dry-run", action="store_true", help="Report duplicate groups without deleting")
    p.set_defaults(func=cmd_dedupe)

    # =================
    # TAG GROUP
    # =================
    tags = subparsers.add_parser("tag", help="Work with tags")
    tag_cmds = tags.add_subparsers(dest="tag_command", required=True)

    p = tag_cmds.add_parser("list", help="Show tags with usage counts")
    p.set_defaults(func=cmd_tags)

    for action, func, verb in (("add", cmd_tag_add, "Attach"), ("remove", cmd_tag_remove, "Detach")):
        p = tag_cmds.add_parser(action, help=f"{verb} a tag on one or more bookmarks")
        p.add_argument("tag", help="Tag name")
        p.add_argument("ids", nargs="+", help="One or more bookmark ids")
        p.set_defaults(func=func)

    # =================
    # COLLECTION GROUP
    # =================
    collections = subparsers.add_parser("collection", help="Group bookmarks into collections")
    collection_cmds = collections.add_subparsers(dest="collection_command", required=True)

    p = collection_cmds.add_parser("list", help="Show collections with bookmark counts")
    p.set_defaults(func=cmd_collections)

    p = collection_cmds.add_parser("add", help="Create an empty collection")
    p.add_argument("name", help="Display name")
    p.set_defaults(func=cmd_collection_add)

    p = collection_cmds.add_parser("rename", help="Change a collection's display name")
    p.add_argument("id", help="Collection id or current name")
    p.add_argument("name", help="Replacement name")
    p.set_defaults(func=cmd_collection_rename)

    p = collection_cmds.add_parser("delete", help="Delete a collection together with its bookmarks")
    p.add_argument("id", help="Collection id or name")
    p.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
    p.set_defaults(func=cmd_collection_delete)

    # =================
    # IMPORT / EXPORT
    # =================
    imports = subparsers.add_parser("import", help="Bring bookmarks in from files")
    import_cmds = imports.add_subparsers(dest="import_command", required=True)

    for format in ("auto", "html", "json", "markdown", "text"):
        summary = ("Guess the format from the file extension" if format == "auto"
                   else f"Read a {format} file")
        p = import_cmds.add_parser(format, help=summary)
        p.add_argument("file", help="Input path ('-' reads markdown from stdin)")
        p.add_argument("--collection", help="Put new bookmarks here (id or name)")
        p.add_argument("--no-fetch", action="store_true", help="Skip the network; titles default to URLs")
        p.set_defaults(func=cmd_import, format=format)

    p = import_cmds.add_parser("links", help="Add one link per line to a collection")
    p.add_argument("file", help="Input path ('-' reads stdin)")
    target = p.add_mutually_exclusive_group()
    target.add_argument("--collection", help="Existing collection (id or name)")
    target.add_argument("--new-collection", action="store_true",
                        help="Create 'Collection N' and add the links there")
    p.set_defaults(func=cmd_import_links)

    p = subparsers.add_parser("export", help="Write bookmarks to html, markdown, text or json")
    p.add_argument("file", nargs="?", help="Output path (default: named after the selection)")
    p.add_argument("--format", choices=list(EXPORT_FORMATS), help="Output format (default: from suffix or config)")
    p.add_argument("--collection", action="append",
                   help="Only this collection (id or name); repeat for several")
    p.set_defaults(func=cmd_export)

    # =================
    # METADATA
    # =================
    p = subparsers.add_parser("metadata", help="Print the title, description, icon and image of a page")
    p.add_argument("url", help="Page to inspect")
    p.set_defaults(func=cmd_metadata)

    # =================
    # CONFIG
    # =================
    p = subparsers.add_parser("config", help="Show or change settings")
    p.add_argument("action", choices=["show", "set", "init"], help="show, set KEY VALUE, or init the user config file")
    p.add_argument("key", nargs="?", help="Setting name, e.g. timeout")
    p.add_argument("value", nargs="?", help="New value for set")
    p.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = init_config(
        data_dir=args.data_dir,
        config_file=Path(args.config) if args.config else None,
        output_format=args.output,
    )

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level.upper(), logging.INFO),
        format='%(levelname)s: %(message)s',
    )

    if not config.color_output:
        console.no_color = True

    if not args.output:
        args.output = config.output_format

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
