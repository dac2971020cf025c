"""CLI interface for countscooper."""

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import List, Optional

from colorama import Fore, Style, init

from . import __version__
from .catalog import CatalogLoader
from .config import Settings, load_config
from .enqueue import QueueMode, default_selection, plan_queue
from .finder import SuggestionEngine
from .sorting import SortKey, sort_by
from .store import get_store, migrate_json_to_sqlite
from .suggestion import DuplicateGroup
from .track import LibraryStats, Track

# Initialize colorama for cross-platform color support
init(autoreset=True)


def get_gap_color(gap: int) -> str:
    """
    Get color for a play count gap.

    Args:
        gap: Difference between highest and lowest play count

    Returns:
        Colorama color code
    """
    if gap >= 50:
        color: str = Fore.LIGHTRED_EX
    elif gap >= 10:
        color = Fore.YELLOW
    else:
        color = Fore.GREEN
    return color


def format_output_text(suggestions: List[DuplicateGroup]) -> None:
    """Print suggestions as a colored tree."""
    if not suggestions:
        print("No duplicate tracks found.")
        return

    print(
        f"{Fore.CYAN}{Style.BRIGHT}Found {len(suggestions)} group(s) "
        f"of duplicate tracks:{Style.RESET_ALL}\n"
    )

    for idx, group in enumerate(suggestions, 1):
        gap_color = get_gap_color(group.play_count_gap)
        print(
            f"{Fore.CYAN}{Style.BRIGHT}Group {idx}: {group.shared_title} "
            f"by {group.shared_artist}{Style.RESET_ALL} "
            f"{Style.DIM}({group.version_count}){Style.RESET_ALL} "
            f"{gap_color}[gap {group.play_count_gap}]{Style.RESET_ALL}"
        )

        for i, track in enumerate(group.members):
            tree_char = "└─" if i == len(group.members) - 1 else "├─"
            marker = (
                f" {Fore.LIGHTGREEN_EX}[Most played]{Style.RESET_ALL}"
                if track == group.highest and group.play_count_gap > 0
                else ""
            )
            print(
                f"    {tree_char} {track.play_count} plays - {track.album} "
                f"{Style.DIM}({track.formatted_duration}, id {track.id}){Style.RESET_ALL}"
                f"{marker}"
            )
        print()


def format_output_json(suggestions: List[DuplicateGroup]) -> None:
    """Print suggestions as JSON."""
    output = [
        {
            "id": group.id,
            "title": group.shared_title,
            "artist": group.shared_artist,
            "play_count_gap": group.play_count_gap,
            "can_dismiss_individually": group.can_dismiss_individually,
            "tracks": [track.to_dict() for track in group.members],
        }
        for group in suggestions
    ]
    print(json.dumps(output, indent=2))


def format_output_csv(suggestions: List[DuplicateGroup]) -> None:
    """Print suggestions as CSV, one row per track."""
    writer = csv.writer(sys.stdout)
    writer.writerow(
        [
            "group_id",
            "title",
            "artist",
            "play_count_gap",
            "track_id",
            "album",
            "play_count",
            "duration",
            "has_local_asset",
        ]
    )
    for idx, group in enumerate(suggestions, 1):
        for track in group.members:
            writer.writerow(
                [
                    idx,
                    group.shared_title,
                    group.shared_artist,
                    group.play_count_gap,
                    track.id,
                    track.album,
                    track.play_count,
                    track.formatted_duration,
                    "true" if track.has_local_asset else "false",
                ]
            )


def format_track_list(tracks: List[Track], key: SortKey, output: str) -> None:
    """Print the full catalog in the requested order."""
    ordered = sort_by(key, tracks)

    if output == "json":
        print(json.dumps([track.to_dict() for track in ordered], indent=2))
        return
    if output == "csv":
        writer = csv.writer(sys.stdout)
        writer.writerow(["id", "title", "artist", "album", "play_count", "duration"])
        for track in ordered:
            writer.writerow(
                [
                    track.id,
                    track.title,
                    track.artist,
                    track.album,
                    track.play_count,
                    track.formatted_duration,
                ]
            )
        return

    arrow = "↓" if key.descending else "↑"
    print(
        f"{Fore.CYAN}{Style.BRIGHT}{len(ordered)} track(s), sorted by "
        f"{key.display_name} {arrow}{Style.RESET_ALL}"
    )
    for track in ordered:
        print(
            f"  {track.play_count:>6}  {track.title} - {track.artist} "
            f"{Style.DIM}({track.album}, {track.formatted_duration}){Style.RESET_ALL}"
        )


def format_stats(tracks: List[Track]) -> None:
    stats = LibraryStats(tracks)
    print(f"{Style.BRIGHT}Library statistics{Style.RESET_ALL}")
    print(f"  Tracks:               {stats.total_tracks}")
    print(f"  With play counts:     {stats.tracks_with_play_counts}")
    print(f"  With local assets:    {stats.tracks_with_local_assets}")
    print(f"  Average play count:   {stats.average_play_count:.1f}")


def get_parser() -> argparse.ArgumentParser:
    """
    Get the argument parser for countscooper.

    Returns:
        ArgumentParser configured with all countscooper options
    """
    parser = argparse.ArgumentParser(
        prog="countscooper",
        description="Find duplicate tracks whose play counts have drifted apart.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s library.json
  %(prog)s library.csv --output json
  %(prog)s library.json --list --sort title-asc
  %(prog)s --dismiss-group "Hello" "Adele"
  %(prog)s --migrate-dismissals old_dismissals.json
  %(prog)s library.json --plan 1 --mode match
        """,
    )

    parser.add_argument(
        "catalog",
        nargs="?",
        type=Path,
        help="Track catalog exported from the media library (.json, .csv, .yaml)",
    )

    parser.add_argument(
        "-o",
        "--output",
        choices=["text", "json", "csv"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List every track in the catalog instead of duplicate suggestions",
    )

    parser.add_argument(
        "--sort",
        choices=[key.value for key in SortKey],
        default=None,
        help="Sort order for --list (default: from config, play-count-desc)",
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print library statistics and exit",
    )

    parser.add_argument(
        "--dismiss-group",
        nargs=2,
        metavar=("TITLE", "ARTIST"),
        help="Stop suggesting every version of this title/artist",
    )

    parser.add_argument(
        "--dismiss-song",
        nargs=3,
        metavar=("TITLE", "ARTIST", "TRACK_ID"),
        help="Stop suggesting one version of this title/artist",
    )

    parser.add_argument(
        "--reset-dismissals",
        action="store_true",
        help="Forget all dismissed suggestions",
    )

    parser.add_argument(
        "--migrate-dismissals",
        type=Path,
        metavar="JSON_PATH",
        help="Copy dismissals from a JSON store into the SQLite store",
    )

    parser.add_argument(
        "--plan",
        type=int,
        metavar="GROUP",
        help="Print the queue request that evens out suggestion GROUP (1-based)",
    )

    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in QueueMode],
        default=QueueMode.MATCH.value,
        help="'match' queues just enough plays to catch up, "
        "'add' queues one play per play of the other version (default: match)",
    )

    parser.add_argument(
        "--store-backend",
        choices=["sqlite", "json"],
        default=None,
        help="Dismissal store backend (default: from config, sqlite)",
    )

    parser.add_argument(
        "--store-path",
        type=Path,
        default=None,
        help="Dismissal store file (default: in the config directory)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: ~/.config/countscooper/countscooper.toml)",
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable progress output (progress shown by default)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = get_parser()
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Merge config file settings with command line overrides."""
    settings = Settings.from_config(load_config(args.config))
    if args.store_backend:
        settings.store_backend = args.store_backend
        settings.store_path = None
    if args.store_path:
        settings.store_path = args.store_path
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)

    try:
        settings = resolve_settings(args)
        if args.migrate_dismissals:
            return run_migration(args.migrate_dismissals, settings)
        store = get_store(settings.store_backend, settings.resolved_store_path())
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    engine = SuggestionEngine(
        store, verbose=not args.no_progress and args.output == "text"
    )

    try:
        # Dismissal edits don't need a catalog
        if args.reset_dismissals:
            engine.reset_dismissals()
            print("All dismissals cleared.")
            return 0
        if args.dismiss_group:
            title, artist = args.dismiss_group
            engine.dismiss_group(title, artist)
            print(f"Dismissed all versions of {title} by {artist}.")
            return 0
        if args.dismiss_song:
            title, artist, track_id = args.dismiss_song
            engine.dismiss_song(title, artist, track_id)
            print(f"Dismissed track {track_id} from {title} by {artist}.")
            return 0

        if args.catalog is None:
            print("Error: the following arguments are required: catalog", file=sys.stderr)
            return 1

        return run_catalog_mode(args, settings, engine)
    finally:
        store.close()


def run_migration(json_path: Path, settings: Settings) -> int:
    """Merge a JSON dismissal file into the configured SQLite store."""
    if settings.store_backend != "sqlite":
        print(
            "Error: --migrate-dismissals needs the sqlite store backend",
            file=sys.stderr,
        )
        return 1
    if not json_path.exists():
        print(f"Error: {json_path} does not exist", file=sys.stderr)
        return 1

    db_path = settings.resolved_store_path()
    count = migrate_json_to_sqlite(json_path, db_path)
    print(f"Migrated {count} dismissal(s) into {db_path}.")
    return 0


def run_catalog_mode(
    args: argparse.Namespace, settings: Settings, engine: SuggestionEngine
) -> int:
    """Load the catalog and print suggestions, the track list or stats."""
    try:
        tracks = CatalogLoader.load(args.catalog)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.stats:
        format_stats(tracks)
        return 0

    if args.list:
        key = SortKey(args.sort) if args.sort else settings.default_sort
        format_track_list(tracks, key, args.output)
        return 0

    engine.analyze(tracks)
    suggestions = engine.active_suggestions

    if args.plan is not None:
        return run_plan(suggestions, args.plan, QueueMode(args.mode), settings)

    if args.output == "json":
        format_output_json(suggestions)
    elif args.output == "csv":
        format_output_csv(suggestions)
    else:
        format_output_text(suggestions)

    # Exit with non-zero if suggestions found (for scripting)
    return 0 if not suggestions else 2


def run_plan(
    suggestions: List[DuplicateGroup],
    group_number: int,
    mode: QueueMode,
    settings: Settings,
) -> int:
    """Print the queue request for one suggestion as JSON."""
    if not 1 <= group_number <= len(suggestions):
        print(
            f"Error: group {group_number} out of range "
            f"(1-{len(suggestions)})",
            file=sys.stderr,
        )
        return 1

    group = suggestions[group_number - 1]
    selected = default_selection(group.lowest, group.highest)
    if selected is None:
        print("Both versions already have the same play count; nothing to queue.")
        return 0

    other = group.highest if selected == group.lowest else group.lowest
    request = plan_queue(selected, other, mode, settings.queue_behavior)
    if request is None:
        print("Nothing to queue for this mode.")
        return 0

    print(
        json.dumps(
            {
                "track_id": request.track_id,
                "count": request.count,
                "behavior": request.behavior.value,
                "target_play_count": request.target_play_count,
            },
            indent=2,
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
