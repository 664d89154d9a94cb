"""Command line interface for the Bunny Stream client."""
import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

from app.client import BunnyStreamClient
from domain.models import UploadJob, UploadMetadata, UploadState
from ports.adapter_error import ConfigurationError, UploadJobError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging.

    Args:
        verbose: Enable debug logging if True.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from HTTP libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("tusclient").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bunny-stream",
        description="Bunny Stream client - manage collections and videos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  BUNNY_STREAM_ACCESS_KEY       Library API key (required)
  BUNNY_STREAM_BASE_URL         API base URL (default: https://video.bunnycdn.com)
  BUNNY_STREAM_LIBRARY_ID       Default library id
  BUNNY_STREAM_TUS_ENDPOINT     TUS upload endpoint
  BUNNY_STREAM_UPLOAD_STORAGE   File storing resumable upload URLs

Examples:
  python -m app.main videos list --order-by date
  python -m app.main videos upload --file video.mp4 --title "My Video"
  python -m app.main collections create --name "Season 1"
        """,
    )
    parser.add_argument("--library-id", type=int, default=None, help="Library id")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose debug logging")

    resources = parser.add_subparsers(dest="resource", required=True)

    collections = resources.add_parser("collections", help="Manage collections")
    collection_cmds = collections.add_subparsers(dest="command", required=True)
    list_collections = collection_cmds.add_parser("list", help="List collections")
    _add_list_arguments(list_collections)
    create_collection = collection_cmds.add_parser("create", help="Create a collection")
    create_collection.add_argument("--name", default=None, help="Collection name")

    videos = resources.add_parser("videos", help="Manage videos")
    video_cmds = videos.add_subparsers(dest="command", required=True)
    list_videos = video_cmds.add_parser("list", help="List videos")
    _add_list_arguments(list_videos)
    list_videos.add_argument("--collection", default=None, help="Filter by collection id")
    get_video = video_cmds.add_parser("get", help="Show a video")
    get_video.add_argument("video_id")
    delete_video = video_cmds.add_parser("delete", help="Delete a video")
    delete_video.add_argument("video_id")

    upload = video_cmds.add_parser("upload", help="Upload a video file")
    upload.add_argument("--file", required=True, help="Path to video file to upload")
    upload.add_argument("--title", required=True, help="Video title")
    upload.add_argument(
        "--video-id",
        default=None,
        help="Existing video id (a new video is created when omitted)",
    )
    upload.add_argument("--collection", default=None, help="Collection id")
    upload.add_argument("--thumbnail-time", type=int, default=None, help="Thumbnail time (ms)")
    upload.add_argument("--filetype", default=None, help="MIME type (guessed from file name)")

    return parser


def _add_list_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page", type=int, default=None)
    parser.add_argument("--items-per-page", type=int, default=None)
    parser.add_argument("--search", default=None)
    parser.add_argument("--order-by", default=None)


async def run(args: argparse.Namespace, client: BunnyStreamClient) -> int:
    """
    Execute a parsed command.

    Returns:
        Process exit code.
    """
    if args.resource == "collections":
        if args.command == "list":
            result = await client.collections.get_list(
                library_id=args.library_id,
                page=args.page,
                items_per_page=args.items_per_page,
                search=args.search,
                order_by=args.order_by,
            )
        else:
            result = await client.collections.create(library_id=args.library_id, name=args.name)
        return _print_envelope(result)

    if args.command == "list":
        result = await client.videos.get_list(
            library_id=args.library_id,
            page=args.page,
            items_per_page=args.items_per_page,
            search=args.search,
            order_by=args.order_by,
            collection=args.collection,
        )
    elif args.command == "get":
        result = await client.videos.get(args.video_id, library_id=args.library_id)
    elif args.command == "delete":
        result = await client.videos.delete(args.video_id, library_id=args.library_id)
    else:
        return await _upload(args, client)

    return _print_envelope(result)


async def _upload(args: argparse.Namespace, client: BunnyStreamClient) -> int:
    file_path = Path(args.file)
    if not file_path.exists():
        raise FileNotFoundError(f"Video file not found: {args.file}")

    video_id = args.video_id
    if video_id is None:
        created = await client.videos.create(
            title=args.title,
            library_id=args.library_id,
            collection_id=args.collection,
            thumbnail_time=args.thumbnail_time,
        )
        if not created.ok:
            return _print_envelope(created)
        video_id = created.data["guid"]
        logger.info(f"Created video {video_id}")

    filetype = args.filetype or mimetypes.guess_type(file_path.name)[0] or "video/mp4"

    def on_progress(uploaded: int, total: int) -> None:
        percent = int(uploaded * 100 / total) if total else 100
        logger.info(f"Upload progress: {percent}%")

    def on_error(error) -> None:
        print(f"Error: {error}", file=sys.stderr)

    with open(file_path, "rb") as source:
        state = await client.videos.upload(
            UploadJob(
                file=source,
                video_id=video_id,
                library_id=args.library_id,
                metadata=UploadMetadata(
                    filetype=filetype,
                    title=args.title,
                    collection=args.collection,
                    thumbnail_time=args.thumbnail_time,
                ),
                on_progress=on_progress,
                on_error=on_error,
            )
        )

    if state != UploadState.SUCCEEDED:
        return 1

    print(f"Uploaded video successfully. id={video_id}")
    return 0


def _print_envelope(result) -> int:
    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(verbose=args.verbose)

    try:
        client = BunnyStreamClient(library_id=args.library_id)
        exit_code = asyncio.run(run(args, client))

    except (ConfigurationError, UploadJobError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
