# main.py
import argparse
import json
import logging
import sys
from typing import Optional

from .config import get_settings
from .cloudinary_client import CloudinaryClient
from .storage.base import AssetClient
from .exceptions import PermanentError, TransientError
from .service import FolderService


def setup_logging():
    """Configures logging to file and console explicitly."""
    settings = get_settings()
    log_level_name = settings.LOG_LEVEL.upper()

    # Get the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_name)

    # Clear any existing handlers to prevent duplicate logs on re-runs or implicit configs
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Console output goes to stderr so stdout stays valid JSON
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    try:
        file_handler = logging.FileHandler(settings.LOG_FILE)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except IOError as e:
        root_logger.error(f"Failed to set up file logging to {settings.LOG_FILE}: {e}")

    # Reducing "noise" from third-party libraries
    logging.getLogger("cloudinary").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def initialize_asset_client(settings) -> Optional[AssetClient]:
    """Initializes and returns the asset client configured in settings, or None on failure."""
    if settings.STORAGE_PROVIDER != "cloudinary":
        logging.critical(f"Unknown STORAGE_PROVIDER: {settings.STORAGE_PROVIDER}")
        return None

    logging.info("Using Cloudinary storage provider.")
    try:
        return CloudinaryClient(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
        )
    except Exception as e:
        logging.error(
            f"Failed to initialize Cloudinary client. Error: {e}", exc_info=True
        )
        return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Manage folders of media assets stored in Cloudinary."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    delete_folder = commands.add_parser("delete-folder", help="Delete a folder and everything below it.")
    delete_folder.add_argument("folder_path")

    rename_folder = commands.add_parser("rename-folder", help="Move a folder and everything below it.")
    rename_folder.add_argument("from_path")
    rename_folder.add_argument("to_path")

    create_folder = commands.add_parser("create-folder", help="Create an empty folder.")
    create_folder.add_argument("folder_path", help="Parent folder.")
    create_folder.add_argument("folder_name")

    rename_file = commands.add_parser("rename-file", help="Rename a single asset.")
    rename_file.add_argument("from_public_id")
    rename_file.add_argument("to_public_id")
    rename_file.add_argument("--resource-kind", default="image", choices=["image", "video", "raw"])

    delete_file = commands.add_parser("delete-file", help="Delete a single asset.")
    delete_file.add_argument("public_id")
    delete_file.add_argument("--resource-kind", default="image", choices=["image", "video", "raw"])

    upload = commands.add_parser("upload", help="Upload a file (path, URL or data URI).")
    upload.add_argument("file")
    upload.add_argument("--folder", default=None)

    folders = commands.add_parser("folders", help="List folders.")
    folders.add_argument("--parent", default=None)
    folders.add_argument("--refresh", action="store_true")

    files = commands.add_parser("files", help="List the assets of a folder.")
    files.add_argument("--folder", default=None)
    files.add_argument("--refresh", action="store_true")

    all_files = commands.add_parser("all-files", help="List every asset under the root folder.")
    all_files.add_argument("--refresh", action="store_true")

    all_images = commands.add_parser("all-images", help="List every image.")
    all_images.add_argument("--refresh", action="store_true")

    return parser


def run_command(service: FolderService, args) -> object:
    """Dispatches a parsed command to the service and returns a JSON-serializable result."""
    if args.command == "delete-folder":
        report = service.delete_subtree(args.folder_path)
        return {**report.to_response(), "message": "Folder deleted"}
    if args.command == "rename-folder":
        report = service.rename_subtree(args.from_path, args.to_path)
        return {**report.to_response(), "message": "Folder renamed successfully"}
    if args.command == "create-folder":
        path = service.create_folder(args.folder_path, args.folder_name)
        return {"success": True, "folderPath": path}
    if args.command == "rename-file":
        renamed = service.rename_file(args.from_public_id, args.to_public_id, args.resource_kind)
        return {"success": True, "publicId": renamed.public_id, "url": renamed.url}
    if args.command == "delete-file":
        existed = service.delete_file(args.public_id, args.resource_kind)
        return {"success": True, "existed": existed}
    if args.command == "upload":
        return service.upload_file(args.file, args.folder).to_response()
    if args.command == "folders":
        return [f.to_response() for f in service.list_folders(args.parent, args.refresh)]
    if args.command == "files":
        return [f.to_response() for f in service.list_folder_contents(args.folder, args.refresh)]
    if args.command == "all-files":
        return [f.to_response() for f in service.list_all_files(args.refresh)]
    if args.command == "all-images":
        return [f.to_response() for f in service.list_all_images(args.refresh)]
    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    settings = get_settings()

    client = initialize_asset_client(settings)
    if client is None:
        logging.critical(f"Could not establish a connection to {settings.STORAGE_PROVIDER}.")
        print(json.dumps({"success": False, "error": "Asset service unavailable"}))
        return 1

    service = FolderService(client, settings=settings)
    try:
        result = run_command(service, args)
    except PermanentError as e:
        logging.error(f"PERMANENT ERROR running {args.command}: {e}")
        print(json.dumps({"success": False, "error": str(e)}))
        return 1
    except TransientError as e:
        logging.warning(f"TRANSIENT ERROR running {args.command}, retry later. Error: {e}", exc_info=True)
        print(json.dumps({"success": False, "error": str(e)}))
        return 1
    except Exception as e:
        logging.critical(f"UNHANDLED CRITICAL ERROR running {args.command}: {e}", exc_info=True)
        print(json.dumps({"success": False, "error": str(e)}))
        return 1

    print(json.dumps(result, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
