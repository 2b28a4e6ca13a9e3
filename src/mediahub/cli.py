import argparse
import dataclasses
import json
import sys

from .config import (
    ENCODING_CONFIG_KEY,
    ServerApplicationPaths,
    ServerConfigurationManager,
    YamlConfigurationPersistence,
)
from .config.server_config import to_dict
from .error_handling import MediaHubError, handle_error
from .logger_config import setup_logging

logger = setup_logging()


def build_manager(data_dir=None) -> ServerConfigurationManager:
    """Create a manager over the YAML files in the program data directory."""
    if data_dir:
        paths = ServerApplicationPaths(data_dir)
    else:
        paths = ServerApplicationPaths.from_environment()
    paths.ensure_directories()
    persistence = YamlConfigurationPersistence(paths.configuration_directory_path)
    return ServerConfigurationManager(paths, persistence)


def show_command(args, manager: ServerConfigurationManager) -> int:
    """Print the current configuration and derived paths as JSON."""
    paths = manager.application_paths
    output = {
        "server": to_dict(manager.current()),
        "encoding": to_dict(manager.get_encoding_options()),
        "paths": {
            "program_data_path": paths.program_data_path,
            "internal_metadata_path": paths.internal_metadata_path,
            "transcode_path": paths.transcode_path,
        },
    }
    print(json.dumps(output, indent=2))
    return 0


def set_command(args, manager: ServerConfigurationManager) -> int:
    """Replace the root configuration with one field changed."""
    candidate = dataclasses.replace(manager.current(), **{args.field: args.value})
    result = manager.replace_root(candidate)
    if not result.accepted:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1

    print(f"{args.field} = {args.value!r}")
    return 0


def set_transcode_temp_command(args, manager: ServerConfigurationManager) -> int:
    """Replace the encoding options with a new transcoding temp path."""
    encoding = dataclasses.replace(manager.get_encoding_options(), transcoding_temp_path=args.path)
    manager.replace_named(ENCODING_CONFIG_KEY, encoding)
    print(f"Transcode path: {manager.application_paths.transcode_path}")
    return 0


def apply_defaults_command(args, manager: ServerConfigurationManager) -> int:
    """Switch on the recommended flags and save if anything changed."""
    if manager.apply_recommended_defaults():
        manager.save_configuration()
        print("Recommended defaults applied.")
    else:
        print("Recommended defaults already in place.")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="MediaHub configuration tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show configuration and derived paths
  mediahub-config show

  # Move metadata to another (existing, writable) directory
  mediahub-config set metadata_path /srv/mediahub/metadata

  # Put transcodes under /var/tmp/mediahub/transcodes
  mediahub-config set-transcode-temp /var/tmp/mediahub

  # Switch on recommended feature flags
  mediahub-config apply-defaults
        """,
    )
    parser.add_argument(
        "-d", "--data-dir", help="Program data directory (default: $MEDIAHUB_DATA_DIR or ~/.mediahub)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("show", help="Show configuration and derived paths")

    set_parser = subparsers.add_parser("set", help="Change a path in the server configuration")
    set_parser.add_argument("field", choices=["metadata_path", "certificate_path"])
    set_parser.add_argument("value", help="New value; empty string to unset")

    transcode_parser = subparsers.add_parser(
        "set-transcode-temp", help="Change the transcoding temp directory"
    )
    transcode_parser.add_argument("path", help="New directory; empty string to unset")

    subparsers.add_parser("apply-defaults", help="Switch on recommended feature flags")

    args = parser.parse_args(argv)

    commands = {
        "show": show_command,
        "set": set_command,
        "set-transcode-temp": set_transcode_temp_command,
        "apply-defaults": apply_defaults_command,
    }
    if args.command not in commands:
        parser.print_help()
        return 2

    try:
        manager = build_manager(args.data_dir)
        return commands[args.command](args, manager)
    except MediaHubError as e:
        handle_error(e)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
