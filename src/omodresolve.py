"""omodresolve - transitive OpenMRS module dependency resolver.

    Returns:
        int: Exit code
"""
import logging
import os
import sys

import yaml

from constants import ExitCodes, Constants, OutputFormats
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import configure
from registry.fetcher import ArtifactFetcher, ChainFetcher
from registry.local import LocalRepositoryFetcher
from registry.remote import MavenRepositoryFetcher
from resolution.engine import ModuleResolver
from resolution.report import export_csv, export_json, print_results
from versioning.models import Coordinate
from versioning.parser import parse_coordinate


def build_coordinate(args) -> Coordinate:
    """Build the root coordinate from the positional token or the -g/-a/-V flags.

    Raises:
        ValueError: if the coordinate is incomplete.
    """
    if args.coordinate:
        return parse_coordinate(args.coordinate)
    if not args.ARTIFACT_ID or not args.MODULE_VERSION:
        raise ValueError("A coordinate or both --artifact and --module-version are required.")
    return Coordinate(
        namespace=args.GROUP_ID or Constants.GROUP_MODULE,
        identifier=args.ARTIFACT_ID,
        version=args.MODULE_VERSION,
    )


def build_fetcher() -> ArtifactFetcher:
    """Local repository first (when present), then the remote repositories."""
    fetchers = []
    if os.path.isdir(Constants.LOCAL_REPOSITORY):
        fetchers.append(LocalRepositoryFetcher(Constants.LOCAL_REPOSITORY))
    if not Constants.OFFLINE:
        fetchers.append(MavenRepositoryFetcher(Constants.REPOSITORY_URLS))
    if not fetchers:
        logging.warning("Offline mode without a local repository at %s; nothing can be fetched.",
                        Constants.LOCAL_REPOSITORY)
    if len(fetchers) == 1:
        return fetchers[0]
    return ChainFetcher(fetchers)


def _output_format(args) -> str:
    if args.OUTPUT_FORMAT:
        return args.OUTPUT_FORMAT
    if args.OUTPUT and args.OUTPUT.lower().endswith(".csv"):
        return OutputFormats.CSV.value
    return OutputFormats.JSON.value


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    try:
        configure_logging(args.LOG_LEVEL, args.LOG_FILE)
    except OSError as e:
        logging.error("Log file couldn't be opened: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    try:
        configure(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logging.error("Couldn't load configuration: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    try:
        root = build_coordinate(args)
    except ValueError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if is_debug_enabled(logger):
        logger.debug("CLI start", extra=extra_context(
            event="function_entry", component="cli", action="main", target=str(root)
        ))

    fetcher = build_fetcher()
    resolver = ModuleResolver(fetcher)
    try:
        state = resolver.resolve(root.namespace, root.identifier, root.version)
    except OSError as e:
        logging.error("Working directory error: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if not args.QUIET:
        print_results(state)

    if args.OUTPUT:
        try:
            if _output_format(args) == OutputFormats.CSV.value:
                export_csv(state, args.OUTPUT)
            else:
                export_json(state, args.OUTPUT)
        except OSError as e:
            logging.error("Output file couldn't be written to disk: %s", e)
            sys.exit(ExitCodes.FILE_ERROR.value)

    if state.unresolved:
        logging.warning("%d module(s) could not be resolved.", len(state.unresolved))
        if args.ERROR_ON_UNRESOLVED:
            logging.error("Unresolved modules present, exiting with non-zero status code.")
            sys.exit(ExitCodes.UNRESOLVED.value)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
