"""Argument parsing functionality for omodresolve."""

import argparse
from constants import Constants, OutputFormats


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="omodresolve",
        description=(
            "omodresolve - Transitive OpenMRS module dependency resolver"
        ),
        add_help=True,
    )

    parser.add_argument("coordinate",
                        nargs="?",
                        help="Module coordinate as groupId:artifactId:version",
                        action="store",
                        type=str)
    parser.add_argument("-g", "--group",
                        dest="GROUP_ID",
                        help=f"Module group id (default: {Constants.GROUP_MODULE})",
                        action="store",
                        type=str)
    parser.add_argument("-a", "--artifact",
                        dest="ARTIFACT_ID",
                        help="Module artifact id, e.g. coreapps-omod",
                        action="store",
                        type=str)
    parser.add_argument("-V", "--module-version",
                        dest="MODULE_VERSION",
                        help="Module version",
                        action="store",
                        type=str)

    parser.add_argument("--repository",
                        dest="REPOSITORIES",
                        help="Remote Maven repository URL (can be used multiple times)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--local-repo",
                        dest="LOCAL_REPO",
                        help="Local Maven repository to search before remote ones",
                        action="store",
                        type=str)
    parser.add_argument("--offline",
                        dest="OFFLINE",
                        help="Only use the local repository.",
                        action="store_true")
    parser.add_argument("--no-newer",
                        dest="NO_NEWER",
                        help="Do not substitute a newer release when the requested version is missing.",
                        action="store_true")
    parser.add_argument("--work-dir",
                        dest="WORK_DIR",
                        help="Parent directory for temporary downloads",
                        action="store",
                        type=str)
    parser.add_argument("--max-steps",
                        dest="MAX_STEPS",
                        help=f"Maximum resolution attempts (default: {Constants.MAX_STEPS})",
                        action="store",
                        type=int)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=[f.value for f in OutputFormats])
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-unresolved",
                        dest="ERROR_ON_UNRESOLVED",
                        help="Exit with a non-zero status code if any module is unresolved.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not print the result tables.",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
