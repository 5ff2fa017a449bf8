#!/usr/bin/env python3
"""
hashpool CLI — compute file digests, find identical files and check files against reference hashes.
Thin console layer over HashCommand: parses and classifies arguments, renders results,
maps them to exit codes.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import os
import signal
import sys
import threading
import time
from typing import List, Optional, NoReturn, Tuple
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    import xxhash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from hashpool.core.errors import UnsupportedAlgorithmError
from hashpool.core.hasher import detect_hash_algorithm, resolve_algorithm
from hashpool.core.models import HashParams, HashResult, MatchPolicy, OutputFormat
from hashpool.commands import HashCommand
from hashpool.utils.convert_utils import ConvertUtils
from hashpool.services.format_service import get_formatter, sanitize
from hashpool.services.manifest_service import Manifest, ManifestService
from hashpool.services.status_service import ExitCode, StatusService
from hashpool.aliases import (
    ALGORITHM_CHOICES, ALGORITHM_HELP_TEXT,
    FORMAT_CHOICES, FORMAT_HELP_TEXT,
    EPILOG_TEXT
)

STDIN_MARKER = "-"


class _ArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on usage errors; hashpool reserves 2 for partial failures."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(ExitCode.INVALID_ARGS)


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: int = 0
        self.quiet: bool = False
        self._stop_event = threading.Event()

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments. Defaults may come from HASHPOOL_* environment variables."""
        parser = _ArgumentParser(
            prog="hashpool",
            description="hashpool — find identical files and verify files against reference hashes",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "inputs",
            nargs="*",
            metavar="ARG",
            help="Files, directories, reference hashes, or '-' to read file paths from stdin"
        )

        # Hashing options
        parser.add_argument(
            "--algorithm", "-a",
            default=os.environ.get("HASHPOOL_ALGORITHM", "sha256"),
            type=str,
            help=ALGORITHM_HELP_TEXT
        )
        parser.add_argument(
            "--jobs", "-j",
            default=os.environ.get("HASHPOOL_JOBS", "0"),
            type=int,
            metavar='N',
            help="Number of parallel workers (0 = auto: CPUs minus 1-2, max 32). Default: 0"
        )

        # Discovery options
        parser.add_argument(
            "--recursive", "-r",
            action="store_true",
            help="Descend into subdirectories"
        )
        parser.add_argument(
            "--hidden",
            action="store_true",
            help="Include hidden files and directories"
        )
        parser.add_argument(
            "--include", "-i",
            action="append",
            default=[],
            metavar='GLOB',
            help="Only hash files whose name matches GLOB (repeatable)"
        )
        parser.add_argument(
            "--exclude", "-e",
            action="append",
            default=[],
            metavar='GLOB',
            help="Skip files whose name matches GLOB (repeatable, wins over --include)"
        )
        parser.add_argument(
            "--min-size",
            default="0",
            type=str,
            metavar='SIZE',
            help="Minimum file size (e.g., 500KB, 1MB). Default: 0"
        )
        parser.add_argument(
            "--max-size",
            default="",
            type=str,
            metavar='SIZE',
            help="Maximum file size (e.g., 10MB, 1GB). Default: unlimited"
        )
        parser.add_argument(
            "--modified-after",
            default=None,
            metavar='DATE',
            help="Only files modified after DATE (YYYY-MM-DD)"
        )
        parser.add_argument(
            "--modified-before",
            default=None,
            metavar='DATE',
            help="Only files modified before DATE (YYYY-MM-DD)"
        )

        # Output options
        parser.add_argument(
            "--format", "-f",
            default=os.environ.get("HASHPOOL_FORMAT", OutputFormat.DEFAULT.value),
            type=str,
            dest="output_format",
            help=FORMAT_HELP_TEXT
        )
        parser.add_argument(
            "--preserve-order",
            action="store_true",
            help="Print files in input order instead of grouping identical ones"
        )
        parser.add_argument(
            "--bool",
            action="store_true",
            help="Print only true/false (see --any-match / --all-match)"
        )
        parser.add_argument(
            "--any-match",
            action="store_true",
            help="Succeed only if at least one match (between files or with a reference hash) exists"
        )
        parser.add_argument(
            "--all-match",
            action="store_true",
            help="Succeed only if every file matches another file or a reference hash"
        )

        # Manifests
        parser.add_argument(
            "--manifest",
            default=None,
            metavar='FILE',
            help="Manifest to compare against (used with --only-changed)"
        )
        parser.add_argument(
            "--only-changed",
            action="store_true",
            help="Hash only files that are new or changed since --manifest"
        )
        parser.add_argument(
            "--output-manifest",
            default=None,
            metavar='FILE',
            help="Save hashed files to a JSON manifest"
        )

        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the files that would be hashed, with sizes and a time estimate"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="count",
            default=0,
            help="Show progress and statistics (-vv adds debug logging)"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.algorithm.lower() not in ALGORITHM_CHOICES:
            self.error_exit(
                f"Invalid algorithm: '{args.algorithm}'.\n"
                f"Valid options: {', '.join(ALGORITHM_CHOICES)}"
            )
        if args.output_format.lower() not in FORMAT_CHOICES:
            self.error_exit(
                f"Invalid output format: '{args.output_format}'.\n"
                f"Valid options: {', '.join(FORMAT_CHOICES)}"
            )
        if args.jobs < 0:
            self.error_exit("Number of jobs cannot be negative")
        if args.any_match and args.all_match:
            self.error_exit("--any-match and --all-match cannot be used together")
        if args.quiet and args.verbose:
            self.error_exit("--quiet and --verbose cannot be used together")
        if args.only_changed and not args.manifest:
            self.error_exit("--only-changed requires --manifest")

        for option in ("min_size", "max_size"):
            value = getattr(args, option)
            if value and not ConvertUtils.is_valid_size_format(value):
                self.error_exit(f"Invalid size format for --{option.replace('_', '-')}: {value}")

    @staticmethod
    def classify_arguments(inputs: List[str], algorithm: str) -> Tuple[List[str], List[str], List[str]]:
        """
        Separates positional arguments into (files, reference hashes, unknowns).

        Existing paths and '-' are files. Hex strings with the selected algorithm's length
        are reference hashes. When nothing exists on disk but some argument looks like a
        hash, every argument is treated as a hash so they can all be validated.
        """
        inputs = [arg for arg in inputs if arg]
        if inputs and all(arg != STDIN_MARKER and not os.path.exists(arg) for arg in inputs):
            if any(CLIApplication._looks_like_hash(arg) for arg in inputs):
                return [], list(inputs), []

        selected = resolve_algorithm(algorithm)
        files, hashes, unknowns = [], [], []
        for arg in inputs:
            if arg == STDIN_MARKER or os.path.exists(arg):
                files.append(arg)
            elif selected in detect_hash_algorithm(arg):
                hashes.append(arg.lower())
            else:
                unknowns.append(arg)
        return files, hashes, unknowns

    @staticmethod
    def _looks_like_hash(value: str) -> bool:
        if not 4 <= len(value) <= 256:
            return False
        return not any(c in value for c in "./\\ ")

    @staticmethod
    def expand_stdin(files: List[str]) -> List[str]:
        """Replaces the '-' marker with the non-empty lines read from stdin."""
        result = [f for f in files if f != STDIN_MARKER]
        for line in sys.stdin:
            path = line.strip()
            if path:
                result.append(path)
        return result

    def create_params(self, args: argparse.Namespace, files: List[str], hashes: List[str],
                      unknowns: List[str]) -> HashParams:
        """Create HashParams from CLI arguments."""
        try:
            min_size = ConvertUtils.human_to_bytes(args.min_size) if args.min_size else 0
            max_size = ConvertUtils.human_to_bytes(args.max_size) if args.max_size else -1
            modified_after = (ConvertUtils.date_to_timestamp(args.modified_after)
                              if args.modified_after else None)
            modified_before = (ConvertUtils.date_to_timestamp(args.modified_before)
                               if args.modified_before else None)

            group_results = args.bool or (
                args.output_format not in (OutputFormat.JSONL.value, OutputFormat.PLAIN.value)
                and not args.preserve_order
            )

            return HashParams(
                paths=files,
                reference_digests=hashes,
                algorithm=args.algorithm,
                jobs=args.jobs,
                recursive=args.recursive,
                hidden=args.hidden,
                include=args.include,
                exclude=args.exclude,
                min_size_bytes=min_size,
                max_size_bytes=max_size,
                modified_after=modified_after,
                modified_before=modified_before,
                group_results=group_results,
                manifest_path=args.manifest,
                only_changed=args.only_changed,
                output_manifest=args.output_manifest,
                unknowns=unknowns,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    @staticmethod
    def match_policy(args: argparse.Namespace) -> MatchPolicy:
        if args.any_match:
            return MatchPolicy.ANY
        if args.all_match:
            return MatchPolicy.ALL
        return MatchPolicy.DEFAULT

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({percent:.1f}%)"
            )
            sys.stderr.flush()
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
            sys.stderr.flush()

    def stopped_flag(self) -> bool:
        """True once Ctrl+C was pressed."""
        return self._stop_event.is_set()

    def _handle_sigint(self, signum, frame) -> None:
        if self._stop_event.is_set():
            # Second Ctrl+C: skip reporting; digests already running still complete
            raise KeyboardInterrupt
        self._stop_event.set()
        if not self.quiet:
            sys.stderr.write("\n⚠️  Interrupted, finishing files in progress (Ctrl+C again to stop without results)\n")

    def run_validation_mode(self, hashes: List[str]) -> int:
        """Reports which algorithms could have produced each hash string."""
        all_valid = True
        for hash_str in hashes:
            algorithms = detect_hash_algorithm(hash_str)
            if not algorithms:
                all_valid = False
                if not self.quiet:
                    print(f"✗ {sanitize(hash_str)} - Invalid hash format", file=sys.stderr)
                    print("  Hash strings must contain only hexadecimal characters and have a valid length.",
                          file=sys.stderr)
                continue

            if not self.quiet:
                print(f"✓ {hash_str} - Valid hash", file=sys.stderr)
                names = [a.value for a in algorithms]
                if len(names) == 1:
                    print(f"  Algorithm: {names[0]}", file=sys.stderr)
                else:
                    print(f"  Possible algorithms: {', '.join(names[:-1])} or {names[-1]}", file=sys.stderr)

        return ExitCode.SUCCESS if all_valid else ExitCode.INVALID_ARGS

    def run_dry_run(self, params: HashParams) -> int:
        """Lists files that would be hashed without reading them."""
        files = HashCommand.prepare_files(params, stopped_flag=self.stopped_flag)
        if not self.quiet:
            print("Dry Run: Previewing files that would be processed\n", file=sys.stderr)

        total_size = 0
        file_count = 0
        for path in files:
            try:
                size = os.stat(path).st_size
            except OSError as e:
                self.warning(f"{sanitize(path)}: {e.strerror or e}")
                continue
            total_size += size
            file_count += 1
            if not self.quiet:
                print(f"{sanitize(path)}    (estimated size: {ConvertUtils.bytes_to_human(size)})")

        if not self.quiet:
            print("\nSummary:", file=sys.stderr)
            print(f"  Files to process: {file_count}", file=sys.stderr)
            print(f"  Aggregate size:   {ConvertUtils.bytes_to_human(total_size)}", file=sys.stderr)
            print(f"  Estimated time:   {ConvertUtils.estimate_time(total_size)}", file=sys.stderr)
        return ExitCode.SUCCESS

    def run_hashing(self, params: HashParams, args: argparse.Namespace) -> int:
        """Execute the hashing workflow and report results."""
        command = HashCommand()
        if self.verbose:
            print(f"Hashing with {params.algorithm}...", file=sys.stderr)

        try:
            result = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
                stopped_flag=self.stopped_flag
            )
        except UnsupportedAlgorithmError as e:
            self.error_exit(str(e))

        if self.verbose:
            sys.stderr.write("\n")

        for error in result.errors:
            self.warning(sanitize(str(error)))

        policy = self.match_policy(args)
        self.output_results(result, args, policy, len(command.get_files()))
        self.save_manifest(result, params)

        if self.verbose:
            print(
                f"\n{result.files_processed} files, {ConvertUtils.bytes_to_human(result.bytes_processed)} "
                f"hashed in {result.duration:.2f}s",
                file=sys.stderr
            )

        if self.stopped_flag():
            return ExitCode.INTERRUPTED
        return StatusService.determine_exit_code(result, policy, len(command.get_files()))

    def output_results(self, result: HashResult, args: argparse.Namespace,
                       policy: MatchPolicy, file_count: int) -> None:
        if args.bool:
            print(str(StatusService.is_success(result, policy, file_count)).lower())
            return
        if self.quiet:
            return

        text = get_formatter(args.output_format.lower(), args.preserve_order).format(result)
        if text:
            print(text)

    def save_manifest(self, result: HashResult, params: HashParams) -> None:
        if not params.output_manifest:
            return
        manifest = Manifest.from_entries(params.algorithm, result.entries)
        try:
            ManifestService.save(manifest, params.output_manifest)
        except OSError as e:
            print(f"❌ Error saving manifest: {e}", file=sys.stderr)
            return
        if not self.quiet:
            print(f"Manifest saved to: {params.output_manifest}", file=sys.stderr)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = ExitCode.INVALID_ARGS) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point. Returns the process exit code."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose >= 2:
            logging.getLogger("hashpool").setLevel(logging.DEBUG)

        self.validate_args(args)
        args.algorithm = args.algorithm.lower()
        args.output_format = args.output_format.lower()

        files, hashes, unknowns = self.classify_arguments(args.inputs, args.algorithm)

        if hashes and STDIN_MARKER in files:
            self.error_exit("Cannot use stdin input with hash comparison")

        if not files and hashes:
            return self.run_validation_mode(hashes)

        if not files and unknowns:
            for unknown in unknowns:
                self.warning(f"INVALID: {sanitize(unknown)} is neither a file nor a valid {args.algorithm} hash")
            return ExitCode.INVALID_ARGS

        if STDIN_MARKER in files:
            files = self.expand_stdin(files)
            if not files:
                return ExitCode.SUCCESS

        params = self.create_params(args, files, hashes, unknowns)

        if args.dry_run:
            return self.run_dry_run(params)

        previous_handler = None
        if threading.current_thread() is threading.main_thread():
            previous_handler = signal.signal(signal.SIGINT, self._handle_sigint)
        try:
            return self.run_hashing(params, args)
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGINT, previous_handler)


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        code = app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(ExitCode.INTERRUPTED)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(int(code))


if __name__ == "__main__":
    main()
