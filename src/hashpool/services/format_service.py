"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/format_service.py
Renders a HashResult as text.

The default format groups identical digests together, separated by blank lines.
json / jsonl / csv are meant for other programs, plain is tab separated for grep/cut.
"""
import csv
import io
import json
from datetime import datetime, timezone
from typing import List, Union

from hashpool.core.models import HashResult, Entry, MatchGroup, PoolMatch, OutputFormat


def sanitize(text: str) -> str:
    """Replaces control characters so a crafted file name cannot rewrite the terminal."""
    return "".join("?" if (ord(c) < 32 or ord(c) == 127) else c for c in text)


class Formatter:
    def format(self, result: HashResult) -> str:
        raise NotImplementedError


class DefaultFormatter(Formatter):
    """Groups files by matching digest with blank lines between groups."""

    def format(self, result: HashResult) -> str:
        blocks: List[str] = []
        if result.pool_matches:
            blocks.append("\n".join(self._pool_match_line(m) for m in result.pool_matches))
        blocks.extend(self._group_block(group) for group in result.matches)
        blocks.extend(self._entry_line(entry) for entry in result.unmatched)
        blocks.extend(f"REFERENCE:    {entry.digest}" for entry in result.ref_orphans)
        blocks.extend(f"INVALID:    {sanitize(unknown)}" for unknown in result.unknowns)
        return "\n\n".join(blocks)

    @staticmethod
    def _pool_match_line(match: PoolMatch) -> str:
        return (f"Match, {match.algorithm}, {match.provided_digest}, "
                f"{sanitize(match.file_path)}, {match.computed_digest}")

    def _group_block(self, group: MatchGroup) -> str:
        return "\n".join(self._entry_line(entry) for entry in group.entries)

    @staticmethod
    def _entry_line(entry: Entry) -> str:
        if entry.is_reference:
            return f"REFERENCE:    {entry.digest}"
        return f"{sanitize(entry.original)}    {entry.digest}"


class PreserveOrderFormatter(Formatter):
    """Successful entries in input order, no grouping."""

    def format(self, result: HashResult) -> str:
        return "\n".join(
            f"{sanitize(e.original)}    {e.digest}" for e in result.entries if e.error is None
        )


class VerboseFormatter(Formatter):
    """Detailed listing with processing statistics and a summary line."""

    def format(self, result: HashResult) -> str:
        lines = [
            f"Processed {result.files_processed} files in {result.duration * 1000:.0f}ms",
            "",
        ]

        if result.matches:
            lines.append("Match Groups:")
            for idx, group in enumerate(result.matches, 1):
                lines.append(f"  Group {idx} ({group.count} files):")
                for entry in group.entries:
                    lines.append(f"    {sanitize(entry.original)}    {entry.digest}")
                lines.append("")

        if result.unmatched:
            lines.append("Unmatched Files:")
            for entry in result.unmatched:
                lines.append(f"  {sanitize(entry.original)}    {entry.digest}")
            lines.append("")

        if result.ref_orphans:
            lines.append("Unmatched References:")
            for entry in result.ref_orphans:
                lines.append(f"  {entry.digest}")
            lines.append("")

        lines.append(f"Summary: {len(result.matches)} match groups, {len(result.unmatched)} unmatched files")
        return "\n".join(lines)


class JSONFormatter(Formatter):
    def format(self, result: HashResult) -> str:
        output = {
            "processed": result.files_processed,
            "duration_ms": int(result.duration * 1000),
            "match_groups": [
                {
                    "hash": group.digest,
                    "count": group.count,
                    "files": [e.original for e in group.entries],
                }
                for group in result.matches
            ],
            "unmatched": [{"file": e.original, "hash": e.digest} for e in result.unmatched],
            "errors": [str(err) for err in result.errors],
        }
        if result.ref_orphans:
            output["reference_orphans"] = [e.digest for e in result.ref_orphans]
        if result.pool_matches:
            output["pool_matches"] = [
                {
                    "file": m.file_path,
                    "computed": m.computed_digest,
                    "provided": m.provided_digest,
                    "algorithm": m.algorithm,
                }
                for m in result.pool_matches
            ]
        return json.dumps(output, indent=2)


class JSONLFormatter(Formatter):
    """One JSON object per entry, in input order."""

    def format(self, result: HashResult) -> str:
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")
        lines = []
        for entry in result.entries:
            lines.append(json.dumps({
                "type": "file",
                "name": entry.original,
                "hash": entry.digest,
                "status": "success" if entry.error is None else "error",
                "timestamp": now,
            }))
        return "\n".join(lines)


class PlainFormatter(Formatter):
    """Tab-separated path and digest, in input order."""

    def format(self, result: HashResult) -> str:
        return "\n".join(
            f"{sanitize(e.original)}\t{e.digest}" for e in result.entries if e.error is None
        )


class CSVFormatter(Formatter):
    """Type, Name, Hash, Algorithm rows."""

    def format(self, result: HashResult) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")

        for group in result.matches:
            for entry in group.entries:
                writer.writerow(self._row(entry))
        for entry in result.unmatched:
            writer.writerow(self._row(entry))
        for entry in result.ref_orphans:
            writer.writerow(self._row(entry))
        for unknown in result.unknowns:
            writer.writerow(["INVALID", sanitize(unknown), "-", "-"])

        return buffer.getvalue().rstrip("\n")

    @staticmethod
    def _row(entry: Entry) -> List[str]:
        if entry.is_reference:
            return ["REFERENCE", "-", entry.digest, entry.algorithm]
        return ["FILE", sanitize(entry.original), entry.digest, entry.algorithm]


_FORMATTERS = {
    OutputFormat.VERBOSE: VerboseFormatter,
    OutputFormat.JSON: JSONFormatter,
    OutputFormat.JSONL: JSONLFormatter,
    OutputFormat.PLAIN: PlainFormatter,
    OutputFormat.CSV: CSVFormatter,
}


def get_formatter(output_format: Union[str, OutputFormat], preserve_order: bool = False) -> Formatter:
    """Returns the formatter for a format name; unknown names fall back to the default layout."""
    try:
        output_format = OutputFormat(output_format)
    except ValueError:
        output_format = OutputFormat.DEFAULT

    formatter_cls = _FORMATTERS.get(output_format)
    if formatter_cls is not None:
        return formatter_cls()
    return PreserveOrderFormatter() if preserve_order else DefaultFormatter()
