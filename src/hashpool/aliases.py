from hashpool.core.models import Algorithm, OutputFormat

ALGORITHM_CHOICES = [a.value for a in Algorithm]

ALGORITHM_HELP_TEXT = (
    "Hash algorithm (default: sha256, or $HASHPOOL_ALGORITHM):\n"
    + "".join(f"  {a.value:<8}: {a.display_name} ({a.digest_length} hex chars)\n" for a in Algorithm)
)

FORMAT_CHOICES = [f.value for f in OutputFormat]

FORMAT_HELP_TEXT = (
    "Output format (default: default, or $HASHPOOL_FORMAT):\n"
    "  default : identical files grouped together, blank line between groups\n"
    "  verbose : groups and unmatched files with a summary\n"
    "  json    : single JSON document\n"
    "  jsonl   : one JSON object per file, input order\n"
    "  plain   : tab separated path and hash, input order\n"
    "  csv     : Type,Name,Hash,Algorithm rows\n"
)

EPILOG_TEXT = """
Arguments are classified automatically: existing paths are hashed, hex strings of the
selected algorithm's length are reference hashes, anything else is reported as INVALID.

Examples:
  Find identical files in a directory tree
  %(prog)s -r ~/Downloads

  Check whether any file matches a published checksum
  %(prog)s --any-match ubuntu.iso 5e38b55d57d94ff029719342357325ed3bda38fa80054f9330dc789cd2d43931

  Hash file names read from standard input, machine-readable output
  find . -name '*.jpg' | %(prog)s - -f json

  Save a manifest, later re-hash only files that changed since
  %(prog)s -r photos --output-manifest photos.json
  %(prog)s -r photos --manifest photos.json --only-changed

  Validate hash strings without hashing anything
  %(prog)s d41d8cd98f00b204e9800998ecf8427e
"""
