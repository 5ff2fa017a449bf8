from .manifest_service import Manifest, FileRecord, ManifestService
from .format_service import get_formatter
from .status_service import ExitCode, StatusService

__all__ = ["Manifest", "FileRecord", "ManifestService", "get_formatter", "ExitCode", "StatusService"]
