"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/status_service.py
Maps a finished HashResult onto a process exit code or a boolean verdict.
"""
from enum import IntEnum
from typing import Union

from hashpool.core.errors import ErrorKind, FileHashError, group_errors
from hashpool.core.models import HashResult, MatchPolicy


class ExitCode(IntEnum):
    SUCCESS = 0
    NO_MATCHES = 1          # Nothing matched with --any-match / --all-match
    PARTIAL_FAILURE = 2     # Some files failed to process
    INVALID_ARGS = 3
    FILE_NOT_FOUND = 4
    PERMISSION_DENIED = 5
    INTERRUPTED = 130       # 128 + SIGINT


class StatusService:

    @staticmethod
    def failure_exit_code(result: HashResult) -> ExitCode:
        """
        PARTIAL_FAILURE when some files failed. When every file failed, the most
        specific code: permission problems first, then missing files.
        """
        if not result.errors:
            return ExitCode.SUCCESS

        if len(result.entries) == 1:
            return StatusService.error_exit_code(result.errors[0])

        if len(result.errors) == len(result.entries):
            groups = group_errors(result.errors)
            if ErrorKind.PERMISSION_DENIED in groups:
                return ExitCode.PERMISSION_DENIED
            if ErrorKind.FILE_NOT_FOUND in groups:
                return ExitCode.FILE_NOT_FOUND
        return ExitCode.PARTIAL_FAILURE

    @staticmethod
    def error_exit_code(error: FileHashError) -> ExitCode:
        """Exit code for a single failed file (used when only one file was hashed)."""
        if error.kind == ErrorKind.FILE_NOT_FOUND:
            return ExitCode.FILE_NOT_FOUND
        if error.kind == ErrorKind.PERMISSION_DENIED:
            return ExitCode.PERMISSION_DENIED
        return ExitCode.PARTIAL_FAILURE

    @staticmethod
    def all_files_matched(result: HashResult, file_count: int) -> bool:
        if file_count == 0:
            return True
        if len(result.matches) == 1 and not result.unmatched:
            return True
        matched_files = {m.file_path for m in result.pool_matches}
        for group in result.matches:
            if group.references:
                matched_files.update(e.original for e in group.files)
        return len(matched_files) == file_count

    @classmethod
    def determine_exit_code(cls, result: HashResult, policy: Union[str, MatchPolicy], file_count: int) -> ExitCode:
        code = cls.failure_exit_code(result)
        if code != ExitCode.SUCCESS:
            return code

        policy = MatchPolicy(policy)
        if policy == MatchPolicy.ANY:
            return ExitCode.SUCCESS if (result.matches or result.pool_matches) else ExitCode.NO_MATCHES
        if policy == MatchPolicy.ALL:
            return ExitCode.SUCCESS if cls.all_files_matched(result, file_count) else ExitCode.NO_MATCHES
        return ExitCode.SUCCESS

    @classmethod
    def is_success(cls, result: HashResult, policy: Union[str, MatchPolicy], file_count: int) -> bool:
        """Verdict printed by --bool."""
        policy = MatchPolicy(policy)
        if policy == MatchPolicy.ANY:
            return bool(result.matches or result.pool_matches)
        if policy == MatchPolicy.ALL:
            return cls.all_files_matched(result, file_count)

        if len(result.entries) == 1 and not result.errors:
            return True
        return len(result.matches) == 1 and not result.unmatched
