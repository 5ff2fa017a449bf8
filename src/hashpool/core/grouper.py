"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Classifies hashed entries into match groups, unmatched entries and, in pool mode,
matched / orphaned reference digests.

Buckets are kept in an insertion-ordered dict, so groups come out in the order their
digest was first seen in the (already input-ordered) entry list. Digests are compared
case-insensitively. Failed entries never take part in grouping.
"""

import logging
from typing import List, Dict, Tuple, Set

from hashpool.core.interfaces import DigestGrouper
from hashpool.core.models import Entry, MatchGroup, PoolMatch

logger = logging.getLogger(__name__)


class DigestGrouperImpl(DigestGrouper):
    """
    Stateless grouping engine. Entries are copied into groups, never mutated.
    """

    def group_results(self, entries: List[Entry]) -> Tuple[List[MatchGroup], List[Entry]]:
        """
        Plain grouping: digests shared by 2+ files become MatchGroups,
        the rest are returned as unmatched.
        """
        buckets = self._bucket_by_digest(entries)
        return self._split_buckets(buckets)

    def group_pool_results(
            self,
            entries: List[Entry],
            reference_digests: List[str],
            algorithm: str
    ) -> Tuple[List[MatchGroup], List[Entry], List[Entry]]:
        """
        Pool matching: each reference digest joins the bucket of files sharing its digest,
        after all file members. References without such a bucket become reference orphans.
        Blank references are ignored: they are not digests and appear in neither output.

        Returns:
            (matches, file_orphans, ref_orphans)
        """
        reference_digests = [ref for ref in reference_digests if ref.strip()]
        buckets = self._bucket_by_digest(entries)
        consumed = self._consume_references(buckets, reference_digests, algorithm)
        matches, file_orphans = self._split_buckets(buckets)

        ref_orphans = [
            self._reference_entry(ref, algorithm)
            for index, ref in enumerate(reference_digests)
            if index not in consumed
        ]

        logger.debug(
            f"Pool matching: {len(matches)} groups, {len(file_orphans)} file orphans, "
            f"{len(consumed)} references consumed, {len(ref_orphans)} reference orphans"
        )
        return matches, file_orphans, ref_orphans

    def verify_pool(self, entries: List[Entry], reference_digests: List[str]) -> List[PoolMatch]:
        """
        Records a PoolMatch for every (file, reference) pair with equal digests.
        Kept for consumers of the older pool-verification output.
        """
        pool_matches = []
        for entry in entries:
            if entry.error is not None or entry.is_reference:
                continue
            for ref in reference_digests:
                if entry.digest.lower() == ref.strip().lower():
                    pool_matches.append(PoolMatch(
                        file_path=entry.original,
                        computed_digest=entry.digest,
                        provided_digest=ref,
                        algorithm=entry.algorithm,
                    ))
        return pool_matches

    @staticmethod
    def _bucket_by_digest(entries: List[Entry]) -> Dict[str, List[Entry]]:
        """
        Buckets successful entries by lowercase digest in first-seen order.
        """
        buckets: Dict[str, List[Entry]] = {}
        for entry in entries:
            if entry.error is not None:
                continue
            buckets.setdefault(entry.digest.lower(), []).append(entry)
        return buckets

    @staticmethod
    def _consume_references(
            buckets: Dict[str, List[Entry]],
            reference_digests: List[str],
            algorithm: str
    ) -> Set[int]:
        """
        Appends every reference whose digest has a file bucket; returns the consumed indices.
        Only buckets created by files are eligible, so two references alone never match.
        """
        file_digests = set(buckets)
        consumed = set()
        for index, ref in enumerate(reference_digests):
            normalized = DigestGrouperImpl._normalize(ref)
            if normalized in file_digests:
                buckets[normalized].append(DigestGrouperImpl._reference_entry(ref, algorithm))
                consumed.add(index)
        return consumed

    @staticmethod
    def _split_buckets(buckets: Dict[str, List[Entry]]) -> Tuple[List[MatchGroup], List[Entry]]:
        matches = []
        singles = []
        for digest, members in buckets.items():
            if len(members) >= 2:
                matches.append(MatchGroup(digest=digest, entries=tuple(members), count=len(members)))
            else:
                singles.append(members[0])
        return matches, singles

    @staticmethod
    def _reference_entry(ref: str, algorithm: str) -> Entry:
        return Entry(
            original=ref,
            digest=DigestGrouperImpl._normalize(ref),
            algorithm=algorithm,
            is_reference=True,
        )

    @staticmethod
    def _normalize(ref: str) -> str:
        return ref.strip().lower()
