"""
Unit tests for the reconciliation deduplicator.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
import pytest
from unittest.mock import Mock

from stretchnet.services.networking.deduplication import ClaimOutcome, ReconciliationDeduplicator


@pytest.mark.unit
class TestClaimOrSkip:
    """Test claim semantics within and across reconciliation passes."""

    def test_first_claim_wins(self):
        dedup = ReconciliationDeduplicator()
        exists_check = Mock(return_value=False)

        assert dedup.claim_or_skip("r1", "east/ns/svc", exists_check) == ClaimOutcome.CLAIMED
        assert dedup.claim_or_skip("r1", "east/ns/svc", exists_check) == ClaimOutcome.ALREADY_CLAIMED
        assert exists_check.call_count == 1

    def test_existing_resource(self):
        dedup = ReconciliationDeduplicator()
        exists_check = Mock(return_value=True)

        assert dedup.claim_or_skip("r1", "east/ns/svc", exists_check) == ClaimOutcome.ALREADY_EXISTS
        assert dedup.claim_or_skip("r1", "east/ns/svc", exists_check) == ClaimOutcome.ALREADY_CLAIMED
        assert exists_check.call_count == 1

    def test_keys_are_independent(self):
        dedup = ReconciliationDeduplicator()
        exists_check = Mock(return_value=False)

        assert dedup.claim_or_skip("r1", "east/ns/svc", exists_check) == ClaimOutcome.CLAIMED
        assert dedup.claim_or_skip("r1", "west/ns/svc", exists_check) == ClaimOutcome.CLAIMED

    def test_new_reconciliation_clears_keys(self):
        dedup = ReconciliationDeduplicator()
        exists_check = Mock(return_value=False)

        dedup.claim_or_skip("r1", "east/ns/svc", exists_check)
        assert dedup.claim_or_skip("r2", "east/ns/svc", exists_check) == ClaimOutcome.CLAIMED
        assert dedup.claim_or_skip("r2", "east/ns/svc", exists_check) == ClaimOutcome.ALREADY_CLAIMED
        assert dedup.reconciliation_id == "r2"

    def test_clear(self):
        dedup = ReconciliationDeduplicator()
        exists_check = Mock(return_value=False)

        dedup.claim_or_skip("r1", "east/ns/svc", exists_check)
        dedup.clear()

        assert dedup.reconciliation_id is None
        assert dedup.claim_or_skip("r1", "east/ns/svc", exists_check) == ClaimOutcome.CLAIMED

    def test_check_error_leaves_key_unclaimed(self):
        dedup = ReconciliationDeduplicator()

        with pytest.raises(RuntimeError):
            dedup.claim_or_skip("r1", "east/ns/svc", Mock(side_effect=RuntimeError("boom")))

        assert dedup.claim_or_skip("r1", "east/ns/svc", Mock(return_value=False)) == ClaimOutcome.CLAIMED


@pytest.mark.unit
def test_concurrent_claims_single_winner():
    """Only one of many concurrent callers gets CLAIMED, the exists_check runs once."""
    dedup = ReconciliationDeduplicator()
    barrier = threading.Barrier(16)
    check_calls = []

    def exists_check():
        check_calls.append(1)
        return False

    def claim(_):
        barrier.wait()
        return dedup.claim_or_skip("r1", "east/ns/svc", exists_check)

    with ThreadPoolExecutor(max_workers=16) as pool:
        outcomes = list(pool.map(claim, range(16)))

    assert outcomes.count(ClaimOutcome.CLAIMED) == 1
    assert outcomes.count(ClaimOutcome.ALREADY_CLAIMED) == 15
    assert len(check_calls) == 1


@pytest.mark.unit
def test_each_pass_reenables_one_claim():
    """A new reconciliation id re-enables exactly one claim."""
    dedup = ReconciliationDeduplicator()
    exists_check = Mock(return_value=False)

    results = []
    for rid in ["r1", "r1", "r2", "r2", "r3"]:
        results.append(dedup.claim_or_skip(rid, "east/ns/svc", exists_check))

    assert results == [
        ClaimOutcome.CLAIMED,
        ClaimOutcome.ALREADY_CLAIMED,
        ClaimOutcome.CLAIMED,
        ClaimOutcome.ALREADY_CLAIMED,
        ClaimOutcome.CLAIMED,
    ]
