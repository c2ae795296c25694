"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the debt ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. share_conservation.py - Shares sum to totals, masks match shares
2. rounding_bounds.py - Rounding never favours the borrower
3. ledger_atomicity.py - All-or-nothing operations
4. accrual_idempotency.py - Back-to-back accrual is a no-op
5. reentrancy.py - Serialized execution and re-entry rejection

These tests use hypothesis for property-based testing.
"""
