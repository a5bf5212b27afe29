"""Test helpers module for shared test utilities.

- constants: Accounts and common amounts
- factories: Token funding and deposit helpers
- assertions: Pool invariant checks
"""

from tests.helpers.constants import ALICE, BOB, CAROL, E18, OWNER, UNREGISTERED_TOKEN
from tests.helpers.assertions import assert_invariants
from tests.helpers.factories import deposit, fund, fund_for_pair

__all__ = [
    # Constants
    "OWNER",
    "ALICE",
    "BOB",
    "CAROL",
    "UNREGISTERED_TOKEN",
    "E18",
    # Assertions
    "assert_invariants",
    # Factories
    "fund",
    "fund_for_pair",
    "deposit",
]
