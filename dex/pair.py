"""Liquidity pool for a single token pair.

A Pair holds reserves of its two tokens, issues liquidity shares against
them and prices swaps with the constant product formula. The shares are
themselves a token: they can be approved and transferred like an ERC-20.
A pair is created by the Factory and moves between the EMPTY and FUNDED
states.

Every mutating call is atomic. Checks and math run first, then inbound token
pulls, then the state update, then outbound pushes. If anything fails the
pair state is restored and any tokens already moved by the call are sent
back, so a failed call leaves no trace.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from functools import partial

import structlog

from dex.amm.constant_product import (
    burn_amounts,
    get_amount_out,
    initial_liquidity,
    k_not_decreased,
    proportional_liquidity,
)
from dex.config import DEFAULT_CONFIG, DexConfig
from dex.errors import (
    ConstantProductViolated,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InvalidInputAmount,
    Locked,
)
from dex.events import Approval, Burn, EventLog, Mint, Swap, SwapDirection, Transfer
from dex.models.types import ZERO_ADDRESS, normalize_address
from dex.tokens import InsufficientAllowance, InsufficientBalance, Token

logger = structlog.get_logger()


class PairState(Enum):
    """Lifecycle state of a pair."""

    EMPTY = "empty"
    FUNDED = "funded"


@dataclass(frozen=True)
class SwapQuote:
    """Priced swap: which side goes in and what comes out."""

    amount_in: int
    amount_out: int
    direction: SwapDirection


@dataclass(frozen=True)
class _Snapshot:
    reserve0: int
    reserve1: int
    total_supply: int
    balances: dict[str, int]
    allowances: dict[tuple[str, str], int]
    events: int


class Pair:
    """Constant product pool over (token0, token1).

    Attributes:
        address: Pair address (deterministic, derived by the factory)
        factory: Address of the factory that created the pair
        token0: Token with the lower address
        token1: Token with the higher address
        events: Mint, Burn and Swap events emitted by this pair
    """

    def __init__(
        self,
        address: str,
        token0: Token,
        token1: Token,
        factory: str,
        config: DexConfig = DEFAULT_CONFIG,
    ) -> None:
        if normalize_address(token0.address) >= normalize_address(token1.address):
            raise ValueError(
                f"Pair tokens must be distinct and sorted: {token0.address}, {token1.address}"
            )
        self.address = normalize_address(address, validate=True)
        self.factory = normalize_address(factory, validate=True)
        self.token0 = token0
        self.token1 = token1
        self._fee_multiplier = config.fee_multiplier
        self._fee_bps = config.fee_bps

        self._reserve0 = 0
        self._reserve1 = 0
        self._total_supply = 0
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}

        # RLock so a same-thread re-entry reaches the guard and fails with Locked
        # instead of deadlocking
        self._lock = threading.RLock()
        self._entered = False
        self._journal: list[Callable[[], object]] = []
        self.events = EventLog(self.address)

    def __repr__(self) -> str:
        return (
            f"Pair({self.address}, token0={self.token0.address}, token1={self.token1.address}, "
            f"reserves=({self._reserve0}, {self._reserve1}), total_supply={self._total_supply})"
        )

    # --- Views ---

    @property
    def reserve0(self) -> int:
        return self._reserve0

    @property
    def reserve1(self) -> int:
        return self._reserve1

    @property
    def total_supply(self) -> int:
        """Total outstanding liquidity shares."""
        return self._total_supply

    @property
    def fee_bps(self) -> int:
        return self._fee_bps

    @property
    def state(self) -> PairState:
        return PairState.EMPTY if self._total_supply == 0 else PairState.FUNDED

    def get_reserves(self) -> tuple[int, int]:
        """Current (reserve0, reserve1)."""
        with self._lock:
            return self._reserve0, self._reserve1

    def balance_of(self, owner: str) -> int:
        """Liquidity shares held by owner."""
        return self._balances.get(normalize_address(owner), 0)

    @property
    def share_balances(self) -> dict[str, int]:
        """Copy of every nonzero share balance, keyed by holder."""
        return dict(self._balances)

    def quote_swap(self, amount_in0: int, amount_in1: int) -> SwapQuote:
        """Price a swap without executing it.

        Applies exactly the validation swap() applies.

        Raises:
            InsufficientInputAmount: If both inputs are zero, an input is
                negative, or the output rounds down to zero
            InvalidInputAmount: If both inputs are positive
            InsufficientLiquidity: If the pool is empty
        """
        if amount_in0 < 0 or amount_in1 < 0:
            raise InsufficientInputAmount(
                f"Swap inputs cannot be negative: ({amount_in0}, {amount_in1})"
            )
        if amount_in0 == 0 and amount_in1 == 0:
            raise InsufficientInputAmount("Swap needs a positive input on one side")
        if amount_in0 > 0 and amount_in1 > 0:
            raise InvalidInputAmount(
                f"Swap takes input on one side only, got ({amount_in0}, {amount_in1})"
            )
        if self._total_supply == 0:
            raise InsufficientLiquidity(f"Pair {self.address} has no liquidity")

        if amount_in0 > 0:
            amount_in, reserve_in, reserve_out = amount_in0, self._reserve0, self._reserve1
            direction = SwapDirection.ZERO_FOR_ONE
        else:
            amount_in, reserve_in, reserve_out = amount_in1, self._reserve1, self._reserve0
            direction = SwapDirection.ONE_FOR_ZERO

        amount_out = get_amount_out(amount_in, reserve_in, reserve_out, self._fee_multiplier)
        if amount_out == 0:
            raise InsufficientInputAmount(f"Swap input {amount_in} is too small to buy any output")
        return SwapQuote(amount_in=amount_in, amount_out=amount_out, direction=direction)

    def get_amount_out(self, amount_in0: int, amount_in1: int) -> int:
        """Output amount swap(amount_in0, amount_in1) would pay right now."""
        return self.quote_swap(amount_in0, amount_in1).amount_out

    def allowance(self, owner: str, spender: str) -> int:
        """Shares spender may move on behalf of owner."""
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    # --- Share token ---

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Let spender move up to amount of owner's shares."""
        owner = normalize_address(owner, validate=True)
        spender = normalize_address(spender, validate=True)
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        with self._guard():
            self._allowances[(owner, spender)] = amount
            self.events.emit(Approval(owner, spender, amount))
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move amount of sender's shares to recipient.

        Raises:
            InsufficientBalance: If sender holds fewer than amount shares
        """
        sender = normalize_address(sender, validate=True)
        recipient = normalize_address(recipient, validate=True)
        with self._guard():
            self._move_shares(sender, recipient, amount)
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """Move amount of owner's shares to recipient using spender's allowance.

        Raises:
            InsufficientAllowance: If spender may not move amount for owner
            InsufficientBalance: If owner holds fewer than amount shares
        """
        spender = normalize_address(spender, validate=True)
        owner = normalize_address(owner, validate=True)
        recipient = normalize_address(recipient, validate=True)
        with self._guard():
            allowed = self._allowances.get((owner, spender), 0)
            if allowed < amount:
                raise InsufficientAllowance(
                    f"Pair {self.address}: allowance {allowed} of {spender} for {owner} "
                    f"is below {amount}"
                )
            self._allowances[(owner, spender)] = allowed - amount
            self._move_shares(owner, recipient, amount)
        return True

    # --- Liquidity and swaps ---

    def add_liquidity(self, sender: str, amount0: int, amount1: int) -> int:
        """Deposit both tokens and mint liquidity shares to sender.

        The first deposit into an empty pool mints sqrt(amount0 * amount1)
        shares. Later deposits mint in proportion to the limiting side; any
        surplus on the other side is kept by the pool.

        Args:
            sender: Depositor; must have approved the pair for both amounts
            amount0: Amount of token0 to deposit
            amount1: Amount of token1 to deposit

        Returns:
            Number of shares minted

        Raises:
            InsufficientInputAmount: If either amount is not positive, or the
                deposit is too small to mint a share
        """
        sender = normalize_address(sender, validate=True)
        with self._guard():
            if amount0 <= 0 or amount1 <= 0:
                raise InsufficientInputAmount(
                    f"Both deposit amounts must be positive, got ({amount0}, {amount1})"
                )

            if self._total_supply == 0:
                liquidity = initial_liquidity(amount0, amount1)
            else:
                liquidity = proportional_liquidity(
                    amount0, amount1, self._reserve0, self._reserve1, self._total_supply
                )
            if liquidity <= 0:
                raise InsufficientInputAmount(
                    f"Deposit ({amount0}, {amount1}) is too small to mint liquidity"
                )

            self._pull(sender, [(self.token0, amount0), (self.token1, amount1)])

            self._reserve0 += amount0
            self._reserve1 += amount1
            self._mint_shares(sender, liquidity)

            self.events.emit(Mint(sender, amount0, amount1, liquidity))

        logger.info(
            "liquidity_added",
            pair=self.address,
            sender=sender,
            amount0=amount0,
            amount1=amount1,
            liquidity=liquidity,
        )
        return liquidity

    def remove_liquidity(self, sender: str, liquidity: int) -> tuple[int, int]:
        """Burn sender's shares and pay out the proportional reserves.

        Args:
            sender: Share holder
            liquidity: Number of shares to burn

        Returns:
            (amount0, amount1) paid to sender

        Raises:
            InsufficientLiquidity: If liquidity is not positive, exceeds the
                sender's balance, or is worth zero of either token
        """
        sender = normalize_address(sender, validate=True)
        with self._guard():
            balance = self._balances.get(sender, 0)
            if liquidity <= 0 or liquidity > balance:
                raise InsufficientLiquidity(
                    f"Cannot burn {liquidity} shares, {sender} holds {balance}"
                )

            amount0, amount1 = burn_amounts(
                liquidity, self._reserve0, self._reserve1, self._total_supply
            )
            if amount0 == 0 or amount1 == 0:
                raise InsufficientLiquidity(f"Burning {liquidity} shares pays out nothing")

            self._burn_shares(sender, liquidity)
            self._reserve0 -= amount0
            self._reserve1 -= amount1

            self._push(sender, [(self.token0, amount0), (self.token1, amount1)])

            self.events.emit(Burn(sender, amount0, amount1))

        logger.info(
            "liquidity_removed",
            pair=self.address,
            sender=sender,
            liquidity=liquidity,
            amount0=amount0,
            amount1=amount1,
        )
        return amount0, amount1

    def swap(self, sender: str, amount_in0: int, amount_in1: int) -> int:
        """Swap an exact input on one side for the other token.

        Exactly one of amount_in0 and amount_in1 must be positive.

        Args:
            sender: Trader; must have approved the pair for the input amount
            amount_in0: token0 paid in (0 when selling token1)
            amount_in1: token1 paid in (0 when selling token0)

        Returns:
            Output amount paid to sender

        Raises:
            InsufficientInputAmount: If both inputs are zero, or the output
                rounds down to zero
            InvalidInputAmount: If both inputs are positive
            InsufficientLiquidity: If the pool is empty
            ConstantProductViolated: If the reserve product would decrease
        """
        return self.execute_swap(sender, amount_in0, amount_in1).amount_out

    def execute_swap(self, sender: str, amount_in0: int, amount_in1: int) -> SwapQuote:
        """Like swap(), but return the executed quote with its direction."""
        sender = normalize_address(sender, validate=True)
        with self._guard():
            quote = self.quote_swap(amount_in0, amount_in1)
            if quote.direction is SwapDirection.ZERO_FOR_ONE:
                token_in, token_out = self.token0, self.token1
            else:
                token_in, token_out = self.token1, self.token0

            reserve0_before, reserve1_before = self._reserve0, self._reserve1
            self._pull(sender, [(token_in, quote.amount_in)])
            if quote.direction is SwapDirection.ZERO_FOR_ONE:
                self._reserve0 += quote.amount_in
                self._reserve1 -= quote.amount_out
            else:
                self._reserve1 += quote.amount_in
                self._reserve0 -= quote.amount_out

            if not k_not_decreased(
                reserve0_before, reserve1_before, self._reserve0, self._reserve1
            ):
                raise ConstantProductViolated(
                    f"k decreased: {reserve0_before}*{reserve1_before} -> "
                    f"{self._reserve0}*{self._reserve1}"
                )

            self._push(sender, [(token_out, quote.amount_out)])

            self.events.emit(Swap(sender, quote.amount_in, quote.amount_out, quote.direction))

        logger.info(
            "swap_executed",
            pair=self.address,
            sender=sender,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            direction=quote.direction.value,
        )
        return quote

    # --- Internals ---

    @contextmanager
    def _guard(self) -> Iterator[None]:
        """Serialize mutating calls and undo everything a failed call did.

        On failure the pair state is restored first. Token movements made
        through _pull and _push are journaled and then compensated in reverse
        order; if a compensation fails, the first such failure is raised,
        chained to the original error.
        """
        with self._lock:
            if self._entered:
                raise Locked(f"Pair {self.address} re-entered during a call")
            self._entered = True
            self._journal = []
            snapshot = self._snapshot()
            try:
                yield
            except BaseException as err:
                try:
                    self._restore(snapshot)
                finally:
                    failure = self._compensate()
                logger.debug(
                    "pair_call_reverted",
                    pair=self.address,
                    error=type(err).__name__,
                    detail=str(err),
                )
                if failure is not None:
                    raise failure from err
                raise
            finally:
                self._journal = []
                self._entered = False

    def _compensate(self) -> Exception | None:
        """Run every journaled undo in reverse; return the first that failed."""
        first_failure: Exception | None = None
        for undo in reversed(self._journal):
            try:
                undo()
            except Exception as exc:
                logger.warning(
                    "pair_compensation_failed",
                    pair=self.address,
                    error=type(exc).__name__,
                    detail=str(exc),
                )
                if first_failure is None:
                    first_failure = exc
        return first_failure

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            reserve0=self._reserve0,
            reserve1=self._reserve1,
            total_supply=self._total_supply,
            balances=dict(self._balances),
            allowances=dict(self._allowances),
            events=self.events.checkpoint(),
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self._reserve0 = snapshot.reserve0
        self._reserve1 = snapshot.reserve1
        self._total_supply = snapshot.total_supply
        self._balances = snapshot.balances
        self._allowances = snapshot.allowances
        self.events.rollback(snapshot.events)

    def _mint_shares(self, to: str, amount: int) -> None:
        self._total_supply += amount
        self._balances[to] = self._balances.get(to, 0) + amount
        self.events.emit(Transfer(ZERO_ADDRESS, to, amount))

    def _burn_shares(self, owner: str, amount: int) -> None:
        self._debit_shares(owner, amount)
        self._total_supply -= amount
        self.events.emit(Transfer(owner, ZERO_ADDRESS, amount))

    def _move_shares(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount cannot be negative: {amount}")
        self._debit_shares(sender, amount)
        if amount:
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self.events.emit(Transfer(sender, recipient, amount))

    def _debit_shares(self, owner: str, amount: int) -> None:
        # Only nonzero balances are stored
        balance = self._balances.get(owner, 0)
        if balance < amount:
            raise InsufficientBalance(
                f"Pair {self.address}: {owner} holds {balance} shares, below {amount}"
            )
        if balance == amount:
            self._balances.pop(owner, None)
        else:
            self._balances[owner] = balance - amount

    def _pull(self, sender: str, transfers: list[tuple[Token, int]]) -> None:
        """Collect tokens from sender using the allowance granted to the pair."""
        for token, amount in transfers:
            token.transfer_from(self.address, sender, self.address, amount)
            self._journal.append(partial(self._refund, token, sender, amount))

    def _refund(self, token: Token, sender: str, amount: int) -> None:
        # Return the tokens and the allowance the pull consumed
        token.transfer(self.address, sender, amount)
        token.approve(sender, self.address, token.allowance(sender, self.address) + amount)

    def _push(self, recipient: str, transfers: list[tuple[Token, int]]) -> None:
        """Pay tokens out of the pair to recipient."""
        for token, amount in transfers:
            token.transfer(self.address, recipient, amount)
            self._journal.append(partial(token.transfer, recipient, self.address, amount))
