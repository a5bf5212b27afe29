"""Token collaborator protocol and an in-memory ERC-20 ledger.

Pairs only ever talk to tokens through the Token protocol. ERC20 is the
in-process implementation used by the exchange service and the tests; it
mirrors the standard transfer/approve/transferFrom semantics plus a public
mint for funding accounts.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, runtime_checkable

import structlog

from dex.addresses import contract_address
from dex.errors import UnknownToken
from dex.events import Approval, EventLog, Transfer
from dex.models.types import ZERO_ADDRESS, normalize_address
from dex.safe_int import S

logger = structlog.get_logger()


class TokenError(Exception):
    """Base error for token ledger operations."""

    kind: str = "token_error"


class InsufficientBalance(TokenError):
    """Sender balance is below the transfer amount."""

    kind = "insufficient_balance"


class InsufficientAllowance(TokenError):
    """Spender allowance is below the transfer amount."""

    kind = "insufficient_allowance"


@runtime_checkable
class Token(Protocol):
    """What a pair needs from a fungible token.

    transfer takes the sender explicitly; a pair only ever passes its own
    address, except when compensating a transfer it made in a failed call.
    """

    @property
    def address(self) -> str: ...

    def balance_of(self, owner: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, owner: str, spender: str, amount: int) -> bool: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool: ...


class ERC20:
    """In-memory fungible token with an allowance model.

    Every mutating call is all-or-nothing: if an event subscriber raises, the
    ledger is restored to its state before the call.
    """

    def __init__(self, symbol: str, address: str) -> None:
        self.symbol = symbol
        self._address = normalize_address(address, validate=True)
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        self._lock = threading.RLock()
        self.events = EventLog(self._address)

    def __repr__(self) -> str:
        return f"ERC20({self.symbol!r}, {self._address})"

    @property
    def address(self) -> str:
        return self._address

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, owner: str) -> int:
        return self._balances.get(normalize_address(owner), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def mint(self, to: str, amount: int) -> None:
        """Create amount new tokens for to."""
        to = normalize_address(to, validate=True)
        if amount < 0:
            raise ValueError(f"Mint amount cannot be negative: {amount}")
        with self._transaction():
            self._balances[to] = (S(self._balances.get(to, 0)) + S(amount)).to_uint256()
            self._total_supply = (S(self._total_supply) + S(amount)).to_uint256()
            self.events.emit(Transfer(ZERO_ADDRESS, to, amount))

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        owner = normalize_address(owner, validate=True)
        spender = normalize_address(spender, validate=True)
        with self._transaction():
            self._allowances[(owner, spender)] = S(amount).to_uint256()
            self.events.emit(Approval(owner, spender, amount))
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move amount from sender to recipient.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        sender = normalize_address(sender)
        recipient = normalize_address(recipient, validate=True)
        with self._transaction():
            self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """Move amount from owner to recipient using spender's allowance.

        Raises:
            InsufficientAllowance: If spender may not move amount for owner
            InsufficientBalance: If owner holds less than amount
        """
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        recipient = normalize_address(recipient, validate=True)
        with self._transaction():
            allowed = self._allowances.get((owner, spender), 0)
            if allowed < amount:
                raise InsufficientAllowance(
                    f"{self.symbol}: allowance {allowed} of {spender} for {owner} is below {amount}"
                )
            self._allowances[(owner, spender)] = allowed - amount
            self._move(owner, recipient, amount)
        return True

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        with self._lock:
            balances = dict(self._balances)
            allowances = dict(self._allowances)
            total_supply = self._total_supply
            checkpoint = self.events.checkpoint()
            try:
                yield
            except BaseException:
                self._balances = balances
                self._allowances = allowances
                self._total_supply = total_supply
                self.events.rollback(checkpoint)
                raise

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount cannot be negative: {amount}")
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise InsufficientBalance(f"{self.symbol}: balance {balance} of {sender} is below {amount}")
        self._balances[sender] = balance - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self.events.emit(Transfer(sender, recipient, amount))


class TokenRegistry:
    """Address book resolving token addresses to Token implementations."""

    def __init__(self, deployer: str = ZERO_ADDRESS) -> None:
        self._deployer = normalize_address(deployer, validate=True)
        self._tokens: dict[str, Token] = {}
        self._nonce = 0
        self._lock = threading.Lock()

    def deploy(self, symbol: str) -> ERC20:
        """Create and register a new in-memory token."""
        with self._lock:
            address = contract_address(symbol, self._deployer, self._nonce)
            self._nonce += 1
            token = ERC20(symbol, address)
            self._tokens[token.address] = token
        logger.info("token_deployed", symbol=symbol, address=token.address)
        return token

    def register(self, token: Token) -> None:
        """Make an externally constructed token resolvable by address."""
        with self._lock:
            self._tokens[normalize_address(token.address, validate=True)] = token

    def get(self, address: str) -> Token:
        """Resolve a token by address.

        Raises:
            UnknownToken: If no token is registered at address
        """
        token = self._tokens.get(normalize_address(address))
        if token is None:
            raise UnknownToken(f"No token registered at {address}")
        return token

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and normalize_address(address) in self._tokens

    def __iter__(self) -> Iterator[Token]:
        return iter(list(self._tokens.values()))

    def __len__(self) -> int:
        return len(self._tokens)
