"""
Token ledger accessor.

The pool engine never owns token balances; it calls a host token service
through the `TokenLedger` protocol. `InMemoryLedger` is the reference
implementation used by tests and local simulation: a `BalanceTable` of
(owner, token) -> amount plus per-token supply, with an `atomic()` scope that
rolls every balance back if the enclosed block raises.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import ContextManager, Dict, Iterator, Protocol, Tuple

from ..errors import InsufficientFunds, InvalidAmount, MathOverflow
from ..kernels.python.checked_math import U64_MAX, checked_add


# Type aliases
Identity = str  # signer / account owner identifier
AssetId = str  # token identifier; ordering is byte-lexicographic on UTF-8
Amount = int  # u64

# Unreachable holder for permanently locked LP shares (no key maps to it).
BURN_ADDRESS: Identity = "0x" + "00" * 32

logger = logging.getLogger(__name__)


def _require_amount(name: str, amount: Amount) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmount(f"{name} must be an int")
    if amount < 0 or amount > U64_MAX:
        raise InvalidAmount(f"{name} out of u64 range: {amount}")


class BalanceTable:
    """
    Deterministic balance table mapping (owner, token) -> amount.

    Zero balances are omitted to keep the table sparse. Callers must sort keys
    explicitly wherever ordering matters.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Identity, AssetId], Amount] = {}

    def get(self, owner: Identity, token: AssetId) -> Amount:
        """Get balance for (owner, token). Returns 0 if not found."""
        return self._balances.get((owner, token), 0)

    def set(self, owner: Identity, token: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((owner, token), None)
        else:
            self._balances[(owner, token)] = amount

    def add(self, owner: Identity, token: AssetId, delta: int) -> None:
        """Add delta to a balance (delta may be negative)."""
        current = self.get(owner, token)
        new_balance = current + delta
        if new_balance < 0:
            raise InsufficientFunds(
                f"insufficient {token} balance for {owner}: {current} < {-delta}"
            )
        if new_balance > U64_MAX:
            raise MathOverflow(f"balance would exceed u64 for {owner}: {new_balance}")
        self.set(owner, token, new_balance)

    def get_all_balances(self) -> Dict[Tuple[Identity, AssetId], Amount]:
        return dict(self._balances)

    def restore(self, snapshot: Dict[Tuple[Identity, AssetId], Amount]) -> None:
        self._balances = dict(snapshot)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"


class TokenLedger(Protocol):
    """Host token service consumed by the pool engine."""

    def balance(self, owner: Identity, token: AssetId) -> Amount: ...

    def supply(self, token: AssetId) -> Amount: ...

    def transfer(self, token: AssetId, source: Identity, dest: Identity, amount: Amount) -> None: ...

    def mint(self, token: AssetId, dest: Identity, amount: Amount) -> None: ...

    def burn(self, token: AssetId, source: Identity, amount: Amount) -> None: ...

    def atomic(self) -> ContextManager[None]: ...


class InMemoryLedger:
    """
    In-process `TokenLedger`.

    Each call is all-or-nothing on its own; `atomic()` extends that to a whole
    instruction by snapshotting balances and supplies on entry.
    """

    def __init__(self) -> None:
        self._table = BalanceTable()
        self._supply: Dict[AssetId, Amount] = {}

    def balance(self, owner: Identity, token: AssetId) -> Amount:
        return self._table.get(owner, token)

    def supply(self, token: AssetId) -> Amount:
        return self._supply.get(token, 0)

    def transfer(self, token: AssetId, source: Identity, dest: Identity, amount: Amount) -> None:
        _require_amount("amount", amount)
        if amount == 0 or source == dest:
            return
        if self._table.get(source, token) < amount:
            raise InsufficientFunds(
                f"insufficient {token} balance for {source}: {self._table.get(source, token)} < {amount}"
            )
        self._table.add(source, token, -amount)
        self._table.add(dest, token, amount)

    def mint(self, token: AssetId, dest: Identity, amount: Amount) -> None:
        _require_amount("amount", amount)
        if amount == 0:
            return
        new_supply = checked_add(self.supply(token), amount, limit=U64_MAX)
        self._table.add(dest, token, amount)
        self._supply[token] = new_supply

    def burn(self, token: AssetId, source: Identity, amount: Amount) -> None:
        _require_amount("amount", amount)
        if amount == 0:
            return
        self._table.add(source, token, -amount)
        self._supply[token] = self.supply(token) - amount

    @contextmanager
    def atomic(self) -> Iterator[None]:
        balances = self._table.get_all_balances()
        supply = dict(self._supply)
        try:
            yield
        except BaseException:
            self._table.restore(balances)
            self._supply = supply
            logger.debug("ledger transaction rolled back")
            raise

    def get_all_balances(self) -> Dict[Tuple[Identity, AssetId], Amount]:
        return self._table.get_all_balances()

    def __repr__(self) -> str:
        return f"InMemoryLedger({len(self._table.get_all_balances())} balances, {len(self._supply)} tokens)"
