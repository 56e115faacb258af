"""In-memory fungible token ledger.

The market never owns balances; it asks a ledger to mint, burn or transfer and the ledger refuses
with InsufficientBalanceError when a wallet cannot cover the amount.
"""
from __future__ import annotations

import logging
from collections import defaultdict

from fixedpointmath import FixedPoint

from igainpy.errors import InsufficientBalanceError


class Token:
    """A minimal ERC20-like balance book

    Attributes
    ----------
    name : str
        Long name of the token.
    symbol : str
        Ticker symbol of the token.
    decimals : int
        Number of decimals; every amount is a FixedPoint with this precision.
    """

    def __init__(self, name: str, symbol: str, decimals: int = 18):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._balances: defaultdict[str, FixedPoint] = defaultdict(lambda: FixedPoint("0.0"))
        self._total_supply = FixedPoint("0.0")

    @property
    def total_supply(self) -> FixedPoint:
        """Outstanding amount of the token"""
        return self._total_supply

    def balance_of(self, address: str) -> FixedPoint:
        """Balance held by the address"""
        return self._balances[address] if address in self._balances else FixedPoint("0.0")

    def holders(self) -> list[str]:
        """Addresses with a non-zero balance"""
        return [address for address, balance in self._balances.items() if balance > FixedPoint("0.0")]

    def require_balance(self, address: str, amount: FixedPoint) -> None:
        """Raise InsufficientBalanceError if address holds less than amount"""
        if amount < FixedPoint("0.0"):
            raise ValueError(f"{self.symbol}: amount must be non-negative, not {amount}")
        balance = self.balance_of(address)
        if balance < amount:
            raise InsufficientBalanceError(f"{self.symbol}: {address} holds {balance}, needs {amount}")

    def mint(self, address: str, amount: FixedPoint) -> None:
        """Create amount tokens in the address"""
        if amount < FixedPoint("0.0"):
            raise ValueError(f"{self.symbol}: cannot mint a negative amount {amount}")
        self._balances[address] += amount
        self._total_supply += amount
        logging.debug("%s: minted %s to %s", self.symbol, amount, address)

    def burn(self, address: str, amount: FixedPoint) -> None:
        """Destroy amount tokens held by the address"""
        self.require_balance(address, amount)
        self._balances[address] -= amount
        self._total_supply -= amount
        logging.debug("%s: burned %s from %s", self.symbol, amount, address)

    def transfer(self, sender: str, recipient: str, amount: FixedPoint) -> None:
        """Move amount tokens from sender to recipient"""
        self.require_balance(sender, amount)
        self._balances[sender] -= amount
        self._balances[recipient] += amount
        logging.debug("%s: transferred %s from %s to %s", self.symbol, amount, sender, recipient)

    def __repr__(self) -> str:
        return f"Token(name={self.name!r}, symbol={self.symbol!r}, total_supply={self._total_supply})"
