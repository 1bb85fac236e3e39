"""
Read-only view over one ``TransactionInput``.

Resolves account indexes (static keys followed by address-table loaded keys),
token balance snapshots and fee data. Every index lookup is bounds-checked;
a bad index raises ``StructuralError``.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from solders.pubkey import Pubkey

from solana_dex_parser.core.errors import DecodeError, StructuralError
from solana_dex_parser.core.models import (
    BalanceChange,
    Instruction,
    TokenBalance,
    TransactionInput,
    TransactionStatus,
)
from solana_dex_parser.core.pubkeys import DELEGATED_SIGNER_PROGRAMS, KNOWN_DECIMALS, Tokens


class TransactionContext:
    """Index-based lookups for a single transaction."""

    def __init__(self, tx: TransactionInput):
        self.tx = tx
        self.account_keys: tuple[Pubkey, ...] = self._extract_account_keys(tx)
        self._key_index: Dict[Pubkey, int] = {}
        for index, key in enumerate(self.account_keys):
            self._key_index.setdefault(key, index)

        meta = tx.meta
        self.pre_token: Dict[int, TokenBalance] = {}
        self.post_token: Dict[int, TokenBalance] = {}
        self.mint_decimals: Dict[Pubkey, int] = dict(KNOWN_DECIMALS)
        if meta is not None:
            for balance in meta.pre_token_balances:
                self.pre_token.setdefault(balance.account_index, balance)
                self.mint_decimals[balance.mint] = balance.decimals
            for balance in meta.post_token_balances:
                self.post_token.setdefault(balance.account_index, balance)
                self.mint_decimals[balance.mint] = balance.decimals

    @staticmethod
    def _extract_account_keys(tx: TransactionInput) -> tuple[Pubkey, ...]:
        keys = list(tx.account_keys)
        if tx.meta is not None and tx.meta.loaded_addresses is not None:
            keys.extend(tx.meta.loaded_addresses.writable)
            keys.extend(tx.meta.loaded_addresses.readonly)
        return tuple(keys)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_key(self, index: int) -> Pubkey:
        if not 0 <= index < len(self.account_keys):
            raise StructuralError(
                f"account index {index} out of range ({len(self.account_keys)} keys)"
            )
        return self.account_keys[index]

    def find_key(self, index: int) -> Optional[Pubkey]:
        if 0 <= index < len(self.account_keys):
            return self.account_keys[index]
        return None

    def index_of(self, key: Pubkey) -> Optional[int]:
        return self._key_index.get(key)

    def program_id(self, ix: Instruction) -> Pubkey:
        return self.get_key(ix.program_id_index)

    def find_program_id(self, ix: Instruction) -> Optional[Pubkey]:
        return self.find_key(ix.program_id_index)

    def instruction_accounts(self, ix: Instruction) -> tuple[Pubkey, ...]:
        return tuple(self.get_key(i) for i in ix.account_key_indexes)

    def validate(self, ix: Instruction) -> None:
        """Raise ``StructuralError`` unless every index of ``ix`` resolves."""
        self.program_id(ix)
        for i in ix.account_key_indexes:
            self.get_key(i)

    @property
    def signer(self) -> Optional[Pubkey]:
        return self.find_key(0)

    @property
    def swap_signer(self) -> Optional[Pubkey]:
        """User a swap is executed for.

        Keeper-run programs (Jupiter DCA) sign with a keeper; the user sits at
        a fixed account position instead.
        """
        for program, position in DELEGATED_SIGNER_PROGRAMS.items():
            if program in self._key_index:
                user = self.find_key(position)
                return user if user is not None else self.signer
        return self.signer

    # ------------------------------------------------------------------
    # Token balances
    # ------------------------------------------------------------------

    def token_balance(self, account_index: int) -> Optional[TokenBalance]:
        return self.post_token.get(account_index) or self.pre_token.get(account_index)

    def mint_of(self, account_index: int) -> Optional[Pubkey]:
        balance = self.token_balance(account_index)
        return balance.mint if balance else None

    def mint_of_key(self, key: Pubkey) -> Optional[Pubkey]:
        index = self.index_of(key)
        return None if index is None else self.mint_of(index)

    def owner_of(self, account_index: int) -> Optional[Pubkey]:
        balance = self.token_balance(account_index)
        return balance.owner if balance else None

    def decimals_of(self, mint: Pubkey, default: Optional[int] = None) -> Optional[int]:
        return self.mint_decimals.get(mint, default)

    def account_decimals(self, account_index: int) -> Optional[int]:
        """Decimals of a token account, consistent across pre/post snapshots."""
        pre = self.pre_token.get(account_index)
        post = self.post_token.get(account_index)
        if pre is not None and post is not None and pre.decimals != post.decimals:
            raise DecodeError(
                f"decimals mismatch for account {account_index}: "
                f"pre={pre.decimals} post={post.decimals}"
            )
        balance = post or pre
        return balance.decimals if balance else None

    def token_delta(self, account_index: int) -> int:
        pre = self.pre_token.get(account_index)
        post = self.post_token.get(account_index)
        if pre is not None and post is not None and pre.mint != post.mint:
            raise DecodeError(f"mint changed for account {account_index}")
        return (post.amount if post else 0) - (pre.amount if pre else 0)

    def token_accounts(self) -> Iterable[int]:
        return sorted(set(self.pre_token) | set(self.post_token))

    # ------------------------------------------------------------------
    # Native balances, fee, status
    # ------------------------------------------------------------------

    @property
    def fee(self) -> int:
        return self.tx.meta.fee if self.tx.meta is not None else 0

    @property
    def compute_units(self) -> int:
        if self.tx.meta is None or self.tx.meta.compute_units is None:
            return 0
        return self.tx.meta.compute_units

    @property
    def tx_status(self) -> TransactionStatus:
        if self.tx.meta is None:
            return TransactionStatus.UNKNOWN
        if self.tx.meta.err is None:
            return TransactionStatus.SUCCESS
        return TransactionStatus.FAILED

    def native_balance_change(self, account_index: int) -> Optional[BalanceChange]:
        meta = self.tx.meta
        if meta is None:
            return None
        if account_index >= len(meta.pre_balances) or account_index >= len(meta.post_balances):
            return None
        return BalanceChange(
            pre=meta.pre_balances[account_index],
            post=meta.post_balances[account_index],
            decimals=KNOWN_DECIMALS[Tokens.SOL],
        )

    def token_balance_changes(self, owner: Pubkey) -> Dict[Pubkey, BalanceChange]:
        """Net change per mint across all token accounts held by ``owner``."""
        changes: Dict[Pubkey, BalanceChange] = {}
        for index in self.token_accounts():
            if self.owner_of(index) != owner:
                continue
            pre = self.pre_token.get(index)
            post = self.post_token.get(index)
            mint = (post or pre).mint
            decimals = (post or pre).decimals
            prev = changes.get(mint)
            pre_amount = (pre.amount if pre else 0) + (prev.pre if prev else 0)
            post_amount = (post.amount if post else 0) + (prev.post if prev else 0)
            changes[mint] = BalanceChange(pre=pre_amount, post=post_amount, decimals=decimals)
        return {mint: change for mint, change in changes.items() if change.change != 0}
