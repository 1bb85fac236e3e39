"""
Discriminator dispatch table.

Maps a program id to its family, then a data prefix to a decoder entry.
Outer instructions and self-logged events (inner instructions) live in
separate sub-tables. The process-wide table is built once in
``solana_dex_parser.platforms`` and frozen; lookups never mutate it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from solders.pubkey import Pubkey

from solana_dex_parser.core.models import Fragment, FragmentKind, FragmentSource

Decoder = Callable[..., List[Fragment]]


@dataclass(frozen=True)
class ProgramEntry:
    """Known program deployment."""

    program_id: Pubkey
    family: str
    name: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class DecoderEntry:
    """Decoder bound to one discriminator of one program."""

    family: str
    name: str
    decoder: Decoder
    kind: FragmentKind
    source: FragmentSource
    discriminator: bytes
    min_accounts: int = 0


@dataclass
class _ProgramTables:
    outer: Dict[bytes, DecoderEntry] = field(default_factory=dict)
    inner: Dict[bytes, DecoderEntry] = field(default_factory=dict)

    @staticmethod
    def widths(table: Mapping[bytes, DecoderEntry]) -> List[int]:
        return sorted({len(d) for d in table}, reverse=True)


class DispatchTable:
    """Program id + discriminator prefix -> decoder entry."""

    def __init__(self):
        self._programs: Dict[Pubkey, ProgramEntry] = {}
        self._tables: Dict[Pubkey, _ProgramTables] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("dispatch table is frozen")

    def register_program(
        self, program_id: Pubkey, family: str, name: str, tags: tuple[str, ...] = ()
    ) -> ProgramEntry:
        self._check_mutable()
        if program_id in self._programs:
            raise ValueError(f"program {program_id} registered twice")
        entry = ProgramEntry(program_id=program_id, family=family, name=name, tags=tuple(tags))
        self._programs[program_id] = entry
        self._tables[program_id] = _ProgramTables()
        return entry

    def _register(
        self,
        table: Dict[bytes, DecoderEntry],
        program_id: Pubkey,
        entry: DecoderEntry,
    ) -> DecoderEntry:
        self._check_mutable()
        if not entry.discriminator:
            raise ValueError("empty discriminator")
        if entry.discriminator in table:
            raise ValueError(
                f"discriminator {entry.discriminator.hex()} registered twice for {program_id}"
            )
        table[entry.discriminator] = entry
        return entry

    def _program_tables(self, program_id: Pubkey) -> _ProgramTables:
        try:
            return self._tables[program_id]
        except KeyError:
            raise ValueError(f"program {program_id} is not registered") from None

    def register_outer(self, program_id: Pubkey, entry: DecoderEntry) -> DecoderEntry:
        return self._register(self._program_tables(program_id).outer, program_id, entry)

    def register_inner(self, program_id: Pubkey, entry: DecoderEntry) -> DecoderEntry:
        return self._register(self._program_tables(program_id).inner, program_id, entry)

    def freeze(self) -> "DispatchTable":
        for tables in self._tables.values():
            tables.outer = MappingProxyType(dict(tables.outer))
            tables.inner = MappingProxyType(dict(tables.inner))
        self._programs = MappingProxyType(dict(self._programs))
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @staticmethod
    def _match(table: Mapping[bytes, DecoderEntry], data: bytes) -> Optional[DecoderEntry]:
        for width in _ProgramTables.widths(table):
            if len(data) < width:
                continue
            entry = table.get(bytes(data[:width]))
            if entry is not None:
                return entry
        return None

    def program(self, program_id: Pubkey) -> Optional[ProgramEntry]:
        return self._programs.get(program_id)

    def is_known_program(self, program_id: Pubkey) -> bool:
        return program_id in self._programs

    def program_name(self, program_id: Optional[Pubkey]) -> str:
        entry = self._programs.get(program_id) if program_id is not None else None
        return entry.name if entry else "Unknown"

    def lookup_outer(self, program_id: Pubkey, data: bytes) -> Optional[DecoderEntry]:
        tables = self._tables.get(program_id)
        if tables is None:
            return None
        return self._match(tables.outer, data)

    def lookup_inner(self, program_id: Pubkey, data: bytes) -> Optional[DecoderEntry]:
        """Match a nested instruction.

        Self-logged events are tried first; a CPI into a known program
        carries ordinary instruction data and falls through to the outer
        sub-table.
        """
        tables = self._tables.get(program_id)
        if tables is None:
            return None
        return self._match(tables.inner, data) or self._match(tables.outer, data)

    def programs(self, family: Optional[str] = None) -> List[ProgramEntry]:
        return [
            entry for entry in self._programs.values()
            if family is None or entry.family == family
        ]

    def __contains__(self, program_id: Pubkey) -> bool:
        return program_id in self._programs

    def __len__(self) -> int:
        return len(self._programs)
