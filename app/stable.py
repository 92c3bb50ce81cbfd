"""Durable regions over a single SQLAlchemy database.

The database is partitioned into numbered regions. Each region is an ordered
byte-keyed map stored in ``region_entries``; rows of different regions never
alias. Every write commits before returning, so whatever a region holds
survives a restart.
"""

import logging
import struct
from typing import Generic, Iterator, Optional, Tuple, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from .errors import RecordTooLarge, RegionConflict
from .models import RegionEntry

logger = logging.getLogger(__name__)

MAX_REGION_ID = 254

K = TypeVar("K")
V = TypeVar("V")


class Region:
    """Byte-level handle on one region."""

    def __init__(self, region_id: int, name: str, session_factory: sessionmaker):
        self.region_id = region_id
        self.name = name
        self._session_factory = session_factory

    def _entry(self, db: Session, key: bytes) -> Optional[RegionEntry]:
        return db.get(RegionEntry, (self.region_id, key))

    def get(self, key: bytes) -> Optional[bytes]:
        with self._session_factory() as db:
            entry = self._entry(db, key)
            return entry.value if entry else None

    def contains(self, key: bytes) -> bool:
        return self.get(key) is not None

    def insert(self, key: bytes, value: bytes) -> Optional[bytes]:
        """Store ``value`` under ``key``, returning the value it replaced."""
        with self._session_factory() as db:
            entry = self._entry(db, key)
            previous = None
            if entry is None:
                db.add(RegionEntry(region_id=self.region_id, key=key, value=value))
            else:
                previous = entry.value
                entry.value = value
            db.commit()
            return previous

    def remove(self, key: bytes) -> Optional[bytes]:
        with self._session_factory() as db:
            entry = self._entry(db, key)
            if entry is None:
                return None
            previous = entry.value
            db.delete(entry)
            db.commit()
            return previous

    def __len__(self) -> int:
        with self._session_factory() as db:
            stmt = select(func.count()).select_from(RegionEntry).where(
                RegionEntry.region_id == self.region_id
            )
            return db.scalar(stmt)

    def __iter__(self) -> Iterator[Tuple[bytes, bytes]]:
        with self._session_factory() as db:
            stmt = (
                select(RegionEntry.key, RegionEntry.value)
                .where(RegionEntry.region_id == self.region_id)
                .order_by(RegionEntry.key)
            )
            rows = db.execute(stmt).all()
        for key, value in rows:
            yield key, value


class RegionAllocator:
    """Hands out one Region per region id; ids are fixed for the life of the data."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._regions: dict[int, Region] = {}

    def get(self, region_id: int, name: str) -> Region:
        if not 0 <= region_id <= MAX_REGION_ID:
            raise ValueError(f"region id must be between 0 and {MAX_REGION_ID}, got {region_id}")
        region = self._regions.get(region_id)
        if region is not None:
            if region.name != name:
                raise RegionConflict(region_id, region.name, name)
            return region
        region = Region(region_id, name, self._session_factory)
        self._regions[region_id] = region
        logger.debug("Allocated region %d for %s", region_id, name)
        return region


class Cell:
    """A single persisted integer stored in its own region."""

    _KEY = b"\x00"

    def __init__(self, region: Region, initial: int = 0):
        self._region = region
        if not region.contains(self._KEY):
            self.set(initial)

    def get(self) -> int:
        return U64Key.decode(self._region.get(self._KEY))

    def set(self, value: int) -> None:
        self._region.insert(self._KEY, U64Key.encode(value))


class U64Key:
    """Big-endian u64 keys, so byte order matches numeric order."""

    _format = struct.Struct(">Q")

    @classmethod
    def encode(cls, key: int) -> bytes:
        return cls._format.pack(key)

    @classmethod
    def decode(cls, data: bytes) -> int:
        return cls._format.unpack(data)[0]


class U64PairKey:
    _format = struct.Struct(">QQ")

    @classmethod
    def encode(cls, key: Tuple[int, int]) -> bytes:
        return cls._format.pack(*key)

    @classmethod
    def decode(cls, data: bytes) -> Tuple[int, int]:
        return cls._format.unpack(data)


class StableMap(Generic[K, V]):
    """Typed mapping over a region.

    Values must provide ``to_bytes()``, ``from_bytes()`` and ``MAX_SIZE``
    (see ``schemas.StorableModel``). The size bound is checked on every
    insert and an oversized value is never written.
    """

    def __init__(self, region: Region, key_codec, value_type: Type[V]):
        self._region = region
        self._keys = key_codec
        self._value_type = value_type

    def get(self, key: K) -> Optional[V]:
        data = self._region.get(self._keys.encode(key))
        if data is None:
            return None
        return self._value_type.from_bytes(data)

    def contains_key(self, key: K) -> bool:
        return self._region.contains(self._keys.encode(key))

    def check(self, value: V) -> bytes:
        """Encode ``value``, raising RecordTooLarge if it exceeds the bound."""
        data = value.to_bytes()
        max_size = self._value_type.MAX_SIZE
        if len(data) > max_size:
            raise RecordTooLarge(self._value_type.__name__, len(data), max_size)
        return data

    def insert(self, key: K, value: V) -> Optional[V]:
        data = self.check(value)
        previous = self._region.insert(self._keys.encode(key), data)
        if previous is None:
            return None
        return self._value_type.from_bytes(previous)

    def remove(self, key: K) -> Optional[V]:
        previous = self._region.remove(self._keys.encode(key))
        if previous is None:
            return None
        return self._value_type.from_bytes(previous)

    def __len__(self) -> int:
        return len(self._region)

    def items(self) -> Iterator[Tuple[K, V]]:
        for key, value in self._region:
            yield self._keys.decode(key), self._value_type.from_bytes(value)
