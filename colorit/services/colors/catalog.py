"""
Reference color catalogs and nearest-match search.

A ``ColorCatalog`` is an immutable, ordered list of named colors handed to
the engine by whoever loaded it. ``CatalogIndex`` answers "which catalog
color is closest to this one" with a linear scan and memoizes answers in a
``NearestMatchCache`` that is bound to one catalog instance: swapping the
catalog invalidates every cached answer.
``CatalogRegistry`` holds several named catalogs and serves the merge of
the active ones through an index.
"""

from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, TypeAdapter

from .space import Color, distance, from_hex, normalize_hex


@dataclass(frozen=True)
class VendorInfo:
    """Manufacturer details attached to a catalog color."""
    brand: Optional[str] = None
    line: Optional[str] = None
    code: Optional[str] = None
    locator: Optional[str] = None
    domain: Optional[str] = None  # e.g. "paint_architectural", "print"
    source: Optional[str] = None


@dataclass(frozen=True)
class CatalogEntry:
    """A named reference color."""
    name: str
    hex: str
    vendor: Optional[VendorInfo] = None

    @property
    def brand(self) -> Optional[str]:
        return self.vendor.brand if self.vendor else None

    @property
    def color(self) -> Color:
        return from_hex(self.hex)

    @property
    def merge_key(self) -> str:
        if self.vendor and self.vendor.code:
            return self.vendor.code
        return f"{self.name}|{self.hex.lower()}"


@dataclass(frozen=True)
class CatalogMatch:
    """Nearest catalog entry together with its RGB distance to the query."""
    entry: CatalogEntry
    distance: float


class VendorRecord(BaseModel):
    """Vendor block of an external catalog record."""
    model_config = ConfigDict(extra="ignore")

    brand: Optional[str] = None
    line: Optional[str] = None
    code: Optional[str] = None
    locator: Optional[str] = None
    domain: Optional[str] = None
    source: Optional[str] = None


class CatalogRecord(BaseModel):
    """External catalog record as produced by the asset loader."""
    model_config = ConfigDict(extra="ignore")

    name: str
    hex: str
    vendor: Optional[Union[VendorRecord, str]] = None
    brand: Optional[str] = None

    def to_entry(self) -> CatalogEntry:
        vendor = None
        if isinstance(self.vendor, VendorRecord):
            vendor = VendorInfo(**self.vendor.model_dump())
        elif isinstance(self.vendor, str):
            vendor = VendorInfo(brand=self.vendor)
        elif self.brand:
            vendor = VendorInfo(brand=self.brand)
        return CatalogEntry(name=self.name, hex=self.hex, vendor=vendor)


_records_adapter = TypeAdapter(List[CatalogRecord])


class ColorCatalog:
    """Immutable ordered collection of catalog entries."""

    def __init__(self, entries: Iterable[CatalogEntry] = (), name: str = "catalog"):
        self.name = name
        self._entries: Tuple[CatalogEntry, ...] = tuple(entries)
        self._rgb = np.array([entry.color.rgb for entry in self._entries], dtype=np.int64).reshape(-1, 3)

    @classmethod
    def from_records(cls, records: Iterable[Union[Mapping[str, Any], CatalogRecord]],
                     name: str = "catalog") -> "ColorCatalog":
        """
        Build a catalog from parsed records (e.g. decoded JSON).

        Raises:
            pydantic.ValidationError: If a record lacks a name or hex
        """
        parsed = _records_adapter.validate_python(list(records))
        catalog = cls((record.to_entry() for record in parsed), name=name)
        logger.info(f"Catalog '{name}' built with {len(catalog)} entries")
        return catalog

    @property
    def entries(self) -> Tuple[CatalogEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> CatalogEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"ColorCatalog(name={self.name!r}, entries={len(self._entries)})"

    def nearest_index(self, color: Color) -> Optional[int]:
        """Index of the first entry at minimal RGB distance, None if empty."""
        if not self._entries:
            return None
        diff = self._rgb - np.array(color.rgb, dtype=np.int64)
        return int((diff * diff).sum(axis=1).argmin())

    def find_exact(self, hex_color: str) -> Optional[CatalogEntry]:
        """First entry whose normalized hex equals the given one."""
        target = normalize_hex(hex_color)
        for entry in self._entries:
            if normalize_hex(entry.hex) == target:
                return entry
        return None

    def search(self, query: str) -> List[CatalogEntry]:
        """Case-insensitive match on name, hex, vendor code or brand."""
        if not query:
            return list(self._entries)
        q = query.lower()

        def matches(entry: CatalogEntry) -> bool:
            fields = [entry.name, entry.hex]
            if entry.vendor:
                fields.extend([entry.vendor.code, entry.vendor.brand])
            return any(q in f.lower() for f in fields if f)

        return [entry for entry in self._entries if matches(entry)]


def merge_catalogs(*catalogs: ColorCatalog, name: str = "merged") -> ColorCatalog:
    """Concatenate catalogs, keeping the first entry per vendor code or name/hex pair."""
    seen = set()
    merged = []
    for catalog in catalogs:
        for entry in catalog:
            key = entry.merge_key
            if key in seen:
                continue
            seen.add(key)
            merged.append(entry)
    return ColorCatalog(merged, name=name)


def find_nearest(color: Color, catalog: ColorCatalog) -> Optional[CatalogEntry]:
    """Uncached nearest-match scan; ties resolve to the earliest entry."""
    index = catalog.nearest_index(color)
    return None if index is None else catalog[index]


class NearestMatchCache:
    """
    Thread-safe memo of nearest-match answers for a single catalog.

    Lookups and stores name the catalog they were computed against; a
    catalog other than the bound one never reads or writes the cache, and
    ``bind`` to a new catalog drops everything stored so far.
    """

    def __init__(self):
        self._lock = Lock()
        self._entries: Dict[str, CatalogEntry] = {}
        self._catalog: Optional[ColorCatalog] = None
        self.hits = 0
        self.misses = 0

    @property
    def catalog(self) -> Optional[ColorCatalog]:
        return self._catalog

    def bind(self, catalog: Optional[ColorCatalog]):
        with self._lock:
            if self._catalog is not catalog:
                self._entries.clear()
                self._catalog = catalog

    def get(self, key: str, catalog: ColorCatalog) -> Optional[CatalogEntry]:
        with self._lock:
            entry = self._entries.get(key) if self._catalog is catalog else None
            if entry is None:
                self.misses += 1
            else:
                self.hits += 1
            return entry

    def put(self, key: str, entry: CatalogEntry, catalog: ColorCatalog) -> bool:
        """Store an answer; answers computed against a stale catalog are dropped."""
        with self._lock:
            if self._catalog is not catalog:
                return False
            self._entries[key] = entry
            return True

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CatalogIndex:
    """Nearest-match lookups against the currently installed catalog."""

    def __init__(self,
                 catalog: Optional[ColorCatalog] = None,
                 cache: Optional[NearestMatchCache] = None,
                 on_lookup: Optional[Callable[[bool], None]] = None):
        """
        Args:
            catalog: Initial catalog, an empty one when omitted
            cache: Cache to bind to the catalog, a fresh one when omitted
            on_lookup: Called with True on a cache hit and False on a miss
        """
        self.cache = cache if cache is not None else NearestMatchCache()
        self.on_lookup = on_lookup
        self._catalog = catalog if catalog is not None else ColorCatalog()
        self.cache.bind(self._catalog)

    @property
    def catalog(self) -> ColorCatalog:
        return self._catalog

    @catalog.setter
    def catalog(self, catalog: ColorCatalog):
        self.swap(catalog)

    def swap(self, catalog: ColorCatalog):
        """Install a new catalog and invalidate cached matches."""
        self._catalog = catalog
        self.cache.bind(catalog)
        logger.info(f"Catalog index now serving '{catalog.name}' ({len(catalog)} entries)")

    def nearest(self, color: Color, catalog: Optional[ColorCatalog] = None) -> Optional[CatalogEntry]:
        """
        Closest catalog entry to ``color``, or None for an empty catalog.

        Passing a catalog other than the installed one swaps it in first.
        """
        if catalog is not None and catalog is not self._catalog:
            self.swap(catalog)
        active = self._catalog
        key = normalize_hex(color.hex)

        entry = self.cache.get(key, active)
        if self.on_lookup:
            self.on_lookup(entry is not None)
        if entry is not None:
            return entry

        entry = find_nearest(color, active)
        if entry is not None:
            self.cache.put(key, entry, active)
        return entry

    def match(self, color: Color, catalog: Optional[ColorCatalog] = None) -> Optional[CatalogMatch]:
        """Like ``nearest`` but also reports the RGB distance."""
        entry = self.nearest(color, catalog)
        if entry is None:
            return None
        return CatalogMatch(entry=entry, distance=distance(color, entry.color))


class CatalogRegistry:
    """
    Named catalogs plus the active selection served through a ``CatalogIndex``.

    Catalogs are kept in load order. The active selection is merged with
    ``merge_catalogs`` (first entry per key wins, in load order) and installed
    into the index on every change, so nearest-match answers always come
    from the current selection.
    """

    def __init__(self, index: CatalogIndex):
        self.index = index
        self._lock = Lock()
        self._loaded: Dict[str, ColorCatalog] = {}
        self._active: List[str] = []

    @property
    def names(self) -> List[str]:
        with self._lock:
            return list(self._loaded)

    @property
    def active(self) -> List[str]:
        with self._lock:
            return list(self._active)

    def get(self, name: str) -> Optional[ColorCatalog]:
        with self._lock:
            return self._loaded.get(name)

    def load(self, name: str, catalog: ColorCatalog, activate: bool = True) -> ColorCatalog:
        """
        Register (or replace) a catalog under ``name``.

        Returns:
            The merged catalog now served by the index
        """
        with self._lock:
            self._loaded[name] = catalog
            if activate and name not in self._active:
                self._active.append(name)
            return self._publish()

    def unload(self, name: str) -> ColorCatalog:
        """
        Drop a catalog and remove it from the active selection.

        Raises:
            KeyError: If no catalog is loaded under ``name``
        """
        with self._lock:
            if name not in self._loaded:
                raise KeyError(name)
            del self._loaded[name]
            self._active = [n for n in self._active if n != name]
            return self._publish()

    def activate(self, names: Iterable[str]) -> ColorCatalog:
        """
        Replace the active selection.

        Raises:
            KeyError: If a name is not loaded
        """
        requested = list(dict.fromkeys(names))
        with self._lock:
            missing = [n for n in requested if n not in self._loaded]
            if missing:
                raise KeyError(", ".join(missing))
            self._active = requested
            return self._publish()

    def clear(self) -> ColorCatalog:
        with self._lock:
            self._loaded.clear()
            self._active = []
            return self._publish()

    def _publish(self) -> ColorCatalog:
        selected = [name for name in self._loaded if name in self._active]
        if len(selected) == 1:
            merged = self._loaded[selected[0]]
        else:
            merged = merge_catalogs(*(self._loaded[n] for n in selected),
                                    name="+".join(selected) or "catalog")
        self.index.swap(merged)
        return merged
