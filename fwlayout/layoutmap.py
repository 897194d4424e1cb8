import json
import re
from .errors import DuplicateSymbol
from .geometry import *

from typing import Any, Iterator, Optional, TextIO


class LayoutEntry(object):
	"""Final placement of one section. Never modified once created."""
	
	__slots__ = ("name", "load_address", "run_address", "size", "storage", "run", "align")
	
	def __init__(
			self,
			name: str,
			load_address: int,
			run_address: int,
			size: int,
			storage: str,
			run: str,
			align: int=1
	):
		object.__setattr__(self, "name", name)
		object.__setattr__(self, "load_address", load_address)
		object.__setattr__(self, "run_address", run_address)
		object.__setattr__(self, "size", size)
		object.__setattr__(self, "storage", storage)
		object.__setattr__(self, "run", run)
		object.__setattr__(self, "align", align)
	
	def __setattr__(self, name, value):
		raise AttributeError("LayoutEntry is read-only")
	
	@property
	def is_split(self) -> bool:
		return self.storage != self.run
	
	def _key(self) -> tuple:
		return tuple(getattr(self, x) for x in self.__slots__)
	
	def __eq__(self, other):
		if not isinstance(other, LayoutEntry):
			return NotImplemented
		return self._key() == other._key()
	
	def __hash__(self):
		return hash(self._key())
	
	def __repr__(self):
		s = "LayoutEntry(%r, load=%s" % (self.name, h32(self.load_address))
		if self.is_split:
			s += ", run=%s" % h32(self.run_address)
		return s + ", size=0x%X)" % self.size
	
	def to_dict(self) -> dict[str, Any]:
		return {
			"name": self.name,
			"load_address": self.load_address,
			"run_address": self.run_address,
			"size": self.size,
			"storage": self.storage,
			"run": self.run,
			"align": self.align,
		}


class RegionUsage(object):
	def __init__(self, name: str, origin: int, length: int, used: int):
		self.name: str = name
		self.origin: int = origin
		self.length: int = length
		self.used: int = used
	
	@property
	def free(self) -> int:
		return max(self.length - self.used, 0)
	
	def __eq__(self, other):
		if not isinstance(other, RegionUsage):
			return NotImplemented
		return self.to_dict() == other.to_dict()
	
	def __repr__(self):
		return "RegionUsage(%r, used=0x%X, free=0x%X)" % (self.name, self.used, self.free)
	
	def to_dict(self) -> dict[str, Any]:
		return {
			"name": self.name,
			"origin": self.origin,
			"length": self.length,
			"used": self.used,
			"free": self.free,
		}


def symbol_name(section: str) -> str:
	"""Turn a section name like ".flexspi_code" into a C identifier."""
	return re.sub(r'[^a-zA-Z0-9_]', "_", section.lstrip("."))


class LayoutMap(object):
	def __init__(
			self,
			entries: list[LayoutEntry],
			regions: list[RegionUsage],
			discarded: Optional[list[str]]=None
	):
		self.entries: tuple[LayoutEntry, ...] = tuple(entries)
		self.regions: tuple[RegionUsage, ...] = tuple(regions)
		self.discarded: tuple[str, ...] = tuple(discarded or ())
		self.entmap: dict[str, LayoutEntry] = {x.name: x for x in self.entries}
	
	def __getitem__(self, name: str) -> LayoutEntry:
		return self.entmap[name]
	
	def __contains__(self, name: str) -> bool:
		return name in self.entmap
	
	def __iter__(self) -> Iterator[LayoutEntry]:
		return iter(self.entries)
	
	def __len__(self):
		return len(self.entries)
	
	def __eq__(self, other):
		if not isinstance(other, LayoutMap):
			return NotImplemented
		return (
			self.entries == other.entries
			and self.regions == other.regions
			and self.discarded == other.discarded
		)
	
	def usage(self, region: str) -> RegionUsage:
		for usage in self.regions:
			if usage.name == region:
				return usage
		raise KeyError(region)
	
	def to_dict(self) -> dict[str, Any]:
		return {
			"sections": [x.to_dict() for x in self.entries],
			"regions": [x.to_dict() for x in self.regions],
			"discarded": list(self.discarded),
		}
	
	def to_json(self) -> str:
		return json.dumps(self.to_dict(), indent=2) + "\n"
	
	def dump(self, fp: TextIO):
		fp.write("Memory regions\n\n")
		fp.write("%-16s %-10s %-10s %-10s %-10s %s\n" % ("Name", "Origin", "Length", "Used", "Free", "Use%"))
		for usage in self.regions:
			pct = 100.0 * usage.used / usage.length
			fp.write("%-16s %s %-10s 0x%08X 0x%08X %5.1f%%\n" % (
				usage.name, h32(usage.origin), hsize(usage.length),
				usage.used, usage.free, pct
			))
		
		fp.write("\nSections\n\n")
		fp.write("%-24s %-10s %-10s %-10s %s\n" % ("Name", "Load", "Run", "Size", "Regions"))
		for entry in self.entries:
			where = entry.storage
			if entry.is_split:
				where = "%s AT> %s" % (entry.run, entry.storage)
			fp.write("%-24s %s %s 0x%08X %s\n" % (
				entry.name, h32(entry.load_address), h32(entry.run_address),
				entry.size, where
			))
		
		if self.discarded:
			fp.write("\nDiscarded sections\n\n")
			for name in self.discarded:
				fp.write(f"{name}\n")
	
	def symbols(self) -> list[tuple[str, LayoutEntry]]:
		"""
		Linker symbol stem for every entry. Raises DuplicateSymbol when two
		section names reduce to the same identifier, as ld would silently keep
		only the last assignment.
		"""
		owners: dict[str, str] = {}
		result: list[tuple[str, LayoutEntry]] = []
		for entry in self.entries:
			sym = symbol_name(entry.name)
			if sym in owners:
				raise DuplicateSymbol(
					f"Sections {owners[sym]} and {entry.name} both map to linker symbols __{sym}_*__",
					section=entry.name
				)
			owners[sym] = entry.name
			result.append((sym, entry))
		return result
	
	def emit_ld(self, fp: TextIO):
		"""
		Write a GNU ld fragment: the MEMORY block and, for every section, the
		symbols startup code needs to copy it from its load to its run address.
		"""
		symbols = self.symbols()
		
		fp.write("MEMORY\n{\n")
		for usage in self.regions:
			fp.write("\t%s : ORIGIN = %s, LENGTH = %s\n" % (
				usage.name, h32(usage.origin), hsize(usage.length)
			))
		fp.write("}\n\n")
		
		for sym, entry in symbols:
			fp.write("__%s_load__ = %s;\n" % (sym, h32(entry.load_address)))
			fp.write("__%s_run__ = %s;\n" % (sym, h32(entry.run_address)))
			fp.write("__%s_size__ = 0x%X;\n" % (sym, entry.size))
