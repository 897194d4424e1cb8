from .ast import Location
from .errors import *
from .geometry import *

from typing import Iterator, Optional


class Region(object):
	def __init__(self, name: str, origin: int, length: int, loc: Optional[Location]=None):
		self.name: str = name
		self.origin: int = origin
		self.length: int = length
		self.loc: Optional[Location] = loc
	
	@property
	def end(self) -> int:
		return self.origin + self.length
	
	def contains(self, addr: int, size: int=0) -> bool:
		return self.origin <= addr and addr + size <= self.end
	
	def overlaps(self, other: 'Region') -> bool:
		return not (self.end <= other.origin or other.end <= self.origin)
	
	def __repr__(self):
		return "Region(%r, %s, %s)" % (self.name, h32(self.origin), hsize(self.length))
	
	def __str__(self):
		return "%s [%s-%s)" % (self.name, h32(self.origin), h32(self.end))


class RegionTable(object):
	"""
	Named, disjoint memory regions. Regions are defined one at a time, then
	the table is frozen (which checks that no two regions intersect) before
	any section is placed into it.
	"""
	
	def __init__(self, address_bits: int=ADDRESS_BITS):
		self.address_bits: int = address_bits
		self.regions: list[Region] = []
		self.regmap: dict[str, Region] = {}
		self.frozen: bool = False
	
	def define(self, name: str, origin: int, length: int, loc: Optional[Location]=None) -> Region:
		if self.frozen:
			raise RuntimeError("Cannot define region %r in a frozen region table" % name)
		
		if name in self.regmap:
			raise DuplicateRegion(
				f"Region {name} is already defined",
				region=name, loc=loc
			)
		
		if origin < 0 or origin >= address_limit(self.address_bits):
			raise InvalidRegion(
				f"Region {name} origin 0x{origin:X} is outside the {self.address_bits}-bit address space",
				region=name, loc=loc
			)
		
		if length <= 0:
			raise InvalidRegion(
				f"Region {name} has non-positive length {length}",
				region=name, loc=loc
			)
		
		if origin + length > address_limit(self.address_bits):
			raise InvalidRegion(
				f"Region {name} at {h32(origin)} with length 0x{length:X} overflows the {self.address_bits}-bit address space",
				region=name, loc=loc
			)
		
		region = Region(name, origin, length, loc=loc)
		self.regions.append(region)
		self.regmap[name] = region
		return region
	
	def lookup(self, name: str, loc: Optional[Location]=None) -> Region:
		try:
			return self.regmap[name]
		except KeyError:
			raise UnknownRegion(f"No region named {name}", region=name, loc=loc) from None
	
	def freeze(self) -> None:
		if self.frozen:
			return
		
		# Report the first intersecting pair, in declaration order
		for i, region in enumerate(self.regions):
			for other in self.regions[i+1:]:
				if region.overlaps(other):
					raise RegionOverlap(
						f"Region {region} overlaps region {other}",
						region=region.name, other=other.name, loc=other.loc
					)
		
		self.frozen = True
	
	# Used by ORIGIN() and LENGTH() in layout scripts
	def get_origin(self, name: str, loc: Optional[Location]=None) -> int:
		return self.lookup(name, loc=loc).origin
	
	def get_length(self, name: str, loc: Optional[Location]=None) -> int:
		return self.lookup(name, loc=loc).length
	
	def __contains__(self, name: str) -> bool:
		return name in self.regmap
	
	def __iter__(self) -> Iterator[Region]:
		return iter(self.regions)
	
	def __len__(self):
		return len(self.regions)
