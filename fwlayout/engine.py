from .errors import *
from .geometry import *
from .layoutmap import LayoutEntry, LayoutMap, RegionUsage
from .regions import Region, RegionTable
from .sections import Section, SectionList

from typing import Iterable, Optional, TextIO


UNRESOLVED = "unresolved"
RESOLVED = "resolved"
FAILED = "failed"


class LayoutEngine(object):
	"""
	Assigns load and run addresses to every section in a single pass.
	
	Each region keeps one cursor, starting at its origin. Sections are taken in
	declaration order; a section's storage region cursor is rounded up to the
	section's alignment to give its load address, then moved past the section.
	Sections that run from a different region than they are stored in do the
	same against the run region's cursor to get their run address.
	
	Problems are collected rather than raised one at a time, so a single pass
	reports every section that does not fit. An engine resolves exactly once.
	"""
	
	def __init__(
			self,
			regions: RegionTable,
			sections: SectionList,
			referenced: Optional[Iterable[str]]=None,
			trace: Optional[TextIO]=None
	):
		self.regions: RegionTable = regions
		self.sections: SectionList = sections
		
		# When set, sections that are neither retained nor referenced are dropped
		self.referenced: Optional[set[str]] = None
		if referenced is not None:
			self.referenced = set(referenced)
		
		self.trace: Optional[TextIO] = trace
		self.state: str = UNRESOLVED
		self.layout_map: Optional[LayoutMap] = None
		self.diagnostics: list[LayoutError] = []
		self.cursors: dict[str, int] = {}
	
	def log(self, msg: str):
		if self.trace is not None:
			print(msg, file=self.trace)
	
	def is_live(self, section: Section) -> bool:
		if section.keep or self.referenced is None:
			return True
		return section.name in self.referenced
	
	def report(self, diag: LayoutError):
		self.diagnostics.append(diag)
		self.log(f"error: {diag}")
	
	def allocate(self, region: Region, section: Section, size: int) -> int:
		addr = align_ceil(self.cursors[region.name], section.align)
		end = addr + size
		if end > region.end:
			self.report(RegionOverflow(
				f"Section {section.name} (0x{size:X} bytes at {h32(addr)}) overflows region {region.name} by 0x{end - region.end:X} bytes",
				region=region.name, section=section.name,
				overflow=end - region.end, loc=section.loc
			))
		
		# Keep counting past the end so later overflows report the real demand
		self.cursors[region.name] = end
		return addr
	
	def usage(self) -> list[RegionUsage]:
		return [
			RegionUsage(r.name, r.origin, r.length, self.cursors[r.name] - r.origin)
			for r in self.regions
		]
	
	def resolve(self) -> LayoutMap:
		if self.state != UNRESOLVED:
			raise RuntimeError(f"Layout engine already {self.state}")
		
		# Regions must be disjoint before any section is looked at
		try:
			self.regions.freeze()
		except RegionOverlap as e:
			self.state = FAILED
			self.diagnostics.append(e)
			raise
		
		self.cursors = {r.name: r.origin for r in self.regions}
		entries: list[LayoutEntry] = []
		discarded: list[str] = []
		
		for section in self.sections:
			if not self.is_live(section):
				discarded.append(section.name)
				self.log(f"discard {section.name}")
				continue
			
			problems = section.check()
			try:
				storage = self.regions.lookup(section.storage, loc=section.loc)
			except UnknownRegion as e:
				e.section = section.name
				problems.append(e)
			
			run: Optional[Region] = None
			if section.is_split:
				try:
					run = self.regions.lookup(section.run, loc=section.loc)
				except UnknownRegion as e:
					e.section = section.name
					problems.append(e)
			
			if problems:
				for diag in problems:
					self.report(diag)
				continue
			
			size = section.size()
			load_addr = self.allocate(storage, section, size)
			run_addr = load_addr
			if run is not None:
				run_addr = self.allocate(run, section, size)
			
			entries.append(LayoutEntry(
				section.name, load_addr, run_addr, size,
				storage.name, (run or storage).name, section.align
			))
			if run is not None:
				self.log(f"place {section.name} load {h32(load_addr)} in {storage.name}, run {h32(run_addr)} in {run.name}, size 0x{size:X}")
			else:
				self.log(f"place {section.name} at {h32(load_addr)} in {storage.name}, size 0x{size:X}")
		
		if self.diagnostics:
			self.state = FAILED
			raise LayoutFailed(self.diagnostics, regions=self.usage())
		
		self.layout_map = LayoutMap(entries, self.usage(), discarded)
		self.state = RESOLVED
		return self.layout_map


def resolve(
		regions: RegionTable,
		sections: SectionList,
		referenced: Optional[Iterable[str]]=None,
		trace: Optional[TextIO]=None
) -> LayoutMap:
	return LayoutEngine(regions, sections, referenced=referenced, trace=trace).resolve()
