from .ast import Location
from .content import Content
from .errors import *
from .geometry import is_pow2

from typing import Iterator, Optional


class Section(object):
	def __init__(
			self,
			name: str,
			storage: str,
			run: Optional[str]=None,
			align: int=1,
			keep: bool=False,
			content: Optional[Content]=None,
			loc: Optional[Location]=None
	):
		self.name: str = name
		self.storage: str = storage
		self.run: Optional[str] = run
		self.align: int = align
		self.keep: bool = keep
		self.content: Optional[Content] = content
		self.loc: Optional[Location] = loc
	
	@property
	def is_split(self) -> bool:
		"""True when the section is stored in one region and run from another."""
		return self.run is not None and self.run != self.storage
	
	@property
	def run_region(self) -> str:
		return self.run if self.is_split else self.storage
	
	def __repr__(self):
		s = "Section(%r, %r" % (self.name, self.storage)
		if self.is_split:
			s += ", run=%r" % self.run
		if self.align != 1:
			s += ", align=%d" % self.align
		if self.keep:
			s += ", keep=True"
		return s + ")"
	
	def size(self) -> int:
		if self.content is None:
			raise MissingContent(
				f"Section {self.name} has no content to take its size from",
				section=self.name, loc=self.loc
			)
		
		try:
			nbytes = self.content.size()
		except MissingContent as e:
			raise MissingContent(
				f"Section {self.name}: {e.detail}",
				section=self.name, loc=self.loc
			) from None
		
		if nbytes < 0:
			raise MissingContent(
				f"Section {self.name} has negative size {nbytes}",
				section=self.name, loc=self.loc
			)
		return nbytes
	
	def check(self) -> list[LayoutError]:
		problems: list[LayoutError] = []
		
		if not isinstance(self.align, int) or not is_pow2(self.align):
			problems.append(InvalidAlignment(
				f"Section {self.name} alignment {self.align!r} is not a power of two",
				section=self.name, loc=self.loc
			))
		
		try:
			self.size()
		except MissingContent as e:
			problems.append(e)
		
		return problems


class SectionList(object):
	"""Sections in declaration order, which is also their placement order."""
	
	def __init__(self, sections: Optional[list[Section]]=None):
		self.sections: list[Section] = []
		self.secmap: dict[str, Section] = {}
		
		for section in sections or ():
			self.append(section)
	
	def append(self, section: Section) -> Section:
		if section.name in self.secmap:
			raise DuplicateSection(
				f"Section {section.name} is already defined",
				section=section.name, loc=section.loc
			)
		
		self.sections.append(section)
		self.secmap[section.name] = section
		return section
	
	def lookup(self, name: str) -> Section:
		return self.secmap[name]
	
	def __contains__(self, name: str) -> bool:
		return name in self.secmap
	
	def __iter__(self) -> Iterator[Section]:
		return iter(self.sections)
	
	def __len__(self):
		return len(self.sections)
