from .ast import Location

from typing import Any, Optional, TextIO


class LayoutError(Exception):
	"""
	Base class for every problem found while building or resolving a layout.
	
	Each instance doubles as a diagnostic record: `kind`, the region and/or
	section it concerns, a human readable detail string, and the location in
	the layout script that declared the offending item (when known).
	"""
	KIND = "LayoutError"
	
	def __init__(
			self,
			detail: str,
			region: Optional[str]=None,
			section: Optional[str]=None,
			loc: Optional[Location]=None
	):
		super().__init__(detail)
		self.detail: str = detail
		self.region: Optional[str] = region
		self.section: Optional[str] = section
		self.loc: Optional[Location] = loc
	
	@property
	def kind(self) -> str:
		return self.KIND
	
	def __repr__(self):
		args = [repr(self.detail)]
		if self.region is not None:
			args.append("region=%r" % self.region)
		if self.section is not None:
			args.append("section=%r" % self.section)
		return "%s(%s)" % (self.__class__.__name__, ", ".join(args))
	
	def __str__(self):
		return f"{self.kind}: {self.detail}"
	
	def to_dict(self) -> dict[str, Any]:
		return {
			"kind": self.kind,
			"region": self.region,
			"section": self.section,
			"detail": self.detail,
		}
	
	def show(self, fp: TextIO):
		fp.write(f"Layout error: {self}\n")
		if self.loc is not None:
			self.loc.show(fp)


class DuplicateRegion(LayoutError):
	KIND = "DuplicateRegion"

class InvalidRegion(LayoutError):
	KIND = "InvalidRegion"

class UnknownRegion(LayoutError):
	KIND = "UnknownRegion"

class DuplicateSection(LayoutError):
	KIND = "DuplicateSection"

class MissingContent(LayoutError):
	KIND = "MissingContent"

class InvalidAlignment(LayoutError):
	KIND = "InvalidAlignment"

class InvalidLayout(LayoutError):
	KIND = "InvalidLayout"

class DuplicateSymbol(LayoutError):
	KIND = "DuplicateSymbol"

class RegionOverflow(LayoutError):
	KIND = "RegionOverflow"
	
	def __init__(
			self,
			detail: str,
			region: str,
			section: str,
			overflow: int,
			loc: Optional[Location]=None
	):
		super().__init__(detail, region=region, section=section, loc=loc)
		self.overflow: int = overflow

class RegionOverlap(LayoutError):
	KIND = "RegionOverlap"
	
	def __init__(self, detail: str, region: str, other: str, loc: Optional[Location]=None):
		super().__init__(detail, region=region, loc=loc)
		self.other: str = other
	
	def to_dict(self) -> dict[str, Any]:
		d = super().to_dict()
		d["other"] = self.other
		return d


class LayoutFailed(LayoutError):
	KIND = "LayoutFailed"
	
	def __init__(self, diagnostics: list[LayoutError], regions: Optional[list]=None):
		super().__init__("%d layout error(s)" % len(diagnostics))
		self.diagnostics: list[LayoutError] = diagnostics
		
		# Region usage as computed by the failed pass, for reporting only
		self.regions: list = regions or []
	
	def show(self, fp: TextIO):
		for diag in self.diagnostics:
			diag.show(fp)
