import os
from .ast import *
from .content import *
from .errors import InvalidLayout
from .geometry import ADDRESS_BITS, parse_size
from .parse import parse_layout
from .regions import RegionTable
from .sections import Section, SectionList

from typing import Any, Optional


REGION_KEYS = {"name", "origin", "length"}
SECTION_KEYS = {"name", "storage", "run", "align", "keep", "size", "file"}


def check_desc(what: str, desc: Any, allowed: set[str], required: set[str]):
	if not isinstance(desc, dict):
		raise InvalidLayout(f"Each {what} must be a JSON object, not {desc!r}")
	
	unknown = set(desc) - allowed
	if unknown:
		raise InvalidLayout(f"Unknown {what} attribute(s) {', '.join(sorted(unknown))} in {desc!r}")
	
	missing = required - set(desc)
	if missing:
		raise InvalidLayout(f"Missing {what} attribute(s) {', '.join(sorted(missing))} in {desc!r}")

def desc_size(desc: dict[str, Any], key: str, default: Optional[int]=None) -> Optional[int]:
	value = desc.get(key, default)
	if value is None:
		return None
	try:
		return parse_size(value)
	except (TypeError, ValueError, AttributeError):
		raise InvalidLayout(f"Bad {key} {value!r} in {desc!r}") from None

def const_value(
		expr: Expr,
		regions: RegionTable,
		region: Optional[str]=None,
		section: Optional[str]=None
) -> int:
	try:
		return expr.value(regions)
	except ExprError as e:
		raise InvalidLayout(f"{e} in the definition of {region or section}", region=region, section=section, loc=e.loc) from None


def bind_content(
		name: str,
		content: Optional[Content],
		sizes: Optional[dict[str, int]]
) -> Optional[Content]:
	# Sections without their own SIZE/FILE take their size from the build
	if content is None and sizes is not None:
		return TableContent(sizes, name)
	return content


def section_from_desc(
		desc: dict[str, Any],
		sizes: Optional[dict[str, int]]=None,
		basedir: Optional[str]=None
) -> Section:
	check_desc("section", desc, SECTION_KEYS, {"name", "storage"})
	
	name: str = desc["name"]
	content = content_for(desc_size(desc, "size"), desc.get("file"), basedir=basedir)
	return Section(
		name,
		storage=desc["storage"],
		run=desc.get("run"),
		align=desc_size(desc, "align", 1),
		keep=bool(desc.get("keep", False)),
		content=bind_content(name, content, sizes)
	)


def load_layout_dict(
		layout: dict[str, Any],
		sizes: Optional[dict[str, int]]=None,
		basedir: Optional[str]=None
) -> tuple[RegionTable, SectionList]:
	"""
	Build the region table and section list from a JSON-shaped layout.
	Malformed descriptions raise InvalidLayout.
	"""
	if not isinstance(layout, dict):
		raise InvalidLayout(f"A layout must be a JSON object, not {type(layout).__name__}")
	
	regions = RegionTable(layout.get("address_bits", ADDRESS_BITS))
	for desc in layout.get("regions", []):
		check_desc("region", desc, REGION_KEYS, REGION_KEYS)
		regions.define(desc["name"], desc_size(desc, "origin"), desc_size(desc, "length"))
	
	sections = SectionList()
	for desc in layout.get("sections", []):
		sections.append(section_from_desc(desc, sizes=sizes, basedir=basedir))
	
	regions.freeze()
	return regions, sections


def section_from_decl(
		decl: SectionDecl,
		regions: RegionTable,
		sizes: Optional[dict[str, int]]=None,
		basedir: Optional[str]=None
) -> Section:
	align = 1
	keep = False
	content: Optional[Content] = None
	
	# Later attributes override earlier ones of the same kind
	for attr in decl.attrs:
		if attr.name == "ALIGN":
			align = const_value(attr.arg, regions, section=decl.name)
		elif attr.name == "KEEP":
			keep = True
		elif attr.name == "SIZE":
			content = FixedContent(const_value(attr.arg, regions, section=decl.name))
		elif attr.name == "FILE":
			content = content_for(file=attr.arg, basedir=basedir)
		else:
			raise ValueError(f"Unknown section attribute: {attr.name}")
	
	storage = decl.region
	run = None
	if decl.load_region is not None:
		storage = decl.load_region
		run = decl.region
	
	return Section(
		decl.name,
		storage=storage,
		run=run,
		align=align,
		keep=keep,
		content=bind_content(decl.name, content, sizes),
		loc=decl.loc
	)


def load_layout_script(
		scripts: str | list[tuple[Optional[str], str]],
		sizes: Optional[dict[str, int]]=None,
		address_bits: int=ADDRESS_BITS
) -> tuple[RegionTable, SectionList]:
	"""
	Build the region table and section list from one or more layout scripts.
	All scripts share one region table, so later scripts may refer to regions
	declared by earlier ones in ORIGIN() and LENGTH().
	"""
	if isinstance(scripts, str):
		scripts = [(None, scripts)]
	
	regions = RegionTable(address_bits)
	sections = SectionList()
	
	for filename, text in scripts:
		basedir: Optional[str] = None
		if filename is not None:
			basedir = os.path.dirname(os.path.abspath(filename))
		
		for decl in parse_layout(text, filename):
			if isinstance(decl, RegionDecl):
				regions.define(
					decl.name,
					const_value(decl.origin, regions, region=decl.name),
					const_value(decl.length, regions, region=decl.name),
					loc=decl.loc
				)
			else:
				sections.append(section_from_decl(decl, regions, sizes=sizes, basedir=basedir))
	
	regions.freeze()
	return regions, sections
