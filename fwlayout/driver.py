from .engine import LayoutEngine
from .layout import DEFAULT_LAYOUT
from .layoutmap import LayoutMap
from .loader import load_layout_dict, load_layout_script
from typing import Any, Iterable, Optional, TextIO

def plan(
		scripts: Optional[str | list[tuple[Optional[str], str]]]=None,
		layout: Optional[dict[str, Any]]=None,
		sizes: Optional[dict[str, int]]=None,
		referenced: Optional[Iterable[str]]=None,
		basedir: Optional[str]=None,
		trace: Optional[TextIO]=None
) -> LayoutMap:
	# Layout scripts take priority, then a layout dict, then the built-in layout
	if scripts:
		regions, sections = load_layout_script(scripts, sizes=sizes)
	else:
		if layout is None:
			layout = DEFAULT_LAYOUT
		regions, sections = load_layout_dict(layout, sizes=sizes, basedir=basedir)
	
	engine = LayoutEngine(regions, sections, referenced=referenced, trace=trace)
	return engine.resolve()
