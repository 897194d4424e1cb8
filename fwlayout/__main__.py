import argparse
import json
import os
import subprocess
import sys
from .content import load_size_table, objdump_section_sizes
from .driver import plan
from .errors import LayoutError, LayoutFailed
from .layoutmap import LayoutMap
from typing import Optional


def write_output(layout_map: LayoutMap, fmt: str, fp):
	if fmt == "json":
		fp.write(layout_map.to_json())
	elif fmt == "ld":
		layout_map.emit_ld(fp)
	else:
		layout_map.dump(fp)


def main(argv: Optional[list[str]]=None) -> int:
	parser = argparse.ArgumentParser(
		prog="fwlayout",
		description="Place firmware sections into memory regions and print the resolved address map."
	)
	
	parser.add_argument(
		"inputs", metavar="layout.ld",
		nargs="*",
		help="Layout script(s) with MEMORY and SECTIONS blocks"
	)
	parser.add_argument(
		"--layout", metavar="<layout.json>",
		help="JSON layout file for defining regions and sections"
	)
	parser.add_argument(
		"--sizes", metavar="<sizes.json>",
		help="JSON object mapping section names to their sizes in bytes"
	)
	parser.add_argument(
		"--elf", metavar="<firmware.elf>",
		help="Take section sizes from the section headers of a linked ELF file"
	)
	parser.add_argument(
		"--objdump", metavar="<objdump>",
		default="objdump",
		help="objdump binary used with --elf (default: %(default)s)"
	)
	parser.add_argument(
		"--gc-sections", action="store_true",
		help="Drop sections that are neither KEEP nor named by --referenced"
	)
	parser.add_argument(
		"-r", "--referenced", metavar="<section>",
		action="append", default=[],
		help="Section reachable from the rest of the build (with --gc-sections)"
	)
	parser.add_argument(
		"-f", "--format",
		choices=["map", "json", "ld"], default="map",
		help="Output format (default: %(default)s)"
	)
	parser.add_argument(
		"-o", "--output", metavar="<output>",
		default="-",
		help="Output file"
	)
	parser.add_argument(
		"--trace", metavar="<trace.txt>",
		nargs="?", type=argparse.FileType("w"), const="-",
		help="Log every placement decision to the specified file"
	)
	args = parser.parse_args(argv)
	
	if args.inputs and args.layout:
		parser.error("Layout scripts and --layout are mutually exclusive")
	
	if args.output == "-" and args.trace == sys.stdout:
		parser.error("Cannot write both the layout map and the trace to stdout")
	
	sizes: Optional[dict[str, int]] = None
	if args.sizes:
		try:
			sizes = load_size_table(args.sizes)
		except (OSError, TypeError, ValueError, AttributeError) as e:
			sys.stderr.write(f"Failed to read section sizes from {args.sizes}: {e}\n")
			return 1
	if args.elf:
		try:
			elf_sizes = objdump_section_sizes(args.objdump, args.elf)
		except (OSError, subprocess.CalledProcessError) as e:
			sys.stderr.write(f"Failed to read sections from {args.elf}: {e}\n")
			return 1
		
		# Explicit --sizes entries win over the ELF
		sizes = {**elf_sizes, **(sizes or {})}
	
	scripts: list[tuple[Optional[str], str]] = []
	for filename in args.inputs:
		if filename == "-":
			scripts.append((None, sys.stdin.read()))
		else:
			with open(filename, "r") as fp:
				scripts.append((filename, fp.read()))
	
	layout = None
	basedir = None
	if args.layout:
		try:
			with open(args.layout, "r") as layout_fp:
				layout = json.load(layout_fp)
		except (OSError, ValueError) as e:
			sys.stderr.write(f"Failed to read layout from {args.layout}: {e}\n")
			return 1
		basedir = os.path.dirname(os.path.abspath(args.layout))
	
	referenced = None
	if args.gc_sections:
		referenced = args.referenced
	
	try:
		layout_map = plan(
			scripts,
			layout=layout,
			sizes=sizes,
			referenced=referenced,
			basedir=basedir,
			trace=args.trace
		)
	except LayoutFailed as e:
		e.show(sys.stderr)
		sys.stderr.write(f"{len(e.diagnostics)} error(s), no layout map written\n")
		return 1
	except LayoutError as e:
		e.show(sys.stderr)
		return 1
	except SyntaxError:
		# Already reported with its location by the parser
		return 1
	finally:
		if args.trace and args.trace != sys.stdout:
			args.trace.close()
	
	# Symbol clashes are reported before any output is written
	if args.format == "ld":
		try:
			layout_map.symbols()
		except LayoutError as e:
			e.show(sys.stderr)
			return 1
	
	if args.output == "-":
		write_output(layout_map, args.format, sys.stdout)
	else:
		with open(args.output, "w") as out_fp:
			write_output(layout_map, args.format, out_fp)
	
	return 0

if __name__ == "__main__":
	sys.exit(main())
