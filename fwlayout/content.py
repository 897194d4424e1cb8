"""
Content references: where a section's byte size comes from.

The layout core never looks at section bytes, only at their size. Sizes are
supplied by whatever produced the content: a literal in the layout, a file
on disk, a table written by the build, or the section headers of a linked
ELF as reported by objdump.
"""

import json
import os
import subprocess
from abc import ABC, abstractmethod
from .errors import MissingContent
from .geometry import parse_size

from typing import Any, Optional


class Content(ABC):
	@abstractmethod
	def size(self) -> int:
		...

class FixedContent(Content):
	def __init__(self, nbytes: int):
		self.nbytes: int = nbytes
	
	def __repr__(self):
		return "FixedContent(%d)" % self.nbytes
	
	def size(self) -> int:
		return self.nbytes

class FileContent(Content):
	def __init__(self, path: str):
		self.path: str = path
	
	def __repr__(self):
		return "FileContent(%r)" % self.path
	
	def size(self) -> int:
		try:
			return os.path.getsize(self.path)
		except OSError as e:
			raise MissingContent(f"Cannot get size of {self.path}: {e.strerror}") from None

class TableContent(Content):
	def __init__(self, table: dict[str, int], key: str):
		self.table: dict[str, int] = table
		self.key: str = key
	
	def __repr__(self):
		return "TableContent(%r)" % self.key
	
	def size(self) -> int:
		if self.key not in self.table:
			raise MissingContent(f"No size recorded for {self.key}")
		return self.table[self.key]


def load_size_table(path: str) -> dict[str, int]:
	with open(path, "r") as fp:
		raw: dict[str, Any] = json.load(fp)
	return {name: parse_size(value) for name, value in raw.items()}


def parse_objdump_headers(text: str) -> dict[str, dict[str, int]]:
	"""
	Parse the output of `objdump -h`:
	
	  Idx Name          Size      VMA       LMA       File off  Algn
	    0 .text         00000100  08001000  08001000  00001000  2**2
	                    CONTENTS, ALLOC, LOAD, READONLY, CODE
	"""
	sections: dict[str, dict[str, int]] = {}
	for line in text.splitlines():
		parts = line.split()
		if len(parts) < 7 or not parts[0].isdigit():
			continue
		try:
			sections[parts[1]] = {
				"size": int(parts[2], 16),
				"vma": int(parts[3], 16),
				"lma": int(parts[4], 16),
				"align": 1 << int(parts[6].split("**")[1]),
			}
		except (ValueError, IndexError):
			continue
	return sections


def objdump_section_sizes(objdump: str, elf: str) -> dict[str, int]:
	result = subprocess.run(
		[objdump, "-h", elf], capture_output=True, text=True, check=True
	)
	headers = parse_objdump_headers(result.stdout)
	return {name: info["size"] for name, info in headers.items()}


def content_for(
		size: Optional[int | str]=None,
		file: Optional[str]=None,
		basedir: Optional[str]=None
) -> Optional[Content]:
	"""Build the content reference for a section declared with SIZE or FILE."""
	if size is not None:
		return FixedContent(parse_size(size))
	if file is not None:
		if basedir is not None and not os.path.isabs(file):
			file = os.path.join(basedir, file)
		return FileContent(file)
	return None
