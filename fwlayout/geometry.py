import re

ADDRESS_BITS = 32

SIZE_SUFFIXES = {
	"": 1,
	"K": 1024,
	"M": 1024 * 1024,
}

_SIZE_RE = re.compile(r'^(0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|\d+)([KkMm]?)$')

def is_pow2(x: int) -> bool:
	return x > 0 and x & (x - 1) == 0

def align_floor(addr: int, align: int) -> int:
	return addr & ~(align - 1)

def align_ceil(addr: int, align: int) -> int:
	return align_floor(addr + align - 1, align)

def address_limit(bits: int=ADDRESS_BITS) -> int:
	return 1 << bits

def parse_number(text: str) -> int:
	# Unprefixed digits are decimal even with leading zeros, as in layout scripts
	if text.isdigit():
		return int(text, 10)
	return int(text, 0)

def parse_size(value: int | str) -> int:
	"""
	Accepts an int, or a string like "0x08000000", "0b1010", "2K" or "1M".
	"""
	if isinstance(value, bool):
		raise TypeError(f"Not a size: {value!r}")
	if isinstance(value, int):
		return value
	
	m = _SIZE_RE.match(value.strip())
	if m is None:
		raise ValueError(f"Invalid size literal: {value!r}")
	return parse_number(m.group(1)) * SIZE_SUFFIXES[m.group(2).upper()]


def h32(x: int) -> str:
	return "0x%08X" % x

def hsize(x: int) -> str:
	if x and x % SIZE_SUFFIXES["M"] == 0:
		return "%dM" % (x // SIZE_SUFFIXES["M"])
	if x and x % SIZE_SUFFIXES["K"] == 0:
		return "%dK" % (x // SIZE_SUFFIXES["K"])
	return "%d" % x
