import io
import json
import pytest
from fwlayout.errors import DuplicateSymbol
from fwlayout.layoutmap import *


def sample_map() -> LayoutMap:
	return LayoutMap(
		[
			LayoutEntry(".text", 0x08000000, 0x08000000, 0x120, "FLASH", "FLASH", 4),
			LayoutEntry(".flexspi_code", 0x08000120, 0x20000000, 0x80, "FLASH", "SCRATCH", 4),
		],
		[
			RegionUsage("FLASH", 0x08000000, 0x10000, 0x1A0),
			RegionUsage("SCRATCH", 0x20000000, 0x1000, 0x80),
		],
		[".text.unused"]
	)

def test_entries_are_read_only():
	entry = sample_map()[".text"]
	with pytest.raises(AttributeError):
		entry.load_address = 0

def test_lookup_and_iteration():
	layout = sample_map()
	assert [e.name for e in layout] == [".text", ".flexspi_code"]
	assert ".text" in layout
	assert ".text.unused" not in layout
	assert layout[".flexspi_code"].is_split
	assert not layout[".text"].is_split
	with pytest.raises(KeyError):
		layout.usage("RAM")

def test_to_json():
	data = json.loads(sample_map().to_json())
	assert data["sections"][1] == {
		"name": ".flexspi_code",
		"load_address": 0x08000120,
		"run_address": 0x20000000,
		"size": 0x80,
		"storage": "FLASH",
		"run": "SCRATCH",
		"align": 4,
	}
	assert data["regions"][0]["free"] == 0x10000 - 0x1A0
	assert data["discarded"] == [".text.unused"]

def test_dump():
	out = io.StringIO()
	sample_map().dump(out)
	text = out.getvalue()
	assert "FLASH            0x08000000 64K" in text
	assert ".flexspi_code" in text
	assert "SCRATCH AT> FLASH" in text
	assert "Discarded sections" in text

def test_emit_ld():
	out = io.StringIO()
	sample_map().emit_ld(out)
	text = out.getvalue()
	assert "\tSCRATCH : ORIGIN = 0x20000000, LENGTH = 4K\n" in text
	assert "__flexspi_code_load__ = 0x08000120;\n" in text
	assert "__flexspi_code_run__ = 0x20000000;\n" in text
	assert "__flexspi_code_size__ = 0x80;\n" in text

def test_symbol_name():
	assert symbol_name(".flexspi_code") == "flexspi_code"
	assert symbol_name(".text.main") == "text_main"

def test_symbol_clash():
	layout = LayoutMap(
		[
			LayoutEntry(".text.main", 0x1000, 0x1000, 4, "FLASH", "FLASH"),
			LayoutEntry(".text_main", 0x1004, 0x1004, 8, "FLASH", "FLASH"),
		],
		[RegionUsage("FLASH", 0x1000, 0x100, 12)]
	)
	out = io.StringIO()
	with pytest.raises(DuplicateSymbol) as exc:
		layout.emit_ld(out)
	assert exc.value.section == ".text_main"
	assert ".text.main" in exc.value.detail
	assert out.getvalue() == ""

def test_discarded_defaults_to_empty():
	assert LayoutMap([], []).discarded == ()
