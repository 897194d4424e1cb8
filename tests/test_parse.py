import pytest
from fwlayout.ast import *
from fwlayout.parse import parse_layout
from fwlayout.regions import RegionTable


def expr(text: str, regions=None) -> int:
	decls = parse_layout("MEMORY { R : ORIGIN = %s, LENGTH = 1 }" % text)
	return decls[0].origin.value(regions)

def test_empty_script():
	assert parse_layout("") == []
	assert parse_layout("MEMORY { } SECTIONS { }") == []

def test_memory_block():
	decls = parse_layout("""
		MEMORY {
			FLASH : ORIGIN = 0x08000000, LENGTH = 64K
			RAM   : org = 0x20000000, len = 1M
		}
	""")
	assert [type(d) for d in decls] == [RegionDecl, RegionDecl]
	assert decls[0].name == "FLASH"
	assert decls[0].origin.value() == 0x08000000
	assert decls[0].length.value() == 64 * 1024
	assert decls[1].length.value() == 1024 * 1024

def test_number_formats():
	assert expr("0x1F") == 0x1F
	assert expr("0b101") == 5
	assert expr("0o17") == 15
	assert expr("42") == 42
	assert expr("2k") == 2048

def test_expression_precedence():
	assert expr("1 + 2 * 3") == 7
	assert expr("(1 + 2) * 3") == 9
	assert expr("1 << 4 + 1") == 32
	assert expr("0xFF & ~0xF") == 0xF0
	assert expr("10 - 2 - 3") == 5
	assert expr("-4 + 6") == 2
	assert expr("7 / 2 % 2") == 1
	assert expr("1 | 2 ^ 3") == 1

def test_origin_and_length_functions():
	regions = RegionTable()
	regions.define("RAM", 0x20000000, 0x4000)
	assert expr("ORIGIN(RAM) + LENGTH(RAM)", regions) == 0x20004000

def test_sections_block():
	decls = parse_layout("""
		SECTIONS {
			.keystore : ALIGN(4) KEEP SIZE(2K) > KEYSTORE
			.text : FILE("build/text.bin") > FLASH
			.flexspi_code : ALIGN(4) > SCRATCH AT> FLASH
		}
	""")
	assert [type(d) for d in decls] == [SectionDecl] * 3
	
	keystore = decls[0]
	assert keystore.name == ".keystore"
	assert [a.name for a in keystore.attrs] == ["ALIGN", "KEEP", "SIZE"]
	assert keystore.attrs[2].arg.value() == 2048
	assert keystore.region == "KEYSTORE"
	assert keystore.load_region is None
	
	assert decls[1].attrs[0].name == "FILE"
	assert decls[1].attrs[0].arg == "build/text.bin"
	
	code = decls[2]
	assert code.region == "SCRATCH"
	assert code.load_region == "FLASH"

def test_comments_and_block_order():
	decls = parse_layout("""
		/* boot
		   header */
		SECTIONS {
			.fcb : SIZE(512) > FCB   // config block
		}
		# regions
		MEMORY {
			FCB : ORIGIN = 0x08000400, LENGTH = 512
		}
	""")
	assert [type(d) for d in decls] == [SectionDecl, RegionDecl]

def test_locations():
	decls = parse_layout("MEMORY {\n\tFLASH : ORIGIN = 0, LENGTH = 4\n}\n", "board.ld")
	loc = decls[0].loc
	assert loc.filename == "board.ld"
	assert loc.lineno == 2
	assert loc.column == 2
	assert str(loc) == "board.ld:2:2"

def test_syntax_error(capsys):
	with pytest.raises(SyntaxError):
		parse_layout("MEMORY {\n  FLASH ORIGIN = 0, LENGTH = 4\n}\n", "bad.ld")
	err = capsys.readouterr().err
	assert "Syntax error" in err
	assert "bad.ld:2:" in err
	assert "FLASH ORIGIN = 0, LENGTH = 4" in err

def test_premature_end(capsys):
	with pytest.raises(SyntaxError):
		parse_layout("SECTIONS { .text : > FLASH")

def test_missing_region_after_at():
	with pytest.raises(SyntaxError):
		parse_layout("SECTIONS { .data : > RAM AT> }")

def test_illegal_character(capsys):
	with pytest.raises(SyntaxError):
		parse_layout("MEMORY { FLASH : ORIGIN = 0, LENGTH = 4 } @")
	assert "Illegal character" in capsys.readouterr().err

def test_syntax_error_at_punctuation(capsys):
	with pytest.raises(SyntaxError):
		parse_layout("MEMORY {\n\tFLASH : ORIGIN = 0 }\n", "bad.ld")
	err = capsys.readouterr().err
	assert "Unexpected token '}'" in err
	assert "bad.ld:2:21:" in err

def test_division_by_zero():
	with pytest.raises(ExprError) as exc:
		expr("4 / (2 - 2)")
	assert str(exc.value) == "Division by zero"
	assert exc.value.loc.column == 25
	with pytest.raises(ExprError):
		expr("4 % 0")
	with pytest.raises(ExprError):
		expr("1 << -1")
