import json
import subprocess
import pytest
from fwlayout.content import *
from fwlayout.errors import MissingContent
from fwlayout.geometry import *


OBJDUMP_H = """
firmware.elf:     file format elf32-littlearm

Sections:
Idx Name          Size      VMA       LMA       File off  Algn
  0 .vector_table 00000130  08001000  08001000  00001000  2**2
                  CONTENTS, ALLOC, LOAD, READONLY, DATA
  1 .text         00004000  08001130  08001130  00001130  2**2
                  CONTENTS, ALLOC, LOAD, READONLY, CODE
  2 .flexspi_code 00000600  201f0000  08005930  00010000  2**3
                  CONTENTS, ALLOC, LOAD, CODE
  3 .bss          00002000  20080100  20080100  00000000  2**4
                  ALLOC
"""


def test_geometry_helpers():
	assert is_pow2(1)
	assert is_pow2(4096)
	assert not is_pow2(0)
	assert not is_pow2(12)
	assert align_ceil(0x1001, 16) == 0x1010
	assert align_ceil(0x1010, 16) == 0x1010
	assert align_floor(0x101F, 16) == 0x1010
	assert h32(0x8000) == "0x00008000"
	assert hsize(2048) == "2K"
	assert hsize(3 * 1024 * 1024) == "3M"
	assert hsize(100) == "100"

def test_parse_size():
	assert parse_size(12) == 12
	assert parse_size("0x20") == 0x20
	assert parse_size("4K") == 4096
	assert parse_size("1m") == 1024 * 1024
	assert parse_size(" 0b11 ") == 3
	assert parse_size("0755") == 755
	assert parse_size("010K") == 10 * 1024
	with pytest.raises(ValueError):
		parse_size("four")
	with pytest.raises(TypeError):
		parse_size(True)

def test_fixed_content():
	assert FixedContent(0x40).size() == 0x40

def test_file_content(tmp_path):
	path = tmp_path / "otfad.bin"
	path.write_bytes(bytes(256))
	assert FileContent(str(path)).size() == 256

def test_file_content_missing(tmp_path):
	with pytest.raises(MissingContent):
		FileContent(str(tmp_path / "nope.bin")).size()

def test_table_content():
	table = {".text": 10}
	assert TableContent(table, ".text").size() == 10
	with pytest.raises(MissingContent):
		TableContent(table, ".data").size()

def test_content_for():
	assert content_for() is None
	assert content_for(size="1K").size() == 1024
	assert content_for(file="a.bin", basedir="/build").path == "/build/a.bin"
	assert content_for(file="/abs/a.bin", basedir="/build").path == "/abs/a.bin"

def test_load_size_table(tmp_path):
	path = tmp_path / "sizes.json"
	path.write_text(json.dumps({".text": 100, ".data": "0x20", ".bss": "2K"}))
	assert load_size_table(str(path)) == {".text": 100, ".data": 0x20, ".bss": 2048}

def test_parse_objdump_headers():
	headers = parse_objdump_headers(OBJDUMP_H)
	assert list(headers) == [".vector_table", ".text", ".flexspi_code", ".bss"]
	code = headers[".flexspi_code"]
	assert code["size"] == 0x600
	assert code["vma"] == 0x201F0000
	assert code["lma"] == 0x08005930
	assert code["align"] == 8

def test_objdump_section_sizes(monkeypatch):
	calls = []
	
	def fake_run(cmd, **kwargs):
		calls.append(cmd)
		return subprocess.CompletedProcess(cmd, 0, stdout=OBJDUMP_H, stderr="")
	
	monkeypatch.setattr(subprocess, "run", fake_run)
	sizes = objdump_section_sizes("arm-none-eabi-objdump", "firmware.elf")
	assert calls == [["arm-none-eabi-objdump", "-h", "firmware.elf"]]
	assert sizes[".text"] == 0x4000
	assert sizes[".bss"] == 0x2000
