# Reference layout for an i.MX RT685 booting from FlexSPI NOR flash.
#
# The boot ROM reads the OTFAD, FCB, BIV and key store blocks at fixed offsets
# from the start of flash, so those regions are exactly as large as their
# content. Code that reprograms the flash cannot execute from it while it is
# busy, so .flexspi_code is stored in flash and copied to the SRAM scratch
# window at startup.
DEFAULT_LAYOUT = {
	"address_bits": 32,
	"regions": [
		{"name": "OTFAD", "origin": 0x08000000, "length": 256},
		{"name": "FCB", "origin": 0x08000400, "length": 512},
		{"name": "BIV", "origin": 0x08000600, "length": 4},
		{"name": "KEYSTORE", "origin": 0x08000800, "length": "2K"},
		{"name": "FLASH", "origin": 0x08001000, "length": "1020K"},
		{"name": "MAPPED_FLASH", "origin": 0x08100000, "length": "63M"},
		{"name": "RAM", "origin": 0x20080000, "length": "1472K"},
		{"name": "SCRATCH", "origin": 0x201F0000, "length": "64K"},
	],
	"sections": [
		{"name": ".otfad", "storage": "OTFAD", "align": 4, "keep": True, "size": 256},
		{"name": ".fcb", "storage": "FCB", "align": 4, "keep": True, "size": 512},
		{"name": ".biv", "storage": "BIV", "align": 4, "keep": True, "size": 4},
		{"name": ".keystore", "storage": "KEYSTORE", "align": 4, "keep": True, "size": "2K"},
		{"name": ".vector_table", "storage": "FLASH", "align": 4, "keep": True},
		{"name": ".text", "storage": "FLASH", "align": 4},
		{"name": ".rodata", "storage": "FLASH", "align": 4},
		{"name": ".flexspi_code", "storage": "FLASH", "run": "SCRATCH", "align": 4, "keep": True},
		{"name": ".data", "storage": "FLASH", "run": "RAM", "align": 4},
		{"name": ".bss", "storage": "RAM", "align": 4},
		{"name": ".uninit", "storage": "RAM", "align": 4},
	],
}
