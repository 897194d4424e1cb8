import sys
import ply.lex as lex
from .geometry import SIZE_SUFFIXES

# List of token names
tokens = (
	# Block keywords
	"MEMORY", "SECTIONS",
	
	# Region attributes and builtin functions
	"ORIGIN", "LENGTH",
	
	# Section attributes
	"ALIGN", "KEEP", "SIZE", "FILE", "AT",
	
	# Syntax
	"LPAREN", "RPAREN", "LBRACE", "RBRACE",
	"COLON", "COMMA", "EQUALS", "GREATER",
	"PLUS", "DASH", "STAR", "SLASH", "PERCENT",
	"LSHIFT", "RSHIFT", "AMPERSAND", "CARAT", "PIPE", "TILDE",
	
	# Values
	"IDENT", "SECNAME", "NUMBER", "STRING",
)

words = {
	"MEMORY": "MEMORY",
	"SECTIONS": "SECTIONS",
	
	# Region attributes and their GNU ld spellings
	"ORIGIN": "ORIGIN", "org": "ORIGIN",
	"LENGTH": "LENGTH", "len": "LENGTH",
	
	"ALIGN": "ALIGN",
	"KEEP": "KEEP",
	"SIZE": "SIZE",
	"FILE": "FILE",
	"AT": "AT",
}

# Syntax
t_LPAREN = r'\('
t_RPAREN = r'\)'
t_LBRACE = r'\{'
t_RBRACE = r'\}'
t_COLON = r':'
t_COMMA = r','
t_EQUALS = r'='
t_GREATER = r'>'
t_PLUS = r'\+'
t_DASH = r'-'
t_STAR = r'\*'
t_SLASH = r'/'
t_PERCENT = r'%'
t_LSHIFT = r'<<'
t_RSHIFT = r'>>'
t_AMPERSAND = r'&'
t_CARAT = r'\^'
t_PIPE = r'\|'
t_TILDE = r'~'

# Comments (must be tried before SLASH)
def t_comment(t):
	r'(/\*(.|\n)*?\*/)|(//.*)|(\#.*)'
	t.lexer.lineno += t.value.count("\n")

# Section names start with a dot, like ".text" or ".flexspi_code"
def t_SECNAME(t):
	r'\.[a-zA-Z_][a-zA-Z0-9_.$]*'
	return t

# Literal numbers, optionally scaled by a K or M suffix
def t_NUMBER(t):
	r'(0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|\d+)[KkMm]?'
	
	s = t.value
	scale = 1
	if s[-1] in "KkMm":
		scale = SIZE_SUFFIXES[s[-1].upper()]
		s = s[:-1]
	
	if s[:2] in ("0x", "0X"):
		t.value = int(s[2:], 16)
	elif s[:2] in ("0b", "0B"):
		t.value = int(s[2:], 2)
	elif s[:2] in ("0o", "0O"):
		t.value = int(s[2:], 8)
	else:
		t.value = int(s, 10)
	
	t.value *= scale
	return t

# Keywords and region names
def t_word(t):
	r'[a-zA-Z_][a-zA-Z0-9_]*'
	t.type = words.get(t.value, "IDENT")
	return t

# String literals (file paths), no escapes
def t_STRING(t):
	r'"[^"\n]*"'
	t.value = t.value[1:-1]
	return t

# Define a rule so we can track line numbers
def t_newline(t):
	r'\n+'
	t.lexer.lineno += len(t.value)

# A string containing ignored characters (spaces, tabs, and carriage returns)
t_ignore = " \t\r"

# Error handling rule
def t_error(t):
	sys.stderr.write("Illegal character: '%s'\n" % t.value[0])
	t.lexer.had_error = True
	t.lexer.skip(1)

# Build the lexer
lexer = lex.lex()
lexer.filename = None
lexer.had_error = False
