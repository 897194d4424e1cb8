import sys
import threading
import ply.yacc as yacc
from .lex import tokens, lexer
from .ast import *

from typing import Optional


def pick_binop(
		lhs: Expr, opstr: str, rhs: Expr,
		loc: Optional[Location] = None
) -> BinExpr:
	return BINOP_MAP[opstr](lhs, rhs, loc=loc)

def pick_unop(
		opstr: str, unop: Expr,
		loc: Optional[Location] = None
) -> UnExpr:
	return UNOP_MAP[opstr](unop, loc=loc)

def make_precedence() -> tuple[tuple]:
	def str_assoc(assoc: int) -> str:
		if assoc < 0:
			return "left"
		elif assoc > 0:
			return "right"
		else:
			return "nonassoc"
	
	prec_map: dict[tuple[int, int], list[ExprOp]] = {}
	for oper in OPERATORS:
		key = (oper.PRECEDENCE, oper.ASSOC)
		if key not in prec_map:
			prec_map[key] = [oper]
		else:
			prec_map[key].append(oper)
	
	result: list[tuple] = []
	prec_order = sorted(prec_map.keys())[::-1]
	for prec in prec_order:
		result.append((str_assoc(prec[1]),) + tuple(x.TOKEN for x in prec_map[prec]))
	
	return tuple(result)

precedence: tuple[tuple] = make_precedence()

start = "script"


def build_loc(
		filename: Optional[str],
		filedata: str,
		lexpos: int,
		lineno: int
) -> Location:
	line_start = filedata.rfind('\n', 0, lexpos) + 1
	line_end = filedata.find('\n', line_start)
	if line_end < 0:
		line_end = len(filedata)
	col = lexpos - line_start + 1
	line = filedata[line_start:line_end]
	return Location(filename, lineno, col, line)

def token_location(t) -> Location:
	return build_loc(
		filename=t.lexer.filename,
		filedata=t.lexer.lexdata,
		lexpos=t.lexpos,
		lineno=t.lineno
	)

def parser_location(p, i: int) -> Location:
	return build_loc(
		filename=p.lexer.filename,
		filedata=p.lexer.lexdata,
		lexpos=p.lexpos(i),
		lineno=p.lineno(i)
	)

def error(t, msg: str):
	sys.stderr.write(f"Syntax error: {msg}\n")
	token_location(t).show(sys.stderr)



def p_script(p):
	'''script : script block'''
	p[0] = p[1] + p[2]

def p_script_empty(p):
	'''script : empty'''
	p[0] = []

# For optional production rules
def p_empty(p):
	'''empty :'''
	pass

def p_block_memory(p):
	'''block : MEMORY LBRACE regionlist RBRACE'''
	p[0] = p[3]

def p_block_sections(p):
	'''block : SECTIONS LBRACE sectionlist RBRACE'''
	p[0] = p[3]

def p_regionlist(p):
	'''regionlist : regionlist regiondef'''
	p[0] = p[1] + [p[2]]

def p_regionlist_empty(p):
	'''regionlist : empty'''
	p[0] = []

# NAME : ORIGIN = expr, LENGTH = expr
def p_regiondef(p):
	'''regiondef : IDENT COLON ORIGIN EQUALS constexpr COMMA LENGTH EQUALS constexpr'''
	p[0] = RegionDecl(p[1], p[5], p[9], loc=parser_location(p, 1))

def p_sectionlist(p):
	'''sectionlist : sectionlist sectiondef'''
	p[0] = p[1] + [p[2]]

def p_sectionlist_empty(p):
	'''sectionlist : empty'''
	p[0] = []

# .name : attrs > REGION
def p_sectiondef(p):
	'''sectiondef : SECNAME COLON attrlist GREATER IDENT'''
	p[0] = SectionDecl(p[1], p[3], p[5], loc=parser_location(p, 1))

# .name : attrs > RUN_REGION AT> LOAD_REGION
def p_sectiondef_at(p):
	'''sectiondef : SECNAME COLON attrlist GREATER IDENT AT GREATER IDENT'''
	p[0] = SectionDecl(p[1], p[3], p[5], p[8], loc=parser_location(p, 1))

def p_attrlist(p):
	'''attrlist : attrlist attr'''
	p[0] = p[1] + [p[2]]

def p_attrlist_empty(p):
	'''attrlist : empty'''
	p[0] = []

def p_attr_expr(p):
	'''attr : ALIGN LPAREN constexpr RPAREN
	        | SIZE LPAREN constexpr RPAREN
	'''
	p[0] = SectionAttr(p[1], p[3], loc=parser_location(p, 1))

def p_attr_file(p):
	'''attr : FILE LPAREN STRING RPAREN'''
	p[0] = SectionAttr(p[1], p[3], loc=parser_location(p, 1))

def p_attr_keep(p):
	'''attr : KEEP'''
	p[0] = SectionAttr(p[1], loc=parser_location(p, 1))

def p_constexpr_number(p):
	'''constexpr : NUMBER'''
	p[0] = NumExpr(p[1], loc=parser_location(p, 1))

def p_constexpr_origin(p):
	'''constexpr : ORIGIN LPAREN IDENT RPAREN'''
	p[0] = OriginExpr(p[3], loc=parser_location(p, 3))

def p_constexpr_length(p):
	'''constexpr : LENGTH LPAREN IDENT RPAREN'''
	p[0] = LengthExpr(p[3], loc=parser_location(p, 3))

def p_constexpr_paren(p):
	'''constexpr : LPAREN constexpr RPAREN'''
	p[0] = p[2]

def p_constexpr_binop(p):
	'''constexpr : constexpr PLUS constexpr
	             | constexpr DASH constexpr
	             | constexpr STAR constexpr
	             | constexpr SLASH constexpr
	             | constexpr PERCENT constexpr
	             | constexpr LSHIFT constexpr
	             | constexpr RSHIFT constexpr
	             | constexpr AMPERSAND constexpr
	             | constexpr CARAT constexpr
	             | constexpr PIPE constexpr
	'''
	p[0] = pick_binop(*p[1:], loc=parser_location(p, 2))

def p_constexpr_unop_pre(p):
	'''constexpr : DASH constexpr %prec UMINUS
	             | TILDE constexpr
	'''
	p[0] = pick_unop(*p[1:], loc=parser_location(p, 1))

# Handle parser errors
def p_error(p):
	if not p:
		sys.stderr.write("Syntax error: premature end of file\n")
		raise SyntaxError("Premature end of file")
	
	error(p, "Unexpected token '%s' [%s]" % (p.value, p.type))
	raise SyntaxError("Unexpected token '%s' at %s" % (p.value, token_location(p)))


# Build parser
parser = yacc.yacc(tabmodule="fwlparsetab", debug=False, write_tables=False)

# The LR parser keeps its stacks on the parser object
parse_lock = threading.Lock()


def parse_layout(text: str, filename: Optional[str]=None) -> list[Decl]:
	"""
	Parse layout script text into RegionDecl and SectionDecl nodes, in
	declaration order.
	"""
	
	# Private lexer so that independent parses never share position state
	lx = lexer.clone()
	lx.lineno = 1
	lx.filename = filename
	lx.had_error = False
	
	# Tokens from string rules carry no lexer of their own
	def next_token():
		t = lx.token()
		if t is not None:
			t.lexer = lx
		return t
	
	with parse_lock:
		decls: list[Decl] = parser.parse(text, lexer=lx, tracking=True, tokenfunc=next_token)
	if lx.had_error:
		raise SyntaxError(f"Invalid characters in layout script: {filename or '<input>'}")
	return decls
