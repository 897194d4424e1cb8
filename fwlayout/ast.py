from abc import ABC, abstractmethod

# Typing
from typing import Optional, TextIO


class Location:
	def __init__(self, filename: Optional[str], lineno: int, column: int, line: Optional[str]=None):
		self.filename: str = filename or "<input>"
		self.lineno: int = lineno
		self.column: int = column
		self.line: Optional[str] = line
	
	def __repr__(self):
		return "%s(%r, %d, %d)" % (self.__class__.__name__, self.filename, self.lineno, self.column)
	
	def __str__(self):
		return "%s:%d:%d" % (self.filename, self.lineno, self.column)
	
	def _get_arrow(self) -> str:
		pos = 0
		for i, c in enumerate(self.line):
			if i + 1 == self.column:
				break
			
			if c == "\t":
				pos += 1
				pos = (pos + 7) & ~7
			else:
				pos += 1
		
		return "~" * pos + "^"
	
	def show(self, fp: TextIO):
		fp.write(f"{self}:\n")
		if self.line:
			fp.write(self.line.expandtabs(8) + "\n")
			fp.write(self._get_arrow() + "\n")


class Locatable(ABC):
	loc: Optional[Location]
	
	def __init__(self, loc: Optional[Location]=None):
		self.loc = loc


class ExprError(ArithmeticError):
	"""An expression that has no value, like a division by zero."""
	
	def __init__(self, msg: str, loc: Optional[Location]=None):
		super().__init__(msg)
		self.loc: Optional[Location] = loc


class Expr(Locatable):
	@abstractmethod
	def value(self, context=None) -> int:
		...

class NumExpr(Expr):
	def __init__(self, num: int, loc: Optional[Location]=None):
		super().__init__(loc)
		self.num: int = num
	
	def __repr__(self):
		return "NumExpr(%d)" % self.num
	
	def value(self, context=None) -> int:
		return self.num

class RegionAttrExpr(Expr):
	ATTR: str
	
	def __init__(self, region: str, loc: Optional[Location]=None):
		super().__init__(loc)
		self.region: str = region
	
	def __repr__(self):
		return "%s(%r)" % (self.__class__.__name__, self.region)

class OriginExpr(RegionAttrExpr):
	ATTR = "ORIGIN"
	
	def value(self, context=None) -> int:
		return context.get_origin(self.region, loc=self.loc)

class LengthExpr(RegionAttrExpr):
	ATTR = "LENGTH"
	
	def value(self, context=None) -> int:
		return context.get_length(self.region, loc=self.loc)

class ExprOp(Expr):
	PRECEDENCE: int
	ASSOC: int
	OP: str
	TOKEN: str

class UnExpr(ExprOp):
	def __init__(self, x: Expr, loc: Optional[Location]=None):
		super().__init__(loc)
		self.x: Expr = x
	
	def __repr__(self):
		u = repr(self.x)
		if isinstance(self.x, ExprOp) and self.x.PRECEDENCE > self.PRECEDENCE:
			u = "(" + u + ")"
		return "%s%s" % (self.OP, u)

class NegExpr(UnExpr):
	PRECEDENCE = 2
	ASSOC = 1
	OP = "-"
	TOKEN = "UMINUS"
	
	def value(self, context=None) -> int:
		return -self.x.value(context)

class InvExpr(UnExpr):
	PRECEDENCE = 2
	ASSOC = 1
	OP = "~"
	TOKEN = "TILDE"
	
	def value(self, context=None) -> int:
		return ~self.x.value(context)

class BinExpr(ExprOp):
	def __init__(self, lhs: Expr, rhs: Expr, loc: Optional[Location]=None):
		super().__init__(loc)
		self.lhs: Expr = lhs
		self.rhs: Expr = rhs
	
	def __repr__(self):
		l = repr(self.lhs)
		if isinstance(self.lhs, ExprOp) and self.lhs.PRECEDENCE > self.PRECEDENCE:
			l = "(" + l + ")"
		
		r = repr(self.rhs)
		if isinstance(self.rhs, ExprOp) and self.rhs.PRECEDENCE > self.PRECEDENCE:
			r = "(" + r + ")"
		
		return "%s %s %s" % (l, self.OP, r)
	
	def divisor(self, context) -> int:
		x = self.rhs.value(context)
		if x == 0:
			raise ExprError("Division by zero", loc=self.loc)
		return x
	
	def shift_count(self, context) -> int:
		x = self.rhs.value(context)
		if x < 0:
			raise ExprError("Negative shift count", loc=self.loc)
		return x

class AddExpr(BinExpr):
	PRECEDENCE = 4
	ASSOC = -1
	OP = "+"
	TOKEN = "PLUS"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) + self.rhs.value(context)

class SubExpr(BinExpr):
	PRECEDENCE = 4
	ASSOC = -1
	OP = "-"
	TOKEN = "DASH"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) - self.rhs.value(context)

class MulExpr(BinExpr):
	PRECEDENCE = 3
	ASSOC = -1
	OP = "*"
	TOKEN = "STAR"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) * self.rhs.value(context)

class DivExpr(BinExpr):
	PRECEDENCE = 3
	ASSOC = -1
	OP = "/"
	TOKEN = "SLASH"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) // self.divisor(context)

class ModExpr(BinExpr):
	PRECEDENCE = 3
	ASSOC = -1
	OP = "%"
	TOKEN = "PERCENT"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) % self.divisor(context)

class LShiftExpr(BinExpr):
	PRECEDENCE = 5
	ASSOC = -1
	OP = "<<"
	TOKEN = "LSHIFT"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) << self.shift_count(context)

class RShiftExpr(BinExpr):
	PRECEDENCE = 5
	ASSOC = -1
	OP = ">>"
	TOKEN = "RSHIFT"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) >> self.shift_count(context)

class AndExpr(BinExpr):
	PRECEDENCE = 8
	ASSOC = -1
	OP = "&"
	TOKEN = "AMPERSAND"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) & self.rhs.value(context)

class XorExpr(BinExpr):
	PRECEDENCE = 9
	ASSOC = -1
	OP = "^"
	TOKEN = "CARAT"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) ^ self.rhs.value(context)

class OrExpr(BinExpr):
	PRECEDENCE = 10
	ASSOC = -1
	OP = "|"
	TOKEN = "PIPE"
	
	def value(self, context=None) -> int:
		return self.lhs.value(context) | self.rhs.value(context)


BINOPS: list[type[BinExpr]] = [
	AddExpr, SubExpr, MulExpr, DivExpr, ModExpr,
	LShiftExpr, RShiftExpr, AndExpr, XorExpr, OrExpr
]

BINOP_MAP: dict[str, type[BinExpr]] = {
	x.OP: x for x in BINOPS
}

UNOPS: list[type[UnExpr]] = [
	NegExpr, InvExpr
]

UNOP_MAP: dict[str, type[UnExpr]] = {
	x.OP: x for x in UNOPS
}

OPERATORS = BINOPS + UNOPS


class Decl(Locatable):
	...

class RegionDecl(Decl):
	def __init__(self, name: str, origin: Expr, length: Expr, loc: Optional[Location]=None):
		super().__init__(loc)
		self.name: str = name
		self.origin: Expr = origin
		self.length: Expr = length
	
	def __repr__(self):
		return "RegionDecl(%r, %r, %r)" % (self.name, self.origin, self.length)

class SectionAttr(Locatable):
	"""One of ALIGN(n), KEEP, SIZE(n) or FILE("path") on a section line."""
	
	def __init__(self, name: str, arg: Optional[Expr | str]=None, loc: Optional[Location]=None):
		super().__init__(loc)
		self.name: str = name
		self.arg: Optional[Expr | str] = arg
	
	def __repr__(self):
		if self.arg is None:
			return self.name
		return "%s(%r)" % (self.name, self.arg)

class SectionDecl(Decl):
	def __init__(
			self,
			name: str,
			attrs: list[SectionAttr],
			region: str,
			load_region: Optional[str]=None,
			loc: Optional[Location]=None
	):
		super().__init__(loc)
		self.name: str = name
		self.attrs: list[SectionAttr] = attrs
		
		# "> region AT> load_region": stored in load_region, run from region
		self.region: str = region
		self.load_region: Optional[str] = load_region
	
	def __repr__(self):
		s = "SectionDecl(%r, %r, %r" % (self.name, self.attrs, self.region)
		if self.load_region is not None:
			s += ", at=%r" % self.load_region
		return s + ")"
