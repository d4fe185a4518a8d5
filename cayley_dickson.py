from sympy import Rational, nsimplify, sqrt as sqrt_exact
from numpy import array, ndarray, floating, complexfloating, finfo, sqrt as sqrt_float
from decimal import Decimal, getcontext as decimalcontext
from fractions import Fraction
from numbers import Integral, Real
from operator import index as as_index
from math import copysign
import logging
import sys

logger = logging.getLogger(__name__)

# Hypercomplex algebras built by repeated doubling, the Cayley-Dickson construction.
# Depth 0 is a complex plane over a real scalar kind and every further depth is a pair of values
# from the depth below: quaternions at 1, octonions at 2, sedenions at 3 and so on without bound.
# Past the quaternions associativity is lost and from the sedenions on zero divisors appear,
# so division by a hypercomplex value is refused at every depth.
# Products default to the conjugate doubling rule (a,b)(c,d) = (ac - d'b, da + bc'), which deliberately
# departs from the plain (ac - bd, ad + bc) recurrence; that one makes quaternions commute and is kept
# behind settings(mul='complex').

class IndexOutOfRange(IndexError): pass
class UnsupportedOperation(ArithmeticError): pass

_settings = {'mul': 'cayley-dickson', 'digits': None}
_saved = []

def settings(**kwargs):
    if kwargs.get('save'):
        _saved.append(dict(_settings))
        return dict(_settings)
    if kwargs.get('restore'):
        if not _saved: raise AttributeError("No prior saved state to restore")
        _settings.update(_saved.pop())
        logger.debug("settings restored: %r", _settings)
        return dict(_settings)
    if kwargs.keys()-('mul','digits'): raise AttributeError('arg!=mul|digits')
    if 'mul' in kwargs:
        val = kwargs['mul']
        if val not in ('cayley-dickson', 'complex'): raise ValueError("mul!='cayley-dickson'|'complex'")
        _settings['mul'] = val
    if 'digits' in kwargs:
        val = kwargs['digits']
        if val is not None and (not isinstance(val, Integral) or val < 1):
            raise ValueError("digits!=None|positive integer")
        _settings['digits'] = val
    if kwargs: logger.debug("settings changed: %r", _settings)
    return dict(_settings)

def rationalize(x):
    # float, str, Decimal or Fraction to an exact sympy Rational via its shortest decimal form
    if getattr(x, 'is_Rational', False): return x
    if isinstance(x, Fraction): return Rational(x.numerator, x.denominator)
    if isinstance(x, floating): x = float(x)
    return nsimplify(x, rational=True)

def _is_kind(scalar):
    return isinstance(scalar, type) and (scalar in (float, Decimal, Rational) or issubclass(scalar, floating))

def _is_scalar(x):
    return isinstance(x, (Real, Decimal)) or bool(getattr(x, 'is_Number', 0) and getattr(x, 'is_real', 0))

def _is_complex(x):
    return isinstance(x, (complex, complexfloating))

def _coerce(scalar, x):
    if type(x) is scalar: return x
    if scalar is Rational: return rationalize(x)
    if scalar is Decimal:
        if getattr(x, 'is_Rational', False): return Decimal(int(x.p)) / Decimal(int(x.q))
        if isinstance(x, Fraction): return Decimal(x.numerator) / Decimal(x.denominator)
        if isinstance(x, (int, Decimal)): return Decimal(x)
        return Decimal(repr(float(x)))
    if isinstance(x, (int, float, floating)): return scalar(x)
    return scalar(float(x))

def _is_whole(x):
    return _is_scalar(x) and float(x).is_integer() and x == int(x)

def _signbit(x):
    return copysign(1.0, float(x)) < 0

def _sqrt(x):
    if isinstance(x, Decimal): return x.sqrt()
    if getattr(x, 'is_Number', False):
        root = sqrt_exact(x)
        return root if root.is_Rational else rationalize(root.evalf(digits(Rational)))
    return type(x)(sqrt_float(x))

def digits(scalar):
    # decimal digits the scalar kind can hold, unless overridden through settings(digits=...)
    if _settings['digits']: return _settings['digits']
    if scalar is Decimal: return decimalcontext().prec
    if scalar is Rational: return 16
    if scalar is float: return sys.float_info.dig
    return int(finfo(scalar).precision)

def is_hypercomplex(tp):
    if not isinstance(tp, type): tp = type(tp)
    return issubclass(tp, (Hypercomplex, complex, complexfloating))

def _power(x, p):
    step = 1
    prev = []
    while step + step <= p:
        prev.append((step,x))
        x = x * x
        step += step
    while step < p:
        while step + prev[-1][0] > p: prev.pop()
        x = x * prev[-1][1]
        step += prev.pop()[0]
    return x

class Hypercomplex(object):
    __slots__ = ('real', 'imag')
    scalar = None
    depth = dim = size = None
    subtype = None
    units = ()
    __array_ufunc__ = None

    def __init__(hc, *args):
        cls = type(hc)
        if cls.depth is None: raise TypeError("Base helper class does not define a scalar kind and depth")
        if len(args) == 0:
            value = cls.zero()
        elif len(args) == 1:
            arg = args[0]
            if isinstance(arg, Hypercomplex) or _is_complex(arg):
                value = cls.from_value(arg)
            elif type(arg) in (tuple,list) or isinstance(arg, ndarray):
                value = cls.from_scalars(*arg)
            else:
                value = cls.from_scalar(arg)
        elif len(args) == 2 and cls.depth and all(isinstance(a, Hypercomplex) or _is_complex(a) for a in args):
            value = cls.from_pair(*args)
        else:
            value = cls.from_scalars(*args)
        hc.real, hc.imag = value.real, value.imag

    @classmethod
    def _make(cls, real, imag):
        hc = object.__new__(cls)
        hc.real, hc.imag = real, imag
        return hc
    @classmethod
    def coerce(cls, x):
        return _coerce(cls.scalar, x)
    @classmethod
    def from_scalars(cls, *scalars):
        hc = cls.zero()
        for idx, scalar in enumerate(scalars[:cls.size]):
            hc[idx] = scalar
        return hc
    @classmethod
    def from_lower(cls, value):
        if value.depth >= cls.depth:
            raise ValueError("%s is not of lower depth than %s" % (type(value).__name__, cls.__name__))
        return cls._make(cls.subtype.from_value(value), cls.subtype.zero())
    @classmethod
    def from_higher(cls, value):
        # Lossy: every component beyond this algebra's size is silently dropped.
        if value.depth < cls.depth:
            raise ValueError("%s is not of higher or equal depth than %s" % (type(value).__name__, cls.__name__))
        if value.depth > cls.depth:
            logger.debug("narrowing %s to %s discards %d components",
                         type(value).__name__, cls.__name__, value.size - cls.size)
        while value.depth > cls.depth: value = value.real
        return cls.from_scalars(*value.components())
    @classmethod
    def from_value(cls, value):
        if _is_complex(value): return cls.from_scalars(value.real, value.imag)
        if value.depth < cls.depth: return cls.from_lower(value)
        return cls.from_higher(value)

    def _checked(hc, idx):
        idx = as_index(idx)
        if not 0 <= idx < hc.size:
            raise IndexOutOfRange("%s has %d components, no index %d" % (type(hc).__name__, hc.size, idx))
        return idx
    def component_at(hc, idx):
        return hc._component(hc._checked(idx))
    def set_component_at(hc, idx, value):
        hc._set_component(hc._checked(idx), hc.coerce(value))
        return hc
    def __getitem__(hc, idx):
        return hc.component_at(idx)
    def __setitem__(hc, idx, value):
        hc.set_component_at(idx, value)
    def __len__(hc):
        return hc.size
    def __iter__(hc):
        return iter(hc.components())
    def to_array(hc):
        return array(hc.components())
    def sq_norm(hc):
        return sum(x * x for x in hc.components())
    def __abs__(hc):
        return hc.coerce(_sqrt(hc.sq_norm()))

    def _operand(hc, value):
        if isinstance(value, Hypercomplex) or _is_complex(value):
            if type(value) is type(hc): return value
            return type(hc).from_value(value)
        if _is_scalar(value): return hc.coerce(value)
        return NotImplemented

    def __iadd__(hc, value):
        value = hc._operand(value)
        if value is NotImplemented: return value
        if isinstance(value, Hypercomplex):
            hc.real += value.real
            hc.imag += value.imag
        else:
            hc.real += value
        return hc
    def __isub__(hc, value):
        value = hc._operand(value)
        if value is NotImplemented: return value
        if isinstance(value, Hypercomplex):
            hc.real -= value.real
            hc.imag -= value.imag
        else:
            hc.real -= value
        return hc
    def __imul__(hc, value):
        value = hc._operand(value)
        if value is NotImplemented: return value
        if not isinstance(value, Hypercomplex):
            hc.real *= value
            hc.imag *= value
            return hc
        a,b,c,d = hc.real, hc.imag, value.real, value.imag
        if _settings['mul'] == 'complex':
            hc.real, hc.imag = a*c - b*d, a*d + b*c
        else:
            hc.real, hc.imag = a*c - d.conjugate()*b, d*a + b*c.conjugate()
        return hc
    def __itruediv__(hc, value):
        value = hc._operand(value)
        if value is NotImplemented: return value
        if isinstance(value, Hypercomplex):
            raise UnsupportedOperation("cayley-dickson construction doesn't necessarily create a division algebra")
        hc.real /= value
        hc.imag /= value
        return hc
    def __ipow__(hc, p):
        if isinstance(p, Integral) or getattr(p, 'is_Integer', False) or _is_whole(p):
            p = int(p)
            if p < 0:
                raise UnsupportedOperation("%s has no guaranteed inverse for a negative power" % type(hc).__name__)
            if p == 1: return hc
            if p == 0: x = type(hc).from_scalar(1)
            elif p == 2: x = hc * hc
            else: x = _power(hc, p)
        elif _is_scalar(p):
            x = exp(log(hc) * hc.coerce(p))
        else:
            return NotImplemented
        hc.real, hc.imag = x.real, x.imag
        return hc

    def __add__(hc, value):
        return hc.copy().__iadd__(value)
    def __radd__(hc, value):
        return hc + value
    def __sub__(hc, value):
        return hc.copy().__isub__(value)
    def __rsub__(hc, value):
        return -hc + value
    def __mul__(hc, value):
        return hc.copy().__imul__(value)
    def __rmul__(hc, value):
        if _is_complex(value): return type(hc).from_value(value) * hc
        return hc * value
    def __truediv__(hc, value):
        return hc.copy().__itruediv__(value)
    def __rtruediv__(hc, value):
        if _is_scalar(value) or _is_complex(value):
            raise UnsupportedOperation("cayley-dickson construction doesn't necessarily create a division algebra")
        return NotImplemented
    def __pow__(hc, p):
        return hc.copy().__ipow__(p)
    def __neg__(hc):
        return hc.copy().negate()
    def __pos__(hc):
        return hc.copy()
    def __eq__(hc, value):
        if isinstance(value, Hypercomplex) and value.depth > hc.depth: return value == hc
        value = hc._operand(value)
        if value is NotImplemented: return value
        if not isinstance(value, Hypercomplex): value = type(hc).from_scalar(value)
        return hc.components() == value.components()
    def __bool__(hc):
        return any(hc.components())

    def __format__(hc, spec):
        elems = []
        for x, unit in zip(hc.components(), hc.units):
            try:
                elem = format(float(x) if spec and getattr(x, 'is_Number', False) else x, spec)
            except ValueError:
                elem = format(str(x), spec)
            if '/' in elem:
                elem = elem[0] in '+-' and elem[0]+'('+elem[1:]+')' or '('+elem+')'
            if elems and not _signbit(x): elem = '+' + elem
            elems.append(elem + unit)
        return ''.join(elems)
    def __str__(hc):
        return format(hc, '')
    def __repr__(hc):
        return '%s(%s)' % (type(hc).__name__, ', '.join(str(x) for x in hc.components()))

class Uniplex(Hypercomplex):
    __slots__ = ()
    @classmethod
    def zero(cls):
        return cls._make(cls.coerce(0), cls.coerce(0))
    @classmethod
    def from_scalar(cls, scalar):
        return cls._make(cls.coerce(scalar), cls.coerce(0))
    @classmethod
    def from_pair(cls, real, imag):
        return cls._make(cls.coerce(real), cls.coerce(imag))
    def copy(ux):
        return type(ux)._make(ux.real, ux.imag)
    def components(ux):
        return [ux.real, ux.imag]
    def _component(ux, idx):
        return ux.imag if idx else ux.real
    def _set_component(ux, idx, value):
        if idx: ux.imag = value
        else: ux.real = value
    def conjugate(ux):
        return type(ux)._make(ux.real, -ux.imag)
    def negate(ux):
        ux.real, ux.imag = -ux.real, -ux.imag
        return ux

class Duplex(Hypercomplex):
    __slots__ = ()
    @classmethod
    def zero(cls):
        return cls._make(cls.subtype.zero(), cls.subtype.zero())
    @classmethod
    def from_scalar(cls, scalar):
        return cls._make(cls.subtype.from_scalar(scalar), cls.subtype.zero())
    @classmethod
    def from_pair(cls, real, imag):
        return cls._make(cls.subtype(real), cls.subtype(imag))
    def copy(dx):
        return type(dx)._make(dx.real.copy(), dx.imag.copy())
    def components(dx):
        return dx.real.components() + dx.imag.components()
    def _component(dx, idx):
        half = dx.size // 2
        if idx < half: return dx.real._component(idx)
        return dx.imag._component(idx - half)
    def _set_component(dx, idx, value):
        half = dx.size // 2
        if idx < half: dx.real._set_component(idx, value)
        else: dx.imag._set_component(idx - half, value)
    def conjugate(dx):
        return type(dx)._make(dx.real.conjugate(), -dx.imag)
    def negate(dx):
        dx.real.negate()
        dx.imag.negate()
        return dx

_names = ('Complex', 'Quaternion', 'Octonion', 'Sedenion', 'Pathion', 'Chingon', 'Routon', 'Voudon')
_algebras = {}

def cayley_dickson(scalar=float, depth=0):
    depth = as_index(depth)
    if (scalar, depth) in _algebras: return _algebras[scalar, depth]
    if not _is_kind(scalar): raise TypeError("Unsupported scalar kind: %r" % (scalar,))
    if depth < 0: raise ValueError("Depth must be non-negative, got %d" % depth)
    name = depth < len(_names) and _names[depth] or 'CayleyDickson%d' % depth
    if scalar is not float: name += '[%s]' % scalar.__name__
    if depth == 0:
        base, subtype, units = Uniplex, None, ('', 'i')
    else:
        base, subtype = Duplex, cayley_dickson(scalar, depth - 1)
        if depth == 1: units = ('', 'i', 'j', 'k')
        else: units = tuple('e%d' % idx for idx in range(2 ** (depth + 1)))
    algebra = type(name, (base,), {
        '__slots__': (), '__module__': __name__, 'scalar': scalar, 'depth': depth, 'dim': depth,
        'size': 2 ** (depth + 1), 'subtype': subtype, 'units': units})
    _algebras[scalar, depth] = algebra
    return algebra

Complex = cayley_dickson(float, 0)
Quaternion = cayley_dickson(float, 1)
Octonion = cayley_dickson(float, 2)
Sedenion = cayley_dickson(float, 3)
Pathion = cayley_dickson(float, 4)

def _hypercomplex(z):
    if isinstance(z, Hypercomplex): return z
    if _is_complex(z) or _is_scalar(z): return Complex(z)
    raise TypeError("Not a hypercomplex value: %r" % (z,))

def _bounded(hc):
    # exact kinds are cut back to digits() significant digits so iterates keep small denominators
    if hc.scalar is not Rational: return hc
    places = digits(Rational)
    for idx, x in enumerate(hc.components()):
        hc[idx] = rationalize(x.evalf(places))
    return hc

def _quotient(x, y):
    # x times the inverse of y through the conjugate; exact only where x and y share a complex plane
    return x * y.conjugate() / y.sq_norm()

def exp(z, precision=None):
    # Taylor series to z**(precision+1); each term is built from the last, never from a factorial
    z = _hypercomplex(z)
    if not precision or precision < 1: precision = max(digits(z.scalar) - 2, 1)
    term = z.copy()
    result = z + 1
    for i in range(2, precision + 2):
        term = term * z / i
        result += term
    return _bounded(result)

def log(z, precision=None):
    # Halley-style refinement from z itself; convergence is not guaranteed for every input
    z = _hypercomplex(z)
    if not precision or precision < 1: precision = max(digits(z.scalar) - 1, 1)
    inner = max(precision // 4, 4)
    logger.debug("log of %s: %d refinements, exp precision %d", type(z).__name__, precision, inner)
    guess = z.copy()
    for _ in range(precision):
        expguess = exp(guess, inner)
        guess = _bounded(guess + 2 * _quotient(z - expguess, z + expguess))
    return guess
