from numpy import arccos, clip, cos, exp as expf, finfo, floating, log as logf, sin
from sympy import Rational
from decimal import Decimal, getcontext as decimalcontext
from cayley_dickson import Hypercomplex, cayley_dickson
import logging
import sys

logger = logging.getLogger(__name__)

# Conveniences on depth-1 values of any scalar kind: norms, rotation by a unit quaternion,
# the polar form and spherical interpolation. Results keep the scalar kind of their inputs.

def _checked(q):
    if not isinstance(q, Hypercomplex) or q.depth != 1: raise TypeError("Expected a quaternion, got %r" % (q,))
    return q

def _epsilon(scalar):
    if scalar is Rational: return 0.0
    if scalar is Decimal: return float(Decimal(10) ** (1 - decimalcontext().prec))
    if isinstance(scalar, type) and issubclass(scalar, floating): return float(finfo(scalar).eps)
    return sys.float_info.epsilon

def quaternion(re, i=0, j=0, k=0, scalar=float):
    return cayley_dickson(scalar, 1)(re, i, j, k)

def vector(q):
    v = _checked(q).copy()
    v[0] = 0
    return v

def scalar(q): return _checked(q)[0]
def sq_norm(q): return _checked(q).sq_norm()
def norm(q): return abs(_checked(q))

def is_unit(q):
    return abs(float(sq_norm(q)) - 1.0) <= 4 * _epsilon(q.scalar)

def unit(q):
    # the zero quaternion has no direction and comes back as a copy
    if not _checked(q): return q.copy()
    return q / norm(q)

def conjugate(p, q=None):
    # q*p*q' turns the vector part of p about the axis of q by twice the angle of q
    if q is None: return _checked(p).conjugate()
    if not is_unit(_checked(q)): raise ValueError("q must be a unit quaternion, its squared norm is %s" % sq_norm(q))
    return q * _checked(p) * q.conjugate()

def angle(q):
    return q.coerce(arccos(clip(float(scalar(q)) / float(norm(q)), -1.0, 1.0)))

def exp(q):
    v = vector(q)
    theta = float(norm(v))
    return (unit(v) * q.coerce(sin(theta)) + q.coerce(cos(theta))) * q.coerce(expf(float(scalar(q))))

def log(q):
    return unit(vector(q)) * angle(q) + q.coerce(logf(float(norm(q))))

def slerp(p, q, t):
    _checked(p), _checked(q)
    dot = float(sum(a * b for a, b in zip(p, q)))
    # the shorter arc runs through -p
    if dot < 0.0: p, dot = -p, -dot
    theta_0 = arccos(clip(dot, -1.0, 1.0))
    theta = theta_0 * t
    if sin(theta_0) > 1e-15:
        s1 = sin(theta) / sin(theta_0)
        return p * p.coerce(cos(theta) - dot * s1) + q * q.coerce(s1)
    logger.debug("slerp between parallel quaternions, interpolating linearly")
    return p * p.coerce(1.0 - t) + q * q.coerce(t)
