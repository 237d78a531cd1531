"""Double-float splitting of float64 values.

GPU evaluators often lack native float64. Passing each coordinate as a pair
of float32 values (hi, lo) with hi + lo ~= value lets the evaluator rebuild
roughly 48 bits of mantissa with double-float arithmetic, which is what keeps
deep zooms from turning into blocks of identical pixels.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Split:
    """A float64 value as a non-overlapping pair of float32 values.

    Both fields are Python floats that are exactly representable as float32.
    """
    hi: float
    lo: float

    @property
    def value(self) -> float:
        """Reconstruct the float64 value (hi + lo in double precision)."""
        return self.hi + self.lo


def to_float32(value: float) -> float:
    """Round a float64 to the nearest float32 and widen it back."""
    return float(np.float32(value))


def split_double(value: float) -> Split:
    """Split value into (hi, lo) float32 halves with minimal residual.

    hi is the nearest float32 to value and lo is the rounded residual. A
    quick two-sum renormalization guarantees the halves do not overlap, which
    also makes the split idempotent: split_double(split_double(v).value)
    returns the same pair.

    The reconstruction error |value - (hi + lo)| is bounded by one float32
    rounding of the residual, about 2**-48 * |value|, as long as the residual
    stays inside float32's normal range (|value| >~ 1e-31).

    NaN and infinite inputs propagate into both halves without raising.
    """
    with np.errstate(over="ignore", invalid="ignore"):
        hi = to_float32(value)
        residual = value - hi
        lo = to_float32(residual)

        total = to_float32(hi + lo)
        if total != hi:
            error = residual - (total - hi)
            return Split(total, to_float32(error))
    return Split(hi, lo)


def split_error(value: float) -> float:
    """Absolute reconstruction error of split_double(value)."""
    return abs(value - split_double(value).value)
