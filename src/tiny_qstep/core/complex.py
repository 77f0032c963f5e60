"""
Complex arithmetic over (real, imag) pairs.

Amplitudes are stored as two parallel float buffers, so products are
spelled out on the parts. Every function works on plain floats as well as
on numpy arrays of any broadcastable shape.
"""

from __future__ import annotations

def multiply(a_re, a_im, b_re, b_im):
    """(a_re + i a_im) * (b_re + i b_im) -> (re, im)"""
    return a_re * b_re - a_im * b_im, a_re * b_im + a_im * b_re


def add(a_re, a_im, b_re, b_im):
    """(a_re + i a_im) + (b_re + i b_im) -> (re, im)"""
    return a_re + b_re, a_im + b_im


def magnitude_squared(re, im):
    """|re + i im|^2"""
    return re * re + im * im
