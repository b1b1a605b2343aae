"""
Per-channel and non-separable blend functions keyed by blend mode.

Every function takes the backdrop ``Cb`` and the source ``Cs`` as
(height, width, 3) float arrays in [0, 1] and returns the blended color
``B(Cb, Cs)``. Alpha compositing is done by the caller.
"""

import logging

import numpy as np

from psd_ingest.constants import BlendMode
from psd_ingest.registry import new_registry

logger = logging.getLogger(__name__)

BLEND_FUNC, register = new_registry()


# Separable modes work per channel.
@register(BlendMode.NORMAL)
def normal(Cb, Cs):
    return Cs


@register(BlendMode.MULTIPLY)
def multiply(Cb, Cs):
    return Cb * Cs


@register(BlendMode.SCREEN)
def screen(Cb, Cs):
    return Cb + Cs - (Cb * Cs)


@register(BlendMode.OVERLAY)
def overlay(Cb, Cs):
    return hard_light(Cs, Cb)


@register(BlendMode.DARKEN)
def darken(Cb, Cs):
    return np.minimum(Cb, Cs)


@register(BlendMode.LIGHTEN)
def lighten(Cb, Cs):
    return np.maximum(Cb, Cs)


@register(BlendMode.COLOR_DODGE)
def color_dodge(Cb, Cs):
    with np.errstate(divide="ignore", invalid="ignore"):
        B = np.minimum(1, Cb / (1 - Cs))
    B = np.where(Cs == 1, 1.0, B)
    return np.where(Cb == 0, 0.0, B)


@register(BlendMode.COLOR_BURN)
def color_burn(Cb, Cs):
    with np.errstate(divide="ignore", invalid="ignore"):
        B = 1 - np.minimum(1, (1 - Cb) / Cs)
    B = np.where(Cs == 0, 0.0, B)
    return np.where(Cb == 1, 1.0, B)


@register(BlendMode.LINEAR_DODGE)
def linear_dodge(Cb, Cs):
    return np.minimum(1, Cb + Cs)


@register(BlendMode.LINEAR_BURN)
def linear_burn(Cb, Cs):
    return np.maximum(0, Cb + Cs - 1)


@register(BlendMode.HARD_LIGHT)
def hard_light(Cb, Cs):
    return np.where(Cs > 0.5, screen(Cb, 2 * Cs - 1), multiply(Cb, 2 * Cs))


@register(BlendMode.SOFT_LIGHT)
def soft_light(Cb, Cs):
    D = np.where(Cb <= 0.25, ((16 * Cb - 12) * Cb + 4) * Cb, np.sqrt(Cb))
    return np.where(
        Cs <= 0.5,
        Cb - (1 - 2 * Cs) * Cb * (1 - Cb),
        Cb + (2 * Cs - 1) * (D - Cb),
    )


@register(BlendMode.VIVID_LIGHT)
def vivid_light(Cb, Cs):
    # Photoshop renders hard mix with the operands swapped, not the
    # dodge/burn split.
    return hard_mix(Cs, Cb)


@register(BlendMode.LINEAR_LIGHT)
def linear_light(Cb, Cs):
    return np.where(
        Cs > 0.5, linear_dodge(Cb, 2 * Cs - 1), linear_burn(Cb, 2 * Cs)
    )


@register(BlendMode.PIN_LIGHT)
def pin_light(Cb, Cs):
    return np.where(Cs > 0.5, lighten(Cb, 2 * Cs - 1), darken(Cb, 2 * Cs))


@register(BlendMode.DIFFERENCE)
def difference(Cb, Cs):
    return np.abs(Cb - Cs)


@register(BlendMode.EXCLUSION)
def exclusion(Cb, Cs):
    return Cb + Cs - 2 * Cb * Cs


@register(BlendMode.SUBTRACT)
def subtract(Cb, Cs):
    return np.maximum(0, Cb - Cs)


@register(BlendMode.HARD_MIX)
def hard_mix(Cb, Cs):
    # Slightly shrink the source so that sums landing on 1.0 by rounding
    # stay below the threshold.
    return np.where(Cb + 0.999999 * Cs >= 1, 1.0, 0.0)


@register(BlendMode.DIVIDE)
def divide(Cb, Cs):
    return np.minimum(1, Cb / (Cs + 1e-6))


# Non-separable blend functions, from the PDF reference.
@register(BlendMode.HUE)
def hue(Cb, Cs):
    return _set_lum(_set_sat(Cs, _sat(Cb)), _lum(Cb))


@register(BlendMode.SATURATION)
def saturation(Cb, Cs):
    return _set_lum(_set_sat(Cb, _sat(Cs)), _lum(Cb))


@register(BlendMode.COLOR)
def color(Cb, Cs):
    return _set_lum(Cs, _lum(Cb))


@register(BlendMode.LUMINOSITY)
def luminosity(Cb, Cs):
    return _set_lum(Cb, _lum(Cs))


@register(BlendMode.DARKER_COLOR)
def darker_color(Cb, Cs):
    return np.where(_lum(Cs) < _lum(Cb), Cs, Cb)


@register(BlendMode.LIGHTER_COLOR)
def lighter_color(Cb, Cs):
    return np.where(_lum(Cs) > _lum(Cb), Cs, Cb)


@register(BlendMode.DISSOLVE)
def dissolve(Cb, Cs):
    logger.debug("Dissolve blend is rendered as normal")
    return normal(Cb, Cs)


def _lum(C):
    return 0.3 * C[:, :, 0:1] + 0.59 * C[:, :, 1:2] + 0.11 * C[:, :, 2:3]


def _set_lum(C, l):
    d = l - _lum(C)
    return _clip_color(C + d)


def _clip_color(C):
    lum = _lum(C)
    low = np.min(C, axis=2, keepdims=True)
    high = np.max(C, axis=2, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        C = np.where(low < 0.0, lum + (C - lum) * lum / (lum - low), C)
        C = np.where(high > 1.0, lum + (C - lum) * (1 - lum) / (high - lum), C)
    return np.clip(C, 0.0, 1.0)


def _sat(C):
    return np.max(C, axis=2, keepdims=True) - np.min(C, axis=2, keepdims=True)


def _set_sat(C, s):
    low = np.min(C, axis=2, keepdims=True)
    spread = np.max(C, axis=2, keepdims=True) - low
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(spread > 0, (C - low) * s / spread, 0.0)


def get_blend_func(blend_mode: BlendMode):
    """Look up the blend function; unknown modes blend as normal."""
    func = BLEND_FUNC.get(blend_mode)
    if func is None:
        logger.debug("Unsupported blend mode %s, using normal", blend_mode)
        return normal
    return func
