# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'colorpak numpy kernels'
import numpy as np

from colorpak.cpk_constants import (
    REC_709_LUMA_WEIGHTS,
    SMALL_COMPONENT_VALUE,
    SRGB_LINEAR_THRESHOLD,
    RGB_LINEAR_THRESHOLD,
    SRGB_LINEAR_SLOPE,
    SRGB_OFFSET,
    SRGB_GAMMA,
    CBRT_MAGIC,
    CBRT_NEWTON_STEPS,
    M_RGB_TO_XYZ_T,
    M_XYZ_TO_RGB_T,
)


def approx_cbrt(x):
  '''
  cube root of non negative values
  x is split into m * 2**(3 * q) with m in [0.5, 4), a bit level estimate of
  cbrt(m) on its float32 representation is refined by newton steps in float64
  and scaled back by 2**q, relative error is below 1e-9 for any finite x > 0
  '''
  x = np.asarray(x, dtype=np.float64)

  positive = (x > 0.0) & np.isfinite(x)
  mantissa, exponent = np.frexp(np.where(positive, x, 1.0))
  shift = np.mod(exponent, 3)
  reduced = np.ldexp(mantissa, shift)

  ix = np.asarray(reduced, dtype=np.float32).view(np.uint32)
  ix = (ix >> 2) + (ix >> 4)
  ix = ix + (ix >> 4)
  ix = ix + (ix >> 8) + np.uint32(CBRT_MAGIC)

  y = np.asarray(ix, dtype=np.uint32).view(np.float32).astype(np.float64)
  for _ in range(CBRT_NEWTON_STEPS):
    y = (2.0 * y + reduced / (y * y)) / 3.0

  y = np.ldexp(y, (exponent - shift) // 3)

  return np.where(positive, y, np.where(x > 0.0, x, 0.0))


def signed_gamma_correct(values, gamma):
  'apply a gamma power curve to magnitudes, keeping the sign'
  values = np.asarray(values, dtype=np.float64)
  #pylint: disable=assignment-from-no-return
  return np.sign(values) * np.power(np.abs(values), gamma)


def forward_gamma(srgb):
  '''
  convert from a gamma 2.4 color space to linear rgb
  2.4 gamma and linear below .04045, negative values stay linear
  '''
  srgb = np.asarray(srgb, dtype=np.float64)

  linear_mask = (srgb < SRGB_LINEAR_THRESHOLD).astype(np.float64)

  exponential_mask = 1.0 - linear_mask

  linear_pixels = srgb / SRGB_LINEAR_SLOPE

  exponential_pixels = np.power(
      (np.maximum(srgb, SRGB_LINEAR_THRESHOLD) + SRGB_OFFSET) /
      (1.0 + SRGB_OFFSET), SRGB_GAMMA)

  return linear_pixels * linear_mask + exponential_pixels * exponential_mask


def reverse_gamma(rgb):
  '''
  convert from linear rgb to a gamma 2.4 color space
  negative values stay linear so small undershoots keep their sign
  '''
  rgb = np.asarray(rgb, dtype=np.float64)

  linear_mask = (rgb < RGB_LINEAR_THRESHOLD).astype(np.float64)

  exponential_mask = 1.0 - linear_mask

  linear_pixels = rgb * SRGB_LINEAR_SLOPE

  exponential_pixels = (1.0 + SRGB_OFFSET) * np.power(
      np.maximum(rgb, RGB_LINEAR_THRESHOLD), 1.0 / SRGB_GAMMA) - SRGB_OFFSET

  return linear_pixels * linear_mask + exponential_pixels * exponential_mask


def rgb_to_luminance(rgb, luma_weights=REC_709_LUMA_WEIGHTS):
  'luminance of a color array, or higher dim color images'

  r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

  return r * luma_weights[0] + g * luma_weights[1] + b * luma_weights[2]


def rgb_to_hsl(rgb):
  '''
  hue, saturation and lightness of rgb values
  hue is in turns [0, 1), achromatic colors get hue and saturation 0
  '''
  rgb = np.asarray(rgb, dtype=np.float64)
  r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

  max_c = np.max(rgb[..., :3], axis=-1)
  min_c = np.min(rgb[..., :3], axis=-1)
  lightness = 0.5 * (max_c + min_c)
  delta = max_c - min_c

  chromatic = delta > SMALL_COMPONENT_VALUE
  safe_delta = np.where(chromatic, delta, 1.0)

  denom = 1.0 - np.abs(2.0 * lightness - 1.0)
  saturation = np.where(chromatic & (denom > SMALL_COMPONENT_VALUE),
                        delta / np.maximum(denom, SMALL_COMPONENT_VALUE), 0.0)

  hue = np.where(
      max_c == r,
      np.mod((g - b) / safe_delta, 6.0),
      np.where(max_c == g, (b - r) / safe_delta + 2.0,
               (r - g) / safe_delta + 4.0),
  ) / 6.0
  hue = np.mod(np.where(chromatic, hue, 0.0), 1.0)

  return np.stack([hue, np.clip(saturation, 0.0, 1.0), lightness], axis=-1)


def hsl_to_rgb(hsl):
  '''
  rgb values of hue, saturation and lightness
  hue is in turns and wraps, inverse of rgb_to_hsl for chromatic colors
  '''
  hsl = np.asarray(hsl, dtype=np.float64)
  hue, saturation, lightness = hsl[..., 0], hsl[..., 1], hsl[..., 2]

  k = np.mod(np.array([0.0, 8.0, 4.0]) + np.expand_dims(hue, -1) * 12.0, 12.0)
  a = np.expand_dims(saturation * np.minimum(lightness, 1.0 - lightness), -1)

  return np.expand_dims(lightness, -1) - a * np.clip(
      np.minimum(k - 3.0, 9.0 - k), -1.0, 1.0)


def point_or_points_or_image_wrapper(func):
  '''
  a decorated function will be called with reshaped input and output to support
    a single 3d point: pt.shape = (3,)
    an array of 3d points: pts.shape = (N,3)
    an image of 3d points: pts.shape = (H,W,3)
    or any other batch shape ending in 3

  wrapped functions should internally support the array of 3d points case (N,3)
  '''

  def inner(point_or_points_or_image, *args, **kwargs):

    values = np.asarray(point_or_points_or_image, dtype=np.float64)

    if values.ndim == 0 or values.shape[-1] != 3:
      raise ValueError(f'expected a trailing axis of size 3, got {values.shape}')

    points = values.reshape((-1, 3))

    result = func(points, *args, **kwargs)

    return result.reshape(values.shape[:-1] + result.shape[-1:])

  return inner


@point_or_points_or_image_wrapper
def apply_matrix(points, matrix_t):
  'matrix transformation of row points by a pre transposed 3x3 matrix'
  return np.matmul(points, matrix_t)


@point_or_points_or_image_wrapper
def rgb_to_xyz(points):
  'matrix transformation from linear RGB to XYZ color space'
  return np.matmul(points, M_RGB_TO_XYZ_T)


@point_or_points_or_image_wrapper
def xyz_to_rgb(points):
  'matrix transformation from XYZ to linear RGB color space'
  return np.matmul(points, M_XYZ_TO_RGB_T)
