# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'''
colorpak color space converters

every space maps gamma encoded srgb to 3 normalized channels and back
  SRGB    identity
  RGB     linear rgb
  CIELAB  L*/100, a*/255 + .5, b*/255 + .5
  IPT     I, P/2 + .5, T/2 + .5 over gamma encoded rgb
  IPT_HQ  I, P + .5, T + .5 over LMS' compressed linear rgb
  HSLUV   hue in turns, saturation, L*/100

alpha is carried through untouched, packed colors are decoded and encoded
with colorpak.cpk_codec
'''
import collections
import functools
import numpy as np

from colorpak.cpk_constants import (
    XYZ_D65_2A_WHITEPOINT,
    CIE_EPSILON,
    CIE_KAPPA,
    CIE_LINEAR_SLOPE,
    CIE_LINEAR_OFFSET,
    CIE_F_THRESHOLD,
    CIELAB_AB_SCALE,
    M_RGB_TO_IPT_T,
    M_IPT_TO_RGB_T,
    IPT_CHROMA_SCALE,
    M_RGB_TO_LMS_T,
    M_LMS_TO_RGB_T,
    M_LMSP_TO_IPT_T,
    M_IPT_TO_LMSP_T,
    IPT_HQ_CHROMA_SCALE,
    LMS_COMPRESSION,
    M_XYZ_TO_RGB,
    HSLUV_REF_U,
    HSLUV_REF_V,
    HSLUV_L_MIN,
    HSLUV_L_MAX,
    HSLUV_C_MIN,
    NEUTRAL_CHANNEL,
    SMALL_COMPONENT_VALUE,
    TaggedColor,
)
from colorpak.cpk_constants import S
from colorpak.cpk_numpy import (
    approx_cbrt,
    forward_gamma,
    reverse_gamma,
    signed_gamma_correct,
    apply_matrix,
    rgb_to_xyz,
    xyz_to_rgb,
    rgb_to_luminance,
    rgb_to_hsl,
    hsl_to_rgb,
)
from colorpak.cpk_codec import (
    encode,
    decode,
    rgba8888_to_channels,
    channels_to_rgba8888,
)

RGB_KIND = 'rgb'
OPPONENT_KIND = 'opponent'
HSLUV_KIND = 'hsluv'

TWO_PI = 2.0 * np.pi


def srgb_to_rgb(srgb):
  'convert from a gamma 2.4 color space to linear rgb'
  return forward_gamma(srgb)


def rgb_to_srgb(rgb):
  'convert from linear rgb to a gamma 2.4 color space'
  return reverse_gamma(rgb)


def _cie_f(t):
  cube_root_pixels = approx_cbrt(np.maximum(t, 0.0))
  linear_pixels = CIE_LINEAR_SLOPE * t + CIE_LINEAR_OFFSET
  return np.where(t > CIE_EPSILON, cube_root_pixels, linear_pixels)


def _cie_f_inverse(f):
  cube_pixels = f * f * f
  linear_pixels = (f - CIE_LINEAR_OFFSET) / CIE_LINEAR_SLOPE
  return np.where(f > CIE_F_THRESHOLD, cube_pixels, linear_pixels)


def srgb_to_cielab(srgb):
  'convert from srgb to normalized CIELa*b* assuming a D65 whitepoint + 2deg'

  xyz = rgb_to_xyz(forward_gamma(srgb)) / XYZ_D65_2A_WHITEPOINT

  f = _cie_f(xyz)
  fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

  L = 1.16 * fy - 0.16
  a = 500.0 * (fx - fy) / CIELAB_AB_SCALE + NEUTRAL_CHANNEL
  b = 200.0 * (fy - fz) / CIELAB_AB_SCALE + NEUTRAL_CHANNEL

  return np.stack([L, a, b], axis=-1)


def cielab_to_srgb(lab):
  'convert from normalized CIELa*b* to srgb'
  lab = np.asarray(lab, dtype=np.float64)

  L, a, b = lab[..., 0], lab[..., 1], lab[..., 2]
  fy = (L + 0.16) / 1.16
  fx = fy + (a - NEUTRAL_CHANNEL) * CIELAB_AB_SCALE / 500.0
  fz = fy - (b - NEUTRAL_CHANNEL) * CIELAB_AB_SCALE / 200.0

  xyz = _cie_f_inverse(np.stack([fx, fy, fz], axis=-1)) * XYZ_D65_2A_WHITEPOINT

  return reverse_gamma(xyz_to_rgb(xyz))


def _bias_opponent(ipt, scale):
  return np.stack([
      ipt[..., 0],
      ipt[..., 1] * scale + NEUTRAL_CHANNEL,
      ipt[..., 2] * scale + NEUTRAL_CHANNEL,
  ],
                  axis=-1)


def _unbias_opponent(channels, scale):
  channels = np.asarray(channels, dtype=np.float64)
  return np.stack([
      channels[..., 0],
      (channels[..., 1] - NEUTRAL_CHANNEL) / scale,
      (channels[..., 2] - NEUTRAL_CHANNEL) / scale,
  ],
                  axis=-1)


def srgb_to_ipt(srgb):
  'linear opponent transform of gamma encoded rgb'
  return _bias_opponent(apply_matrix(srgb, M_RGB_TO_IPT_T), IPT_CHROMA_SCALE)


def ipt_to_srgb(ipt):
  'inverse of srgb_to_ipt'
  return apply_matrix(_unbias_opponent(ipt, IPT_CHROMA_SCALE), M_IPT_TO_RGB_T)


def srgb_to_ipt_hq(srgb):
  'ipt from linear rgb through a power compressed LMS cone space'
  lms = apply_matrix(forward_gamma(srgb), M_RGB_TO_LMS_T)
  lmsp = signed_gamma_correct(lms, LMS_COMPRESSION)
  return _bias_opponent(apply_matrix(lmsp, M_LMSP_TO_IPT_T),
                        IPT_HQ_CHROMA_SCALE)


def ipt_hq_to_srgb(ipt):
  'inverse of srgb_to_ipt_hq'
  lmsp = apply_matrix(_unbias_opponent(ipt, IPT_HQ_CHROMA_SCALE),
                      M_IPT_TO_LMSP_T)
  lms = signed_gamma_correct(lmsp, 1.0 / LMS_COMPRESSION)
  return reverse_gamma(apply_matrix(lms, M_LMS_TO_RGB_T))


def _l_to_y(l100):
  return np.where(l100 > 8.0, np.power((l100 + 16.0) / 116.0, 3.0),
                  l100 / CIE_KAPPA)


def chroma_limit(hue, lightness):
  '''
  largest Luv chroma inside srgb at a hue in turns and a lightness of L*/100
  the result is in L*/100 units

  at a fixed L each of the 6 srgb gamut faces (a linear rgb channel at 0 or 1)
  is a line A*U + B*V + C = 0 in the uv plane, the limit is the nearest face
  crossed by a ray from neutral at hue
  https://www.hsluv.org/math/
  '''
  hue, lightness = np.broadcast_arrays(np.asarray(hue, dtype=np.float64),
                                       np.asarray(lightness, dtype=np.float64))
  l100 = lightness * 100.0
  y = _l_to_y(l100)

  theta = hue * TWO_PI
  sin_h, cos_h = np.sin(theta), np.cos(theta)

  lengths = []
  for m1, m2, m3 in M_XYZ_TO_RGB:
    for t in (0.0, 1.0):
      a = y * (9.0 * m1 - 3.0 * m3)
      b = y * (4.0 * m2 - 20.0 * m3) - 4.0 * t
      c = 13.0 * l100 * (a * HSLUV_REF_U + b * HSLUV_REF_V + 12.0 * m3 * y)

      with np.errstate(divide='ignore', invalid='ignore'):
        length = -c / (a * cos_h + b * sin_h)

      lengths.append(np.where(length >= 0.0, length, np.inf))

  limit = np.min(np.stack(lengths, axis=-1), axis=-1)

  return np.where(np.isfinite(limit), limit, 0.0) / 100.0


def srgb_to_hsluv(srgb):
  'convert from srgb to HSLuv with hue in turns and saturation, L* in [0, 1]'

  xyz = rgb_to_xyz(forward_gamma(srgb))
  X, Y, Z = xyz[..., 0], xyz[..., 1], xyz[..., 2]

  cube_root_l = 116.0 * approx_cbrt(np.maximum(Y, 0.0)) - 16.0
  l100 = np.where(Y > CIE_EPSILON, cube_root_l, CIE_KAPPA * Y)

  denom = X + 15.0 * Y + 3.0 * Z
  valid = denom > SMALL_COMPONENT_VALUE
  safe_denom = np.where(valid, denom, 1.0)
  var_u = np.where(valid, 4.0 * X / safe_denom, HSLUV_REF_U)
  var_v = np.where(valid, 9.0 * Y / safe_denom, HSLUV_REF_V)

  u = 13.0 * l100 * (var_u - HSLUV_REF_U)
  v = 13.0 * l100 * (var_v - HSLUV_REF_V)

  chroma = np.hypot(u, v)
  hue = np.mod(np.arctan2(v, u) / TWO_PI, 1.0)
  hue = np.where(chroma < HSLUV_C_MIN, 0.0, hue)

  # pure black and pure white have no saturation
  edge = (l100 > HSLUV_L_MAX) | (l100 < HSLUV_L_MIN)
  l100 = np.clip(l100, 0.0, 100.0)

  limit = chroma_limit(hue, l100 / 100.0) * 100.0
  valid_limit = (limit > SMALL_COMPONENT_VALUE) & ~edge
  saturation = np.where(valid_limit,
                        chroma / np.where(valid_limit, limit, 1.0), 0.0)
  l100 = np.where(l100 > HSLUV_L_MAX, 100.0, l100)

  return np.stack([hue, saturation, l100 / 100.0], axis=-1)


def hsluv_to_srgb(hsluv):
  'convert from HSLuv with hue in turns and saturation, L* in [0, 1] to srgb'
  hsluv = np.asarray(hsluv, dtype=np.float64)

  hue, saturation, l100 = hsluv[..., 0], hsluv[..., 1], hsluv[..., 2] * 100.0

  edge = (l100 > HSLUV_L_MAX) | (l100 < HSLUV_L_MIN)
  chroma = np.where(edge, 0.0,
                    saturation * chroma_limit(hue, l100 / 100.0) * 100.0)

  theta = hue * TWO_PI
  u = np.cos(theta) * chroma
  v = np.sin(theta) * chroma

  Y = _l_to_y(l100)

  black = l100 < HSLUV_L_MIN
  safe_l = np.where(black, 1.0, l100)
  var_u = u / (13.0 * safe_l) + HSLUV_REF_U
  var_v = np.maximum(v / (13.0 * safe_l) + HSLUV_REF_V, SMALL_COMPONENT_VALUE)

  X = 9.0 * Y * var_u / (4.0 * var_v)
  Z = (9.0 * Y - 15.0 * var_v * Y - var_v * X) / (3.0 * var_v)

  xyz = np.where(np.expand_dims(black, -1), 0.0, np.stack([X, Y, Z], axis=-1))

  return reverse_gamma(xyz_to_rgb(xyz))


TRANSFORMS = {
    (S.SRGB, S.RGB): srgb_to_rgb,
    (S.SRGB, S.CIELAB): srgb_to_cielab,
    (S.SRGB, S.IPT): srgb_to_ipt,
    (S.SRGB, S.IPT_HQ): srgb_to_ipt_hq,
    (S.SRGB, S.HSLUV): srgb_to_hsluv,
    (S.RGB, S.SRGB): rgb_to_srgb,
    (S.CIELAB, S.SRGB): cielab_to_srgb,
    (S.IPT, S.SRGB): ipt_to_srgb,
    (S.IPT_HQ, S.SRGB): ipt_hq_to_srgb,
    (S.HSLUV, S.SRGB): hsluv_to_srgb,
}


def color_space(from_space, to_space, values):
  '''
  convert unpacked channels from_space to_space through srgb
  values may be [..., 3] colors or [..., 4] colors with alpha passed through
  short circuit compute if from_space == to_space
  '''
  converter(from_space)
  converter(to_space)

  values = np.asarray(values, dtype=np.float64)
  if values.ndim == 0 or values.shape[-1] not in (3, 4):
    raise ValueError(f'expected a trailing axis of size 3 or 4, got {values.shape}')

  if from_space == to_space:
    return values.copy()

  color = values[..., :3]

  if from_space != S.SRGB:
    color = TRANSFORMS[(from_space, S.SRGB)](color)

  if to_space != S.SRGB:
    color = TRANSFORMS[(S.SRGB, to_space)](color)

  if values.shape[-1] == 4:
    color = np.concatenate([color, values[..., 3:]], axis=-1)

  return color


Converter = collections.namedtuple(
    'Converter', ['space', 'forward', 'inverse', 'kind', 'lightness_index'])


def _make_converter(space, kind, lightness_index):
  return Converter(
      space=space,
      forward=functools.partial(color_space, S.SRGB, space),
      inverse=functools.partial(color_space, space, S.SRGB),
      kind=kind,
      lightness_index=lightness_index,
  )


CONVERTERS = {
    S.SRGB: _make_converter(S.SRGB, RGB_KIND, None),
    S.RGB: _make_converter(S.RGB, RGB_KIND, None),
    S.CIELAB: _make_converter(S.CIELAB, OPPONENT_KIND, 0),
    S.IPT: _make_converter(S.IPT, OPPONENT_KIND, 0),
    S.IPT_HQ: _make_converter(S.IPT_HQ, OPPONENT_KIND, 0),
    S.HSLUV: _make_converter(S.HSLUV, HSLUV_KIND, 2),
}


def converter(space):
  'lookup the converter for a space, raise ValueError for unknown spaces'
  result = CONVERTERS.get(space) if isinstance(space, S) else None
  if result is None:
    raise ValueError(f'bad color space {space!r}')
  return result


def from_rgba(rgba, space):
  'convert srgb [..., 4] rgba into packed colors of space'
  return encode(converter(space).forward(rgba))


def to_rgba(packed, space):
  'convert packed colors of space into srgb [..., 4] rgba clamped to [0, 1]'
  return np.clip(converter(space).inverse(decode(packed)), 0.0, 1.0)


def from_rgba8888(rgba8888, space):
  'convert RGBA8888 integers into packed colors of space'
  return from_rgba(rgba8888_to_channels(rgba8888), space)


def to_rgba8888(packed, space):
  'convert packed colors of space into RGBA8888 integers'
  return channels_to_rgba8888(to_rgba(packed, space))


def tag(packed, space):
  'pair a packed color with its space'
  converter(space)
  return TaggedColor(packed, space)


def untag(color, space=None):
  '''
  split a TaggedColor or a packed color with an explicit space into
  (packed, space), raise ValueError when the space is missing or conflicts
  '''
  if isinstance(color, TaggedColor):
    if space is not None and space != color.space:
      raise ValueError(
          f'tagged {color.space.name} color used as {getattr(space, "name", space)}')
    space = color.space
    color = color.packed

  if space is None:
    raise ValueError('untagged packed color requires a space')

  converter(space)
  return color, space


def transcode(tagged, to_space):
  'convert a TaggedColor into another space through srgb'
  packed, space = untag(tagged)
  return tag(from_rgba(to_rgba(packed, space), to_space), to_space)


def _opponent_offsets(channels):
  return (channels[..., 1] - NEUTRAL_CHANNEL, channels[..., 2] - NEUTRAL_CHANNEL)


def channel_lightness(channels, space):
  'lightness of unpacked channels of space'
  conv = converter(space)
  if conv.kind == RGB_KIND:
    return rgb_to_luminance(channels)
  return channels[..., conv.lightness_index]


def channel_hue(channels, space):
  'hue in turns [0, 1) of unpacked channels of space'
  conv = converter(space)
  if conv.kind == RGB_KIND:
    return rgb_to_hsl(channels[..., :3])[..., 0]
  if conv.kind == HSLUV_KIND:
    return channels[..., 0]
  c1, c2 = _opponent_offsets(channels)
  return np.mod(np.arctan2(c2, c1) / TWO_PI, 1.0)


def channel_chroma(channels, space):
  'distance from neutral of unpacked channels of space'
  conv = converter(space)
  if conv.kind == RGB_KIND:
    color = channels[..., :3]
    return np.max(color, axis=-1) - np.min(color, axis=-1)
  if conv.kind == HSLUV_KIND:
    return channels[..., 1] * chroma_limit(channels[..., 0], channels[..., 2])
  return np.hypot(*_opponent_offsets(channels))


def channel_saturation(channels, space):
  'saturation in [0, 1] of unpacked channels of space'
  conv = converter(space)
  if conv.kind == RGB_KIND:
    return rgb_to_hsl(channels[..., :3])[..., 1]
  if conv.kind == HSLUV_KIND:
    return channels[..., 1]
  return np.minimum(1.0, 2.0 * channel_chroma(channels, space))


def neutral_channels(channels, space, neutral_lightness=False):
  '''
  the achromatic counterpart of unpacked [..., 4] channels, alpha is kept
  with neutral_lightness the lightness is also moved to the middle
  '''
  conv = converter(space)
  result = np.array(channels, dtype=np.float64)

  if conv.kind == RGB_KIND:
    gray = rgb_to_luminance(result)
    if neutral_lightness:
      gray = np.full_like(gray, NEUTRAL_CHANNEL)
    result[..., :3] = np.expand_dims(gray, -1)
  elif conv.kind == HSLUV_KIND:
    result[..., 1] = 0.0
  else:
    result[..., 1] = NEUTRAL_CHANNEL
    result[..., 2] = NEUTRAL_CHANNEL

  if neutral_lightness and conv.kind != RGB_KIND:
    result[..., conv.lightness_index] = NEUTRAL_CHANNEL

  return result


def hue_pattern(hue):
  'the fully saturated rgb color of an HSL hue, its max is 1 and its min is 0'
  hue = np.asarray(hue, dtype=np.float64)
  return hsl_to_rgb(np.stack([hue, np.ones_like(hue), np.full_like(hue, 0.5)],
                             axis=-1))


def _place_chroma(channels, space, hue_value, chroma_value):
  conv = converter(space)
  result = np.array(channels, dtype=np.float64)
  hue_value, chroma_value = np.broadcast_arrays(
      np.asarray(hue_value, dtype=np.float64),
      np.asarray(chroma_value, dtype=np.float64))

  if conv.kind == RGB_KIND:
    # rgb = base + chroma * pattern keeps the luma of the channels
    pattern = hue_pattern(hue_value)
    base = rgb_to_luminance(result) - chroma_value * rgb_to_luminance(pattern)
    result[..., :3] = (np.expand_dims(base, -1) +
                       np.expand_dims(chroma_value, -1) * pattern)
  elif conv.kind == HSLUV_KIND:
    limit = chroma_limit(hue_value, result[..., 2])
    valid = limit > SMALL_COMPONENT_VALUE
    result[..., 0] = np.mod(hue_value, 1.0)
    result[..., 1] = np.where(valid,
                              chroma_value / np.where(valid, limit, 1.0), 0.0)
  else:
    theta = hue_value * TWO_PI
    result[..., 1] = NEUTRAL_CHANNEL + chroma_value * np.cos(theta)
    result[..., 2] = NEUTRAL_CHANNEL + chroma_value * np.sin(theta)

  return result


def channels_with_chroma(channels, space, chroma_value):
  '''
  unpacked [..., 4] channels of space moved to a new chroma, measured like
  channel_chroma, keeping hue, lightness and alpha
  '''
  return _place_chroma(channels, space, channel_hue(channels, space),
                       chroma_value)


def channels_from_hcl(hue_value, chroma_value, lightness_value, alpha_value,
                      space):
  '''
  unpacked [..., 4] channels of space with a hue in turns, a chroma measured
  like channel_chroma, a lightness like channel_lightness and an alpha
  '''
  conv = converter(space)
  hue_value, chroma_value, lightness_value, alpha_value = np.broadcast_arrays(
      np.mod(np.asarray(hue_value, dtype=np.float64), 1.0),
      np.maximum(np.asarray(chroma_value, dtype=np.float64), 0.0),
      np.clip(np.asarray(lightness_value, dtype=np.float64), 0.0, 1.0),
      np.clip(np.asarray(alpha_value, dtype=np.float64), 0.0, 1.0))

  if conv.kind == RGB_KIND:
    channels = np.stack([lightness_value] * 3 + [alpha_value], axis=-1)
  elif conv.kind == HSLUV_KIND:
    channels = np.stack(
        [hue_value,
         np.zeros_like(hue_value), lightness_value, alpha_value],
        axis=-1)
  else:
    neutral = np.full_like(hue_value, NEUTRAL_CHANNEL)
    channels = np.stack([lightness_value, neutral, neutral, alpha_value],
                        axis=-1)

  return _place_chroma(channels, space, hue_value, chroma_value)


def from_hcl(hue_value, chroma_value, lightness_value, alpha_value, space):
  '''
  packed colors of space from hue, chroma, lightness and alpha
  chroma past the edge of the channel range is clamped by the codec, use
  cpk_gamut.from_hsl for colors that stay in gamut
  '''
  return encode(
      channels_from_hcl(hue_value, chroma_value, lightness_value, alpha_value,
                        space))


def lightness(packed, space):
  'lightness of packed colors of space'
  return channel_lightness(decode(packed), space)


def hue(packed, space):
  'hue in turns [0, 1) of packed colors of space'
  return channel_hue(decode(packed), space)


def chroma(packed, space):
  'distance from neutral of packed colors of space'
  return channel_chroma(decode(packed), space)


def saturation(packed, space):
  'saturation in [0, 1] of packed colors of space'
  return channel_saturation(decode(packed), space)


def alpha(packed):
  'alpha in [0, 1] of packed colors of any space'
  return decode(packed)[..., 3]
