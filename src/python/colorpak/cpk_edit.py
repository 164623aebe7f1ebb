# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'''
colorpak packed color editing

edits decode, change channels in the color's own space and encode again, so
results are always clamped to [0, 1]
colors are a TaggedColor, or packed colors with an explicit space; a
TaggedColor in gives a TaggedColor out
'''
import numpy as np

from colorpak.cpk_constants import CHANNEL_MAX, NEUTRAL_CHANNEL, TaggedColor
from colorpak.cpk_codec import encode, decode
from colorpak.cpk_numpy import rgb_to_luminance, rgb_to_hsl, hsl_to_rgb
from colorpak.cpk_spaces import (
    converter,
    channel_lightness,
    neutral_channels,
    untag,
    tag,
    RGB_KIND,
    OPPONENT_KIND,
    HSLUV_KIND,
)


def _edit(color, space, func):
  packed, space = untag(color, space)
  result = encode(func(decode(packed), space))
  if isinstance(color, TaggedColor):
    return tag(result, space)
  return result


def _move_lightness(channels, space, target, amount):
  conv = converter(space)
  result = channels.copy()
  if conv.kind == RGB_KIND:
    result[..., :3] += (target - result[..., :3]) * amount
  else:
    index = conv.lightness_index
    result[..., index] += (target - result[..., index]) * amount
  return result


def lighten(color, amount, space=None):
  'move lightness toward white by a fraction in [0, 1]'
  return _edit(color, space,
               lambda c, s: _move_lightness(c, s, 1.0, amount))


def darken(color, amount, space=None):
  'move lightness toward black by a fraction in [0, 1]'
  return _edit(color, space,
               lambda c, s: _move_lightness(c, s, 0.0, amount))


def _scale_chroma(channels, space, amount):
  neutral = neutral_channels(channels, space)
  return neutral + (channels - neutral) * amount


def enrich(color, amount, space=None):
  'push chroma away from neutral, amount 1 doubles the distance'
  return _edit(color, space,
               lambda c, s: _scale_chroma(c, s, 1.0 + amount))


def dullen(color, amount, space=None):
  'pull chroma toward neutral, amount 1 gives a gray of the same lightness'
  return _edit(color, space,
               lambda c, s: _scale_chroma(c, s, 1.0 - amount))


def _move_alpha(channels, target, amount):
  result = channels.copy()
  result[..., 3] += (target - result[..., 3]) * amount
  return result


def fade(color, amount, space=None):
  'move alpha toward transparent by a fraction in [0, 1]'
  return _edit(color, space, lambda c, s: _move_alpha(c, 0.0, amount))


def blot(color, amount, space=None):
  'move alpha toward opaque by a fraction in [0, 1]'
  return _edit(color, space, lambda c, s: _move_alpha(c, 1.0, amount))


def lerp(start, end, change, space=None):
  '''
  channel wise interpolation of two colors of one space
  change 0 gives start and 1 gives end, values between blend in that space
  '''
  start_packed, space = untag(start, space)
  end_packed, end_space = untag(end, space)

  change = np.expand_dims(np.asarray(change, dtype=np.float64), -1)
  start_channels = decode(start_packed)
  end_channels = decode(end_packed)

  result = encode(start_channels + (end_channels - start_channels) * change)

  if isinstance(start, TaggedColor):
    return tag(result, end_space)
  return result


def _channel_center(space):
  center = np.zeros(4)
  if converter(space).kind == OPPONENT_KIND:
    center[1:3] = NEUTRAL_CHANNEL
  return center


def edit(color, add=0.0, mul=1.0, space=None):
  '''
  scale and offset every channel at once, add and mul broadcast against
  [..., 4] channels
  opponent chroma channels scale around neutral, the others around 0, and
  HSLuv hue wraps instead of clamping
  '''

  def _edit_channels(channels, space):
    center = _channel_center(space)
    result = center + (channels - center) * np.asarray(mul, dtype=np.float64)
    result = result + np.asarray(add, dtype=np.float64)
    if converter(space).kind == HSLUV_KIND:
      result[..., 0] = np.mod(result[..., 0], 1.0)
    return result

  return _edit(color, space, _edit_channels)


def edit_hsl(color, hue=0.0, saturation=0.0, lightness=0.0, opacity=0.0,
             space=None):
  '''
  offset a color's srgb HSL hue (turns, wrapping), saturation, lightness and
  its alpha, then encode the result back into the color's space
  '''

  def _edit_hsl(channels, space):
    conv = converter(space)
    rgba = np.clip(conv.inverse(channels), 0.0, 1.0)
    hsl = rgb_to_hsl(rgba[..., :3])

    edited = np.stack([
        np.mod(hsl[..., 0] + hue, 1.0),
        np.clip(hsl[..., 1] + saturation, 0.0, 1.0),
        np.clip(hsl[..., 2] + lightness, 0.0, 1.0),
    ],
                      axis=-1)
    alpha = np.clip(channels[..., 3:] + opacity, 0.0, 1.0)

    return conv.forward(np.concatenate([hsl_to_rgb(edited), alpha], axis=-1))

  return _edit(color, space, _edit_hsl)


def _lightness_byte(channels, space):
  value = np.clip(channel_lightness(channels, space), 0.0, 1.0)
  return np.rint(value * CHANNEL_MAX).astype(np.int64)


def _set_lightness(channels, space, value):
  conv = converter(space)
  result = channels.copy()
  if conv.kind == RGB_KIND:
    shift = value - rgb_to_luminance(result)
    result[..., :3] += np.expand_dims(shift, -1)
  else:
    result[..., conv.lightness_index] = value
  return result


def _half_turn_byte(light):
  return (light + 128) & 0xFF


def offset_lightness(color, space=None):
  '''
  move lightness a quarter of the range away from itself, dark colors get
  lighter and light colors get darker
  '''

  def _offset(channels, space):
    light = _lightness_byte(channels, space)
    target = (light + _half_turn_byte(light)) >> 1
    return _set_lightness(channels, space, target / CHANNEL_MAX)

  return _edit(color, space, _offset)


def _two_colors(main, contrasting, space):
  main_packed, space = untag(main, space)
  contrasting_packed, _ = untag(contrasting, space)
  return decode(main_packed), decode(contrasting_packed), space


def _retag(main, result, space):
  if isinstance(main, TaggedColor):
    return tag(result, space)
  return result


def differentiate_lightness(main, contrasting, space=None):
  '''
  average main's lightness with the lightness half the range away from
  contrasting, so main stands out against contrasting
  '''
  channels, other, space = _two_colors(main, contrasting, space)

  light = _lightness_byte(channels, space)
  target = (light + _half_turn_byte(_lightness_byte(other, space))) >> 1

  result = encode(_set_lightness(channels, space, target / CHANNEL_MAX))
  return _retag(main, result, space)


def inverse_lightness(main, contrasting, space=None):
  '''
  squeeze main's lightness into the half of the range opposite to
  contrasting, lighter than the middle against dark colors and darker
  against light ones
  opponent colors whose chroma channels are already a full range apart are
  kept as they are
  '''
  channels, other, space = _two_colors(main, contrasting, space)

  light = channel_lightness(channels, space)
  dark_other = _lightness_byte(other, space) < 128
  target = np.where(dark_other, NEUTRAL_CHANNEL + 0.45 * light,
                    NEUTRAL_CHANNEL - 0.45 * light)
  result = _set_lightness(channels, space, target)

  if converter(space).kind == OPPONENT_KIND:
    distance = np.hypot(channels[..., 1] - other[..., 1],
                        channels[..., 2] - other[..., 2])
    far = distance * CHANNEL_MAX >= 256.0
    result = np.where(np.expand_dims(far, -1), channels, result)

  return _retag(main, encode(result), space)
