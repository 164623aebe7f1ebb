# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'''
colorpak gamut validation

a packed color stands for every value in its quantization cell, one half
step around each decoded channel, a color is in gamut when some part of its
cell reaches the srgb cube
the cell's 8 corners go through the inverse transform to linear rgb and each
rgb channel's range over the corners must meet [-GAMUT_EPSILON,
1 + GAMUT_EPSILON], so colors encoded from srgb are never rejected
'''
import itertools
import numpy as np

from colorpak.cpk_constants import (
    GAMUT_EPSILON,
    GAMUT_HALF_STEP,
    LIMIT_TO_GAMUT_STEPS,
    NEUTRAL_CHANNEL,
)
from colorpak.cpk_constants import S, TaggedColor
from colorpak.cpk_codec import encode, decode
from colorpak.cpk_numpy import rgb_to_luminance
from colorpak.cpk_spaces import (
    RGB_KIND,
    HSLUV_KIND,
    TWO_PI,
    color_space,
    converter,
    chroma_limit,
    channel_hue,
    channel_lightness,
    channels_with_chroma,
    from_hcl,
    hue_pattern,
    neutral_channels,
    untag,
    tag,
)

CELL_CORNERS = np.array(list(itertools.product((-1.0, 1.0), repeat=3)))


def _inside(channels, space, half_step, epsilon):
  channels = np.asarray(channels, dtype=np.float64)
  corners = (np.expand_dims(channels[..., :3], -2) +
             CELL_CORNERS * half_step)
  rgb = color_space(space, S.RGB, corners)

  low = np.min(rgb, axis=-2)
  high = np.max(rgb, axis=-2)
  inside = (high >= -epsilon) & (low <= 1.0 + epsilon)
  return np.all(inside, axis=-1)


def channels_in_gamut(channels, space, half_step=GAMUT_HALF_STEP):
  '''
  true where unpacked [..., 4] channels of space can come from srgb
  half_step is the quantization cell size around each channel, pass 0 to
  check exact channel values
  '''
  return _inside(channels, space, half_step, GAMUT_EPSILON)


def in_gamut(color, space=None):
  'true where a TaggedColor, or packed colors of space, decode inside srgb'
  packed, space = untag(color, space)
  return channels_in_gamut(decode(packed), space)


def limit_to_gamut(color, space=None):
  '''
  pull packed colors toward neutral gray until they are in gamut
  chroma channels move linearly toward neutral, for IPT the intensity moves
  toward the middle too, alpha is kept
  returns a TaggedColor when given one, otherwise packed colors
  '''
  packed, space = untag(color, space)

  channels = decode(packed)
  target = neutral_channels(channels, space, neutral_lightness=space == S.IPT)

  result = channels.copy()
  done = channels_in_gamut(result, space)

  for step in range(1, LIMIT_TO_GAMUT_STEPS + 1):
    if np.all(done):
      break
    change = step / float(LIMIT_TO_GAMUT_STEPS)
    candidate = decode(encode(channels + (target - channels) * change))
    candidate_inside = channels_in_gamut(candidate, space)
    update = ~done & (candidate_inside | (step == LIMIT_TO_GAMUT_STEPS))
    result = np.where(np.expand_dims(update, -1), candidate, result)
    done = done | update

  limited = encode(result)

  if isinstance(color, TaggedColor):
    return tag(limited, space)
  return limited


def _opponent_channels(hue, lightness, radius):
  theta = hue * TWO_PI
  return np.stack([
      lightness,
      NEUTRAL_CHANNEL + radius * np.cos(theta),
      NEUTRAL_CHANNEL + radius * np.sin(theta),
      np.ones_like(lightness),
  ],
                  axis=-1)


def max_chroma(hue, lightness, space):
  '''
  largest chroma, measured like cpk_spaces.channel_chroma, whose exact
  channels at hue (turns) and lightness land inside srgb

  HSLuv and the rgb spaces have closed forms, the opponent spaces bisect the
  radius toward the edge of the channel range
  '''
  conv = converter(space)
  hue, lightness = np.broadcast_arrays(
      np.asarray(hue, dtype=np.float64),
      np.clip(np.asarray(lightness, dtype=np.float64), 0.0, 1.0))

  if conv.kind == HSLUV_KIND:
    return chroma_limit(hue, lightness)

  if conv.kind == RGB_KIND:
    # base + chroma * pattern must stay within [0, 1] at a fixed luma
    pattern_luma = rgb_to_luminance(hue_pattern(hue))
    return np.minimum(lightness / pattern_luma,
                      (1.0 - lightness) / (1.0 - pattern_luma))

  theta = hue * TWO_PI
  reach = NEUTRAL_CHANNEL / np.maximum(np.abs(np.cos(theta)),
                                       np.abs(np.sin(theta)))

  low = np.zeros_like(reach)
  high = reach.copy()
  for _ in range(LIMIT_TO_GAMUT_STEPS):
    middle = 0.5 * (low + high)
    inside = _inside(_opponent_channels(hue, lightness, middle), space, 0.0,
                     0.0)
    low = np.where(inside, middle, low)
    high = np.where(inside, high, middle)

  at_reach = _inside(_opponent_channels(hue, lightness, reach), space, 0.0, 0.0)
  return np.where(at_reach, reach, low)


def maximize_saturation(color, space=None):
  '''
  push packed colors to the most chroma they can hold in gamut, keeping hue,
  lightness and alpha, grays take hue 0
  returns a TaggedColor when given one, otherwise packed colors
  '''
  packed, space = untag(color, space)

  channels = decode(packed)
  limit = max_chroma(channel_hue(channels, space),
                     channel_lightness(channels, space), space)
  result = encode(channels_with_chroma(channels, space, limit))

  if isinstance(color, TaggedColor):
    return tag(result, space)
  return result


def from_hsl(hue, saturation, lightness, alpha, space):
  '''
  packed colors of space from hue (turns), lightness and alpha, with
  saturation as the fraction in [0, 1] of the largest in gamut chroma at that
  hue and lightness
  '''
  limit = max_chroma(np.mod(hue, 1.0), lightness, space)
  chroma = np.clip(saturation, 0.0, 1.0) * limit
  return from_hcl(hue, chroma, lightness, alpha, space)
