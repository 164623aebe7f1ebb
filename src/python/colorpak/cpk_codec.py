# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'''
colorpak packed color codec

a packed color is a 32 bit word viewed as a float32
  bits [0, 8)   channel 0
  bits [8, 16)  channel 1
  bits [16, 24) channel 2
  bits [25, 32) 7 bit alpha, bit 24 is always clear

with bit 24 clear the float32 exponent can never be all ones, so every packed
color is a finite float that survives storage in float buffers
'''
import numpy as np

from colorpak.cpk_constants import (
    CHANNEL_MAX,
    ALPHA_MAX,
    ALPHA_SHIFT,
)


def _check_channels(channels):
  channels = np.asarray(channels, dtype=np.float64)
  if channels.ndim == 0 or channels.shape[-1] != 4:
    raise ValueError(f'expected a trailing axis of size 4, got {channels.shape}')
  return np.nan_to_num(channels, nan=0.0)


def _quantize(values, max_value):
  return np.clip(np.rint(values * max_value), 0.0, max_value).astype(np.uint32)


def pack_bits(bits):
  'reinterpret uint32 words as float32 without changing any bit'
  return np.asarray(bits, dtype=np.uint32).view(np.float32)[()]


def unpack_bits(packed):
  'reinterpret float32 packed colors as their uint32 words'
  return np.asarray(packed, dtype=np.float32).view(np.uint32)[()]


def encode_bits(channels):
  '''
  quantize normalized [..., 4] channels into uint32 words
  out of range values are clamped and nan is treated as 0
  '''
  channels = _check_channels(channels)

  color = _quantize(channels[..., :3], CHANNEL_MAX)
  alpha = _quantize(channels[..., 3], ALPHA_MAX)

  bits = (color[..., 0] | (color[..., 1] << 8) | (color[..., 2] << 16) |
          (alpha << ALPHA_SHIFT))

  return np.asarray(bits, dtype=np.uint32)[()]


def decode_bits(bits):
  'expand uint32 words into normalized [..., 4] float64 channels'
  bits = np.asarray(bits, dtype=np.uint32)

  c0 = (bits & 0xFF) / CHANNEL_MAX
  c1 = ((bits >> 8) & 0xFF) / CHANNEL_MAX
  c2 = ((bits >> 16) & 0xFF) / CHANNEL_MAX
  alpha = (bits >> ALPHA_SHIFT) / ALPHA_MAX

  return np.stack([c0, c1, c2, alpha], axis=-1)


def encode(channels):
  'pack normalized [..., 4] channels into float32 packed colors'
  return pack_bits(encode_bits(channels))


def decode(packed):
  'unpack float32 packed colors into normalized [..., 4] channels'
  return decode_bits(unpack_bits(packed))


def rgba8888_to_channels(rgba8888):
  '''
  convert RGBA8888 integers, red in the most significant byte, into
  normalized [..., 4] channels
  '''
  bits = np.asarray(rgba8888, dtype=np.uint32)

  r = ((bits >> 24) & 0xFF) / CHANNEL_MAX
  g = ((bits >> 16) & 0xFF) / CHANNEL_MAX
  b = ((bits >> 8) & 0xFF) / CHANNEL_MAX
  a = (bits & 0xFF) / CHANNEL_MAX

  return np.stack([r, g, b, a], axis=-1)


def channels_to_rgba8888(channels):
  'convert normalized [..., 4] channels into RGBA8888 integers'
  channels = _check_channels(channels)

  rgba = _quantize(channels, CHANNEL_MAX)

  bits = ((rgba[..., 0] << 24) | (rgba[..., 1] << 16) | (rgba[..., 2] << 8) |
          rgba[..., 3])

  return np.asarray(bits, dtype=np.uint32)[()]
