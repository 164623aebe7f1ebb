# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'''
colorpak tensorflow decode ops and keras layers

float32 tensor counterparts of the numpy inverse transforms, used to turn
packed colors into rgba on the gpu
'''
import numpy as np
import tensorflow as tf
from tensorflow import keras

from colorpak.cpk_constants import (
    SRGB_LINEAR_THRESHOLD,
    RGB_LINEAR_THRESHOLD,
    SRGB_LINEAR_SLOPE,
    SRGB_OFFSET,
    SRGB_GAMMA,
    XYZ_D65_2A_WHITEPOINT,
    CIE_KAPPA,
    CIE_LINEAR_SLOPE,
    CIE_LINEAR_OFFSET,
    CIE_F_THRESHOLD,
    CIELAB_AB_SCALE,
    M_XYZ_TO_RGB,
    M_XYZ_TO_RGB_T,
    M_IPT_TO_RGB_T,
    IPT_CHROMA_SCALE,
    M_IPT_TO_LMSP_T,
    M_LMS_TO_RGB_T,
    IPT_HQ_CHROMA_SCALE,
    LMS_COMPRESSION,
    HSLUV_REF_U,
    HSLUV_REF_V,
    HSLUV_L_MIN,
    HSLUV_L_MAX,
    CHANNEL_MAX,
    ALPHA_MAX,
    ALPHA_SHIFT,
    NEUTRAL_CHANNEL,
    SMALL_COMPONENT_VALUE,
)
from colorpak.cpk_constants import S

TWO_PI = 2.0 * np.pi


def _byte(bits, shift, mask=0xFF):
  shifted = tf.bitwise.right_shift(bits, tf.constant(shift, dtype=tf.uint32))
  return tf.bitwise.bitwise_and(shifted, tf.constant(mask, dtype=tf.uint32))


def unpack(packed):
  'bit cast float32 packed colors to uint32 and expand into [..., 4] channels'
  packed = tf.convert_to_tensor(packed, dtype=tf.float32)
  bits = tf.bitcast(packed, tf.uint32)

  c0 = tf.cast(_byte(bits, 0), tf.float32) / CHANNEL_MAX
  c1 = tf.cast(_byte(bits, 8), tf.float32) / CHANNEL_MAX
  c2 = tf.cast(_byte(bits, 16), tf.float32) / CHANNEL_MAX
  alpha = tf.cast(_byte(bits, ALPHA_SHIFT, 0x7F), tf.float32) / ALPHA_MAX

  return tf.stack([c0, c1, c2, alpha], axis=-1)


def _matrix(values, matrix_t):
  return tf.tensordot(values, tf.constant(matrix_t, dtype=tf.float32), axes=1)


def srgb_to_rgb(srgb):
  'convert from a gamma 2.4 color space to linear rgb'

  linear_mask = tf.cast(srgb < SRGB_LINEAR_THRESHOLD, dtype=tf.float32)

  exponential_mask = 1.0 - linear_mask

  linear_pixels = srgb / SRGB_LINEAR_SLOPE

  exponential_pixels = tf.pow(
      (tf.maximum(srgb, SRGB_LINEAR_THRESHOLD) + SRGB_OFFSET) /
      (1.0 + SRGB_OFFSET), SRGB_GAMMA)

  return linear_pixels * linear_mask + exponential_pixels * exponential_mask


def rgb_to_srgb(rgb):
  'convert from linear rgb to a gamma 2.4 color space'

  linear_mask = tf.cast(rgb < RGB_LINEAR_THRESHOLD, dtype=tf.float32)

  exponential_mask = 1.0 - linear_mask

  linear_pixels = rgb * SRGB_LINEAR_SLOPE

  exponential_pixels = (1.0 + SRGB_OFFSET) * tf.pow(
      tf.maximum(rgb, RGB_LINEAR_THRESHOLD), 1.0 / SRGB_GAMMA) - SRGB_OFFSET

  return linear_pixels * linear_mask + exponential_pixels * exponential_mask


def cielab_to_srgb(lab):
  'convert from normalized CIELa*b* to srgb'

  L, a, b = lab[..., 0], lab[..., 1], lab[..., 2]
  fy = (L + 0.16) / 1.16
  fx = fy + (a - NEUTRAL_CHANNEL) * (CIELAB_AB_SCALE / 500.0)
  fz = fy - (b - NEUTRAL_CHANNEL) * (CIELAB_AB_SCALE / 200.0)

  f = tf.stack([fx, fy, fz], axis=-1)

  cube_mask = tf.cast(f > CIE_F_THRESHOLD, dtype=tf.float32)

  linear_mask = 1.0 - cube_mask

  linear_pixels = (f - CIE_LINEAR_OFFSET) / CIE_LINEAR_SLOPE

  cube_pixels = f * f * f

  xyz = linear_pixels * linear_mask + cube_pixels * cube_mask

  xyz = xyz * tf.constant(XYZ_D65_2A_WHITEPOINT, dtype=tf.float32)

  return rgb_to_srgb(_matrix(xyz, M_XYZ_TO_RGB_T))


def _unbias_opponent(channels, scale):
  return tf.stack([
      channels[..., 0],
      (channels[..., 1] - NEUTRAL_CHANNEL) / scale,
      (channels[..., 2] - NEUTRAL_CHANNEL) / scale,
  ],
                  axis=-1)


def ipt_to_srgb(ipt):
  'linear opponent transform back to gamma encoded rgb'
  return _matrix(_unbias_opponent(ipt, IPT_CHROMA_SCALE), M_IPT_TO_RGB_T)


def ipt_hq_to_srgb(ipt):
  'ipt through power compressed LMS back to gamma encoded rgb'
  lmsp = _matrix(_unbias_opponent(ipt, IPT_HQ_CHROMA_SCALE), M_IPT_TO_LMSP_T)
  lms = tf.sign(lmsp) * tf.pow(tf.abs(lmsp), 1.0 / LMS_COMPRESSION)
  return rgb_to_srgb(_matrix(lms, M_LMS_TO_RGB_T))


def _l_to_y(l100):
  return tf.where(l100 > 8.0, tf.pow((l100 + 16.0) / 116.0, 3.0),
                  l100 / CIE_KAPPA)


def chroma_limit(hue, lightness):
  'largest Luv chroma inside srgb at a hue in turns and lightness L*/100'
  l100 = lightness * 100.0
  y = _l_to_y(l100)

  theta = hue * TWO_PI
  sin_h, cos_h = tf.sin(theta), tf.cos(theta)

  infinity = tf.fill(tf.shape(l100), np.inf)

  lengths = []
  for m1, m2, m3 in M_XYZ_TO_RGB.tolist():
    for t in (0.0, 1.0):
      a = y * (9.0 * m1 - 3.0 * m3)
      b = y * (4.0 * m2 - 20.0 * m3) - 4.0 * t
      c = 13.0 * l100 * (a * HSLUV_REF_U + b * HSLUV_REF_V + 12.0 * m3 * y)

      denom = a * cos_h + b * sin_h
      valid = tf.not_equal(denom, 0.0)
      length = tf.where(valid, -c / tf.where(valid, denom, 1.0), infinity)
      lengths.append(tf.where(length >= 0.0, length, infinity))

  limit = tf.reduce_min(tf.stack(lengths, axis=-1), axis=-1)

  return tf.where(tf.math.is_finite(limit), limit, tf.zeros_like(limit)) / 100.0


def hsluv_to_srgb(hsluv):
  'convert from HSLuv with hue in turns and saturation, L* in [0, 1] to srgb'

  hue, saturation, l100 = hsluv[..., 0], hsluv[..., 1], hsluv[..., 2] * 100.0

  edge = tf.logical_or(l100 > HSLUV_L_MAX, l100 < HSLUV_L_MIN)
  chroma = tf.where(edge, tf.zeros_like(l100),
                    saturation * chroma_limit(hue, l100 / 100.0) * 100.0)

  theta = hue * TWO_PI
  u = tf.cos(theta) * chroma
  v = tf.sin(theta) * chroma

  Y = _l_to_y(l100)

  black = l100 < HSLUV_L_MIN
  safe_l = tf.where(black, tf.ones_like(l100), l100)
  var_u = u / (13.0 * safe_l) + HSLUV_REF_U
  var_v = tf.maximum(v / (13.0 * safe_l) + HSLUV_REF_V, SMALL_COMPONENT_VALUE)

  X = 9.0 * Y * var_u / (4.0 * var_v)
  Z = (9.0 * Y - 15.0 * var_v * Y - var_v * X) / (3.0 * var_v)

  keep = tf.expand_dims(1.0 - tf.cast(black, tf.float32), -1)
  xyz = tf.stack([X, Y, Z], axis=-1) * keep

  return rgb_to_srgb(_matrix(xyz, M_XYZ_TO_RGB_T))


INVERSE_TRANSFORMS = {
    S.SRGB: tf.identity,
    S.RGB: rgb_to_srgb,
    S.CIELAB: cielab_to_srgb,
    S.IPT: ipt_to_srgb,
    S.IPT_HQ: ipt_hq_to_srgb,
    S.HSLUV: hsluv_to_srgb,
}


def packed_to_rgba(space, packed):
  '''
  decode float32 packed colors of space into srgb rgba [..., 4]
  clamped to [0, 1]
  '''
  t = INVERSE_TRANSFORMS.get(space)
  if t is None:
    raise ValueError(f'bad color space {space!r}')

  channels = unpack(packed)
  rgb = tf.clip_by_value(t(channels[..., :3]), 0.0, 1.0)

  return tf.concat([rgb, channels[..., 3:]], axis=-1)


def packed_to_rgba_numpy(space, values):
  'numpy wrapper for tensor decode'
  return packed_to_rgba(space, np.asarray(values, dtype=np.float32)).numpy()


class PackedToRGBA(keras.layers.Layer):
  'decode packed colors of space into srgb rgba'

  def __init__(self, space, **kwargs):
    super(PackedToRGBA, self).__init__(**kwargs)
    self.space = S[space] if isinstance(space, str) else S(space)

  def call(self, inputs, **kwargs):
    'builds an output tensor for this op'
    return packed_to_rgba(self.space, inputs)

  def get_config(self):
    'save space attribute'
    return dict(
        super(PackedToRGBA, self).get_config(),
        space=self.space.name,
    )

  def compute_output_shape(self, input_shape):
    'adds an rgba dimension'
    return tuple(input_shape) + (4,)
