# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'colorpak constants'
import collections
import enum
import numpy as np

REC_709_LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)

XYZ_D65_2A_WHITEPOINT = np.array([0.95047, 1.0, 1.08883])

#https://en.wikipedia.org/wiki/SRGB#The_forward_transformation_(CIE_XYZ_to_sRGB)
SRGB_LINEAR_THRESHOLD = 0.04045
RGB_LINEAR_THRESHOLD = 0.0031308
SRGB_LINEAR_SLOPE = 12.92
SRGB_OFFSET = 0.055
SRGB_GAMMA = 2.4

M_RGB_TO_XYZ = np.array([
    [0.412453, 0.357580, 0.180423],
    [0.212671, 0.715160, 0.072169],
    [0.019334, 0.119193, 0.950227],
])
M_XYZ_TO_RGB = np.linalg.inv(M_RGB_TO_XYZ)

#http://www.brucelindbloom.com/index.html?LContinuity.html
CIE_EPSILON = 216.0 / 24389.0
CIE_KAPPA = 24389.0 / 27.0
CIE_LINEAR_SLOPE = 841.0 / 108.0
CIE_LINEAR_OFFSET = 16.0 / 116.0
CIE_F_THRESHOLD = 6.0 / 29.0

# packed cielab stores L*/100, a*/255 + .5, b*/255 + .5
CIELAB_AB_SCALE = 255.0

# ipt over gamma encoded rgb, P and T are stored as p/2 + .5, t/2 + .5
M_RGB_TO_IPT = np.array([
    [0.189786, 0.576951, 0.233221],
    [0.669665, -0.73741, 0.0681367],
    [0.286498, 0.655205, -0.941748],
])
M_IPT_TO_RGB = np.linalg.inv(M_RGB_TO_IPT)
IPT_CHROMA_SCALE = 0.5

# ipt over linear rgb with an LMS' compression, P and T stored as p + .5, t + .5
M_RGB_TO_LMS = np.array([
    [0.313921, 0.639468, 0.0465970],
    [0.151693, 0.748209, 0.1000044],
    [0.017753, 0.109468, 0.8729690],
])
M_LMS_TO_RGB = np.linalg.inv(M_RGB_TO_LMS)
M_LMSP_TO_IPT = np.array([
    [0.4000, 0.4000, 0.2000],
    [2.2275, -2.4255, 0.1980],
    [0.4028, 0.1786, -0.5814],
])
M_IPT_TO_LMSP = np.linalg.inv(M_LMSP_TO_IPT)
IPT_HQ_CHROMA_SCALE = 1.0
LMS_COMPRESSION = 0.43

M_RGB_TO_XYZ_T = np.ascontiguousarray(M_RGB_TO_XYZ.T)
M_XYZ_TO_RGB_T = np.ascontiguousarray(M_XYZ_TO_RGB.T)
M_RGB_TO_IPT_T = np.ascontiguousarray(M_RGB_TO_IPT.T)
M_IPT_TO_RGB_T = np.ascontiguousarray(M_IPT_TO_RGB.T)
M_RGB_TO_LMS_T = np.ascontiguousarray(M_RGB_TO_LMS.T)
M_LMS_TO_RGB_T = np.ascontiguousarray(M_LMS_TO_RGB.T)
M_LMSP_TO_IPT_T = np.ascontiguousarray(M_LMSP_TO_IPT.T)
M_IPT_TO_LMSP_T = np.ascontiguousarray(M_IPT_TO_LMSP.T)

#https://www.hsluv.org/math/
_UV_DENOM = float(np.dot(XYZ_D65_2A_WHITEPOINT, [1.0, 15.0, 3.0]))
HSLUV_REF_U = 4.0 * float(XYZ_D65_2A_WHITEPOINT[0]) / _UV_DENOM
HSLUV_REF_V = 9.0 * float(XYZ_D65_2A_WHITEPOINT[1]) / _UV_DENOM
HSLUV_L_MIN = 1.0e-8
HSLUV_L_MAX = 100.0 - 1.0e-7
HSLUV_C_MIN = 1.0e-8

# the bit level cube root seed is ~10% off, newton doubles correct digits
CBRT_MAGIC = 0x2A5137A0
CBRT_NEWTON_STEPS = 4

# packed color layout
CHANNEL_MAX = 255.0
ALPHA_MAX = 127.0
ALPHA_SHIFT = 25
ALPHA_MASK = 0xFE000000
NEUTRAL_CHANNEL = 0.5

# gamut checks run in linear rgb over the whole quantization cell of a color
GAMUT_EPSILON = 1.0 / 256.0
GAMUT_HALF_STEP = 0.5 / CHANNEL_MAX
LIMIT_TO_GAMUT_STEPS = 32

PALETTE_GRAY_SATURATION = 0.05
PALETTE_TRANSPARENT_ALPHA = 0.5

SMALL_COMPONENT_VALUE = 1.0e-10


class Space(enum.Enum):
  'named color spaces a packed color can be interpreted in'
  RGB = 0
  SRGB = 1
  CIELAB = 2
  IPT = 3
  IPT_HQ = 4
  HSLUV = 5


S = Space

TaggedColor = collections.namedtuple('TaggedColor', ['packed', 'space'])
TaggedColor.__doc__ = 'a packed color paired with the space it was encoded in'
