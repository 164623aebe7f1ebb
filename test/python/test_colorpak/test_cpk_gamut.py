# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'test colorpak gamut validation'

import unittest
import numpy as np

from colorpak import cpk_codec
from colorpak import cpk_gamut
from colorpak import cpk_spaces
from colorpak.cpk_constants import Space as S, TaggedColor


class TestColorpakGamut(unittest.TestCase):
  'to be run via unittest discovery'

  def test_cpk_gamut_mid_gray_everywhere(self):
    'mid gray on the neutral axis is in gamut for every space'
    mid_gray = cpk_codec.encode([0.5, 0.5, 0.5, 1.0])

    for space in S:
      assert cpk_gamut.in_gamut(mid_gray, space), space
      assert cpk_gamut.in_gamut(TaggedColor(mid_gray, space)), space

  def test_cpk_gamut_encoded_colors(self):
    'colors encoded from mid range srgb stay in gamut'
    np.random.seed(0)
    rgba = np.random.uniform(0.2, 0.8, size=(1000, 4))

    for space in S:
      packed = cpk_spaces.from_rgba(rgba, space)
      inside = cpk_gamut.in_gamut(packed, space)
      assert inside.shape == (1000,)
      assert np.all(inside), space

  def test_cpk_gamut_out_of_gamut(self):
    'extreme opponent channels have no srgb counterpart'
    channels = np.array([
        [0.5, 1.0, 0.0, 1.0],
        [0.5, 0.0, 1.0, 1.0],
        [0.0, 1.0, 1.0, 1.0],
        [1.0, 0.0, 0.0, 1.0],
    ])

    for space in (S.CIELAB, S.IPT):
      packed = cpk_codec.encode(channels)
      assert not np.any(cpk_gamut.in_gamut(packed, space)), space
      assert not np.any(cpk_gamut.channels_in_gamut(channels, space)), space

  def test_cpk_gamut_srgb_and_hsluv_always_inside(self):
    'every packed srgb or HSLuv value decodes inside srgb'
    np.random.seed(1)
    channels = np.random.uniform(0.0, 1.0, size=(1000, 4))
    channels[:, 2] = np.random.uniform(0.05, 0.95, size=1000)

    for space in (S.SRGB, S.HSLUV):
      assert np.all(cpk_gamut.in_gamut(cpk_codec.encode(channels), space))

  def test_cpk_gamut_limit_to_gamut(self):
    'limited colors are in gamut, keep hue direction and alpha'
    channels = np.array([
        [0.5, 1.0, 0.0, 1.0],
        [0.6, 0.0, 0.2, 0.5],
        [0.5, 0.52, 0.48, 1.0],
    ])
    packed = cpk_codec.encode(channels)

    limited = cpk_gamut.limit_to_gamut(packed, S.CIELAB)

    assert np.all(cpk_gamut.in_gamut(limited, S.CIELAB))
    assert np.allclose(cpk_spaces.hue(limited, S.CIELAB)[:2],
                       cpk_spaces.hue(packed, S.CIELAB)[:2],
                       atol=0.01)
    assert np.allclose(cpk_spaces.alpha(limited), cpk_spaces.alpha(packed))
    assert np.allclose(cpk_spaces.lightness(limited, S.CIELAB),
                       cpk_spaces.lightness(packed, S.CIELAB))

    # already in gamut colors are untouched
    assert limited[2] == packed[2]

    tagged = cpk_gamut.limit_to_gamut(TaggedColor(packed[0], S.IPT))
    assert isinstance(tagged, TaggedColor)
    assert tagged.space == S.IPT
    assert cpk_gamut.in_gamut(tagged)

  def test_cpk_gamut_requires_space(self):
    'an untagged packed color without a space is a programming error'
    with self.assertRaises(ValueError):
      cpk_gamut.in_gamut(cpk_codec.encode([0.5, 0.5, 0.5, 1.0]))

  def test_cpk_gamut_full_srgb_cube(self):
    'every color encoded from the srgb cube, corners included, is in gamut'
    cube_size = 16
    int_cube = np.array(np.mgrid[:cube_size, :cube_size, :cube_size]).T
    rgb = int_cube.reshape((-1, 3)).astype(np.float64) / (cube_size - 1)
    rgba = np.concatenate([rgb, np.ones((rgb.shape[0], 1))], axis=-1)

    corners = {
        'black': [0.0, 0.0, 0.0, 1.0],
        'white': [1.0, 1.0, 1.0, 1.0],
        'red': [1.0, 0.0, 0.0, 1.0],
        'green': [0.0, 1.0, 0.0, 1.0],
        'blue': [0.0, 0.0, 1.0, 1.0],
        'cyan': [0.0, 1.0, 1.0, 1.0],
        'magenta': [1.0, 0.0, 1.0, 1.0],
        'yellow': [1.0, 1.0, 0.0, 1.0],
    }

    for space in S:
      inside = cpk_gamut.in_gamut(cpk_spaces.from_rgba(rgba, space), space)
      assert np.all(inside), (space, rgba[~inside][:4])

      for name, corner in corners.items():
        packed = cpk_spaces.from_rgba(corner, space)
        assert cpk_gamut.in_gamut(packed, space), (space, name)

  def test_cpk_gamut_limit_to_gamut_extremes(self):
    'limiting reaches the gamut at the ends of the lightness range'
    channels = np.array([
        [0.0, 0.9, 0.9, 1.0],
        [1.0, 0.1, 0.9, 1.0],
    ])
    for space in (S.CIELAB, S.IPT_HQ):
      limited = cpk_gamut.limit_to_gamut(cpk_codec.encode(channels), space)
      assert np.all(cpk_gamut.in_gamut(limited, space)), space

  def test_cpk_gamut_max_chroma(self):
    'the chroma limit sits on the srgb boundary'
    hues = np.linspace(0.0, 1.0, 12, endpoint=False)
    lightness = np.full_like(hues, 0.5)
    ones = np.ones_like(hues)

    for space in (S.CIELAB, S.IPT, S.IPT_HQ):
      limit = cpk_gamut.max_chroma(hues, lightness, space)
      assert limit.shape == hues.shape
      assert np.all(limit > 0.01), space

      at_limit = cpk_spaces.channels_from_hcl(hues, limit, lightness, ones,
                                              space)
      beyond = cpk_spaces.channels_from_hcl(hues, 1.5 * limit + 0.02,
                                            lightness, ones, space)
      assert np.all(cpk_gamut.channels_in_gamut(at_limit, space, 0.0)), space
      assert not np.any(cpk_gamut.channels_in_gamut(beyond, space, 0.0)), space

    assert np.allclose(cpk_gamut.max_chroma(hues, lightness, S.HSLUV),
                       cpk_spaces.chroma_limit(hues, lightness))

    for space in (S.SRGB, S.RGB):
      limit = cpk_gamut.max_chroma(hues, lightness, space)
      rgb = cpk_spaces.channels_from_hcl(hues, limit, lightness, ones,
                                         space)[..., :3]
      assert np.all(rgb > -1e-9) and np.all(rgb < 1.0 + 1e-9)
      touches = (rgb.min(axis=-1) < 1e-9) | (rgb.max(axis=-1) > 1.0 - 1e-9)
      assert np.all(touches), space

    assert np.all(cpk_gamut.max_chroma(hues, 0.0 * lightness, S.SRGB) == 0.0)

  def test_cpk_gamut_maximize_saturation(self):
    'maximized colors keep hue, lightness and alpha and stay in gamut'
    rgba = np.array([0.7, 0.35, 0.25, 0.8])

    for space in (S.CIELAB, S.IPT, S.IPT_HQ):
      packed = cpk_spaces.from_rgba(rgba, space)
      maxed = cpk_gamut.maximize_saturation(packed, space)

      assert cpk_gamut.in_gamut(maxed, space), space
      assert cpk_spaces.chroma(maxed, space) > cpk_spaces.chroma(packed, space)
      hue_change = cpk_spaces.hue(maxed, space) - cpk_spaces.hue(packed, space)
      assert abs((hue_change + 0.5) % 1.0 - 0.5) < 0.02, space
      assert cpk_spaces.lightness(maxed, space) == cpk_spaces.lightness(
          packed, space)
      assert cpk_spaces.alpha(maxed) == cpk_spaces.alpha(packed)

    hsluv = cpk_gamut.maximize_saturation(
        TaggedColor(cpk_spaces.from_rgba(rgba, S.HSLUV), S.HSLUV))
    assert isinstance(hsluv, TaggedColor)
    assert cpk_spaces.saturation(*hsluv) == 1.0

    srgb = cpk_spaces.to_rgba(
        cpk_gamut.maximize_saturation(cpk_spaces.from_rgba(rgba, S.SRGB),
                                      S.SRGB), S.SRGB)
    assert srgb[:3].max() >= 1.0 - 1.0 / 255.0 or srgb[:3].min() <= 1.0 / 255.0

  def test_cpk_gamut_from_hsl(self):
    'saturation is a fraction of the in gamut chroma at hue and lightness'
    hues = np.linspace(0.0, 1.0, 12, endpoint=False)

    for space in S:
      full = cpk_gamut.from_hsl(hues, 1.0, 0.5, 1.0, space)
      half = cpk_gamut.from_hsl(hues, 0.5, 0.5, 1.0, space)
      gray = cpk_gamut.from_hsl(hues, 0.0, 0.5, 1.0, space)

      assert full.shape == hues.shape
      assert np.all(cpk_gamut.in_gamut(full, space)), space
      assert np.all(cpk_gamut.in_gamut(half, space)), space
      assert np.all(cpk_spaces.chroma(gray, space) <= 1.0 / 255.0), space
      assert np.all(
          cpk_spaces.chroma(half, space) < cpk_spaces.chroma(full, space))

    for space in (S.CIELAB, S.IPT, S.IPT_HQ):
      full = cpk_gamut.from_hsl(hues, 1.0, 0.5, 1.0, space)
      half = cpk_gamut.from_hsl(hues, 0.5, 0.5, 1.0, space)
      assert np.allclose(cpk_spaces.chroma(half, space),
                         0.5 * cpk_spaces.chroma(full, space),
                         atol=2.0 / 255.0)
