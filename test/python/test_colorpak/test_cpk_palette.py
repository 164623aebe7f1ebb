# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'test colorpak named palettes'

import logging
import unittest
import numpy as np

from colorpak import cpk_gamut
from colorpak import cpk_palette
from colorpak import cpk_spaces
from colorpak.cpk_constants import Space as S, TaggedColor


class TestColorpakPalette(unittest.TestCase):
  'to be run via unittest discovery'

  def test_cpk_palette_hue_grouping(self):
    'transparent first, then grays, then chromatic colors by hue'
    for space in (S.CIELAB, S.IPT, S.HSLUV, S.SRGB):
      entries = [
          ('red', cpk_spaces.from_rgba([0.8, 0.3, 0.3, 1.0], space)),
          ('blue', cpk_spaces.from_rgba([0.3, 0.3, 0.8, 1.0], space)),
          ('gray', cpk_spaces.from_rgba([0.5, 0.5, 0.5, 1.0], space)),
          ('zz_clear', cpk_spaces.from_rgba([0.3, 0.6, 0.2, 0.0], space)),
      ]
      palette = cpk_palette.PaletteIndex.build(entries, space)

      assert palette.names == ('blue', 'gray', 'red', 'zz_clear')
      assert palette.names_by_hue == ('zz_clear', 'gray', 'red', 'blue'), (
          space, palette.names_by_hue)

  def test_cpk_palette_lookup(self):
    'lookup hits return the packed color and misses return None'
    p1 = cpk_spaces.from_rgba([1.0, 0.0, 0.0, 1.0], S.CIELAB)
    p2 = cpk_spaces.from_rgba([0.0, 0.0, 1.0, 1.0], S.CIELAB)
    palette = cpk_palette.PaletteIndex.build([('red', p1), ('blue', p2)],
                                             S.CIELAB)

    assert palette.lookup('red') == p1
    assert palette.lookup('blue') == p2
    assert palette.lookup('green') is None
    assert palette.tagged('green') is None
    assert palette.tagged('red') == TaggedColor(p1, S.CIELAB)
    assert 'red' in palette
    assert 'green' not in palette
    assert len(palette) == 2
    assert list(palette) == ['blue', 'red']
    assert palette.items() == [('blue', p2), ('red', p1)]

  def test_cpk_palette_duplicates_and_aliases(self):
    'later duplicates win and aliases resolve without being listed'
    p1 = cpk_spaces.from_rgba([0.2, 0.2, 0.2, 1.0], S.IPT)
    p2 = cpk_spaces.from_rgba([0.8, 0.8, 0.8, 1.0], S.IPT)
    palette = cpk_palette.PaletteIndex.build(
        [('gray', p1), ('gray', p2)],
        S.IPT,
        aliases={
            'grey': 'gray',
            'missing': 'nothing'
        },
    )

    assert palette.lookup('gray') == p2
    assert palette.lookup('grey') == p2
    assert palette.lookup('missing') is None
    assert palette.names == ('gray',)
    assert dict(palette.aliases) == {'grey': 'gray'}

    with self.assertRaises(TypeError):
      palette.aliases['x'] = 'gray'

  def test_cpk_palette_orderings(self):
    'lightness ordering runs dark to light'
    names = ['black', 'gray', 'white']
    entries = [(name, cpk_spaces.from_rgba([v, v, v, 1.0], S.CIELAB))
               for name, v in zip(names, (0.0, 0.5, 1.0))]
    palette = cpk_palette.PaletteIndex.build(reversed(entries), S.CIELAB)

    assert palette.names_by_lightness == ('black', 'gray', 'white')
    assert palette.names_by_hue == ('black', 'gray', 'white')

  def test_cpk_palette_empty(self):
    'an empty palette is valid'
    palette = cpk_palette.PaletteIndex.build([], S.HSLUV)
    assert len(palette) == 0
    assert palette.names_by_hue == ()
    assert palette.lookup('red') is None

  def test_cpk_palette_simple_palette(self):
    'the stock palette is built once per space and resolves every name'
    for space in S:
      palette = cpk_palette.simple_palette(space)
      logging.debug('%r', palette)

      assert palette is cpk_palette.simple_palette(space)
      assert palette.space == space
      assert len(palette) == len(cpk_palette.SIMPLE_PALETTE_RGBA8888)
      assert palette.names_by_hue[0] == 'transparent'
      assert set(palette.names_by_hue[1:5]) == {
          'black', 'gray', 'silver', 'white'
      }, (space, palette.names_by_hue[:6])

      for name in palette.names:
        assert palette.lookup(name) is not None
      for alias, name in cpk_palette.SIMPLE_PALETTE_ALIASES.items():
        assert palette.lookup(alias) == palette.lookup(name)

    lab = cpk_palette.simple_palette(S.CIELAB)
    red = cpk_spaces.to_rgba8888(lab.lookup('red'), S.CIELAB)
    assert (int(red) >> 24) > 0xF0
    assert (int(red) & 0xFF) == 0xFF

  def test_cpk_palette_moderate_colors_in_gamut(self):
    'stock colors away from the srgb cube surface stay in gamut'
    moderate = ['brown', 'fern', 'gray', 'mauve', 'silver', 'denim', 'sage']
    for space in S:
      palette = cpk_palette.simple_palette(space)
      for name in moderate:
        assert cpk_gamut.in_gamut(palette.tagged(name)), (space, name)

  def test_cpk_palette_build_logs(self):
    'building a palette logs one debug record'
    with self.assertLogs('colorpak.cpk_palette', level=logging.DEBUG) as logs:
      cpk_palette.PaletteIndex.build(
          [('a', np.float32(0.0)), ('b', np.float32(0.0))], S.SRGB)
    assert len(logs.records) == 1
    assert 'SRGB' in logs.output[0]
