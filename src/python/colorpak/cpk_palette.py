# Copyright 2021 Alex Harvill
# SPDX-License-Identifier: Apache-2.0
'colorpak named palettes'
import functools
import logging
import types
import numpy as np

from colorpak.cpk_constants import (
    PALETTE_GRAY_SATURATION,
    PALETTE_TRANSPARENT_ALPHA,
    TaggedColor,
)
from colorpak.cpk_codec import decode
from colorpak.cpk_spaces import (
    converter,
    from_rgba8888,
    channel_hue,
    channel_lightness,
    channel_saturation,
)

logger = logging.getLogger(__name__)

# RGBA8888, red in the most significant byte
SIMPLE_PALETTE_RGBA8888 = (
    ('transparent', 0x00000000),
    ('black', 0x000000FF),
    ('gray', 0x808080FF),
    ('silver', 0xB6B6B6FF),
    ('white', 0xFFFFFFFF),
    ('red', 0xFF0000FF),
    ('orange', 0xFF7F00FF),
    ('yellow', 0xFFFF00FF),
    ('green', 0x00FF00FF),
    ('blue', 0x0000FFFF),
    ('indigo', 0x520FE0FF),
    ('violet', 0x9040EFFF),
    ('purple', 0xC000FFFF),
    ('brown', 0x8F573BFF),
    ('pink', 0xFFA0E0FF),
    ('magenta', 0xF500F5FF),
    ('brick', 0xD5524AFF),
    ('ember', 0xF55A32FF),
    ('salmon', 0xFF6262FF),
    ('chocolate', 0x683818FF),
    ('tan', 0xD2B48CFF),
    ('bronze', 0xCE8E31FF),
    ('cinnamon', 0xD2691DFF),
    ('apricot', 0xFFA828FF),
    ('peach', 0xFFBF81FF),
    ('pear', 0xD3E330FF),
    ('saffron', 0xFFD510FF),
    ('butter', 0xFFF288FF),
    ('chartreuse', 0xC8FF41FF),
    ('cactus', 0x30A000FF),
    ('lime', 0x93D300FF),
    ('olive', 0x818000FF),
    ('fern', 0x4E7942FF),
    ('moss', 0x204608FF),
    ('celery', 0x7DFF73FF),
    ('sage', 0xABE3C5FF),
    ('jade', 0x3FBF3FFF),
    ('cyan', 0x00FFFFFF),
    ('mint', 0x7FFFD4FF),
    ('teal', 0x007F7FFF),
    ('turquoise', 0x2ED6C9FF),
    ('sky', 0x10C0E0FF),
    ('cobalt', 0x0046ABFF),
    ('denim', 0x3088B8FF),
    ('navy', 0x000080FF),
    ('lavender', 0xB991FFFF),
    ('plum', 0xBE0DC6FF),
    ('mauve', 0xAB73ABFF),
    ('rose', 0xE61E78FF),
    ('raspberry', 0x911437FF),
)

SIMPLE_PALETTE_ALIASES = {
    'grey': 'gray',
    'gold': 'saffron',
    'puce': 'mauve',
    'sand': 'tan',
    'skin': 'peach',
    'coral': 'salmon',
    'azure': 'sky',
    'ocean': 'teal',
    'sapphire': 'cobalt',
}


def hue_order_key(hue, lightness, saturation, alpha):
  '''
  sort key equivalent to comparing 2 * sign(hue delta) + sign(lightness delta)
  mostly transparent colors first, then grays by lightness, then chromatic
  colors by hue and lightness
  '''
  if alpha < PALETTE_TRANSPARENT_ALPHA:
    return (0, 0.0, 0.0)
  if saturation <= PALETTE_GRAY_SATURATION:
    return (1, 0.0, lightness)
  return (2, hue, lightness)


class PaletteIndex:
  '''
  immutable named colors of one space with precomputed orderings
  built with PaletteIndex.build
  '''

  def __init__(self, space, colors, names_by_hue, names_by_lightness, aliases):
    self._space = space
    self._colors = types.MappingProxyType(dict(colors))
    self._names = tuple(sorted(self._colors))
    self._names_by_hue = tuple(names_by_hue)
    self._names_by_lightness = tuple(names_by_lightness)
    self._aliases = types.MappingProxyType(dict(aliases))

  @classmethod
  def build(cls, entries, space, aliases=None):
    '''
    entries: ordered iterable of (name, packed), later duplicates win
    aliases: optional mapping of alternate name to an entry name
    '''
    converter(space)

    colors = {}
    for name, packed in entries:
      colors[name] = np.float32(packed)

    names = sorted(colors)
    aliases = {
        alias: target
        for alias, target in (aliases or {}).items()
        if target in colors and alias not in colors
    }

    if names:
      channels = decode(np.array([colors[name] for name in names]))
      hues = channel_hue(channels, space)
      lightnesses = channel_lightness(channels, space)
      saturations = channel_saturation(channels, space)
      alphas = channels[..., 3]
    else:
      hues = lightnesses = saturations = alphas = ()

    keys = {
        name: hue_order_key(float(h), float(l), float(s), float(a))
        for name, h, l, s, a in zip(names, hues, lightnesses, saturations,
                                    alphas)
    }
    lightness_of = dict(zip(names, (float(l) for l in lightnesses)))

    # python sorts are stable, ties keep alphabetical order
    names_by_hue = sorted(names, key=keys.__getitem__)
    names_by_lightness = sorted(names, key=lightness_of.__getitem__)

    logger.debug('built %s palette of %d colors, %d aliases', space.name,
                 len(names), len(aliases))

    return cls(space, colors, names_by_hue, names_by_lightness, aliases)

  @property
  def space(self):
    'the space every color of this palette is packed in'
    return self._space

  @property
  def names(self):
    'color names in alphabetical order'
    return self._names

  @property
  def names_by_hue(self):
    'color names ordered transparent, grays by lightness, then by hue'
    return self._names_by_hue

  @property
  def names_by_lightness(self):
    'color names ordered dark to light'
    return self._names_by_lightness

  @property
  def aliases(self):
    'read only mapping of alternate name to color name'
    return self._aliases

  def lookup(self, name):
    'packed color for a name or alias, None when missing'
    name = self._aliases.get(name, name)
    return self._colors.get(name)

  def tagged(self, name):
    'TaggedColor for a name or alias, None when missing'
    packed = self.lookup(name)
    if packed is None:
      return None
    return TaggedColor(packed, self._space)

  def items(self):
    '(name, packed) pairs in alphabetical order'
    return [(name, self._colors[name]) for name in self._names]

  def __contains__(self, name):
    return self.lookup(name) is not None

  def __len__(self):
    return len(self._names)

  def __iter__(self):
    return iter(self._names)

  def __repr__(self):
    return f'PaletteIndex({self._space.name}, {len(self)} colors)'


@functools.lru_cache(maxsize=None)
def simple_palette(space):
  'the stock named palette packed in space, built once per space'
  entries = [(name, from_rgba8888(value, space))
             for name, value in SIMPLE_PALETTE_RGBA8888]
  return PaletteIndex.build(entries, space, aliases=SIMPLE_PALETTE_ALIASES)
