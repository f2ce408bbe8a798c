# Copyright 2019 DeepMind Technologies Limited. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""Paths: tuples of keys leading from the root of a structure to a node.

A key containing the delimiter does not survive a `join` / `split` round
trip; no escaping is attempted.
"""

import re

from absl import logging
import numpy as np

from nestwalk import _errors

SPLIT_MODES = ("best_effort", "raw")

_INDEX_RE = re.compile(r"[0-9]+\Z")


def is_index(key):
  """Returns True iff `key` can be a sequence index.

  Python and numpy integers qualify, booleans do not.
  """
  return isinstance(key, (int, np.integer)) and not isinstance(key, bool)


def extend(path, key):
  """Returns `path` with `key` appended."""
  return path + (key,)


def join(path, delimiter="."):
  """Joins `path` into a flat map key.

  >>> join(("a", "b", 0))
  'a.b.0'

  A single-segment path is returned as the bare key, so the key type
  survives:

  >>> join((0,))
  0

  Args:
    path: a tuple of keys.
    delimiter: the separator placed between segments.

  Returns:
    The bare key for a one-segment path, otherwise a string.
  """
  if len(path) == 1:
    return path[0]
  return delimiter.join(str(key) for key in path)


def _parse_segment(segment, mode):
  if mode == "best_effort" and _INDEX_RE.match(segment):
    return int(segment)
  return segment


def split(flat_key, delimiter=".", mode="best_effort"):
  """Splits a flat map key back into a path.

  >>> split("a.b.0")
  ('a', 'b', 0)
  >>> split("a.b.0", mode="raw")
  ('a', 'b', '0')

  Args:
    flat_key: a string to be split on `delimiter`, an integer (a one-segment
      path) or a tuple / list of string and integer segments.
    delimiter: the separator between segments.
    mode: ``"best_effort"`` turns pure-digit segments into integers and keeps
      everything else as strings; ``"raw"`` keeps all segments as strings.

  Returns:
    The path, a tuple of keys.

  Raises:
    ValueError: if `mode` is unknown or `delimiter` is empty.
    MalformedKeyError: if `flat_key` cannot be turned into a path.
  """
  if mode not in SPLIT_MODES:
    raise ValueError("mode must be one of {}, got: {!r}".format(
        SPLIT_MODES, mode))
  if not delimiter:
    raise ValueError("delimiter must not be empty.")

  if isinstance(flat_key, str):
    segments = flat_key.split(delimiter)
    if "" in segments:
      logging.warning("Flat key %r contains an empty segment.", flat_key)
    return tuple(_parse_segment(segment, mode) for segment in segments)
  elif is_index(flat_key):
    return (int(flat_key),)
  elif isinstance(flat_key, (tuple, list)):
    if not flat_key:
      raise _errors.MalformedKeyError(flat_key, "empty path")
    for segment in flat_key:
      if not (is_index(segment) or isinstance(segment, str)):
        raise _errors.MalformedKeyError(
            flat_key, "segment {!r} is neither int nor str".format(segment))
    return tuple(flat_key)
  raise _errors.MalformedKeyError(
      flat_key, "expected str, int or a tuple of those, got {}".format(
          type(flat_key).__name__))
