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

"""Reassembly of ``(key, value)`` entries into maps and sequences.

Entries sharing a key are merged instead of overwritten: mappings are merged
recursively, sequences are concatenated and anything else accumulates into a
flat list. A resulting key set of exactly ``0..n-1`` quacks as a sequence and
is returned as a list ordered by key.
"""

import collections.abc
import itertools

from absl import logging

from nestwalk import _containers
from nestwalk import _errors
from nestwalk import _paths


class _Branch(dict):
  """A mapping created by `deep_insert` for a missing path segment."""


class _Accumulator(list):
  """A list collecting values inserted at the same path."""


def _check_key(key):
  try:
    hash(key)
  except TypeError as e:
    raise _errors.MalformedKeyError(key, "keys must be hashable") from e


def _quacks_as_sequence(merged):
  """Returns True iff the keys of `merged` are exactly ``0..len(merged)-1``."""
  size = len(merged)
  return size > 0 and all(
      _paths.is_index(key) and 0 <= key < size for key in merged)


def _pairs(value):
  if isinstance(value, collections.abc.Mapping):
    return list(value.items())
  return list(value)


def _combine(left, right):
  """Combines two values colliding at the same key."""
  left_is_map = (isinstance(left, collections.abc.Mapping) or
                 _containers.is_assoc(left))
  right_is_map = (isinstance(right, collections.abc.Mapping) or
                  _containers.is_assoc(right))
  if left_is_map and right_is_map:
    combined = merge(itertools.chain(_pairs(left), _pairs(right)))
    if (isinstance(combined, dict) and _containers.is_assoc(left) and
        _containers.is_assoc(right)):
      return list(combined.items())
    return combined
  if _containers.is_sequence(left):
    if _containers.is_sequence(right):
      return list(left) + list(right)
    return list(left) + [right]
  return [left, right]


def _squeeze_value(value):
  """Squeezes `value` and everything nested in it."""
  if isinstance(value, collections.abc.Mapping):
    return merge(value.items(), recursive=True)
  if _containers.is_assoc(value):
    return squeeze(value, _containers.Kind.ASSOC, recursive=True)
  if _containers.is_sequence(value):
    squeezed = [_squeeze_value(item) for item in value]
    return tuple(squeezed) if isinstance(value, tuple) else squeezed
  return value


def merge(entries, recursive=False):
  """Merges `entries` into a dict, or into a list if the keys are ``0..n-1``.

  Args:
    entries: an iterable of ``(key, value)`` pairs.
    recursive: whether to squeeze the values first.

  Returns:
    A dict keyed in first-seen order, or a list ordered by key.

  Raises:
    MalformedKeyError: if a key is not hashable.
  """
  merged = {}
  for key, value in entries:
    _check_key(key)
    if recursive:
      value = _squeeze_value(value)
    if key in merged:
      logging.vlog(1, "Merging values colliding at key %r.", key)
      merged[key] = _combine(merged[key], value)
    else:
      merged[key] = value
  if _quacks_as_sequence(merged):
    logging.vlog(1, "Keys 0..%d quack as a sequence.", len(merged) - 1)
    return [merged[index] for index in range(len(merged))]
  return merged


def squeeze(entries, kind=_containers.Kind.MAP, recursive=True):
  """Reassembles `entries` into a map, an association list or a sequence.

  >>> squeeze([(0, "a"), (1, "b")])
  ['a', 'b']
  >>> squeeze([("foo", 1), ("foo", 2), ("foo", 3)])
  {'foo': [1, 2, 3]}

  Args:
    entries: an iterable of ``(key, value)`` pairs, or a mapping.
    kind: `Kind.MAP` returns a dict, `Kind.ASSOC` a list of pairs. Either is
      replaced by a list when the keys are exactly ``0..n-1``.
    recursive: whether nested mappings and sequences are squeezed as well.

  Returns:
    A dict, a list of ``(key, value)`` pairs or a list of values.

  Raises:
    MalformedKeyError: if a key is not hashable.
  """
  if isinstance(entries, collections.abc.Mapping):
    entries = entries.items()
  result = merge(entries, recursive=recursive)
  if kind is _containers.Kind.ASSOC and isinstance(result, dict):
    return list(result.items())
  return result


def accumulate(existing, value):
  """Returns `existing` and `value` collected into one accumulator list."""
  if isinstance(existing, _Accumulator):
    existing.append(value)
    return existing
  logging.vlog(1, "Accumulating %r and %r.", existing, value)
  if _containers.is_sequence(existing):
    return _Accumulator(list(existing) + [value])
  return _Accumulator([existing, value])


def release(value):
  """Returns `value` with an accumulator turned into a plain list."""
  return list(value) if isinstance(value, _Accumulator) else value


def _descend(node, key):
  """Returns the mapping under `node[key]`, creating it if needed."""
  child = node.get(key)
  if key not in node:
    child = node[key] = _Branch()
  elif isinstance(child, _Branch):
    pass
  elif isinstance(child, collections.abc.Mapping):
    # Never write into a mapping the caller owns.
    child = node[key] = _Branch(child)
  elif isinstance(child, _Accumulator) and isinstance(child[-1], _Branch):
    child = child[-1]
  else:
    branch = _Branch()
    node[key] = accumulate(child, branch)
    child = branch
  return child


def deep_insert(target, path, value):
  """Inserts `value` into `target` at `path`, creating mappings on the way.

  >>> deep_insert({"a": {"b": 1}}, ("a", "c"), 2)
  {'a': {'b': 1, 'c': 2}}

  Nothing is overwritten: inserting where a value already lives turns both
  into an accumulating list.

  >>> deep_insert({"a": 1}, ("a",), 2)
  {'a': [1, 2]}

  Args:
    target: a dict, modified in place. Mappings nested in it are copied
      before being written to.
    path: a non-empty tuple of keys.
    value: the value to insert.

  Returns:
    `target`.

  Raises:
    MalformedKeyError: if `path` is empty or contains unhashable keys.
  """
  if not path:
    raise _errors.MalformedKeyError(path, "cannot insert at an empty path")
  node = target
  for key in path[:-1]:
    _check_key(key)
    node = _descend(node, key)
  last = path[-1]
  _check_key(last)
  if last in node:
    node[last] = accumulate(node[last], value)
  else:
    node[last] = value
  return target
