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

"""Functions for walking, mapping and flattening nested data structures.

A structure is built from mappings, sequences, association lists (lists of
``(str, value)`` pairs) and records, with anything else as leaves. Every
operation walks it depth first, in container order, handing callbacks the
*path* of a node: the tuple of keys and indices leading to it from the root.
"""

import collections.abc
import inspect

from absl import logging
import attr
import numpy as np

from nestwalk import _containers
from nestwalk import _errors
from nestwalk import _options
from nestwalk import _paths
from nestwalk import _squeeze

__all__ = [
    "each",
    "map",
    "reduce",
    "map_reduce",
    "filter",
    "to_flatmap",
    "from_flatmap",
    "flatten_with_path",
    "dig",
    "squeeze",
    "deep_insert",
    "extend",
    "join",
    "split",
    "classify",
    "entries",
    "kind_of",
    "Kind",
    "Options",
    "RecordAdapter",
    "register_adapter",
    "unregister_adapter",
    "Error",
    "UnsupportedValueError",
    "MalformedKeyError",
    "ArityMismatchError",
    "DepthExceededError",
]

__version__ = "0.1.0"

Kind = _containers.Kind
Options = _options.Options
RecordAdapter = _containers.RecordAdapter
register_adapter = _containers.register_adapter
unregister_adapter = _containers.unregister_adapter
classify = _containers.classify
entries = _containers.entries
kind_of = _containers.kind_of

squeeze = _squeeze.squeeze
deep_insert = _squeeze.deep_insert

extend = _paths.extend
join = _paths.join
split = _paths.split

Error = _errors.Error
UnsupportedValueError = _errors.UnsupportedValueError
MalformedKeyError = _errors.MalformedKeyError
ArityMismatchError = _errors.ArityMismatchError
DepthExceededError = _errors.DepthExceededError

_PATH_VALUE = ("path", "value")
_PATH_VALUE_ACC = ("path", "value", "acc")


def _check_callback(fn, params, operation):
  """Checks eagerly that `fn` can be called with `params`.

  Callables without an introspectable signature (some builtins) are
  accepted as is.
  """
  if not callable(fn):
    raise TypeError("{} expects a callable, got: {!r}".format(operation, fn))
  try:
    signature = inspect.signature(fn)
  except (TypeError, ValueError):
    return
  try:
    signature.bind(*params)
  except TypeError as e:
    raise _errors.ArityMismatchError(fn, params, operation) from e


def _equal(a, b):
  """Equality which never raises, arrays are only equal to themselves."""
  if a is b:
    return True
  if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
    return False
  try:
    return bool(a == b)
  except (TypeError, ValueError):
    # Containers holding arrays cannot be compared element-wise.
    return False


def _is_key(candidate, key):
  if _paths.is_index(key):
    return _paths.is_index(candidate) and candidate == key
  return _equal(candidate, key)


def _interpret(result, path, key, value):
  """Returns the new value of a node from a callback `result`.

  A callback returns either a bare replacement, or a ``(path, replacement)``
  pair where the first item is the path it was handed or the node's key.
  A replacement of the same type that compares equal yields the original
  `value`, so `1.0` still replaces `1`.
  """
  if result is value:
    return value
  if (type(result) is tuple and len(result) == 2 and  # pylint: disable=unidiomatic-typecheck
      ((isinstance(result[0], (tuple, list)) and
        _equal(tuple(result[0]), path)) or _is_key(result[0], key))):
    result = result[1]
  if type(result) is type(value) and _equal(result, value):  # pylint: disable=unidiomatic-typecheck
    return value
  return result


def _yields(policy, kind):
  """Returns True iff nodes of `kind` are handed to callbacks under `policy`."""
  if kind is Kind.SCALAR or policy == "all":
    return True
  if policy == "maps":
    return kind in (Kind.MAP, Kind.ASSOC, Kind.RECORD)
  if policy == "lists":
    return kind is Kind.SEQUENCE
  return False


def _traverse(node, fn, options, path, acc):
  """Walks the children of the container `node`.

  Args:
    node: the classified container, see `_containers.classify`.
    fn: a callable ``fn(path, value, acc) -> (result, acc)``.
    options: an `Options` instance.
    path: the path of `node`.
    acc: the accumulator.

  Returns:
    A pair ``(rebuilt, acc)``.

  Raises:
    DepthExceededError: if the children are deeper than `options.max_depth`.
  """
  if node.items and len(path) >= options.max_depth:
    raise _errors.DepthExceededError(
        _paths.extend(path, node.items[0][0]), options.max_depth)

  rebuilt = []
  for key, child in node.items:
    deep = _paths.extend(path, key)
    child_node = _containers.classify(child, options.structs)
    value = child
    if _yields(options.yield_, child_node.kind):
      presented = options.present(deep)
      result, acc = fn(presented, child, acc)
      value = _interpret(result, presented, key, child)
      if value is not child:
        child_node = _containers.classify(value, options.structs)
    if child_node.kind is not Kind.SCALAR:
      value, acc = _traverse(child_node, fn, options, deep, acc)
    rebuilt.append((key, value))

  return _containers.rebuild(
      node, _squeeze.merge(rebuilt), options.structs), acc


def _walk(structure, fn, options, acc, operation, require_container=False):
  """Classifies the root `structure` and walks it."""
  node = _containers.classify(structure, options.structs)
  if node.kind is Kind.SCALAR:
    if require_container:
      raise _errors.UnsupportedValueError(structure, operation)
    return structure, acc
  logging.vlog(1, "%s over %s with %s.", operation,
               type(structure).__name__, options)
  return _traverse(node, fn, options, (), acc)


def each(structure, fn, **options):
  """Calls `fn` on the nodes of `structure` for its side effects.

  >>> visited = []
  >>> nestwalk.each({"a": {"b": 42}},
  ...               lambda path, value: visited.append(path), yield_="all")
  {'a': {'b': 42}}
  >>> visited
  [('a',), ('a', 'b')]

  Args:
    structure: an arbitrarily nested structure.
    fn: a callable ``fn(path, value)``. Its return value is ignored.
    **options: see `Options`.

  Returns:
    `structure` itself.

  Raises:
    TypeError: if `fn` is not callable.
    ArityMismatchError: if `fn` does not accept ``(path, value)``.
    UnsupportedValueError: if `structure` contains an unsupported value.
  """
  opts = _options.make_options(options)
  _check_callback(fn, _PATH_VALUE, "each")

  def visit(path, value, acc):
    fn(path, value)
    return value, acc

  _walk(structure, visit, opts, None, "each")
  return structure


def map(structure, fn, **options):  # pylint: disable=redefined-builtin
  """Maps `fn` through the nodes of `structure`.

  >>> nestwalk.map({"a": [1, 2], "b": 3}, lambda path, value: value * 10)
  {'a': [10, 20], 'b': 30}

  `fn` may return a ``(path, value)`` pair instead of a bare value, in which
  case the first item must be the path (or the key) it was handed:

  >>> nestwalk.map({"a": 1}, lambda path, value: (path, value + 1))
  {'a': 2}

  Mappings whose keys turn out to be ``0..n-1`` are rebuilt as lists.

  Args:
    structure: an arbitrarily nested structure.
    fn: a callable ``fn(path, value)`` returning the replacement value. With
      ``yield_="all"``, ``"maps"`` or ``"lists"`` it also sees containers; a
      container it returns unchanged is walked further, a replacement is
      walked instead of the original.
    **options: see `Options`.

  Returns:
    A new structure of the same layout as `structure`.

  Raises:
    TypeError: if `fn` is not callable.
    ArityMismatchError: if `fn` does not accept ``(path, value)``.
    UnsupportedValueError: if `structure` contains an unsupported value.
    DepthExceededError: if `structure` is nested deeper than `max_depth`.
  """
  opts = _options.make_options(options)
  _check_callback(fn, _PATH_VALUE, "map")
  mapped, _ = _walk(structure, lambda path, value, acc: (fn(path, value), acc),
                    opts, None, "map")
  return mapped


def reduce(structure, acc, fn, **options):
  """Folds `fn` over the nodes of `structure`.

  >>> nestwalk.reduce({"a": [1, 2], "b": 3}, 0,
  ...                 lambda path, value, acc: acc + value)
  6

  Args:
    structure: an arbitrarily nested structure.
    acc: the initial accumulator.
    fn: a callable ``fn(path, value, acc)`` returning the next accumulator.
    **options: see `Options`.

  Returns:
    The final accumulator.

  Raises:
    TypeError: if `fn` is not callable.
    ArityMismatchError: if `fn` does not accept ``(path, value, acc)``.
    UnsupportedValueError: if `structure` contains an unsupported value.
    DepthExceededError: if `structure` is nested deeper than `max_depth`.
  """
  opts = _options.make_options(options)
  _check_callback(fn, _PATH_VALUE_ACC, "reduce")
  def fold(path, value, acc):
    return value, fn(path, value, acc)

  _, acc = _walk(structure, fold, opts, acc, "reduce")
  return acc


def map_reduce(structure, acc, fn, **options):
  """Maps `fn` through `structure` while threading an accumulator.

  >>> nestwalk.map_reduce([1, 2, 3], 0,
  ...                     lambda path, value, acc: (value * 2, acc + value))
  ([2, 4, 6], 6)

  Args:
    structure: an arbitrarily nested structure.
    acc: the initial accumulator.
    fn: a callable ``fn(path, value, acc)`` returning a pair
      ``(replacement, acc)``, the replacement being interpreted as by `map`.
    **options: see `Options`.

  Returns:
    A pair ``(mapped_structure, final_acc)``.

  Raises:
    TypeError: if `fn` is not callable or does not return a pair.
    ArityMismatchError: if `fn` does not accept ``(path, value, acc)``.
    UnsupportedValueError: if `structure` contains an unsupported value.
    DepthExceededError: if `structure` is nested deeper than `max_depth`.
  """
  opts = _options.make_options(options)
  _check_callback(fn, _PATH_VALUE_ACC, "map_reduce")

  def step(path, value, acc):
    result = fn(path, value, acc)
    if not isinstance(result, tuple) or len(result) != 2:
      raise TypeError(
          "map_reduce expects fn to return a (value, acc) pair, got: "
          "{!r}".format(result))
    return result

  return _walk(structure, step, opts, acc, "map_reduce")


def filter(structure, predicate, **options):  # pylint: disable=redefined-builtin
  """Keeps the leaves of `structure` for which `predicate` holds.

  >>> nestwalk.filter({"a": {"b": 1, "c": 2}, "d": 3},
  ...                 lambda path, value: value > 1)
  {'a': {'c': 2}, 'd': 3}

  Surviving leaves keep their original path, branches without survivors
  disappear. Sequence indices are kept as well, so a sequence that lost
  anything but its tail comes back as a mapping keyed by index.

  Args:
    structure: a nested structure; its root must be a container.
    predicate: a callable ``predicate(path, value)``.
    **options: see `Options`; only leaves are filtered, so `yield_` must be
      ``"none"``.

  Returns:
    A new structure rebuilt from the surviving leaves.

  Raises:
    ValueError: if `yield_` is not ``"none"``.
    TypeError: if `predicate` is not callable.
    ArityMismatchError: if `predicate` does not accept ``(path, value)``.
    UnsupportedValueError: if `structure` is not a container or contains an
      unsupported value.
  """
  opts = _options.make_options(options)
  if opts.yield_ != "none":
    raise ValueError(
        "filter only visits leaves, yield_ must be 'none', got: {!r}".format(
            opts.yield_))
  _check_callback(predicate, _PATH_VALUE, "filter")

  def keep(path, value, acc):
    if predicate(path, value):
      _squeeze.deep_insert(acc, opts.present(path), value)
    return value, acc

  _, kept = _walk(structure, keep, opts, {}, "filter", require_container=True)
  return _squeeze.squeeze(kept)


def to_flatmap(structure, **options):
  """Flattens `structure` into a single-level dict keyed by joined paths.

  >>> nestwalk.to_flatmap({"a": {"b": {"c": 42, "d": [None, 42]},
  ...                            "e": ["f", 42]}})
  {'a.b.c': 42, 'a.b.d.0': None, 'a.b.d.1': 42, 'a.e.0': 'f', 'a.e.1': 42}

  Keys of leaves directly under the root keep their type:

  >>> nestwalk.to_flatmap(["a", 42])
  {0: 'a', 1: 42}

  Leaves flattened to the same key (repeated keys of an association list)
  are collected into a list.

  Args:
    structure: a nested structure; its root must be a container.
    **options: see `Options`; `delimiter` joins the path segments, `yield_`
      and `keys` are ignored.

  Returns:
    A dict mapping flat keys to leaves, in traversal order.

  Raises:
    UnsupportedValueError: if `structure` is not a container or contains an
      unsupported value.
    DepthExceededError: if `structure` is nested deeper than `max_depth`.
  """
  opts = attr.evolve(
      _options.make_options(options), yield_="none", keys="default")

  def put(path, value, flat):
    flat_key = _paths.join(path, opts.delimiter)
    if flat_key in flat:
      flat[flat_key] = _squeeze.accumulate(flat[flat_key], value)
    else:
      flat[flat_key] = value
    return value, flat

  _, flat = _walk(structure, put, opts, {}, "to_flatmap",
                  require_container=True)
  return {key: _squeeze.release(value) for key, value in flat.items()}


def from_flatmap(flatmap, transformer=None, **options):
  """Rebuilds a nested structure from a flat map.

  >>> nestwalk.from_flatmap({"a.b.c": 42, "a.b.d.0": None, "a.b.d.1": 42})
  {'a': {'b': {'c': 42, 'd': [None, 42]}}}
  >>> nestwalk.from_flatmap({"1": "b", "0": "a"})
  ['a', 'b']

  Args:
    flatmap: a mapping from flat keys to values. Keys are split on the
      delimiter, pure-digit segments becoming integer indices. Integer keys
      and tuples of segments are accepted as well.
    transformer: an optional callable ``transformer(path, value)`` whose
      result is inserted instead of `value`.
    **options: see `Options`; only `delimiter` and `max_depth` are used.

  Returns:
    A dict, or a list if the top-level keys are ``0..n-1``.

  Raises:
    UnsupportedValueError: if `flatmap` is not a mapping.
    MalformedKeyError: if a key cannot be turned into a path.
    ArityMismatchError: if `transformer` does not accept ``(path, value)``.
    DepthExceededError: if a path is longer than `max_depth`.
  """
  opts = _options.make_options(options)
  if not isinstance(flatmap, collections.abc.Mapping):
    raise _errors.UnsupportedValueError(flatmap, "from_flatmap")
  if transformer is not None:
    _check_callback(transformer, _PATH_VALUE, "from_flatmap")

  nested = {}
  for flat_key, value in flatmap.items():
    path = _paths.split(flat_key, opts.delimiter)
    if len(path) > opts.max_depth:
      raise _errors.DepthExceededError(path, opts.max_depth)
    if transformer is not None:
      value = transformer(path, value)
    _squeeze.deep_insert(nested, path, value)
  return _squeeze.squeeze(nested)


def flatten_with_path(structure, **options):
  """Flattens `structure` into a list of ``(path, leaf)`` pairs.

  >>> nestwalk.flatten_with_path([{"foo": 42}])
  [((0, 'foo'), 42)]

  Args:
    structure: an arbitrarily nested structure.
    **options: see `Options`; `yield_` is ignored.

  Returns:
    A list of ``(path, leaf)`` pairs in traversal order. A leaf `structure`
    yields no pairs.
  """
  opts = attr.evolve(_options.make_options(options), yield_="none")

  def collect(path, value, pairs):
    pairs.append((path, value))
    return value, pairs

  _, pairs = _walk(structure, collect, opts, [], "flatten_with_path")
  return pairs


def dig(structure, **options):
  """Follows a chain of single-entry containers down to its leaf.

  >>> nestwalk.dig({"k1": {"k2": ["v"]}})
  (('k1', 'k2', 0), 'v')

  Args:
    structure: a nested structure where every container has one entry.
    **options: see `Options`; `structs` decides whether records are leaves.

  Returns:
    A pair ``(path, leaf)``.

  Raises:
    UnsupportedValueError: if some container has zero or several entries.
  """
  opts = _options.make_options(options)
  path = ()
  node = _containers.classify(structure, opts.structs)
  while node.kind is not Kind.SCALAR:
    if len(node.items) != 1:
      raise _errors.UnsupportedValueError(node.template, "dig")
    key, value = node.items[0]
    path = _paths.extend(path, key)
    node = _containers.classify(value, opts.structs)
  return path, node.template
