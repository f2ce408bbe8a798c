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

"""Classification of values into leaves and containers, and their rebuilding.

Records (namedtuples, attrs classes, dataclasses and anything a registered
`RecordAdapter` claims) are recognized before plain mappings and sequences,
so a namedtuple is a record rather than a tuple.
"""

import collections
import collections.abc
import dataclasses
import enum
import types

from absl import logging
import attr
import numpy as np
import wrapt

from nestwalk import _errors

# Note: text and byte strings are sequences, but they are always leaves.
_TEXT_OR_BYTES = (str, bytes, bytearray, memoryview)

# numpy arrays are iterable, numpy scalars may be; both are leaves.
_LEAF_TYPES = _TEXT_OR_BYTES + (np.ndarray, np.generic)


class Kind(enum.Enum):
  """The classes of values nestwalk distinguishes."""
  SCALAR = "scalar"
  MAP = "map"
  SEQUENCE = "sequence"
  ASSOC = "assoc"
  RECORD = "record"


#: A classified value.
#:
#: ``items`` lists the ``(key, child)`` pairs of a container (empty for
#: scalars), ``template`` is the original value which containers are rebuilt
#: after, ``adapter`` is the `RecordAdapter` handling a record, if any.
Node = collections.namedtuple("Node", ["kind", "items", "template", "adapter"])


class RecordAdapter(object):
  """Teaches nestwalk how to walk and rebuild a family of record types.

  Subclasses are registered with `register_adapter`. Registered adapters are
  consulted before the built-in ones and before mappings and sequences are
  recognized, so they may also claim types nestwalk would otherwise handle.
  """

  def type(self, value):
    """Returns the record type of `value`, or None if `value` is not handled."""
    raise NotImplementedError

  def to_enumerable(self, value):
    """Returns the ``(field_name, field_value)`` pairs of `value` in order."""
    raise NotImplementedError

  def to_collectable(self, value):
    """Returns a callable building a record like `value` from a field dict."""
    raise NotImplementedError

  def name(self, value):
    """Returns a human readable name for the record type of `value`."""
    return self.type(value).__name__


class NamedTupleAdapter(RecordAdapter):
  """Adapter for `collections.namedtuple` (and `typing.NamedTuple`) types."""

  def type(self, value):
    if isinstance(value, tuple) and hasattr(type(value), "_fields"):
      return type(value)
    return None

  def to_enumerable(self, value):
    return [(field, getattr(value, field)) for field in value._fields]

  def to_collectable(self, value):
    return lambda fields: value._replace(**fields)


def _get_attrs_items(obj):
  """Returns a list of (name, value) pairs from an attrs instance.

  The list is in attribute definition order.

  Args:
    obj: an object.

  Returns:
    A list of (attr_name, attr_value) pairs.
  """
  return [(a.name, getattr(obj, a.name))
          for a in obj.__class__.__attrs_attrs__]


class AttrsAdapter(RecordAdapter):
  """Adapter for classes decorated with `attr.s` / `attrs.define`."""

  def type(self, value):
    if not isinstance(value, type) and attr.has(type(value)):
      return type(value)
    return None

  def to_enumerable(self, value):
    return _get_attrs_items(value)

  def to_collectable(self, value):
    init_names = {a.name: a.alias for a in attr.fields(type(value)) if a.init}

    def collect(fields):
      return attr.evolve(value, **{
          init_names[name]: field_value
          for name, field_value in fields.items() if name in init_names})

    return collect


class DataclassAdapter(RecordAdapter):
  """Adapter for `dataclasses.dataclass` instances."""

  def type(self, value):
    if not isinstance(value, type) and dataclasses.is_dataclass(value):
      return type(value)
    return None

  def to_enumerable(self, value):
    return [(field.name, getattr(value, field.name))
            for field in dataclasses.fields(value)]

  def to_collectable(self, value):
    init_names = {field.name for field in dataclasses.fields(value)
                  if field.init}

    def collect(fields):
      return dataclasses.replace(value, **{
          name: field_value
          for name, field_value in fields.items() if name in init_names})

    return collect


_BUILTIN_ADAPTERS = (NamedTupleAdapter(), AttrsAdapter(), DataclassAdapter())
_ADAPTERS = []


def register_adapter(adapter):
  """Registers `adapter` ahead of all previously registered adapters.

  Args:
    adapter: a `RecordAdapter` instance.

  Returns:
    `adapter`, so the call can be used on a freshly built instance inline.

  Raises:
    TypeError: if `adapter` is not a `RecordAdapter`.
  """
  if not isinstance(adapter, RecordAdapter):
    raise TypeError("adapter must be a RecordAdapter, got: {!r}".format(
        adapter))
  _ADAPTERS.insert(0, adapter)
  return adapter


def unregister_adapter(adapter):
  """Removes a previously registered `adapter`.

  Raises:
    ValueError: if `adapter` was never registered.
  """
  _ADAPTERS.remove(adapter)


def _find_adapter(value, adapters):
  for adapter in adapters:
    if adapter.type(value) is not None:
      return adapter
  return None


def is_assoc(value):
  """Returns True iff `value` is a non-empty list of ``(str, value)`` pairs."""
  return (isinstance(value, list) and bool(value) and
          all(type(item) is tuple and len(item) == 2 and  # pylint: disable=unidiomatic-typecheck
              isinstance(item[0], str) for item in value))


def _record(value, adapter, structs):
  if structs == "values":
    return Node(Kind.SCALAR, (), value, adapter)
  return Node(Kind.RECORD, list(adapter.to_enumerable(value)), value, adapter)


def classify(value, structs="values"):
  """Classifies `value`.

  Args:
    value: any value.
    structs: ``"values"`` classifies records as scalars, anything else
      classifies them as `Kind.RECORD` with their fields as items.

  Returns:
    A `Node`.

  Raises:
    UnsupportedValueError: if `value` is iterable but neither ordered nor
      materialized, e.g. a set or a generator.
  """
  if isinstance(value, wrapt.ObjectProxy):
    return classify(value.__wrapped__, structs)._replace(template=value)

  adapter = _find_adapter(value, _ADAPTERS)
  if adapter is not None:
    return _record(value, adapter, structs)

  if value is None or isinstance(value, (bool, int, float, complex)):
    return Node(Kind.SCALAR, (), value, None)
  if isinstance(value, _LEAF_TYPES):
    return Node(Kind.SCALAR, (), value, None)

  adapter = _find_adapter(value, _BUILTIN_ADAPTERS)
  if adapter is not None:
    return _record(value, adapter, structs)

  if isinstance(value, collections.abc.Mapping):
    return Node(Kind.MAP, list(value.items()), value, None)
  if is_assoc(value):
    return Node(Kind.ASSOC, list(value), value, None)
  if isinstance(value, (collections.abc.Sequence,
                        collections.abc.MappingView)):
    return Node(Kind.SEQUENCE, list(enumerate(value)), value, None)
  if isinstance(value, collections.abc.Iterable):
    raise _errors.UnsupportedValueError(value, "classify")
  return Node(Kind.SCALAR, (), value, None)


def kind_of(value, structs="values"):
  """Returns the `Kind` of `value`, see `classify`."""
  return classify(value, structs).kind


def entries(value):
  """Returns the ``(key, child)`` pairs of `value`, in order.

  Records are enumerated by field. Leaves have no entries.
  """
  return classify(value, structs="keep").items


def is_sequence(value):
  """Returns True iff `value` is a list or a tuple other than a namedtuple."""
  return (isinstance(value, (list, tuple)) and
          not hasattr(type(value), "_fields"))


def _mapping_like(instance, items):
  """Converts `items` to a mapping of the same type as `instance`."""
  if isinstance(instance, collections.defaultdict):
    # `defaultdict` requires a default factory as the first argument.
    return type(instance)(instance.default_factory, items)
  elif isinstance(instance, collections.Counter):
    # `Counter` would count the pairs of a positional iterable.
    return type(instance)(dict(items))
  elif isinstance(instance, types.MappingProxyType):
    # MappingProxyType requires a dict to proxy to.
    return type(instance)(dict(items))
  else:
    return type(instance)(items)


def _sequence_like(instance, values):
  """Converts `values` to a sequence of the same type as `instance`."""
  if isinstance(instance, (collections.abc.MappingView, range)):
    # We can't directly construct mapping views or ranges, so we create a
    # list instead.
    return list(values)
  return type(instance)(values)


def rebuild(node, squeezed, structs="values"):
  """Rebuilds a container of the same kind as `node`.

  Args:
    node: the `Node` of the original container.
    squeezed: the reassembled children, as returned by `_squeeze.merge`: a
      dict, or a list when the keys turned out to be ``0..n-1``.
    structs: ``"keep"`` rebuilds records as their own type, anything else
      rebuilds them as plain dicts.

  Returns:
    The rebuilt container.
  """
  template = node.template
  if isinstance(template, wrapt.ObjectProxy):
    # For object proxies, first rebuild the underlying value and then re-wrap
    # it in the proxy type.
    unwrapped = node._replace(template=template.__wrapped__)
    return type(template)(rebuild(unwrapped, squeezed, structs))

  if node.kind is Kind.SEQUENCE:
    if not isinstance(squeezed, list):
      squeezed = list(squeezed.values())
    return _sequence_like(template, squeezed)
  if isinstance(squeezed, list):
    # Keys 0..n-1: the container quacks as a sequence.
    return squeezed
  if node.kind is Kind.MAP:
    return _mapping_like(template, squeezed.items())
  if node.kind is Kind.ASSOC:
    return type(template)(squeezed.items())
  if node.kind is Kind.RECORD and structs == "keep":
    logging.vlog(1, "Rebuilding record %s.", node.adapter.name(template))
    return node.adapter.to_collectable(template)(squeezed)
  return squeezed

