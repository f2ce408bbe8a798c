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

"""Tests for nestwalk._containers."""

import collections

from absl.testing import absltest
from absl.testing import parameterized
import attr
import numpy as np
import nestwalk
from nestwalk import _containers
from nestwalk import _errors
import wrapt

Kind = _containers.Kind
Point = collections.namedtuple("Point", ["x", "y"])


@attr.s
class Aliased(object):
  _private = attr.ib()
  derived = attr.ib(init=False, default=0)


class Pair(object):

  def __init__(self, left, right):
    self.left = left
    self.right = right

  def __eq__(self, other):
    return (isinstance(other, Pair) and
            (self.left, self.right) == (other.left, other.right))


class PairAdapter(_containers.RecordAdapter):

  def type(self, value):
    return Pair if isinstance(value, Pair) else None

  def to_enumerable(self, value):
    return [("left", value.left), ("right", value.right)]

  def to_collectable(self, value):
    return lambda fields: Pair(**fields)


class ClassifyTest(parameterized.TestCase):

  @parameterized.parameters(
      (1, Kind.SCALAR),
      (None, Kind.SCALAR),
      ("abc", Kind.SCALAR),
      (b"abc", Kind.SCALAR),
      (np.array([1, 2]), Kind.SCALAR),
      (np.float32(1), Kind.SCALAR),
      (object(), Kind.SCALAR),
      (Point, Kind.SCALAR),
      (Point(1, 2), Kind.SCALAR),
      ({}, Kind.MAP),
      (collections.OrderedDict(), Kind.MAP),
      ([], Kind.SEQUENCE),
      ((1, 2), Kind.SEQUENCE),
      (range(3), Kind.SEQUENCE),
      ({"a": 1}.keys(), Kind.SEQUENCE),
      ([("a", 1)], Kind.ASSOC),
      ([("a", 1), 2], Kind.SEQUENCE),
      ([(0, 1)], Kind.SEQUENCE),
      ([("a", 1, 2)], Kind.SEQUENCE),
  )
  def testKind(self, value, expected):
    self.assertEqual(_containers.classify(value).kind, expected)

  def testRecordKinds(self):
    node = _containers.classify(Point(1, 2), structs="keep")
    self.assertEqual(node.kind, Kind.RECORD)
    self.assertEqual(node.items, [("x", 1), ("y", 2)])
    self.assertIsInstance(node.adapter, _containers.NamedTupleAdapter)
    self.assertEqual(node.adapter.name(Point(1, 2)), "Point")

  @parameterized.parameters([{1, 2}], [frozenset()], [iter([1])])
  def testUnsupported(self, value):
    with self.assertRaises(_errors.UnsupportedValueError) as cm:
      _containers.classify(value)
    self.assertIs(cm.exception.value, value)

  def testObjectProxy(self):
    proxy = wrapt.ObjectProxy({"a": 1})
    node = _containers.classify(proxy)
    self.assertEqual(node.kind, Kind.MAP)
    self.assertIs(node.template, proxy)

  def testKindOf(self):
    self.assertEqual(_containers.kind_of(Point(1, 2)), Kind.SCALAR)
    self.assertEqual(_containers.kind_of(Point(1, 2), "keep"), Kind.RECORD)
    self.assertEqual(nestwalk.kind_of([("a", 1)]), Kind.ASSOC)

  def testEntries(self):
    self.assertEqual(_containers.entries(Point(1, 2)), [("x", 1), ("y", 2)])
    self.assertEqual(_containers.entries(["a", "b"]), [(0, "a"), (1, "b")])
    self.assertEqual(_containers.entries({"a": 1}), [("a", 1)])
    self.assertEmpty(_containers.entries(42))


class RebuildTest(parameterized.TestCase):

  def testSequenceFromMappingView(self):
    node = _containers.classify({"a": 1, "b": 2}.values())
    self.assertEqual(_containers.rebuild(node, [10, 20]), [10, 20])

  def testMapQuackingAsSequence(self):
    node = _containers.classify({0: "a"})
    self.assertEqual(_containers.rebuild(node, ["a"]), ["a"])

  def testRecordAsDict(self):
    node = _containers.classify(Point(1, 2), structs="maps")
    self.assertEqual(_containers.rebuild(node, {"x": 1, "y": 2}, "maps"),
                     {"x": 1, "y": 2})

  def testAttrsPrivateAttributes(self):
    value = Aliased(1)
    node = _containers.classify(value, structs="keep")
    self.assertEqual(node.items, [("_private", 1), ("derived", 0)])
    rebuilt = _containers.rebuild(
        node, {"_private": 2, "derived": 5}, structs="keep")
    self.assertEqual(rebuilt, Aliased(2))


class AdapterTest(absltest.TestCase):

  def setUp(self):
    super().setUp()
    self.adapter = _containers.register_adapter(PairAdapter())
    self.addCleanup(_containers.unregister_adapter, self.adapter)

  def testClassify(self):
    self.assertEqual(_containers.classify(Pair(1, 2)).kind, Kind.SCALAR)
    node = _containers.classify(Pair(1, 2), structs="keep")
    self.assertEqual(node.kind, Kind.RECORD)
    self.assertIs(node.adapter, self.adapter)
    self.assertEqual(self.adapter.name(Pair(1, 2)), "Pair")

  def testMapKeep(self):
    mapped = nestwalk.map(Pair(1, [2, 3]), lambda path, value: value + 1,
                          structs="keep")
    self.assertEqual(mapped, Pair(2, [3, 4]))

  def testToFlatmapMaps(self):
    self.assertEqual(nestwalk.to_flatmap([Pair("a", "b")], structs="maps"),
                     {"0.left": "a", "0.right": "b"})

  def testRegisteredAdaptersComeFirst(self):

    class DictAsLeaf(_containers.RecordAdapter):

      def type(self, value):
        return dict if isinstance(value, dict) else None

    adapter = _containers.register_adapter(DictAsLeaf())
    self.addCleanup(_containers.unregister_adapter, adapter)
    self.assertEqual(_containers.classify({"a": 1}).kind, Kind.SCALAR)

  def testRegisterRejectsOtherObjects(self):
    with self.assertRaises(TypeError):
      _containers.register_adapter(object())

  def testUnregisterUnknown(self):
    with self.assertRaises(ValueError):
      _containers.unregister_adapter(PairAdapter())


if __name__ == "__main__":
  absltest.main()
