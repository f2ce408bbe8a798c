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

"""Tests for nestwalk._paths."""

from unittest import mock

from absl.testing import absltest
from absl.testing import parameterized
import numpy as np
from nestwalk import _errors
from nestwalk import _paths


class PathsTest(parameterized.TestCase):

  def testExtend(self):
    self.assertEqual(_paths.extend((), "a"), ("a",))
    self.assertEqual(_paths.extend(("a",), 0), ("a", 0))

  @parameterized.parameters(
      (("a", "b", 0), ".", "a.b.0"),
      (("a", "b"), "/", "a/b"),
      (("a",), ".", "a"),
      ((0,), ".", 0),
      ((1, 2), "::", "1::2"),
  )
  def testJoin(self, path, delimiter, expected):
    self.assertEqual(_paths.join(path, delimiter), expected)

  @parameterized.parameters(
      ("a.b.0", ".", "best_effort", ("a", "b", 0)),
      ("a.b.0", ".", "raw", ("a", "b", "0")),
      ("a/b.c/1", "/", "best_effort", ("a", "b.c", 1)),
      ("a.-1.1x", ".", "best_effort", ("a", "-1", "1x")),
      ("a", ".", "best_effort", ("a",)),
      (3, ".", "best_effort", (3,)),
      (np.int32(3), ".", "raw", (3,)),
      (("a", 0), ".", "best_effort", ("a", 0)),
      (["a", "0"], ".", "best_effort", ("a", "0")),
  )
  def testSplit(self, flat_key, delimiter, mode, expected):
    self.assertEqual(_paths.split(flat_key, delimiter, mode), expected)

  def testJoinSplit(self):
    path = ("a", 0, "b", 12)
    self.assertEqual(_paths.split(_paths.join(path)), path)

  def testDelimiterInKeyIsLossy(self):
    self.assertEqual(_paths.split(_paths.join(("a.b", "c"))),
                     ("a", "b", "c"))

  def testEmptySegmentWarns(self):
    with mock.patch.object(_paths.logging, "warning") as warning:
      self.assertEqual(_paths.split("a..b"), ("a", "", "b"))
    warning.assert_called_once()

  @parameterized.parameters([1.5], [None], [True], [()], [("a", None)])
  def testMalformedKey(self, flat_key):
    with self.assertRaises(_errors.MalformedKeyError):
      _paths.split(flat_key)

  def testInvalidArguments(self):
    with self.assertRaisesRegex(ValueError, "mode"):
      _paths.split("a", mode="strict")
    with self.assertRaisesRegex(ValueError, "delimiter"):
      _paths.split("a", delimiter="")

  @parameterized.parameters(
      (0, True), (np.int64(2), True), (True, False), ("0", False), (1.0, False))
  def testIsIndex(self, key, expected):
    self.assertEqual(_paths.is_index(key), expected)


if __name__ == "__main__":
  absltest.main()
