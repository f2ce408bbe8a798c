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

"""Exceptions raised by nestwalk.

Every exception also derives from the builtin it refines, so callers that
only know about ``TypeError`` / ``ValueError`` keep working.
"""


class Error(Exception):
  """Base class for all nestwalk errors."""


class UnsupportedValueError(Error, TypeError):
  """A value is neither a leaf nor a container nestwalk knows how to walk."""

  def __init__(self, value, function=None):
    self.value = value
    self.function = function
    message = "Unsupported value of type {} ({!r})".format(
        type(value).__name__, value)
    if function is not None:
      message += " in call to {}".format(function)
    super().__init__(message + ".")


class MalformedKeyError(Error, ValueError):
  """A key cannot be used as, or parsed into, a path segment."""

  def __init__(self, key, reason):
    self.key = key
    super().__init__("Malformed key {!r}: {}.".format(key, reason))


class ArityMismatchError(Error, TypeError):
  """A callback does not accept the arguments an operation passes to it."""

  def __init__(self, fn, expected, operation):
    self.fn = fn
    self.expected = expected
    super().__init__(
        "{} expects a callable accepting {} positional arguments ({}), "
        "got: {!r}".format(operation, len(expected), ", ".join(expected), fn))


class DepthExceededError(Error, RecursionError):
  """The structure is nested deeper than the configured ``max_depth``."""

  def __init__(self, path, max_depth):
    self.path = tuple(path)
    self.max_depth = max_depth
    super().__init__(
        "Structure nesting exceeds max_depth={} at path {!r}".format(
            max_depth, self.path[:max_depth + 1]))
