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

"""Options shared by all traversal operations.

Process-wide defaults are absl flags, so an application can change the
default delimiter with ``--nestwalk_delimiter=/`` without touching call sites.
Flags are read through ``FLAGS[name].value`` which returns the default until
the application parses its command line.
"""

from absl import flags
import attr

flags.DEFINE_string(
    "nestwalk_delimiter", ".",
    "Default delimiter used to join and split flat map keys.")
flags.DEFINE_integer(
    "nestwalk_max_depth", 256,
    "Default maximal nesting depth nestwalk descends into.",
    lower_bound=1)

FLAGS = flags.FLAGS

YIELD_POLICIES = ("none", "all", "maps", "lists")
KEY_ORDERS = ("default", "reverse")
STRUCT_MODES = ("values", "keep", "maps")


def _default_delimiter():
  return FLAGS["nestwalk_delimiter"].value


def _default_max_depth():
  return FLAGS["nestwalk_max_depth"].value


def _none_to_default(value):
  return "none" if value is None else value


def _not_empty(instance, attribute, value):
  del instance  # Unused.
  if not value:
    raise ValueError("`{}` must not be empty.".format(attribute.name))


def _positive(instance, attribute, value):
  del instance  # Unused.
  if isinstance(value, bool) or value < 1:
    raise ValueError(
        "`{}` must be a positive integer, got: {!r}".format(
            attribute.name, value))


@attr.s(frozen=True)
class Options(object):
  """Validated traversal options.

  Attributes:
    delimiter: separator used to join paths into flat map keys.
    yield_: which nodes the callback is invoked on: ``"none"`` (leaves only),
      ``"all"``, ``"maps"`` (leaves and mappings) or ``"lists"`` (leaves and
      sequences). ``None`` means ``"none"``.
    keys: ``"reverse"`` hands paths to callbacks deepest key first.
    structs: how records (namedtuples, attrs classes, dataclasses and
      registered types) are treated: ``"values"`` keeps them as leaves,
      ``"keep"`` walks them and rebuilds the same record type, ``"maps"``
      walks them and rebuilds plain dicts.
    max_depth: maximal nesting depth before ``DepthExceededError``.
  """

  delimiter = attr.ib(
      factory=_default_delimiter,
      validator=[attr.validators.instance_of(str), _not_empty])
  yield_ = attr.ib(
      default="none",
      converter=_none_to_default,
      validator=attr.validators.in_(YIELD_POLICIES))
  keys = attr.ib(default="default", validator=attr.validators.in_(KEY_ORDERS))
  structs = attr.ib(
      default="values", validator=attr.validators.in_(STRUCT_MODES))
  max_depth = attr.ib(
      factory=_default_max_depth,
      validator=[attr.validators.instance_of(int), _positive])

  def present(self, path):
    """Returns `path` the way callbacks should see it."""
    return path[::-1] if self.keys == "reverse" else path


_OPTION_NAMES = tuple(a.name for a in attr.fields(Options))


def make_options(kwargs):
  """Builds `Options` from the keyword arguments of a public operation.

  Args:
    kwargs: the ``**options`` dict passed to a public operation.

  Returns:
    An `Options` instance.

  Raises:
    ValueError: if an unknown option name is given, or an option value is
      outside of its allowed set.
    TypeError: if an option value has the wrong type.
  """
  unknown = sorted(set(kwargs) - set(_OPTION_NAMES))
  if unknown:
    raise ValueError(
        "Only valid keyword arguments are `{}` not: `{}`".format(
            "`, `".join(_OPTION_NAMES), "`, `".join(unknown)))
  return Options(**kwargs)
