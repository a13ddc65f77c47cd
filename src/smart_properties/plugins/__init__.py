"""Optional mixins layered on the core property runtime.

Combine them with :class:`smart_properties.SmartProperties`::

    class Person(SmartProperties, Equality, DictSerialization, IndexedAccess):
        name = prop(accepts=str)
"""

from smart_properties.plugins.equality import Equality
from smart_properties.plugins.indexed import IndexedAccess
from smart_properties.plugins.serialization import CompactDictSerialization, DictSerialization

__all__ = ["CompactDictSerialization", "DictSerialization", "Equality", "IndexedAccess"]
