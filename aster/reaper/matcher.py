"""Structural predicate used to pick the XML element to remove."""
from typing import Dict, Mapping

from aster.analyzer.extractor import local_name


class ElementMatcher:
    """Matches an element by local name and required attribute values.

    Only the tag itself is inspected: content and children never
    matter. Attributes the matcher does not name are ignored.

    Example:
        ElementMatcher.for_local_name("string").attr("name", "app_name")
    """

    def __init__(self, local_name: str):
        self.local_name = local_name
        self.attribute_values: Dict[str, str] = {}

    @classmethod
    def for_local_name(cls, local_name: str) -> 'ElementMatcher':
        return cls(local_name)

    def attr(self, local_name: str, value: str) -> 'ElementMatcher':
        """Require an attribute (by local name) to have exactly this value."""
        self.attribute_values[local_name] = value
        return self

    def matches(self, name: str, attributes: Mapping[str, str]) -> bool:
        """Test one start tag.

        Args:
            name: Element name as reported by expat (may carry a namespace URI)
            attributes: Attribute name -> value, names as reported by expat

        Returns:
            True if the local name matches and every required attribute is present
            with the required value
        """
        if local_name(name) != self.local_name:
            return False

        actual = {local_name(attr_name): value for attr_name, value in attributes.items()}
        for attr_name, required in self.attribute_values.items():
            if actual.get(attr_name) != required:
                return False

        return True

    def __repr__(self) -> str:
        constraints = "".join(f"[{k}={v!r}]" for k, v in self.attribute_values.items())
        return f"{self.local_name}{constraints}"
