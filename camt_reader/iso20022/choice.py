"""
ISO 20022 Choice Resolution

A schema choice holds exactly one child drawn from a closed set of tags;
the tag decides the concrete shape of the value.
"""

from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar
from xml.etree import ElementTree as ET
import logging

from camt_reader.core.exceptions import UnknownVariantError
from camt_reader.iso20022.base import local_name

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChoiceResolver(Generic[T]):
    """
    Resolves one choice point of the schema.

    Args:
        choice_point: Name of the choice element, used in error messages
        variants: Builder per recognized child tag
        fallback: Optional builder called with ``(tag, child)`` for tags
            outside ``variants``; without it unknown tags fail
    """

    def __init__(
        self,
        choice_point: str,
        variants: Dict[str, Callable[[ET.Element], T]],
        fallback: Optional[Callable[[str, ET.Element], T]] = None,
    ):
        self.choice_point = choice_point
        self.variants = dict(variants)
        self.fallback = fallback

    @property
    def known_tags(self) -> Tuple[str, ...]:
        return tuple(self.variants)

    def resolve(self, element: ET.Element) -> T:
        """Construct the variant named by the element's only child."""
        children = list(element)
        if not children:
            raise UnknownVariantError(None, self.choice_point, self.known_tags)
        if len(children) > 1:
            tags = ", ".join(local_name(child.tag) for child in children)
            raise UnknownVariantError(tags, self.choice_point, self.known_tags)

        child = children[0]
        tag = local_name(child.tag)

        build = self.variants.get(tag)
        if build is not None:
            return build(child)

        if self.fallback is not None:
            logger.debug(f"Unrecognized <{tag}> at {self.choice_point}, keeping raw value")
            return self.fallback(tag, child)

        raise UnknownVariantError(tag, self.choice_point, self.known_tags)
