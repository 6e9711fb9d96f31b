import logging
from typing import Optional, Type, TypeVar

from lxml import etree
from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, ValidationError

from oicp.shared.exceptions import ParseError
from oicp.shared.messages.enums import ProtocolVersion
from oicp.shared.messages.xml_helpers import display_name

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="BaseModel")


class BaseModel(PydanticBaseModel):
    """
    Changing default pydantic configuration to suit our needs for handling
    the OICP messages and records
    """

    model_config = ConfigDict(
        # Allow input by alias or field name
        populate_by_name=True,
        # Forbid extra attributes during model initialization
        extra="forbid",
        # Messages and records are values; a changed copy is made with
        # model_copy(update=...) instead of assigning to a field
        frozen=True,
    )

    def __str__(self):
        return type(self).__name__

    @classmethod
    def from_xml(
        cls: Type[M],
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> M:
        raise NotImplementedError

    @classmethod
    def try_from_xml(
        cls: Type[M],
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> Optional[M]:
        """Same as from_xml(), but returns None instead of raising"""
        try:
            return cls.from_xml(element, protocol_version)
        except (ParseError, ValueError) as exc:
            logger.debug(f"Could not parse {cls.__name__}: {exc}")
            return None

    @classmethod
    def _build(cls: Type[M], element: etree._Element, **values) -> M:
        """
        Creates the model from values read out of 'element'. Combinations the
        model rejects are reported as a ParseError of that element.
        """
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ParseError(
                f"{cls.__name__} built from {display_name(element.tag)} is "
                f"invalid: {exc}",
                display_name(element.tag),
            ) from exc
