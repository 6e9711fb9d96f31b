from typing import Optional, Tuple

from lxml import etree
from pydantic import Field

from oicp.shared.messages import BaseModel
from oicp.shared.messages.enums import Namespace, ProtocolVersion
from oicp.shared.messages.identification import (
    IDENTIFICATION_NS,
    Identification,
    identification_to_xml,
    read_identification,
)
from oicp.shared.messages.identifiers import ProviderId
from oicp.shared.messages.xml_helpers import (
    add_element,
    expect_root,
    map_elements,
    map_value_or_fail,
    start_element,
)

NS = Namespace.AUTHENTICATION_DATA


class ProviderAuthenticationData(BaseModel):
    """
    The identifications of the customers of one provider that a CPO may
    authorize offline, each one wrapped in an AuthenticationDataRecord
    """

    provider_id: ProviderId = Field(..., alias="ProviderID")
    authentication_data_records: Tuple[Identification, ...] = Field(
        (), alias="AuthenticationDataRecord"
    )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "ProviderAuthenticationData":
        element = expect_root(element, NS, "ProviderAuthenticationData")
        return cls._build(
            element,
            provider_id=map_value_or_fail(element, NS, "ProviderID", ProviderId),
            authentication_data_records=map_elements(
                element,
                NS,
                "AuthenticationDataRecord",
                lambda child: read_identification(
                    child, IDENTIFICATION_NS, protocol_version
                ),
            ),
        )

    def to_xml(self, parent: Optional[etree._Element] = None) -> etree._Element:
        element = start_element(parent, NS, "ProviderAuthenticationData")
        add_element(element, NS, "ProviderID", self.provider_id)
        for identification in self.authentication_data_records:
            record = add_element(element, NS, "AuthenticationDataRecord")
            identification_to_xml(identification, record, NS)
        return element
