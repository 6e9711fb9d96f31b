from abc import ABCMeta, abstractmethod
from typing import Dict, Optional

from lxml import etree


class IOICPTransport(metaclass=ABCMeta):
    @abstractmethod
    async def post(
        self,
        path: str,
        element: etree._Element,
        timeout: float,
        query_parameters: Optional[Dict[str, str]] = None,
    ) -> etree._Element:
        """
        Posts an XML payload to the hub and returns the parsed answer
        Path: The service path, e.g. '/ibis/ws/eRoamingEvseData_V2.1'
        Element: The request payload
        Timeout: Seconds to wait for the answer
        Query_parameters: Paging parameters some operations put into the URL

        Raises TransportFaultError if the exchange fails and
        asyncio.TimeoutError if no answer arrives in time
        """
        raise NotImplementedError
