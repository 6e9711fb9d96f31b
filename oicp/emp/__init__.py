import logging

from oicp import __version__
from oicp.emp.client import EMPClient
from oicp.emp.controller.interface import EMPControllerInterface
from oicp.emp.emp_settings import Config
from oicp.emp.server import EMPServer
from oicp.shared.ioicp_transport import IOICPTransport
from oicp.shared.logging import _init_logger

_init_logger()
logger = logging.getLogger(__name__)

__all__ = [
    "Config",
    "EMPClient",
    "EMPControllerInterface",
    "EMPServer",
    "create_client",
    "create_server",
]


def create_client(transport: IOICPTransport, config: Config) -> EMPClient:
    if config.log_level:
        _init_logger(config.log_level)
    logger.info(f"Starting OICP EMP client version: {__version__}")
    return EMPClient(transport, config)


def create_server(controller: EMPControllerInterface, config: Config) -> EMPServer:
    if config.log_level:
        _init_logger(config.log_level)
    logger.info(f"Starting OICP EMP server version: {__version__}")
    return EMPServer(controller, config)
