import logging

from oicp import __version__
from oicp.cpo.client import CPOClient
from oicp.cpo.controller.interface import CPOControllerInterface
from oicp.cpo.cpo_settings import Config
from oicp.cpo.server import CPOServer
from oicp.shared.ioicp_transport import IOICPTransport
from oicp.shared.logging import _init_logger

_init_logger()
logger = logging.getLogger(__name__)

__all__ = [
    "Config",
    "CPOClient",
    "CPOControllerInterface",
    "CPOServer",
    "create_client",
    "create_server",
]


def create_server(controller: CPOControllerInterface, config: Config) -> CPOServer:
    if config.log_level:
        _init_logger(config.log_level)
    logger.info(f"Starting OICP CPO server version: {__version__}")
    return CPOServer(controller, config)


def create_client(transport: IOICPTransport, config: Config) -> CPOClient:
    if config.log_level:
        _init_logger(config.log_level)
    logger.info(f"Starting OICP CPO client version: {__version__}")
    return CPOClient(transport, config)
