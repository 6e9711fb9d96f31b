import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import environs

from oicp.shared.messages.enums import (
    DEFAULT_REQUEST_TIMEOUT,
    ProtocolVersion,
    ServicePath,
)
from oicp.shared.messages.identifiers import ProviderId
from oicp.shared.settings import (
    SettingKey,
    load_shared_settings,
    shared_settings,
)

logger = logging.getLogger(__name__)


@dataclass
class Config:
    provider_id: Optional[ProviderId] = None
    log_level: Optional[str] = None
    # Seconds
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3
    # The hub path of each service, overridable per deployment
    service_paths: Dict[ServicePath, str] = field(
        default_factory=lambda: {service: service.value for service in ServicePath}
    )
    env_dump: Optional[dict] = None

    def load_envs(self, env_path: Optional[str] = None) -> None:
        """
        Tries to load the .env file containing all the project settings.
        If `env_path` is not specified, it will get the .env on the current
        working directory of the project

        Args:
            env_path (str): Absolute path to the location of the .env file
        """
        env = environs.Env(eager=False)
        if not env_path:
            env_path = os.getcwd() + "/.env"
        env.read_env(path=env_path)  # read .env file, if it exists

        provider_id = env.str("PROVIDER_ID", default=None)

        self.log_level = env.str("LOG_LEVEL", default="INFO")

        # Seconds the client waits for the hub to answer a request
        self.request_timeout = env.float(
            "REQUEST_TIMEOUT", default=DEFAULT_REQUEST_TIMEOUT
        )

        # e.g. EVSE_DATA_PATH=/ibis/ws/eRoamingEvseData_V2.1
        paths = {
            service: env.str(f"{service.name}_PATH", default=service.value)
            for service in ServicePath
        }

        load_shared_settings(env_path)
        env.seal()  # raise all errors at once, if any

        self.provider_id = ProviderId.parse(provider_id) if provider_id else None
        self.service_paths = paths
        self.protocol_version = shared_settings[SettingKey.PROTOCOL_VERSION]
        self.env_dump = dict(env.dump())
        self.env_dump.update(shared_settings)

    def update(self, params: dict):
        """Overrides the settings named in 'params'"""
        unknown_keys = set(params.keys()) - set(self.__dict__.keys())
        if unknown_keys:
            raise ValueError(f"Unknown settings: {sorted(unknown_keys)}")
        self.__dict__.update(params)

    def get_value(self, key: str):
        return self.__dict__.get(key)

    def path_for(self, service: ServicePath) -> str:
        return self.service_paths.get(service, service.value)

    def print_settings(self):
        logger.info("EMP settings:")
        for key, value in (self.env_dump or self.__dict__).items():
            logger.info(f"{key:30}: {value}")
