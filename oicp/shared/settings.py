from typing import Optional

import environs

from oicp.shared.exceptions import NoSupportedProtocolVersion
from oicp.shared.messages.enums import ProtocolVersion


class SettingKey:
    MESSAGE_LOG_XML = "MESSAGE_LOG_XML"
    PROTOCOL_VERSION = "PROTOCOL_VERSION"


shared_settings = {
    SettingKey.MESSAGE_LOG_XML: False,
    SettingKey.PROTOCOL_VERSION: ProtocolVersion.OICP_2_3,
}


def load_protocol_version(read_version: Optional[str]) -> ProtocolVersion:
    """Accepts '2.3' as well as 'OICP_2_3'"""
    version = (read_version or "").strip().upper()
    for member in ProtocolVersion:
        if version in (member.value, member.name):
            return member
    raise NoSupportedProtocolVersion(
        f"Protocol version {read_version!r} is not supported. Supported "
        f"versions are {[member.value for member in ProtocolVersion]}"
    )


def load_shared_settings(env_path: Optional[str] = None):
    env = environs.Env(eager=False)
    env.read_env(path=env_path)  # read .env file, if it exists

    message_log_xml = env.bool("MESSAGE_LOG_XML", default=False)
    protocol_version = env.str(
        "PROTOCOL_VERSION", default=ProtocolVersion.OICP_2_3.value
    )
    env.seal()  # raise all errors at once, if any

    shared_settings.update(
        {
            SettingKey.MESSAGE_LOG_XML: message_log_xml,
            SettingKey.PROTOCOL_VERSION: load_protocol_version(protocol_version),
        }
    )
