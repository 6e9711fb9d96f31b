from enum import Enum, IntEnum


# For XSD type xs:short with value range [-32768..32767]
INT_16_MAX = 2**15 - 1
INT_16_MIN = -(2**15)

# Default number of seconds a request may take, as long as the caller does not
# ask for something else
DEFAULT_REQUEST_TIMEOUT = 180.0

HUBJECT_BASE = "http://www.hubject.com/b2b/services/"


class Namespace(str, Enum):
    COMMON_TYPES = HUBJECT_BASE + "commontypes/v2.0"
    EVSE_DATA = HUBJECT_BASE + "evsedata/v2.1"
    EVSE_STATUS = HUBJECT_BASE + "evsestatus/v2.1"
    AUTHORIZATION = HUBJECT_BASE + "authorization/v2.0"
    RESERVATION = HUBJECT_BASE + "reservation/v1.0"
    AUTHENTICATION_DATA = HUBJECT_BASE + "authenticationdata/v2.0"
    DYNAMIC_PRICING = HUBJECT_BASE + "dynamicpricing/v1.0"

    @property
    def prefix(self) -> str:
        return NS_PREFIXES[self]


NS_PREFIXES = {
    Namespace.COMMON_TYPES: "CommonTypes",
    Namespace.EVSE_DATA: "EVSEData",
    Namespace.EVSE_STATUS: "EVSEStatus",
    Namespace.AUTHORIZATION: "Authorization",
    Namespace.RESERVATION: "Reservation",
    Namespace.AUTHENTICATION_DATA: "AuthenticationData",
    Namespace.DYNAMIC_PRICING: "DynamicPricing",
}


class ServicePath(str, Enum):
    """URL paths of the OICP web services, relative to the hub's base URL"""

    EVSE_DATA = "/ibis/ws/eRoamingEvseData_V2.1"
    EVSE_STATUS = "/ibis/ws/eRoamingEvseStatus_V2.1"
    AUTHORIZATION = "/ibis/ws/eRoamingAuthorization_V2.0"
    RESERVATION = "/ibis/ws/eRoamingReservation_V1.0"
    AUTHENTICATION_DATA = "/ibis/ws/eRoamingAuthenticationData_V2.0"
    DYNAMIC_PRICING = "/ibis/ws/eRoamingDynamicPricing_V1.0"


class ProtocolVersion(str, Enum):
    """
    The OICP version whose parsing rules are applied to inbound documents.

    OICP 2.2 tolerates optional values that are present but cannot be
    parsed (they are dropped with a warning), OICP 2.3 rejects them.
    """

    OICP_2_2 = "2.2"
    OICP_2_3 = "2.3"

    @property
    def strict(self) -> bool:
        return self == ProtocolVersion.OICP_2_3


class StatusCodes(IntEnum):
    """The result codes a StatusCode element may carry"""

    SUCCESS = 0
    HUBJECT_SYSTEM_ERROR = 1
    HUBJECT_DATABASE_ERROR = 2
    DATA_TRANSACTION_ERROR = 9
    UNAUTHORIZED_ACCESS = 17
    INCONSISTENT_EVSE_ID = 18
    INCONSISTENT_EVCO_ID = 19
    SYSTEM_ERROR = 21
    DATA_ERROR = 22
    QR_CODE_AUTH_FAILED = 101
    RFID_AUTH_FAILED_INVALID_UID = 102
    RFID_CARD_NOT_READABLE = 103
    PLC_AUTH_INVALID_EVCO_ID = 105
    NO_POSITIVE_AUTH_RESPONSE = 106
    QR_CODE_APP_TIMEOUT = 110
    PLC_INVALID_UNDERLYING_EVCO_ID = 120
    PLC_INVALID_CERTIFICATE = 121
    PLC_TIMEOUT = 122
    EVCO_ID_LOCKED = 200
    NO_VALID_CONTRACT = 210
    PARTNER_NOT_FOUND = 300
    PARTNER_DID_NOT_RESPOND = 310
    SERVICE_NOT_AVAILABLE = 320
    SESSION_IS_INVALID = 400
    COMMUNICATION_TO_EVSE_FAILED = 501
    NO_EV_CONNECTED_TO_EVSE = 510
    EVSE_ALREADY_RESERVED = 601
    EVSE_ALREADY_IN_USE_WRONG_TOKEN = 602
    UNKNOWN_EVSE_ID = 603
    EVSE_ID_NOT_HUBJECT_COMPATIBLE = 604
    EVSE_OUT_OF_SERVICE = 700


class PlugTypes(str, Enum):
    SMALL_PADDLE_INDUCTIVE = "Small Paddle Inductive"
    LARGE_PADDLE_INDUCTIVE = "Large Paddle Inductive"
    AVCON_CONNECTOR = "AVCON Connector"
    TESLA_CONNECTOR = "Tesla Connector"
    NEMA_5_20 = "NEMA 5-20"
    TYPE_E_FRENCH_STANDARD = "Type E French Standard"
    TYPE_F_SCHUKO = "Type F Schuko"
    TYPE_G_BRITISH_STANDARD = "Type G British Standard"
    TYPE_J_SWISS_STANDARD = "Type J Swiss Standard"
    TYPE_1_CONNECTOR_CABLE_ATTACHED = "Type 1 Connector (Cable Attached)"
    TYPE_2_OUTLET = "Type 2 Outlet"
    TYPE_2_CONNECTOR_CABLE_ATTACHED = "Type 2 Connector (Cable Attached)"
    TYPE_3_OUTLET = "Type 3 Outlet"
    IEC_60309_SINGLE_PHASE = "IEC 60309 Single Phase"
    IEC_60309_THREE_PHASE = "IEC 60309 Three Phase"
    CCS_COMBO_2_PLUG_CABLE_ATTACHED = "CCS Combo 2 Plug (Cable Attached)"
    CCS_COMBO_1_PLUG_CABLE_ATTACHED = "CCS Combo 1 Plug (Cable Attached)"
    CHADEMO = "CHAdeMO"


class ChargingModes(str, Enum):
    MODE_1 = "Mode_1"
    MODE_2 = "Mode_2"
    MODE_3 = "Mode_3"
    MODE_4 = "Mode_4"
    CHADEMO = "CHAdeMO"


class PowerTypes(str, Enum):
    AC_1_PHASE = "AC_1_PHASE"
    AC_3_PHASE = "AC_3_PHASE"
    DC = "DC"


class AuthenticationModes(str, Enum):
    NFC_RFID_CLASSIC = "NFC RFID Classic"
    NFC_RFID_DESFIRE = "NFC RFID DESFire"
    PNC = "PnC"
    REMOTE = "REMOTE"
    DIRECT_PAYMENT = "Direct Payment"
    NO_AUTHENTICATION_REQUIRED = "No Authentication Required"


class PaymentOptions(str, Enum):
    NO_PAYMENT = "No Payment"
    DIRECT = "Direct"
    CONTRACT = "Contract"


class ValueAddedServices(str, Enum):
    RESERVATION = "Reservation"
    DYNAMIC_PRICING = "DynamicPricing"
    PARKING_SENSORS = "ParkingSensors"
    MAXIMUM_POWER_CHARGING = "MaximumPowerCharging"
    PREDICTIVE_CHARGE_POINT_USAGE = "PredictiveChargePointUsage"
    CHARGING_PLANS = "ChargingPlans"
    ROOF_PROVIDED = "RoofProvided"
    NONE = "None"


class AccessibilityTypes(str, Enum):
    FREE_PUBLICLY_ACCESSIBLE = "Free publicly accessible"
    RESTRICTED_ACCESS = "Restricted access"
    PAYING_PUBLICLY_ACCESSIBLE = "Paying publicly accessible"
    TEST_STATION = "Test Station"

    @classmethod
    def _missing_(cls, value):
        # Some hubs send the tokens with underscores instead of spaces
        if isinstance(value, str) and "_" in value:
            return cls(value.replace("_", " "))
        return None


class EVSEStatusTypes(str, Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    OCCUPIED = "Occupied"
    OUT_OF_SERVICE = "OutOfService"
    EVSE_NOT_FOUND = "EvseNotFound"
    UNKNOWN = "Unknown"


class DeltaTypes(str, Enum):
    UPDATE = "update"
    INSERT = "insert"
    DELETE = "delete"


class ActionTypes(str, Enum):
    FULL_LOAD = "fullLoad"
    UPDATE = "update"
    INSERT = "insert"
    DELETE = "delete"


class AuthorizationStatusTypes(str, Enum):
    AUTHORIZED = "Authorized"
    NOT_AUTHORIZED = "NotAuthorized"


class GeoCoordinatesResponseFormats(str, Enum):
    GOOGLE = "Google"
    DECIMAL_DEGREE = "DecimalDegree"
    DEGREE_MINUTE_SECONDS = "DegreeMinuteSeconds"


class RFIDTypes(str, Enum):
    MIFARE_CLASSIC = "mifareCls"
    MIFARE_DESFIRE = "mifareDes"
    CALYPSO = "calypso"
    NFC = "nfc"
    MIFARE_FAMILY = "mifareFamily"


class PINCrypto(str, Enum):
    """Hash functions a HashedPIN may be built with"""

    MD5 = "MD5"
    SHA1 = "SHA-1"


class MeteringStatus(str, Enum):
    START = "Start"
    PROGRESS = "Progress"
    END = "End"


class WeekDay(str, Enum):
    EVERYDAY = "Everyday"
    WORKDAYS = "Workdays"
    WEEKEND = "Weekend"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class ReferenceUnit(str, Enum):
    HOUR = "HOUR"
    KILOWATT_HOUR = "KILOWATT_HOUR"
    MINUTE = "MINUTE"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class AdditionalReferenceTypes(str, Enum):
    START_FEE = "START FEE"
    FIXED_FEE = "FIXED FEE"
    PARKING_FEE = "PARKING FEE"
    MINIMUM_FEE = "MINIMUM FEE"
    MAXIMUM_FEE = "MAXIMUM FEE"
