# KNXnet/IP tunnelling constants
# Reference: KNX Standard 03_08_02 (Core), 03_08_04 (Tunnelling), 03_06_03 (cEMI)

# Header
HEADER_SIZE = 0x06
PROTOCOL_VERSION = 0x10

# Service type identifiers (2 bytes, big-endian)
TUNNELLING_REQUEST = 0x0420
TUNNELLING_ACK = 0x0421

# Connection header (shared by TUNNELLING_REQUEST and TUNNELLING_ACK)
CONN_HEADER_SIZE = 0x04

# Tunnelling ACK status codes
E_NO_ERROR = 0x00
E_TUNNELLING_LAYER = 0x29  # cEMI frame not understood / not supported

# cEMI message codes
L_DATA_REQ = 0x11  # From client to gateway (request to send)
L_DATA_CON = 0x2E  # Confirmation from bus
L_DATA_IND = 0x29  # Indication from bus (device → client)

# cEMI control fields
CTRL1_STANDARD = 0xBC  # Standard frame, no repeat, broadcast, normal priority
CTRL2_GROUP_HOP6 = 0xE0  # Group address destination, hop count 6
CTRL2_INDIVIDUAL_HOP6 = 0x60  # Individual address destination, hop count 6

# APCI (Application Protocol Control Information) - high bits of second TPDU byte
APCI_GROUP_READ = 0x00
APCI_GROUP_RESPONSE = 0x40
APCI_GROUP_WRITE = 0x80
