# doorpanel/protocol/core/defs.py
"""Node and attribute ids of the Zusi 3 TCP protocol used by the panel."""

# Top-level nodes
CONNECTION = 0x0001           # Verbindungsaufbau
CLIENT_APPLICATION = 0x0002   # Client-Anwendung 02

# Children of CONNECTION
HELLO = 0x0001
ACK_HELLO = 0x0002

# Children of CLIENT_APPLICATION
NEEDED_DATA = 0x0003
ACK_NEEDED_DATA = 0x0004
DATA_FTD = 0x000A             # cab displays
DATA_OPERATION = 0x000B       # cab operation events
INPUT = 0x010A                # client -> simulator keyboard input

# HELLO attributes
HELLO_PROTOCOL_VERSION = 0x0001
HELLO_CLIENT_TYPE = 0x0002
HELLO_CLIENT_NAME = 0x0003
HELLO_CLIENT_VERSION = 0x0004

PROTOCOL_VERSION = 2
CLIENT_TYPE_CAB = 2

# ACK_HELLO attributes
ACK_HELLO_SIM_VERSION = 0x0001
ACK_HELLO_CONNECTION_INFO = 0x0002
ACK_HELLO_RESULT = 0x0003

# ACK_NEEDED_DATA attributes
ACK_NEEDED_DATA_RESULT = 0x0001

# NEEDED_DATA children share the DATA_* ids; one attribute per requested id
NEEDED_DATA_ID = 0x0001

# DATA_FTD ids
FTD_SPEED = 0x0001            # float, m/s
FTD_DOOR_STATUS = 0x0066      # child node

# FTD_DOOR_STATUS attributes
DOOR_LEFT = 0x0002            # uint8, 0 = closed
DOOR_RIGHT = 0x0003           # uint8, 0 = closed
DOOR_SIDE_SELECTOR = 0x0005   # uint8, bit0 left, bit1 right

# DATA_OPERATION children
OP_KEYPRESS = 0x0001          # Betaetigungsvorgang
OP_SWITCH = 0x0002            # Kombischalter Hebelposition

# OP_KEYPRESS attributes
KEY_ASSIGNMENT = 0x0001
KEY_COMMAND = 0x0002

# OP_SWITCH attributes
SWITCH_NAME = 0x0001
SWITCH_NOTCH = 0x0003         # int16

# INPUT children
INPUT_KEY = 0x0001            # Tastatureingabe

# INPUT_KEY attributes
INPUT_ASSIGNMENT = 0x0001
INPUT_COMMAND = 0x0002
INPUT_ACTION = 0x0003
INPUT_POSITION = 0x0004

ACTION_ABSOLUTE_NOTCH = 7
