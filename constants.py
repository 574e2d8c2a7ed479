# config
APP_NAME = "Server Query Tracker"
APP_VERSION = "1.0"
DEFAULT_PORT = 27015
TIMEOUT = 3.0  # seconds, per query
UPDATE_INTERVAL = 5
SERVERS_FILENAME = "servers.json"
PREFS_FILENAME = "prefs.json"
MAX_WORKERS = 6
PACKET_SIZE = 1400

# wire format
PACKET_PREFIX = b"\xFF\xFF\xFF\xFF"
A2S_INFO = 0x54  # 'T'
A2S_INFO_PAYLOAD = b"Source Engine Query\x00"
A2S_INFO_RESPONSE = 0x49  # 'I'
A2S_PLAYER = 0x55  # 'U'
A2S_PLAYER_RESPONSE = 0x44  # 'D'
S2C_CHALLENGE = 0x41  # 'A'
NO_CHALLENGE = b"\xFF\xFF\xFF\xFF"
CHALLENGE_SIZE = 4

# reply layout
HEADER_OFFSET = 4
PAYLOAD_OFFSET = 5
STRING_ENCODING = "latin-1"  # one byte per character
