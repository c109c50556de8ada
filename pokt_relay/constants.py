# pokt_relay/constants.py

# Relay chain codes
HARMONY = "0040"   # Harmony mainnet shard 0
ETHEREUM = "0021"  # Ethereum mainnet
IPFS = "1111"

AAT_VERSION = "0.0.1"

# Request method/path participate in the request hash; fixed convention.
DEFAULT_RELAY_METHOD = "POST"
DEFAULT_RELAY_PATH = ""

DEFAULT_ENTROPY_BITS = 63
DEFAULT_ENDPOINT = "http://localhost:8081"
DEFAULT_TIMEOUT = 10.0

RELAY_PATH = "/v1/client/relay"
QUERY_HEIGHT_PATH = "/v1/query/height"
QUERY_NODE_PATH = "/v1/query/node"
