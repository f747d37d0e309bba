from __future__ import annotations

# Hypermap deployment on Base
HYPERMAP_ADDRESS = "0x000000000044C6B8Cb4d8f0F889a3E47664EAeda"
HYPERMAP_START_BLOCK = 27_270_000

# namehash of the namespace root / the zero address (lowercase, 0x-prefixed)
ROOT_HASH = "0x" + "0" * 64
ZERO_ADDRESS = "0x" + "0" * 40

# fetch defaults
DEFAULT_STEP = 20_000
DEFAULT_DELAY_S = 1.0

# name reconstruction
MAX_NAME_DEPTH = 100
UNRESOLVED_MARKER = "<unknown_path>"

# largest integer a JSON consumer can hold without precision loss
MAX_SAFE_INTEGER = 2**53 - 1
