"""
config.py - StarChain configuration constants.
Settings for the ledger and the star registration workflow.
"""

# Challenge messages look like "<address>:<unix seconds>:starRegistry"
CHALLENGE_SEPARATOR = ":"
CHALLENGE_SUFFIX = "starRegistry"

# Freshness window for a signed challenge (seconds, exclusive upper bound)
CHALLENGE_WINDOW_SECONDS = 60 * 5

# Genesis block has no predecessor
GENESIS_PREVIOUS_HASH = "0" * 64

# Fixed payload of the genesis block
GENESIS_DATA = {"data": "Genesis Block"}
