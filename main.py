#!/usr/bin/env python3
"""
StarChain demo

Walks through the star registration flow on an in-memory ledger.

Usage:
    python main.py                 # Register stars for two wallets
    python main.py --stars 5       # Register 5 stars for Alice
    python main.py --dump          # Also print the chain as JSON
"""

import argparse
import json
import logging

from starchain import StarRegistry, StarchainError, create_wallet, sign_message

logger = logging.getLogger(__name__)


def register_star(registry, signing_key, address, star):
    """Request a challenge, sign it and submit the star."""
    message = registry.request_message_ownership_verification(address)
    signature = sign_message(signing_key, message)
    return registry.submit_star(address, message, signature, star)


def run_demo(args):
    registry = StarRegistry()

    alice_sk, alice_pk = create_wallet()
    bob_sk, bob_pk = create_wallet()

    logger.info("Alice Address: %s...", alice_pk[:10])
    logger.info("Bob Address: %s...", bob_pk[:10])

    # -------------------------------
    # Register stars
    # -------------------------------

    logger.info("[1] Alice registers %d star(s)", args.stars)
    for i in range(args.stars):
        star = {"ra": f"{i}h 29m 1.0s", "dec": "-26° 29' 24.9", "story": f"Alice star {i}"}
        block = register_star(registry, alice_sk, alice_pk, star)
        logger.info("Star stored in block #%d (%s...)", block.height, block.hash[:10])

    logger.info("[2] Bob registers a star")
    register_star(registry, bob_sk, bob_pk, {"ra": "5h 55m 10.3s", "dec": "7° 24' 25", "story": "Betelgeuse"})

    # -------------------------------
    # Rejected submission
    # -------------------------------

    logger.info("[3] Bob tries to claim a star with Alice's address")
    message = registry.request_message_ownership_verification(alice_pk)
    try:
        registry.submit_star(alice_pk, message, sign_message(bob_sk, message), {"story": "stolen"})
    except StarchainError as e:
        logger.info("Rejected as expected: %s", e)

    # -------------------------------
    # Queries
    # -------------------------------

    logger.info("[4] Chain height: %d", registry.get_chain_height())
    for star in registry.get_stars_by_wallet_address(alice_pk):
        logger.info("Alice owns: %s", star["story"])

    if args.dump:
        print(json.dumps(registry.chain.to_dict_list(), indent=2))

    errors = registry.validate_chain()
    if errors:
        for error in errors:
            logger.error(error.message)
        return 1

    logger.info("[5] Chain is valid")
    return 0


def parse_args():
    parser = argparse.ArgumentParser(
        description="StarChain registry demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--stars", "-n",
        type=int,
        default=2,
        help="Number of stars Alice registers (default: 2)"
    )

    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the whole chain as JSON"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    # Setup logging
    level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )

    return run_demo(args)


if __name__ == "__main__":
    raise SystemExit(main())
