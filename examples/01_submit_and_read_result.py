"""Example: Submit an encrypted metric and read back the stored result."""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from cvault_api import (
    ConfidentialFlow,
    VaultProtocolEVM,
    VaultProtocolError,
    get_scheme,
    load_config,
)

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

METRIC = "72"


def main() -> None:
    """Encrypt a metric, store it, evaluate it and decrypt the posted result."""

    config = load_config()
    vault = VaultProtocolEVM.from_config(config)
    flow = ConfidentialFlow(vault, get_scheme(config.scheme))

    vault.connect()
    try:
        print(f"Submitting metric {METRIC!r} from {vault.address}")
        tx_hash = flow.submit_plain(METRIC)
        print(f"submitMetric tx hash: {tx_hash}")

        record = vault.get_my_metric_record()
        print(f"Stored metric: {len(record.payload)} bytes at timestamp {record.timestamp}")

        post_hash = flow.evaluate_and_post()
        print(f"postEncryptedResult tx hash: {post_hash}")

        result = flow.decrypt_result()
        print(f"Encrypted result: {result.cipher_hex}")
        print(f"Decrypted result: {result.plain}")
    except VaultProtocolError as exc:
        print(f"Vault call failed: {exc.message}")
        if exc.details:
            print("Details:", exc.details)
    finally:
        vault.disconnect()


if __name__ == "__main__":
    main()
