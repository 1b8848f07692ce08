"""Example: Several threads submitting through one client without nonce clashes."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from dotenv import load_dotenv

from cvault_api import NonceConflictError, VaultProtocolEVM, get_scheme, load_config
from cvault_api.utils import bytes_to_hex

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

WORKERS = 4
SUBMISSIONS = 8


def main() -> None:
    config = load_config()
    scheme = get_scheme(config.scheme)
    vault = VaultProtocolEVM.from_config(config)

    def submit(index: int) -> str:
        cipher_hex = bytes_to_hex(scheme.encrypt(f"sample-{index}"))
        try:
            return vault.submit_encrypted_metric(cipher_hex)
        except NonceConflictError:
            # An external sender moved the nonce; one resubmission picks up the new value.
            return vault.submit_encrypted_metric(cipher_hex)

    vault.connect()
    try:
        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            for index, tx_hash in enumerate(pool.map(submit, range(SUBMISSIONS))):
                print(f"submission {index}: {tx_hash}")
    finally:
        vault.disconnect()


if __name__ == "__main__":
    main()
