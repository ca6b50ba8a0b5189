import base64
import logging
from typing import Union

from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

logger = logging.getLogger(__name__)


def encode_transaction(transaction: Union[Transaction, VersionedTransaction]) -> str:
    return base64.b64encode(bytes(transaction)).decode("utf-8")


def decode_transaction(encoded: str) -> VersionedTransaction:
    """Decode a base64 serialized transaction.

    Legacy and v0 messages both deserialize into a VersionedTransaction.
    """
    try:
        tx_bytes = base64.b64decode(encoded)
    except ValueError as e:
        raise ValueError(f"Invalid base64 transaction: {e}")
    try:
        return VersionedTransaction.from_bytes(tx_bytes)
    except Exception as e:
        raise ValueError(f"Invalid Solana transaction: {e}")


def to_versioned(
    transaction: Union[Transaction, VersionedTransaction],
) -> VersionedTransaction:
    if isinstance(transaction, VersionedTransaction):
        return transaction
    return VersionedTransaction.populate(transaction.message, transaction.signatures)


def sign_transaction(
    transaction: Union[Transaction, VersionedTransaction], keypair: Keypair
) -> VersionedTransaction:
    """Sign at the keypair's position among the required signers.

    Signatures already present in other slots are kept, so a transaction
    partially signed by another key (e.g. a fresh mint) stays valid.
    """
    transaction = to_versioned(transaction)
    message = transaction.message
    message_bytes = to_bytes_versioned(message)

    num_signers = message.header.num_required_signatures
    account_keys = message.account_keys
    signatures = list(transaction.signatures)
    while len(signatures) < num_signers:
        signatures.append(Signature.default())

    signer_pubkey = keypair.pubkey()
    signer_index = None
    for i in range(num_signers):
        if account_keys[i] == signer_pubkey:
            signer_index = i
            break

    if signer_index is None:
        raise ValueError(f"Signer {signer_pubkey} not found in transaction signers.")

    signatures[signer_index] = keypair.sign_message(message_bytes)
    logger.debug(f"Signed transaction at index {signer_index}")
    return VersionedTransaction.populate(message, signatures)
