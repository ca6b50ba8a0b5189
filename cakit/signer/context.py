from contextvars import ContextVar
from typing import Any, Coroutine, Dict, Optional, TypeVar

from cakit.signer.base import SignerError, TransactionSigner
from cakit.signer.factory import signer_from_config

T = TypeVar("T")

_current_signer: ContextVar[Optional[TransactionSigner]] = ContextVar(
    "cakit_current_signer", default=None
)


class SignerContext:
    """Binds a signer to the current request.

    The binding lives in a ContextVar, so each asyncio task sees only the
    signer it was started with.
    """

    @staticmethod
    async def with_signer(signer: TransactionSigner, coro: Coroutine[Any, Any, T]) -> T:
        """Run `coro` with `signer` bound.

        Pass a coroutine, not a Task: a Task copies its context when it is
        created and will not see the binding.
        """
        token = _current_signer.set(signer)
        try:
            return await coro
        finally:
            _current_signer.reset(token)

    @staticmethod
    def current() -> TransactionSigner:
        signer = _current_signer.get()
        if signer is None:
            raise SignerError("No signer bound to the current request.")
        return signer

    @staticmethod
    async def current_or(config: Optional[Dict[str, Any]]) -> TransactionSigner:
        """The bound signer, else one built from the `signer` config section."""
        signer = _current_signer.get()
        if signer is not None:
            return signer
        if not config or not config.get("signer"):
            raise SignerError("No signer bound to the current request.")
        return await signer_from_config(config)
