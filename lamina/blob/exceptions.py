# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Errors raised by shared blob handles."""


class LockPoisonedError(RuntimeError):
    """
    Raised when acquiring a blob whose previous writer failed mid-mutation.

    The blob's contents may be torn. This is fatal: the caller must not
    continue computing with the blob, and there is no way to clear the state.
    """

    def __init__(self, blob_name: str) -> None:
        self.blob_name = blob_name
        super().__init__(
            f"Blob '{blob_name}' is poisoned: a writer raised while holding exclusive access"
        )
