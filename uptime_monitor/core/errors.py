from __future__ import annotations


class NotInitializedError(RuntimeError):
    """Raised when a schedule entity is used before ``init`` or after ``delete``.

    Callers are expected to recover by calling ``init`` for the target.
    """

    def __init__(self, target_id: object, message: str | None = None) -> None:
        self.target_id = target_id
        super().__init__(
            message
            or f"Schedule entity for target {target_id} is not initialized; reinitialize it if it is expected to exist"
        )
