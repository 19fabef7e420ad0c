class ParallelLivesError(Exception):
    """Base exception for errors scoped to a single user interaction."""

    pass


class StorageError(ParallelLivesError):
    """The user state store is unavailable or rejected the operation."""

    def __init__(self, user_id: str, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"State store failure for {user_id}: {reason}")


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class InferenceError(ParallelLivesError):
    """The model call failed or returned no usable text."""

    pass
