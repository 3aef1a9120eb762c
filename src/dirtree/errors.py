"""Error kinds raised by the directory tree core."""


class TreeError(Exception):
    """Base class for directory tree errors."""

    status = 500


class InvalidInputError(TreeError):
    """A request value is malformed (blank name, missing field)."""

    status = 400


class NotFoundError(TreeError):
    """A referenced directory does not exist."""

    status = 404

    def __init__(self, node_id: int, *, what: str = "Directory") -> None:
        self.node_id = node_id
        super().__init__(f"{what} not found with id: {node_id}")


class CyclicMoveError(TreeError):
    """A parent change would make a directory its own ancestor."""

    status = 409

    def __init__(self, node_id: int, parent_id: int) -> None:
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            f"Cannot move directory {node_id} under {parent_id}: it would become its own ancestor"
        )


class StoreFailureError(TreeError):
    """The underlying store failed; the transaction was rolled back."""

    status = 500
