"""Sample directory structure for new databases."""

from loguru import logger

from dirtree.core.tree.service import TreeService
from dirtree.models.node import Node

SAMPLE_TREE: dict[str, list[str]] = {
    "Projects": ["Web", "Mobile"],
    "Documents": ["Tech"],
}


def seed_sample_tree(service: TreeService) -> list[Node]:
    """Create the sample tree if the store is empty.

    Returns:
        The created directories, or an empty list if the store had data.
    """
    if service.list_all():
        logger.info("Store already has directories, not seeding")
        return []

    created: list[Node] = []
    for root_name, child_names in SAMPLE_TREE.items():
        root = service.create(root_name)
        created.append(root)
        assert root.id is not None
        for name in child_names:
            created.append(service.create(name, parent_id=root.id))
    logger.info("Seeded {} directories", len(created))
    return created
