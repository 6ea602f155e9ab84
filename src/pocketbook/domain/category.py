"""Category domain service.

Categories form a forest per account: every category has at most one parent,
the parent always belongs to the same account, and following ``parent_id``
from any category reaches a root. The tree is stored flat (one row per
category with a parent ID) and child lists are rebuilt on demand.
"""

from typing import Optional

from pocketbook.database.base import Database
from pocketbook.domain.entities import (
    Category,
    CategoryIndex,
    DeletePolicy,
    HierarchicalCategory,
)
from pocketbook.domain.errors import (
    CrossAccountError,
    CycleError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_not_found,
    category_cycle,
    category_delete_blocked,
    category_in_other_account,
    category_not_found,
    category_path_not_found,
)
from pocketbook.logging_setup import get_logger

logger = get_logger(__name__)

PATH_SEPARATOR = ">"


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name cannot be empty")
    if PATH_SEPARATOR in name:
        raise ValidationError(f"Category name cannot contain '{PATH_SEPARATOR}'")
    return name


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self, account_id: int, name: str, parent_id: Optional[int] = None
    ) -> Category:
        """Create a category.

        Args:
            account_id: Owning account ID
            name: Category name
            parent_id: Optional parent category ID (must belong to the same account)

        Returns:
            The created category

        Raises:
            ValidationError: If name is empty or contains the path separator
            NotFoundError: If the account or parent category doesn't exist
            CrossAccountError: If the parent belongs to another account
        """
        name = _clean_name(name)
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        with self.db.category_tree_lock(account_id):
            if parent_id is not None:
                parent = self.db.get_category(parent_id)
                if parent is None:
                    raise NotFoundError(category_not_found(parent_id))
                if parent.account_id != account_id:
                    raise CrossAccountError(category_in_other_account(parent_id, account_id))

            category_id = self.db.create_category(
                name=name, account_id=account_id, parent_id=parent_id
            )

        logger.info(
            "Created category %s (%r) in account %s under %s",
            category_id, name, account_id, parent_id,
        )
        return self.require_category(category_id)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Returns:
            Category or None if not found
        """
        return self.db.get_category(category_id)

    def require_category(self, category_id: int) -> Category:
        """Get category by ID or raise NotFoundError."""
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def list_categories(self, account_id: int) -> list[Category]:
        """List all categories of an account in storage order."""
        return self.db.list_categories(account_id=account_id)

    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        parent_id: Optional[int] = None,
        clear_parent: bool = False,
    ) -> Category:
        """Rename and/or reparent a category.

        Args:
            category_id: Category to update
            name: Optional new name
            parent_id: Optional new parent ID
            clear_parent: If True, make the category a root (parent_id must be None)

        Returns:
            The updated category

        Raises:
            NotFoundError: If the category or new parent doesn't exist
            ValidationError: If the new name is empty or contains the path separator,
                or arguments conflict
            CrossAccountError: If the new parent belongs to another account
            CycleError: If the new parent is the category itself or one of its descendants
        """
        if clear_parent and parent_id is not None:
            raise ValidationError("Cannot set both parent_id and clear_parent")
        if name is not None:
            name = _clean_name(name)

        category = self.require_category(category_id)

        with self.db.category_tree_lock(category.account_id):
            # Re-read under the lock; a concurrent move may have committed since.
            category = self.require_category(category_id)
            if parent_id is not None:
                self._validate_new_parent(category, parent_id)

            self.db.update_category(
                category_id,
                name=name,
                parent_id=parent_id,
                update_parent=clear_parent,
            )

        logger.info(
            "Updated category %s (name=%r, parent=%s, clear_parent=%s)",
            category_id, name, parent_id, clear_parent,
        )
        return self.require_category(category_id)

    def move_category(self, category_id: int, parent_id: Optional[int]) -> Category:
        """Reparent a category; None moves it to the root level."""
        if parent_id is None:
            return self.update_category(category_id, clear_parent=True)
        return self.update_category(category_id, parent_id=parent_id)

    def _validate_new_parent(self, category: Category, parent_id: int) -> None:
        """Check that ``parent_id`` can become the parent of ``category``.

        Walks the ancestor chain of the proposed parent up to its root. The
        walk is bounded by the account's category count so corrupt data can
        never loop forever.
        """
        if parent_id == category.id:
            raise CycleError(category_cycle(category.id, parent_id))

        parent = self.db.get_category(parent_id)
        if parent is None:
            raise NotFoundError(category_not_found(parent_id))
        if parent.account_id != category.account_id:
            raise CrossAccountError(category_in_other_account(parent_id, category.account_id))

        index = self._build_index(category.account_id)
        bound = len(index.categories)
        steps = 0
        current_id = parent.parent_id
        while current_id is not None:
            if current_id == category.id:
                logger.debug("Rejected move of %s under descendant %s", category.id, parent_id)
                raise CycleError(category_cycle(category.id, parent_id))
            steps += 1
            if steps > bound:
                raise CycleError(
                    f"Ancestor chain of category {parent_id} does not reach a root"
                )
            current = index.categories.get(current_id)
            if current is None:
                break
            current_id = current.parent_id

    def delete_category(
        self, category_id: int, policy: DeletePolicy = DeletePolicy.PROMOTE
    ) -> None:
        """Delete a category.

        Policies:
            PROMOTE (default): children move up to the deleted category's parent
                (or become roots); its own transactions move to that parent
                (or become uncategorized).
            CASCADE: the category and all descendants are deleted; their
                transactions become uncategorized.
            REJECT: refuse while the category has children.

        Raises:
            NotFoundError: If the category doesn't exist
            DependencyError: If policy is REJECT and the category has children
        """
        policy = DeletePolicy(policy)
        category = self.require_category(category_id)

        with self.db.category_tree_lock(category.account_id):
            category = self.require_category(category_id)
            index = self._build_index(category.account_id)
            children = index.children.get(category_id, [])

            if policy == DeletePolicy.REJECT and children:
                raise DependencyError(category_delete_blocked(category_id, len(children)))

            if policy == DeletePolicy.CASCADE:
                subtree = self._collect_subtree(index, category_id)
                self.db.delete_categories(subtree)
                logger.info("Deleted category %s and %d descendants", category_id, len(subtree) - 1)
                return

            self.db.delete_category(category_id, promote_to=category.parent_id)

        logger.info(
            "Deleted category %s, promoted %d children to %s",
            category_id, len(children), category.parent_id,
        )

    def get_hierarchy(self, account_id: int) -> list[HierarchicalCategory]:
        """Get the category forest of an account.

        Returns only root categories, each with its full descendant tree
        attached. Siblings keep storage order.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        index = self._build_index(account_id)
        roots = index.children.get(None, [])

        # Post-order walk with an explicit stack; depth is unbounded.
        built: dict[int, HierarchicalCategory] = {}
        stack = [(root_id, False) for root_id in reversed(roots)]
        while stack:
            category_id, expanded = stack.pop()
            child_ids = index.children.get(category_id, [])
            if not expanded:
                stack.append((category_id, True))
                stack.extend((child_id, False) for child_id in reversed(child_ids))
                continue
            cat = index.categories[category_id]
            built[category_id] = HierarchicalCategory(
                id=cat.id,
                name=cat.name,
                account_id=cat.account_id,
                parent_id=cat.parent_id,
                children=tuple(built.pop(child_id) for child_id in child_ids),
            )

        return [built[root_id] for root_id in roots]

    def get_descendant_ids(self, category_id: int) -> set[int]:
        """Get the IDs of a category and all its descendants."""
        category = self.require_category(category_id)
        index = self._build_index(category.account_id)
        return self._collect_subtree(index, category_id)

    def get_top_level_map(self, account_id: Optional[int] = None) -> dict[int, int]:
        """Map every category ID to the ID of its top-level ancestor.

        Args:
            account_id: Optional account filter; all accounts when None
        """
        top_level: dict[int, int] = {}
        categories = self.db.list_categories(account_id=account_id)
        account_ids = {cat.account_id for cat in categories}
        for acc_id in account_ids:
            index = self._build_index(acc_id)
            for root_id in index.children.get(None, []):
                for cat_id in self._collect_subtree(index, root_id):
                    top_level[cat_id] = root_id
        return top_level

    def get_category_by_path(self, account_id: int, path: str) -> Optional[Category]:
        """Get category by path (e.g., 'Food & Dining > Groceries') within an account.

        Returns:
            Category or None if not found
        """
        parts = [p.strip() for p in path.split(PATH_SEPARATOR)]
        index = self._build_index(account_id)

        current_parent_id: Optional[int] = None
        found: Optional[Category] = None
        for part in parts:
            found = None
            for child_id in index.children.get(current_parent_id, []):
                if index.categories[child_id].name == part:
                    found = index.categories[child_id]
                    break
            if found is None:
                return None
            current_parent_id = found.id
        return found

    def require_category_by_path(self, account_id: int, path: str) -> Category:
        """Get category by path or raise NotFoundError."""
        category = self.get_category_by_path(account_id, path)
        if category is None:
            raise NotFoundError(category_path_not_found(path))
        return category

    def format_category_path(self, category_id: int) -> str:
        """Get full path for a category.

        Returns:
            Full category path (e.g., "Food & Dining > Groceries")
        """
        cat = self.get_category(category_id)
        if cat is None:
            return ""

        index = self._build_index(cat.account_id)
        path_parts = [cat.name]
        current_parent_id = cat.parent_id
        while current_parent_id is not None and len(path_parts) <= len(index.categories):
            parent = index.categories.get(current_parent_id)
            if parent is None:
                break
            path_parts.append(parent.name)
            current_parent_id = parent.parent_id

        return f" {PATH_SEPARATOR} ".join(reversed(path_parts))

    def _build_index(self, account_id: int) -> CategoryIndex:
        """Build ID and children lookups for one account in a single pass."""
        index = CategoryIndex()
        categories = self.db.list_categories(account_id=account_id)
        for cat in categories:
            index.categories[cat.id] = cat
        for cat in categories:
            parent_id = cat.parent_id if cat.parent_id in index.categories else None
            index.children.setdefault(parent_id, []).append(cat.id)
        return index

    @staticmethod
    def _collect_subtree(index: CategoryIndex, category_id: int) -> set[int]:
        result = {category_id}
        stack = [category_id]
        while stack:
            for child_id in index.children.get(stack.pop(), []):
                if child_id not in result:
                    result.add(child_id)
                    stack.append(child_id)
        return result
