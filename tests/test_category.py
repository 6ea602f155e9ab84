"""Tests for category service and commands."""

import sys
import threading
from datetime import date
from decimal import Decimal

import pytest

from pocketbook.cli.main import cli
from pocketbook.domain.entities import DeletePolicy, TransactionType
from pocketbook.domain.errors import (
    CrossAccountError,
    CycleError,
    DependencyError,
    NotFoundError,
    ValidationError,
)


def _parent_map(category_service, account_id):
    return {cat.id: cat.parent_id for cat in category_service.list_categories(account_id)}


def _assert_acyclic(category_service, account_id):
    parents = _parent_map(category_service, account_id)
    for category_id in parents:
        seen = set()
        current = category_id
        while current is not None:
            assert current not in seen, f"cycle through category {current}"
            seen.add(current)
            current = parents[current]


class TestCreateCategory:
    """Tests for creating categories."""

    def test_create_root(self, category_service, sample_account):
        category = category_service.create_category(sample_account.id, "Housing")

        assert category.name == "Housing"
        assert category.account_id == sample_account.id
        assert category.parent_id is None

    def test_create_child(self, category_service, sample_account, sample_categories):
        parent_id = sample_categories["Transportation"]
        category = category_service.create_category(sample_account.id, "Parking", parent_id)

        assert category.parent_id == parent_id
        assert category_service.format_category_path(category.id) == "Transportation > Parking"

    def test_empty_name(self, category_service, sample_account):
        with pytest.raises(ValidationError):
            category_service.create_category(sample_account.id, "  ")

    def test_name_with_path_separator(self, category_service, sample_account):
        with pytest.raises(ValidationError, match="cannot contain"):
            category_service.create_category(sample_account.id, "Food > Drink")
        assert category_service.list_categories(sample_account.id) == []

    def test_unknown_account(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.create_category(999, "Food")

    def test_unknown_parent(self, category_service, sample_account):
        with pytest.raises(NotFoundError, match="Category 999 not found"):
            category_service.create_category(sample_account.id, "Food", parent_id=999)

    def test_parent_in_other_account(
        self, category_service, sample_categories, other_account
    ):
        with pytest.raises(CrossAccountError):
            category_service.create_category(
                other_account.id, "Snacks", parent_id=sample_categories["Food & Dining"]
            )
        assert category_service.list_categories(other_account.id) == []


class TestUpdateCategory:
    """Tests for renaming and reparenting."""

    def test_rename(self, category_service, sample_categories):
        category_id = sample_categories["Food & Dining > Groceries"]
        updated = category_service.update_category(category_id, name="Supermarket")

        assert updated.name == "Supermarket"
        assert updated.parent_id == sample_categories["Food & Dining"]

    def test_rename_with_path_separator(self, category_service, sample_account, sample_categories):
        category_id = sample_categories["Food & Dining > Groceries"]

        with pytest.raises(ValidationError):
            category_service.update_category(category_id, name="Fresh > Frozen")

        assert category_service.require_category(category_id).name == "Groceries"
        assert category_service.get_category_by_path(
            sample_account.id, "Food & Dining > Groceries"
        ).id == category_id

    def test_move_to_new_parent(self, category_service, sample_categories):
        category_id = sample_categories["Transportation > Fuel"]
        moved = category_service.move_category(category_id, sample_categories["Food & Dining"])

        assert moved.parent_id == sample_categories["Food & Dining"]

    def test_move_to_root(self, category_service, sample_categories):
        category_id = sample_categories["Food & Dining > Restaurants"]
        moved = category_service.move_category(category_id, None)

        assert moved.parent_id is None
        # Children travel with the moved category
        fast_food = category_service.require_category(
            sample_categories["Food & Dining > Restaurants > Fast Food"]
        )
        assert fast_food.parent_id == category_id

    def test_self_parent_rejected(self, category_service, sample_account, sample_categories):
        category_id = sample_categories["Food & Dining"]
        before = _parent_map(category_service, sample_account.id)

        with pytest.raises(CycleError, match="own parent"):
            category_service.update_category(category_id, parent_id=category_id)

        assert _parent_map(category_service, sample_account.id) == before

    def test_descendant_parent_rejected(self, category_service, sample_account, sample_categories):
        before = _parent_map(category_service, sample_account.id)

        with pytest.raises(CycleError):
            category_service.move_category(
                sample_categories["Food & Dining"],
                sample_categories["Food & Dining > Restaurants > Fast Food"],
            )

        assert _parent_map(category_service, sample_account.id) == before

    def test_cycle_error_is_validation_error(self, category_service, sample_categories):
        with pytest.raises(ValidationError):
            category_service.move_category(
                sample_categories["Food & Dining"],
                sample_categories["Food & Dining > Groceries"],
            )

    def test_parent_in_other_account(self, category_service, sample_categories, other_account):
        foreign = category_service.create_category(other_account.id, "Foreign")

        with pytest.raises(CrossAccountError):
            category_service.move_category(sample_categories["Income"], foreign.id)

    def test_unknown_parent(self, category_service, sample_categories):
        with pytest.raises(NotFoundError):
            category_service.move_category(sample_categories["Income"], 999)

    def test_parent_and_clear_parent_conflict(self, category_service, sample_categories):
        with pytest.raises(ValidationError):
            category_service.update_category(
                sample_categories["Income > Salary"],
                parent_id=sample_categories["Food & Dining"],
                clear_parent=True,
            )

    def test_random_moves_keep_tree_acyclic(
        self, category_service, sample_account, sample_categories
    ):
        ids = sorted(sample_categories.values())
        for category_id in ids:
            for parent_id in ids:
                try:
                    category_service.move_category(category_id, parent_id)
                except CycleError:
                    pass
                _assert_acyclic(category_service, sample_account.id)


class TestHierarchy:
    """Tests for materializing the category forest."""

    def test_roots_and_children(self, category_service, sample_account, sample_categories):
        tree = category_service.get_hierarchy(sample_account.id)

        assert [node.name for node in tree] == ["Food & Dining", "Transportation", "Income"]
        food = tree[0]
        assert [child.name for child in food.children] == ["Groceries", "Restaurants"]
        assert [child.name for child in food.children[1].children] == ["Fast Food"]

    def test_every_category_appears_once(
        self, category_service, sample_account, sample_categories
    ):
        tree = category_service.get_hierarchy(sample_account.id)
        ids = [cat_id for root in tree for cat_id in root.iter_ids()]

        assert sorted(ids) == sorted(sample_categories.values())

    def test_other_account_is_isolated(self, category_service, sample_categories, other_account):
        category_service.create_category(other_account.id, "Misc")

        tree = category_service.get_hierarchy(other_account.id)
        assert [node.name for node in tree] == ["Misc"]

    def test_empty_account(self, category_service, other_account):
        assert category_service.get_hierarchy(other_account.id) == []

    def test_unknown_account(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.get_hierarchy(999)

    def test_chain_deeper_than_recursion_limit(
        self, temp_db, category_service, sample_account, cli_runner
    ):
        depth = sys.getrecursionlimit() + 50
        parent_id = None
        chain = []
        for level in range(depth):
            parent_id = temp_db.create_category(
                name=f"Level {level}", account_id=sample_account.id, parent_id=parent_id
            )
            chain.append(parent_id)

        tree = category_service.get_hierarchy(sample_account.id)

        assert len(tree) == 1
        node = tree[0]
        walked = [node.id]
        while node.children:
            assert len(node.children) == 1
            node = node.children[0]
            walked.append(node.id)
        assert walked == chain
        assert list(tree[0].iter_ids()) == chain

        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "category", "list", "--account", "Test Account"]
        )
        assert result.exit_code == 0
        assert f"{'  ' * (depth - 1)}Level {depth - 1} (ID: {chain[-1]})" in result.output

    def test_descendant_ids(self, category_service, sample_categories):
        ids = category_service.get_descendant_ids(sample_categories["Food & Dining"])

        assert ids == {
            sample_categories["Food & Dining"],
            sample_categories["Food & Dining > Groceries"],
            sample_categories["Food & Dining > Restaurants"],
            sample_categories["Food & Dining > Restaurants > Fast Food"],
        }

    def test_top_level_map(self, category_service, sample_account, sample_categories):
        top_level = category_service.get_top_level_map(sample_account.id)

        assert top_level[sample_categories["Food & Dining > Restaurants > Fast Food"]] == (
            sample_categories["Food & Dining"]
        )
        assert top_level[sample_categories["Income"]] == sample_categories["Income"]

    def test_lookup_by_path(self, category_service, sample_account, sample_categories):
        found = category_service.get_category_by_path(
            sample_account.id, "Food & Dining > Restaurants > Fast Food"
        )

        assert found.id == sample_categories["Food & Dining > Restaurants > Fast Food"]
        assert category_service.get_category_by_path(sample_account.id, "Food & Dining > Fuel") is None
        with pytest.raises(NotFoundError):
            category_service.require_category_by_path(sample_account.id, "Nope")


class TestConcurrentMoves:
    """Tests for category mutations racing across threads."""

    @pytest.mark.parametrize("ring_size", [2, 4])
    def test_ring_of_moves_leaves_one_rejected(
        self, temp_db, category_service, sample_account, ring_size
    ):
        # Each thread moves category i under category i+1, closing a ring
        ring = [
            category_service.create_category(sample_account.id, f"Node {i}").id
            for i in range(ring_size)
        ]
        barrier = threading.Barrier(ring_size)
        outcomes = {}

        def move(child_id, parent_id):
            barrier.wait()
            try:
                category_service.move_category(child_id, parent_id)
                outcomes[child_id] = "moved"
            except CycleError:
                outcomes[child_id] = "cycle"
            finally:
                temp_db.session_factory.remove()

        threads = [
            threading.Thread(target=move, args=(ring[i], ring[(i + 1) % ring_size]))
            for i in range(ring_size)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert sorted(outcomes.values()) == ["cycle"] + ["moved"] * (ring_size - 1)

        # Read back through a fresh session
        temp_db.session_factory.remove()
        parents = _parent_map(category_service, sample_account.id)
        assert sum(parents[node] is None for node in ring) == 1
        _assert_acyclic(category_service, sample_account.id)

    def test_concurrent_creates_under_one_parent(
        self, temp_db, category_service, sample_account, sample_categories
    ):
        parent_id = sample_categories["Food & Dining"]
        barrier = threading.Barrier(5)
        errors = []

        def create(name):
            barrier.wait()
            try:
                category_service.create_category(sample_account.id, name, parent_id)
            except Exception as e:
                errors.append(e)
            finally:
                temp_db.session_factory.remove()

        threads = [threading.Thread(target=create, args=(f"Child {i}",)) for i in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        temp_db.session_factory.remove()
        tree = category_service.get_hierarchy(sample_account.id)
        food = next(node for node in tree if node.id == parent_id)
        assert {child.name for child in food.children} >= {f"Child {i}" for i in range(5)}


class TestDeleteCategory:
    """Tests for the delete policies."""

    def test_promote_children(self, category_service, sample_account, sample_categories):
        category_service.delete_category(sample_categories["Food & Dining > Restaurants"])

        fast_food = category_service.require_category(
            sample_categories["Food & Dining > Restaurants > Fast Food"]
        )
        assert fast_food.parent_id == sample_categories["Food & Dining"]
        assert category_service.get_category(sample_categories["Food & Dining > Restaurants"]) is None

    def test_promote_root_children_become_roots(
        self, category_service, sample_account, sample_categories
    ):
        category_service.delete_category(sample_categories["Income"], policy=DeletePolicy.PROMOTE)

        salary = category_service.require_category(sample_categories["Income > Salary"])
        assert salary.parent_id is None

    def test_promote_moves_transactions_to_parent(
        self, category_service, transaction_service, sample_categories, add_expense
    ):
        txn = add_expense(sample_categories["Food & Dining > Restaurants"], "20.00", date(2024, 1, 5))

        category_service.delete_category(sample_categories["Food & Dining > Restaurants"])

        moved = transaction_service.require_transaction(txn.id)
        assert moved.category_id == sample_categories["Food & Dining"]

    def test_cascade_removes_subtree(
        self, category_service, transaction_service, sample_account, sample_categories, add_expense
    ):
        txn = add_expense(
            sample_categories["Food & Dining > Restaurants > Fast Food"], "9.99", date(2024, 1, 5)
        )

        category_service.delete_category(
            sample_categories["Food & Dining"], policy=DeletePolicy.CASCADE
        )

        remaining = {cat.name for cat in category_service.list_categories(sample_account.id)}
        assert remaining == {"Transportation", "Fuel", "Income", "Salary"}
        orphan = transaction_service.require_transaction(txn.id)
        assert orphan.category_id is None
        assert orphan.amount == Decimal("9.99")

    def test_reject_with_children(self, category_service, sample_account, sample_categories):
        with pytest.raises(DependencyError, match="subcategor"):
            category_service.delete_category(
                sample_categories["Food & Dining"], policy=DeletePolicy.REJECT
            )

        assert len(category_service.list_categories(sample_account.id)) == len(sample_categories)

    def test_reject_leaf(self, category_service, sample_categories):
        category_service.delete_category(
            sample_categories["Income > Salary"], policy=DeletePolicy.REJECT
        )
        assert category_service.get_category(sample_categories["Income > Salary"]) is None

    def test_delete_unknown(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.delete_category(999)

    def test_income_transactions_survive_promote(
        self, category_service, transaction_service, sample_account, sample_categories
    ):
        txn = transaction_service.create_transaction(
            account_id=sample_account.id,
            category_id=sample_categories["Income > Salary"],
            amount=Decimal("3000"),
            transaction_type=TransactionType.INCOME,
            date=date(2024, 1, 31),
        )

        category_service.delete_category(sample_categories["Income > Salary"])

        assert transaction_service.require_transaction(txn.id).category_id == (
            sample_categories["Income"]
        )


def test_category_list_cli(cli_runner, temp_db, sample_account, sample_categories):
    """Test listing the category tree."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "category", "list", "--account", "Test Account"]
    )

    assert result.exit_code == 0
    assert "Food & Dining (ID:" in result.output
    assert "    Fast Food (ID:" in result.output


def test_category_list_empty_cli(cli_runner, temp_db, sample_account):
    """Test listing categories when none exist."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "category", "list", "--account", "Test Account"]
    )

    assert result.exit_code == 0
    assert "No categories found" in result.output


def test_category_create_cli(cli_runner, temp_db, sample_account, sample_categories):
    """Test creating a category under a parent path."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "category", "create", "Bakery",
            "--account", str(sample_account.id),
            "--parent", "Food & Dining",
        ],
    )

    assert result.exit_code == 0
    assert "Created category 'Bakery' under 'Food & Dining'" in result.output


def test_category_move_cycle_cli(cli_runner, temp_db, sample_categories):
    """Test that moving a category under its descendant fails."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "category", "move", str(sample_categories["Food & Dining"]),
            "--parent", str(sample_categories["Food & Dining > Groceries"]),
        ],
    )

    assert result.exit_code == 1
    assert "descendant" in result.output


def test_category_move_requires_target_cli(cli_runner, temp_db, sample_categories):
    """Test that move needs exactly one of --parent and --root."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "category", "move", str(sample_categories["Income"])],
    )

    assert result.exit_code == 1
    assert "exactly one" in result.output


def test_category_delete_reject_cli(cli_runner, temp_db, sample_categories):
    """Test the reject policy through the CLI."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "category", "delete", str(sample_categories["Income"]),
            "--policy", "reject",
        ],
    )

    assert result.exit_code == 1
    assert "Cannot delete category" in result.output
