"""Category management commands."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import resolve_account_or_exit, resolve_category_or_exit
from pocketbook.domain.account import AccountService
from pocketbook.domain.category import CategoryService
from pocketbook.domain.entities import DeletePolicy, HierarchicalCategory
from pocketbook.domain.errors import DomainError


def print_category_tree(categories: list[HierarchicalCategory], indent: int = 0) -> None:
    """Print a category tree, indenting two spaces per level."""
    stack = [(cat, indent) for cat in reversed(categories)]
    while stack:
        cat, depth = stack.pop()
        click.echo(f"{'  ' * depth}{cat.name} (ID: {cat.id})")
        stack.extend((child, depth + 1) for child in reversed(cat.children))


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--account", required=True, help="Account name or ID")
@click.pass_context
def list_categories(ctx, account: str):
    """List an account's categories in tree format."""
    db = ctx.obj["db"]
    service = CategoryService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    tree = service.get_hierarchy(account_id)
    if not tree:
        click.echo("No categories found. Use 'category create' to add one.")
        return

    click.echo("\nCategories:")
    print_category_tree(tree)


@category_group.command("create")
@click.argument("name")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--parent", help="Parent category ID or path (e.g., 'Food & Dining')")
@click.pass_context
def create_category(ctx, name: str, account: str, parent: str | None):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    parent_id = None
    if parent:
        parent_id = resolve_category_or_exit(ctx, service, account_id, parent)

    try:
        category = service.create_category(account_id=account_id, name=name, parent_id=parent_id)
        parent_str = f" under '{parent}'" if parent else ""
        click.echo(f"Created category '{category.name}'{parent_str} (ID: {category.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("rename")
@click.argument("category_id", type=int)
@click.argument("new_name")
@click.pass_context
def rename_category(ctx, category_id: int, new_name: str):
    """Rename a category."""
    service = CategoryService(ctx.obj["db"])
    try:
        category = service.update_category(category_id, name=new_name)
        click.echo(f"Renamed category {category.id} to '{category.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("move")
@click.argument("category_id", type=int)
@click.option("--parent", help="New parent category ID or path")
@click.option("--root", is_flag=True, help="Move the category to the top level")
@click.pass_context
def move_category(ctx, category_id: int, parent: str | None, root: bool):
    """Move a category under a new parent.

    A category cannot be moved under itself or one of its own subcategories.

    Examples:
        pocketbook category move 7 --parent "Food & Dining"
        pocketbook category move 7 --root
    """
    if root == bool(parent):
        click.echo("Error: Specify exactly one of --parent or --root", err=True)
        ctx.exit(1)

    service = CategoryService(ctx.obj["db"])
    try:
        category = service.require_category(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    parent_id = None
    if parent:
        parent_id = resolve_category_or_exit(ctx, service, category.account_id, parent)

    try:
        moved = service.move_category(category_id, parent_id)
        click.echo(f"Moved category to '{service.format_category_path(moved.id)}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.option(
    "--policy",
    type=click.Choice([p.value for p in DeletePolicy], case_sensitive=False),
    default=DeletePolicy.PROMOTE.value,
    help="What to do with subcategories: promote them one level (default), cascade, or reject",
)
@click.pass_context
def delete_category(ctx, category_id: int, policy: str):
    """Delete a category."""
    service = CategoryService(ctx.obj["db"])
    try:
        service.delete_category(category_id, policy=DeletePolicy(policy.lower()))
        click.echo(f"Deleted category {category_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
