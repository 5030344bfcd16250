"""Seed reference entities that transactions point at."""

import click


@click.group("reference")
def reference_group():
    """Create owners, categories and responsibles."""
    pass


@reference_group.command("add")
@click.argument(
    "kind",
    type=click.Choice(["user", "category", "subcategory", "source-entity", "responsible"]),
)
@click.argument("name")
@click.option("--category", type=int, help="Parent category ID (subcategory only)")
@click.option("--owner", type=int, help="Owner ID (source-entity only)")
@click.pass_context
def add_reference(ctx, kind: str, name: str, category: int | None, owner: int | None):
    """Create a reference entity and print its ID.

    Examples:
        splitledger reference add user "Ana"
        splitledger reference add subcategory "Groceries" --category 1
    """
    db = ctx.obj["db"]

    if kind == "subcategory":
        if category is None:
            click.echo("Error: --category is required for a subcategory", err=True)
            ctx.exit(1)
        if db.get_category(category) is None:
            click.echo(f"Error: Category {category} not found", err=True)
            ctx.exit(1)
        new_id = db.create_subcategory(name, category)
    elif kind == "source-entity":
        new_id = db.create_source_entity(name, owner_id=owner)
    else:
        create = {
            "user": db.create_user,
            "category": db.create_category,
            "responsible": db.create_responsible,
        }[kind]
        new_id = create(name)

    click.echo(f"Created {kind} {new_id}: {name}")


def register_commands(cli):
    """Register reference commands with main CLI."""
    cli.add_command(reference_group)
