"""Interactive command line for a single DynamoDB table.

To be run (after a `pip install -e .`) with:
$ dynaflex --help
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import aioboto3
import click
import pydantic
from botocore.exceptions import BotoCoreError, ClientError

from dynaflex.base import Page, QueryParams, ScanParams
from dynaflex.client import DynamoDb
from dynaflex.exceptions import DynaflexError, InvalidFieldValueError
from dynaflex.expressions import SortKeyCondition, SortKeyOperator
from dynaflex.keys import AttributeValue, DynamoDBKey, Item
from dynaflex.observability import configure_logging
from dynaflex.schema import FieldType, TableDescriptor, parse_attribute_value, parse_field_value
from dynaflex.settings import Settings, get_settings

Command = Callable[[DynamoDb, TableDescriptor], Awaitable[None]]


# --- Prompt helpers ---


def prompt(message: str, example: str | None = None) -> str:
    if example is not None:
        message = f"{message} (e.g., {example})"
    value: str = click.prompt(message, default="", show_default=False)
    return value.strip()


def prompt_optional(message: str, example: str | None = None) -> str | None:
    return prompt(message, example) or None


def prompt_optional_int(message: str, example: str | None = None) -> int | None:
    raw = prompt_optional(message, example)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidFieldValueError(value=raw, field="limit") from None


def prompt_bool(message: str, default: bool) -> bool:
    answer = prompt(f"{message} (y/n)", "y" if default else "n").lower()
    if not answer:
        return default
    return answer.startswith("y")


def prompt_expression_attribute_names() -> dict[str, str]:
    names: dict[str, str] = {}
    while True:
        name = prompt("Enter attribute name (or press Enter to finish)", "price")
        if not name:
            return names
        placeholder = prompt("Enter attribute name placeholder", "#name")
        names[placeholder] = name


def prompt_expression_attribute_values() -> dict[str, AttributeValue]:
    values: dict[str, AttributeValue] = {}
    while True:
        placeholder = prompt("Enter value placeholder (or press Enter to finish)", ":v")
        if not placeholder:
            return values
        type_tag = prompt("Enter value type (S for string, N for number)", "S")
        raw = prompt("Enter value", "example_value")
        values[placeholder] = parse_attribute_value(type_tag, raw)


def _field_type(table: TableDescriptor, name: str) -> FieldType:
    return (table.field_types or {}).get(name, FieldType.STRING)


def prompt_field(table: TableDescriptor, name: str, message: str | None = None) -> AttributeValue:
    raw = prompt(message or f"Enter {name}")
    return parse_field_value(_field_type(table, name), raw, field=name)


def prompt_key(table: TableDescriptor) -> DynamoDBKey:
    return {name: prompt_field(table, name) for name in table.key_attributes()}


def prompt_sort_key_condition(table: TableDescriptor) -> SortKeyCondition | None:
    if table.sort_key is None:
        return None
    operator_text = prompt(
        f"Enter condition for {table.sort_key} (=, <, <=, >, >=, BETWEEN, begins_with; "
        "or press Enter for none)"
    )
    if not operator_text:
        return None
    operator = SortKeyOperator.parse(operator_text)
    value = prompt_field(table, table.sort_key, f"Enter value for {table.sort_key}")
    upper = None
    if operator is SortKeyOperator.BETWEEN:
        upper = prompt_field(table, table.sort_key, f"Enter second value for {table.sort_key}")
    return SortKeyCondition(table.sort_key, operator, value, upper)


# --- Output helpers ---


def format_item(item: Item) -> str:
    return "{" + ", ".join(f"{name}: {value}" for name, value in sorted(item.items())) + "}"


def print_items(title: str, items: list[Item]) -> None:
    click.echo(f"\n--- {title} ---")
    for item in items:
        click.echo(format_item(item))
    click.echo("-" * (len(title) + 8))


def print_page(title: str, page: Page) -> None:
    print_items(title, page.items)
    if page.has_more:
        click.echo(f"More results available after {page.last_evaluated_key}")


# --- Commands ---


async def print_info(ddb: DynamoDb, table: TableDescriptor) -> None:
    description = await ddb.describe_table(table.name)
    items = await ddb.scan_table(table.name)
    size_bytes = sum(len(str(value)) for item in items for value in item.values())

    click.echo("\n--- Table Information ---")
    click.echo(f"Table Name: {table.name}")
    click.echo(f"Partition Key: {table.partition_key}")
    if table.sort_key is not None:
        click.echo(f"Sort Key: {table.sort_key}")
    if table.field_types:
        click.echo("Schema:")
        for name, field_type in table.field_types.items():
            click.echo(f"  {name}: {field_type.name}")
    click.echo(f"Item Count: {len(items)}")
    click.echo(f"Table Size (bytes): {size_bytes}")
    click.echo(f"Table Status: {description.get('Table', {}).get('TableStatus', 'UNKNOWN')}")
    click.echo("-------------------------\n")


async def put_item(ddb: DynamoDb, table: TableDescriptor) -> None:
    field_types = table.require_field_types()
    item: Item = {name: prompt_field(table, name) for name in field_types}
    await ddb.put_item(table.name, item)
    click.echo("Item added successfully!")


async def get_item(ddb: DynamoDb, table: TableDescriptor) -> None:
    key = prompt_key(table)
    item = await ddb.get_item(table.name, key)
    if item is None:
        click.echo("Item not found.")
    else:
        print_items("Item", [item])


async def update_item(ddb: DynamoDb, table: TableDescriptor) -> None:
    updatable_fields = table.updatable_fields()
    key = prompt_key(table)
    updates: Item = {}
    for name in updatable_fields:
        if prompt_bool(f"Update {name}?", default=False):
            updates[name] = prompt_field(table, name, f"Enter new value for {name}")
    await ddb.update_item(table.name, key, updates)
    click.echo("Item updated successfully!")


async def delete_item(ddb: DynamoDb, table: TableDescriptor) -> None:
    key = prompt_key(table)
    await ddb.delete_item(table.name, key)
    click.echo("Item deleted successfully!")


async def query_items(ddb: DynamoDb, table: TableDescriptor) -> None:
    partition_key_value = prompt_field(
        table, table.partition_key, f"Enter {table.partition_key} value"
    )
    sort_key_condition = prompt_sort_key_condition(table)
    items = await ddb.query_items(
        table.name, (table.partition_key, partition_key_value), sort_key_condition
    )
    print_items("Query Results", items)


async def scan_items(ddb: DynamoDb, table: TableDescriptor) -> None:
    filter_expression = prompt_optional(
        "Enter filter expression (or press Enter for no filter)", "#price > :value"
    )
    names: dict[str, str] = {}
    values: dict[str, AttributeValue] = {}
    if filter_expression is not None:
        names = prompt_expression_attribute_names()
        values = prompt_expression_attribute_values()
    items = await ddb.scan(table.name, filter_expression, names, values)
    print_items("Scan Results", items)


async def list_items(ddb: DynamoDb, table: TableDescriptor) -> None:
    items = await ddb.scan_table(table.name)
    print_items(f"Items in {table.name}", items)


async def query_flexible_items(ddb: DynamoDb, table: TableDescriptor) -> None:
    key_condition_expression = prompt("Enter key condition expression", "#pk = :pk")
    filter_expression = prompt_optional("Enter filter expression", "#price > :value")
    projection_expression = prompt_optional("Enter projection expression", "attr1, attr2")
    names = prompt_expression_attribute_names()
    values = prompt_expression_attribute_values()
    limit = prompt_optional_int("Enter limit", "10")
    scan_index_forward = prompt_bool("Scan index forward?", default=True)
    index_name = prompt_optional("Enter index name", "GSI1")

    page = await ddb.query_flexible(
        QueryParams(
            table_name=table.name,
            key_condition_expression=key_condition_expression,
            filter_expression=filter_expression,
            projection_expression=projection_expression,
            expression_attribute_names=names,
            expression_attribute_values=values,
            limit=limit,
            scan_index_forward=scan_index_forward,
            index_name=index_name,
        )
    )
    print_page("Query Flexible Results", page)


async def query_simple_items(ddb: DynamoDb, table: TableDescriptor) -> None:
    partition_key_value = prompt_field(
        table, table.partition_key, f"Enter {table.partition_key} value"
    )
    sort_key_condition = prompt_sort_key_condition(table)
    filter_expression = prompt_optional("Enter filter expression", "#price > :value")
    names: dict[str, str] = {}
    values: dict[str, AttributeValue] = {}
    if filter_expression is not None:
        names = prompt_expression_attribute_names()
        values = prompt_expression_attribute_values()
    limit = prompt_optional_int("Enter limit", "10")

    page = await ddb.query_simple(
        table.name,
        (table.partition_key, partition_key_value),
        sort_key_condition,
        filter_expression=filter_expression,
        limit=limit,
        expression_attribute_names=names,
        expression_attribute_values=values,
    )
    print_page("Query Simple Results", page)


async def scan_paginated_items(ddb: DynamoDb, table: TableDescriptor) -> None:
    filter_expression = prompt_optional("Enter filter expression", "#price > :value")
    projection_expression = prompt_optional("Enter projection expression", "attr1, attr2")
    names = prompt_expression_attribute_names()
    values = prompt_expression_attribute_values()
    limit = prompt_optional_int("Enter limit (or press Enter for none)", "10")

    params = ScanParams(
        table_name=table.name,
        filter_expression=filter_expression,
        projection_expression=projection_expression,
        expression_attribute_names=names,
        expression_attribute_values=values,
        limit=limit,
    )
    page_number = 1
    async for page in ddb.scan_pages(params):
        print_items(f"Scan Paginated Results (Page {page_number})", page.items)
        if not page.has_more or not prompt_bool("Continue to next page?", default=True):
            break
        page_number += 1


async def delete_table(ddb: DynamoDb, table: TableDescriptor) -> None:
    confirmed = prompt_bool(
        f"Are you sure you want to delete the table '{table.name}'? "
        "This action cannot be undone.",
        default=False,
    )
    if confirmed:
        await ddb.delete_table(table.name)
        click.echo(f"Table '{table.name}' has been deleted.")
    else:
        click.echo("Table deletion cancelled.")


COMMANDS: dict[str, Command] = {
    "info": print_info,
    "put": put_item,
    "get": get_item,
    "update": update_item,
    "delete": delete_item,
    "query": query_items,
    "scan": scan_items,
    "list": list_items,
    "query_flexible": query_flexible_items,
    "query_simple": query_simple_items,
    "scan_paginated": scan_paginated_items,
    "delete_table": delete_table,
}
EXIT_COMMAND = "exit"


async def run_repl(ddb: DynamoDb, table: TableDescriptor) -> None:
    """Read commands until ``exit``.

    Errors raised by a command are printed and the loop goes on.
    """
    vocabulary = "/".join([*COMMANDS, EXIT_COMMAND])
    while True:
        command = prompt(f"Enter command ({vocabulary})")
        if command == EXIT_COMMAND:
            return
        handler = COMMANDS.get(command)
        if handler is None:
            click.echo("Unknown command. Please try again.", err=True)
            continue
        try:
            await handler(ddb, table)
        except (DynaflexError, ClientError, BotoCoreError, pydantic.ValidationError) as e:
            click.echo(f"Error: {e}", err=True)


# --- Entrypoint ---


@asynccontextmanager
async def open_dynamodb(settings: Settings) -> AsyncIterator[DynamoDb]:
    session = aioboto3.Session(region_name=settings.aws_region)
    async with session.resource("dynamodb", endpoint_url=settings.aws_endpoint_url) as resource:
        yield DynamoDb(resource, retry_policy=settings.retry_policy())


async def run(settings: Settings) -> None:
    table = settings.table_descriptor()
    async with open_dynamodb(settings) as ddb:
        await ddb.check_auth()
        await ddb.create_table_if_not_exists(table)
        await run_repl(ddb, table)


@click.command(
    name="dynaflex",
    help="""Interactive DynamoDB table explorer.

    \b
    Credentials and region come from the standard AWS environment variables
    and config files. Settings can also be given in a .env file.
    """,
)
@click.option("--table-name", "table_name", type=str, help="Table to work on")
@click.option("--endpoint-url", "endpoint_url", type=str, help="e.g. http://localhost:8000")
@click.option("--log-level", "log_level", type=str, help="DEBUG, INFO, WARNING or ERROR")
def cli(table_name: str | None, endpoint_url: str | None, log_level: str | None) -> None:
    overrides: dict[str, Any] = {
        "table_name": table_name,
        "aws_endpoint_url": endpoint_url,
        "log_level": log_level,
    }
    settings = get_settings().model_copy(
        update={name: value for name, value in overrides.items() if value is not None}
    )
    configure_logging(level=settings.log_level)
    try:
        asyncio.run(run(settings))
    except (DynaflexError, ClientError, BotoCoreError) as e:
        raise click.ClickException(str(e)) from e
