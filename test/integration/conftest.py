from collections.abc import AsyncGenerator, Generator
from decimal import Decimal

import aioboto3
from moto.server import ThreadedMotoServer
from pytest import fixture
from pytest_asyncio import fixture as async_fixture
from types_aiobotocore_dynamodb.service_resource import DynamoDBServiceResource

from dynaflex.client import DynamoDb
from dynaflex.keys import Item
from dynaflex.observability import null_sink
from dynaflex.schema import FieldType, TableDescriptor

PRODUCTS = TableDescriptor(
    name="test-products",
    partition_key="category",
    sort_key="product_name",
    field_types={
        "category": FieldType.STRING,
        "product_name": FieldType.STRING,
        "price": FieldType.NUMBER,
    },
)

SAMPLE_PRODUCTS: list[Item] = [
    {"category": "Category1", "product_name": "Product1", "price": Decimal("10")},
    {"category": "Category1", "product_name": "Product2", "price": Decimal("20")},
    {"category": "Category2", "product_name": "Product3", "price": Decimal("30")},
    {"category": "Category2", "product_name": "Product4", "price": Decimal("40")},
    {"category": "Category3", "product_name": "Product5", "price": Decimal("50")},
]


@fixture(scope="session")
def dynamodb_endpoint(aws_credentials: None) -> Generator[str, None, None]:
    """Session-scoped moto server speaking the DynamoDB HTTP API."""
    server = ThreadedMotoServer(ip_address="127.0.0.1", port=0)
    server.start()
    host, port = server.get_host_and_port()
    yield f"http://{host}:{port}"
    server.stop()


@async_fixture
async def dynamodb(
    dynamodb_endpoint: str,
) -> AsyncGenerator[DynamoDBServiceResource, None]:
    """Function-scoped aioboto3 resource reusing session-scoped endpoint."""
    session = aioboto3.Session(region_name="us-east-1")
    async with session.resource("dynamodb", endpoint_url=dynamodb_endpoint) as resource:
        yield resource


@fixture
def ddb(dynamodb: DynamoDBServiceResource) -> DynamoDb:
    return DynamoDb(dynamodb, sink=null_sink)


@async_fixture
async def products_table(ddb: DynamoDb) -> AsyncGenerator[TableDescriptor, None]:
    await ddb.create_table_if_not_exists(PRODUCTS)

    yield PRODUCTS

    await ddb.delete_table(PRODUCTS.name)


@async_fixture
async def sample_products(ddb: DynamoDb, products_table: TableDescriptor) -> list[Item]:
    for item in SAMPLE_PRODUCTS:
        await ddb.put_item(products_table.name, item)
    return SAMPLE_PRODUCTS
