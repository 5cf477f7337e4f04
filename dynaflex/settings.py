"""Runtime settings read from the environment (and a local .env file).

AWS credentials are not handled here: aioboto3 discovers them through the
standard chain (environment variables, shared config files, instance roles).
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dynaflex.retry import RetryPolicy
from dynaflex.schema import FieldType, TableDescriptor

PRICE_ATTRIBUTE = "price"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # Table
    table_name: str = Field(default="products", validation_alias="DYNAFLEX_TABLE_NAME")
    partition_key: str = Field(default="category", validation_alias="DYNAFLEX_PARTITION_KEY")
    sort_key: str | None = Field(default="product_name", validation_alias="DYNAFLEX_SORT_KEY")

    # AWS
    aws_region: str = Field(default="us-east-1", validation_alias="AWS_REGION")
    aws_endpoint_url: str | None = Field(default=None, validation_alias="AWS_ENDPOINT_URL")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="DYNAFLEX_LOG_LEVEL")

    # Retries
    retry_initial_delay: float = Field(
        default=1.0, ge=0, validation_alias="DYNAFLEX_RETRY_INITIAL_DELAY"
    )
    retry_max_retries: int = Field(default=3, ge=0, validation_alias="DYNAFLEX_RETRY_MAX_RETRIES")

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            initial_delay=self.retry_initial_delay,
            max_retries=self.retry_max_retries,
        )

    def table_descriptor(self) -> TableDescriptor:
        """The demo products table: string keys plus a numeric price."""
        field_types = {self.partition_key: FieldType.STRING}
        if self.sort_key:
            field_types[self.sort_key] = FieldType.STRING
        field_types[PRICE_ATTRIBUTE] = FieldType.NUMBER
        return TableDescriptor(
            name=self.table_name,
            partition_key=self.partition_key,
            sort_key=self.sort_key or None,
            field_types=field_types,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


__all__ = [
    "Settings",
    "get_settings",
]
