from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "BusinessLedger"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:5173", "http://localhost:8080"])

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_ENDPOINT_URL: Optional[str] = Field(default=None)  # local DynamoDB, e.g. http://localhost:8000
    DYNAMO_CASH_FLOW_TABLE: str = Field(default="ledger-cash-flow-entries")
    DYNAMO_OPERATIONAL_COSTS_TABLE: str = Field(default="ledger-operational-costs")
    DYNAMO_DEBTS_TABLE: str = Field(default="ledger-debts")

    # Entry classifier (OpenAI-compatible chat completions)
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1")
    CLASSIFIER_MODEL: str = Field(default="gpt-4o-mini")
    CLASSIFIER_TIMEOUT: float = Field(default=30.0)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()
