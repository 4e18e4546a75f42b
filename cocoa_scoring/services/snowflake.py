"""
Snowflake Connection Factory - Cocoa Contest Scoring Engine
cocoa_scoring/services/snowflake.py

Used by repositories via BaseRepository.get_connection().
"""
import snowflake.connector

from cocoa_scoring.config import settings


def get_snowflake_connection():
    """Open a new Snowflake connection from application settings."""
    password = settings.SNOWFLAKE_PASSWORD.get_secret_value() if settings.SNOWFLAKE_PASSWORD else None
    return snowflake.connector.connect(
        account=settings.SNOWFLAKE_ACCOUNT,
        user=settings.SNOWFLAKE_USER,
        password=password,
        warehouse=settings.SNOWFLAKE_WAREHOUSE,
        database=settings.SNOWFLAKE_DATABASE,
        schema=settings.SNOWFLAKE_SCHEMA,
        role=settings.SNOWFLAKE_ROLE,
    )
