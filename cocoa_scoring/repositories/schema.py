"""
Schema - Cocoa Contest Scoring Engine
cocoa_scoring/repositories/schema.py

Snowflake DDL for every table the repositories touch.

Snowflake records PRIMARY KEY / UNIQUE / FOREIGN KEY constraints but does
not enforce them; per-(sample, judge) uniqueness is guaranteed by the MERGE
in EvaluationRepository.upsert. Tables are clustered on their lookup key in
place of secondary indexes.
"""

from typing import List

import structlog

from cocoa_scoring.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


def _evaluation_table(name: str) -> str:
    return f"""
        CREATE TABLE IF NOT EXISTS {name} (
            ID                        VARCHAR(36) PRIMARY KEY,
            SAMPLE_ID                 VARCHAR(36) NOT NULL REFERENCES SAMPLES(ID),
            CONTEST_ID                VARCHAR(36) NOT NULL REFERENCES CONTESTS(ID),
            JUDGE_ID                  VARCHAR(36) NOT NULL,
            SCHEME                    VARCHAR(20) NOT NULL,
            OVERALL_QUALITY           NUMBER(5,2),
            VERDICT                   VARCHAR(20) NOT NULL DEFAULT 'Approved',
            DISQUALIFICATION_REASONS  VARIANT,
            ATTRIBUTES                VARIANT NOT NULL,
            FLAVOR_COMMENTS           VARCHAR(2000),
            PRODUCER_RECOMMENDATIONS  VARCHAR(2000),
            ADDITIONAL_POSITIVE       VARCHAR(2000),
            EVALUATED_AT              TIMESTAMP_TZ NOT NULL,
            UPDATED_AT                TIMESTAMP_TZ NOT NULL,
            UNIQUE (SAMPLE_ID, JUDGE_ID)
        )
        CLUSTER BY (CONTEST_ID, SAMPLE_ID)
    """


SCHEMA_DDL: List[str] = [
    """
        CREATE TABLE IF NOT EXISTS CONTESTS (
            ID           VARCHAR(36) PRIMARY KEY,
            NAME         VARCHAR(255) NOT NULL,
            START_DATE   DATE NOT NULL,
            END_DATE     DATE NOT NULL,
            LOCATION     VARCHAR(255),
            DIRECTOR_ID  VARCHAR(36),
            CREATED_AT   TIMESTAMP_TZ DEFAULT CURRENT_TIMESTAMP()
        )
    """,
    """
        CREATE TABLE IF NOT EXISTS SAMPLES (
            ID             VARCHAR(36) PRIMARY KEY,
            CONTEST_ID     VARCHAR(36) NOT NULL REFERENCES CONTESTS(ID),
            OWNER_ID       VARCHAR(36),
            TRACKING_CODE  VARCHAR(64) NOT NULL UNIQUE,
            CATEGORY       VARCHAR(20) NOT NULL,
            STATUS         VARCHAR(30) NOT NULL DEFAULT 'submitted',
            CREATED_AT     TIMESTAMP_TZ DEFAULT CURRENT_TIMESTAMP(),
            UPDATED_AT     TIMESTAMP_TZ
        )
        CLUSTER BY (CONTEST_ID)
    """,
    """
        CREATE TABLE IF NOT EXISTS PHYSICAL_EVALUATIONS (
            SAMPLE_ID                VARCHAR(36) PRIMARY KEY REFERENCES SAMPLES(ID),
            HAS_UNDESIRABLE_AROMAS   BOOLEAN DEFAULT FALSE,
            UNDESIRABLE_AROMAS       VARIANT,
            TYPICAL_ODORS            VARIANT,
            ATYPICAL_ODORS           VARIANT,
            PERCENTAGE_HUMIDITY      NUMBER(5,2) NOT NULL,
            BROKEN_GRAINS            NUMBER(5,2) DEFAULT 0,
            VIOLATED_GRAINS          BOOLEAN DEFAULT FALSE,
            FLAT_GRAINS              NUMBER(5,2) DEFAULT 0,
            AFFECTED_GRAINS_INSECTS  INTEGER DEFAULT 0,
            HAS_AFFECTED_GRAINS      BOOLEAN DEFAULT FALSE,
            WELL_FERMENTED_BEANS     NUMBER(5,2) DEFAULT 0,
            LIGHTLY_FERMENTED_BEANS  NUMBER(5,2) DEFAULT 0,
            PURPLE_BEANS             NUMBER(5,2) DEFAULT 0,
            SLATY_BEANS              NUMBER(5,2) DEFAULT 0,
            INTERNAL_MOLDY_BEANS     NUMBER(5,2) DEFAULT 0,
            OVER_FERMENTED_BEANS     NUMBER(5,2) DEFAULT 0,
            NOTES                    VARCHAR(4000),
            EVALUATED_BY             VARCHAR(255),
            EVALUATED_AT             TIMESTAMP_TZ NOT NULL,
            GLOBAL_EVALUATION        VARCHAR(20) NOT NULL,
            DISQUALIFICATION_REASONS VARIANT,
            WARNINGS                 VARIANT
        )
    """,
    _evaluation_table("SENSORY_EVALUATIONS"),
    _evaluation_table("FINAL_EVALUATIONS"),
    """
        CREATE TABLE IF NOT EXISTS TOP_RESULTS (
            SAMPLE_ID               VARCHAR(36) NOT NULL REFERENCES SAMPLES(ID),
            CONTEST_ID              VARCHAR(36) NOT NULL REFERENCES CONTESTS(ID),
            STAGE                   VARCHAR(20) NOT NULL,
            AVERAGE_SCORE           NUMBER(4,2) NOT NULL,
            EVALUATIONS_COUNT       INTEGER NOT NULL,
            LATEST_EVALUATION_DATE  TIMESTAMP_TZ NOT NULL,
            RANK                    INTEGER NOT NULL,
            UPDATED_AT              TIMESTAMP_TZ NOT NULL,
            PRIMARY KEY (SAMPLE_ID, CONTEST_ID, STAGE),
            UNIQUE (CONTEST_ID, STAGE, RANK)
        )
        CLUSTER BY (CONTEST_ID, STAGE)
    """,
]


class SchemaManager(BaseRepository):
    """Create the scoring tables if they do not exist."""

    def create_all(self) -> int:
        with self.get_cursor(dict_cursor=False) as cursor:
            for statement in SCHEMA_DDL:
                cursor.execute(statement)
        logger.info("schema_created", tables=len(SCHEMA_DDL))
        return len(SCHEMA_DDL)
