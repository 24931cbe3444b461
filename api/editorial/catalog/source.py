"""Raw access to the upstream predictions/feed database.

The feed database is owned by the modelling pipeline; this service only
reads it. Each sport keeps its own tables and column names, which the
normalizers resolve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol, Sequence

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db import feed_session_factory

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class FeedSource(Protocol):
    """Read interface over the per-sport feed tables."""

    async def fetch_game_rows(
        self,
        sport_type: str,
        *,
        game_ids: Sequence[str] | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Row]: ...

    async def fetch_prediction_rows(self, sport_type: str, game_ids: Sequence[str]) -> list[Row]: ...

    async def fetch_team_branding(self, sport_type: str) -> list[Row]: ...

    async def fetch_market_rows(self, sport_type: str) -> list[Row]: ...


@dataclass(frozen=True)
class FeedTables:
    """Where one sport's rows live in the feed database."""

    game_table: str
    id_column: str
    date_column: str | None = None
    order_by: str | None = None
    prediction_table: str | None = None
    prediction_id_column: str = "game_id"
    # Column ordering model runs; the newest run wins.
    prediction_run_column: str | None = None
    branding_query: str | None = None


FEED_TABLES: dict[str, FeedTables] = {
    "nfl": FeedTables(
        game_table="nfl_betting_lines",
        id_column="training_key",
        date_column="game_date",
        order_by="as_of_ts DESC",
        prediction_table="nfl_predictions_epa",
        prediction_id_column="training_key",
        prediction_run_column="run_id",
    ),
    "cfb": FeedTables(
        # Kickoff columns drift between feed versions, so window filtering
        # happens after normalization.
        game_table="cfb_live_weekly_inputs",
        id_column="id",
        branding_query=(
            "SELECT api AS name, logo_light AS logo_url, "
            "primary_color, secondary_color FROM cfb_team_mapping"
        ),
    ),
    "nba": FeedTables(
        game_table="nba_input_values_view",
        id_column="game_id",
        date_column="game_date",
        prediction_table="nba_predictions",
        prediction_run_column="as_of_ts_utc",
    ),
    "ncaab": FeedTables(
        game_table="v_cbb_input_values",
        id_column="game_id",
        date_column="game_date_et",
        prediction_table="ncaab_predictions",
        prediction_run_column="as_of_ts_utc",
        branding_query=(
            "SELECT team_name AS name, espn_team_url AS logo_url, "
            "primary_color, secondary_color FROM ncaab_team_mapping"
        ),
    ),
}

MARKET_QUERY = (
    "SELECT game_key, market_type, current_away_odds, current_home_odds "
    "FROM polymarket_markets WHERE league = :league"
)


class SqlFeedSource:
    """``FeedSource`` backed by the feed database.

    Table and column names come from ``FEED_TABLES`` only; caller values
    are always bound parameters.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory or feed_session_factory()

    async def _query(self, sql: str, params: dict[str, Any], expanding: Sequence[str] = ()) -> list[Row]:
        statement = text(sql)
        if expanding:
            statement = statement.bindparams(*(bindparam(name, expanding=True) for name in expanding))
        async with self._sessions()() as session:
            result = await session.execute(statement, params)
            return [dict(row) for row in result.mappings().all()]

    async def fetch_game_rows(
        self,
        sport_type: str,
        *,
        game_ids: Sequence[str] | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Row]:
        tables = FEED_TABLES[sport_type]
        sql = f"SELECT * FROM {tables.game_table}"
        params: dict[str, Any] = {}
        expanding: tuple[str, ...] = ()

        if game_ids is not None:
            if not game_ids:
                return []
            sql += f" WHERE CAST({tables.id_column} AS TEXT) IN :game_ids"
            params["game_ids"] = [str(game_id) for game_id in game_ids]
            expanding = ("game_ids",)
        elif tables.date_column and start_date and end_date:
            sql += f" WHERE {tables.date_column} BETWEEN :start_date AND :end_date"
            params.update(start_date=start_date, end_date=end_date)

        if tables.order_by:
            sql += f" ORDER BY {tables.order_by}"

        rows = await self._query(sql, params, expanding)
        logger.debug(
            "feed_game_rows_fetched",
            extra={"sport_type": sport_type, "rows": len(rows), "by_ids": game_ids is not None},
        )
        return rows

    async def fetch_prediction_rows(self, sport_type: str, game_ids: Sequence[str]) -> list[Row]:
        tables = FEED_TABLES[sport_type]
        if not tables.prediction_table or not game_ids:
            return []
        run_col = tables.prediction_run_column
        sql = (
            f"SELECT * FROM {tables.prediction_table} "
            f"WHERE CAST({tables.prediction_id_column} AS TEXT) IN :game_ids"
        )
        if run_col == "run_id":
            sql += f" AND run_id = (SELECT MAX(run_id) FROM {tables.prediction_table})"
        elif run_col:
            sql += f" ORDER BY {run_col} DESC"
        return await self._query(
            sql, {"game_ids": [str(game_id) for game_id in game_ids]}, ("game_ids",)
        )

    async def fetch_team_branding(self, sport_type: str) -> list[Row]:
        query = FEED_TABLES[sport_type].branding_query
        if not query:
            return []
        return await self._query(query, {})

    async def fetch_market_rows(self, sport_type: str) -> list[Row]:
        return await self._query(MARKET_QUERY, {"league": sport_type})
