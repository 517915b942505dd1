"""
Table definitions for cricket match data.

Eight tables, one per exported CSV file. None of them declares a key:
duplicates and NULLs are accepted freely, the files are loaded as-is.
"""

from sqlalchemy import Column, Date, Integer, MetaData, Numeric, SmallInteger, String, Table

from bulkload.schemas.types import tinyint_column

metadata = MetaData()

players = Table(
    "players",
    metadata,
    Column("player_id", String(100)),
    Column("match_id", SmallInteger),
    Column("player_name", String(100)),
    Column("team", String(100)),
)

match_details = Table(
    "match_details",
    metadata,
    Column("match_id", SmallInteger),
    Column("event_name", String(255)),
    tinyint_column("match_number"),
    Column("match_type", String(50)),
    Column("venue", String(255)),
    Column("city", String(100)),
    Column("start_date", Date),
    Column("end_date", Date),
    Column("season", String(50)),
    Column("gender", String(20)),
    tinyint_column("balls_per_over"),
    Column("team_type", String(50)),
    Column("toss_winner", String(100)),
    Column("toss_decision", String(20)),
    Column("outcome_winner", String(100)),
    Column("outcome_by_runs", Numeric(7, 1)),
    # Exports write wicket margins as '7.0', so this is not an integer column
    Column("outcome_by_wickets", Numeric(3, 1)),
    Column("player_of_match", String(100)),
)

deliveries = Table(
    "deliveries",
    metadata,
    Column("delivery_id", Integer),
    Column("match_id", SmallInteger),
    tinyint_column("innings_number"),
    tinyint_column("over_number"),
    tinyint_column("ball_number"),
    Column("batting_team", String(100)),
    Column("batter", String(100)),
    Column("non_striker", String(100)),
    Column("bowler", String(100)),
    tinyint_column("runs_batter"),
    tinyint_column("runs_extras"),
    tinyint_column("runs_total"),
)

innings = Table(
    "innings",
    metadata,
    Column("match_id", SmallInteger),
    tinyint_column("innings_number"),
    Column("batting_team", String(100)),
    Column("declared", String(100)),
    Column("forfeited", String(100)),
    Column("series_name", String(255)),
)

wickets = Table(
    "wickets",
    metadata,
    Column("delivery_id", Integer),
    Column("match_id", SmallInteger),
    tinyint_column("innings_number"),
    Column("player_out", String(100)),
    Column("kind", String(100)),
)

fielders = Table(
    "fielders",
    metadata,
    Column("delivery_id", Integer),
    Column("match_id", Integer),
    Column("fielder_name", String(100)),
)

teams = Table(
    "teams",
    metadata,
    Column("match_id", SmallInteger),
    # Unbounded text (VARCHAR(MAX) on SQL Server)
    Column("teamA_players", String()),
    Column("teamB_players", String()),
)

officials = Table(
    "officials",
    metadata,
    Column("match_id", SmallInteger),
    Column("umpires", String(255)),
    Column("referee", String(100)),
    Column("tv_umpire", String(100)),
    Column("reserve_umpire", String(100)),
)

# Load order and source file names of the cricket export
DATASETS: list[tuple[str, str]] = [
    ("players", "players.csv"),
    ("match_details", "matches.csv"),
    ("deliveries", "deliveries.csv"),
    ("innings", "innings.csv"),
    ("wickets", "wickets.csv"),
    ("fielders", "fielders.csv"),
    ("teams", "teams.csv"),
    ("officials", "officials.csv"),
]

DELIMITER = "|"
