"""Scenario persistence: named input snapshots keyed by an opaque id."""

from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Union

from backend.config import Settings
from backend.log import get_logger
from backend.schemas.fire import Scenario, ScenarioCreate, ScenarioUpdate

logger = get_logger(__name__)


class ScenarioNotFoundError(LookupError):
    """Raised when a scenario id is not in the store."""


def _new_id() -> str:
    return uuid.uuid4().hex


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScenarioStore:
    """Interface shared by the in-memory and sqlite stores."""

    def list(self) -> List[Scenario]:
        raise NotImplementedError

    def get(self, scenario_id: str) -> Scenario:
        raise NotImplementedError

    def create(self, scenario_in: ScenarioCreate) -> Scenario:
        raise NotImplementedError

    def update(self, scenario_id: str, update_in: ScenarioUpdate) -> Scenario:
        raise NotImplementedError

    def delete(self, scenario_id: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryScenarioStore(ScenarioStore):
    def __init__(self) -> None:
        # dicts keep insertion order, used as the tie-break for equal timestamps
        self._scenarios: Dict[str, Scenario] = {}

    def list(self) -> List[Scenario]:
        newest_first = list(reversed(self._scenarios.values()))
        return sorted(newest_first, key=lambda s: s.createdAt, reverse=True)

    def get(self, scenario_id: str) -> Scenario:
        scenario = self._scenarios.get(scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")
        return scenario

    def create(self, scenario_in: ScenarioCreate) -> Scenario:
        scenario = Scenario(**scenario_in.model_dump(), id=_new_id(), createdAt=_timestamp())
        self._scenarios[scenario.id] = scenario
        return scenario

    def update(self, scenario_id: str, update_in: ScenarioUpdate) -> Scenario:
        existing = self.get(scenario_id)
        merged = update_in.apply_to(ScenarioCreate(**existing.model_dump(exclude={"id", "createdAt"})))
        updated = Scenario(**merged.model_dump(), id=existing.id, createdAt=existing.createdAt)
        self._scenarios[scenario_id] = updated
        return updated

    def delete(self, scenario_id: str) -> None:
        if self._scenarios.pop(scenario_id, None) is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")

    def clear(self) -> None:
        self._scenarios.clear()


class SqliteScenarioStore(ScenarioStore):
    """One row per scenario; the inputs are kept as a JSON payload."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                create table if not exists scenarios (
                    id text primary key,
                    payload text not null,
                    created_at text not null
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Scenario:
        return Scenario(**json.loads(row["payload"]), id=row["id"], createdAt=row["created_at"])

    def list(self) -> List[Scenario]:
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                select id, payload, created_at
                from scenarios
                order by created_at desc, rowid desc
                """
            ).fetchall()
            return [self._from_row(row) for row in rows]
        finally:
            conn.close()

    def get(self, scenario_id: str) -> Scenario:
        conn = self._connect()
        try:
            row = conn.execute(
                "select id, payload, created_at from scenarios where id = ?",
                (scenario_id,),
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")
        return self._from_row(row)

    def create(self, scenario_in: ScenarioCreate) -> Scenario:
        scenario = Scenario(**scenario_in.model_dump(), id=_new_id(), createdAt=_timestamp())
        conn = self._connect()
        try:
            conn.execute(
                "insert into scenarios (id, payload, created_at) values (?, ?, ?)",
                (scenario.id, json.dumps(scenario_in.model_dump()), scenario.createdAt),
            )
            conn.commit()
        finally:
            conn.close()
        return scenario

    def update(self, scenario_id: str, update_in: ScenarioUpdate) -> Scenario:
        existing = self.get(scenario_id)
        merged = update_in.apply_to(ScenarioCreate(**existing.model_dump(exclude={"id", "createdAt"})))
        conn = self._connect()
        try:
            conn.execute(
                "update scenarios set payload = ? where id = ?",
                (json.dumps(merged.model_dump()), scenario_id),
            )
            conn.commit()
        finally:
            conn.close()
        return Scenario(**merged.model_dump(), id=existing.id, createdAt=existing.createdAt)

    def delete(self, scenario_id: str) -> None:
        conn = self._connect()
        try:
            deleted = conn.execute("delete from scenarios where id = ?", (scenario_id,)).rowcount
            conn.commit()
        finally:
            conn.close()
        if deleted == 0:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")

    def clear(self) -> None:
        conn = self._connect()
        try:
            conn.execute("delete from scenarios")
            conn.commit()
        finally:
            conn.close()


def create_store(settings: Settings) -> ScenarioStore:
    if settings.store == "sqlite":
        logger.info("Using sqlite scenario store at %s", settings.db_path)
        return SqliteScenarioStore(settings.db_path)
    if settings.store != "memory":
        logger.warning("Unknown FIRE_STORE %r, falling back to memory", settings.store)
    return MemoryScenarioStore()


__all__ = [
    "ScenarioNotFoundError",
    "ScenarioStore",
    "MemoryScenarioStore",
    "SqliteScenarioStore",
    "create_store",
]
