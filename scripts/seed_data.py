"""
Sample data seeding script for softdal.

Generates deterministic pseudo-random polls with their poll items and writes
them through the data-access layer: one transaction per poll, the items
inserted with a single batch INSERT. Expects the schema from db/init.sql.
"""

from __future__ import annotations

import random
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import typer

from softdal import Transaction, create_data_access, get_settings
from softdal.utils.logging import configure_logging

app = typer.Typer(help="Seed sample polls and poll items through softdal.")

POLL_TYPES = ["TOP_50", "TOP_10", "BEST_OF_MONTH", "LISTENER_CHOICE", "SPECIAL"]
ARTISTS = ["Aurora", "Bastille", "Caribou", "Daughter", "Elbow", "Foals", "Glass Animals", "Haim"]


def generate_poll(rng: random.Random, index: int, now: datetime) -> Dict[str, Any]:
    poll_type = rng.choice(POLL_TYPES)
    start = now - timedelta(days=rng.randint(0, 60))
    return {
        "title": f"Poll #{index + 1}: {poll_type.replace('_', ' ').title()}",
        "description": None if rng.random() < 0.3 else f"Listener vote number {index + 1}",
        "type": poll_type,
        "start_date": start,
        "end_date": start + timedelta(days=rng.randint(7, 30)),
        "is_active": rng.random() < 0.8,
    }


def generate_items(rng: random.Random, poll_id: Any, count: int) -> List[Dict[str, Any]]:
    names = rng.sample(ARTISTS, k=min(count, len(ARTISTS)))
    while len(names) < count:
        names.append(f"{rng.choice(ARTISTS)} ({len(names) + 1})")
    return [
        {
            "poll_id": poll_id,
            "name": name,
            "sort_order": position,
            "vote_count": rng.randint(0, 5_000),
        }
        for position, name in enumerate(names)
    ]


@app.command()
def main(
    polls: int = typer.Option(10, "--polls", "-n", help="Number of polls to create."),
    items: int = typer.Option(5, "--items", "-i", help="Poll items per poll."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
) -> None:
    """
    Insert `polls` polls with `items` items each.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    dal = create_data_access(settings)

    rng = random.Random(seed)
    now = datetime.now(timezone.utc)
    start = time.perf_counter()
    total_items = 0

    for index in range(polls):
        poll = generate_poll(rng, index, now)

        def write(tx: Transaction) -> int:
            created = tx.insert("polls", poll)
            if items <= 0:
                return 0
            result = tx.batch_insert("poll_items", generate_items(rng, created.insert_id, items))
            return result.affected_rows

        total_items += dal.execute_transaction(write)

    duration = time.perf_counter() - start
    typer.echo(f"Seeded {polls} polls and {total_items} poll items in {duration:.2f}s (seed={seed})")


if __name__ == "__main__":
    app()
