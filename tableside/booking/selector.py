"""Best-fit table candidate selection"""

from typing import Iterable, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tableside.models.seating import SeatingMap, SeatingTable


def select_candidate_tables(tables: Iterable[SeatingTable], party_size: int) -> List[SeatingTable]:
    """
    Filter tables to those in service that can seat the party, smallest first.

    The sort is stable, so tables of equal capacity keep their input order.
    """
    eligible = [
        table
        for table in tables
        if table.active_state.is_effective
        and table.seating_map.active_state.is_effective
        and table.capacity >= party_size
    ]
    return sorted(eligible, key=lambda table: table.capacity)


async def load_location_tables(db: AsyncSession, location_id: UUID) -> List[SeatingTable]:
    """All tables on the location's seating maps, ordered by label"""
    result = await db.execute(
        select(SeatingTable)
        .join(SeatingMap, SeatingTable.seating_map_id == SeatingMap.id)
        .where(SeatingMap.location_id == location_id)
        .options(selectinload(SeatingTable.seating_map))
        .order_by(SeatingTable.label, SeatingTable.id)
    )
    return list(result.scalars().all())
