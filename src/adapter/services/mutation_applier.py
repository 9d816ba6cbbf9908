from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.services.mutation_applier import MutationApplier, Transition


def _guard(column, expected: Any):
    if isinstance(expected, (list, tuple, set, frozenset)):
        return column.in_(list(expected))
    if expected is None:
        return column.is_(None)
    return column == expected


class SqlAlchemyMutationApplier(MutationApplier):
    """Conditional UPDATE / guarded INSERT on the current session"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def apply(self, transition: Transition) -> int:
        entity = transition.entity
        conditions = [getattr(entity, name) == value for name, value in transition.key.items()]
        conditions += [
            _guard(getattr(entity, name), expected)
            for name, expected in transition.when.items()
        ]
        stmt = (
            update(entity)
            .where(*conditions)
            .values(**transition.values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def insert_once(self, row: SQLModel) -> bool:
        try:
            async with self.session.begin_nested():
                self.session.add(row)
                await self.session.flush()
        except IntegrityError:
            return False
        await self.session.refresh(row)
        return True
