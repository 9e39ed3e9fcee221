from typing import Any, Mapping, Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rentals.application.interfaces.rating_repo import RatingRepo
from rentals.domain.entities.rating_aggregator import RatingAggregator, SubjectKind
from rentals.domain.entities.rating_event import RatingEvent
from rentals.domain.errors import ItemNotFoundError, OptimisticLockError
from rentals.infrastructure.db.tables import items, rating_events, user_ratings
from rentals.infrastructure.db.timestamps import as_utc


def _row_to_event(row: Mapping[str, Any]) -> RatingEvent:
    return RatingEvent(
        id=row["id"],
        subject_id=row["subject_id"],
        subject_kind=SubjectKind(row["subject_kind"]),
        score=row["score"],
        related_request_id=row["related_request_id"],
        created_at=as_utc(row["created_at"]),
        author_id=row["author_id"],
        comment=row["comment"],
    )


class RatingRepoSQL(RatingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_aggregator(self, kind: SubjectKind, subject_id: str) -> RatingAggregator:
        if kind == SubjectKind.ITEM:
            stmt = select(items.c.rating_mean, items.c.rating_count, items.c.rating_version).where(
                items.c.id == subject_id
            )
            row = (await self._session.execute(stmt)).mappings().first()
            if not row:
                raise ItemNotFoundError(subject_id)
        else:
            stmt = select(user_ratings).where(user_ratings.c.user_id == subject_id)
            row = (await self._session.execute(stmt)).mappings().first()
            if not row:
                return RatingAggregator(subject_id=subject_id, subject_kind=SubjectKind.USER)
        return RatingAggregator(
            subject_id=subject_id,
            subject_kind=kind,
            count=row["rating_count"],
            mean=row["rating_mean"],
            lock_version=row["rating_version"],
        )

    async def save_aggregator(self, aggregator: RatingAggregator) -> None:
        expected = aggregator.lock_version
        values = {
            "rating_mean": aggregator.mean,
            "rating_count": aggregator.count,
            "rating_version": expected + 1,
        }

        if aggregator.subject_kind == SubjectKind.ITEM:
            table, key = items, items.c.id
        else:
            table, key = user_ratings, user_ratings.c.user_id

        if aggregator.subject_kind == SubjectKind.USER and expected == 0:
            try:
                await self._session.execute(
                    insert(user_ratings).values(user_id=aggregator.subject_id, **values)
                )
            except IntegrityError as exc:
                raise OptimisticLockError(
                    entity="user_rating",
                    entity_id=aggregator.subject_id,
                    expected_version=expected,
                    actual_version=None,
                ) from exc
            aggregator.lock_version += 1
            return

        stmt = (
            update(table)
            .where(key == aggregator.subject_id, table.c.rating_version == expected)
            .values(**values)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            actual = (
                await self._session.execute(select(table.c.rating_version).where(key == aggregator.subject_id))
            ).scalar()
            raise OptimisticLockError(
                entity=f"{aggregator.subject_kind.value.lower()}_rating",
                entity_id=aggregator.subject_id,
                expected_version=expected,
                actual_version=actual,
            )
        aggregator.lock_version += 1

    async def add_event(self, event: RatingEvent) -> None:
        stmt = insert(rating_events).values(
            id=event.id,
            subject_id=event.subject_id,
            subject_kind=event.subject_kind.value,
            score=event.score,
            related_request_id=event.related_request_id,
            author_id=event.author_id,
            comment=event.comment,
            created_at=event.created_at,
        )
        await self._session.execute(stmt)

    async def list_events(self, kind: SubjectKind, subject_id: str) -> Sequence[RatingEvent]:
        stmt = (
            select(rating_events)
            .where(
                rating_events.c.subject_kind == kind.value,
                rating_events.c.subject_id == subject_id,
            )
            .order_by(rating_events.c.created_at, rating_events.c.id)
        )
        result = await self._session.execute(stmt)
        return [_row_to_event(row) for row in result.mappings().all()]
