import pytest
from sqlalchemy import select

from app.features.leads.models.lead_model import Lead, LeadSequence
from app.features.leads.services.sequence import UPLOAD_SEQUENCE, reserve_sequence_block


@pytest.mark.asyncio
async def test_first_reservation_seeds_from_stored_maximum(db_session):
    db_session.add_all(
        [
            Lead(lead_id="a", name="A", email="a@x.com", upload_sequence=7),
            Lead(lead_id="b", name="B", email="b@x.com", upload_sequence=12),
            Lead(lead_id="c", name="C", email="c@x.com", upload_sequence=None),
        ]
    )
    await db_session.commit()

    base = await reserve_sequence_block(db_session, 3)
    await db_session.commit()

    assert base == 12
    counter = await db_session.get(LeadSequence, UPLOAD_SEQUENCE)
    assert counter.value == 15


@pytest.mark.asyncio
async def test_blocks_are_consecutive_and_disjoint(db_session):
    first = await reserve_sequence_block(db_session, 2)
    second = await reserve_sequence_block(db_session, 5)
    third = await reserve_sequence_block(db_session, 1)
    await db_session.commit()

    assert (first, second, third) == (0, 2, 7)


@pytest.mark.asyncio
async def test_empty_store_starts_at_zero(db_session):
    assert await reserve_sequence_block(db_session, 1) == 0

    rows = (await db_session.execute(select(LeadSequence))).scalars().all()
    assert [(row.name, row.value) for row in rows] == [(UPLOAD_SEQUENCE, 1)]


@pytest.mark.asyncio
async def test_negative_count_rejected(db_session):
    with pytest.raises(ValueError):
        await reserve_sequence_block(db_session, -1)
