"""
FoundingMemberCounter Entity

Global sequence behind founding-member ordinals.
"""

from sqlmodel import Field, SQLModel

GLOBAL_COUNTER_ID = 1


class FoundingMemberCounter(SQLModel, table=True):
    """
    Single-row counter holding the last issued founding-member ordinal.

    Business Rules:
    - Exactly one row (id=1), global across tenants
    - Only ever advanced by an atomic increment-and-compare
    - Never decremented
    """

    __tablename__ = "founding_member_counter"

    id: int = Field(default=GLOBAL_COUNTER_ID, primary_key=True)
    value: int = Field(default=0, nullable=False)
