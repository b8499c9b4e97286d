"""UserMenuAssignment model — specialized drinks assigned to individual customers."""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from menuhub.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class UserMenuAssignment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "user_menus"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    menu_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("user_id", "menu_item_id", name="uq_user_menus_user_item"),
        Index("ix_user_menus_user_id", "user_id"),
    )
