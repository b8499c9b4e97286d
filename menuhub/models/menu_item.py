"""MenuItem model — one catalog row, tagged draft or live."""

from decimal import Decimal

from sqlalchemy import Boolean, Index, Numeric, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from menuhub.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from menuhub.models.enums import AssignmentType, MenuCategory


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class MenuItem(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "menu_items"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    ingredients: Mapped[str] = mapped_column(Text, nullable=False, default="")
    unit_size: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    abv: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[MenuCategory] = mapped_column(
        SQLAlchemyEnum(
            MenuCategory,
            name="menucategory",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_draft: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    assignment_type: Mapped[AssignmentType] = mapped_column(
        SQLAlchemyEnum(
            AssignmentType,
            name="assignmenttype",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=AssignmentType.ALL_USERS,
    )

    __table_args__ = (
        Index("ix_menu_items_is_draft", "is_draft"),
        Index("ix_menu_items_assignment_type", "assignment_type", "is_draft"),
    )
