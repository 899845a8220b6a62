from sqlalchemy import Boolean, ForeignKey, Integer, Text, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skill_registry.db.base import Base


class Parameter(Base):
    __tablename__ = "parameters"
    __table_args__ = (UniqueConstraint("skill_id", "name", name="uq_parameters_skill_id_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    skill_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("skills.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # free-form tag such as "string" or "integer"; never validated here
    param_type: Mapped[str] = mapped_column("type", Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", server_default="", nullable=False)
    required: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false(), nullable=False)

    skill = relationship("Skill", back_populates="parameters")
