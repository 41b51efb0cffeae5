from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


class Todo(Base):
    __tablename__ = "todos"
    __table_args__ = (Index("idx_todos_user_date", "user_id", "task_date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    done: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0", nullable=False)
    task_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("todos.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    category: Mapped[str | None] = mapped_column(Text, nullable=True)
    repeat_days: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    repeat_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    template_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    parent: Mapped[Optional["Todo"]] = relationship("Todo", remote_side="Todo.id", back_populates="subtasks")
    subtasks: Mapped[list["Todo"]] = relationship("Todo", back_populates="parent", passive_deletes=True)


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (Index("idx_goals_user_month", "user_id", "target_month"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    done: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0", nullable=False)
    target_month: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("goals.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )


class Objective(Base):
    __tablename__ = "objectives"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    tasks: Mapped[list["ObjectiveTask"]] = relationship(back_populates="objective", passive_deletes=True)


class ObjectiveTask(Base):
    __tablename__ = "objective_tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    objective_id: Mapped[str] = mapped_column(
        ForeignKey("objectives.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    objective: Mapped[Objective] = relationship(back_populates="tasks")
    subtasks: Mapped[list["ObjectiveSubtask"]] = relationship(back_populates="task", passive_deletes=True)


class ObjectiveSubtask(Base):
    __tablename__ = "objective_subtasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    task_id: Mapped[str] = mapped_column(
        ForeignKey("objective_tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    phase_order: Mapped[int] = mapped_column(Integer, default=1, server_default="1", nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    task: Mapped[ObjectiveTask] = relationship(back_populates="subtasks")


class SubtaskCompletion(Base):
    __tablename__ = "objective_subtask_completions"
    __table_args__ = (UniqueConstraint("subtask_id", "completion_date", name="uq_subtask_completion_day"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    subtask_id: Mapped[str] = mapped_column(
        ForeignKey("objective_subtasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    completion_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
