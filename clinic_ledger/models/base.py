from sqlalchemy import Column, DateTime, func


def enum_values(enum_cls) -> list[str]:
    # Persist the lowercase values ("payment"), not the member names.
    return [member.value for member in enum_cls]


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
