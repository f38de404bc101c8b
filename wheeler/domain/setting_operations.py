"""Domain operations for Setting model - Named configuration values."""

from typing import List, Optional

from sqlmodel import Session, select

from wheeler.core.exceptions import ValidationError
from wheeler.models import Setting
from .guards import finish, not_found, reject_duplicate, save

ENTITY = "setting"


def normalize_name(name: str) -> str:
    """Setting names are stored stripped and upper-cased."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Setting name must not be empty", entity=ENTITY, field="name")
    return name.strip().upper()


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    return value


class SettingOperations:
    """Core CRUD operations for Setting model."""

    @staticmethod
    def get_by_name(session: Session, name: str) -> Optional[Setting]:
        return session.get(Setting, normalize_name(name))

    @staticmethod
    def get_all(session: Session) -> List[Setting]:
        return list(session.exec(select(Setting).order_by(Setting.name)).all())

    @staticmethod
    def create(
        session: Session,
        name: str,
        value: Optional[str] = None,
        description: Optional[str] = None,
        commit: bool = True,
    ) -> Setting:
        """Create a setting. Empty value or description is stored as NULL.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If the name already exists
        """
        key = normalize_name(name)
        reject_duplicate(session, Setting, key, ENTITY, "name")
        row = Setting(
            name=key,
            value=_blank_to_none(value),
            description=_blank_to_none(description),
        )
        return save(session, row, ENTITY, commit=commit)

    @staticmethod
    def update(
        session: Session,
        name: str,
        value: Optional[str] = None,
        description: Optional[str] = None,
        commit: bool = True,
    ) -> Setting:
        """Replace value and description of an existing setting.

        Raises:
            NotFoundError: If the setting does not exist
        """
        row = SettingOperations.get_by_name(session, name)
        if row is None:
            raise not_found(ENTITY, normalize_name(name), "name")

        row.value = _blank_to_none(value)
        row.description = _blank_to_none(description)
        session.add(row)
        finish(session, ENTITY, "update", commit)
        return row

    @staticmethod
    def upsert(
        session: Session,
        name: str,
        value: Optional[str] = None,
        description: Optional[str] = None,
        commit: bool = True,
    ) -> Setting:
        """Update the setting if it exists, otherwise create it."""
        if SettingOperations.get_by_name(session, name) is None:
            return SettingOperations.create(session, name, value, description, commit=commit)
        return SettingOperations.update(session, name, value, description, commit=commit)

    @staticmethod
    def delete(session: Session, name: str, commit: bool = True) -> None:
        """Delete a setting.

        Raises:
            NotFoundError: If the setting does not exist
        """
        row = SettingOperations.get_by_name(session, name)
        if row is None:
            raise not_found(ENTITY, normalize_name(name), "name")
        session.delete(row)
        finish(session, ENTITY, "delete", commit)

    @staticmethod
    def get_value(session: Session, name: str) -> Optional[str]:
        """Value of a setting, None when absent or unset."""
        row = SettingOperations.get_by_name(session, name)
        return row.value if row is not None else None

    @staticmethod
    def get_value_with_default(session: Session, name: str, default: str) -> str:
        value = SettingOperations.get_value(session, name)
        return value if value is not None else default

    @staticmethod
    def set_value(session: Session, name: str, value: Optional[str], commit: bool = True) -> Setting:
        """Set a value, keeping any existing description."""
        row = SettingOperations.get_by_name(session, name)
        description = row.description if row is not None else None
        return SettingOperations.upsert(session, name, value, description, commit=commit)
