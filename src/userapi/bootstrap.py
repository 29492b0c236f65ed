from dataclasses import dataclass

from sqlalchemy.orm import sessionmaker

from userapi.adapters import database
from userapi.adapters.profile_validation import AbstractProfileValidator, HttpProfileValidator
from userapi.config import ProfileValidationCfg
from userapi.service_layer import unit_of_work


@dataclass
class Dependencies:
    """Collaborators the entrypoints need, built once per app."""

    session_factory: sessionmaker
    profile_validator: AbstractProfileValidator

    def uow(self) -> unit_of_work.AbstractUnitOfWork:
        return unit_of_work.SqlAlchemyUnitOfWork(self.session_factory)


def bootstrap(
    start_orm: bool = True,
    database_url: str = "",
    session_factory: sessionmaker | None = None,
    profile_validator: AbstractProfileValidator | None = None,
    profile_cfg: ProfileValidationCfg | None = None,
) -> Dependencies:
    if start_orm:
        database.start_mappers()

    if session_factory is None:
        session_factory = database.create_session_factory(database_url, create_tables=True)

    if profile_validator is None:
        profile_validator = HttpProfileValidator(profile_cfg or ProfileValidationCfg.from_env())

    return Dependencies(session_factory=session_factory, profile_validator=profile_validator)
